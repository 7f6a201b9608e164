"""
Registration, login, self-service profile and password reset.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.user import User
from ...schemas.application import ApplicationResponse
from ...schemas.common import ADMIN_PAGE_SIZE
from ...schemas.user import (
    AuthResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    PasswordResetResponse,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)
from ...services.applications import ApplicationService
from ...services.audit import RequestContext
from ...services.users import RESET_REQUESTED, UserService
from ...utils.config import AppSettings
from ..dependencies import get_current_user, get_db_session, get_request_context, get_settings
from ..params import Pagination, page_params

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserRegister,
    session: AsyncSession = Depends(get_db_session),
    settings: AppSettings = Depends(get_settings),
    context: RequestContext = Depends(get_request_context),
):
    user, token = await UserService.register(session, data, settings, context)
    await session.commit()
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    data: UserLogin,
    session: AsyncSession = Depends(get_db_session),
    settings: AppSettings = Depends(get_settings),
    context: RequestContext = Depends(get_request_context),
):
    user, token = await UserService.login(session, data.email, data.password, settings, context)
    await session.commit()
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)):
    return user


@router.put("/me", response_model=UserResponse)
async def update_me(
    data: UserUpdate,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    settings: AppSettings = Depends(get_settings),
    context: RequestContext = Depends(get_request_context),
):
    user = await UserService.update_profile(session, user, data, settings, context)
    await session.commit()
    return user


@router.get("/me/applications")
async def my_applications(
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
    paging: Pagination = Depends(page_params(ADMIN_PAGE_SIZE)),
):
    page = await ApplicationService.list_for_user(session, user.id, paging.page, paging.limit)
    return page.to_response(ApplicationResponse.model_validate)


@router.post("/password-reset/request", response_model=PasswordResetResponse)
async def request_password_reset(
    data: PasswordResetRequest,
    session: AsyncSession = Depends(get_db_session),
    settings: AppSettings = Depends(get_settings),
    context: RequestContext = Depends(get_request_context),
):
    token = await UserService.request_password_reset(session, data.email, settings, context)
    await session.commit()
    return PasswordResetResponse(message=RESET_REQUESTED, reset_token=token)


@router.post("/password-reset/confirm", response_model=PasswordResetResponse)
async def confirm_password_reset(
    data: PasswordResetConfirm,
    session: AsyncSession = Depends(get_db_session),
    settings: AppSettings = Depends(get_settings),
    context: RequestContext = Depends(get_request_context),
):
    await UserService.reset_password(
        session, data.email, data.token, data.new_password, settings, context
    )
    await session.commit()
    return PasswordResetResponse(message="Password has been reset")
