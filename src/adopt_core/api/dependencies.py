"""
FastAPI dependencies: settings, database session, current user and
request context.

Application-wide objects live on ``app.state`` so tests can build an app
around their own engine and settings.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.session import SessionManager
from ..exceptions import AuthenticationException
from ..models.user import User
from ..services.access import require_admin
from ..services.audit import RequestContext
from ..services.auth import decode_access_token
from ..services.payments import PaymentGateway
from ..utils.config import AppSettings

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_payment_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway


async def get_db_session(
    manager: SessionManager = Depends(get_session_manager),
) -> AsyncGenerator[AsyncSession, None]:
    """One session per request, rolled back if the handler raises."""
    async with manager.get_session() as session:
        yield session


def get_request_context(request: Request) -> RequestContext:
    forwarded = request.headers.get("x-forwarded-for")
    ip_address = forwarded.split(",")[0].strip() if forwarded else None
    if ip_address is None and request.client is not None:
        ip_address = request.client.host
    return RequestContext(ip_address=ip_address, user_agent=request.headers.get("user-agent"))


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
    settings: AppSettings = Depends(get_settings),
) -> Optional[User]:
    """
    Resolve the bearer token to a user, or None when no token is sent.

    Raises:
        AuthenticationException: If a token is sent but is invalid or its
            user no longer exists
    """
    if credentials is None:
        return None
    claims = decode_access_token(credentials.credentials, settings)
    user = await session.get(User, claims.user_id)
    if user is None:
        raise AuthenticationException("User no longer exists")
    return user


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise AuthenticationException("Authentication required")
    return user


async def get_current_admin(user: User = Depends(get_current_user)) -> User:
    return require_admin(user)
