"""
FastAPI application factory for the adoption API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..database.connection import close_engine, create_engine_from_config
from ..database.session import SessionManager
from ..services.payments import PaymentGateway, TestPaymentGateway
from ..utils.config import AppSettings, DatabaseConfig, LoggingConfigurator
from .errors import register_exception_handlers
from .routes import api_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[AppSettings] = None,
    session_manager: Optional[SessionManager] = None,
    payment_gateway: Optional[PaymentGateway] = None,
) -> FastAPI:
    """
    Build the API application.

    Without a session manager one is created on startup from
    ``DATABASE_URL`` and its engine is disposed on shutdown.
    """
    if settings is None:
        LoggingConfigurator.configure_from_environment()
        settings = AppSettings.from_environment()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owns_engine = app.state.session_manager is None
        if owns_engine:
            engine = create_engine_from_config(DatabaseConfig.from_environment())
            app.state.session_manager = SessionManager(engine)
        logger.info(f"{settings.app_name} started in {settings.environment} mode")
        try:
            yield
        finally:
            if owns_engine:
                await close_engine(app.state.session_manager.engine)

    app = FastAPI(title=settings.app_name, version=__version__, debug=settings.debug, lifespan=lifespan)
    app.state.settings = settings
    app.state.session_manager = session_manager
    app.state.payment_gateway = payment_gateway or TestPaymentGateway()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.api_prefix)
    return app
