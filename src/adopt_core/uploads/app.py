"""
Standalone ASGI app that accepts image uploads and serves them back.
"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, File, Header, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from ..api.errors import register_exception_handlers
from ..exceptions import ValidationException
from ..utils.config import AppSettings, LoggingConfigurator
from .storage import ImageStorage

logger = logging.getLogger(__name__)


def create_upload_app(
    settings: Optional[AppSettings] = None, storage: Optional[ImageStorage] = None
) -> FastAPI:
    """Build the upload service around a storage directory."""
    if settings is None:
        LoggingConfigurator.configure_from_environment()
        settings = AppSettings.from_environment()
    if storage is None:
        storage = ImageStorage(
            settings.upload_dir, settings.upload_public_url, settings.upload_max_bytes
        )

    app = FastAPI(title=f"{settings.app_name} uploads")
    app.state.storage = storage
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    register_exception_handlers(app)

    @app.post("/upload")
    async def upload(
        image: Optional[UploadFile] = File(None),
        idempotency_key: Optional[str] = Header(None),
    ):
        if image is None or not image.filename:
            raise ValidationException("No file uploaded", field="image")
        # one byte past the limit is enough to reject it
        data = await image.read(storage.max_bytes + 1)
        stored = await storage.save(image.filename, data, idempotency_key)
        return {"filename": stored.filename, "url": stored.url}

    @app.get("/api/files")
    async def list_files():
        return {"files": [asdict(f) for f in storage.list_files()]}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.mount("/images", StaticFiles(directory=str(storage.directory)), name="images")
    return app
