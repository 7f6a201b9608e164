"""
Image upload service.
"""

from .app import create_upload_app
from .storage import ImageStorage, StoredFile, StoredImage, sanitize_filename

__all__ = ["create_upload_app", "ImageStorage", "StoredFile", "StoredImage", "sanitize_filename"]
