"""
HTTP clients for the adoption API and the image upload service.
"""

from .client import AdoptionClient, ApiClientError, ImageUploadClient

__all__ = ["AdoptionClient", "ApiClientError", "ImageUploadClient"]
