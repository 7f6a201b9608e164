"""
FastAPI application for the adoption platform.
"""

from .app import create_app

__all__ = ["create_app"]
