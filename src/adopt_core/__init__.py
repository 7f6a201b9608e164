"""
Adopt Core Package

Backend for a small-pet adoption marketplace: rescues list capybaras, guinea
pigs, rock cavies and chinchillas, users browse and apply to adopt, and rescues
can pay (or redeem a coupon) to promote a listing.

The package includes:

- SQLAlchemy models for users, rescues, pets, applications, coupons,
  transactions, rescue requests and the audit log
- Pydantic schemas for request/response validation and serialization
- A service layer holding the business rules
- A FastAPI application, a standalone image upload service and an httpx client
- The recommendation questionnaire and its pure scoring function
- Alembic migrations

Quick Start:
    >>> from adopt_core.api import create_app
    >>> app = create_app()

    >>> from adopt_core.recommendation import recommend
    >>> recommend(pets, {"space": "Small apartment"})

Requirements:
    - Python 3.11+
    - PostgreSQL 13+ (SQLite via aiosqlite for development and tests)
    - SQLAlchemy 2.0+
    - Pydantic 2.5+
"""

__version__ = "0.1.0"
__author__ = "Adopt Core Team"
__email__ = "dev@adoptcore.example"
__license__ = "MIT"
__copyright__ = "Copyright 2025 Adopt Core Team"

# Import implemented modules
from . import database
from . import exceptions
from . import models
from . import schemas
from . import utils

# Convenience imports for common usage patterns
from .database import SessionManager, create_engine
from .exceptions import AdoptCoreException, DatabaseException, ValidationException
from .models import Application, Pet, Rescue, User

__all__ = [
    # Version and metadata
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    "__copyright__",
    # Core modules
    "database",
    "exceptions",
    "models",
    "schemas",
    "utils",
    # Convenience imports
    "SessionManager",
    "create_engine",
    "AdoptCoreException",
    "ValidationException",
    "DatabaseException",
    "User",
    "Rescue",
    "Pet",
    "Application",
]
