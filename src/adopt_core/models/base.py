"""
Declarative base shared by every adoption model.

Rows get a client-side UUID4 primary key and UTC ``created_at`` and
``updated_at`` stamps. The UUID type is the portable ``Uuid`` so the
same models run on PostgreSQL and on the SQLite test database.
"""

import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

from ..utils.datetime_utils import get_current_utc


class Base(DeclarativeBase):
    type_annotation_map = {
        uuid.UUID: Uuid(as_uuid=True),
    }


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if isinstance(value, enum.Enum):
        return value.value
    return value


class BaseModel(Base):
    """
    Abstract base with id and timestamps.

    Concrete models must set ``__tablename__``.
    """

    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Python-side defaults keep the values populated after flush, so async
    # code never needs a lazy refresh to read them.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=get_current_utc,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=get_current_utc,
        server_default=func.now(),
        onupdate=get_current_utc,
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"

    def to_dict(self, exclude: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Column values as JSON-ready data.

        Datetimes become ISO strings; UUIDs and Decimals become strings so
        money keeps its precision; enums become their values.
        """
        skip = set(exclude or ())
        return {
            column.key: _jsonable(getattr(self, column.key))
            for column in self.__table__.columns
            if column.key not in skip
        }

    @classmethod
    def get_table_name(cls) -> str:
        return cls.__tablename__

    def update_fields(self, **kwargs: Any) -> Dict[str, Any]:
        """
        Assign several attributes at once and report which ones changed.

        Nothing is flushed; the caller commits.

        Raises:
            AttributeError: If a name is not an attribute of the model
        """
        changed = {}
        for name, value in kwargs.items():
            if not hasattr(self, name):
                raise AttributeError(f"'{self.__class__.__name__}' has no attribute '{name}'")
            if getattr(self, name) != value:
                setattr(self, name, value)
                changed[name] = value
        return changed
