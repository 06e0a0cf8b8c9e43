"""SQLAlchemy base class and mixins for database models.

Example:
    >>> from hockey_stats.data.schema import Base, TimestampMixin
    >>> class MyModel(TimestampMixin, Base):
    ...     __tablename__ = "my_table"
    ...     __natural_key__ = ("id",)
    ...     id: Mapped[int] = mapped_column(primary_key=True)
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar

from sqlalchemy import event, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models.

    Attributes:
        __natural_key__: Columns that identify a row for upserts. Every
            concrete model declares one and backs it with a primary key or
            unique constraint.
    """

    __natural_key__: ClassVar[tuple[str, ...]] = ("id",)

    def to_dict(self) -> dict[str, Any]:
        """Return the row's column values keyed by column name."""
        return {c.name: getattr(self, c.key) for c in self.__table__.columns}

    def natural_key(self) -> tuple[Any, ...]:
        """Return this row's natural key values."""
        return tuple(getattr(self, name) for name in self.__natural_key__)


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamp columns.

    Attributes:
        created_at: Timestamp when record was created.
        updated_at: Timestamp when record was last written by an upsert.
    """

    created_at: Mapped[datetime] = mapped_column(
        default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


def _set_updated_at(
    mapper: Any,
    connection: Any,
    target: Any,
) -> None:
    """Event listener to update updated_at on ORM modification."""
    if hasattr(target, "updated_at"):
        target.updated_at = datetime.now()


# Core ON CONFLICT upserts set updated_at themselves; this covers ORM flushes
event.listen(Base, "before_update", _set_updated_at, propagate=True)
