"""
Declarative base for the tracking ledger.

Dependencies: sqlalchemy
System role: Foundation for the ledger ORM models
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Metadata registry for the ledger tables; create_all builds from it."""


class TimestampMixin:
    """
    created_at / updated_at columns in UTC.

    updated_at moves on every ORM update, including status transitions,
    which is what the ledger reports as its last update.
    """

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
