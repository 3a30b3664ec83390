"""
SQLAlchemy ORM models.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class ConnectionRow(Base):
    """One encrypted connection record per monday user."""

    __tablename__ = "connections"

    user_id = Column(String(255), primary_key=True)
    payload = Column(Text, nullable=False)   # encrypted JSON of the Connection record
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
