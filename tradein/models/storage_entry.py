"""
Trade-In Client — Durable Storage Entry Model

A flat key/value table standing in for browser-style client storage.
The cart lives under two fixed keys: the serialized cart and its schema
version marker (see cart/storage.py).
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import TIMESTAMP, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from tradein.models.base import Base


class StorageEntry(Base):
    """One namespaced key and its string value."""

    __tablename__ = "client_storage"

    key: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
        comment="Namespaced storage key (e.g., 'tradeInCart')",
    )
    value: Mapped[str] = mapped_column(
        Text, nullable=False, comment="Serialized value (JSON or plain string)"
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        comment="Last write timestamp",
    )

    def __repr__(self) -> str:
        return f"<StorageEntry key={self.key!r} size={len(self.value or '')}>"
