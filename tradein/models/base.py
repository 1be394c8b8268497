"""
Declarative base for the trade-in client's local database.

The client only keeps browser-style key/value storage, but tables go through
one shared metadata so `create_all` provisions everything on first use.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for the client's storage tables."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
