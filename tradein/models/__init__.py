"""
Models package — SQLAlchemy tables backing durable client storage.
"""

from tradein.models.base import Base
from tradein.models.storage_entry import StorageEntry

__all__ = ["Base", "StorageEntry"]
