"""
Database module for Stratguard.

Provides async SQLAlchemy support for the resin shade catalog.
"""
from __future__ import annotations

from stratguard.db.database import (
    AsyncSessionLocal,
    Base,
    close_db,
    init_db,
)
from stratguard.db.models import ResinCatalogEntry

__all__ = [
    "AsyncSessionLocal",
    "Base",
    "close_db",
    "init_db",
    "ResinCatalogEntry",
]
