"""Pydantic models shared by the repair engine, catalog adapters and CLI."""
from __future__ import annotations

from stratguard.models.base import CamelModel
from stratguard.models.catalog import ShadeCatalogRow
from stratguard.models.protocol import (
    CaseContext,
    ProtocolAlternative,
    ProtocolLayer,
    StratificationProtocol,
)

__all__ = [
    "CamelModel",
    "CaseContext",
    "ProtocolAlternative",
    "ProtocolLayer",
    "ShadeCatalogRow",
    "StratificationProtocol",
]
