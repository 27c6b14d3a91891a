"""
Stratguard

Validation and repair of AI-generated resin stratification protocols.
"""
from __future__ import annotations

from stratguard.models import CaseContext, ProtocolLayer, ShadeCatalogRow, StratificationProtocol
from stratguard.services import (
    InMemoryShadeCatalog,
    ProtocolRepair,
    repair_protocol,
    validate_and_fix_protocol_layers,
    validate_minimum_layer_count,
)

__all__ = [
    "CaseContext",
    "InMemoryShadeCatalog",
    "ProtocolLayer",
    "ProtocolRepair",
    "ShadeCatalogRow",
    "StratificationProtocol",
    "repair_protocol",
    "validate_and_fix_protocol_layers",
    "validate_minimum_layer_count",
]
