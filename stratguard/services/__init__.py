"""Repair services: catalog access, shade rules, text sync, layer injection."""
from __future__ import annotations

from stratguard.services.catalog import (
    CatalogIndex,
    InMemoryShadeCatalog,
    ShadeCatalog,
    fetch_catalog_rows,
    split_product_line,
)
from stratguard.services.checklist_sync import apply_replacements, sync_checklist
from stratguard.services.incisal_effects import inject_incisal_effects
from stratguard.services.layer_count import validate_minimum_layer_count
from stratguard.services.shade_resolver import ShadeCorrection, ShadeResolver, ShadeRule
from stratguard.services.shade_validation import (
    ProtocolRepair,
    repair_protocol,
    validate_and_fix_protocol_layers,
)

__all__ = [
    "CatalogIndex",
    "InMemoryShadeCatalog",
    "ProtocolRepair",
    "ShadeCatalog",
    "ShadeCorrection",
    "ShadeResolver",
    "ShadeRule",
    "apply_replacements",
    "fetch_catalog_rows",
    "inject_incisal_effects",
    "repair_protocol",
    "split_product_line",
    "sync_checklist",
    "validate_and_fix_protocol_layers",
    "validate_minimum_layer_count",
]
