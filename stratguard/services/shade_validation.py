"""
Protocol repair pipeline.

Entry point for everything that corrects a stratification protocol after the
recommendation model produced it and before a clinician sees it:

    repair_protocol(protocol, context, catalog)
      1. one batched catalog fetch for every product line in the protocol
      2. ShadeResolver over each layer, in ascending order
      3. checklist synchronisation for every substitution, in discovery order
      4. incisal-effects injection (once) and renumbering

The caller's protocol is never mutated: the pipeline works on a deep copy
and returns it in a ``ProtocolRepair``. A protocol without layers comes back
as-is. Catalog failures never surface; see ``services.catalog``.

The minimum-layer advisory (``services.layer_count``) is not part of this
pipeline; callers run it on the repaired layers.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from stratguard.config import Settings, settings as default_settings
from stratguard.core.teeth import wants_whitening
from stratguard.models.protocol import CaseContext, ProtocolLayer, StratificationProtocol
from stratguard.services.catalog import (
    CatalogIndex,
    ShadeCatalog,
    fetch_catalog_rows,
    split_product_line,
)
from stratguard.services.checklist_sync import apply_replacements
from stratguard.services.incisal_effects import inject_incisal_effects
from stratguard.services.shade_resolver import ShadeCorrection, ShadeResolver

logger = logging.getLogger(__name__)

_BLEACH_MENTION_RE = re.compile(r"\bBL\d?\b|bleach", re.IGNORECASE)


@dataclass
class ProtocolRepair:
    """Outcome of one pipeline run.

    ``protocol`` is the repaired copy (or the untouched input when it had no
    layers). ``alerts_added`` lists the alerts this run appended, in order.
    """

    protocol: Optional[StratificationProtocol]
    corrections: list[ShadeCorrection] = field(default_factory=list)
    alerts_added: list[str] = field(default_factory=list)
    injected_layer: Optional[ProtocolLayer] = None
    catalog_rows: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.corrections or self.alerts_added or self.injected_layer)

    @property
    def replacements(self) -> list[tuple[str, str]]:
        return [(c.original, c.replacement) for c in self.corrections]

    def to_dict(self) -> dict[str, object]:
        return {
            "protocol": self.protocol.model_dump(by_alias=True, exclude_none=True) if self.protocol else None,
            "corrections": [c.to_dict() for c in self.corrections],
            "alertsAdded": list(self.alerts_added),
            "injectedLayer": (
                self.injected_layer.model_dump(by_alias=True, exclude_none=True)
                if self.injected_layer else None
            ),
            "catalogRows": self.catalog_rows,
        }


def _mentions_bleach(text: str) -> bool:
    return bool(_BLEACH_MENTION_RE.search(text))


def _merge_alerts(
    existing: list[str],
    new_alerts: list[str],
    advisory: frozenset[str] = frozenset(),
    bleach_sensitive: frozenset[str] = frozenset(),
) -> list[str]:
    """Return the alerts from *new_alerts* that are worth appending.

    Correction alerts are always kept: each one reports a substitution made
    in this run. Alerts listed in *advisory* flag something without changing
    it, so they are dropped when already present. Alerts in
    *bleach_sensitive* are also dropped when an existing alert already talks
    about BL/bleach shades (the model often writes its own).
    """
    accepted: list[str] = []
    seen = set(existing)
    existing_bleach = any(_mentions_bleach(a) for a in existing)
    for alert in new_alerts:
        if alert in advisory or alert in bleach_sensitive:
            if alert in seen:
                continue
            if alert in bleach_sensitive and existing_bleach:
                continue
            seen.add(alert)
        accepted.append(alert)
    return accepted


def _product_lines(layers: list[ProtocolLayer]) -> list[str]:
    lines: list[str] = []
    for layer in layers:
        line = split_product_line(layer.resin_brand)
        if line and line not in lines:
            lines.append(line)
    return lines


async def repair_protocol(
    protocol: Optional[StratificationProtocol],
    context: Optional[CaseContext] = None,
    catalog: Optional[ShadeCatalog] = None,
    *,
    config: Optional[Settings] = None,
) -> ProtocolRepair:
    """Validate and repair *protocol* against the shade rules and the catalog."""
    if protocol is None or not protocol.layers:
        return ProtocolRepair(protocol=protocol)

    cfg = config or default_settings
    ctx = context or CaseContext()
    fixed = protocol.model_copy(deep=True)
    layers: list[ProtocolLayer] = fixed.layers or []

    lines = _product_lines(layers)
    rows = await fetch_catalog_rows(catalog, lines)
    resolver = ShadeResolver(CatalogIndex(rows), cfg)

    corrections: list[ShadeCorrection] = []
    validation_alerts: list[str] = []
    advisory: set[str] = set()
    for layer in layers:
        resolution = resolver.resolve(layer)
        corrections.extend(resolution.corrections)
        validation_alerts.extend(resolution.alerts)
        advisory.update(resolution.advisories)

    bleach_sensitive: set[str] = set()
    if wants_whitening(ctx.aesthetic_goals, cfg):
        for line in lines:
            if resolver.line_offers_bleach(line) is False:
                alert = (
                    f"A linha {line} não possui cores BL (Bleach). Para atingir nível de "
                    f"clareamento Hollywood, considere linhas como "
                    f"{', '.join(cfg.bleach_line_suggestions)}, que oferecem cores BL."
                )
                logger.warning("BL shades not available in %s, patient wants whitening", line)
                validation_alerts.append(alert)
                bleach_sensitive.add(alert)
                break

    if corrections:
        fixed.checklist = apply_replacements(
            fixed.checklist, [(c.original, c.replacement) for c in corrections]
        )

    added = _merge_alerts(
        fixed.alerts, validation_alerts, frozenset(advisory), frozenset(bleach_sensitive)
    )

    injected, injection_alert = inject_incisal_effects(layers, ctx, cfg)
    if injection_alert:
        added.append(injection_alert)

    fixed.alerts = fixed.alerts + added

    if corrections or added:
        logger.info(
            "Protocol repaired: %d shade correction(s), %d alert(s), incisal effects %s",
            len(corrections), len(added), "injected" if injected else "not injected",
        )

    return ProtocolRepair(
        protocol=fixed,
        corrections=corrections,
        alerts_added=added,
        injected_layer=injected,
        catalog_rows=len(rows),
    )


async def validate_and_fix_protocol_layers(
    protocol: Optional[StratificationProtocol],
    context: Optional[CaseContext] = None,
    catalog: Optional[ShadeCatalog] = None,
    *,
    config: Optional[Settings] = None,
) -> Optional[StratificationProtocol]:
    """Return the repaired protocol (see ``repair_protocol``)."""
    repair = await repair_protocol(protocol, context, catalog, config=config)
    return repair.protocol
