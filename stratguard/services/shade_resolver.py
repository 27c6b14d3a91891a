"""
Per-layer shade rules.

``ShadeResolver.resolve`` applies, in this order, to one layer:

1. Brand alias      — product-line specific token normalisation (Z350 ``WT`` -> ``CT``).
2. Body prohibition — enamel/bleach shades (``BL1``..``BL4``) never stay on a
                      body/dentin layer. Replacement comes from the catalog
                      (``body`` rows first, then ``universal``); with no eligible
                      row the hard fallback ``WB`` is used unconditionally.
3. Bleach-free line — lines with no BL shades at all (Z350) lose BL tokens on
                      every role, replaced from the line's own catalog rows.
4. Proximal ridges  — advisory alert when a ridge layer uses a line other than
                      the recommended ones. Never mutates.
5. Availability     — a shade the catalog does not list for the line is swapped
                      for the closest listed shade of the layer's type.
6. Enamel upgrade   — an esmalte/enamel layer whose shade has no enamel marker is
                      moved to the line's preferred enamel shade (WE > CE > JE > CT > Trans).

Rules 3, 5 and 6 need catalog rows for the line and are skipped without them.
The fallback shade produced by rule 2 and the inserted incisal-effects layer
are never checked by rule 5. Catalog shades that rules 1 or 3 would rewrite are
never chosen as substitutes.

Every rule is a fixed point of itself: its output never triggers it again,
which is what makes a second pass over a repaired protocol a no-op.
"""
from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from stratguard.config import Settings, settings as default_settings
from stratguard.core.roles import (
    LayerRole,
    classify_layer,
    is_enamel_surface,
    is_incisal_effects,
    is_opaque_layer,
    is_proximal_ridge,
)
from stratguard.models.catalog import ShadeCatalogRow
from stratguard.models.protocol import ProtocolLayer
from stratguard.services.catalog import CatalogIndex, line_matches, split_product_line

logger = logging.getLogger(__name__)

_BLEACH_SHADE_RE = re.compile(r"^BL\d?$", re.IGNORECASE)
_BLEACH_FAMILY_RE = re.compile(r"bl|bianco", re.IGNORECASE)
_OPAQUE_PREFIX_RE = re.compile(r"^O")
_DENTIN_ENAMEL_SUFFIX_RE = re.compile(r"[DE]$")


class ShadeRule(str, enum.Enum):
    """Which rule produced a shade correction."""

    BRAND_ALIAS = "brand_alias"
    BODY_PROHIBITED = "body_prohibited"
    BLEACH_FREE_LINE = "bleach_free_line"
    ENAMEL_OPTIMIZED = "enamel_optimized"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ShadeCorrection:
    """A single shade substitution applied to one layer."""

    layer_order: int
    layer_name: str
    original: str
    replacement: str
    rule: ShadeRule

    def to_dict(self) -> dict[str, object]:
        return {
            "layerOrder": self.layer_order,
            "layerName": self.layer_name,
            "original": self.original,
            "replacement": self.replacement,
            "rule": self.rule.value,
        }


@dataclass
class LayerResolution:
    """Corrections and alerts produced while resolving one layer.

    ``alerts`` is in discovery order. ``advisories`` repeats the alerts that
    flag a layer without changing it; those recur on every pass.
    """

    role: LayerRole = LayerRole.OTHER
    corrections: list[ShadeCorrection] = field(default_factory=list)
    alerts: list[str] = field(default_factory=list)
    advisories: list[str] = field(default_factory=list)


class ShadeResolver:
    """Applies the shade rules to layers using one protocol's catalog rows."""

    def __init__(self, catalog: CatalogIndex, config: Optional[Settings] = None) -> None:
        self._catalog = catalog
        self._cfg = config or default_settings
        self._prohibited = {s.upper() for s in self._cfg.prohibited_body_shades}

    # ------------------------------------------------------------------
    # Individual rules
    # ------------------------------------------------------------------

    def is_prohibited(self, role: LayerRole, shade: str) -> bool:
        """True when *shade* must not appear on a layer of *role*."""
        return role is LayerRole.BODY and shade.strip().upper() in self._prohibited

    def alias_for(self, resin_brand: str, shade: str) -> Optional[str]:
        """Canonical token for *shade* under the brand's alias table, if any."""
        for line_key, table in self._cfg.shade_aliases.items():
            if not line_matches(resin_brand, line_key):
                continue
            target = table.get(shade)
            if target and target != shade:
                return target
        return None

    def body_replacement(self, product_line: str) -> tuple[str, bool]:
        """Pick a body shade for *product_line*.

        Returns ``(shade, from_catalog)``. Catalog rows are taken in
        ``body_shade_types`` priority; prohibited shades are never picked.
        """
        rows = self._catalog.rows_for_line(product_line) if product_line else []
        for wanted in self._cfg.body_shade_types:
            for row in rows:
                if row.type.strip().lower() != wanted.lower():
                    continue
                if row.shade.strip().upper() in self._prohibited:
                    continue
                return row.shade, True
        return self._cfg.body_fallback_shade, False

    def bleach_free_preferences(self, resin_brand: str) -> Optional[dict[str, str]]:
        for line_key, prefs in self._cfg.bleach_free_lines.items():
            if line_matches(resin_brand, line_key):
                return prefs
        return None

    def bleach_free_replacement(
        self, layer_name: str, product_line: str, prefs: dict[str, str]
    ) -> Optional[str]:
        rows = [
            r for r in self._catalog.rows_for_line(product_line)
            if not r.shade.upper().startswith("BL")
        ]
        if not rows:
            return None
        if is_enamel_surface(layer_name, self._cfg):
            preferred = prefs.get("enamel")
            row = next((r for r in rows if r.shade == preferred), None)
            row = row or next((r for r in rows if r.type_matches("esmalte")), None)
        else:
            preferred = prefs.get("default")
            row = next((r for r in rows if r.shade == preferred), None) or rows[0]
        return row.shade if row else None

    def proximal_ridge_alert(self, layer: ProtocolLayer, product_line: str) -> Optional[str]:
        """Advisory text when a proximal ridge layer uses a non-recommended line."""
        if not is_proximal_ridge(layer.name, self._cfg):
            return None
        if any(line_matches(product_line, k) for k in self._cfg.proximal_ridge_lines):
            return None
        for line_key, shades in self._cfg.proximal_ridge_exceptions.items():
            if line_matches(product_line, line_key) and layer.shade in shades:
                return None
        logger.warning(
            "Proximal ridge enforcement: %s %s flagged, should use Harmonize/Empress",
            product_line, layer.shade,
        )
        return (
            f"Cristas Proximais: {product_line} ({layer.shade}) não é ideal. "
            "Recomendado: XLE (Harmonize) ou BL-L (Empress Direct)."
        )

    def is_enamel_grade(self, shade: str) -> bool:
        """True for shades carrying an enamel/translucent/effect marker (WE, CT, Trans ...).

        The catalogue type is not consulted, so ``A1E`` (listed as ``esmalte``)
        is still upgraded to the line's preferred enamel shade.
        """
        upper = shade.upper()
        return any(marker.upper() in upper for marker in self._cfg.enamel_markers)

    def is_stable_shade(self, product_line: str, shade: str) -> bool:
        """False for catalogued shades the alias or bleach-free rules would rewrite."""
        if self.alias_for(product_line, shade):
            return False
        return not (
            self.bleach_free_preferences(product_line) is not None
            and _BLEACH_SHADE_RE.match(shade)
        )

    def is_inserted_effects_layer(self, layer: ProtocolLayer) -> bool:
        """True for the optional incisal-effects layer this engine inserts.

        Its product comes from configuration, so the availability rule leaves it alone.
        """
        return layer.optional is True and layer.name == self._cfg.incisal_effects_name

    def preferred_enamel_shade(self, product_line: str) -> Optional[str]:
        enamel_rows = [
            r for r in self._catalog.rows_for_line(product_line)
            if r.type_matches("esmalte") and self.is_stable_shade(product_line, r.shade)
        ]
        if not enamel_rows:
            return None
        for pref in self._cfg.enamel_preference:
            for row in enamel_rows:
                if pref.upper() in row.shade.upper():
                    return row.shade
        return enamel_rows[0].shade

    def available_substitute(
        self, layer_name: str, role: LayerRole, product_line: str, shade: str
    ) -> Optional[str]:
        """Closest catalogued shade when *shade* is not listed for the line.

        Returns ``None`` when the line has no rows (nothing to judge against),
        when the shade is listed, or when no candidate of the right type exists.
        """
        rows = self._catalog.rows_for_line(product_line)
        if not rows or self._catalog.find(product_line, shade) is not None:
            return None

        if is_opaque_layer(layer_name, self._cfg):
            type_filter: tuple[str, ...] = ("opaco",)
        elif role is LayerRole.BODY:
            type_filter = ("body", "dentina", "universal")
        elif is_enamel_surface(layer_name, self._cfg):
            type_filter = ("esmalte",)
        else:
            type_filter = ()

        candidates: list[ShadeCatalogRow] = [
            r for r in rows
            if not type_filter or any(r.type_matches(t) for t in type_filter)
        ]
        if role is LayerRole.BODY:
            candidates = [r for r in candidates if r.shade.upper() not in self._prohibited]
        candidates = [r for r in candidates if self.is_stable_shade(product_line, r.shade)]
        if not candidates:
            logger.warning(
                "No valid shades found for %s, keeping original: %s", product_line, shade
            )
            return None

        base = _DENTIN_ENAMEL_SUFFIX_RE.sub("", _OPAQUE_PREFIX_RE.sub("", shade))
        closest = next((r for r in candidates if base and base in r.shade), None)
        return (closest or candidates[0]).shade

    def line_offers_bleach(self, product_line: str) -> Optional[bool]:
        """Whether the line lists any BL/Bianco shade; ``None`` with no rows to judge."""
        rows = self._catalog.rows_for_line(product_line)
        if not rows:
            return None
        return any(_BLEACH_FAMILY_RE.search(r.shade) for r in rows)

    # ------------------------------------------------------------------
    # Layer pass
    # ------------------------------------------------------------------

    def resolve(self, layer: ProtocolLayer) -> LayerResolution:
        """Apply every rule to *layer*, mutating its shade in place.

        The caller owns *layer* (the orchestrator works on a private copy).
        """
        cfg = self._cfg
        role = classify_layer(layer.name, cfg)
        result = LayerResolution(role=role)
        if not layer.shade:
            return result

        product_line = split_product_line(layer.resin_brand)

        alias = self.alias_for(layer.resin_brand, layer.shade)
        if alias:
            logger.info("Brand alias: %s -> %s for %s", layer.shade, alias, product_line)
            self._apply(layer, alias, ShadeRule.BRAND_ALIAS, result)

        body_fixed = False
        if self.is_prohibited(role, layer.shade):
            original = layer.shade
            replacement, from_catalog = self.body_replacement(product_line)
            alert = (
                f"Cor {original} é exclusiva de esmalte/clareamento e não pode ser usada "
                f"na camada de corpo/dentina \"{layer.name}\". Substituída por {replacement}."
            )
            if not from_catalog:
                alert += " (substituição padrão: nenhuma cor de corpo disponível no catálogo)"
            logger.warning(
                "Body shade enforcement: %s -> %s on %r (%s)",
                original, replacement, layer.name, "catalog" if from_catalog else "fallback",
            )
            self._apply(layer, replacement, ShadeRule.BODY_PROHIBITED, result, alert)
            body_fixed = True

        if not product_line:
            return result

        prefs = self.bleach_free_preferences(layer.resin_brand)
        if prefs is not None and _BLEACH_SHADE_RE.match(layer.shade):
            original = layer.shade
            replacement = self.bleach_free_replacement(layer.name, product_line, prefs)
            if replacement:
                logger.warning("Bleach-free line enforcement: %s -> %s", original, replacement)
                self._apply(
                    layer, replacement, ShadeRule.BLEACH_FREE_LINE, result,
                    f"Cor {original} NÃO EXISTE na linha {product_line}. Substituída por {replacement}.",
                )
            else:
                logger.warning(
                    "Bleach-free line %s has no catalog rows, keeping %s", product_line, original
                )

        ridge_alert = self.proximal_ridge_alert(layer, product_line)
        if ridge_alert:
            result.alerts.append(ridge_alert)
            result.advisories.append(ridge_alert)

        # Availability runs before the enamel upgrade: a substitute without an
        # enamel marker must still be upgraded in this same pass.
        if (
            not body_fixed
            and layer.shade != cfg.body_fallback_shade
            and not self.is_inserted_effects_layer(layer)
        ):
            substitute = self.available_substitute(layer.name, role, product_line, layer.shade)
            if substitute:
                original = layer.shade
                logger.warning("Shade validation: %s -> %s for %s", original, substitute, product_line)
                self._apply(
                    layer, substitute, ShadeRule.UNAVAILABLE, result,
                    f"Cor {original} substituída por {substitute}: a cor original não está "
                    f"disponível na linha {product_line}.",
                )

        if (
            role is LayerRole.ENAMEL
            and is_enamel_surface(layer.name, cfg)
            and not is_incisal_effects(layer.name, cfg)
            and not self.is_enamel_grade(layer.shade)
        ):
            best = self.preferred_enamel_shade(product_line)
            if best:
                original = layer.shade
                logger.warning("Enamel optimization: %s -> %s for %s", original, best, product_line)
                self._apply(
                    layer, best, ShadeRule.ENAMEL_OPTIMIZED, result,
                    f"Camada de esmalte otimizada: {original} → {best} para máxima translucidez incisal.",
                )

        return result

    @staticmethod
    def _apply(
        layer: ProtocolLayer,
        new_shade: str,
        rule: ShadeRule,
        result: LayerResolution,
        alert: Optional[str] = None,
    ) -> None:
        if new_shade == layer.shade:
            return
        result.corrections.append(
            ShadeCorrection(
                layer_order=layer.order,
                layer_name=layer.name,
                original=layer.shade,
                replacement=new_shade,
                rule=rule,
            )
        )
        layer.shade = new_shade
        if alert:
            result.alerts.append(alert)
