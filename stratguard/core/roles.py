"""Layer role classification from free-text layer names."""
from __future__ import annotations

import enum
from typing import Optional

from stratguard.config import Settings, settings as default_settings
from stratguard.core.text import contains_any


class LayerRole(str, enum.Enum):
    """What a layer does structurally, as far as shade rules are concerned."""

    BODY = "body"
    ENAMEL = "enamel"
    OTHER = "other"


def classify_layer(name: str | None, config: Optional[Settings] = None) -> LayerRole:
    """Map a layer name to its role using the configured keyword tables.

    BODY keywords win over ENAMEL ones so that a name such as
    "Dentina / Corpo incisal" is still protected from bleach shades.
    Names matching neither table are OTHER and exempt from role rules.
    """
    cfg = config or default_settings
    if contains_any(name, cfg.body_keywords):
        return LayerRole.BODY
    if contains_any(name, cfg.enamel_keywords):
        return LayerRole.ENAMEL
    return LayerRole.OTHER


def is_enamel_surface(name: str | None, config: Optional[Settings] = None) -> bool:
    """True for the esmalte/enamel increments proper (not translucent or effect layers)."""
    cfg = config or default_settings
    return contains_any(name, cfg.enamel_surface_keywords)


def is_opaque_layer(name: str | None, config: Optional[Settings] = None) -> bool:
    cfg = config or default_settings
    return contains_any(name, cfg.opaque_keywords)


def is_proximal_ridge(name: str | None, config: Optional[Settings] = None) -> bool:
    cfg = config or default_settings
    return contains_any(name, cfg.proximal_ridge_keywords)


def is_incisal_effects(name: str | None, config: Optional[Settings] = None) -> bool:
    cfg = config or default_settings
    return contains_any(name, cfg.incisal_effects_keywords)
