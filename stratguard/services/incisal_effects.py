"""Incisal-effects layer injection for anterior aesthetic protocols.

Anterior aesthetic restorations look artificial without incisal
characterisation (opaque halo, mamelons). When the model leaves that step
out of an otherwise complete protocol, an optional "Efeitos Incisais" layer
is inserted right before the final vestibular enamel and every layer is
renumbered.

Injection happens only if all of these hold:
  - the tooth is anterior (FDI 11-13, 21-23, 31-33, 41-43)
  - the cavity class is one of the aesthetic classes
  - the protocol already has at least three layers
  - no layer name already mentions incisal effects
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Optional

from stratguard.config import Settings, settings as default_settings
from stratguard.core.roles import is_enamel_surface, is_incisal_effects
from stratguard.core.teeth import is_anterior_aesthetic
from stratguard.core.text import contains_any
from stratguard.models.protocol import CaseContext, ProtocolLayer

logger = logging.getLogger(__name__)


def should_inject(
    layers: Sequence[ProtocolLayer],
    context: CaseContext,
    config: Optional[Settings] = None,
) -> bool:
    cfg = config or default_settings
    if len(layers) < cfg.incisal_effects_min_layers:
        return False
    if not is_anterior_aesthetic(context, cfg):
        return False
    return not any(is_incisal_effects(layer.name, cfg) for layer in layers)


def find_insertion_index(layers: Sequence[ProtocolLayer], config: Optional[Settings] = None) -> int:
    """Index the new layer is inserted at.

    Before the first layer named like the final vestibular enamel; else before
    the last esmalte/enamel layer; else before the final layer.
    """
    cfg = config or default_settings
    for idx, layer in enumerate(layers):
        if contains_any(layer.name, cfg.incisal_effects_anchor_phrases):
            return idx
    for idx in range(len(layers) - 1, -1, -1):
        if is_enamel_surface(layers[idx].name, cfg):
            return idx
    return max(len(layers) - 1, 0)


def build_incisal_effects_layer(config: Optional[Settings] = None) -> ProtocolLayer:
    cfg = config or default_settings
    return ProtocolLayer(
        order=0,
        name=cfg.incisal_effects_name,
        resin_brand=cfg.incisal_effects_brand,
        shade=cfg.incisal_effects_shade,
        thickness=cfg.incisal_effects_thickness,
        purpose=cfg.incisal_effects_purpose,
        technique=cfg.incisal_effects_technique,
        optional=True,
    )


def renumber_layers(layers: Sequence[ProtocolLayer]) -> None:
    """Set ``order`` to 1..N following list position."""
    for position, layer in enumerate(layers, start=1):
        layer.order = position


def inject_incisal_effects(
    layers: list[ProtocolLayer],
    context: CaseContext,
    config: Optional[Settings] = None,
) -> tuple[Optional[ProtocolLayer], Optional[str]]:
    """Insert the incisal-effects layer into *layers* when the case calls for it.

    Mutates *layers* in place. Returns ``(injected_layer, alert)``, both
    ``None`` when nothing was inserted.
    """
    cfg = config or default_settings
    if not should_inject(layers, context, cfg):
        return None, None

    index = find_insertion_index(layers, cfg)
    anchor_name = layers[index].name if index < len(layers) else ""
    new_layer = build_incisal_effects_layer(cfg)
    layers.insert(index, new_layer)
    renumber_layers(layers)

    logger.warning(
        "Incisal effects injected at position %d (before %r) for tooth %s / %s",
        new_layer.order, anchor_name, context.tooth, context.cavity_class,
    )
    alert = (
        f"Camada \"{cfg.incisal_effects_name}\" (opcional) adicionada antes de \"{anchor_name}\": "
        f"casos estéticos anteriores se beneficiam de caracterização incisal (halo opaco e mamelos)."
    )
    return new_layer, alert
