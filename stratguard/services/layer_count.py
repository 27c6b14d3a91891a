"""Minimum layer count advisory.

Independent of the repair pipeline: callers run it on the final layer list
and append the returned text to ``protocol.warnings`` themselves.
"""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Optional

from stratguard.config import Settings, settings as default_settings
from stratguard.core.teeth import is_anterior_aesthetic
from stratguard.models.protocol import CaseContext


def validate_minimum_layer_count(
    layers: Optional[Sequence[Any]],
    context: CaseContext | Mapping[str, Any],
    config: Optional[Settings] = None,
) -> Optional[str]:
    """Return a warning when the protocol has fewer layers than the case needs.

    Anterior aesthetic cases need three layers; everything else needs two.
    ``None`` layers (no protocol yet) never produce a warning.
    """
    if layers is None:
        return None
    cfg = config or default_settings
    ctx = context if isinstance(context, CaseContext) else CaseContext.model_validate(context)
    count = len(layers)

    if is_anterior_aesthetic(ctx, cfg):
        minimum = cfg.min_layers_anterior_aesthetic
        if count < minimum:
            return (
                f"Protocolo com {count} camada(s) para dente anterior em caso estético: "
                f"recomenda-se no mínimo {minimum} camadas (dentina, efeitos/translucidez e esmalte)."
            )
        return None

    minimum = cfg.min_layers_default
    if count < minimum:
        return (
            f"Protocolo com {count} camada(s): recomenda-se no mínimo {minimum} camadas "
            f"(dentina e esmalte)."
        )
    return None
