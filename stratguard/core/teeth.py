"""Tooth and case classification (FDI two-digit notation)."""
from __future__ import annotations

from typing import Optional

from stratguard.config import Settings, settings as default_settings
from stratguard.core.text import fold
from stratguard.models.protocol import CaseContext


def is_anterior(tooth: str | None, config: Optional[Settings] = None) -> bool:
    """True for incisors and canines."""
    cfg = config or default_settings
    if not tooth:
        return False
    return tooth.strip() in cfg.anterior_teeth


def is_aesthetic_class(cavity_class: str | None, config: Optional[Settings] = None) -> bool:
    """True when *cavity_class* is one of the visible-surface restorative classes."""
    cfg = config or default_settings
    folded = fold(cavity_class)
    if not folded:
        return False
    return any(fold(c) == folded for c in cfg.aesthetic_cavity_classes)


def is_anterior_aesthetic(context: CaseContext, config: Optional[Settings] = None) -> bool:
    return is_anterior(context.tooth, config) and is_aesthetic_class(context.cavity_class, config)


def wants_whitening(aesthetic_goals: str | None, config: Optional[Settings] = None) -> bool:
    """True when the patient's stated goals ask for a bleach-level result."""
    cfg = config or default_settings
    goals = (aesthetic_goals or "").lower()
    if not goals:
        return False
    return any(k.lower() in goals for k in cfg.whitening_keywords)


def tooth_region(tooth: str, config: Optional[Settings] = None) -> str:
    """Return ``anterior-superior``, ``anterior-inferior``, ``posterior-superior`` or ``posterior-inferior``.

    Quadrants 1 and 2 are the maxilla; 3 and 4 the mandible.
    """
    try:
        tooth_num = int(tooth)
    except (TypeError, ValueError):
        tooth_num = 0
    is_upper = 10 <= tooth_num <= 28
    if is_anterior(tooth, config):
        return "anterior-superior" if is_upper else "anterior-inferior"
    return "posterior-superior" if is_upper else "posterior-inferior"
