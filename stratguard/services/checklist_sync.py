"""Keep checklist text in step with shade substitutions made on the layers.

The checklist is free text written by the same model that produced the
layers, so it quotes shade tokens literally ("Aplicar BL2 na dentina").
A substitution on a layer is propagated to every checklist item that still
names the old token as a whole token: ``A1`` is never rewritten inside
``A1E`` or ``DA1``. Items that do not mention the token come back unchanged.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence

logger = logging.getLogger(__name__)


def _token_pattern(token: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![A-Za-z0-9]){re.escape(token)}(?![A-Za-z0-9])")


def sync_checklist(checklist: Sequence[str], old_shade: str, new_shade: str) -> list[str]:
    """Replace whole-token occurrences of *old_shade* with *new_shade* in every item."""
    if not old_shade or old_shade == new_shade:
        return list(checklist)
    pattern = _token_pattern(old_shade)
    return [pattern.sub(new_shade, item) if isinstance(item, str) else item for item in checklist]


def apply_replacements(
    checklist: Sequence[str],
    replacements: Iterable[tuple[str, str]],
) -> list[str]:
    """Apply each ``(old, new)`` pair once, in the order given.

    Repeated identical pairs (the same substitution on several layers) are
    applied only the first time.
    """
    seen: set[tuple[str, str]] = set()
    items = list(checklist)
    for old, new in replacements:
        if (old, new) in seen:
            continue
        seen.add((old, new))
        items = sync_checklist(items, old, new)
    if seen:
        logger.info(
            "Applied %d shade replacement(s) to checklist: %s",
            len(seen),
            ", ".join(f"{o}->{n}" for o, n in seen),
        )
    return items
