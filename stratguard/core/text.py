"""
Text normalisation for keyword matching on model-generated layer names.

Layer names arrive in Portuguese or English, with or without accents and in
any casing ("Translucidez", "TRANSLUCIDEZ", "Efeitos incisais"). Matching is
done on a folded form:
  - NFKD decomposition with combining marks dropped (é -> e, ç -> c)
  - lower-cased
  - internal whitespace runs collapsed to a single space
"""

import re
import unicodedata
from collections.abc import Iterable

_WHITESPACE_RE = re.compile(r"\s+")


def fold(text: str | None) -> str:
    """Return the accent-free, lower-cased, whitespace-collapsed form of *text*."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE_RE.sub(" ", stripped).strip().lower()


def contains_any(text: str | None, keywords: Iterable[str]) -> bool:
    """True when the folded *text* contains any folded keyword."""
    folded = fold(text)
    if not folded:
        return False
    return any(fold(k) in folded for k in keywords if k)
