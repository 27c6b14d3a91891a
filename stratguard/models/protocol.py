"""Pydantic v2 models for stratification protocols and the clinical case they belong to.

The protocol is produced upstream by the recommendation model and only
corrected here, so every model tolerates sparse input: missing strings
default to empty, ``null`` is coerced to the empty value, and unknown
protocol keys are kept verbatim so they survive a repair round-trip.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import ConfigDict, Field, field_validator

from stratguard.models.base import CamelModel


class ProtocolLayer(CamelModel):
    """One resin increment of a stratification protocol."""

    order: int = 0
    name: str = ""
    resin_brand: str = ""
    shade: str = ""
    thickness: Optional[str] = None
    purpose: Optional[str] = None
    technique: Optional[str] = None
    # Only set on layers the engine inserts itself
    optional: Optional[bool] = None

    @field_validator("name", "resin_brand", "shade", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ProtocolAlternative(CamelModel):
    """Simplified single-shade alternative offered next to the full protocol."""

    resin: Optional[str] = None
    shade: Optional[str] = None
    technique: Optional[str] = None
    tradeoff: Optional[str] = None


class StratificationProtocol(CamelModel):
    """A complete layering plan as returned by the recommendation model.

    ``alerts`` describe corrections applied by the repair engine (append-only).
    ``warnings`` are advisory and filled by callers, never by the repair itself.
    ``layers`` is ``None`` when the model produced no layering at all.
    """

    model_config = ConfigDict(extra="allow")

    layers: Optional[list[ProtocolLayer]] = None
    checklist: list[str] = Field(default_factory=list)
    alerts: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    confidence: Optional[str] = None
    alternative: Optional[ProtocolAlternative] = None
    justification: Optional[str] = None

    @field_validator("checklist", "alerts", "warnings", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value


class CaseContext(CamelModel):
    """Clinical context supplied alongside the protocol."""

    tooth: str = ""
    cavity_class: str = ""
    aesthetic_goals: Optional[str] = None

    @field_validator("tooth", mode="before")
    @classmethod
    def _tooth_as_str(cls, value: Any) -> Any:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("cavity_class", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value
