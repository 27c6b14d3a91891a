"""Wire model for rows of the resin shade catalog."""
from __future__ import annotations

from typing import Any

from pydantic import field_validator

from stratguard.models.base import CamelModel


class ShadeCatalogRow(CamelModel):
    """A ``(shade, type, product_line)`` combination known to exist.

    ``type`` is free text from the catalog (``body``, ``dentina``,
    ``universal``, ``esmalte``, ``esmalte translucido``, ``opaco`` ...);
    callers compare it lower-cased by containment.
    """

    shade: str
    type: str = ""
    product_line: str = ""

    @field_validator("type", "product_line", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def type_matches(self, keyword: str) -> bool:
        return keyword.lower() in self.type.lower()
