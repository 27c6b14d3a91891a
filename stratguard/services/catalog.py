"""Shade catalog access for the repair engine.

The engine only ever needs one thing from the catalog: every row whose
product line matches one of the lines used in a protocol. Adapters implement
``ShadeCatalog.fetch_rows`` for a batch of product-line keywords; the engine
issues exactly one fetch per protocol and indexes the result in memory.

``fetch_catalog_rows`` is the single entry point the engine uses. It folds
every failure mode of an adapter (exception, ``None``, malformed rows) into
an empty result, because the repair must still produce a safe protocol when
the catalog is unreachable.
"""
from __future__ import annotations

import json
import logging
import pathlib
import re
from collections.abc import Iterable, Sequence
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from stratguard.errors import ProtocolInputError
from stratguard.models.catalog import ShadeCatalogRow

logger = logging.getLogger(__name__)

# "3M ESPE - Filtek Z350 XT" -> manufacturer "3M ESPE", line "Filtek Z350 XT"
_BRAND_RE = re.compile(r"^(.+?)\s*-\s*(.+)$")


class ShadeCatalog(Protocol):
    """Read interface onto the resin shade catalog."""

    async def fetch_rows(
        self, product_lines: Sequence[str]
    ) -> Optional[Sequence[ShadeCatalogRow]]:
        """Return rows whose product line contains any of *product_lines*."""
        ...


def split_product_line(resin_brand: str | None) -> str:
    """Return the product-line part of a ``"Manufacturer - Line"`` brand string.

    Brands without a separator are returned stripped, as-is.
    """
    if not resin_brand:
        return ""
    match = _BRAND_RE.match(resin_brand.strip())
    if match:
        return match.group(2).strip()
    return resin_brand.strip()


def line_matches(catalog_line: str, keyword: str) -> bool:
    """Case-insensitive containment of a product-line keyword in a catalog line."""
    if not keyword:
        return False
    return keyword.lower() in catalog_line.lower()


def _coerce_rows(raw: Iterable[Any]) -> list[ShadeCatalogRow]:
    rows: list[ShadeCatalogRow] = []
    for item in raw:
        if isinstance(item, ShadeCatalogRow):
            rows.append(item)
            continue
        try:
            rows.append(ShadeCatalogRow.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping malformed catalog row %r: %s", item, exc.errors()[0]["msg"])
    return rows


async def fetch_catalog_rows(
    catalog: Optional[ShadeCatalog],
    product_lines: Sequence[str],
) -> list[ShadeCatalogRow]:
    """Fetch catalog rows for *product_lines*, never raising.

    No catalog, no product lines, a ``None`` result and any adapter exception
    all yield ``[]``; callers resolve that through the hard fallback.
    """
    if catalog is None or not product_lines:
        return []
    try:
        raw = await catalog.fetch_rows(list(product_lines))
    except Exception as exc:
        logger.warning(
            "Shade catalog lookup failed for %s, continuing without catalog: %s",
            ", ".join(product_lines),
            exc,
        )
        return []
    if not raw:
        logger.info("Shade catalog returned no rows for %s", ", ".join(product_lines))
        return []
    return _coerce_rows(raw)


class CatalogIndex:
    """In-memory view over the rows fetched for one protocol."""

    def __init__(self, rows: Sequence[ShadeCatalogRow]) -> None:
        self._rows = list(rows)
        self._by_line: dict[str, list[ShadeCatalogRow]] = {}

    def __len__(self) -> int:
        return len(self._rows)

    def rows_for_line(self, product_line: str) -> list[ShadeCatalogRow]:
        key = product_line.lower()
        if key not in self._by_line:
            self._by_line[key] = [r for r in self._rows if line_matches(r.product_line, product_line)]
        return self._by_line[key]

    def find(self, product_line: str, shade: str) -> Optional[ShadeCatalogRow]:
        for row in self.rows_for_line(product_line):
            if row.shade == shade:
                return row
        return None


class InMemoryShadeCatalog:
    """``ShadeCatalog`` over a fixed list of rows (fixtures, JSON exports)."""

    def __init__(self, rows: Optional[Iterable[ShadeCatalogRow | dict[str, Any]]] = None) -> None:
        self._rows = _coerce_rows(rows or [])

    @property
    def rows(self) -> list[ShadeCatalogRow]:
        return list(self._rows)

    async def fetch_rows(self, product_lines: Sequence[str]) -> list[ShadeCatalogRow]:
        return [
            row for row in self._rows
            if any(line_matches(row.product_line, pl) for pl in product_lines)
        ]

    @classmethod
    def from_file(cls, path: pathlib.Path) -> "InMemoryShadeCatalog":
        """Load rows from a JSON array (or ``{"rows": [...]}``) on disk."""
        return cls(load_catalog_file(path))


def load_catalog_file(path: pathlib.Path) -> list[ShadeCatalogRow]:
    """Parse a catalog export file into rows.

    Raises:
        ProtocolInputError: the file is missing, not JSON, or not a list of rows.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ProtocolInputError(f"Cannot read catalog file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ProtocolInputError(f"Catalog file {path} is not valid JSON: {exc}") from exc

    if isinstance(payload, dict):
        payload = payload.get("rows", payload.get("data"))
    if not isinstance(payload, list):
        raise ProtocolInputError(f"Catalog file {path} must contain a JSON array of rows")
    return _coerce_rows(payload)
