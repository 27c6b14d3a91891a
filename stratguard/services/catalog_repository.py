"""Catalog persistence adapter — single point of DB access for the resin_catalog table.

The repair engine never imports this module; it talks to any ``ShadeCatalog``.
This module translates between ``ResinCatalogEntry`` rows and the
``ShadeCatalogRow`` domain model, and turns driver errors into
``CatalogUnavailableError`` so the engine's failure handling stays uniform.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from stratguard.db.models import ResinCatalogEntry
from stratguard.errors import CatalogUnavailableError
from stratguard.models.catalog import ShadeCatalogRow

logger = logging.getLogger(__name__)


def _to_domain(row: ResinCatalogEntry) -> ShadeCatalogRow:
    return ShadeCatalogRow(shade=row.shade, type=row.type, product_line=row.product_line)


class SqlShadeCatalog:
    """``ShadeCatalog`` backed by the ``resin_catalog`` table.

    One query per protocol: the product lines are OR-ed together as
    ``product_line ILIKE '%line%'`` filters.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def fetch_rows(self, product_lines: Sequence[str]) -> list[ShadeCatalogRow]:
        lines = [pl for pl in product_lines if pl]
        if not lines:
            return []
        stmt = (
            select(ResinCatalogEntry)
            .where(or_(*[ResinCatalogEntry.product_line.ilike(f"%{pl}%") for pl in lines]))
            .order_by(ResinCatalogEntry.id)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise CatalogUnavailableError(f"resin_catalog query failed: {exc}") from exc
        rows = [_to_domain(r) for r in result.scalars().all()]
        logger.debug("resin_catalog: %d rows for %s", len(rows), lines)
        return rows


async def add_catalog_rows(
    session: AsyncSession,
    rows: Iterable[ShadeCatalogRow],
) -> int:
    """Insert *rows* that are not already present; return how many were added.

    Identity is ``(product_line, shade)``; re-importing the same export is a no-op.
    """
    existing_result = await session.execute(
        select(ResinCatalogEntry.product_line, ResinCatalogEntry.shade)
    )
    existing = {(pl, shade) for pl, shade in existing_result.all()}

    added = 0
    for row in rows:
        key = (row.product_line, row.shade)
        if key in existing:
            continue
        session.add(
            ResinCatalogEntry(shade=row.shade, type=row.type, product_line=row.product_line)
        )
        existing.add(key)
        added += 1
    await session.flush()
    logger.info("resin_catalog: imported %d new rows", added)
    return added
