"""
SQLAlchemy ORM models for Stratguard.

Tables:
- resin_catalog: every (shade, type, product line) combination a clinic can buy
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from stratguard.db.database import Base


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


class ResinCatalogEntry(Base):
    """One shade of one resin product line.

    ``product_line`` holds the full "Manufacturer - Line" label; lookups match
    it by case-insensitive containment of the line name.
    """
    __tablename__ = "resin_catalog"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shade: Mapped[str] = mapped_column(String(32), nullable=False)
    type: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    product_line: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_resin_catalog_product_line", "product_line"),
    )

    def __repr__(self) -> str:
        return f"<ResinCatalogEntry {self.product_line} {self.shade} ({self.type})>"
