"""Pytest configuration and fixtures."""
from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from stratguard.db.database import Base
from stratguard.models.catalog import ShadeCatalogRow
from stratguard.models.protocol import CaseContext, ProtocolLayer, StratificationProtocol

# Register ResinCatalogEntry with Base.metadata before create_all is called.
import stratguard.db.models  # noqa: F401, E402

Z350 = "3M ESPE - Filtek Z350 XT"
HARMONIZE = "Kerr - Harmonize"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """In-memory SQLite session with the resin_catalog table.

    Isolated per test: tables are created fresh and dropped on teardown.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def z350_rows() -> list[ShadeCatalogRow]:
    """A small Filtek Z350 XT catalog: body, enamel and translucent shades, no BL."""
    return [
        ShadeCatalogRow(shade="WB", type="body", product_line="Filtek Z350 XT"),
        ShadeCatalogRow(shade="A2B", type="body", product_line="Filtek Z350 XT"),
        ShadeCatalogRow(shade="A2D", type="dentina", product_line="Filtek Z350 XT"),
        ShadeCatalogRow(shade="A1E", type="esmalte", product_line="Filtek Z350 XT"),
        ShadeCatalogRow(shade="WE", type="esmalte", product_line="Filtek Z350 XT"),
        ShadeCatalogRow(shade="CT", type="esmalte translucido", product_line="Filtek Z350 XT"),
    ]


@pytest.fixture
def anterior_context() -> CaseContext:
    return CaseContext(tooth="11", cavity_class="Classe IV")


@pytest.fixture
def posterior_context() -> CaseContext:
    return CaseContext(tooth="36", cavity_class="Classe II")


def make_protocol(*layers: tuple[str, str, str], **extra) -> StratificationProtocol:
    """Build a protocol from ``(name, resin_brand, shade)`` triples, ordered 1..N."""
    return StratificationProtocol(
        layers=[
            ProtocolLayer(order=i, name=name, resin_brand=brand, shade=shade)
            for i, (name, brand, shade) in enumerate(layers, start=1)
        ],
        **extra,
    )


def three_layer_anterior() -> StratificationProtocol:
    return make_protocol(
        ("Dentina", Z350, "A2D"),
        ("Translucidez", Z350, "CT"),
        ("Esmalte Vestibular Final", Z350, "WE"),
    )
