"""stratguard catalog — manage the resin shade catalog table.

Subcommands
-----------
import ROWS.json   Insert catalog rows that are not already present
                   (identity: product line + shade).
"""
from __future__ import annotations

import asyncio
import logging
import pathlib
from typing import Optional

import typer

from stratguard.config import settings
from stratguard.db import AsyncSessionLocal, close_db, init_db
from stratguard.errors import ExitCode, ProtocolInputError
from stratguard.models.catalog import ShadeCatalogRow
from stratguard.services.catalog import load_catalog_file
from stratguard.services.catalog_repository import add_catalog_rows

logger = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True)


async def _import_rows(rows: list[ShadeCatalogRow], database_url: Optional[str]) -> int:
    await init_db(database_url, create_tables=True)
    try:
        async with AsyncSessionLocal() as session:
            added = await add_catalog_rows(session, rows)
            await session.commit()
            return added
    finally:
        await close_db()


@app.command("import")
def import_rows(
    rows_file: pathlib.Path = typer.Argument(..., help="JSON array of {shade, type, productLine} rows."),
    database_url: Optional[str] = typer.Option(
        None,
        "--database-url",
        help="Override STRATGUARD_DATABASE_URL.",
    ),
) -> None:
    """Load catalog rows into the resin_catalog table."""
    try:
        rows = load_catalog_file(rows_file)
        added = asyncio.run(_import_rows(rows, database_url or settings.database_url))
    except ProtocolInputError as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=exc.exit_code)
    except Exception as exc:
        typer.echo(f"❌ stratguard catalog import failed: {exc}")
        logger.error("❌ stratguard catalog import error: %s", exc, exc_info=True)
        raise typer.Exit(code=ExitCode.INTERNAL_ERROR)

    typer.echo(f"✅ Imported {added} row(s); {len(rows) - added} already present.")
