"""stratguard validate — repair a stratification protocol file.

Loads a protocol (either bare or wrapped as ``{"protocol": {...}}`` the way
the recommendation endpoint returns it), runs the repair pipeline, then the
minimum-layer advisory, and reports what changed.

Catalog source, in order of preference:
  - ``--catalog ROWS.json`` (JSON array of ``{shade, type, productLine}``)
  - the ``resin_catalog`` table at ``STRATGUARD_DATABASE_URL``
  - none (body violations resolve to the fallback shade)

Output (default human-readable)::

    Validating protocol — tooth 11 (anterior-superior), Classe IV …

      1. Dentina                   Filtek Z350 XT        WB
      2. Efeitos Incisais (opcional) IPS Empress Direct Color White
      3. Esmalte Vestibular Final  Filtek Z350 XT        WE

    Corrections:
      🔧 BL1 → WB  (body_prohibited, Dentina)

    Alerts added:
      ⚠️  Cor BL1 é exclusiva de esmalte/clareamento ...

Exit codes
----------
- 0 — protocol processed (whether or not it changed)
- 1 — unreadable plan or catalog file
- 3 — internal error
"""
from __future__ import annotations

import asyncio
import json
import logging
import pathlib
from typing import Any, Optional

import typer
from pydantic import ValidationError

from stratguard.config import settings
from stratguard.core.teeth import tooth_region
from stratguard.db import AsyncSessionLocal, close_db, init_db
from stratguard.errors import ExitCode, ProtocolInputError
from stratguard.models.protocol import CaseContext, StratificationProtocol
from stratguard.services.catalog import InMemoryShadeCatalog, ShadeCatalog, split_product_line
from stratguard.services.catalog_repository import SqlShadeCatalog
from stratguard.services.layer_count import validate_minimum_layer_count
from stratguard.services.shade_validation import ProtocolRepair, repair_protocol

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


def load_protocol(path: pathlib.Path) -> Optional[StratificationProtocol]:
    """Read a protocol document; ``None`` when the document carries no protocol.

    Raises:
        ProtocolInputError: unreadable file, invalid JSON, or invalid protocol shape.
    """
    try:
        payload: Any = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ProtocolInputError(f"Cannot read protocol file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ProtocolInputError(f"Protocol file {path} is not valid JSON: {exc}") from exc

    if isinstance(payload, dict) and "protocol" in payload:
        payload = payload["protocol"]
    if payload is None:
        return None
    if not isinstance(payload, dict):
        raise ProtocolInputError(f"Protocol file {path} must contain a JSON object")
    try:
        return StratificationProtocol.model_validate(payload)
    except ValidationError as exc:
        raise ProtocolInputError(f"Invalid protocol in {path}: {exc}") from exc


# ---------------------------------------------------------------------------
# Repair
# ---------------------------------------------------------------------------


async def _repair_with_database(
    protocol: Optional[StratificationProtocol],
    context: CaseContext,
    database_url: str,
) -> ProtocolRepair:
    try:
        await init_db(database_url)
    except Exception as exc:
        logger.warning("Catalog database unavailable (%s), repairing without catalog", exc)
        return await repair_protocol(protocol, context, None)
    try:
        async with AsyncSessionLocal() as session:
            return await repair_protocol(protocol, context, SqlShadeCatalog(session))
    finally:
        await close_db()


def run_repair(
    protocol: Optional[StratificationProtocol],
    context: CaseContext,
    catalog_path: Optional[pathlib.Path],
    database_url: Optional[str],
) -> ProtocolRepair:
    """Run the pipeline against the chosen catalog source and add the layer-count warning."""
    if catalog_path is not None:
        catalog: Optional[ShadeCatalog] = InMemoryShadeCatalog.from_file(catalog_path)
        repair = asyncio.run(repair_protocol(protocol, context, catalog))
    elif database_url:
        repair = asyncio.run(_repair_with_database(protocol, context, database_url))
    else:
        logger.info("No catalog configured, body violations will use the fallback shade")
        repair = asyncio.run(repair_protocol(protocol, context, None))

    repaired = repair.protocol
    if repaired is not None:
        warning = validate_minimum_layer_count(repaired.layers, context)
        if warning and warning not in repaired.warnings:
            repaired.warnings.append(warning)
    return repair


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _render_human(repair: ProtocolRepair, context: CaseContext) -> None:
    """Print a human-readable repair report to stdout."""
    region = tooth_region(context.tooth) if context.tooth else "?"
    typer.echo(
        f"Validating protocol — tooth {context.tooth or '?'} ({region}), "
        f"{context.cavity_class or '?'} …"
    )
    typer.echo("")

    protocol = repair.protocol
    if protocol is None or not protocol.layers:
        typer.echo("ℹ️  Protocol has no layers — nothing to validate.")
        return

    for layer in protocol.layers:
        name = layer.name + (" (opcional)" if layer.optional else "")
        typer.echo(
            f"  {layer.order:>2}. {name:<32} {split_product_line(layer.resin_brand):<26} {layer.shade}"
        )
    typer.echo("")

    if repair.corrections:
        typer.echo("Corrections:")
        for c in repair.corrections:
            typer.echo(f"  🔧 {c.original} → {c.replacement}  ({c.rule.value}, {c.layer_name})")
        typer.echo("")

    if repair.alerts_added:
        typer.echo("Alerts added:")
        for alert in repair.alerts_added:
            typer.echo(f"  ⚠️  {alert}")
        typer.echo("")

    if protocol.warnings:
        typer.echo("Warnings:")
        for warning in protocol.warnings:
            typer.echo(f"  ⚠️  {warning}")
        typer.echo("")

    if repair.changed:
        typer.echo(f"✅ Protocol repaired — {len(repair.corrections)} shade correction(s).")
    else:
        typer.echo("✅ Protocol is consistent — no changes.")


def _render_json(repair: ProtocolRepair) -> None:
    """Emit the repair result as a JSON object."""
    typer.echo(json.dumps(repair.to_dict(), indent=2, ensure_ascii=False))


# ---------------------------------------------------------------------------
# Command logic
# ---------------------------------------------------------------------------


def run_validate(
    plan: pathlib.Path,
    *,
    tooth: str,
    cavity_class: str,
    goals: Optional[str] = None,
    catalog_path: Optional[pathlib.Path] = None,
    output: Optional[pathlib.Path] = None,
    as_json: bool = False,
) -> None:
    context = CaseContext(tooth=tooth, cavity_class=cavity_class, aesthetic_goals=goals)
    try:
        protocol = load_protocol(plan)
        repair = run_repair(protocol, context, catalog_path, settings.database_url)
    except ProtocolInputError as exc:
        typer.echo(f"❌ {exc}")
        raise typer.Exit(code=exc.exit_code)
    except Exception as exc:
        typer.echo(f"❌ stratguard validate failed: {exc}")
        logger.error("❌ stratguard validate error: %s", exc, exc_info=True)
        raise typer.Exit(code=ExitCode.INTERNAL_ERROR)

    if output is not None and repair.protocol is not None:
        output.write_text(
            repair.protocol.model_dump_json(by_alias=True, exclude_none=True, indent=2),
            encoding="utf-8",
        )
        logger.info("Repaired protocol written to %s", output)

    if as_json:
        _render_json(repair)
    else:
        _render_human(repair, context)
