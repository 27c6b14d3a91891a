"""Stratguard CLI — Typer application root.

Entry point for the ``stratguard`` console script.
"""
from __future__ import annotations

import logging
import pathlib
from typing import Optional

import typer

from stratguard.cli.commands import catalog
from stratguard.cli.commands.validate import run_validate as _validate_logic
from stratguard.config import settings

cli = typer.Typer(
    name="stratguard",
    help="Stratguard — validation and repair of resin stratification protocols.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"{settings.app_name} {settings.app_version}")
        raise typer.Exit()


@cli.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every correction."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if (verbose or settings.debug) else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# validate is a plain @cli.command() (not add_typer) so options are parsed
# after the positional PLAN argument as well as before it.
@cli.command("validate", help="Repair a protocol JSON file and report the corrections.")
def _validate_cmd(
    plan: pathlib.Path = typer.Argument(..., help="Protocol JSON (bare or under a 'protocol' key)."),
    tooth: str = typer.Option(..., "--tooth", "-t", help="FDI tooth number, e.g. 11."),
    cavity_class: str = typer.Option(..., "--cavity-class", "-c", help="e.g. 'Classe IV', 'Faceta Direta'."),
    goals: Optional[str] = typer.Option(None, "--goals", help="Patient aesthetic goals (free text)."),
    catalog_file: Optional[pathlib.Path] = typer.Option(
        None, "--catalog", help="Catalog rows JSON; defaults to the configured database."
    ),
    output: Optional[pathlib.Path] = typer.Option(
        None, "--output", "-o", help="Write the repaired protocol JSON here."
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit the full repair result as JSON."),
) -> None:
    _validate_logic(
        plan,
        tooth=tooth,
        cavity_class=cavity_class,
        goals=goals,
        catalog_path=catalog_file,
        output=output,
        as_json=as_json,
    )


cli.add_typer(catalog.app, name="catalog", help="Manage the resin shade catalog.")


if __name__ == "__main__":
    cli()
