"""Tests for catalog helpers and the in-memory catalog adapter."""
from __future__ import annotations

import json
import pathlib

import pytest

from stratguard.errors import ExitCode, ProtocolInputError
from stratguard.models.catalog import ShadeCatalogRow
from stratguard.services.catalog import (
    CatalogIndex,
    InMemoryShadeCatalog,
    fetch_catalog_rows,
    line_matches,
    load_catalog_file,
    split_product_line,
)


@pytest.mark.parametrize(
    ("brand", "line"),
    [
        ("3M ESPE - Filtek Z350 XT", "Filtek Z350 XT"),
        ("Ivoclar - IPS Empress Direct", "IPS Empress Direct"),
        ("Tokuyama-Estelite Omega", "Estelite Omega"),
        ("Harmonize", "Harmonize"),
        ("  Vittra APS  ", "Vittra APS"),
        ("", ""),
        (None, ""),
    ],
)
def test_split_product_line(brand: str | None, line: str) -> None:
    assert split_product_line(brand) == line


def test_line_matches_is_case_insensitive_containment() -> None:
    assert line_matches("3M - Filtek Z350 XT", "z350")
    assert not line_matches("Filtek Z350 XT", "Empress")
    assert not line_matches("Filtek Z350 XT", "")


def test_row_accepts_camel_case_and_null_type() -> None:
    row = ShadeCatalogRow.model_validate({"shade": "WB", "type": None, "productLine": "Filtek Z350 XT"})
    assert row.type == ""
    assert row.product_line == "Filtek Z350 XT"
    assert not row.type_matches("body")


def test_index_filters_by_line_and_finds_shade(z350_rows) -> None:
    rows = z350_rows + [ShadeCatalogRow(shade="A2", type="universal", product_line="IPS Empress Direct")]
    index = CatalogIndex(rows)
    assert len(index) == len(rows)
    assert len(index.rows_for_line("filtek z350")) == len(z350_rows)
    assert index.find("Empress", "A2").type == "universal"
    assert index.find("Empress", "WB") is None


@pytest.mark.anyio
async def test_in_memory_fetch_filters_lines(z350_rows) -> None:
    catalog = InMemoryShadeCatalog(z350_rows)
    assert await catalog.fetch_rows(["Z350"]) == z350_rows
    assert await catalog.fetch_rows(["Harmonize"]) == []


@pytest.mark.anyio
async def test_fetch_catalog_rows_short_circuits(z350_rows) -> None:
    assert await fetch_catalog_rows(None, ["Filtek Z350 XT"]) == []
    assert await fetch_catalog_rows(InMemoryShadeCatalog(z350_rows), []) == []


@pytest.mark.anyio
async def test_fetch_catalog_rows_skips_malformed_rows() -> None:
    class _Raw:
        async def fetch_rows(self, product_lines):
            return [{"shade": "WB", "type": "body", "productLine": "Filtek Z350 XT"}, {"type": "body"}]

    rows = await fetch_catalog_rows(_Raw(), ["Filtek Z350 XT"])
    assert [r.shade for r in rows] == ["WB"]


@pytest.mark.anyio
async def test_fetch_catalog_rows_absorbs_errors() -> None:
    class _Boom:
        async def fetch_rows(self, product_lines):
            raise RuntimeError("timeout")

    assert await fetch_catalog_rows(_Boom(), ["Filtek Z350 XT"]) == []


def test_load_catalog_file_list_and_wrapped(tmp_path: pathlib.Path) -> None:
    rows = [{"shade": "WB", "type": "body", "productLine": "Filtek Z350 XT"}]
    bare = tmp_path / "bare.json"
    bare.write_text(json.dumps(rows))
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps({"data": rows}))

    assert load_catalog_file(bare)[0].shade == "WB"
    assert InMemoryShadeCatalog.from_file(wrapped).rows[0].product_line == "Filtek Z350 XT"


def test_load_catalog_file_errors(tmp_path: pathlib.Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    obj = tmp_path / "obj.json"
    obj.write_text(json.dumps({"shade": "WB"}))

    with pytest.raises(ProtocolInputError) as exc_info:
        load_catalog_file(bad)
    assert exc_info.value.exit_code == ExitCode.USER_ERROR
    with pytest.raises(ProtocolInputError):
        load_catalog_file(obj)
    with pytest.raises(ProtocolInputError):
        load_catalog_file(tmp_path / "missing.json")
