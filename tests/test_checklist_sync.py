"""Tests for checklist text synchronisation."""
from __future__ import annotations

from stratguard.services.checklist_sync import apply_replacements, sync_checklist


def test_replaces_whole_token() -> None:
    items = ["Aplicar BL1 na dentina", "Polir com disco"]
    assert sync_checklist(items, "BL1", "WB") == ["Aplicar WB na dentina", "Polir com disco"]


def test_does_not_touch_longer_tokens() -> None:
    items = ["Usar A1E no esmalte, A1 no corpo, DA1 na palatina"]
    assert sync_checklist(items, "A1", "A2") == ["Usar A1E no esmalte, A2 no corpo, DA1 na palatina"]


def test_punctuation_is_a_boundary() -> None:
    assert sync_checklist(["Cor (BL2)."], "BL2", "WB") == ["Cor (WB)."]


def test_every_occurrence_is_replaced() -> None:
    assert sync_checklist(["BL1 ou BL1"], "BL1", "WB") == ["WB ou WB"]


def test_noop_cases_return_copy() -> None:
    items = ["Aplicar WB"]
    result = sync_checklist(items, "WB", "WB")
    assert result == items
    assert result is not items
    assert sync_checklist(items, "", "A1") == items
    assert sync_checklist([], "BL1", "WB") == []


def test_case_sensitive() -> None:
    assert sync_checklist(["aplicar bl1"], "BL1", "WB") == ["aplicar bl1"]


def test_apply_replacements_in_order_and_once() -> None:
    items = ["Dentina BL1, esmalte WT"]
    result = apply_replacements(items, [("WT", "CT"), ("BL1", "WB"), ("BL1", "WB")])
    assert result == ["Dentina WB, esmalte CT"]


def test_apply_replacements_chain() -> None:
    """A later pair sees the text produced by an earlier one."""
    assert apply_replacements(["Usar A2"], [("A2", "WE"), ("WE", "CE")]) == ["Usar CE"]


def test_apply_replacements_empty() -> None:
    assert apply_replacements(["x"], []) == ["x"]
