"""Tests for the minimum layer count advisory."""
from __future__ import annotations

from stratguard.models.protocol import ProtocolLayer
from stratguard.services.layer_count import validate_minimum_layer_count


def _layers(n: int) -> list[ProtocolLayer]:
    return [ProtocolLayer(order=i + 1, name=f"Camada {i + 1}") for i in range(n)]


def test_two_layers_anterior_aesthetic_warns() -> None:
    warning = validate_minimum_layer_count(_layers(2), {"tooth": "11", "cavityClass": "Classe IV"})
    assert warning is not None
    assert "3" in warning
    assert "2 camada(s)" in warning


def test_two_layers_posterior_is_fine() -> None:
    assert validate_minimum_layer_count(_layers(2), {"tooth": "36", "cavityClass": "Classe II"}) is None


def test_three_layers_anterior_aesthetic_is_fine(anterior_context) -> None:
    assert validate_minimum_layer_count(_layers(3), anterior_context) is None


def test_single_layer_posterior_warns(posterior_context) -> None:
    warning = validate_minimum_layer_count(_layers(1), posterior_context)
    assert warning is not None
    assert "mínimo 2" in warning


def test_anterior_non_aesthetic_uses_default_minimum() -> None:
    assert validate_minimum_layer_count(_layers(2), {"tooth": "11", "cavityClass": "Classe I"}) is None


def test_empty_layers_warn(anterior_context) -> None:
    assert validate_minimum_layer_count([], anterior_context) is not None


def test_none_layers_never_warn(anterior_context) -> None:
    assert validate_minimum_layer_count(None, anterior_context) is None


def test_snake_case_context_mapping() -> None:
    warning = validate_minimum_layer_count(_layers(2), {"tooth": 21, "cavity_class": "Faceta Direta"})
    assert warning is not None
