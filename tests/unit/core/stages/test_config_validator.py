from __future__ import annotations

"""
Unit tests for the Configuration Validation Service.

Verifies type coercion, fallback injection and the strict mode contract.
"""

from typing import Any, Dict

import pytest

from filefinder.core.pipeline.stages.validator import validate_config


def test_valid_config_passes_unchanged(mock_config_dict: Dict[str, Any]) -> None:
    clean, warnings = validate_config(mock_config_dict)

    assert warnings == []
    assert clean == mock_config_dict


def test_non_dict_input_returns_defaults() -> None:
    clean, warnings = validate_config(["not", "a", "dict"])

    assert clean["pattern"] == "*"
    assert clean["workers"] is None
    assert len(warnings) == 1
    assert "Invalid config type" in warnings[0]


def test_non_dict_input_strict_raises() -> None:
    with pytest.raises(TypeError):
        validate_config("config", strict=True)


def test_missing_keys_are_filled_from_defaults() -> None:
    clean, warnings = validate_config({"pattern": "*.log"})

    assert warnings == []
    assert clean["pattern"] == "*.log"
    assert clean["match_mode"] == "exact"
    assert clean["matcher_strategy"] == "backtrack"
    assert clean["save_error_log"] is False


def test_empty_pattern_is_kept() -> None:
    clean, warnings = validate_config({"pattern": ""})

    assert clean["pattern"] == ""
    assert warnings == []


def test_bad_pattern_type_falls_back() -> None:
    clean, warnings = validate_config({"pattern": 42})

    assert clean["pattern"] == "*"
    assert any("pattern" in w for w in warnings)


@pytest.mark.parametrize(
    "raw, expected",
    [("yes", True), ("OFF", False), (1, True), (0, False)],
)
def test_bool_coercion(raw: Any, expected: bool) -> None:
    clean, warnings = validate_config({"save_error_log": raw})

    assert clean["save_error_log"] is expected
    assert len(warnings) == 1


def test_bool_strict_rejects_strings() -> None:
    with pytest.raises(TypeError):
        validate_config({"save_error_log": "yes"}, strict=True)


def test_choice_fields_are_case_insensitive() -> None:
    clean, warnings = validate_config({"match_mode": "SUBSTRING", "matcher_strategy": " Regex "})

    assert clean["match_mode"] == "substring"
    assert clean["matcher_strategy"] == "regex"
    assert warnings == []


def test_unknown_choice_falls_back_or_raises() -> None:
    clean, warnings = validate_config({"match_mode": "fuzzy"})
    assert clean["match_mode"] == "exact"
    assert len(warnings) == 1

    with pytest.raises(ValueError):
        validate_config({"matcher_strategy": "dfa"}, strict=True)


@pytest.mark.parametrize(
    "raw, expected, n_warnings",
    [
        (None, None, 0),
        (8, 8, 0),
        ("auto", None, 0),
        ("4", 4, 1),
        ("many", None, 1),
        (True, None, 1),
        (0, 1, 1),
        (-3, 1, 1),
    ],
)
def test_worker_count_normalization(raw: Any, expected: Any, n_warnings: int) -> None:
    clean, warnings = validate_config({"workers": raw})

    assert clean["workers"] == expected
    assert len(warnings) == n_warnings


def test_worker_count_strict_mode() -> None:
    with pytest.raises(ValueError):
        validate_config({"workers": 0}, strict=True)
    with pytest.raises(TypeError):
        validate_config({"workers": "4"}, strict=True)


def test_blank_strings_fall_back_to_defaults() -> None:
    clean, _ = validate_config({"error_log_path": "   "})
    assert clean["error_log_path"] == "filefinder_errors.txt"
