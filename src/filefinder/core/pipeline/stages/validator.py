from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper between untrusted configuration sources (persisted
JSON, CLI overrides) and the search engine. Handles type coercion, default
value injection and choice validation, collecting a warning for every value
it had to correct.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from filefinder.domain.config import get_default_config
from filefinder.domain.constants import MATCH_MODES, MATCHER_STRATEGIES

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and
                                          a list of warnings.

    Raises:
        TypeError: In strict mode, when a field has the wrong type.
        ValueError: In strict mode, when a field has an invalid value.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        _reject(msg, "Using defaults.", warnings, strict)
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = {**defaults, **config}

    string_fields = ["root_path", "error_log_path"]
    bool_fields = ["save_error_log"]
    choice_fields = {
        "match_mode": MATCH_MODES,
        "matcher_strategy": MATCHER_STRATEGIES,
    }

    for field in string_fields:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    # The pattern may legitimately be empty (matches only empty names)
    merged["pattern"] = _as_pattern(merged.get("pattern"), defaults["pattern"], warnings, strict)

    for field in bool_fields:
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)

    for field, choices in choice_fields.items():
        merged[field] = _as_choice(
            merged.get(field), defaults[field], choices, field, warnings, strict
        )

    merged["workers"] = _as_worker_count(merged.get("workers"), warnings, strict)

    return merged, warnings

# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

_TRUE_WORDS = frozenset({"true", "1", "yes", "y", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "n", "off"})


def _reject(
        msg: str,
        action: str,
        warnings: List[str],
        strict: bool,
        error: type = TypeError,
) -> None:
    """Raise in strict mode; otherwise record the correction taken."""
    if strict:
        raise error(msg)
    warnings.append(f"{msg} {action}")


def _type_msg(field: str, expected: str, value: Any) -> str:
    return f"Invalid field '{field}': expected {expected}, received {type(value).__name__}."


def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Path-like text field; blank values select the default."""
    if value is None:
        return fallback
    if not isinstance(value, str):
        _reject(_type_msg(field, "str", value), "Using default.", warnings, strict)
        return fallback
    return value.strip() or fallback


def _as_pattern(value: Any, fallback: str, warnings: List[str], strict: bool) -> str:
    """Accept any string verbatim, including the empty pattern."""
    if value is None:
        return fallback
    if not isinstance(value, str):
        _reject(_type_msg("pattern", "str", value), "Using default.", warnings, strict)
        return fallback
    return value


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Switch field; numbers 0/1 and yes/no words are converted outside strict mode."""
    if value is None:
        return fallback
    if isinstance(value, bool):
        return value

    converted: Optional[bool] = None
    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            converted = bool(value)
        elif isinstance(value, str):
            word = value.strip().lower()
            if word in _TRUE_WORDS:
                converted = True
            elif word in _FALSE_WORDS:
                converted = False

    if converted is not None:
        warnings.append(f"Field '{field}' converted from {value!r} to {converted}.")
        return converted

    _reject(_type_msg(field, "bool", value), "Using default.", warnings, strict)
    return fallback


def _as_choice(
        value: Any,
        fallback: str,
        choices: List[str],
        field: str,
        warnings: List[str],
        strict: bool
) -> str:
    """Ensure a value is one of the allowed identifiers (case-insensitive)."""
    if value is None:
        return fallback
    if isinstance(value, str) and value.strip().lower() in choices:
        return value.strip().lower()

    _reject(
        f"Invalid field '{field}': {value!r} is not one of {choices}.",
        f"Using '{fallback}'.", warnings, strict, ValueError,
    )
    return fallback


def _as_worker_count(value: Any, warnings: List[str], strict: bool) -> Optional[int]:
    """Normalize the worker count; None selects the host parallelism."""
    if value is None:
        return None

    count: Optional[int] = None
    if isinstance(value, int) and not isinstance(value, bool):
        count = value
    elif isinstance(value, str) and not strict:
        text = value.strip()
        if text.lower() in ("", "auto"):
            return None
        if text.lstrip("-").isdigit():
            count = int(text)
            warnings.append(f"Field 'workers' converted from {value!r} to {count}.")

    if count is None:
        _reject(_type_msg("workers", "positive int", value),
                "Using host parallelism.", warnings, strict)
        return None

    if count < 1:
        _reject(f"Invalid field 'workers': {count} is below the minimum of 1.",
                "Using 1.", warnings, strict, ValueError)
        return 1

    return count
