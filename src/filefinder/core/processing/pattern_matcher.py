from __future__ import annotations

"""
Glob Pattern Matching Engine.

Matches file names against shell-style patterns supporting '*' (any run of
characters, including none) and '?' (exactly one character). Every other
character is literal and compared case-insensitively, with the same
character equivalences as re.IGNORECASE. Matching is anchored to the whole
name.

Two interchangeable strategies are provided: a linear two-pointer
backtracking matcher and a translation into an anchored regular expression.
Both compare characters under the same rules and therefore accept exactly
the same names.
"""

import functools
import re
from enum import Enum

from filefinder.domain.constants import (
    MATCH_MODE_EXACT,
    MATCH_MODE_SUBSTRING,
    MATCHER_STRATEGIES,
    STRATEGY_BACKTRACK,
    STRATEGY_REGEX,
)

WILDCARD_ANY = "*"
WILDCARD_ONE = "?"


class MatchMode(str, Enum):
    """Policy applied to patterns that contain no wildcard characters."""
    EXACT = MATCH_MODE_EXACT
    SUBSTRING = MATCH_MODE_SUBSTRING

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def matches(filename: str, pattern: str) -> bool:
    """
    Test a filename against a glob pattern using the backtracking strategy.

    Args:
        filename: Base name of the file (no directory component).
        pattern: Glob pattern with optional '*' and '?' wildcards.

    Returns:
        bool: True if the whole filename satisfies the pattern.
    """
    return _backtrack_match(filename, pattern)


def regex_matches(filename: str, pattern: str) -> bool:
    """
    Test a filename against a glob pattern using the regex strategy.

    Args:
        filename: Base name of the file.
        pattern: Glob pattern with optional '*' and '?' wildcards.

    Returns:
        bool: True if the whole filename satisfies the pattern.
    """
    return wildcard_to_regex(pattern).fullmatch(filename) is not None


def wildcard_to_regex(pattern: str) -> re.Pattern:
    """
    Translate a glob pattern into an anchored regular expression.

    '*' becomes '.*', '?' becomes '.', and every other character is escaped.
    The expression is anchored at both ends and compiled with IGNORECASE and
    DOTALL, so literals match in any case and the wildcards also consume
    newlines that may appear in names.

    Args:
        pattern: Glob pattern to translate.

    Returns:
        re.Pattern: Compiled expression, intended for use with fullmatch().
    """
    parts = [r"\A"]
    for ch in pattern:
        if ch == WILDCARD_ANY:
            parts.append(".*")
        elif ch == WILDCARD_ONE:
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    parts.append(r"\Z")
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def has_wildcards(pattern: str) -> bool:
    """Return True if the pattern uses '*' or '?'."""
    return WILDCARD_ANY in pattern or WILDCARD_ONE in pattern


# -----------------------------------------------------------------------------
# MATCHER OBJECT
# -----------------------------------------------------------------------------

class PatternMatcher:
    """
    Reusable matcher bound to one pattern, policy and strategy.

    Expressions needed by the regex strategy or the substring policy are
    compiled once, so the per-file cost inside the workers is limited to the
    match itself.
    Instances are immutable and safe to share between threads.
    """

    def __init__(
            self,
            pattern: str,
            mode: MatchMode | str = MatchMode.EXACT,
            strategy: str = STRATEGY_BACKTRACK,
    ) -> None:
        try:
            self.mode = MatchMode(mode)
        except ValueError:
            raise ValueError(f"Unknown match mode: {mode!r}") from None

        if strategy not in MATCHER_STRATEGIES:
            raise ValueError(f"Unknown matcher strategy: {strategy!r}")

        self.pattern = pattern
        self.strategy = strategy
        self._substring = None
        self._regex = None
        if self.mode is MatchMode.SUBSTRING and not has_wildcards(pattern):
            self._substring = re.compile(re.escape(pattern), re.IGNORECASE)
        elif strategy == STRATEGY_REGEX:
            self._regex = wildcard_to_regex(pattern)

    def matches(self, filename: str) -> bool:
        if self._substring is not None:
            return self._substring.search(filename) is not None
        if self._regex is not None:
            return self._regex.fullmatch(filename) is not None
        return _backtrack_match(filename, self.pattern)

    __call__ = matches

    def __repr__(self) -> str:
        return (
            f"PatternMatcher(pattern={self.pattern!r}, mode={self.mode.value!r}, "
            f"strategy={self.strategy!r})"
        )

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _backtrack_match(name: str, pattern: str) -> bool:
    """Two-pointer glob match with a single '*' restart point."""
    n_idx = 0
    p_idx = 0
    star_idx = -1
    restart_idx = 0

    while n_idx < len(name):
        if p_idx < len(pattern) and pattern[p_idx] == WILDCARD_ANY:
            star_idx = p_idx
            restart_idx = n_idx
            p_idx += 1
        elif p_idx < len(pattern) and (
                pattern[p_idx] == WILDCARD_ONE or _same_char(pattern[p_idx], name[n_idx])
        ):
            n_idx += 1
            p_idx += 1
        elif star_idx != -1:
            # Let the last '*' absorb one more character and retry
            p_idx = star_idx + 1
            restart_idx += 1
            n_idx = restart_idx
        else:
            return False

    while p_idx < len(pattern) and pattern[p_idx] == WILDCARD_ANY:
        p_idx += 1
    return p_idx == len(pattern)


@functools.lru_cache(maxsize=4096)
def _same_char(pattern_char: str, name_char: str) -> bool:
    """Case-insensitive equality of two characters under re.IGNORECASE rules."""
    if pattern_char == name_char:
        return True
    return re.fullmatch(re.escape(pattern_char), name_char, re.IGNORECASE) is not None
