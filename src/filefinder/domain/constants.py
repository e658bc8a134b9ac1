from __future__ import annotations

"""
Domain Constants.

Centralizes application-wide constants: configuration schema versioning,
matching policy identifiers, and the default artifact names used by the
search pipeline and its interfaces.
"""

from typing import List

CURRENT_CONFIG_VERSION = "1.0.0"

# Matching policies for patterns without wildcard characters
MATCH_MODE_EXACT = "exact"
MATCH_MODE_SUBSTRING = "substring"
MATCH_MODES: List[str] = [MATCH_MODE_EXACT, MATCH_MODE_SUBSTRING]

# Interchangeable matcher implementations (identical accept/reject behavior)
STRATEGY_BACKTRACK = "backtrack"
STRATEGY_REGEX = "regex"
MATCHER_STRATEGIES: List[str] = [STRATEGY_BACKTRACK, STRATEGY_REGEX]

DEFAULT_PATTERN = "*"
DEFAULT_ERROR_LOG_NAME = "filefinder_errors.txt"
WORKER_THREAD_PREFIX = "filefinder-worker"
