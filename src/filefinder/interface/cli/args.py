from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema, including help messages,
argument types, and defaults. Provides logic to translate raw argparse
namespaces into domain-compatible configuration overrides.
"""

import argparse
from typing import Any, Dict

from filefinder.domain.constants import (
    MATCH_MODE_EXACT,
    MATCH_MODE_SUBSTRING,
    MATCHER_STRATEGIES,
)
from filefinder.infra.logging.config import LEVEL_NAMES

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the filefinder CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="filefinder",
        description=(
            "Recursively search a directory tree for files whose names match a "
            "glob pattern, using a pool of worker threads."
        ),
        epilog="pattern supports '*' and '?' (for example: *.txt, data_??.csv).",
    )

    # --- Search Target ---
    p.add_argument(
        "root_path",
        nargs="?",
        default=None,
        help="Directory where the search starts (default: last session or cwd).",
    )
    p.add_argument(
        "pattern",
        nargs="?",
        default=None,
        help="Case-insensitive glob pattern matched against whole file names.",
    )
    p.add_argument(
        "num_threads",
        nargs="?",
        type=int,
        default=None,
        help="Number of worker threads (default: hardware parallelism).",
    )
    p.add_argument(
        "-j", "--workers",
        dest="workers",
        type=int,
        default=None,
        help="Number of worker threads; overrides NUM_THREADS.",
    )

    # --- Matching Policy ---
    mode = p.add_mutually_exclusive_group()
    mode.add_argument(
        "--substring",
        action="store_true",
        help="Treat a pattern without wildcards as a substring of the name.",
    )
    mode.add_argument(
        "--exact",
        action="store_true",
        help="Require patterns without wildcards to match the whole name (default).",
    )
    p.add_argument(
        "--strategy",
        dest="matcher_strategy",
        choices=MATCHER_STRATEGIES,
        default=None,
        help="Matcher implementation. Both accept exactly the same names.",
    )

    # --- Output Selection ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the full search result as JSON instead of streaming paths.",
    )
    p.add_argument(
        "--count",
        action="store_true",
        help="Only print the number of matching files.",
    )
    p.add_argument(
        "--error-log",
        dest="error_log_path",
        default=None,
        help="Write traversal warnings to this report file.",
    )

    # --- Diagnostics ---
    p.add_argument(
        "--log-file",
        dest="log_file",
        nargs="?",
        const="",
        default=None,
        help="Also write diagnostics to a rotating log file (default location if no path).",
    )
    p.add_argument(
        "--log-level",
        dest="log_level",
        type=str.upper,
        choices=LEVEL_NAMES,
        default="WARNING",
        help="Minimum severity of diagnostics written to stderr.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    # --- Configuration Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the persisted last session and start from built-in defaults.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Persist the effective configuration as the new last session.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a domain configuration dictionary.

    Values left as None are not meant to override anything; the merge step
    in the application controller skips them.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    overrides["root_path"] = args.root_path
    overrides["pattern"] = args.pattern
    overrides["workers"] = args.workers if args.workers is not None else args.num_threads
    overrides["matcher_strategy"] = args.matcher_strategy

    if args.substring:
        overrides["match_mode"] = MATCH_MODE_SUBSTRING
    elif args.exact:
        overrides["match_mode"] = MATCH_MODE_EXACT

    if args.error_log_path:
        overrides["error_log_path"] = args.error_log_path
        overrides["save_error_log"] = True

    return overrides
