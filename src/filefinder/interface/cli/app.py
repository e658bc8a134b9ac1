from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of logging, loading and merging
of configuration sources (defaults, persistent storage, and CLI overrides),
search execution, and result rendering. Matching paths are streamed to stdout
as they are found; diagnostics go to stderr through the logging subsystem.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from filefinder.core.pipeline.components.sinks import StreamResultSink
from filefinder.core.pipeline.engine import resolve_worker_count, run_search
from filefinder.core.pipeline.stages.validator import validate_config
from filefinder.core.services.scanner import validate_search_root, write_warning_report
from filefinder.domain.config import get_default_config, load_config, save_config
from filefinder.domain.search_models import (
    InvalidSearchRootError,
    SearchResult,
    build_failure_result,
)
from filefinder.infra.fs import normalize_path
from filefinder.infra.logging import (
    LoggingConfig,
    configure_logging,
    get_default_log_path,
    get_logger,
)
from filefinder.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_ROOT = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 invalid root, 130 interrupted).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console stderr, optional rotating file)
    log_level = "DEBUG" if args.debug else args.log_level
    log_file = None
    if args.log_file is not None:
        log_file = args.log_file or get_default_log_path()
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=log_file))

    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 3. Resolve base configuration (Default vs Persistent state)
    base_conf = get_default_config() if args.use_defaults else load_config()

    # 4. Map and merge command-line overrides
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)

    # 5. Schema validation and normalization
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    if args.save_config and not save_config(clean_conf):
        print("ERROR: Could not persist configuration.", file=sys.stderr)
        return EXIT_FAILURE

    # 6. Pre-flight root verification (no worker is started on failure)
    root_path = clean_conf["root_path"]
    pattern = clean_conf["pattern"]
    try:
        validate_search_root(root_path)
    except InvalidSearchRootError as e:
        logger.error(str(e))
        if args.json_output:
            failure = build_failure_result(
                root_path, pattern, clean_conf["match_mode"],
                resolve_worker_count(clean_conf["workers"]), str(e)
            )
            print(json.dumps(asdict(failure), ensure_ascii=False, indent=2))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INVALID_ROOT

    # 7. Search execution phase
    stream_matches = not (args.json_output or args.count)
    try:
        result = run_search(
            root_path,
            pattern,
            workers=clean_conf["workers"],
            match_mode=clean_conf["match_mode"],
            strategy=clean_conf["matcher_strategy"],
            sink=StreamResultSink(sys.stdout) if stream_matches else None,
        )
    except KeyboardInterrupt:
        print("Search interrupted by user.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.critical(f"Search failed: {e}", exc_info=True)
        print(f"ERROR: Search failed: {e}", file=sys.stderr)
        return EXIT_FAILURE

    # 8. Warning report persistence
    if clean_conf["save_error_log"]:
        report_path = normalize_path(clean_conf["error_log_path"], os.getcwd())
        written = write_warning_report(report_path, result.warnings)
        if written:
            print(f"Warnings report: {written}", file=sys.stderr)

    # 9. Output rendering phase
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    elif args.count:
        print(result.match_count)
        _print_summary(result)
    else:
        _print_summary(result)

    return EXIT_OK if result.ok else EXIT_FAILURE

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys are merged; None means "not given on the command line".

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    keys_to_merge = [
        "root_path", "pattern", "workers", "match_mode",
        "matcher_strategy", "save_error_log", "error_log_path",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_summary(result: SearchResult) -> None:
    """
    Report the outcome of the search on stderr.

    stdout carries only match data, so that the output can be piped.

    Args:
        result: The search result to render.
    """
    if result.cancelled:
        print("Search cancelled before the tree was exhausted.", file=sys.stderr)

    if result.match_count == 0:
        print(
            f"No files matching '{result.pattern}' found in '{result.root_path}'.",
            file=sys.stderr,
        )

    if result.directories_failed:
        print(
            f"{result.directories_failed} directories could not be read.",
            file=sys.stderr,
        )

    logger.info(
        f"{result.match_count} matches in {result.directories_scanned} directories "
        f"({result.elapsed_seconds:.3f}s, {result.workers} workers)."
    )

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
