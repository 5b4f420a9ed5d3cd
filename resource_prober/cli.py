#!/usr/bin/env python3
"""
Resource Prober - CLI Interface

This module provides the `probe` command. It handles argument parsing and
maps CLI flags onto ProbeConfig (optionally layered over a YAML/JSON config
file), runs the escalation loop and prints the summary.

Exit codes:
- 0: the loop reached max_rows / max_iterations without a failure
- 1: a breaking point was found
- 2: configuration error (nothing was run)
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config.loader import dict_to_config, load_config
from .core.errors import ConfigurationError
from .core.prober import ResourceProber
from .core.types import OperationKind
from .formulas.constants import SINK_FORMATS
from .metrics.recorder import get_host_info
from .reporting.reporter import Reporter

EXIT_OK = 0
EXIT_BREAKING_POINT = 1
EXIT_CONFIG_ERROR = 2


def parse_bool(s: Optional[str]) -> bool:
    """Parse boolean from string (for argparse)"""
    if s is None:
        return False
    return str(s).lower() in {"1", "y", "yes", "t", "true", "on"}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="probe",
        description="Progressive resource-limit prober: find the dataset size at which an operation breaks",
    )

    # Escalation
    p.add_argument("--operation", type=str, default=None,
                   choices=[kind.value for kind in OperationKind],
                   help="Operation run against each generated dataset (default: write)")
    p.add_argument("--start-rows", type=int, default=None, help="Rows in the first iteration")
    p.add_argument("--max-rows", type=int, default=None, help="Largest row count to generate")
    p.add_argument("--multiplier", type=float, default=None, dest="growth_multiplier",
                   help="Row count growth factor per iteration (> 1.0)")
    p.add_argument("--max-iterations", type=int, default=None, help="Safety limit on iterations")
    p.add_argument("--seed", type=int, default=None, help="Dataset generator seed")

    # Parallel-chunked variant
    p.add_argument("--workers", type=int, default=None, help="Worker pool size for --operation=parallel")
    p.add_argument("--chunk-timeout", type=float, default=None, dest="chunk_timeout_sec",
                   help="Seconds to wait for chunk workers")

    # Budget
    p.add_argument("--iteration-timeout", type=float, default=None, dest="iteration_timeout_sec",
                   help="Per-iteration time budget in seconds (exceeding it is a failure)")
    p.add_argument("--pause", type=float, default=None, dest="pause_sec",
                   help="Seconds to sleep between iterations")

    # Storage
    p.add_argument("--format", type=str, default=None, dest="sink_format", choices=list(SINK_FORMATS),
                   help="Intermediate file format")
    p.add_argument("--work-dir", type=str, default=None, help="Directory for intermediate files")
    p.add_argument("--keep-files", type=parse_bool, nargs="?", const=True, default=None,
                   help="Keep intermediate files")
    p.add_argument("--generation-chunk-rows", type=int, default=None,
                   help="Generate datasets in explicit chunks of this many rows")

    # Input / output
    p.add_argument("--config", type=str, default=None, help="YAML/JSON config file (flags override it)")
    p.add_argument("--output-json", type=str, default=None, help="Write the summary as JSON to this path")

    # Logging
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Only warnings and errors")

    return p


CONFIG_FIELDS = (
    "operation",
    "start_rows",
    "max_rows",
    "growth_multiplier",
    "max_iterations",
    "seed",
    "workers",
    "chunk_timeout_sec",
    "iteration_timeout_sec",
    "pause_sec",
    "sink_format",
    "work_dir",
    "keep_files",
    "generation_chunk_rows",
)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    overrides = {name: getattr(args, name) for name in CONFIG_FIELDS}

    try:
        if args.config:
            config = load_config(args.config, **overrides)
        else:
            config = dict_to_config({}, **overrides)
        prober = ResourceProber(config)
    except (ConfigurationError, OSError) as e:
        print(f"[ERROR] Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except RuntimeError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    report = prober.run()

    reporter = Reporter()
    summary = reporter.summarize(report, host_info=get_host_info())
    reporter.emit(summary)

    if args.output_json:
        with open(args.output_json, "w", encoding="utf-8") as f:
            json.dump(summary.to_dict(), f, indent=2, default=str)
        print(f"\nSummary written to {args.output_json}")

    return EXIT_BREAKING_POINT if report.breaking_point_found else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
