#!/usr/bin/env python3
"""
Example script demonstrating the prober API.

Probes the parallel-chunked read path with a small escalation so it finishes
in seconds, then prints the summary.
"""

import logging

from resource_prober.core.config import ProbeConfig
from resource_prober.core.prober import ResourceProber
from resource_prober.metrics.recorder import get_host_info
from resource_prober.reporting import Reporter


def main():
    """Example: parallel-chunked reads of a parquet file, 10k -> 1M rows"""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # Configure the probe
    config = ProbeConfig(
        # Escalation
        start_rows=10_000,
        max_rows=1_000_000,
        growth_multiplier=2.0,
        max_iterations=10,
        operation="parallel",

        # Data
        seed=42,

        # Parallel-chunked variant
        workers=4,
        chunk_timeout_sec=60.0,

        # Storage
        sink_format="parquet",
    )

    prober = ResourceProber(config)

    # Print each step as it is recorded
    report = prober.run(on_iteration=lambda it: print(f"  {it}"))

    summary = Reporter().summarize(report, host_info=get_host_info())
    Reporter.emit(summary)

    # Access per-iteration details reported by the operation
    print("\nOperation details:")
    for it in report.iterations:
        workers = it.details.get("workers")
        read_seconds = it.details.get("read_seconds")
        if read_seconds is not None:
            print(f"  {it.row_count:>12,} rows: {workers} workers, read {read_seconds:.3f}s")


if __name__ == "__main__":
    main()
