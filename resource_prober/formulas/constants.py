"""
Probe constants and defaults.

Default escalation starts at 1M rows, grows by 80% per step and stops after 15 steps.
"""

import math

# Memory units
MiB = 1024 ** 2
GiB = 1024 ** 3

# Fraction of the largest successful size considered safe to run routinely
SAFE_LIMIT_FACTOR = 0.8

# Fraction of host RAM recommended as a working ceiling for a single dataset
RAM_HEADROOM_FACTOR = 0.6


class ProbeDefaults:
    """Default escalation parameters"""

    START_ROWS = 1_000_000
    MAX_ROWS = 100_000_000
    GROWTH_MULTIPLIER = 1.8

    # Safety limit independent of max_rows
    MAX_ITERATIONS = 15

    SINK_FORMAT = "csv"


SINK_FORMATS = ("csv", "parquet")


def to_mib(x_bytes: float) -> float:
    """Convert bytes to MiB"""
    return float(x_bytes) / MiB


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values"""
    return int(math.floor(float(x) + 0.5))


def format_bytes(n_bytes: float) -> str:
    """Human readable byte count (binary units)"""
    units = ["B", "KB", "MB", "GB", "TB"]
    value = float(n_bytes)
    i = 0
    while abs(value) >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{value:.2f} {units[i]}"
