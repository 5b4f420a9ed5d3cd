"""
Configuration validation.
"""

import math
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.config import ProbeConfig

from ..core.errors import ConfigurationError
from ..core.types import OperationKind
from ..formulas.constants import SINK_FORMATS


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_config(config: 'ProbeConfig') -> None:
    """
    Validate probe configuration.

    Args:
        config: Configuration to validate

    Raises:
        ConfigurationError: If configuration is invalid
    """
    # Escalation
    if not _is_int(config.start_rows) or config.start_rows < 1:
        raise ConfigurationError(f"start_rows must be an integer >= 1, got {config.start_rows!r}")
    if not _is_int(config.max_rows) or config.max_rows < config.start_rows:
        raise ConfigurationError(
            f"max_rows must be an integer >= start_rows ({config.start_rows}), "
            f"got {config.max_rows!r}"
        )
    try:
        multiplier = float(config.growth_multiplier)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"growth_multiplier must be a number, got {config.growth_multiplier!r}"
        )
    if not math.isfinite(multiplier) or multiplier <= 1.0:
        raise ConfigurationError(
            f"growth_multiplier must be > 1.0 to guarantee termination, "
            f"got {config.growth_multiplier}"
        )
    if not _is_int(config.max_iterations) or config.max_iterations < 1:
        raise ConfigurationError(
            f"max_iterations must be an integer >= 1, got {config.max_iterations!r}"
        )
    if not isinstance(config.operation, OperationKind):
        raise ConfigurationError(f"operation must be an OperationKind, got {config.operation!r}")

    # Data
    if config.seed is not None and not _is_int(config.seed):
        raise ConfigurationError(f"seed must be an integer, got {config.seed!r}")
    if config.generation_chunk_rows is not None:
        if not _is_int(config.generation_chunk_rows) or config.generation_chunk_rows < 1:
            raise ConfigurationError(
                f"generation_chunk_rows must be a positive integer, "
                f"got {config.generation_chunk_rows!r}"
            )

    # Parallel-chunked variant
    if not _is_int(config.workers) or config.workers < 1:
        raise ConfigurationError(f"workers must be an integer >= 1, got {config.workers!r}")
    if config.chunk_timeout_sec is not None:
        if not _is_number(config.chunk_timeout_sec) or config.chunk_timeout_sec <= 0:
            raise ConfigurationError(
                f"chunk_timeout_sec must be a positive number, got {config.chunk_timeout_sec!r}"
            )

    # Budget
    if config.iteration_timeout_sec is not None:
        if not _is_number(config.iteration_timeout_sec) or config.iteration_timeout_sec <= 0:
            raise ConfigurationError(
                f"iteration_timeout_sec must be a positive number, got {config.iteration_timeout_sec!r}"
            )
    if not _is_number(config.pause_sec) or config.pause_sec < 0:
        raise ConfigurationError(f"pause_sec must be a number >= 0, got {config.pause_sec!r}")

    # Storage
    if config.sink_format not in SINK_FORMATS:
        raise ConfigurationError(
            f"Invalid sink_format '{config.sink_format}'. "
            f"Must be one of: {', '.join(SINK_FORMATS)}"
        )
    if config.work_dir is not None and not isinstance(config.work_dir, (str, os.PathLike)):
        raise ConfigurationError(f"work_dir must be a path, got {config.work_dir!r}")
    if not isinstance(config.keep_files, bool):
        raise ConfigurationError(f"keep_files must be true or false, got {config.keep_files!r}")
