"""
Configuration dataclass for a probe run.

ProbeConfig is designed to be produced by both:
1. Direct construction / the CLI (argparse flags)
2. load_config() (YAML/JSON files)

They must produce identical structures to avoid divergence.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Union

from .errors import ConfigurationError
from .types import OperationKind
from ..formulas.constants import ProbeDefaults


def _default_workers() -> int:
    return os.cpu_count() or 1


@dataclass
class ProbeConfig:
    """
    Configuration for a progressive resource-limit probe.

    Attributes:
        # Escalation
        start_rows: Row count of the first iteration
        max_rows: Largest row count that may be generated
        growth_multiplier: Factor applied to row_count between iterations (> 1.0)
        max_iterations: Safety limit on the number of iterations
        operation: Which operation to run against each dataset

        # Data
        seed: Generator seed (None for a fresh random stream)
        generation_chunk_rows: Generate in explicit chunks of this many rows
            and concatenate them; None generates in a single allocation

        # Parallel-chunked variant
        workers: Worker pool size (and number of chunks)
        chunk_timeout_sec: How long to wait for chunk workers

        # Budget
        iteration_timeout_sec: Per-iteration time budget; exceeding it is a failure
        pause_sec: Sleep between iterations

        # Storage
        sink_format: "csv" (row-oriented) or "parquet" (columnar)
        work_dir: Directory for intermediate files (temporary dir if None)
        keep_files: Keep intermediate files instead of deleting them per iteration
    """

    # Escalation
    start_rows: int = ProbeDefaults.START_ROWS
    max_rows: int = ProbeDefaults.MAX_ROWS
    growth_multiplier: float = ProbeDefaults.GROWTH_MULTIPLIER
    max_iterations: int = ProbeDefaults.MAX_ITERATIONS
    operation: Union[OperationKind, str] = OperationKind.WRITE

    # Data
    seed: Optional[int] = None
    generation_chunk_rows: Optional[int] = None

    # Parallel-chunked variant
    workers: int = field(default_factory=_default_workers)
    chunk_timeout_sec: Optional[float] = None

    # Budget
    iteration_timeout_sec: Optional[float] = None
    pause_sec: float = 0.0

    # Storage
    sink_format: str = ProbeDefaults.SINK_FORMAT
    work_dir: Optional[str] = None
    keep_files: bool = False

    def __post_init__(self):
        """Normalization after initialization"""
        try:
            self.operation = OperationKind.parse(self.operation)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        if isinstance(self.sink_format, str):
            self.sink_format = self.sink_format.lower()

    @property
    def is_parallel(self) -> bool:
        """Check if the parallel-chunked variant is selected"""
        return self.operation is OperationKind.PARALLEL_CHUNKED

    def validate_config(self) -> None:
        """Validate this configuration (raises ConfigurationError)"""
        from ..config.validator import validate_config
        validate_config(self)
