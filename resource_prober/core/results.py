"""
Probe result types.

A ProbeReport is an append-only arena of TestIteration records: append()
returns a new report and never mutates the existing one, so a report can be
handed to callbacks mid-run without being changed underneath them.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .types import HaltReason, Outcome
from ..formulas.constants import SAFE_LIMIT_FACTOR, round_half_up


@dataclass(frozen=True)
class TestIteration:
    """
    Measurements for one size step.

    Attributes:
        iteration_index: 0-based position in the run
        row_count: Rows generated for this step
        byte_size: Bytes processed (file size or in-memory frame size)
        elapsed_seconds: Wall-clock time of generation + operation
        throughput_mb_s: (byte_size / MiB) / elapsed_seconds, None if not measurable
        memory_delta_bytes: Process memory after - before, None if unavailable
        outcome: SUCCESS or FAILURE
        error_message: Failure reason
        error_kind: "generation", "operation" or "timeout" for failures
        details: Operation-reported statistics
    """
    __test__ = False  # not a pytest test class

    iteration_index: int
    row_count: int
    byte_size: int
    elapsed_seconds: float
    throughput_mb_s: Optional[float]
    memory_delta_bytes: Optional[int]
    outcome: Outcome
    error_message: Optional[str] = None
    error_kind: Optional[str] = None
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Read-only view over a private copy
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    def __str__(self) -> str:
        status = "OK" if self.succeeded else f"FAILED ({self.error_message})"
        return (
            f"#{self.iteration_index}: rows={self.row_count:,}, "
            f"time={self.elapsed_seconds:.2f}s, {status}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "iteration_index": self.iteration_index,
            "row_count": self.row_count,
            "byte_size": self.byte_size,
            "elapsed_seconds": self.elapsed_seconds,
            "throughput_mb_s": self.throughput_mb_s,
            "memory_delta_bytes": self.memory_delta_bytes,
            "outcome": self.outcome.value,
            "error_message": self.error_message,
            "error_kind": self.error_kind,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class ProbeReport:
    """
    Ordered iterations of one probe run plus derived summary fields.

    Attributes:
        iterations: Recorded iterations, in run order
        halt_reason: Why the loop stopped (None until finalized)
        operation: Name of the probed operation
    """
    iterations: Tuple[TestIteration, ...] = ()
    halt_reason: Optional[HaltReason] = None
    operation: Optional[str] = None

    def append(self, iteration: TestIteration) -> "ProbeReport":
        """Return a new report with ``iteration`` added at the end"""
        if self.finalized:
            raise ValueError("Cannot append to a finalized report")
        return replace(self, iterations=self.iterations + (iteration,))

    def finalize(self, halt_reason: HaltReason) -> "ProbeReport":
        """Return a finalized copy recording why the loop stopped"""
        return replace(self, halt_reason=halt_reason)

    @property
    def finalized(self) -> bool:
        return self.halt_reason is not None

    @property
    def successes(self) -> Tuple[TestIteration, ...]:
        return tuple(it for it in self.iterations if it.succeeded)

    @property
    def first_failure(self) -> Optional[TestIteration]:
        for it in self.iterations:
            if not it.succeeded:
                return it
        return None

    @property
    def max_successful_row_count(self) -> int:
        """Largest row_count among successful iterations (0 if none)"""
        return max((it.row_count for it in self.successes), default=0)

    @property
    def breaking_point_row_count(self) -> Optional[int]:
        """row_count of the first failed iteration, None if nothing failed"""
        failure = self.first_failure
        return failure.row_count if failure is not None else None

    @property
    def breaking_point_found(self) -> bool:
        return self.first_failure is not None

    @property
    def recommended_safe_limit(self) -> int:
        """80% of the largest successful row_count, rounded"""
        return round_half_up(SAFE_LIMIT_FACTOR * self.max_successful_row_count)

    def __len__(self) -> int:
        return len(self.iterations)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "operation": self.operation,
            "halt_reason": self.halt_reason.value if self.halt_reason else None,
            "max_successful_row_count": self.max_successful_row_count,
            "breaking_point_row_count": self.breaking_point_row_count,
            "recommended_safe_limit": self.recommended_safe_limit,
            "iterations": [it.to_dict() for it in self.iterations],
        }
