"""
Per-iteration measurement.

Memory is read through an injected ``current_memory_usage() -> int``
accessor (process RSS via psutil by default). A missing or failing accessor
never aborts a run: the memory fields of the affected iteration become None.
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import psutil

from ..core.errors import MeasurementUnavailable
from ..core.results import TestIteration
from ..core.types import Outcome
from ..formulas.constants import format_bytes, to_mib


logger = logging.getLogger(__name__)

MemoryAccessor = Callable[[], int]
Clock = Callable[[], float]


def process_memory_usage() -> int:
    """Resident set size of the current process, in bytes"""
    return psutil.Process().memory_info().rss


@dataclass(frozen=True)
class HostInfo:
    """Host memory and CPU information"""
    total_memory_bytes: int
    available_memory_bytes: int
    cpu_count: int

    def __str__(self) -> str:
        return (
            f"RAM total={format_bytes(self.total_memory_bytes)}, "
            f"available={format_bytes(self.available_memory_bytes)}, "
            f"CPU cores={self.cpu_count}"
        )


def get_host_info() -> Optional[HostInfo]:
    """Read host information; None if the platform does not expose it"""
    try:
        vm = psutil.virtual_memory()
    except (OSError, psutil.Error) as e:
        logger.warning(f"Host memory information unavailable: {e}")
        return None
    return HostInfo(
        total_memory_bytes=int(vm.total),
        available_memory_bytes=int(vm.available),
        cpu_count=psutil.cpu_count(logical=True) or os.cpu_count() or 1,
    )


def throughput_mb_s(byte_size: int, elapsed_seconds: float) -> Optional[float]:
    """(byte_size / MiB) / elapsed_seconds; None when elapsed is not positive"""
    if elapsed_seconds is None or elapsed_seconds <= 0:
        return None
    return to_mib(byte_size) / elapsed_seconds


class MetricsRecorder:
    """
    Samples time and memory and turns them into TestIteration records.

    Args:
        memory_accessor: ``() -> bytes``; None means the host provides none
        clock: Monotonic clock in seconds
    """

    def __init__(
        self,
        memory_accessor: Optional[MemoryAccessor] = process_memory_usage,
        clock: Clock = time.perf_counter,
    ):
        self.memory_accessor = memory_accessor
        self.clock = clock
        self._warned = False

    def sample_memory(self) -> int:
        """
        Read current memory usage.

        Raises:
            MeasurementUnavailable: If no accessor is configured or it fails
        """
        if self.memory_accessor is None:
            raise MeasurementUnavailable("No memory accessor provided by the host")
        try:
            return int(self.memory_accessor())
        except Exception as e:
            raise MeasurementUnavailable(f"Memory accessor failed: {e}") from e

    def try_sample_memory(self) -> Optional[int]:
        """sample_memory(), degrading to None"""
        try:
            return self.sample_memory()
        except MeasurementUnavailable as e:
            if not self._warned:
                logger.warning(f"{e}; memory fields will be recorded as None")
                self._warned = True
            else:
                logger.debug(str(e))
            return None

    def now(self) -> float:
        return self.clock()

    def record(
        self,
        iteration_index: int,
        row_count: int,
        byte_size: int,
        elapsed_seconds: float,
        memory_before: Optional[int],
        memory_after: Optional[int],
        outcome: Outcome,
        error_message: Optional[str] = None,
        error_kind: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> TestIteration:
        """Build the TestIteration for one step"""
        if memory_before is None or memory_after is None:
            memory_delta = None
        else:
            memory_delta = memory_after - memory_before

        return TestIteration(
            iteration_index=iteration_index,
            row_count=row_count,
            byte_size=int(byte_size),
            elapsed_seconds=elapsed_seconds,
            throughput_mb_s=throughput_mb_s(byte_size, elapsed_seconds),
            memory_delta_bytes=memory_delta,
            outcome=outcome,
            error_message=error_message,
            error_kind=error_kind,
            details=dict(details or {}),
        )
