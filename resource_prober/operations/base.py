"""
Base types for the operation system.

An operation is the pluggable unit of work whose success or failure the
prober observes at each size step. Operations report through a tagged
OperationResult (Success | Failure(reason)); exceptions raised inside
execute() are converted by run() and never cross the operation boundary.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from ..dataset.sinks import DatasetSink

from ..core.errors import OperationFailure
from ..core.types import Outcome


logger = logging.getLogger(__name__)


@dataclass
class OperationContext:
    """
    Everything an operation needs besides the dataset.

    Attributes:
        sink: Storage sink for intermediate files
        work_dir: Directory for intermediate files
        iteration_index: Index of the iteration being run (used in file names)
        workers: Worker pool size for the parallel-chunked variant
        chunk_timeout_sec: Wait budget for chunk workers (None waits indefinitely)
        keep_files: Leave intermediate files on disk
    """
    sink: 'DatasetSink'
    work_dir: Path
    iteration_index: int = 0
    workers: int = 1
    chunk_timeout_sec: Optional[float] = None
    keep_files: bool = False

    def data_path(self, stem: str) -> Path:
        """Path of an intermediate file for this iteration"""
        return Path(self.work_dir) / f"{stem}_{self.iteration_index}{self.sink.suffix}"

    def discard(self, path: Path) -> None:
        """Delete an intermediate file unless keep_files is set"""
        if self.keep_files:
            return
        try:
            Path(path).unlink()
        except FileNotFoundError:
            pass


@dataclass(frozen=True)
class OperationResult:
    """
    Tagged result of one operation call.

    Attributes:
        outcome: SUCCESS or FAILURE
        byte_size: Bytes processed, if the operation knows better than the
                   in-memory frame size (e.g. file size on disk)
        details: Operation-specific statistics for reporting
        error: Failure reason
        exception: The exception behind a failure, if any
    """
    outcome: Outcome
    byte_size: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    exception: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @classmethod
    def success(cls, byte_size: Optional[int] = None, **details: Any) -> "OperationResult":
        return cls(outcome=Outcome.SUCCESS, byte_size=byte_size, details=details)

    @classmethod
    def failure(cls, reason: str, exception: Optional[BaseException] = None) -> "OperationResult":
        return cls(outcome=Outcome.FAILURE, error=reason, exception=exception)


def describe_error(exc: BaseException) -> str:
    """One-line description of an exception"""
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


class Operation:
    """
    Base class for operations.

    Subclasses set ``name`` and implement execute(). Example:

        class CountRows(Operation):
            name = "count"

            def execute(self, dataset, context):
                return OperationResult.success(rows=len(dataset))
    """

    name: str = ""

    def execute(self, dataset: pd.DataFrame, context: OperationContext) -> OperationResult:
        """
        Do the work. May raise; run() converts exceptions to Failure results.
        """
        raise NotImplementedError

    def run(self, dataset: pd.DataFrame, context: OperationContext) -> OperationResult:
        """
        Execute and convert any exception into a Failure result.

        Returns:
            OperationResult, never raises for errors inside execute()
        """
        try:
            result = self.execute(dataset, context)
        except Exception as e:
            logger.debug(f"Operation '{self.name}' raised", exc_info=True)
            return OperationResult.failure(describe_error(e), exception=e)
        if not isinstance(result, OperationResult):
            return OperationResult.failure(
                f"Operation '{self.name}' returned {type(result).__name__}, expected OperationResult",
                exception=OperationFailure("invalid operation result"),
            )
        return result
