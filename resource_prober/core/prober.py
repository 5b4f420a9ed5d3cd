"""
Progressive resource-limit prober.

The ResourceProber coordinates:
- Config validation (before anything runs)
- Dataset generation at escalating sizes
- The selected operation, under an optional per-iteration time budget
- Measurement of time, memory and throughput per iteration
- Halting at the first failure (the breaking point) or a safety cap

State machine:
    Init     row_count = start_rows, iteration = 0
    Running  generate -> operation -> record; on success grow row_count
    Halted   failure recorded, iteration >= max_iterations,
             or the next row_count > max_rows (checked before generating)
"""

import gc
import logging
import shutil
import tempfile
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional

import pandas as pd

from .config import ProbeConfig
from .errors import GenerationFailure, OperationFailure
from .results import ProbeReport, TestIteration
from .types import HaltReason, Outcome
from ..dataset.generator import DatasetGenerator
from ..dataset.sinks import create_sink
from ..formulas.constants import format_bytes, round_half_up
from ..metrics.recorder import MemoryAccessor, MetricsRecorder, process_memory_usage
from ..operations import OPERATION_REGISTRY
from ..operations.base import Operation, OperationContext, OperationResult, describe_error


logger = logging.getLogger(__name__)

IterationCallback = Callable[[TestIteration], None]


@dataclass
class _Attempt:
    """What happened inside one iteration, before it becomes a TestIteration"""
    result: OperationResult
    byte_size: int
    elapsed_seconds: float
    memory_after: Optional[int]
    error_kind: Optional[str] = None


def next_row_count(row_count: int, multiplier: float) -> int:
    """Grow row_count by multiplier; always strictly increasing"""
    return max(round_half_up(row_count * multiplier), row_count + 1)


def frame_bytes(frame: pd.DataFrame) -> int:
    """In-memory size of a DataFrame including object payloads"""
    return int(frame.memory_usage(index=True, deep=True).sum())


class ResourceProber:
    """
    Runs the escalating-size test loop.

    Each prober instance owns its operation instance and recorder; nothing is
    shared across probers. Exceptions raised by generation or the operation
    are recorded as Failure iterations and never escape run(); only
    ConfigurationError (raised by the constructor) reaches the caller.

    Attributes:
        config: Probe configuration
        operation: The operation observed at each size step
        generator: Dataset generator
        recorder: Time/memory measurement
    """

    def __init__(
        self,
        config: ProbeConfig,
        memory_accessor: Optional[MemoryAccessor] = process_memory_usage,
        clock: Callable[[], float] = time.perf_counter,
        operation: Optional[Operation] = None,
        generator: Optional[DatasetGenerator] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the prober.

        Args:
            config: Probe configuration
            memory_accessor: ``() -> bytes`` for the host; None if unavailable
            clock: Monotonic clock used for elapsed time
            operation: Operation instance overriding config.operation
            generator: Dataset generator
            sleep: Used for pause_sec between iterations

        Raises:
            ConfigurationError: If configuration is invalid
        """
        self.config = config

        # Validate configuration
        config.validate_config()

        self.recorder = MetricsRecorder(memory_accessor=memory_accessor, clock=clock)
        self.generator = generator or DatasetGenerator()
        self.operation = operation or OPERATION_REGISTRY.create(config.operation.value)
        self.sink = create_sink(config.sink_format)
        self._sleep = sleep

    @contextmanager
    def _work_dir(self) -> Iterator[Path]:
        """Directory for intermediate files, removed afterwards unless kept"""
        if self.config.work_dir is not None:
            path = Path(self.config.work_dir)
            path.mkdir(parents=True, exist_ok=True)
            yield path
        elif self.config.keep_files:
            path = Path(tempfile.mkdtemp(prefix="resource_prober_"))
            logger.info(f"Keeping intermediate files in {path}")
            yield path
        else:
            path = Path(tempfile.mkdtemp(prefix="resource_prober_"))
            try:
                yield path
            finally:
                # An abandoned timed-out attempt may still be writing here
                shutil.rmtree(path, ignore_errors=True)

    def _generate(self, row_count: int) -> pd.DataFrame:
        cfg = self.config
        if cfg.generation_chunk_rows is not None:
            return self.generator.generate_chunked(row_count, cfg.generation_chunk_rows, cfg.seed)
        return self.generator.generate(row_count, cfg.seed)

    def _dataset_bytes(self, dataset: pd.DataFrame) -> int:
        """frame_bytes(), degrading to 0 if sizing the frame itself fails"""
        try:
            return frame_bytes(dataset)
        except Exception as e:
            logger.warning(f"Could not measure dataset size: {describe_error(e)}")
            return 0

    def _generate_and_execute(
        self,
        row_count: int,
        context: OperationContext,
        start: float,
    ) -> _Attempt:
        """Generate the dataset and run the operation on it"""
        try:
            dataset = self._generate(row_count)
        except Exception as e:
            failure = GenerationFailure(f"generating {row_count:,} rows: {describe_error(e)}")
            return _Attempt(
                result=OperationResult.failure(describe_error(failure), exception=e),
                byte_size=0,
                elapsed_seconds=self.recorder.now() - start,
                memory_after=self.recorder.try_sample_memory(),
                error_kind="generation",
            )

        try:
            result = self.operation.run(dataset, context)
        except Exception as e:
            # Operations overriding run() may still raise
            result = OperationResult.failure(describe_error(e), exception=e)

        elapsed = self.recorder.now() - start
        # Sampled while the dataset is still alive
        memory_after = self.recorder.try_sample_memory()

        if result.succeeded:
            if result.byte_size is not None:
                byte_size = result.byte_size
            else:
                byte_size = self._dataset_bytes(dataset)
            return _Attempt(result, byte_size, elapsed, memory_after)

        if isinstance(result.exception, OperationFailure):
            message = describe_error(result.exception)
        else:
            message = describe_error(OperationFailure(result.error or "operation failed"))
        return _Attempt(
            result=OperationResult.failure(message, exception=result.exception),
            byte_size=self._dataset_bytes(dataset),
            elapsed_seconds=elapsed,
            memory_after=memory_after,
            error_kind="operation",
        )

    def _attempt(self, row_count: int, context: OperationContext, start: float) -> _Attempt:
        """
        Run one attempt, enforcing iteration_timeout_sec if set.

        A timed attempt runs on a daemon thread inside its own subdirectory
        of the work dir. On timeout the thread is abandoned: it cannot be
        interrupted, but it neither blocks interpreter exit nor shares files
        with later iterations.
        """
        timeout = self.config.iteration_timeout_sec
        if timeout is None:
            return self._generate_and_execute(row_count, context, start)

        attempt_dir = Path(context.work_dir) / f"attempt_{context.iteration_index}"
        attempt_dir.mkdir(parents=True, exist_ok=True)
        timed_context = replace(context, work_dir=attempt_dir)

        outcome: Dict[str, Any] = {}

        def target() -> None:
            try:
                outcome["attempt"] = self._generate_and_execute(row_count, timed_context, start)
            except Exception as e:
                outcome["error"] = e

        worker = threading.Thread(
            target=target,
            name=f"probe-iteration-{context.iteration_index}",
            daemon=True,
        )
        worker.start()
        worker.join(timeout)

        if worker.is_alive():
            logger.warning(
                f"Iteration {context.iteration_index} still running after {timeout}s; "
                f"abandoning it (files left in {attempt_dir})"
            )
            message = describe_error(
                OperationFailure(f"iteration exceeded its {timeout}s time budget")
            )
            return _Attempt(
                result=OperationResult.failure(message),
                byte_size=0,
                elapsed_seconds=self.recorder.now() - start,
                memory_after=self.recorder.try_sample_memory(),
                error_kind="timeout",
            )

        if not context.keep_files:
            shutil.rmtree(attempt_dir, ignore_errors=True)
        if "error" in outcome:
            raise outcome["error"]
        return outcome["attempt"]

    def run_iteration(self, iteration_index: int, row_count: int, work_dir: Path) -> TestIteration:
        """
        Run a single size step and measure it.

        Returns:
            TestIteration (Success or Failure); never raises for generation or
            operation errors
        """
        cfg = self.config
        context = OperationContext(
            sink=self.sink,
            work_dir=work_dir,
            iteration_index=iteration_index,
            workers=cfg.workers,
            chunk_timeout_sec=cfg.chunk_timeout_sec,
            keep_files=cfg.keep_files,
        )

        logger.info(
            f"Iteration {iteration_index}: {row_count:,} rows "
            f"(~{format_bytes(self.generator.estimate_bytes(row_count))} in memory), "
            f"operation={self.operation.name}"
        )

        memory_before = self.recorder.try_sample_memory()
        start = self.recorder.now()
        attempt = self._attempt(row_count, context, start)

        iteration = self.recorder.record(
            iteration_index=iteration_index,
            row_count=row_count,
            byte_size=attempt.byte_size,
            elapsed_seconds=attempt.elapsed_seconds,
            memory_before=memory_before,
            memory_after=attempt.memory_after,
            outcome=attempt.result.outcome,
            error_message=attempt.result.error,
            error_kind=attempt.error_kind,
            details=attempt.result.details,
        )
        gc.collect()

        if iteration.succeeded:
            throughput = iteration.throughput_mb_s
            logger.info(
                f"Iteration {iteration_index} OK: {iteration.elapsed_seconds:.2f}s, "
                f"{format_bytes(iteration.byte_size)}"
                + (f", {throughput:.1f} MB/s" if throughput is not None else "")
            )
        else:
            logger.warning(
                f"Breaking point at {row_count:,} rows: {iteration.error_message}"
            )
        return iteration

    def run(self, on_iteration: Optional[IterationCallback] = None) -> ProbeReport:
        """
        Execute the escalation loop.

        Args:
            on_iteration: Called with each TestIteration as soon as it is recorded

        Returns:
            Finalized ProbeReport; always returned, even after a failure
        """
        cfg = self.config
        report = ProbeReport(operation=self.operation.name)

        row_count = cfg.start_rows
        iteration = 0

        logger.info(
            f"Starting probe: operation={self.operation.name}, start={cfg.start_rows:,}, "
            f"max={cfg.max_rows:,}, multiplier={cfg.growth_multiplier}, "
            f"max_iterations={cfg.max_iterations}, sink={cfg.sink_format}"
        )

        with self._work_dir() as work_dir:
            while True:
                if iteration >= cfg.max_iterations:
                    halt_reason = HaltReason.MAX_ITERATIONS
                    break
                if row_count > cfg.max_rows:
                    halt_reason = HaltReason.MAX_ROWS
                    break

                if iteration > 0 and cfg.pause_sec > 0:
                    self._sleep(cfg.pause_sec)

                record = self.run_iteration(iteration, row_count, work_dir)
                report = report.append(record)
                if on_iteration is not None:
                    on_iteration(record)

                if record.outcome is Outcome.FAILURE:
                    halt_reason = HaltReason.FAILURE
                    break

                row_count = next_row_count(row_count, cfg.growth_multiplier)
                iteration += 1

        logger.info(f"Probe halted ({halt_reason.value}) after {len(report)} iterations")
        return report.finalize(halt_reason)
