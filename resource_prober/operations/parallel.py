"""
Parallel-chunked operation.

The dataset's row range is split into N disjoint, contiguous chunks (the
final chunk absorbs the remainder) and processed by a pool of N worker
threads created for this call only. Results are reassembled by chunk
index, never by completion order, so the merged output is row-for-row
identical to a sequential pass.

If any chunk fails, queued chunks are cancelled, in-flight chunks are given
up to the configured timeout to finish, partial results are discarded and a
single OperationFailure describing every failed chunk is raised.
"""

import logging
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

import pandas as pd

from .base import Operation, OperationContext, OperationResult, describe_error
from .registry import OPERATION_REGISTRY
from ..core.errors import OperationFailure


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ChunkSpec:
    """Half-open row range [start, stop) handled by one worker"""
    index: int
    start: int
    stop: int

    @property
    def rows(self) -> int:
        return self.stop - self.start


def partition_rows(total_rows: int, n_chunks: int) -> List[ChunkSpec]:
    """
    Split [0, total_rows) into contiguous, disjoint chunks.

    Every chunk gets total_rows // n chunks rows and the final chunk absorbs
    the remainder. n_chunks is capped at total_rows so no chunk is empty;
    zero rows give a single empty chunk.

    Raises:
        ValueError: If total_rows < 0 or n_chunks < 1
    """
    if total_rows < 0:
        raise ValueError(f"total_rows must be >= 0, got {total_rows}")
    if n_chunks < 1:
        raise ValueError(f"n_chunks must be >= 1, got {n_chunks}")

    if total_rows == 0:
        return [ChunkSpec(0, 0, 0)]

    n = min(n_chunks, total_rows)
    base = total_rows // n
    chunks = []
    for i in range(n):
        start = i * base
        stop = total_rows if i == n - 1 else start + base
        chunks.append(ChunkSpec(i, start, stop))
    return chunks


def _remaining(deadline: Optional[float]) -> Optional[float]:
    if deadline is None:
        return None
    return max(0.0, deadline - time.monotonic())


def run_chunked(
    chunks: List[ChunkSpec],
    fn: Callable[[ChunkSpec], T],
    workers: int,
    timeout: Optional[float] = None,
) -> List[T]:
    """
    Run fn over every chunk on a fresh worker pool.

    Args:
        chunks: Chunks to process
        fn: Worker function; must not share mutable state across chunks
        workers: Pool size
        timeout: Budget for the whole fan-out, and for waiting on in-flight
                 workers after a failure (None waits indefinitely)

    Returns:
        Results ordered by chunk index

    Raises:
        OperationFailure: If any chunk failed or the fan-out timed out
    """
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="probe-chunk")
    try:
        futures: Dict[Future, ChunkSpec] = {executor.submit(fn, chunk): chunk for chunk in chunks}
        results: Dict[int, T] = {}
        failures: List[Tuple[int, BaseException]] = []

        def collect(done) -> None:
            for future in done:
                if future.cancelled():
                    continue
                chunk = futures[future]
                exc = future.exception()
                if exc is None:
                    results[chunk.index] = future.result()
                else:
                    failures.append((chunk.index, exc))

        deadline = None if timeout is None else time.monotonic() + timeout
        pending = set(futures)
        while pending:
            done, pending = wait(pending, timeout=_remaining(deadline), return_when=FIRST_EXCEPTION)
            collect(done)

            if failures:
                for future in pending:
                    future.cancel()
                in_flight = [f for f in pending if not f.cancelled()]
                if in_flight:
                    logger.debug(f"Chunk failed; waiting for {len(in_flight)} in-flight workers")
                    finished, unfinished = wait(in_flight, timeout=timeout)
                    collect(finished)
                    if unfinished:
                        logger.warning(
                            f"{len(unfinished)} chunk workers still running after {timeout}s"
                        )
                break

            if pending and not done:
                for future in pending:
                    future.cancel()
                raise OperationFailure(
                    f"Chunked fan-out timed out after {timeout}s "
                    f"({len(results)}/{len(chunks)} chunks finished)"
                )

        if failures:
            failures.sort(key=lambda item: item[0])
            summary = "; ".join(
                f"chunk {index}: {describe_error(exc)}" for index, exc in failures
            )
            raise OperationFailure(
                f"{len(failures)} of {len(chunks)} chunks failed ({summary})",
                failures=failures,
            )

        return [results[chunk.index] for chunk in chunks]
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def merge_chunks(parts: List[pd.DataFrame]) -> pd.DataFrame:
    """Concatenate chunk frames in the order given"""
    return pd.concat(parts, ignore_index=True)


def chunked_read(
    sink,
    path: Path,
    total_rows: int,
    workers: int,
    timeout: Optional[float] = None,
) -> pd.DataFrame:
    """
    Read total_rows rows of ``path`` with one worker per chunk.

    Each worker reads its own disjoint [skip, skip + limit) window.
    """
    chunks = partition_rows(total_rows, workers)
    parts = run_chunked(
        chunks,
        lambda chunk: sink.read(path, skip=chunk.start, limit=chunk.rows),
        workers=len(chunks),
        timeout=timeout,
    )
    return merge_chunks(parts)


@OPERATION_REGISTRY.register
class ParallelChunkedOperation(Operation):
    """
    Write the dataset, then read it back with a pool of chunk workers.

    Each worker reads a disjoint row range; chunks are merged by index.
    Fails if any chunk fails or the merged row count is wrong.
    """

    name = "parallel"

    def execute(self, dataset: pd.DataFrame, context: OperationContext) -> OperationResult:
        path = context.data_path("probe_parallel")
        workers = max(1, context.workers)
        try:
            context.sink.write(dataset, path)
            file_size = path.stat().st_size

            start = time.perf_counter()
            merged = chunked_read(
                context.sink,
                path,
                total_rows=len(dataset),
                workers=workers,
                timeout=context.chunk_timeout_sec,
            )
            read_seconds = time.perf_counter() - start
        finally:
            context.discard(path)

        if len(merged) != len(dataset):
            raise OperationFailure(
                f"Merged {len(merged):,} rows, expected {len(dataset):,}"
            )

        return OperationResult.success(
            byte_size=file_size,
            file_size=file_size,
            read_seconds=read_seconds,
            rows_per_second=len(merged) / read_seconds if read_seconds > 0 else None,
            workers=workers,
            chunks=len(partition_rows(len(dataset), workers)),
        )
