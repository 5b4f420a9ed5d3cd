"""
Built-in sequential operations.

- generate:  the generation itself is the measured work
- write:     write the dataset through the sink
- read:      write, then read the whole file back on one thread
- aggregate: group-by, filter and sort in memory
"""

import time
from typing import Dict

import pandas as pd

from .base import Operation, OperationContext, OperationResult
from .registry import OPERATION_REGISTRY
from ..core.errors import OperationFailure


def aggregate_frame(dataset: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    """
    The in-memory workload of the aggregate operation.

    Returns:
        Dict with "groups" (count / mean value1 / sum amount per category),
        "filtered" (value1 > 100 and status == "active") and "sorted"
        (value1 descending) frames
    """
    groups = dataset.groupby("category", sort=True).agg(
        count=("id", "size"),
        avg_value1=("value1", "mean"),
        sum_amount=("amount", "sum"),
    )
    filtered = dataset[(dataset["value1"] > 100) & (dataset["status"] == "active")]
    ordered = dataset.sort_values("value1", ascending=False, kind="stable")
    return {"groups": groups, "filtered": filtered, "sorted": ordered}


@OPERATION_REGISTRY.register
class GenerateOperation(Operation):
    """
    Generate only.

    Measures the cost of materialising the dataset in memory; nothing is
    written to disk.
    """

    name = "generate"

    def execute(self, dataset: pd.DataFrame, context: OperationContext) -> OperationResult:
        return OperationResult.success(rows=len(dataset), columns=dataset.shape[1])


@OPERATION_REGISTRY.register
class WriteOperation(Operation):
    """
    Write the dataset through the configured sink.

    byte_size is the resulting file size.
    """

    name = "write"

    def execute(self, dataset: pd.DataFrame, context: OperationContext) -> OperationResult:
        path = context.data_path("probe_write")
        try:
            start = time.perf_counter()
            context.sink.write(dataset, path)
            write_seconds = time.perf_counter() - start
            file_size = path.stat().st_size
        finally:
            context.discard(path)

        return OperationResult.success(
            byte_size=file_size,
            file_size=file_size,
            write_seconds=write_seconds,
        )


@OPERATION_REGISTRY.register
class ReadOperation(Operation):
    """
    Write the dataset, then read it back whole on a single thread.

    Fails if the number of rows read back differs from the number written.
    """

    name = "read"

    def execute(self, dataset: pd.DataFrame, context: OperationContext) -> OperationResult:
        path = context.data_path("probe_read")
        try:
            context.sink.write(dataset, path)
            file_size = path.stat().st_size

            start = time.perf_counter()
            loaded = context.sink.read(path)
            read_seconds = time.perf_counter() - start
        finally:
            context.discard(path)

        if len(loaded) != len(dataset):
            raise OperationFailure(
                f"Read back {len(loaded):,} rows, expected {len(dataset):,}"
            )

        return OperationResult.success(
            byte_size=file_size,
            file_size=file_size,
            read_seconds=read_seconds,
            rows_per_second=len(loaded) / read_seconds if read_seconds > 0 else None,
        )


@OPERATION_REGISTRY.register
class AggregateOperation(Operation):
    """
    Aggregate, filter and sort the dataset in memory.

    Group-by category (count, mean value1, sum amount), filter
    value1 > 100 & status == "active", sort by value1 descending.
    """

    name = "aggregate"

    def execute(self, dataset: pd.DataFrame, context: OperationContext) -> OperationResult:
        start = time.perf_counter()
        results = aggregate_frame(dataset)
        elapsed = time.perf_counter() - start

        return OperationResult.success(
            groups=len(results["groups"]),
            filtered_rows=len(results["filtered"]),
            aggregate_seconds=elapsed,
        )
