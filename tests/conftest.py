"""Shared fixtures for the prober test suite."""

import itertools

import pandas as pd
import pytest

from resource_prober.core.config import ProbeConfig
from resource_prober.core.errors import OperationFailure
from resource_prober.dataset.sinks import CsvSink
from resource_prober.operations.base import Operation, OperationContext, OperationResult


class FailAtOperation(Operation):
    """Succeeds below a row threshold, raises OperationFailure at or above it."""

    name = "fail_at"

    def __init__(self, threshold: int):
        self.threshold = threshold
        self.seen = []

    def execute(self, dataset: pd.DataFrame, context: OperationContext) -> OperationResult:
        self.seen.append(len(dataset))
        if len(dataset) >= self.threshold:
            raise OperationFailure(f"{len(dataset)} rows is too many")
        return OperationResult.success(rows=len(dataset))


@pytest.fixture
def make_config():
    """Factory for small, fast configurations."""

    def _make(**overrides) -> ProbeConfig:
        values = dict(
            start_rows=10,
            max_rows=100,
            growth_multiplier=2.0,
            max_iterations=15,
            operation="generate",
            seed=1234,
            workers=2,
        )
        values.update(overrides)
        return ProbeConfig(**values)

    return _make


@pytest.fixture
def fail_at():
    """Factory for FailAtOperation instances."""
    return FailAtOperation


@pytest.fixture
def fake_clock():
    """Clock that advances exactly one second per call."""
    ticks = itertools.count()
    return lambda: float(next(ticks))


@pytest.fixture
def csv_context(tmp_path):
    return OperationContext(sink=CsvSink(), work_dir=tmp_path, iteration_index=0, workers=3)
