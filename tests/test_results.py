"""Tests for TestIteration, ProbeReport and the metrics recorder."""

import dataclasses

import pytest

from resource_prober.core.errors import MeasurementUnavailable
from resource_prober.core.results import ProbeReport, TestIteration
from resource_prober.core.types import HaltReason, Outcome
from resource_prober.formulas.constants import MiB, format_bytes, round_half_up
from resource_prober.metrics import MetricsRecorder
from resource_prober.metrics.recorder import HostInfo, get_host_info, process_memory_usage, throughput_mb_s


def make_iteration(index, rows, outcome=Outcome.SUCCESS, error=None):
    return TestIteration(
        iteration_index=index,
        row_count=rows,
        byte_size=rows * 100,
        elapsed_seconds=0.5,
        throughput_mb_s=throughput_mb_s(rows * 100, 0.5),
        memory_delta_bytes=rows * 10,
        outcome=outcome,
        error_message=error,
    )


class TestRounding:
    """Test helpers in formulas.constants."""

    @pytest.mark.parametrize("value,expected", [(2.5, 3), (2.4, 2), (7.5, 8), (0.0, 0), (99.99, 100)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_format_bytes(self):
        assert format_bytes(512) == "512.00 B"
        assert format_bytes(1536) == "1.50 KB"
        assert format_bytes(3 * MiB) == "3.00 MB"


class TestProbeReport:
    """Test the immutable report."""

    def test_append_returns_new_report(self):
        empty = ProbeReport(operation="write")
        one = empty.append(make_iteration(0, 10))

        assert len(empty) == 0
        assert len(one) == 1
        assert one.operation == "write"

    def test_iterations_are_frozen(self):
        iteration = make_iteration(0, 10)

        with pytest.raises(dataclasses.FrozenInstanceError):
            iteration.row_count = 20

    def test_finalize(self):
        report = ProbeReport().append(make_iteration(0, 10))
        final = report.finalize(HaltReason.MAX_ROWS)

        assert not report.finalized
        assert final.finalized
        assert final.halt_reason is HaltReason.MAX_ROWS
        with pytest.raises(ValueError, match="finalized"):
            final.append(make_iteration(1, 20))

    def test_derived_fields(self):
        report = (
            ProbeReport()
            .append(make_iteration(0, 100))
            .append(make_iteration(1, 125))
            .append(make_iteration(2, 250, Outcome.FAILURE, "OperationFailure: boom"))
            .finalize(HaltReason.FAILURE)
        )

        assert report.max_successful_row_count == 125
        assert report.breaking_point_row_count == 250
        assert report.breaking_point_found
        assert report.recommended_safe_limit == 100
        assert [it.row_count for it in report.successes] == [100, 125]

    def test_empty_report(self):
        report = ProbeReport()

        assert report.max_successful_row_count == 0
        assert report.recommended_safe_limit == 0
        assert report.breaking_point_row_count is None
        assert not report.breaking_point_found

    def test_to_dict(self):
        report = ProbeReport(operation="read").append(make_iteration(0, 10)).finalize(HaltReason.MAX_ITERATIONS)

        data = report.to_dict()

        assert data["halt_reason"] == "max_iterations"
        assert data["operation"] == "read"
        assert data["iterations"][0]["outcome"] == "success"
        assert data["recommended_safe_limit"] == 8


class TestMetricsRecorder:
    """Test time/memory measurement."""

    def test_throughput(self):
        assert throughput_mb_s(10 * MiB, 2.0) == pytest.approx(5.0)
        assert throughput_mb_s(10 * MiB, 0.0) is None

    def test_record_computes_delta_and_throughput(self):
        recorder = MetricsRecorder(memory_accessor=lambda: 0)

        iteration = recorder.record(
            iteration_index=0,
            row_count=10,
            byte_size=4 * MiB,
            elapsed_seconds=2.0,
            memory_before=1000,
            memory_after=1500,
            outcome=Outcome.SUCCESS,
            details={"file_size": 4 * MiB},
        )

        assert iteration.memory_delta_bytes == 500
        assert iteration.throughput_mb_s == pytest.approx(2.0)
        assert iteration.details == {"file_size": 4 * MiB}

    def test_missing_sample_gives_no_delta(self):
        iteration = MetricsRecorder().record(0, 10, 100, 1.0, None, 1500, Outcome.SUCCESS)

        assert iteration.memory_delta_bytes is None

    def test_sample_memory(self):
        assert MetricsRecorder(memory_accessor=lambda: 4096).sample_memory() == 4096

    def test_no_accessor(self):
        recorder = MetricsRecorder(memory_accessor=None)

        with pytest.raises(MeasurementUnavailable):
            recorder.sample_memory()
        assert recorder.try_sample_memory() is None

    def test_failing_accessor_degrades_to_none(self):
        def accessor():
            raise OSError("unsupported")

        recorder = MetricsRecorder(memory_accessor=accessor)

        with pytest.raises(MeasurementUnavailable):
            recorder.sample_memory()
        assert recorder.try_sample_memory() is None
        assert recorder.try_sample_memory() is None

    def test_injected_clock(self):
        recorder = MetricsRecorder(clock=lambda: 42.0)

        assert recorder.now() == 42.0

    def test_process_memory_usage(self):
        assert process_memory_usage() > 0

    def test_host_info(self):
        info = get_host_info()

        assert isinstance(info, HostInfo)
        assert info.total_memory_bytes > 0
        assert info.cpu_count >= 1
        assert "RAM total=" in str(info)
