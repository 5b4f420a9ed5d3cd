"""Tests for report summaries."""

import json

from resource_prober.core.results import ProbeReport, TestIteration
from resource_prober.core.types import HaltReason, Outcome
from resource_prober.formulas.constants import GiB
from resource_prober.metrics.recorder import HostInfo
from resource_prober.reporting import Reporter
from resource_prober.reporting.reporter import TABLE_COLUMNS


def iteration(index, rows, outcome=Outcome.SUCCESS, error=None, throughput=1.5, delta=2048):
    return TestIteration(
        iteration_index=index,
        row_count=rows,
        byte_size=rows * 200,
        elapsed_seconds=0.25,
        throughput_mb_s=throughput,
        memory_delta_bytes=delta,
        outcome=outcome,
        error_message=error,
    )


def failed_report():
    return (
        ProbeReport(operation="parallel")
        .append(iteration(0, 1000))
        .append(iteration(1, 1800))
        .append(iteration(2, 3240, Outcome.FAILURE, "OperationFailure: 1 of 4 chunks failed"))
        .finalize(HaltReason.FAILURE)
    )


def clean_report():
    return (
        ProbeReport(operation="write")
        .append(iteration(0, 1000, throughput=None, delta=None))
        .finalize(HaltReason.MAX_ROWS)
    )


HOST = HostInfo(total_memory_bytes=16 * GiB, available_memory_bytes=8 * GiB, cpu_count=8)


class TestReporter:
    """Test Reporter.summarize and ProbeSummary formatting."""

    def test_table(self):
        summary = Reporter().summarize(failed_report())

        assert list(summary.table.columns) == TABLE_COLUMNS
        assert summary.table["rows"].tolist() == [1000, 1800, 3240]
        assert summary.table["outcome"].tolist() == ["success", "success", "failure"]

    def test_derived_numbers(self):
        summary = Reporter().summarize(failed_report())

        assert summary.max_successful_row_count == 1800
        assert summary.breaking_point_row_count == 3240
        assert summary.recommended_safe_limit == 1440
        assert summary.breaking_point_found
        assert summary.halt_reason == "failure"
        assert summary.operation == "parallel"

    def test_recommendations_with_breaking_point(self):
        recs = Reporter().summarize(failed_report()).recommendations

        assert any("1,440 rows" in rec for rec in recs)
        assert any("1 of 4 chunks failed" in rec for rec in recs)
        assert any("margin to breaking point 1,440 rows" in rec for rec in recs)

    def test_recommendations_without_breaking_point(self):
        summary = Reporter().summarize(clean_report())

        assert not summary.breaking_point_found
        assert "No breaking point found in the tested range" in summary.recommendations

    def test_host_recommendations(self):
        recs = Reporter().summarize(failed_report(), host_info=HOST).recommendations

        assert any("9.60 GB" in rec for rec in recs)
        assert any("of host RAM" in rec for rec in recs)

    def test_format_summary(self):
        text = Reporter().summarize(failed_report(), host_info=HOST).format_summary()

        assert "BREAKING POINT PROBE RESULTS" in text
        assert "Operation: parallel" in text
        assert "Breaking point rows    : 3,240" in text
        assert "Recommended safe limit : 1,440" in text
        assert "RAM total=16.00 GB" in text

    def test_missing_metrics_render_as_na(self):
        text = Reporter().summarize(clean_report()).format_table()

        assert "n/a" in text
        assert "None" not in text
        assert "NaN" not in text
        assert "Breaking point rows    : none" in Reporter().summarize(clean_report()).format_summary()

    def test_empty_report(self):
        summary = Reporter().summarize(ProbeReport().finalize(HaltReason.MAX_ITERATIONS))

        assert summary.format_table() == "(no iterations)"
        assert summary.max_successful_row_count == 0

    def test_emit_uses_sink(self):
        lines = []

        Reporter.emit(Reporter().summarize(clean_report()), sink=lines.append)

        assert len(lines) == 1
        assert "BREAKING POINT PROBE RESULTS" in lines[0]

    def test_to_dict_is_json_ready(self):
        data = Reporter().summarize(clean_report(), host_info=HOST).to_dict()
        decoded = json.loads(json.dumps(data))

        assert decoded["halt_reason"] == "max_rows"
        assert decoded["host"]["cpu_count"] == 8
        assert decoded["iterations"][0]["throughput_mb_s"] is None
        assert decoded["iterations"][0]["rows"] == 1000

    def test_failed_row_renders_error_and_blank_errors(self):
        text = Reporter().summarize(failed_report()).format_table()
        lines = text.splitlines()

        assert "OperationFailure: 1 of 4 chunks failed" in lines[-1]
        assert all("None" not in line for line in lines)
        assert "1,800" in text
