"""
Report formatting.

The Reporter turns a finished ProbeReport into a display-ready table plus
the three derived numbers (max successful size, breaking point, safe limit)
and a few recommendations. It never writes files: callers hand emit() a
sink callable.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import pandas as pd

from ..core.results import ProbeReport
from ..formulas.constants import RAM_HEADROOM_FACTOR, SAFE_LIMIT_FACTOR, format_bytes
from ..metrics.recorder import HostInfo


TABLE_COLUMNS = [
    "iteration",
    "rows",
    "bytes",
    "elapsed_s",
    "throughput_mb_s",
    "memory_delta_bytes",
    "outcome",
    "error",
]


@dataclass
class ProbeSummary:
    """Display-ready summary of a probe run"""
    table: pd.DataFrame
    max_successful_row_count: int
    breaking_point_row_count: Optional[int]
    recommended_safe_limit: int
    halt_reason: Optional[str] = None
    operation: Optional[str] = None
    recommendations: List[str] = field(default_factory=list)
    host_info: Optional[HostInfo] = None

    @property
    def breaking_point_found(self) -> bool:
        return self.breaking_point_row_count is not None

    def format_table(self) -> str:
        """Iteration table as aligned text"""
        if self.table.empty:
            return "(no iterations)"

        def missing(v) -> bool:
            return v is None or (not isinstance(v, str) and pd.isna(v))

        def optional(fmt, na="n/a"):
            return lambda v: na if missing(v) else fmt(v)

        formatters = {
            "rows": optional(lambda v: f"{int(v):,}"),
            "bytes": optional(format_bytes),
            "elapsed_s": optional(lambda v: f"{v:.2f}"),
            "throughput_mb_s": optional(lambda v: f"{v:.1f}"),
            "memory_delta_bytes": optional(format_bytes),
            "error": optional(str, na=""),
        }
        # Cells are pre-rendered; to_string skips formatters for None cells
        display = self.table.astype(object)
        for column, fmt in formatters.items():
            display[column] = [fmt(v) for v in display[column]]
        return display.to_string(index=False)

    def format_summary(self) -> str:
        """
        Format the whole summary.

        Returns:
            Multi-line string with header, table, derived numbers and recommendations
        """
        lines = []
        lines.append("=" * 70)
        lines.append("BREAKING POINT PROBE RESULTS")
        lines.append("=" * 70)
        if self.operation:
            lines.append(f"Operation: {self.operation}")
        if self.host_info is not None:
            lines.append(f"Host: {self.host_info}")
        if self.halt_reason:
            lines.append(f"Halted: {self.halt_reason}")
        lines.append("")
        lines.append(self.format_table())
        lines.append("")
        lines.append("-" * 70)
        lines.append(f"  Max successful rows    : {self.max_successful_row_count:,}")
        if self.breaking_point_row_count is not None:
            lines.append(f"  Breaking point rows    : {self.breaking_point_row_count:,}")
        else:
            lines.append("  Breaking point rows    : none")
        lines.append(f"  Recommended safe limit : {self.recommended_safe_limit:,}")
        lines.append("-" * 70)

        if self.recommendations:
            lines.append("")
            lines.append("Recommendations:")
            for rec in self.recommendations:
                lines.append(f"  - {rec}")
        lines.append("=" * 70)

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        records = self.table.astype(object).where(self.table.notna(), None)
        return {
            "operation": self.operation,
            "halt_reason": self.halt_reason,
            "max_successful_row_count": self.max_successful_row_count,
            "breaking_point_row_count": self.breaking_point_row_count,
            "recommended_safe_limit": self.recommended_safe_limit,
            "recommendations": list(self.recommendations),
            "host": {
                "total_memory_bytes": self.host_info.total_memory_bytes,
                "available_memory_bytes": self.host_info.available_memory_bytes,
                "cpu_count": self.host_info.cpu_count,
            } if self.host_info is not None else None,
            "iterations": records.to_dict(orient="records"),
        }


class Reporter:
    """Builds ProbeSummary objects from finished reports"""

    def build_table(self, report: ProbeReport) -> pd.DataFrame:
        """One row per iteration, in run order"""
        rows = [
            {
                "iteration": it.iteration_index,
                "rows": it.row_count,
                "bytes": it.byte_size,
                "elapsed_s": it.elapsed_seconds,
                "throughput_mb_s": it.throughput_mb_s,
                "memory_delta_bytes": it.memory_delta_bytes,
                "outcome": it.outcome.value,
                "error": it.error_message,
            }
            for it in report.iterations
        ]
        return pd.DataFrame(rows, columns=TABLE_COLUMNS)

    def recommendations(self, report: ProbeReport, host_info: Optional[HostInfo] = None) -> List[str]:
        recs = []
        max_ok = report.max_successful_row_count
        breaking = report.first_failure

        if max_ok > 0:
            recs.append(
                f"Recommended safe dataset limit: {report.recommended_safe_limit:,} rows "
                f"({SAFE_LIMIT_FACTOR:.0%} of {max_ok:,})"
            )
        else:
            recs.append("No size succeeded; lower start_rows or check the environment")

        if breaking is not None:
            recs.append(f"Failure reason: {breaking.error_message}")
            if max_ok > 0:
                recs.append(
                    f"Last successful size {max_ok:,} rows; "
                    f"margin to breaking point {breaking.row_count - max_ok:,} rows"
                )
        else:
            recs.append("No breaking point found in the tested range")

        if host_info is not None:
            deltas = [
                it.memory_delta_bytes for it in report.successes
                if it.memory_delta_bytes is not None
            ]
            if deltas and host_info.total_memory_bytes > 0:
                peak = max(deltas)
                recs.append(
                    f"Largest successful step grew process memory by {format_bytes(peak)} "
                    f"({peak / host_info.total_memory_bytes:.1%} of host RAM)"
                )
            recs.append(
                f"For headroom, keep single datasets under "
                f"{format_bytes(host_info.total_memory_bytes * RAM_HEADROOM_FACTOR)}"
            )

        return recs

    def summarize(self, report: ProbeReport, host_info: Optional[HostInfo] = None) -> ProbeSummary:
        """
        Summarize a completed report.

        Args:
            report: Finished ProbeReport
            host_info: Optional host information for the header and advice

        Returns:
            ProbeSummary
        """
        return ProbeSummary(
            table=self.build_table(report),
            max_successful_row_count=report.max_successful_row_count,
            breaking_point_row_count=report.breaking_point_row_count,
            recommended_safe_limit=report.recommended_safe_limit,
            halt_reason=report.halt_reason.value if report.halt_reason else None,
            operation=report.operation,
            recommendations=self.recommendations(report, host_info),
            host_info=host_info,
        )

    @staticmethod
    def emit(summary: ProbeSummary, sink: Callable[[str], Any] = print) -> None:
        """Pass the formatted summary to a caller-supplied sink"""
        sink(summary.format_summary())
