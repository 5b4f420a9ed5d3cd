"""
Time and memory measurement.
"""

from .recorder import (
    HostInfo,
    MetricsRecorder,
    get_host_info,
    process_memory_usage,
    throughput_mb_s,
)

__all__ = [
    "HostInfo",
    "MetricsRecorder",
    "get_host_info",
    "process_memory_usage",
    "throughput_mb_s",
]
