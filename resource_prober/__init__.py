"""
Resource Prober - progressive resource-limit probing for data workloads

Generates synthetic datasets of increasing size, runs a read/write/
aggregate/parallel-chunked operation on each, and reports the largest size
that succeeded, the breaking point, and a recommended safe limit.
"""

__version__ = "0.1.0"

# Core exports
from .core.config import ProbeConfig
from .core.errors import (
    ConfigurationError,
    GenerationFailure,
    MeasurementUnavailable,
    OperationFailure,
    ProbeError,
)
from .core.prober import ResourceProber
from .core.results import ProbeReport, TestIteration
from .core.types import HaltReason, OperationKind, Outcome
from .reporting import ProbeSummary, Reporter

__all__ = [
    "ResourceProber",
    "ProbeConfig",
    "ProbeReport",
    "TestIteration",
    "OperationKind",
    "Outcome",
    "HaltReason",
    "Reporter",
    "ProbeSummary",
    "ProbeError",
    "ConfigurationError",
    "GenerationFailure",
    "OperationFailure",
    "MeasurementUnavailable",
    "__version__",
]
