"""
Core type definitions used across multiple modules.

This module contains only cross-cutting enums to avoid circular imports.
Module-specific protocols live in their respective modules:
- Operation: operations/base.py
- DatasetSink: dataset/sinks.py
"""

from enum import Enum


class OperationKind(Enum):
    """
    Unit of work run against each generated dataset.

    The value is the name used in config files, the CLI and the registry.
    """
    GENERATE = "generate"
    WRITE = "write"
    READ = "read"
    AGGREGATE = "aggregate"
    PARALLEL_CHUNKED = "parallel"

    @classmethod
    def parse(cls, value) -> "OperationKind":
        """Accept an OperationKind or its name/value (case-insensitive)"""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower().replace("-", "_")
        for kind in cls:
            if text in (kind.value, kind.name.lower()):
                return kind
        # Accept the spelled-out alias too
        if text == "parallelchunked":
            return cls.PARALLEL_CHUNKED
        raise ValueError(
            f"Unknown operation '{value}'. "
            f"Available: {', '.join(k.value for k in cls)}"
        )


class Outcome(Enum):
    """Result tag of a single iteration or operation"""
    SUCCESS = "success"
    FAILURE = "failure"


class HaltReason(Enum):
    """Why the escalation loop stopped"""
    FAILURE = "failure"
    MAX_ROWS = "max_rows"
    MAX_ITERATIONS = "max_iterations"
