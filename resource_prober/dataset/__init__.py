"""
Synthetic dataset generation and storage sinks.
"""

from .generator import DatasetGenerator
from .schema import SCHEMA, COLUMN_NAMES
from .sinks import CsvSink, ParquetSink, DatasetSink, create_sink

__all__ = [
    "DatasetGenerator",
    "SCHEMA",
    "COLUMN_NAMES",
    "CsvSink",
    "ParquetSink",
    "DatasetSink",
    "create_sink",
]
