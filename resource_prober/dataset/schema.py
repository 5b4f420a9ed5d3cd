"""
Fixed schema of the synthetic stress-test dataset.

Twenty mixed-type columns: an integer id, a timestamp, categorical strings,
several numeric distributions, a free-text field and boolean flags.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple


class ColumnKind(Enum):
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"
    TIMESTAMP = "timestamp"


# Approximate in-memory bytes per value (strings are Python objects)
KIND_WIDTH_BYTES = {
    ColumnKind.INTEGER: 8,
    ColumnKind.FLOAT: 8,
    ColumnKind.BOOLEAN: 1,
    ColumnKind.STRING: 58,
    ColumnKind.TIMESTAMP: 8,
}


@dataclass(frozen=True)
class ColumnSpec:
    """A single column of the dataset"""
    name: str
    kind: ColumnKind

    @property
    def width_bytes(self) -> int:
        return KIND_WIDTH_BYTES[self.kind]


# Timestamps are drawn uniformly from one year starting here
BASE_TIMESTAMP = "2025-01-01"
SECONDS_PER_YEAR = 365 * 24 * 3600

CATEGORY_LEVELS: Tuple[str, ...] = tuple("ABCDEFGHIJKLMNOPQRST")
STATUS_LEVELS: Tuple[str, ...] = ("active", "inactive", "pending", "archived")
PRIORITY_LEVELS: Tuple[str, ...] = ("low", "medium", "high", "urgent", "critical")
REGION_LEVELS: Tuple[str, ...] = ("North", "South", "East", "West", "Central")

SCHEMA: List[ColumnSpec] = [
    ColumnSpec("id", ColumnKind.INTEGER),
    ColumnSpec("timestamp", ColumnKind.TIMESTAMP),
    ColumnSpec("category", ColumnKind.STRING),
    ColumnSpec("value1", ColumnKind.FLOAT),
    ColumnSpec("value2", ColumnKind.FLOAT),
    ColumnSpec("value3", ColumnKind.INTEGER),
    ColumnSpec("text_col", ColumnKind.STRING),
    ColumnSpec("flag1", ColumnKind.BOOLEAN),
    ColumnSpec("flag2", ColumnKind.BOOLEAN),
    ColumnSpec("score1", ColumnKind.FLOAT),
    ColumnSpec("score2", ColumnKind.FLOAT),
    ColumnSpec("group_id", ColumnKind.INTEGER),
    ColumnSpec("amount", ColumnKind.FLOAT),
    ColumnSpec("percentage", ColumnKind.FLOAT),
    ColumnSpec("count_val", ColumnKind.INTEGER),
    ColumnSpec("rate", ColumnKind.FLOAT),
    ColumnSpec("index_num", ColumnKind.INTEGER),
    ColumnSpec("status", ColumnKind.STRING),
    ColumnSpec("priority", ColumnKind.STRING),
    ColumnSpec("region", ColumnKind.STRING),
]

COLUMN_NAMES: List[str] = [col.name for col in SCHEMA]


def read_dtypes() -> Dict[str, object]:
    """
    Dtypes used when reading rows back from a text sink.

    Timestamps are excluded here and parsed separately.
    """
    mapping = {
        ColumnKind.INTEGER: "int64",
        ColumnKind.FLOAT: "float64",
        ColumnKind.BOOLEAN: "bool",
        ColumnKind.STRING: str,
    }
    return {col.name: mapping[col.kind] for col in SCHEMA if col.kind in mapping}


def timestamp_columns() -> List[str]:
    return [col.name for col in SCHEMA if col.kind is ColumnKind.TIMESTAMP]


def estimated_row_bytes() -> int:
    """Approximate in-memory size of one row"""
    return sum(col.width_bytes for col in SCHEMA)
