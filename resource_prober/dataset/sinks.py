"""
Storage sinks: write rows to a sequential record format and read them back.

Writes are append-capable (open_writer() yields an appender); reads support
a row-range ``skip``/``limit`` window, which the parallel-chunked operation
uses to give each worker a disjoint slice of the same file.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Protocol, Union

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from ..core.errors import ConfigurationError
from ..formulas.constants import SINK_FORMATS
from .schema import read_dtypes, timestamp_columns


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class RowAppender(Protocol):
    """Receives successive blocks of rows for one file"""

    def append(self, frame: pd.DataFrame) -> None:
        ...


class DatasetSink(Protocol):
    """
    Protocol for storage sinks.

    Example:
        sink = create_sink("csv")
        with sink.open_writer(path) as writer:
            for chunk in chunks:
                writer.append(chunk)
        rows = sink.read(path, skip=1000, limit=500)
    """

    format_name: str
    suffix: str

    def open_writer(self, path: PathLike):
        """Context manager yielding a RowAppender; truncates any existing file"""
        ...

    def read(self, path: PathLike, skip: int = 0, limit: Optional[int] = None) -> pd.DataFrame:
        """Read rows [skip, skip + limit) back; limit None reads to the end"""
        ...

    def count_rows(self, path: PathLike) -> int:
        ...


def _check_window(skip: int, limit: Optional[int]) -> None:
    if skip < 0:
        raise ValueError(f"skip must be >= 0, got {skip}")
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")


class _CsvAppender:
    def __init__(self, path: Path):
        self.path = path
        self.rows_written = 0
        self._header_written = False

    def append(self, frame: pd.DataFrame) -> None:
        frame.to_csv(
            self.path,
            mode="a" if self._header_written else "w",
            header=not self._header_written,
            index=False,
        )
        self._header_written = True
        self.rows_written += len(frame)


class CsvSink:
    """Row-oriented text sink (header + one line per row)"""

    format_name = "csv"
    suffix = ".csv"

    @contextmanager
    def open_writer(self, path: PathLike) -> Iterator[_CsvAppender]:
        path = Path(path)
        path.write_text("", encoding="utf-8")
        appender = _CsvAppender(path)
        yield appender
        logger.debug(f"Wrote {appender.rows_written:,} rows to {path}")

    def write(self, frame: pd.DataFrame, path: PathLike) -> Path:
        """Write a whole frame in one append"""
        with self.open_writer(path) as writer:
            writer.append(frame)
        return Path(path)

    def read(self, path: PathLike, skip: int = 0, limit: Optional[int] = None) -> pd.DataFrame:
        _check_window(skip, limit)
        # Row 0 is the header; data row i lives on line i + 1
        skiprows = range(1, skip + 1) if skip else None
        return pd.read_csv(
            path,
            skiprows=skiprows,
            nrows=limit,
            dtype=read_dtypes(),
            parse_dates=timestamp_columns(),
            float_precision="round_trip",
        )

    def count_rows(self, path: PathLike) -> int:
        with open(path, "r", encoding="utf-8") as f:
            lines = sum(1 for _ in f)
        return max(lines - 1, 0)


class _ParquetAppender:
    def __init__(self, path: Path):
        self.path = path
        self.rows_written = 0
        self._writer: Optional[pq.ParquetWriter] = None

    def append(self, frame: pd.DataFrame) -> None:
        table = pa.Table.from_pandas(frame, preserve_index=False)
        if self._writer is None:
            self._writer = pq.ParquetWriter(self.path, table.schema)
        else:
            table = table.cast(self._writer.schema)
        # One row group per append
        self._writer.write_table(table)
        self.rows_written += len(frame)

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()
            self._writer = None


class ParquetSink:
    """Columnar sink backed by pyarrow; each append becomes a row group"""

    format_name = "parquet"
    suffix = ".parquet"

    @contextmanager
    def open_writer(self, path: PathLike) -> Iterator[_ParquetAppender]:
        path = Path(path)
        if path.exists():
            path.unlink()
        appender = _ParquetAppender(path)
        try:
            yield appender
        finally:
            appender.close()
        logger.debug(f"Wrote {appender.rows_written:,} rows to {path}")

    def write(self, frame: pd.DataFrame, path: PathLike) -> Path:
        """Write a whole frame in one append"""
        with self.open_writer(path) as writer:
            writer.append(frame)
        return Path(path)

    def read(self, path: PathLike, skip: int = 0, limit: Optional[int] = None) -> pd.DataFrame:
        _check_window(skip, limit)
        pf = pq.ParquetFile(path)
        total = pf.metadata.num_rows
        stop = total if limit is None else min(total, skip + limit)
        if skip >= stop:
            return pf.schema_arrow.empty_table().to_pandas()

        # Only touch the row groups overlapping [skip, stop)
        groups = []
        first_offset = None
        offset = 0
        for i in range(pf.num_row_groups):
            n = pf.metadata.row_group(i).num_rows
            if offset + n > skip and offset < stop:
                if first_offset is None:
                    first_offset = offset
                groups.append(i)
            offset += n

        table = pf.read_row_groups(groups)
        table = table.slice(skip - first_offset, stop - skip)
        return table.to_pandas()

    def count_rows(self, path: PathLike) -> int:
        return pq.ParquetFile(path).metadata.num_rows


_SINKS = {
    "csv": CsvSink,
    "parquet": ParquetSink,
}


def create_sink(format_name: str) -> DatasetSink:
    """
    Create a sink by format name.

    Raises:
        ConfigurationError: If format is unknown
    """
    key = str(format_name).lower()
    if key not in _SINKS:
        raise ConfigurationError(
            f"Unknown sink format '{format_name}'. Supported: {', '.join(SINK_FORMATS)}"
        )
    return _SINKS[key]()
