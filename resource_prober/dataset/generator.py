"""
Synthetic dataset generation.

The generator allocates the whole frame at once: memory proportional to
row_count x schema width is the quantity under test, so it never chunks or
streams unless the caller explicitly asks for it via iter_chunks().
"""

import logging
from typing import Iterator, Optional

import numpy as np
import pandas as pd

from .schema import (
    BASE_TIMESTAMP,
    CATEGORY_LEVELS,
    COLUMN_NAMES,
    PRIORITY_LEVELS,
    REGION_LEVELS,
    SECONDS_PER_YEAR,
    STATUS_LEVELS,
    estimated_row_bytes,
)


logger = logging.getLogger(__name__)


def _choice(rng: np.random.Generator, levels, n: int) -> np.ndarray:
    return np.asarray(levels, dtype=object)[rng.integers(0, len(levels), n)]


def _build_frame(rng: np.random.Generator, n: int, first_id: int = 1) -> pd.DataFrame:
    """Draw one block of n rows with ids starting at first_id"""
    base = pd.Timestamp(BASE_TIMESTAMP)
    offsets = rng.integers(0, SECONDS_PER_YEAR, n, endpoint=True)

    text_ids = rng.integers(1, 50_000, n, endpoint=True)

    columns = {
        "id": np.arange(first_id, first_id + n, dtype=np.int64),
        "timestamp": base + pd.to_timedelta(offsets, unit="s"),
        "category": _choice(rng, CATEGORY_LEVELS, n),
        "value1": rng.normal(100, 25, n),
        "value2": rng.uniform(0, 1000, n),
        "value3": rng.poisson(15, n).astype(np.int64),
        "text_col": np.array([f"data_{k}" for k in text_ids], dtype=object),
        "flag1": rng.random(n) < 0.5,
        "flag2": rng.random(n) < 0.5,
        "score1": rng.normal(50, 15, n),
        "score2": rng.normal(75, 20, n),
        "group_id": rng.integers(1, 5_000, n, endpoint=True),
        "amount": rng.uniform(1, 50_000, n),
        "percentage": rng.uniform(0, 100, n),
        "count_val": rng.integers(1, 1_000, n, endpoint=True),
        "rate": rng.uniform(0.1, 10.0, n),
        "index_num": rng.integers(1, 100_000, n, endpoint=True),
        "status": _choice(rng, STATUS_LEVELS, n),
        "priority": _choice(rng, PRIORITY_LEVELS, n),
        "region": _choice(rng, REGION_LEVELS, n),
    }
    return pd.DataFrame(columns, columns=COLUMN_NAMES)


class DatasetGenerator:
    """
    Produces synthetic tabular datasets with a fixed mixed-type schema.

    Output is deterministic for a given (row_count, seed) pair.
    """

    def generate(self, row_count: int, seed: Optional[int] = None) -> pd.DataFrame:
        """
        Generate a dataset in a single allocation.

        Args:
            row_count: Number of rows
            seed: Random seed; None draws from fresh OS entropy

        Returns:
            DataFrame with the columns of schema.SCHEMA

        Raises:
            ValueError: If row_count is negative
        """
        self._check_row_count(row_count)
        rng = np.random.default_rng(seed)
        return _build_frame(rng, row_count)

    def iter_chunks(
        self,
        row_count: int,
        chunk_rows: int,
        seed: Optional[int] = None,
    ) -> Iterator[pd.DataFrame]:
        """
        Generate a dataset as a sequence of explicit chunks.

        Chunks share one random stream, so the sequence is deterministic for a
        given (row_count, chunk_rows, seed), and ids are contiguous across
        chunks. The values differ from generate() with the same seed.
        """
        self._check_row_count(row_count)
        if chunk_rows < 1:
            raise ValueError(f"chunk_rows must be >= 1, got {chunk_rows}")

        rng = np.random.default_rng(seed)
        produced = 0
        while produced < row_count:
            n = min(chunk_rows, row_count - produced)
            yield _build_frame(rng, n, first_id=produced + 1)
            produced += n

    def generate_chunked(
        self,
        row_count: int,
        chunk_rows: int,
        seed: Optional[int] = None,
    ) -> pd.DataFrame:
        """Generate via iter_chunks() and concatenate into one frame"""
        chunks = list(self.iter_chunks(row_count, chunk_rows, seed))
        if not chunks:
            return _build_frame(np.random.default_rng(seed), 0)
        logger.debug(f"Concatenating {len(chunks)} generated chunks")
        return pd.concat(chunks, ignore_index=True)

    @staticmethod
    def estimate_bytes(row_count: int) -> int:
        """Approximate in-memory size of a dataset with row_count rows"""
        return row_count * estimated_row_bytes()

    @staticmethod
    def _check_row_count(row_count: int) -> None:
        if row_count < 0:
            raise ValueError(f"row_count must be >= 0, got {row_count}")
