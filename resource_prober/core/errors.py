"""
Error types raised by the prober.

Only ConfigurationError ever reaches the caller of ResourceProber.run().
GenerationFailure and OperationFailure are caught at the iteration boundary
and recorded as Failure iterations; MeasurementUnavailable only blanks the
affected metric.
"""

from typing import List, Optional, Tuple


class ProbeError(Exception):
    """Base class for all prober errors"""


class ConfigurationError(ProbeError, ValueError):
    """Invalid ProbeConfig; raised before any iteration runs"""


class GenerationFailure(ProbeError):
    """Dataset construction raised (e.g. allocation failure)"""


class OperationFailure(ProbeError):
    """
    The probed operation failed.

    For the parallel-chunked variant, ``failures`` holds one
    ``(chunk_index, exception)`` pair per failed chunk.
    """

    def __init__(
        self,
        message: str,
        failures: Optional[List[Tuple[int, BaseException]]] = None,
    ):
        super().__init__(message)
        self.failures = list(failures or [])


class MeasurementUnavailable(ProbeError):
    """The host memory accessor is missing or errored"""
