"""
Operation system for the prober.

This package provides:
- OPERATION_REGISTRY: Global registry of available operations
- Built-in operations (generate, write, read, aggregate, parallel)

The registry is populated automatically when this module is imported.
"""

from .registry import OPERATION_REGISTRY, OperationRegistry
from .base import Operation, OperationContext, OperationResult

# Import built-in operations to trigger registration
from . import builtin
from . import parallel

__all__ = [
    'OPERATION_REGISTRY',
    'OperationRegistry',
    'Operation',
    'OperationContext',
    'OperationResult',
]
