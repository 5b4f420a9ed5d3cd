"""
Configuration loading and validation.
"""

from .loader import load_config, dict_to_config
from .validator import validate_config

__all__ = ["load_config", "dict_to_config", "validate_config"]
