"""
Configuration file loading (YAML/JSON).
"""

import json
from pathlib import Path
from typing import Union, Any, Dict

from ..core.config import ProbeConfig
from ..core.errors import ConfigurationError
from .validator import validate_config


def load_config(path: Union[str, Path], **overrides: Any) -> ProbeConfig:
    """
    Load configuration from YAML or JSON file.

    Args:
        path: Path to config file (.yaml, .yml, or .json)
        **overrides: Flat ProbeConfig fields that take precedence over the file
                     (None values are ignored)

    Returns:
        ProbeConfig instance

    Raises:
        FileNotFoundError: If file doesn't exist
        ConfigurationError: If file format unsupported or config invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        data = _read_yaml(path)
    elif suffix == ".json":
        data = _read_json(path)
    else:
        raise ConfigurationError(
            f"Unsupported config file format: {suffix}. "
            "Supported: .yaml, .yml, .json"
        )

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping at top level")

    return dict_to_config(data, **overrides)


def _read_yaml(path: Path) -> Dict[str, Any]:
    """
    Read a YAML mapping.

    Raises:
        RuntimeError: If PyYAML not installed
    """
    try:
        import yaml
    except ImportError:
        raise RuntimeError(
            "PyYAML is required for YAML config loading. "
            "Install with: pip install pyyaml"
        )

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    return {} if data is None else data


def _read_json(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping, got {type(section).__name__}")
    return section


def dict_to_config(data: Dict[str, Any], **overrides: Any) -> ProbeConfig:
    """
    Convert dictionary to ProbeConfig.

    Handles nested sections (probe.*, parallel.*, storage.*) as well as
    flat top-level keys.

    Args:
        data: Configuration dictionary
        **overrides: Flat field values applied last (None values are ignored)

    Returns:
        Validated ProbeConfig instance
    """
    probe = _section(data, "probe")
    parallel = _section(data, "parallel")
    storage = _section(data, "storage")

    def pick(section: Dict[str, Any], key: str, *flat_keys: str):
        if key in section:
            return section[key]
        for flat_key in (key,) + flat_keys:
            if flat_key in data:
                return data[flat_key]
        return None

    # Flatten nested structures; absent keys fall back to dataclass defaults
    flat_data = {
        "start_rows": pick(probe, "start_rows"),
        "max_rows": pick(probe, "max_rows"),
        "growth_multiplier": pick(probe, "multiplier", "growth_multiplier"),
        "max_iterations": pick(probe, "max_iterations"),
        "operation": pick(probe, "operation"),
        "seed": pick(probe, "seed"),
        "iteration_timeout_sec": pick(probe, "iteration_timeout_sec"),
        "pause_sec": pick(probe, "pause_sec"),
        "workers": pick(parallel, "workers"),
        "chunk_timeout_sec": pick(parallel, "chunk_timeout_sec"),
        "sink_format": pick(storage, "format", "sink_format"),
        "work_dir": pick(storage, "work_dir"),
        "keep_files": pick(storage, "keep_files"),
        "generation_chunk_rows": pick(storage, "generation_chunk_rows"),
    }
    flat_data = {k: v for k, v in flat_data.items() if v is not None}
    # Unset overrides (None) leave file values in place
    flat_data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        config = ProbeConfig(**flat_data)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    # Validate
    validate_config(config)

    return config
