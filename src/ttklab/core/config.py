"""
Configuration Management for TTKLab

Provides configuration loading from multiple sources:
- Default values
- Configuration files (YAML, TOML, JSON)
- Environment variables
- Command line arguments

Configuration precedence (highest to lowest):
1. Command line arguments
2. Environment variables (TTKLAB_*)
3. Configuration file
4. Default values
"""

import json
import logging
import logging.handlers
import os
import tomllib
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Dataclasses
# ============================================================================


@dataclass
class IngestConfig:
    """Configuration for dataset loading and normalization."""

    # File path or http(s) URL of the weapon CSV
    data_source: str = "data/ttk.csv"
    timeout_seconds: float = 10.0
    encoding: str = "utf-8"

    # Per-range damage corrections applied after parsing: exact value -> replacement
    damage_corrections: dict[float, float] = field(default_factory=lambda: {33.0: 33.5})


@dataclass
class AnalysisConfig:
    """Defaults for query and aggregation commands."""

    default_range: str = "10M"
    default_metric: str = "ttk"
    default_fire_mode: str = "hip"
    top_n: int = 5
    range_list_limit: int = 10


@dataclass
class ExportConfig:
    """Configuration for data export."""

    csv_delimiter: str = ","
    json_indent: int = 2
    filename_template: str = "battlefield6_ttk_{date}.csv"


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    file_max_bytes: int = 10 * 1024 * 1024  # 10MB
    file_backup_count: int = 5


@dataclass
class TTKLabConfig:
    """Main configuration container."""

    ingest: IngestConfig = field(default_factory=IngestConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Version of the config format
    config_version: str = "1.0"


# ============================================================================
# Configuration Loading
# ============================================================================

CONFIG_FILENAMES = ("ttklab.yaml", "ttklab.toml", "ttklab.json")


def get_default_config_paths() -> list[Path]:
    """Candidate config files in search order: working directory, then XDG config dir."""
    config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
    local = [Path.cwd() / name for name in CONFIG_FILENAMES]
    user = [config_home / "ttklab" / f"config{Path(name).suffix}" for name in CONFIG_FILENAMES]
    return local + user


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open(encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as f:
        return tomllib.load(f)


def _read_json(path: Path) -> dict[str, Any]:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


CONFIG_READERS: dict[str, Callable[[Path], dict[str, Any]]] = {
    ".yaml": _read_yaml,
    ".yml": _read_yaml,
    ".toml": _read_toml,
    ".json": _read_json,
}


def load_config_file(path: Path) -> dict[str, Any]:
    """Read one config file; missing files and unknown formats give {}."""
    if not path.exists():
        return {}

    reader = CONFIG_READERS.get(path.suffix.lower())
    if reader is None:
        logger.warning(f"Unknown config file format: {path.suffix}")
        return {}
    return reader(path)


# Environment variable -> (section, key, converter)
ENV_OVERRIDES: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "TTKLAB_DATA_SOURCE": ("ingest", "data_source", str),
    "TTKLAB_TIMEOUT_SECONDS": ("ingest", "timeout_seconds", float),
    "TTKLAB_DEFAULT_RANGE": ("analysis", "default_range", str),
    "TTKLAB_FIRE_MODE": ("analysis", "default_fire_mode", str),
    "TTKLAB_TOP_N": ("analysis", "top_n", int),
    "TTKLAB_CSV_DELIMITER": ("export", "csv_delimiter", str),
    "TTKLAB_LOG_LEVEL": ("logging", "level", str),
    "TTKLAB_LOG_FILE": ("logging", "file", str),
}


def load_env_config() -> dict[str, Any]:
    """Collect TTKLAB_* overrides, converted to each setting's type."""
    config: dict[str, dict[str, Any]] = {}

    for env_var, (section, key, convert) in ENV_OVERRIDES.items():
        raw = os.environ.get(env_var)
        if raw is None:
            continue
        try:
            value = convert(raw)
        except ValueError:
            logger.warning(f"Ignoring {env_var}={raw!r}: expected {convert.__name__}")
            continue
        config.setdefault(section, {})[key] = value

    return config


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Overlay `override` onto `base` one section at a time."""
    merged = {name: dict(values) if isinstance(values, dict) else values for name, values in base.items()}

    for name, values in override.items():
        if isinstance(values, dict) and isinstance(merged.get(name), dict):
            merged[name].update(values)
        else:
            merged[name] = values

    return merged


def _coerce_corrections(raw: Any) -> dict[float, float]:
    # YAML/JSON keys arrive as strings
    return {float(k): float(v) for k, v in dict(raw).items()}


def dict_to_config(data: dict[str, Any]) -> TTKLabConfig:
    """Convert a dictionary to TTKLabConfig."""
    config = TTKLabConfig()

    for section_name in ("ingest", "analysis", "export", "logging"):
        section = getattr(config, section_name)
        for key, value in data.get(section_name, {}).items():
            if hasattr(section, key):
                setattr(section, key, value)

    config.ingest.damage_corrections = _coerce_corrections(config.ingest.damage_corrections)
    # YAML reads bare numbers as numbers
    config.ingest.data_source = str(config.ingest.data_source)
    config.analysis.default_range = str(config.analysis.default_range)

    return config


def load_config(config_file: Path | None = None, include_env: bool = True) -> TTKLabConfig:
    """
    Load configuration from all sources.

    Args:
        config_file: Explicit path to a config file (optional)
        include_env: Whether to include environment variables

    Returns:
        Merged TTKLabConfig
    """
    if config_file is None:
        config_file = next((p for p in get_default_config_paths() if p.exists()), None)

    config_data = load_config_file(config_file) if config_file else {}
    if config_data:
        logger.info(f"Loaded config from: {config_file}")

    if include_env:
        config_data = merge_configs(config_data, load_env_config())

    return dict_to_config(config_data)


# ============================================================================
# Configuration Saving
# ============================================================================


def config_to_dict(config: TTKLabConfig) -> dict[str, Any]:
    """Convert TTKLabConfig to a dictionary."""
    data = asdict(config)
    # String keys so every format can hold the mapping
    data["ingest"]["damage_corrections"] = {
        str(k): v for k, v in config.ingest.damage_corrections.items()
    }
    return data


def save_config(config: TTKLabConfig, path: Path) -> None:
    """
    Save configuration to a file.

    Args:
        config: Configuration to save
        path: Path to save to (YAML or JSON, detected from extension)
    """
    data = config_to_dict(config)
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    elif suffix == ".json":
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    else:
        raise ValueError(f"Unknown config format: {suffix}")

    logger.info(f"Saved config to: {path}")


# ============================================================================
# Logging Setup
# ============================================================================


def _has_file_handler(root: logging.Logger, filename: str) -> bool:
    target = os.path.abspath(filename)
    return any(
        isinstance(h, logging.handlers.RotatingFileHandler) and h.baseFilename == target
        for h in root.handlers
    )


def configure_logging(settings: LoggingConfig) -> None:
    """Apply a LoggingConfig to the root logger."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(settings.level).upper(), logging.INFO))

    formatter = logging.Formatter(settings.format)
    if not root.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        root.addHandler(stream)

    if settings.file and not _has_file_handler(root, settings.file):
        file_handler = logging.handlers.RotatingFileHandler(
            settings.file,
            maxBytes=settings.file_max_bytes,
            backupCount=settings.file_backup_count,
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


# ============================================================================
# Global Configuration
# ============================================================================

_global_config: TTKLabConfig | None = None


def get_config() -> TTKLabConfig:
    """Get the global configuration, loading it if necessary."""
    global _global_config

    if _global_config is None:
        _global_config = load_config()

    return _global_config


def set_config(config: TTKLabConfig) -> None:
    """Set the global configuration."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to defaults."""
    global _global_config
    _global_config = None
