"""Configuration loading for docaudit (.docaudit.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .models import DriftType

CONFIG_FILENAME = ".docaudit.yml"
DEFAULT_EXAMPLE_COMMAND = ["node", "--experimental-strip-types"]
DEFAULT_EXAMPLE_TIMEOUT_MS = 5000


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class CoverageConfig:
    """Coverage gate; ``min_score`` of None disables it."""

    min_score: Optional[int] = None


@dataclass
class DriftConfig:
    ignore: List[DriftType] = field(default_factory=list)
    fail_on_drift: bool = False


@dataclass
class ExamplesConfig:
    """Example execution settings."""

    run: bool = False
    timeout_ms: int = DEFAULT_EXAMPLE_TIMEOUT_MS
    command: List[str] = field(default_factory=lambda: list(DEFAULT_EXAMPLE_COMMAND))
    cache_path: Optional[Path] = None
    cache_ttl: Optional[float] = None


@dataclass
class AuditConfig:
    """Represents the settings defined in .docaudit.yml."""

    root: Path
    coverage: CoverageConfig = field(default_factory=CoverageConfig)
    drift: DriftConfig = field(default_factory=DriftConfig)
    examples: ExamplesConfig = field(default_factory=ExamplesConfig)
    workers: Optional[int] = None
    log_file: Optional[Path] = None


def load_config(config_path: Path) -> AuditConfig:
    """Load configuration from a directory or a ``.docaudit.yml`` path."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return AuditConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    coverage_data = _as_dict(data.get("coverage"))
    coverage = CoverageConfig()
    if coverage_data:
        min_score = _as_int(coverage_data.get("min_score"))
        if min_score is not None and not 0 <= min_score <= 100:
            raise ConfigError("coverage.min_score must be between 0 and 100")
        coverage.min_score = min_score

    drift_data = _as_dict(data.get("drift"))
    drift = DriftConfig()
    if drift_data:
        drift.ignore = _parse_drift_types(_as_str_list(drift_data.get("ignore")))
        drift.fail_on_drift = _as_bool(drift_data.get("fail_on_drift")) or False

    examples_data = _as_dict(data.get("examples"))
    examples = ExamplesConfig()
    if examples_data:
        examples.run = _as_bool(examples_data.get("run")) or False
        timeout_ms = _as_int(examples_data.get("timeout_ms"))
        if timeout_ms is not None:
            if timeout_ms <= 0:
                raise ConfigError("examples.timeout_ms must be positive")
            examples.timeout_ms = timeout_ms
        command = _as_str_list(examples_data.get("command"))
        if command:
            examples.command = command
        cache_path = _as_str(examples_data.get("cache_path"))
        examples.cache_path = root / cache_path if cache_path else None
        examples.cache_ttl = _as_float(examples_data.get("cache_ttl"))

    workers = _as_int(data.get("workers"))
    if workers is not None and workers < 1:
        raise ConfigError("workers must be at least 1")
    log_file = _as_str(data.get("log_file"))

    return AuditConfig(
        root=root,
        coverage=coverage,
        drift=drift,
        examples=examples,
        workers=workers,
        log_file=root / log_file if log_file else None,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _parse_drift_types(values: Sequence[str]) -> List[DriftType]:
    known = {drift_type.value: drift_type for drift_type in DriftType}
    unknown = [value for value in values if value not in known]
    if unknown:
        raise ConfigError(f"Unknown drift types in drift.ignore: {', '.join(unknown)}")
    return [known[value] for value in values]


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "AuditConfig",
    "ConfigError",
    "CoverageConfig",
    "DriftConfig",
    "ExamplesConfig",
    "load_config",
]
