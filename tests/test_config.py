"""Tests for docaudit.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from docaudit.config import AuditConfig, ConfigError, load_config
from docaudit.models import DriftType


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, AuditConfig)
    assert config.root == tmp_path.resolve()
    assert config.coverage.min_score is None
    assert config.drift.ignore == []
    assert config.drift.fail_on_drift is False
    assert config.examples.run is False
    assert config.examples.timeout_ms == 5000
    assert config.examples.command == ["node", "--experimental-strip-types"]
    assert config.examples.cache_path is None
    assert config.workers is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".docaudit.yml"
    config_file.write_text(
        """
coverage:
  min_score: 80
drift:
  ignore:
    - visibility-mismatch
    - broken-link
  fail_on_drift: true
examples:
  run: yes
  timeout_ms: 2000
  command: ["tsx"]
  cache_path: .docaudit/examples.json
  cache_ttl: 3600
workers: 4
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.coverage.min_score == 80
    assert config.drift.ignore == [DriftType.VISIBILITY_MISMATCH, DriftType.BROKEN_LINK]
    assert config.drift.fail_on_drift is True
    assert config.examples.run is True
    assert config.examples.timeout_ms == 2000
    assert config.examples.command == ["tsx"]
    assert config.examples.cache_path == tmp_path.resolve() / ".docaudit/examples.json"
    assert config.examples.cache_ttl == 3600.0
    assert config.workers == 4


def test_load_config_accepts_manifest_path(tmp_path: Path) -> None:
    (tmp_path / ".docaudit.yml").write_text("coverage:\n  min_score: 50\n", encoding="utf-8")

    config = load_config(tmp_path / "manifest.json")

    assert config.coverage.min_score == 50


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".docaudit.yml").write_text("\n", encoding="utf-8")
    assert load_config(tmp_path).coverage.min_score is None


def test_unknown_drift_type_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".docaudit.yml").write_text(
        "drift:\n  ignore: [param-mismatch, spelling]\n", encoding="utf-8"
    )

    with pytest.raises(ConfigError, match="spelling"):
        load_config(tmp_path)


@pytest.mark.parametrize(
    "content",
    [
        "coverage:\n  min_score: 120\n",
        "examples:\n  timeout_ms: 0\n",
        "workers: 0\n",
        "- just\n- a list\n",
    ],
)
def test_invalid_values_are_rejected(tmp_path: Path, content: str) -> None:
    (tmp_path / ".docaudit.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    (tmp_path / ".docaudit.yml").write_text("coverage: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)


def test_log_file_is_resolved_against_config_directory(tmp_path: Path) -> None:
    (tmp_path / ".docaudit.yml").write_text("log_file: logs/audit.log\n", encoding="utf-8")
    assert load_config(tmp_path).log_file == tmp_path.resolve() / "logs/audit.log"
