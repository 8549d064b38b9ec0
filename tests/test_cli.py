"""CLI parser and entrypoint behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from docaudit.cli import _build_parser, main
from docaudit.logging import configure_logging
from tests._fixtures.manifest_builder import ManifestBuilder, param, tag


def _write_manifest(builder: ManifestBuilder, path: Path) -> Path:
    builder.add_function(
        "add",
        param("a", "number", description="First operand."),
        returns="number",
        returns_description="The sum.",
        description="Adds numbers.",
        examples=["add(1);"],
    )
    return builder.write(path)


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "check", "manifest.json"])
    assert args.verbose is True
    assert args.command == "check"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["check", "manifest.json", "--verbose"])
    assert args.verbose is True
    assert args.manifest == "manifest.json"


def test_cli_check_flags_default_to_config() -> None:
    args = _build_parser().parse_args(["check", "manifest.json"])
    assert args.run_examples is None
    assert args.min_coverage is None
    assert args.fail_on_drift is None
    assert args.json is False


def test_cli_accepts_gate_flags() -> None:
    args = _build_parser().parse_args(
        ["check", "manifest.json", "--run-examples", "--min-coverage", "80", "--fail-on-drift", "--json"]
    )
    assert args.run_examples is True
    assert args.min_coverage == 80
    assert args.fail_on_drift is True
    assert args.json is True


def test_cli_serve_defaults() -> None:
    args = _build_parser().parse_args(["serve"])
    assert args.host == "127.0.0.1"
    assert args.port == 8000


def test_check_prints_report(
    manifest_builder: ManifestBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    manifest_builder.add("legacy", "variable", description="Old.", tags=[tag("deprecated")])
    path = _write_manifest(manifest_builder, tmp_path / "manifest.json")

    main(["check", str(path)])

    out = capsys.readouterr().out
    assert "Coverage: 88%" in out
    assert "Drift: 1 issues (1 semantic) (1 auto-fixable)" in out
    assert "Metadata issues (1): Deprecation, visibility, or reference issues" in out
    assert "[deprecated-mismatch] legacy#legacy" in out


def test_check_json_output(
    manifest_builder: ManifestBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = _write_manifest(manifest_builder, tmp_path / "manifest.json")

    main(["check", str(path), "--json"])

    data = json.loads(capsys.readouterr().out)
    assert data["passed"] is True
    assert data["manifest"]["exports"][0]["docs"]["coverageScore"] == 100


def test_check_exits_when_coverage_gate_fails(
    manifest_builder: ManifestBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    manifest_builder.add("helper", "variable")
    path = _write_manifest(manifest_builder, tmp_path / "manifest.json")

    with pytest.raises(SystemExit) as excinfo:
        main(["check", str(path), "--min-coverage", "80"])

    assert excinfo.value.code == 1
    assert "Coverage 75% is below the minimum of 80%" in capsys.readouterr().err


def test_check_reads_config_next_to_manifest(manifest_builder: ManifestBuilder, tmp_path: Path) -> None:
    manifest_builder.add("helper", "variable")
    path = _write_manifest(manifest_builder, tmp_path / "manifest.json")
    (tmp_path / ".docaudit.yml").write_text("coverage:\n  min_score: 90\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["check", str(path)])

    assert excinfo.value.code == 1


def test_check_reports_missing_manifest(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["check", str(tmp_path / "missing.json")])

    assert excinfo.value.code == 1
    assert "docaudit check failed" in capsys.readouterr().err


@pytest.mark.parametrize("value", ["150", "-1", "high"])
def test_cli_rejects_out_of_range_min_coverage(value: str, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _build_parser().parse_args(["check", "manifest.json", "--min-coverage", value])

    assert excinfo.value.code == 2
    assert "--min-coverage" in capsys.readouterr().err


def test_check_writes_log_file(manifest_builder: ManifestBuilder, tmp_path: Path) -> None:
    path = _write_manifest(manifest_builder, tmp_path / "manifest.json")
    log_file = tmp_path / "logs" / "audit.log"

    main(["check", str(path), "--json", "--log-file", str(log_file)])

    assert "Auditing 1 exports" in log_file.read_text(encoding="utf-8")
    configure_logging()


def test_json_mode_keeps_info_logs_off_the_console(
    manifest_builder: ManifestBuilder, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = _write_manifest(manifest_builder, tmp_path / "manifest.json")

    main(["check", str(path), "--json"])

    assert "Auditing" not in capsys.readouterr().err
