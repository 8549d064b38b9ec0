"""CLI entrypoints for docaudit commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Tuple

from .analysis.categorize import format_drift_summary_line
from .config import ConfigError, load_config
from .logging import configure_logging
from .models import (
    DRIFT_CATEGORIES,
    DRIFT_CATEGORY_DESCRIPTIONS,
    DRIFT_CATEGORY_LABELS,
    Drift,
    DriftCategory,
    ManifestError,
)
from .orchestrator import AuditOutcome, Auditor


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _coverage_score(value: str) -> int:
    try:
        score = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid score: {value!r}") from None
    if not 0 <= score <= 100:
        raise argparse.ArgumentTypeError("must be between 0 and 100")
    return score


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docaudit",
        description="Score documentation coverage and detect drift in an export manifest.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check",
        help="Audit a manifest and fail when coverage or drift gates are not met.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    check_parser.add_argument("manifest", help="Path to the export manifest JSON file.")
    check_parser.add_argument(
        "--config",
        default=None,
        help="Path to .docaudit.yml or its directory (defaults to the manifest's directory).",
    )
    check_parser.add_argument(
        "--run-examples",
        action="store_true",
        default=None,
        help="Execute @example snippets and report runtime and assertion drift.",
    )
    check_parser.add_argument(
        "--min-coverage",
        type=_coverage_score,
        default=None,
        help="Fail when aggregate coverage is below this score (0-100).",
    )
    check_parser.add_argument(
        "--fail-on-drift",
        action="store_true",
        default=None,
        help="Fail when any drift is detected.",
    )
    check_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the enriched manifest and summary as JSON (console logs limited to warnings).",
    )
    check_parser.add_argument(
        "--log-file",
        default=None,
        help="Also write logs to this file (overrides log_file in .docaudit.yml).",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP audit service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docaudit commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "check":
        manifest_path = Path(args.manifest)
        config_path = Path(args.config) if args.config else manifest_path.expanduser().resolve().parent
        try:
            config = load_config(config_path)
            log_file = Path(args.log_file) if args.log_file else config.log_file
            configure_logging(verbose=bool(args.verbose), quiet=args.json, log_file=log_file)
            outcome = Auditor(config).run(
                manifest_path,
                run_examples=args.run_examples,
                min_coverage=args.min_coverage,
                fail_on_drift=args.fail_on_drift,
            )
        except (ConfigError, ManifestError) as exc:
            parser.exit(1, f"docaudit check failed: {exc}\nRun with --verbose for more details.\n")
        if args.json:
            print(json.dumps(outcome.to_dict(), indent=2))
        else:
            _print_report(outcome)
        if not outcome.passed:
            parser.exit(1, "".join(f"{failure}\n" for failure in outcome.failures))
    elif args.command == "serve":
        try:
            from .service.app import run_service
        except ModuleNotFoundError as exc:
            parser.exit(
                1,
                f"Service mode requires the 'service' extra ({exc.name} is missing). "
                "Install it with `pip install docaudit[service]`.\n",
            )
        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _print_report(outcome: AuditOutcome) -> None:
    print(f"Coverage: {outcome.coverage_score}%")
    print(f"Drift: {format_drift_summary_line(outcome.summary)}")
    located: Dict[DriftCategory, List[Tuple[str, Drift]]] = {category: [] for category in DriftCategory}
    for item in outcome.enriched.exports:
        for drift in item.docs.drift or ():
            location = f"{item.export.name}#{drift.target}" if drift.target else item.export.name
            located[DRIFT_CATEGORIES[drift.type]].append((location, drift))
    for category, entries in located.items():
        if not entries:
            continue
        print(f"{DRIFT_CATEGORY_LABELS[category]} ({len(entries)}): {DRIFT_CATEGORY_DESCRIPTIONS[category]}")
        for location, drift in entries:
            print(f"  [{drift.type.value}] {location}: {drift.issue}")
            if drift.suggestion:
                print(f"      {drift.suggestion}")


if __name__ == "__main__":
    main(sys.argv[1:])
