"""Audit pipeline: load a manifest, run examples, enrich and gate."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .analysis.categorize import DriftSummary, format_drift_summary_line, get_drift_summary
from .analysis.compute import compute_runtime_drift
from .analysis.enrich import EnrichedManifest, enrich_spec
from .config import AuditConfig
from .logging import get_logger
from .models import Drift, Manifest, ManifestError, load_manifest
from .snippets.parser import ExampleParser
from .snippets.runner import ExampleRunner
from .stores.example_cache import ExampleResultCache

ManifestSource = Union[Manifest, Mapping[str, Any], Path, str]


@dataclass
class AuditOutcome:
    """Result of an audit run, including the pass/fail gate."""

    enriched: EnrichedManifest
    summary: DriftSummary
    passed: bool
    failures: List[str] = field(default_factory=list)

    @property
    def coverage_score(self) -> int:
        return self.enriched.docs.coverage_score

    def to_dict(self) -> Dict[str, Any]:
        return {
            "manifest": self.enriched.to_dict(),
            "summary": self.summary.to_dict(),
            "summaryLine": format_drift_summary_line(self.summary),
            "passed": self.passed,
            "failures": list(self.failures),
        }


class Auditor:
    """Coordinates drift detection, coverage scoring and example execution."""

    def __init__(
        self,
        config: AuditConfig | None = None,
        *,
        runner: ExampleRunner | None = None,
        parser: ExampleParser | None = None,
    ) -> None:
        self.config = config or AuditConfig(root=Path.cwd())
        self.runner = runner
        self.parser = parser or ExampleParser()
        self.logger = get_logger("auditor")

    def run(
        self,
        source: ManifestSource,
        *,
        run_examples: Optional[bool] = None,
        min_coverage: Optional[int] = None,
        fail_on_drift: Optional[bool] = None,
    ) -> AuditOutcome:
        manifest = self._load(source)
        self.logger.info("Auditing %d exports", len(manifest.exports))

        should_run = self.config.examples.run if run_examples is None else run_examples
        runtime_drift: Dict[str, List[Drift]] = {}
        if should_run:
            runtime_drift = self._run_examples(manifest)

        enriched = enrich_spec(
            manifest,
            drift_by_export=runtime_drift,
            ignore=self.config.drift.ignore,
            max_workers=self.config.workers,
            parser=self.parser,
        )
        summary = enriched.drift_summary or get_drift_summary([])
        self.logger.info(
            "Coverage %d%%; %s", enriched.docs.coverage_score, format_drift_summary_line(summary)
        )

        threshold = self.config.coverage.min_score if min_coverage is None else min_coverage
        gate_on_drift = self.config.drift.fail_on_drift if fail_on_drift is None else fail_on_drift
        failures: List[str] = []
        if threshold is not None and enriched.docs.coverage_score < threshold:
            failures.append(
                f"Coverage {enriched.docs.coverage_score}% is below the minimum of {threshold}%"
            )
        if gate_on_drift and summary.total > 0:
            failures.append(f"Drift detected: {format_drift_summary_line(summary)}")
        for failure in failures:
            self.logger.warning(failure)

        return AuditOutcome(enriched=enriched, summary=summary, passed=not failures, failures=failures)

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, source: ManifestSource) -> Manifest:
        if isinstance(source, Manifest):
            return source
        if isinstance(source, Mapping):
            return Manifest.from_dict(source)
        if isinstance(source, (str, Path)):
            path = Path(source).expanduser()
            self.logger.debug("Loading manifest from %s", path)
            return load_manifest(path)
        raise ManifestError(f"Unsupported manifest source: {type(source).__name__}")

    def _run_examples(self, manifest: Manifest) -> Dict[str, List[Drift]]:
        runner = self.runner or self._build_runner()
        drift_by_export: Dict[str, List[Drift]] = {}
        executed = 0
        for export in manifest.exports:
            if not export.examples:
                continue
            results = runner.run_all(export.examples)
            executed += len(results)
            drifts = compute_runtime_drift(export, results)
            if drifts:
                drift_by_export[export.key] = drifts
        self.logger.info("Executed %d examples", executed)
        if runner.cache is not None:
            runner.cache.prune()
            runner.cache.persist()
        return drift_by_export

    def _build_runner(self) -> ExampleRunner:
        settings = self.config.examples
        cache = None
        if settings.cache_path is not None:
            cache = ExampleResultCache(settings.cache_path, ttl_seconds=settings.cache_ttl)
        self.runner = ExampleRunner(
            settings.command,
            timeout_ms=settings.timeout_ms,
            cwd=self.config.root,
            cache=cache,
        )
        return self.runner


__all__ = ["AuditOutcome", "Auditor", "ManifestSource"]
