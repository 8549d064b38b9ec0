"""Merge coverage scores and drift into an enriched manifest."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..models import CoverageMetadata, Drift, DriftType, Export, Manifest
from ..snippets.parser import ExampleParser
from .categorize import DriftSummary, get_drift_summary
from .compute import compute_export_drift, map_exports
from .coverage import aggregate_score, evaluate_export
from .registry import build_export_registry


@dataclass(frozen=True)
class EnrichedExport:
    export: Export
    docs: CoverageMetadata

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.export.raw) if self.export.raw else _minimal_export(self.export)
        data["docs"] = self.docs.to_dict()
        return data


@dataclass(frozen=True)
class EnrichedManifest:
    """Manifest plus per-export and aggregate documentation metadata."""

    manifest: Manifest
    exports: List[EnrichedExport] = field(default_factory=list)
    docs: CoverageMetadata = field(default_factory=lambda: CoverageMetadata(coverage_score=100))
    drift_summary: Optional[DriftSummary] = None

    @property
    def drift(self) -> List[Drift]:
        return list(self.docs.drift or [])

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.manifest.raw)
        data["exports"] = [export.to_dict() for export in self.exports]
        data["docs"] = self.docs.to_dict()
        if self.drift_summary is not None:
            data["driftSummary"] = self.drift_summary.to_dict()
        else:
            data.pop("driftSummary", None)
        return data


def enrich_spec(
    manifest: Manifest,
    *,
    drift_by_export: Optional[Mapping[str, List[Drift]]] = None,
    ignore: Iterable[DriftType] = (),
    max_workers: Optional[int] = None,
    parser: Optional[ExampleParser] = None,
) -> EnrichedManifest:
    """Score every export and attach its drift; the input manifest is left untouched.

    ``drift_by_export`` carries extra drift (e.g. from executed examples) keyed by
    export id and is appended after the statically detected drift.
    """
    registry = build_export_registry(manifest)
    ignored = set(ignore)
    extra = drift_by_export or {}

    def _enrich(export: Export) -> EnrichedExport:
        coverage = evaluate_export(export)
        drifts = compute_export_drift(export, registry, parser=parser)
        drifts.extend(extra.get(export.key, ()))
        if ignored:
            drifts = [drift for drift in drifts if drift.type not in ignored]
        docs = CoverageMetadata(
            coverage_score=coverage.coverage_score,
            missing=coverage.missing,
            drift=drifts or None,
        )
        return EnrichedExport(export=export, docs=docs)

    enriched = map_exports(manifest.exports, _enrich, max_workers=max_workers)

    all_missing: Dict[str, None] = {}
    all_drift: List[Drift] = []
    for item in enriched:
        for signal in item.docs.missing or ():
            all_missing.setdefault(signal, None)
        all_drift.extend(item.docs.drift or ())

    docs = CoverageMetadata(
        coverage_score=aggregate_score([item.docs.coverage_score for item in enriched]),
        missing=list(all_missing) or None,
        drift=all_drift or None,
    )
    return EnrichedManifest(
        manifest=manifest,
        exports=enriched,
        docs=docs,
        drift_summary=get_drift_summary(all_drift) if all_drift else None,
    )


def _minimal_export(export: Export) -> Dict[str, Any]:
    data: Dict[str, Any] = {"name": export.name}
    if export.id:
        data["id"] = export.id
    if export.kind:
        data["kind"] = export.kind
    return data


__all__ = ["EnrichedExport", "EnrichedManifest", "enrich_spec"]
