"""Drift detection and coverage scoring over export manifests."""

from .categorize import (
    CategorizedDrift,
    DriftSummary,
    categorize_drift,
    format_drift_summary_line,
    get_drift_summary,
    group_drifts_by_category,
)
from .compute import DriftResult, compute_drift, compute_export_drift, compute_runtime_drift
from .coverage import (
    DOC_SECTIONS,
    DocsCoverageResult,
    calculate_aggregate_coverage,
    compute_docs_coverage,
    ensure_spec_coverage,
    evaluate_export,
)
from .enrich import EnrichedExport, EnrichedManifest, enrich_spec
from .fuzzy import find_closest_match
from .registry import build_export_registry

__all__ = [
    "CategorizedDrift",
    "DOC_SECTIONS",
    "DocsCoverageResult",
    "DriftResult",
    "DriftSummary",
    "EnrichedExport",
    "EnrichedManifest",
    "build_export_registry",
    "calculate_aggregate_coverage",
    "categorize_drift",
    "compute_docs_coverage",
    "compute_drift",
    "compute_export_drift",
    "compute_runtime_drift",
    "enrich_spec",
    "ensure_spec_coverage",
    "evaluate_export",
    "find_closest_match",
    "format_drift_summary_line",
    "get_drift_summary",
    "group_drifts_by_category",
]
