"""Section-based documentation coverage scoring."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..models import CoverageMetadata, Export, Manifest

DOC_SECTIONS = ("description", "params", "returns", "examples")
SECTION_WEIGHT = 100 / len(DOC_SECTIONS)


def js_round(value: float) -> int:
    """Round half up, matching the scores produced by the manifest tooling."""
    return int(math.floor(value + 0.5))


@dataclass
class DocsCoverageResult:
    spec: CoverageMetadata
    exports: Dict[str, CoverageMetadata] = field(default_factory=dict)


def evaluate_export(export: Export) -> CoverageMetadata:
    """Score one export; each satisfied section is worth an equal share of 100."""
    missing: List[str] = []
    if not _has_description(export):
        missing.append("description")
    if not _params_documented(export):
        missing.append("params")
    if not _returns_documented(export):
        missing.append("returns")
    if not export.examples:
        missing.append("examples")

    satisfied = len(DOC_SECTIONS) - len(missing)
    return CoverageMetadata(
        coverage_score=max(0, js_round(satisfied * SECTION_WEIGHT)),
        missing=missing or None,
    )


def compute_docs_coverage(manifest: Manifest) -> DocsCoverageResult:
    by_export: Dict[str, CoverageMetadata] = {}
    scores: List[int] = []
    for export in manifest.exports:
        docs = evaluate_export(export)
        by_export[export.key] = docs
        scores.append(docs.coverage_score)
    return DocsCoverageResult(
        spec=CoverageMetadata(coverage_score=aggregate_score(scores)),
        exports=by_export,
    )


def aggregate_score(scores: List[int]) -> int:
    """Rounded mean of per-export scores; 100 when there is nothing to score."""
    if not scores:
        return 100
    return js_round(sum(scores) / len(scores))


def calculate_aggregate_coverage(payload: Mapping[str, Any]) -> int:
    """Aggregate coverage of a raw manifest mapping, enriched or not.

    Exports carrying ``docs.coverageScore`` use it; the rest count 100 when they
    have a description and 0 otherwise.
    """
    exports = payload.get("exports")
    if not isinstance(exports, list) or not exports:
        return 100
    scores: List[int] = []
    for entry in exports:
        if not isinstance(entry, Mapping):
            scores.append(0)
            continue
        score = _existing_score(entry.get("docs"))
        if score is None:
            score = 100 if entry.get("description") else 0
        scores.append(score)
    return js_round(sum(scores) / len(scores))


def ensure_spec_coverage(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Return ``payload`` with a top-level ``docs.coverageScore``, computing it if absent."""
    existing_docs = payload.get("docs")
    if _existing_score(existing_docs) is not None:
        return dict(payload)
    docs = dict(existing_docs) if isinstance(existing_docs, Mapping) else {}
    docs["coverageScore"] = calculate_aggregate_coverage(payload)
    result = dict(payload)
    result["docs"] = docs
    return result


def _existing_score(docs: object) -> Optional[int]:
    if not isinstance(docs, Mapping):
        return None
    score = docs.get("coverageScore")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return None
    return int(score)


def _has_description(export: Export) -> bool:
    return bool(export.description and export.description.strip())


def _params_documented(export: Export) -> bool:
    parameters = [param for signature in export.signatures for param in signature.parameters]
    return all(param.description and param.description.strip() for param in parameters)


def _returns_documented(export: Export) -> bool:
    # Signatures without a declared return still need a description.
    return all(
        signature.returns is not None
        and bool(signature.returns.description and signature.returns.description.strip())
        for signature in export.signatures
    )


__all__ = [
    "DOC_SECTIONS",
    "DocsCoverageResult",
    "aggregate_score",
    "calculate_aggregate_coverage",
    "compute_docs_coverage",
    "ensure_spec_coverage",
    "evaluate_export",
    "js_round",
]
