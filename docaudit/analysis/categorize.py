"""Drift categorisation and summaries for reporting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from ..fix import is_fixable_drift
from ..models import DRIFT_CATEGORIES, Drift, DriftCategory


@dataclass(frozen=True)
class CategorizedDrift:
    drift: Drift
    category: DriftCategory
    fixable: bool

    def to_dict(self) -> Dict[str, Any]:
        data = self.drift.to_dict()
        data["category"] = self.category.value
        data["fixable"] = self.fixable
        return data


@dataclass(frozen=True)
class DriftSummary:
    total: int
    by_category: Dict[DriftCategory, int] = field(default_factory=dict)
    fixable: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "byCategory": {category.value: self.by_category.get(category, 0) for category in DriftCategory},
            "fixable": self.fixable,
        }


def categorize_drift(drift: Drift) -> CategorizedDrift:
    return CategorizedDrift(
        drift=drift,
        category=DRIFT_CATEGORIES[drift.type],
        fixable=is_fixable_drift(drift),
    )


def group_drifts_by_category(drifts: Iterable[Drift]) -> Dict[DriftCategory, List[CategorizedDrift]]:
    """Bucket drifts by category; every category is present, possibly empty."""
    grouped: Dict[DriftCategory, List[CategorizedDrift]] = {category: [] for category in DriftCategory}
    for drift in drifts:
        categorized = categorize_drift(drift)
        grouped[categorized.category].append(categorized)
    return grouped


def get_drift_summary(drifts: Iterable[Drift]) -> DriftSummary:
    items = list(drifts)
    grouped = group_drifts_by_category(items)
    return DriftSummary(
        total=len(items),
        by_category={category: len(entries) for category, entries in grouped.items()},
        fixable=sum(1 for drift in items if is_fixable_drift(drift)),
    )


def format_drift_summary_line(summary: DriftSummary) -> str:
    """Single-line summary, e.g. ``5 issues (3 structural, 2 example) (4 auto-fixable)``."""
    if summary.total == 0:
        return "No drift detected"
    parts = [
        f"{summary.by_category[category]} {category.value}"
        for category in DriftCategory
        if summary.by_category.get(category, 0) > 0
    ]
    fixable_note = f" ({summary.fixable} auto-fixable)" if summary.fixable > 0 else ""
    return f"{summary.total} issues ({', '.join(parts)}){fixable_note}"


__all__ = [
    "CategorizedDrift",
    "DriftSummary",
    "categorize_drift",
    "format_drift_summary_line",
    "get_drift_summary",
    "group_drifts_by_category",
]
