"""Tests for manifest enrichment."""

from __future__ import annotations

import copy

from docaudit.analysis.enrich import enrich_spec
from docaudit.models import Drift, DriftType, Manifest
from tests._fixtures.manifest_builder import ManifestBuilder, param, tag


def test_empty_manifest_enriches_to_full_coverage() -> None:
    enriched = enrich_spec(Manifest.from_dict({"meta": {"name": "empty"}, "exports": []}))

    assert enriched.docs.coverage_score == 100
    assert enriched.docs.missing is None
    assert enriched.docs.drift is None
    assert enriched.drift_summary is None
    assert enriched.to_dict() == {
        "meta": {"name": "empty"},
        "exports": [],
        "docs": {"coverageScore": 100},
    }


def test_enrich_merges_coverage_drift_and_extra_drift(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add_function(
        "applyTax",
        param("base", "number"),
        param("taxRate", "number"),
        tags=[tag("param", "tax")],
    )
    manifest_builder.add("VERSION", kind="variable", description="Package version.")
    payload = manifest_builder.payload()
    original = copy.deepcopy(payload)
    runtime = Drift(type=DriftType.EXAMPLE_RUNTIME_ERROR, target="example[0]", issue="boom")

    enriched = enrich_spec(Manifest.from_dict(payload), drift_by_export={"applyTax": [runtime]})

    apply_tax = enriched.exports[0].docs
    assert apply_tax.missing == ["description", "params", "returns", "examples"]
    assert apply_tax.coverage_score == 0
    assert [drift.type for drift in apply_tax.drift or []] == [
        DriftType.PARAM_MISMATCH,
        DriftType.EXAMPLE_RUNTIME_ERROR,
    ]
    assert enriched.exports[1].docs.coverage_score == 75
    assert enriched.docs.coverage_score == 38
    assert enriched.docs.missing == ["description", "params", "returns", "examples"]
    assert enriched.drift_summary is not None
    assert enriched.drift_summary.total == 2

    data = enriched.to_dict()
    assert data["exports"][0]["docs"]["drift"][0] == {
        "type": "param-mismatch",
        "target": "tax",
        "issue": 'JSDoc documents parameter "tax" which is not present in the signature.',
        "suggestion": "Available parameters: base, taxRate",
    }
    assert "drift" not in data["exports"][1]["docs"]
    assert data["driftSummary"] == {
        "total": 2,
        "byCategory": {"structural": 1, "semantic": 0, "example": 1},
        "fixable": 1,
    }
    assert payload == original


def test_enrich_drops_ignored_drift_types(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add("helper", tags=[tag("internal")], deprecated=True)

    enriched = enrich_spec(manifest_builder.build(), ignore=[DriftType.VISIBILITY_MISMATCH])

    assert [drift.type for drift in enriched.drift] == [DriftType.DEPRECATED_MISMATCH]


def test_enrich_with_workers_preserves_order(manifest_builder: ManifestBuilder) -> None:
    names = [f"export{index}" for index in range(12)]
    for name in names:
        manifest_builder.add(name, kind="variable")

    enriched = enrich_spec(manifest_builder.build(), max_workers=4)

    assert [item.export.name for item in enriched.exports] == names
