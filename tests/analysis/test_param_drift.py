"""Tests for @param name, optionality and type drift."""

from __future__ import annotations

from docaudit.analysis.params import (
    detect_optionality_drift,
    detect_param_drift,
    detect_param_type_drift,
)
from docaudit.models import DriftType
from tests._fixtures.manifest_builder import ManifestBuilder, param, tag


def test_unknown_param_lists_available_parameters(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add_function(
        "applyTax",
        param("base", "number"),
        param("taxRate", "number"),
        tags=[tag("param", "tax - the tax")],
    )

    drifts = detect_param_drift(manifest_builder.export("applyTax"))

    assert len(drifts) == 1
    assert drifts[0].type is DriftType.PARAM_MISMATCH
    assert drifts[0].target == "tax"
    assert drifts[0].suggestion == "Available parameters: base, taxRate"


def test_each_unknown_param_is_reported(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add_function(
        "formatUser",
        param("name"),
        tags=[tag("param", "firstName - first"), tag("param", "lastName - last")],
    )

    drifts = detect_param_drift(manifest_builder.export("formatUser"))

    assert [drift.target for drift in drifts] == ["firstName", "lastName"]
    assert all("name" in (drift.suggestion or "") for drift in drifts)


def test_close_param_name_gets_did_you_mean(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add_function(
        "load",
        param("maxRetryCount", "number"),
        tags=[tag("param", "{number} retryCount - retries")],
    )

    drifts = detect_param_drift(manifest_builder.export("load"))

    assert len(drifts) == 1
    assert drifts[0].suggestion == 'Did you mean "maxRetryCount"?'


def test_documented_params_matching_signature_are_clean(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add_function(
        "add",
        param("a", "number"),
        param("b", "number"),
        tags=[tag("param", "{number} a"), tag("param", "{number} b")],
    )
    assert detect_param_drift(manifest_builder.export("add")) == []


def test_dot_notation_checks_object_properties(manifest_builder: ManifestBuilder) -> None:
    options = {"type": "object", "properties": {"timeout": {"type": "number"}, "retries": {"type": "number"}}}
    manifest_builder.add_function(
        "request",
        param("opts", options),
        tags=[tag("param", "opts.timeout - ok"), tag("param", "opts.timout - typo")],
    )

    drifts = detect_param_drift(manifest_builder.export("request"))

    assert len(drifts) == 1
    assert drifts[0].target == "opts.timout"
    assert drifts[0].issue == 'JSDoc documents property "timout" on parameter "opts" which does not exist.'
    assert drifts[0].suggestion == "Available: opts.timeout, opts.retries"


def test_dot_notation_on_opaque_type_is_skipped(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add_function(
        "request",
        param("opts", {"$ref": "#/types/RequestOptions"}),
        tags=[tag("param", "opts.anything - unverifiable")],
    )
    assert detect_param_drift(manifest_builder.export("request")) == []


def test_optional_brackets_on_required_param(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add_function(
        "log",
        param("message", required=True),
        tags=[tag("param", "{string} [message] - text")],
    )

    drifts = detect_optionality_drift(manifest_builder.export("log"))

    assert len(drifts) == 1
    assert drifts[0].type is DriftType.OPTIONALITY_MISMATCH
    assert "optional" in drifts[0].issue
    assert "requires" in drifts[0].issue


def test_missing_brackets_on_optional_param(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add_function(
        "log",
        param("level", required=False),
        tags=[tag("param", "level - severity")],
    )

    drifts = detect_optionality_drift(manifest_builder.export("log"))

    assert len(drifts) == 1
    assert drifts[0].suggestion == "Document level as [level] or make it required in the signature."


def test_param_type_mismatch(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add_function(
        "find",
        param("id", {"type": "string"}),
        param("done", {"type": "undefined"}),
        tags=[tag("param", "{number} id"), tag("param", "{void} done")],
    )

    drifts = detect_param_type_drift(manifest_builder.export("find"))

    assert len(drifts) == 1
    assert drifts[0].target == "id"
    assert drifts[0].issue == 'JSDoc documents number for parameter "id" but the signature declares string.'
    assert drifts[0].suggestion == "Update @param {string} id to match the signature."
