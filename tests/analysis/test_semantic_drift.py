"""Tests for deprecation, visibility, link and async drift."""

from __future__ import annotations

from docaudit.analysis.registry import build_export_registry
from docaudit.analysis.semantic import (
    detect_async_mismatch,
    detect_broken_links,
    detect_deprecated_drift,
    detect_visibility_drift,
)
from docaudit.models import DriftType
from tests._fixtures.manifest_builder import ManifestBuilder, tag


def test_deprecated_flag_without_tag(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add("legacyFetch", deprecated=True)

    drifts = detect_deprecated_drift(manifest_builder.export("legacyFetch"))

    assert len(drifts) == 1
    assert drifts[0].type is DriftType.DEPRECATED_MISMATCH
    assert drifts[0].issue == (
        'Declaration for "legacyFetch" is marked deprecated but @deprecated is missing from the docs.'
    )


def test_deprecated_tag_without_flag(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add("legacyFetch", tags=[tag("deprecated", "use fetchAll")])

    drifts = detect_deprecated_drift(manifest_builder.export("legacyFetch"))

    assert drifts[0].issue == 'JSDoc marks "legacyFetch" as deprecated but the TypeScript declaration is not.'
    assert drifts[0].suggestion == "Remove the @deprecated tag or deprecate the declaration."


def test_consistent_deprecation_is_clean(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add("legacyFetch", deprecated=True, tags=[tag("deprecated")])
    assert detect_deprecated_drift(manifest_builder.export("legacyFetch")) == []


def test_internal_tag_on_public_export(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add("helper", tags=[tag("internal")])

    drifts = detect_visibility_drift(manifest_builder.export("helper"))

    assert len(drifts) == 1
    assert drifts[0].issue == 'JSDoc marks "helper" as @internal but the declaration is public.'


def test_member_visibility_rules_are_asymmetric(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add(
        "Widget",
        kind="class",
        members=[
            {"name": "secret", "kind": "property", "visibility": "private", "tags": [tag("internal")]},
            {"name": "guarded", "kind": "method", "visibility": "protected", "tags": [tag("alpha")]},
            {"name": "open", "kind": "method", "tags": [tag("private")]},
            {"name": "shown", "kind": "method", "visibility": "private", "tags": [tag("public")]},
        ],
    )

    drifts = detect_visibility_drift(manifest_builder.export("Widget"))

    assert [drift.target for drift in drifts] == ["Widget#open", "Widget#shown"]
    assert drifts[0].issue == 'JSDoc marks "Widget#open" as @private but the declaration is public.'
    assert drifts[1].suggestion == "Remove @public or mark the declaration public."


def test_broken_link_with_suggestion(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add(
        "connect",
        description=(
            "Opens a client. See {@link HttpClientOptions}, {@link HttpClientConfig.timeout}, "
            "{@link https://example.com/docs}, {@link @scope/pkg} and `{@link Ignored}`."
        ),
    )
    manifest_builder.add_type("HttpClientConfig")
    manifest = manifest_builder.build()
    registry = build_export_registry(manifest)

    drifts = detect_broken_links(manifest.exports[0], registry)

    assert len(drifts) == 1
    assert drifts[0].type is DriftType.BROKEN_LINK
    assert drifts[0].target == "HttpClientOptions"
    assert drifts[0].issue == "{@link HttpClientOptions} references a symbol that does not exist."
    assert drifts[0].suggestion == 'Did you mean "HttpClientConfig"?'


def test_broken_links_in_tags_but_not_examples(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add(
        "connect",
        tags=[tag("see", "{@see Missing}"), tag("example", "{@link AlsoMissing}")],
    )
    manifest = manifest_builder.build()
    registry = build_export_registry(manifest)

    drifts = detect_broken_links(manifest.exports[0], registry)

    assert [drift.target for drift in drifts] == ["Missing"]
    assert drifts[0].issue.startswith("{@see Missing}")


def test_broken_links_need_a_registry(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add("connect", description="{@link Missing}")
    assert detect_broken_links(manifest_builder.export("connect")) == []


def test_promise_return_without_async_docs(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add_function("load", returns="Promise<string>", tags=[tag("returns", "the body")])

    drifts = detect_async_mismatch(manifest_builder.export("load"))

    assert len(drifts) == 1
    assert drifts[0].type is DriftType.ASYNC_MISMATCH
    assert drifts[0].target == "returns"
    assert "Promise" in drifts[0].issue


def test_async_docs_on_sync_function(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add_function("load", returns="string", tags=[tag("async")])

    drifts = detect_async_mismatch(manifest_builder.export("load"))

    assert [drift.issue for drift in drifts] == [
        "Documentation indicates async but function does not return Promise."
    ]


def test_documented_promise_is_clean(manifest_builder: ManifestBuilder) -> None:
    manifest_builder.add_function(
        "load", returns="Promise<string>", tags=[tag("returns", "{Promise<string>} the body")]
    )
    assert detect_async_mismatch(manifest_builder.export("load")) == []
