"""Drift detectors for deprecation, visibility, cross-references and async docs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..models import Drift, DriftType, Export, ExportRegistry, Tag
from .fuzzy import find_closest_match
from .tags import extract_type_from_schema

_VISIBILITY_TAGS = {
    "internal": "internal",
    "alpha": "internal",
    "private": "private",
    "protected": "protected",
    "public": "public",
}

_LINK_PATTERNS = (
    (re.compile(r"\{@link\s+([^}\s|]+)(?:\s*\|[^}]*)?\}"), "@link"),
    (re.compile(r"\{@see\s+([^}\s]+)\}"), "@see"),
    (re.compile(r"\{@inheritDoc\s+([^}\s]+)\}"), "@inheritDoc"),
)
_FENCED_CODE = re.compile(r"```.*?```", re.DOTALL)
_INLINE_CODE = re.compile(r"`[^`]+`")


def detect_deprecated_drift(export: Export) -> List[Drift]:
    code_deprecated = export.deprecated
    docs_deprecated = any(tag.name.lower() == "deprecated" for tag in export.tags)
    if code_deprecated == docs_deprecated:
        return []

    target = export.name or export.id
    if code_deprecated:
        return [
            Drift(
                type=DriftType.DEPRECATED_MISMATCH,
                target=target,
                issue=(
                    f'Declaration for "{target}" is marked deprecated but @deprecated is missing '
                    "from the docs."
                ),
                suggestion="Add an @deprecated tag explaining the replacement or removal timeline.",
            )
        ]
    return [
        Drift(
            type=DriftType.DEPRECATED_MISMATCH,
            target=target,
            issue=f'JSDoc marks "{target}" as deprecated but the TypeScript declaration is not.',
            suggestion="Remove the @deprecated tag or deprecate the declaration.",
        )
    ]


# ----------------------------------------------------------------------
# Visibility


@dataclass(frozen=True)
class _VisibilitySignal:
    value: str
    tag_name: str


def detect_visibility_drift(export: Export) -> List[Drift]:
    drifts: List[Drift] = []
    export_name = export.name or export.id or "export"

    # Exports are structurally public.
    export_signal = _doc_visibility(export.tags)
    if export_signal is not None and not _visibility_matches(export_signal.value, "public"):
        drifts.append(_visibility_drift(export_name, export_signal, "public"))

    for member in export.members:
        member_signal = _doc_visibility(member.tags)
        if member_signal is None:
            continue
        actual = member.visibility or "public"
        if _visibility_matches(member_signal.value, actual):
            continue
        member_name = member.name or member.id or member.kind or "member"
        drifts.append(_visibility_drift(f"{export_name}#{member_name}", member_signal, actual))
    return drifts


def _doc_visibility(tags: Sequence[Tag]) -> Optional[_VisibilitySignal]:
    for tag in tags:
        mapped = _VISIBILITY_TAGS.get(tag.name.lower())
        if mapped:
            return _VisibilitySignal(value=mapped, tag_name=tag.name)
    return None


def _visibility_matches(documented: str, actual: str) -> bool:
    if documented == "internal":
        return actual != "public"
    if documented == "public":
        return actual == "public"
    return documented == actual


def _visibility_drift(target: str, signal: _VisibilitySignal, actual: str) -> Drift:
    label = _format_tag(signal.tag_name)
    return Drift(
        type=DriftType.VISIBILITY_MISMATCH,
        target=target,
        issue=f'JSDoc marks "{target}" as {label} but the declaration is {actual}.',
        suggestion=_visibility_suggestion(signal.value, label, actual),
    )


def _visibility_suggestion(documented: str, label: str, actual: str) -> str:
    if documented == "internal":
        return f"Remove {label} or mark the declaration protected/private."
    if documented == "public":
        return f"Remove {label} or mark the declaration public."
    if documented == "protected":
        if actual == "private":
            return f"Promote the declaration to protected or replace {label} with @private."
        return f"Remove {label} or mark the declaration protected."
    if actual == "protected":
        return f"Downgrade the declaration to private or replace {label} with @protected/@internal."
    return f"Remove {label} or mark the declaration private."


def _format_tag(tag_name: str) -> str:
    trimmed = tag_name.strip()
    if not trimmed:
        return "@internal"
    return trimmed if trimmed.startswith("@") else f"@{trimmed}"


# ----------------------------------------------------------------------
# Broken links


def detect_broken_links(export: Export, registry: Optional[ExportRegistry] = None) -> List[Drift]:
    """Report ``{@link X}``-style references that resolve to nothing in the registry."""
    if registry is None:
        return []

    # @example tags are covered by the example detectors.
    texts = [export.description or ""]
    texts.extend(tag.text for tag in export.tags if tag.name != "example")
    text = _INLINE_CODE.sub("", _FENCED_CODE.sub("", " ".join(texts)))

    drifts: List[Drift] = []
    candidates: Optional[List[str]] = None
    for pattern, label in _LINK_PATTERNS:
        for match in pattern.finditer(text):
            target = match.group(1)
            if target.startswith(("http://", "https://")):
                continue
            if "/" in target or "@" in target:
                continue
            root_name = target.split(".", 1)[0]
            if root_name in registry.all or target in registry.all:
                continue
            if candidates is None:
                candidates = sorted(registry.all)
            suggestion = find_closest_match(root_name, candidates)
            drifts.append(
                Drift(
                    type=DriftType.BROKEN_LINK,
                    target=target,
                    issue=f"{{{label} {target}}} references a symbol that does not exist.",
                    suggestion=f'Did you mean "{suggestion.value}"?' if suggestion else None,
                )
            )
    return drifts


# ----------------------------------------------------------------------
# Async


def detect_async_mismatch(export: Export) -> List[Drift]:
    if not export.signatures:
        return []

    returns_promise = False
    for signature in export.signatures:
        returns = signature.returns
        return_type = extract_type_from_schema(returns.schema if returns else None) or ""
        if return_type.startswith("Promise<") or return_type == "Promise":
            returns_promise = True
            break

    returns_tag = next((tag for tag in export.tags if tag.name in {"returns", "return"}), None)
    documented_as_promise = returns_tag is not None and "Promise" in returns_tag.text
    has_async_tag = any(tag.name == "async" for tag in export.tags)
    flagged_async = export.flags.get("async") is True

    drifts: List[Drift] = []
    if returns_promise and not documented_as_promise and not has_async_tag:
        drifts.append(
            Drift(
                type=DriftType.ASYNC_MISMATCH,
                target="returns",
                issue="Function returns Promise but documentation does not indicate async behavior.",
                suggestion="Add @async tag or document @returns {Promise<...>}.",
            )
        )
    if not returns_promise and (documented_as_promise or has_async_tag) and not flagged_async:
        drifts.append(
            Drift(
                type=DriftType.ASYNC_MISMATCH,
                target="returns",
                issue="Documentation indicates async but function does not return Promise.",
                suggestion="Remove @async tag or update @returns type.",
            )
        )
    return drifts


__all__ = [
    "detect_async_mismatch",
    "detect_broken_links",
    "detect_deprecated_drift",
    "detect_visibility_drift",
]
