"""Drift detectors for return types, generic constraints and property types."""

from __future__ import annotations

from typing import List

from ..models import Drift, DriftType, Export
from .tags import (
    build_generic_constraint_mismatch_issue,
    build_generic_constraint_suggestion,
    build_return_type_mismatch_issue,
    collect_actual_type_parameter_constraints,
    extract_return_type_from_tag,
    extract_type_from_braces,
    extract_type_from_schema,
    normalize_type,
    parse_template_tag,
    types_equivalent,
)


def detect_return_type_drift(export: Export) -> List[Drift]:
    returns_tag = next((tag for tag in export.tags if tag.name == "returns" and tag.text), None)
    if returns_tag is None:
        return []
    documented_type = extract_return_type_from_tag(returns_tag.text)
    if not documented_type:
        return []

    signature_return = next(
        (signature.returns for signature in export.signatures if signature.returns is not None),
        None,
    )
    if signature_return is None:
        return []

    declared = normalize_type(extract_type_from_schema(signature_return.schema))
    documented = normalize_type(documented_type)
    if not declared or not documented:
        return []
    if types_equivalent(documented, declared):
        return []

    return [
        Drift(
            type=DriftType.RETURN_TYPE_MISMATCH,
            target="returns",
            issue=build_return_type_mismatch_issue(documented_type, documented, declared),
            suggestion=f"Update @returns to {declared}.",
        )
    ]


def detect_generic_constraint_drift(export: Export) -> List[Drift]:
    documented_templates = []
    for tag in export.tags:
        if tag.name != "template" or not tag.text.strip():
            continue
        template = parse_template_tag(tag.text)
        if template is not None:
            documented_templates.append(template)
    if not documented_templates:
        return []

    actual_constraints = collect_actual_type_parameter_constraints(export)
    if not actual_constraints:
        return []

    drifts: List[Drift] = []
    for template in documented_templates:
        if template.name not in actual_constraints:
            continue
        actual = actual_constraints[template.name]
        normalized_actual = normalize_type(actual)
        normalized_documented = normalize_type(template.constraint)
        if normalized_actual == normalized_documented:
            continue
        drifts.append(
            Drift(
                type=DriftType.GENERIC_CONSTRAINT_MISMATCH,
                target=template.name,
                issue=build_generic_constraint_mismatch_issue(template.name, template.constraint, actual),
                suggestion=build_generic_constraint_suggestion(template.name, actual),
            )
        )
    return drifts


def detect_property_type_drift(export: Export) -> List[Drift]:
    """Compare member ``@type {T}`` tags with declared property schemas."""
    drifts: List[Drift] = []
    for member in export.members:
        if member.kind != "property":
            continue
        type_tag = next((tag for tag in member.tags if tag.name == "type"), None)
        if type_tag is None or not type_tag.text:
            continue
        documented_type = extract_type_from_braces(type_tag.text)
        actual_type = extract_type_from_schema(member.schema)
        if not documented_type or not actual_type:
            continue
        normalized_documented = normalize_type(documented_type)
        normalized_actual = normalize_type(actual_type)
        if not normalized_documented or not normalized_actual:
            continue
        if types_equivalent(normalized_documented, normalized_actual):
            continue
        member_name = member.name or member.id or "property"
        drifts.append(
            Drift(
                type=DriftType.PROPERTY_TYPE_DRIFT,
                target=member_name,
                issue=(
                    f'Property "{member_name}" documented as {{{documented_type}}} but actual '
                    f"type is {actual_type}."
                ),
                suggestion=f"Update @type {{{actual_type}}} to match the declaration.",
            )
        )
    return drifts


__all__ = [
    "detect_generic_constraint_drift",
    "detect_property_type_drift",
    "detect_return_type_drift",
]
