"""Drift detectors for documented ``@param`` tags."""

from __future__ import annotations

from typing import Dict, List, Optional

from ..models import Drift, DriftType, Export
from .fuzzy import find_closest_match
from .tags import (
    ParsedParamTag,
    build_param_type_mismatch_issue,
    extract_param_from_tag,
    extract_type_from_schema,
    normalize_type,
    types_equivalent,
)

_MAX_LISTED_PARAMS = 6
_MAX_LISTED_PROPERTIES = 8
_PROPERTY_PREVIEW = 5


def _documented_params(export: Export) -> List[ParsedParamTag]:
    parsed: List[ParsedParamTag] = []
    for tag in export.tags:
        if tag.name != "param" or not tag.text:
            continue
        param = extract_param_from_tag(tag.text)
        if param is not None:
            parsed.append(param)
    return parsed


def detect_param_drift(export: Export) -> List[Drift]:
    """Report ``@param`` names that don't exist in any signature."""
    if not export.signatures:
        return []

    # Dict keys keep first-seen order for suggestion lists.
    actual_names: Dict[str, None] = {}
    param_properties: Dict[str, List[str]] = {}
    for signature in export.signatures:
        for param in signature.parameters:
            actual_names.setdefault(param.name, None)
            properties = _schema_properties(param.schema)
            if properties is not None:
                param_properties[param.name] = properties

    if not actual_names:
        return []

    drifts: List[Drift] = []
    for documented in _documented_params(export):
        name = documented.name
        if name in actual_names:
            continue

        if "." in name:
            prefix, _, property_path = name.partition(".")
            if prefix in actual_names:
                properties = param_properties.get(prefix)
                if properties is None:
                    # Opaque parameter type; nothing to verify against.
                    continue
                first_property = property_path.split(".", 1)[0]
                if first_property in properties:
                    continue
                drifts.append(
                    Drift(
                        type=DriftType.PARAM_MISMATCH,
                        target=name,
                        issue=(
                            f'JSDoc documents property "{property_path}" on parameter '
                            f'"{prefix}" which does not exist.'
                        ),
                        suggestion=_property_suggestion(prefix, first_property, properties),
                    )
                )
                continue

        params = list(actual_names)
        match = find_closest_match(name, params)
        suggestion: Optional[str] = None
        if match is not None:
            suggestion = f'Did you mean "{match.value}"?'
        elif len(params) <= _MAX_LISTED_PARAMS:
            suggestion = f"Available parameters: {', '.join(params)}"
        drifts.append(
            Drift(
                type=DriftType.PARAM_MISMATCH,
                target=name,
                issue=f'JSDoc documents parameter "{name}" which is not present in the signature.',
                suggestion=suggestion,
            )
        )
    return drifts


def _schema_properties(schema: object) -> Optional[List[str]]:
    if not isinstance(schema, dict):
        return None
    properties = schema.get("properties")
    if not isinstance(properties, dict):
        return None
    return [str(key) for key in properties]


def _property_suggestion(prefix: str, property_name: str, properties: List[str]) -> Optional[str]:
    match = find_closest_match(property_name, properties)
    if match is not None:
        return f'Did you mean "{prefix}.{match.value}"?'
    if not properties or len(properties) > _MAX_LISTED_PROPERTIES:
        return None
    listed = ", ".join(f"{prefix}.{prop}" for prop in properties[:_PROPERTY_PREVIEW])
    if len(properties) > _PROPERTY_PREVIEW:
        return f"Available: {listed}... ({len(properties)} total)"
    return f"Available: {listed}"


def detect_optionality_drift(export: Export) -> List[Drift]:
    """Compare ``[name]`` brackets with the declared ``required`` flag."""
    actual_optional: Dict[str, bool] = {}
    for signature in export.signatures:
        for param in signature.parameters:
            actual_optional.setdefault(param.name, param.required is False)
    if not actual_optional:
        return []

    drifts: List[Drift] = []
    for documented in _documented_params(export):
        is_optional = actual_optional.get(documented.name)
        if is_optional is None or is_optional == documented.is_optional:
            continue
        name = documented.name
        if documented.is_optional:
            issue = f'JSDoc marks parameter "{name}" optional but the signature requires it.'
            suggestion = f"Remove brackets around {name} or mark the parameter optional in the signature."
        else:
            issue = (
                f'JSDoc omits optional brackets for parameter "{name}" but the signature '
                "marks it optional."
            )
            suggestion = f"Document {name} as [{name}] or make it required in the signature."
        drifts.append(
            Drift(type=DriftType.OPTIONALITY_MISMATCH, target=name, issue=issue, suggestion=suggestion)
        )
    return drifts


def detect_param_type_drift(export: Export) -> List[Drift]:
    """Compare ``@param {Type}`` against the declared parameter schema."""
    documented = [param for param in _documented_params(export) if param.type]
    if not documented:
        return []

    declared: Dict[str, str] = {}
    for signature in export.signatures:
        for param in signature.parameters:
            if param.name in declared:
                continue
            declared_type = extract_type_from_schema(param.schema)
            if declared_type:
                declared[param.name] = declared_type
    if not declared:
        return []

    drifts: List[Drift] = []
    for param in documented:
        declared_type = declared.get(param.name)
        if not declared_type or not param.type:
            continue
        documented_normalized = normalize_type(param.type)
        declared_normalized = normalize_type(declared_type)
        if not documented_normalized or not declared_normalized:
            continue
        if types_equivalent(documented_normalized, declared_normalized):
            continue
        drifts.append(
            Drift(
                type=DriftType.PARAM_TYPE_MISMATCH,
                target=param.name,
                issue=build_param_type_mismatch_issue(param.name, param.type, declared_type),
                suggestion=f"Update @param {{{declared_type}}} {param.name} to match the signature.",
            )
        )
    return drifts


__all__ = ["detect_optionality_drift", "detect_param_drift", "detect_param_type_drift"]
