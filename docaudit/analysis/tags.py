"""Parsing helpers for documentation tags and type expressions.

Every function here is total: unparsable input yields ``None`` or an empty
collection instead of an exception.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..models import Export

_PARAM_TAG_PATTERN = re.compile(r"^(?:\{([^}]+)\}\s+)?(\S+)(?:\s+-\s+)?")
_BRACE_PATTERN = re.compile(r"^\{([^}]+)\}")
_TEMPLATE_BRACE_PATTERN = re.compile(r"^\{([^}]+)\}\s+(.+)$", re.DOTALL)
_PROMISE_PATTERN = re.compile(r"^promise<(.+)>$", re.IGNORECASE | re.DOTALL)
_TYPES_REF_PREFIX = "#/types/"
_VOID_EQUIVALENTS = {"void", "undefined"}
_CONSTRAINT_TERMINATORS = {"-", "–"}


@dataclass(frozen=True)
class ParsedParamTag:
    name: str
    type: Optional[str] = None
    is_optional: bool = False


@dataclass(frozen=True)
class TemplateTag:
    name: str
    constraint: Optional[str] = None


def extract_param_from_tag(text: str) -> Optional[ParsedParamTag]:
    """Parse ``{Type} [name=default] - description`` into its parts."""
    trimmed = (text or "").strip()
    if not trimmed:
        return None
    match = _PARAM_TAG_PATTERN.match(trimmed)
    if not match:
        return None
    raw_type, raw_name = match.group(1), match.group(2)
    is_optional = raw_name.startswith("[") and raw_name.endswith("]")
    name = normalize_param_name(raw_name)
    if not name:
        return None
    return ParsedParamTag(
        name=name,
        type=raw_type.strip() if raw_type else None,
        is_optional=is_optional,
    )


def normalize_param_name(raw: Optional[str]) -> Optional[str]:
    """Strip optional brackets, default values and trailing commas."""
    if not raw:
        return None
    name = raw.strip()
    if not name:
        return None
    if name.startswith("[") and name.endswith("]"):
        name = name[1:-1]
    if "=" in name:
        name = name[: name.index("=")]
    if name.endswith(","):
        name = name[:-1]
    return name or None


def extract_return_type_from_tag(text: str) -> Optional[str]:
    # A leading bare word is prose, not a type.
    return extract_type_from_braces((text or "").strip())


def extract_type_from_braces(text: str) -> Optional[str]:
    match = _BRACE_PATTERN.match(text or "")
    if not match:
        return None
    return match.group(1).strip() or None


def extract_type_from_schema(schema: Any) -> Optional[str]:
    """Render a declared schema as a comparable type string."""
    if not schema:
        return None
    if isinstance(schema, str):
        return schema
    if not isinstance(schema, dict):
        return None
    if isinstance(schema.get("type"), str):
        return schema["type"]
    ref = schema.get("$ref")
    if isinstance(ref, str):
        return ref[len(_TYPES_REF_PREFIX) :] if ref.startswith(_TYPES_REF_PREFIX) else ref
    for key in ("anyOf", "oneOf"):
        variants = schema.get(key)
        if isinstance(variants, list) and variants:
            rendered = [extract_type_from_schema(variant) for variant in variants]
            if all(rendered):
                return " | ".join(rendered)  # type: ignore[arg-type]
            return None
    return None


def normalize_type(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    collapsed = re.sub(r"\s+", " ", value)
    collapsed = re.sub(r"\s*<\s*", "<", collapsed)
    collapsed = re.sub(r"\s*>\s*", ">", collapsed)
    return collapsed.strip() or None


def types_equivalent(a: str, b: str) -> bool:
    if a == b:
        return True
    return a.lower() in _VOID_EQUIVALENTS and b.lower() in _VOID_EQUIVALENTS


def unwrap_promise(value: str) -> Optional[str]:
    match = _PROMISE_PATTERN.match(value or "")
    return match.group(1).strip() if match else None


def parse_template_tag(text: Optional[str]) -> Optional[TemplateTag]:
    """Parse ``{Constraint} Name`` or ``Name extends Constraint - description``."""
    remaining = (text or "").strip()
    if not remaining:
        return None

    constraint: Optional[str] = None
    brace_match = _TEMPLATE_BRACE_PATTERN.match(remaining)
    if brace_match:
        constraint = brace_match.group(1).strip()
        remaining = brace_match.group(2).strip()

    parts = remaining.split()
    if not parts:
        return None
    name = re.sub(r"[.,;:]+$", "", parts[0])
    if not name:
        return None

    rest = parts[1:]
    if not constraint and rest and rest[0] == "extends":
        tokens = rest[1:]
        for index, token in enumerate(tokens):
            if token in _CONSTRAINT_TERMINATORS:
                tokens = tokens[:index]
                break
        constraint = " ".join(tokens).strip()

    return TemplateTag(name=name, constraint=constraint or None)


def collect_actual_type_parameter_constraints(export: Export) -> Dict[str, Optional[str]]:
    """Map type-parameter names to constraints, export level first."""
    constraints: Dict[str, Optional[str]] = {}
    for type_param in export.type_parameters:
        constraints.setdefault(type_param.name, type_param.constraint or None)
    for signature in export.signatures:
        for type_param in signature.type_parameters:
            constraints.setdefault(type_param.name, type_param.constraint or None)
    return constraints


# ----------------------------------------------------------------------
# Issue text builders


def build_return_type_mismatch_issue(
    documented_raw: str, documented_normalized: str, declared_normalized: str
) -> str:
    doc_inner = unwrap_promise(documented_normalized)
    declared_inner = unwrap_promise(declared_normalized)

    if doc_inner and not declared_inner and doc_inner == declared_normalized:
        return (
            f"JSDoc documents Promise<{doc_inner}> but the function returns "
            f"{declared_normalized}."
        )
    if not doc_inner and declared_inner and documented_normalized == declared_inner:
        return (
            f"JSDoc documents {documented_normalized} but the function returns "
            f"Promise<{declared_inner}>."
        )
    return f"JSDoc documents {documented_raw} but the function returns {declared_normalized}."


def build_param_type_mismatch_issue(param_name: str, documented_raw: str, declared_raw: str) -> str:
    return (
        f'JSDoc documents {documented_raw} for parameter "{param_name}" but the signature '
        f"declares {declared_raw}."
    )


def build_generic_constraint_mismatch_issue(
    template_name: str,
    documented_constraint: Optional[str] = None,
    actual_constraint: Optional[str] = None,
) -> str:
    if actual_constraint and documented_constraint:
        return (
            f'JSDoc constrains template "{template_name}" to {documented_constraint} but the '
            f"declaration constrains it to {actual_constraint}."
        )
    if actual_constraint:
        return (
            f'JSDoc omits the constraint for template "{template_name}" but the declaration '
            f"constrains it to {actual_constraint}."
        )
    if documented_constraint:
        return (
            f'JSDoc constrains template "{template_name}" to {documented_constraint} but the '
            "declaration has no constraint."
        )
    return f'Template "{template_name}" has inconsistent constraints between JSDoc and the declaration.'


def build_generic_constraint_suggestion(
    template_name: str, actual_constraint: Optional[str] = None
) -> str:
    if actual_constraint:
        return f"Update @template to {{{actual_constraint}}} {template_name} to reflect the declaration."
    return f"Remove the constraint from @template {template_name} to match the declaration."


__all__ = [
    "ParsedParamTag",
    "TemplateTag",
    "build_generic_constraint_mismatch_issue",
    "build_generic_constraint_suggestion",
    "build_param_type_mismatch_issue",
    "build_return_type_mismatch_issue",
    "collect_actual_type_parameter_constraints",
    "extract_param_from_tag",
    "extract_return_type_from_tag",
    "extract_type_from_braces",
    "extract_type_from_schema",
    "normalize_param_name",
    "normalize_type",
    "parse_template_tag",
    "types_equivalent",
    "unwrap_promise",
]
