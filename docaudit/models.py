"""Core data models shared across docaudit components."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set


class ManifestError(RuntimeError):
    """Raised when an export manifest cannot be read."""


# ----------------------------------------------------------------------
# Manifest


@dataclass(frozen=True)
class Tag:
    """Raw documentation tag, e.g. ``@param {string} id - the id``."""

    name: str
    text: str = ""


@dataclass(frozen=True)
class Parameter:
    name: str
    schema: Any = None
    required: Optional[bool] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class SignatureReturn:
    schema: Any = None
    description: Optional[str] = None


@dataclass(frozen=True)
class TypeParameter:
    name: str
    constraint: Optional[str] = None


@dataclass(frozen=True)
class Signature:
    parameters: List[Parameter] = field(default_factory=list)
    returns: Optional[SignatureReturn] = None
    type_parameters: List[TypeParameter] = field(default_factory=list)


@dataclass(frozen=True)
class Member:
    """Class or interface member (property, method, accessor)."""

    id: Optional[str] = None
    name: Optional[str] = None
    kind: Optional[str] = None
    visibility: Optional[str] = None
    tags: List[Tag] = field(default_factory=list)
    schema: Any = None


@dataclass(frozen=True)
class Export:
    """A single exported symbol of the analyzed package."""

    name: str
    id: Optional[str] = None
    kind: Optional[str] = None
    signatures: List[Signature] = field(default_factory=list)
    members: List[Member] = field(default_factory=list)
    tags: List[Tag] = field(default_factory=list)
    description: Optional[str] = None
    examples: List[Any] = field(default_factory=list)
    deprecated: bool = False
    type_parameters: List[TypeParameter] = field(default_factory=list)
    flags: Dict[str, Any] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def key(self) -> str:
        """Identity used for per-export result maps."""
        return self.id or self.name


@dataclass(frozen=True)
class TypeEntry:
    name: str
    id: Optional[str] = None
    kind: Optional[str] = None


@dataclass(frozen=True)
class Manifest:
    """Structured export/type description of a package's public API."""

    exports: List[Export] = field(default_factory=list)
    types: List[TypeEntry] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Manifest":
        """Build a manifest from its camelCase JSON form, skipping malformed entries."""
        exports = [
            export
            for export in (_export_from_dict(item) for item in _as_list(payload.get("exports")))
            if export is not None
        ]
        types = [
            entry
            for entry in (_type_from_dict(item) for item in _as_list(payload.get("types")))
            if entry is not None
        ]
        return cls(
            exports=exports,
            types=types,
            meta=_as_dict(payload.get("meta")),
            raw=dict(payload),
        )


def load_manifest(path: Path) -> Manifest:
    """Read a manifest JSON file from disk."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"Unable to read manifest {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Manifest {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"Manifest {path} must contain a JSON object at the root")
    return Manifest.from_dict(data)


def _export_from_dict(payload: object) -> Optional[Export]:
    if not isinstance(payload, dict):
        return None
    name = _as_str(payload.get("name"))
    export_id = _as_str(payload.get("id"))
    if not name and not export_id:
        return None
    return Export(
        name=name or export_id or "",
        id=export_id,
        kind=_as_str(payload.get("kind")),
        signatures=[
            signature
            for signature in (_signature_from_dict(item) for item in _as_list(payload.get("signatures")))
            if signature is not None
        ],
        members=[
            member
            for member in (_member_from_dict(item) for item in _as_list(payload.get("members")))
            if member is not None
        ],
        tags=_tags_from_list(payload.get("tags")),
        description=_as_str(payload.get("description")),
        examples=_as_list(payload.get("examples")),
        deprecated=payload.get("deprecated") is True,
        type_parameters=_type_parameters_from_list(payload.get("typeParameters")),
        flags=_as_dict(payload.get("flags")),
        raw=dict(payload),
    )


def _type_from_dict(payload: object) -> Optional[TypeEntry]:
    if not isinstance(payload, dict):
        return None
    name = _as_str(payload.get("name"))
    type_id = _as_str(payload.get("id"))
    if not name and not type_id:
        return None
    return TypeEntry(name=name or type_id or "", id=type_id, kind=_as_str(payload.get("kind")))


def _signature_from_dict(payload: object) -> Optional[Signature]:
    if not isinstance(payload, dict):
        return None
    parameters: List[Parameter] = []
    for item in _as_list(payload.get("parameters")):
        if not isinstance(item, dict):
            continue
        name = _as_str(item.get("name"))
        if not name:
            continue
        required = item.get("required")
        parameters.append(
            Parameter(
                name=name,
                schema=item.get("schema"),
                required=required if isinstance(required, bool) else None,
                description=_as_str(item.get("description")),
            )
        )
    returns = None
    returns_data = payload.get("returns")
    if isinstance(returns_data, dict):
        returns = SignatureReturn(
            schema=returns_data.get("schema"),
            description=_as_str(returns_data.get("description")),
        )
    return Signature(
        parameters=parameters,
        returns=returns,
        type_parameters=_type_parameters_from_list(payload.get("typeParameters")),
    )


def _member_from_dict(payload: object) -> Optional[Member]:
    if not isinstance(payload, dict):
        return None
    return Member(
        id=_as_str(payload.get("id")),
        name=_as_str(payload.get("name")),
        kind=_as_str(payload.get("kind")),
        visibility=_as_str(payload.get("visibility")),
        tags=_tags_from_list(payload.get("tags")),
        schema=payload.get("schema"),
    )


def _tags_from_list(value: object) -> List[Tag]:
    tags: List[Tag] = []
    for item in _as_list(value):
        if not isinstance(item, dict):
            continue
        name = _as_str(item.get("name"))
        if not name:
            continue
        tags.append(Tag(name=name, text=_as_str(item.get("text")) or ""))
    return tags


def _type_parameters_from_list(value: object) -> List[TypeParameter]:
    params: List[TypeParameter] = []
    for item in _as_list(value):
        if not isinstance(item, dict):
            continue
        name = _as_str(item.get("name"))
        if not name:
            continue
        params.append(TypeParameter(name=name, constraint=_as_str(item.get("constraint"))))
    return params


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, list) else []


def _as_dict(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


# ----------------------------------------------------------------------
# Drift


class DriftType(str, Enum):
    PARAM_MISMATCH = "param-mismatch"
    PARAM_TYPE_MISMATCH = "param-type-mismatch"
    RETURN_TYPE_MISMATCH = "return-type-mismatch"
    OPTIONALITY_MISMATCH = "optionality-mismatch"
    GENERIC_CONSTRAINT_MISMATCH = "generic-constraint-mismatch"
    PROPERTY_TYPE_DRIFT = "property-type-drift"
    ASYNC_MISMATCH = "async-mismatch"
    DEPRECATED_MISMATCH = "deprecated-mismatch"
    VISIBILITY_MISMATCH = "visibility-mismatch"
    BROKEN_LINK = "broken-link"
    EXAMPLE_DRIFT = "example-drift"
    EXAMPLE_SYNTAX_ERROR = "example-syntax-error"
    EXAMPLE_RUNTIME_ERROR = "example-runtime-error"
    EXAMPLE_ASSERTION_FAILED = "example-assertion-failed"


class DriftCategory(str, Enum):
    STRUCTURAL = "structural"
    SEMANTIC = "semantic"
    EXAMPLE = "example"


DRIFT_CATEGORIES: Dict[DriftType, DriftCategory] = {
    DriftType.PARAM_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.PARAM_TYPE_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.RETURN_TYPE_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.OPTIONALITY_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.GENERIC_CONSTRAINT_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.PROPERTY_TYPE_DRIFT: DriftCategory.STRUCTURAL,
    DriftType.ASYNC_MISMATCH: DriftCategory.STRUCTURAL,
    DriftType.DEPRECATED_MISMATCH: DriftCategory.SEMANTIC,
    DriftType.VISIBILITY_MISMATCH: DriftCategory.SEMANTIC,
    DriftType.BROKEN_LINK: DriftCategory.SEMANTIC,
    DriftType.EXAMPLE_DRIFT: DriftCategory.EXAMPLE,
    DriftType.EXAMPLE_SYNTAX_ERROR: DriftCategory.EXAMPLE,
    DriftType.EXAMPLE_RUNTIME_ERROR: DriftCategory.EXAMPLE,
    DriftType.EXAMPLE_ASSERTION_FAILED: DriftCategory.EXAMPLE,
}

_UNCATEGORIZED = [drift_type.value for drift_type in DriftType if drift_type not in DRIFT_CATEGORIES]
if _UNCATEGORIZED:  # pragma: no cover - guards future edits to DriftType
    raise RuntimeError(f"Drift types without a category: {', '.join(_UNCATEGORIZED)}")

DRIFT_CATEGORY_LABELS: Dict[DriftCategory, str] = {
    DriftCategory.STRUCTURAL: "Signature mismatches",
    DriftCategory.SEMANTIC: "Metadata issues",
    DriftCategory.EXAMPLE: "Example problems",
}

DRIFT_CATEGORY_DESCRIPTIONS: Dict[DriftCategory, str] = {
    DriftCategory.STRUCTURAL: "Documented types or parameters don't match the declared signature",
    DriftCategory.SEMANTIC: "Deprecation, visibility, or reference issues",
    DriftCategory.EXAMPLE: "@example code has errors or doesn't work correctly",
}


@dataclass(frozen=True)
class Drift:
    """A detected mismatch between documentation and declaration."""

    type: DriftType
    issue: str
    target: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type.value}
        if self.target is not None:
            data["target"] = self.target
        data["issue"] = self.issue
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data


@dataclass(frozen=True)
class CoverageMetadata:
    """Coverage score plus optional missing signals and drift."""

    coverage_score: int
    missing: Optional[List[str]] = None
    drift: Optional[List[Drift]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"coverageScore": self.coverage_score}
        if self.missing:
            data["missing"] = list(self.missing)
        if self.drift:
            data["drift"] = [drift.to_dict() for drift in self.drift]
        return data


# ----------------------------------------------------------------------
# Analysis support


@dataclass(frozen=True)
class ExampleRunResult:
    """Outcome of executing one example snippet (duration in milliseconds)."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    duration: int = 0


@dataclass(frozen=True)
class ExportInfo:
    name: str
    kind: str
    is_callable: bool


@dataclass(frozen=True)
class ExportRegistry:
    """Name lookup tables over every export and type of a manifest."""

    exports: Dict[str, ExportInfo] = field(default_factory=dict)
    types: Set[str] = field(default_factory=set)
    all: Set[str] = field(default_factory=set)


@dataclass(frozen=True)
class ClosestMatch:
    value: str
    distance: int
