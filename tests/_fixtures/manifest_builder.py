"""Helper utilities for constructing export manifests in tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from docaudit.models import Export, Manifest


def tag(name: str, text: str = "") -> Dict[str, str]:
    return {"name": name, "text": text}


def param(
    name: str,
    schema: Any = "string",
    *,
    required: bool = True,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    data: Dict[str, Any] = {"name": name, "schema": schema, "required": required}
    if description is not None:
        data["description"] = description
    return data


def signature(
    *parameters: Dict[str, Any],
    returns: Any = None,
    returns_description: Optional[str] = None,
    type_parameters: Iterable[Dict[str, Any]] = (),
) -> Dict[str, Any]:
    data: Dict[str, Any] = {"parameters": list(parameters)}
    if returns is not None or returns_description is not None:
        returns_data: Dict[str, Any] = {}
        if returns is not None:
            returns_data["schema"] = returns
        if returns_description is not None:
            returns_data["description"] = returns_description
        data["returns"] = returns_data
    type_params = list(type_parameters)
    if type_params:
        data["typeParameters"] = type_params
    return data


class ManifestBuilder:
    """Accumulates exports and types, then renders them as a manifest."""

    def __init__(self) -> None:
        self.exports: List[Dict[str, Any]] = []
        self.types: List[Dict[str, Any]] = []
        self.meta: Dict[str, Any] = {"name": "fixture-pkg", "version": "1.0.0"}

    def add(self, name: str, kind: str = "function", **fields: Any) -> "ManifestBuilder":
        """Add an export; ``fields`` use the manifest's camelCase keys."""
        entry: Dict[str, Any] = {"id": name, "name": name, "kind": kind}
        entry.update(fields)
        self.exports.append(entry)
        return self

    def add_function(
        self,
        name: str,
        *parameters: Dict[str, Any],
        returns: Any = None,
        returns_description: Optional[str] = None,
        **fields: Any,
    ) -> "ManifestBuilder":
        sig = signature(*parameters, returns=returns, returns_description=returns_description)
        return self.add(name, "function", signatures=[sig], **fields)

    def add_type(self, name: str, kind: str = "interface") -> "ManifestBuilder":
        self.types.append({"id": name, "name": name, "kind": kind})
        return self

    def payload(self) -> Dict[str, Any]:
        return {"meta": dict(self.meta), "exports": list(self.exports), "types": list(self.types)}

    def build(self) -> Manifest:
        return Manifest.from_dict(self.payload())

    def export(self, name: str) -> Export:
        for entry in self.build().exports:
            if entry.name == name:
                return entry
        raise KeyError(name)

    def write(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.payload(), indent=2), encoding="utf-8")
        return path


__all__ = ["ManifestBuilder", "param", "signature", "tag"]
