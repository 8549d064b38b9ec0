"""Export registry used for cross-reference validation."""

from __future__ import annotations

from typing import Dict, Set

from ..models import ExportInfo, ExportRegistry, Manifest

_CALLABLE_KINDS = {"function", "class"}


def build_export_registry(manifest: Manifest) -> ExportRegistry:
    """Index every export and type by name and id.

    Must see the whole manifest before any per-export detection runs.
    """
    exports: Dict[str, ExportInfo] = {}
    types: Set[str] = set()
    all_names: Set[str] = set()

    for entry in manifest.exports:
        kind = entry.kind or "unknown"
        info = ExportInfo(name=entry.name, kind=kind, is_callable=kind in _CALLABLE_KINDS)
        exports[entry.name] = info
        all_names.add(entry.name)
        if entry.id:
            exports[entry.id] = info
            all_names.add(entry.id)

    for entry in manifest.types:
        types.add(entry.name)
        all_names.add(entry.name)
        if entry.id:
            types.add(entry.id)
            all_names.add(entry.id)

    return ExportRegistry(exports=exports, types=types, all=all_names)


__all__ = ["build_export_registry"]
