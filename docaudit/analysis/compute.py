"""Per-export drift pipeline."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, TypeVar

from ..models import Drift, ExampleRunResult, Export, ExportRegistry, Manifest
from ..snippets.parser import ExampleParser
from .examples import (
    detect_example_assertion_failures,
    detect_example_drift,
    detect_example_runtime_errors,
    detect_example_syntax_errors,
)
from .params import detect_optionality_drift, detect_param_drift, detect_param_type_drift
from .registry import build_export_registry
from .semantic import (
    detect_async_mismatch,
    detect_broken_links,
    detect_deprecated_drift,
    detect_visibility_drift,
)
from .signatures import (
    detect_generic_constraint_drift,
    detect_property_type_drift,
    detect_return_type_drift,
)

T = TypeVar("T")


@dataclass
class DriftResult:
    """Drift per export, keyed by export id (or name) in manifest order."""

    exports: Dict[str, List[Drift]] = field(default_factory=dict)


def compute_export_drift(
    export: Export,
    registry: Optional[ExportRegistry] = None,
    *,
    parser: Optional[ExampleParser] = None,
) -> List[Drift]:
    """Run every static detector over one export, in a fixed order."""
    return [
        *detect_param_drift(export),
        *detect_optionality_drift(export),
        *detect_param_type_drift(export),
        *detect_return_type_drift(export),
        *detect_generic_constraint_drift(export),
        *detect_deprecated_drift(export),
        *detect_visibility_drift(export),
        *detect_example_drift(export, registry, parser=parser),
        *detect_broken_links(export, registry),
        *detect_example_syntax_errors(export, parser=parser),
        *detect_async_mismatch(export),
        *detect_property_type_drift(export),
    ]


def compute_drift(
    manifest: Manifest,
    *,
    max_workers: Optional[int] = None,
    parser: Optional[ExampleParser] = None,
) -> DriftResult:
    """Compute drift for every export of ``manifest``.

    The registry is built from the whole manifest before any export is
    analysed; afterwards exports are independent and may run on a thread pool.
    """
    registry = build_export_registry(manifest)
    drifts = map_exports(
        manifest.exports,
        lambda export: compute_export_drift(export, registry, parser=parser),
        max_workers=max_workers,
    )
    result = DriftResult()
    for export, export_drift in zip(manifest.exports, drifts):
        result.exports[export.key] = export_drift
    return result


def compute_runtime_drift(export: Export, results: Mapping[int, ExampleRunResult]) -> List[Drift]:
    """Drift derived from executed examples: failures first, then assertions."""
    return [
        *detect_example_runtime_errors(export, results),
        *detect_example_assertion_failures(export, results),
    ]


def map_exports(
    exports: List[Export],
    func: Callable[[Export], T],
    *,
    max_workers: Optional[int] = None,
) -> List[T]:
    """Apply ``func`` to each export, preserving order."""
    if not max_workers or max_workers <= 1 or len(exports) <= 1:
        return [func(export) for export in exports]
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="docaudit") as pool:
        return list(pool.map(func, exports))


__all__ = [
    "DriftResult",
    "compute_drift",
    "compute_export_drift",
    "compute_runtime_drift",
    "map_exports",
]
