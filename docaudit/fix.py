"""Fixability policy for detected drift."""

from __future__ import annotations

from typing import FrozenSet

from .models import Drift, DriftType

FIXABLE_DRIFT_TYPES: FrozenSet[DriftType] = frozenset(
    {
        DriftType.PARAM_MISMATCH,
        DriftType.PARAM_TYPE_MISMATCH,
        DriftType.OPTIONALITY_MISMATCH,
        DriftType.RETURN_TYPE_MISMATCH,
        DriftType.GENERIC_CONSTRAINT_MISMATCH,
        DriftType.EXAMPLE_ASSERTION_FAILED,
        DriftType.DEPRECATED_MISMATCH,
        DriftType.ASYNC_MISMATCH,
        DriftType.PROPERTY_TYPE_DRIFT,
    }
)


def is_fixable_drift(drift: Drift) -> bool:
    """Return True when the drift can be corrected mechanically from the declaration."""
    return drift.type in FIXABLE_DRIFT_TYPES


__all__ = ["FIXABLE_DRIFT_TYPES", "is_fixable_drift"]
