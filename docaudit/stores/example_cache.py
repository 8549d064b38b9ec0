"""Persistent cache for example execution results."""

from __future__ import annotations

import hashlib
import json
import time
from dataclasses import asdict
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Sequence

from ..models import ExampleRunResult

_CACHE_VERSION = 1


class ExampleResultCache:
    """Stores example run results keyed by command and source fingerprint.

    Entries older than ``ttl_seconds`` are treated as missing. ``clock`` returns
    the current time in seconds and exists so expiry can be tested.
    """

    def __init__(
        self,
        path: Path | None = None,
        *,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._path = path
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Dict[str, object]] = {}
        self._dirty = False
        if self._path is not None:
            self._load(self._path)

    @staticmethod
    def make_key(command: Sequence[str], code: str) -> str:
        digest = hashlib.sha256()
        digest.update("\0".join(command).encode("utf-8", errors="surrogatepass"))
        digest.update(b"\0\0")
        digest.update(code.encode("utf-8", errors="surrogatepass"))
        return digest.hexdigest()

    def get(self, key: str) -> Optional[ExampleRunResult]:
        entry = self._entries.get(key)
        if not entry:
            return None
        if self._is_expired(entry):
            return None
        return _result_from_dict(entry.get("result"))

    def store(self, key: str, result: ExampleRunResult) -> None:
        self._entries[key] = {"stored_at": self._clock(), "result": asdict(result)}
        self._dirty = True

    def prune(self, keys_to_keep: Iterable[str] | None = None) -> None:
        """Drop expired entries and, when given, every key not in ``keys_to_keep``."""
        keep = set(keys_to_keep) if keys_to_keep is not None else None
        removed = [
            key
            for key, entry in self._entries.items()
            if self._is_expired(entry) or (keep is not None and key not in keep)
        ]
        if removed:
            for key in removed:
                self._entries.pop(key, None)
            self._dirty = True

    def persist(self) -> None:
        if not self._dirty or self._path is None:
            return
        payload = {"version": _CACHE_VERSION, "entries": self._entries}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        self._dirty = False

    def clear(self) -> None:
        self._entries.clear()
        self._dirty = True

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Internal helpers

    def _is_expired(self, entry: Dict[str, object]) -> bool:
        if self._ttl is None:
            return False
        stored_at = entry.get("stored_at")
        if not isinstance(stored_at, (int, float)):
            return True
        return self._clock() - stored_at > self._ttl

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError):
            return
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        valid_entries: Dict[str, Dict[str, object]] = {}
        for key, raw in entries.items():
            if not isinstance(key, str) or not isinstance(raw, dict):
                continue
            if _result_from_dict(raw.get("result")) is None:
                continue
            valid_entries[key] = raw
        self._entries = valid_entries
        self._dirty = False


def _result_from_dict(payload: object) -> Optional[ExampleRunResult]:
    if not isinstance(payload, dict):
        return None
    success = payload.get("success")
    stdout = payload.get("stdout", "")
    stderr = payload.get("stderr", "")
    exit_code = payload.get("exit_code", 0)
    duration = payload.get("duration", 0)
    if not isinstance(success, bool) or not isinstance(stdout, str) or not isinstance(stderr, str):
        return None
    if not isinstance(exit_code, int) or not isinstance(duration, int):
        return None
    return ExampleRunResult(
        success=success, stdout=stdout, stderr=stderr, exit_code=exit_code, duration=duration
    )


__all__ = ["ExampleResultCache"]
