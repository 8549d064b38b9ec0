"""Subprocess execution of example snippets."""

from __future__ import annotations

import subprocess
import tempfile
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..analysis.examples import example_code, strip_code_fences
from ..logging import get_logger
from ..models import ExampleRunResult
from ..stores.example_cache import ExampleResultCache

DEFAULT_COMMAND = ("node", "--experimental-strip-types")
DEFAULT_TIMEOUT_MS = 5000


class ExampleRunner:
    """Runs example code as ``command + [snippet_file]`` and captures the outcome.

    Timeouts and launch failures are returned as failed results; ``run`` never
    raises for problems in the snippet or the interpreter.
    """

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_COMMAND,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        cwd: Path | None = None,
        cache: ExampleResultCache | None = None,
        suffix: str = ".ts",
    ) -> None:
        if not command:
            raise ValueError("Example runner command must not be empty")
        self.command: List[str] = list(command)
        self.timeout_ms = timeout_ms
        self.cwd = cwd
        self.cache = cache
        self.suffix = suffix
        self._logger = get_logger("runner")

    def run(self, code: str) -> ExampleRunResult:
        source = strip_code_fences(code)
        cache_key: Optional[str] = None
        if self.cache is not None:
            cache_key = ExampleResultCache.make_key(self.command, source)
            cached = self.cache.get(cache_key)
            if cached is not None:
                self._logger.debug("Using cached example result %s", cache_key[:12])
                return cached

        result = self._execute(source)
        # Timed-out runs are never cached.
        if self.cache is not None and cache_key is not None and "timed out" not in result.stderr:
            self.cache.store(cache_key, result)
        return result

    def run_all(self, examples: Sequence[object]) -> Dict[int, ExampleRunResult]:
        """Run every non-empty example, keyed by its position in ``examples``."""
        results: Dict[int, ExampleRunResult] = {}
        for index, example in enumerate(examples):
            code = example_code(example)
            if code is None or not strip_code_fences(code):
                continue
            results[index] = self.run(code)
        return results

    def _execute(self, source: str) -> ExampleRunResult:
        with tempfile.TemporaryDirectory(prefix="docaudit-example-") as tmp:
            snippet = Path(tmp) / f"example{self.suffix}"
            snippet.write_text(source, encoding="utf-8", errors="replace")
            args = [*self.command, str(snippet)]
            started = time.monotonic()
            try:
                completed = subprocess.run(
                    args,
                    capture_output=True,
                    timeout=self.timeout_ms / 1000,
                    cwd=self.cwd,
                )
            except subprocess.TimeoutExpired as exc:
                self._logger.warning("Example timed out after %sms", self.timeout_ms)
                return ExampleRunResult(
                    success=False,
                    stdout=_as_text(exc.stdout),
                    stderr=f"Example timed out after {self.timeout_ms}ms",
                    exit_code=-1,
                    duration=self.timeout_ms,
                )
            except OSError as exc:
                self._logger.warning("Unable to launch example runner '%s': %s", self.command[0], exc)
                return ExampleRunResult(
                    success=False,
                    stderr=f"Error: unable to launch {self.command[0]}: {exc}",
                    exit_code=-1,
                    duration=_elapsed_ms(started),
                )

        duration = _elapsed_ms(started)
        self._logger.debug("Example exited with %s in %sms", completed.returncode, duration)
        return ExampleRunResult(
            success=completed.returncode == 0,
            stdout=_as_text(completed.stdout),
            stderr=_as_text(completed.stderr),
            exit_code=completed.returncode,
            duration=duration,
        )


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _as_text(value: object) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value if isinstance(value, str) else ""


__all__ = ["DEFAULT_COMMAND", "DEFAULT_TIMEOUT_MS", "ExampleRunner"]
