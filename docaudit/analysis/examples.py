"""Drift detectors for ``@example`` code: references, syntax, runtime and assertions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..models import Drift, DriftType, Export, ExportRegistry, ExampleRunResult
from ..snippets.builtins import is_built_in_identifier
from ..snippets.parser import ExampleParser
from .fuzzy import find_closest_match

_OPENING_FENCE = re.compile(r"^```(?:ts|typescript|js|javascript)?\n?", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\n?```$")
_ASSERTION = re.compile(r"//\s*=>\s*(.+?)\s*$")
_ERROR_LINE = re.compile(r"^(?:Error|TypeError|ReferenceError|SyntaxError):\s*(.+)")

_TYPE_LIKE_KINDS = {"class", "interface", "type", "enum"}
_MAX_SUGGESTION_DISTANCE = 5
_MAX_ERROR_LENGTH = 100

_default_parser: Optional[ExampleParser] = None


def _get_parser(parser: Optional[ExampleParser]) -> ExampleParser:
    global _default_parser
    if parser is not None:
        return parser
    if _default_parser is None:
        _default_parser = ExampleParser()
    return _default_parser


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    stripped = text.strip()
    stripped = _OPENING_FENCE.sub("", stripped, count=1)
    stripped = _CLOSING_FENCE.sub("", stripped, count=1)
    return stripped.strip()


def example_code(example: Any) -> Optional[str]:
    """Return the raw source of a manifest example (string or ``{"code": ...}``)."""
    if isinstance(example, str):
        return example
    if isinstance(example, Mapping):
        code = example.get("code")
        if isinstance(code, str):
            return code
    return None


# ----------------------------------------------------------------------
# Reference drift


def detect_example_drift(
    export: Export,
    registry: Optional[ExportRegistry] = None,
    *,
    parser: Optional[ExampleParser] = None,
) -> List[Drift]:
    """Report identifiers used in examples that no export or type provides."""
    if registry is None or not export.examples:
        return []

    active_parser = _get_parser(parser)
    drifts: List[Drift] = []
    for example in export.examples:
        raw = example_code(example)
        if raw is None:
            continue
        code = strip_code_fences(raw)
        if not code:
            continue

        parsed = active_parser.parse(code)
        local_declarations = set()
        referenced: Dict[str, str] = {}
        for use in parsed.identifiers:
            if len(use.name) <= 1:
                continue
            if use.is_declaration:
                local_declarations.add(use.name)
                continue
            if is_built_in_identifier(use.name):
                continue
            existing = referenced.get(use.name)
            if existing is None or use.context == "call":
                referenced[use.name] = use.context

        for identifier, context in referenced.items():
            if identifier in local_declarations or identifier in registry.all:
                continue
            match = find_closest_match(identifier, _candidates_for(context, registry))
            has_close_match = match is not None and match.distance <= _MAX_SUGGESTION_DISTANCE
            if not has_close_match and not identifier[0].isupper():
                continue
            drifts.append(
                Drift(
                    type=DriftType.EXAMPLE_DRIFT,
                    target=identifier,
                    issue=f'@example references "{identifier}" which does not exist in this package.',
                    suggestion=f'Did you mean "{match.value}"?' if has_close_match else None,
                )
            )
    return drifts


def _candidates_for(context: str, registry: ExportRegistry) -> List[str]:
    if context == "call":
        return sorted({info.name for info in registry.exports.values() if info.is_callable})
    if context == "type":
        names = set(registry.types)
        names.update(info.name for info in registry.exports.values() if info.kind in _TYPE_LIKE_KINDS)
        return sorted(names)
    return sorted(registry.exports)


# ----------------------------------------------------------------------
# Syntax drift


def detect_example_syntax_errors(export: Export, *, parser: Optional[ExampleParser] = None) -> List[Drift]:
    if not export.examples:
        return []

    active_parser = _get_parser(parser)
    drifts: List[Drift] = []
    for index, example in enumerate(export.examples):
        raw = example_code(example)
        if raw is None:
            continue
        code = strip_code_fences(raw)
        if not code:
            continue
        parsed = active_parser.parse(code)
        if not parsed.syntax_errors:
            continue
        first = parsed.syntax_errors[0]
        drifts.append(
            Drift(
                type=DriftType.EXAMPLE_SYNTAX_ERROR,
                target=f"example[{index}]",
                issue=f"@example contains invalid syntax: {first.message}",
                suggestion="Check for missing brackets, semicolons, or typos.",
            )
        )
    return drifts


# ----------------------------------------------------------------------
# Runtime drift


def extract_error_message(stderr: str) -> str:
    """Pull the most useful single line out of a stderr dump."""
    lines = [line for line in stderr.split("\n") if line.strip()]
    if not lines:
        return "Unknown error"
    for line in lines:
        match = _ERROR_LINE.match(line)
        if match:
            return match.group(0)
    first_line = lines[0]
    if len(first_line) > _MAX_ERROR_LENGTH:
        return f"{first_line[:_MAX_ERROR_LENGTH]}..."
    return first_line


def detect_example_runtime_errors(export: Export, results: Mapping[int, ExampleRunResult]) -> List[Drift]:
    if not export.examples or not results:
        return []

    drifts: List[Drift] = []
    for index in range(len(export.examples)):
        result = results.get(index)
        if result is None or result.success:
            continue
        if "timed out" in result.stderr:
            issue = f"@example timed out after {result.duration}ms."
            suggestion = "Check for infinite loops or long-running operations."
        else:
            issue = f"@example throws at runtime: {extract_error_message(result.stderr)}"
            suggestion = "Fix the example code or update it to match the current API."
        drifts.append(
            Drift(
                type=DriftType.EXAMPLE_RUNTIME_ERROR,
                target=f"example[{index}]",
                issue=issue,
                suggestion=suggestion,
            )
        )
    return drifts


# ----------------------------------------------------------------------
# Assertions


@dataclass(frozen=True)
class Assertion:
    line_number: int
    expected: str


def parse_assertions(code: str) -> List[Assertion]:
    """Collect trailing ``// => expected`` comments with their 1-based line numbers."""
    assertions: List[Assertion] = []
    for line_number, line in enumerate(strip_code_fences(code).split("\n"), start=1):
        match = _ASSERTION.search(line)
        if match and match.group(1):
            assertions.append(Assertion(line_number=line_number, expected=match.group(1).strip()))
    return assertions


def detect_example_assertion_failures(
    export: Export, results: Mapping[int, ExampleRunResult]
) -> List[Drift]:
    """Compare ``// =>`` assertions positionally against non-empty stdout lines."""
    if not export.examples or not results:
        return []

    drifts: List[Drift] = []
    for index, example in enumerate(export.examples):
        result = results.get(index)
        code = example_code(example)
        if result is None or not result.success or code is None:
            continue
        assertions = parse_assertions(code)
        if not assertions:
            continue

        stdout_lines = [line.strip() for line in result.stdout.split("\n") if line.strip()]
        for position, assertion in enumerate(assertions):
            target = f"example[{index}]:line{assertion.line_number}"
            if position >= len(stdout_lines):
                drifts.append(
                    Drift(
                        type=DriftType.EXAMPLE_ASSERTION_FAILED,
                        target=target,
                        issue=f'Assertion expected "{assertion.expected}" but no output was produced',
                        suggestion="Ensure the example produces output for each assertion",
                    )
                )
                continue
            actual = stdout_lines[position]
            if assertion.expected.strip() == actual:
                continue
            drifts.append(
                Drift(
                    type=DriftType.EXAMPLE_ASSERTION_FAILED,
                    target=target,
                    issue=f'Assertion failed: expected "{assertion.expected}" but got "{actual}"',
                    suggestion=f"Update assertion to: // => {actual}",
                )
            )
    return drifts


__all__ = [
    "Assertion",
    "detect_example_assertion_failures",
    "detect_example_drift",
    "detect_example_runtime_errors",
    "detect_example_syntax_errors",
    "example_code",
    "extract_error_message",
    "parse_assertions",
    "strip_code_fences",
]
