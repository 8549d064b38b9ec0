from __future__ import annotations

import pytest

from docaudit.snippets.parser import ExampleParser
from tests._fixtures.manifest_builder import ManifestBuilder


@pytest.fixture
def manifest_builder() -> ManifestBuilder:
    """Provide an empty manifest builder."""
    return ManifestBuilder()


@pytest.fixture(scope="session")
def example_parser() -> ExampleParser:
    return ExampleParser()
