"""Shared test fixtures."""

from __future__ import annotations

import pytest

from pkgmanagers.translator.builder import Translator
from pkgmanagers.translator.registry import DefinitionRegistry


@pytest.fixture(scope="session")
def registry() -> DefinitionRegistry:
    """Registry of the bundled presets, loaded once per session."""
    return DefinitionRegistry.from_builtin()


@pytest.fixture
def translator(registry: DefinitionRegistry) -> Translator:
    return Translator(registry)
