from __future__ import annotations

import pytest

from site_composer.builder import BuilderContext, create_builder_context
from site_composer.config import SectionRegistry, default_registry


@pytest.fixture
def registry() -> SectionRegistry:
    """Return the packaged section catalogue."""
    return default_registry()


@pytest.fixture
def context(registry: SectionRegistry) -> BuilderContext:
    """Return a builder context with no persistence service attached."""
    return create_builder_context(registry=registry)
