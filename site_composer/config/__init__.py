"""Load and query the theme and section catalogue.

This subpackage parses the packaged ``themes.yaml`` catalogue (or a
caller-supplied one), compiles editor visibility rules into predicates,
resolves ``sections_from`` reuse between themes, and exposes the result
through :class:`SectionRegistry`. :func:`default_registry` returns the
packaged catalogue, loaded once per process.

Examples
--------
>>> from site_composer.config import default_registry
>>> registry = default_registry()
>>> [s.id for s in registry.get_sections_for_page_type(
...     "professional-coach", "privacy-policy")]
['privacy-section']
"""

from .conditions import ALWAYS, Always, Equals, FieldCondition, is_visible
from .loader import DEFAULT_CATALOGUE_PATH, default_registry, load_registry
from .models import (
    ArrayFieldSpec,
    EditorFieldSpec,
    FieldOption,
    FieldValidation,
    RegistryError,
    SectionDefinition,
    StarterConfig,
    ThemeConfig,
)
from .registry import SectionRegistry

__all__ = [
    "ALWAYS",
    "DEFAULT_CATALOGUE_PATH",
    "Always",
    "ArrayFieldSpec",
    "EditorFieldSpec",
    "Equals",
    "FieldCondition",
    "FieldOption",
    "FieldValidation",
    "RegistryError",
    "SectionDefinition",
    "SectionRegistry",
    "StarterConfig",
    "ThemeConfig",
    "default_registry",
    "is_visible",
    "load_registry",
]
