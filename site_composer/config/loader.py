"""Load the section catalogue YAML into typed dataclasses."""

from __future__ import annotations

import functools
import logging
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from site_composer._constants import PageType

from .helpers import (
    _build_field,
    _optional_str,
    _string_list,
    _validate_role,
)
from .models import RegistryError, SectionDefinition, StarterConfig, ThemeConfig
from .registry import SectionRegistry

logger = logging.getLogger(__name__)

DEFAULT_CATALOGUE_PATH = Path(__file__).parent / "themes.yaml"
_PAGE_TYPES = frozenset(page_type.value for page_type in PageType)


def load_registry(path: Path) -> SectionRegistry:
    """Load the YAML catalogue describing themes, sections, and editors.

    Parameters
    ----------
    path : Path
        Filesystem path to the catalogue (for example, ``themes.yaml``).

    Returns
    -------
    SectionRegistry
        Registry holding every theme in declaration order.

    Raises
    ------
    FileNotFoundError
        If the catalogue file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    RegistryError
        If a theme, section, or field entry is missing required keys or
        refers to something that does not exist.

    Examples
    --------
    >>> from site_composer.config import DEFAULT_CATALOGUE_PATH, load_registry
    >>> registry = load_registry(DEFAULT_CATALOGUE_PATH)
    >>> registry.get_section_config("fitness-trainer", "hero").component_key
    'FitnessHero'
    """
    if not path.exists():
        msg = f"Catalogue file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):  # pragma: no cover - config error guard
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)

    themes_raw = loaded.get("themes") or {}
    if not themes_raw:
        msg = "No themes defined in section catalogue."
        raise RegistryError(msg)

    themes: dict[str, ThemeConfig] = {}
    for theme_id, payload in themes_raw.items():
        match payload:
            case dict():
                themes[theme_id] = _build_theme(
                    theme_id=str(theme_id), payload=payload, known=themes
                )
            case _:
                msg = f"Theme '{theme_id}' must be a mapping."
                raise RegistryError(msg)
    logger.debug("Loaded %d themes from %s", len(themes), path)
    return SectionRegistry(themes)


@functools.cache
def default_registry() -> SectionRegistry:
    """Return the packaged catalogue, loaded once per process."""
    return load_registry(DEFAULT_CATALOGUE_PATH)


def _build_theme(
    *,
    theme_id: str,
    payload: typ.Mapping[str, typ.Any],
    known: typ.Mapping[str, ThemeConfig],
) -> ThemeConfig:
    """Build one ThemeConfig, resolving ``sections_from`` against ``known``."""
    context = f"Theme '{theme_id}'"
    source = _optional_str(payload.get("sections_from"))
    if source is not None:
        if "sections" in payload:
            msg = f"{context} may declare 'sections' or 'sections_from', not both."
            raise RegistryError(msg)
        if source not in known:
            msg = f"{context} reuses unknown theme '{source}'."
            raise RegistryError(msg)
        sections = known[source].sections
    else:
        sections = _build_sections(payload.get("sections"), context=context)

    section_ids = {section.id for section in sections}
    page_types = _build_page_types(
        payload.get("page_types"), section_ids=section_ids, context=context
    )
    starter = _build_starter(
        payload.get("starter"), section_ids=section_ids, context=context
    )
    return ThemeConfig(
        id=theme_id,
        display_name=str(payload.get("name") or theme_id.replace("-", " ").title()),
        sections=sections,
        page_types=page_types,
        starter=starter,
        preview_component=_optional_str(payload.get("preview_component")),
        description=str(payload.get("description", "") or ""),
    )


def _build_sections(
    payload: object, *, context: str
) -> tuple[SectionDefinition, ...]:
    if not isinstance(payload, list) or not payload:
        msg = f"{context} defines no sections."
        raise RegistryError(msg)
    sections: list[SectionDefinition] = []
    seen: set[str] = set()
    for entry in payload:
        if not isinstance(entry, dict):
            msg = f"{context}: section entries must be mappings."
            raise RegistryError(msg)
        section = _build_section(entry, context=context)
        if section.id in seen:
            msg = f"{context}: duplicate section id '{section.id}'."
            raise RegistryError(msg)
        seen.add(section.id)
        sections.append(section)
    return tuple(sections)


def _build_section(
    payload: typ.Mapping[str, typ.Any], *, context: str
) -> SectionDefinition:
    section_id = _optional_str(payload.get("id"))
    if section_id is None:
        msg = f"{context}: section is missing 'id'."
        raise RegistryError(msg)
    section_context = f"{context}, section '{section_id}'"
    component_key = _optional_str(payload.get("component"))
    if component_key is None:
        msg = f"{section_context} is missing 'component'."
        raise RegistryError(msg)
    defaults = payload.get("defaults", {}) or {}
    if not isinstance(defaults, dict):
        msg = f"{section_context}: 'defaults' must be a mapping."
        raise RegistryError(msg)
    fields_raw = payload.get("fields", []) or []
    if not isinstance(fields_raw, list):
        msg = f"{section_context}: 'fields' must be a list."
        raise RegistryError(msg)
    fields = []
    for entry in fields_raw:
        if not isinstance(entry, dict):
            msg = f"{section_context}: field entries must be mappings."
            raise RegistryError(msg)
        fields.append(_build_field(entry, context=section_context))
    return SectionDefinition(
        id=section_id,
        display_name=str(payload.get("name") or section_id),
        component_key=component_key,
        default_data=dict(defaults),
        editor_fields=tuple(fields),
        role=_validate_role(payload.get("role", "content"), context=section_context),
        icon=_optional_str(payload.get("icon")),
    )


def _build_page_types(
    payload: object, *, section_ids: set[str], context: str
) -> dict[str, frozenset[str]]:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        msg = f"{context}: 'page_types' must be a mapping."
        raise RegistryError(msg)
    result: dict[str, frozenset[str]] = {}
    for page_type, ids in payload.items():
        if page_type not in _PAGE_TYPES:
            msg = f"{context}: unknown page type '{page_type}'."
            raise RegistryError(msg)
        allowed = _string_list(ids, context=f"{context}: page type '{page_type}'")
        unknown = sorted(set(allowed) - section_ids)
        if unknown:
            msg = f"{context}: page type '{page_type}' lists unknown sections {unknown}."
            raise RegistryError(msg)
        result[str(page_type)] = frozenset(allowed)
    return result


def _build_starter(
    payload: object, *, section_ids: set[str], context: str
) -> StarterConfig:
    if payload is None:
        return StarterConfig()
    if not isinstance(payload, dict):
        msg = f"{context}: 'starter' must be a mapping."
        raise RegistryError(msg)
    sections = _string_list(payload.get("sections"), context=f"{context}: starter")
    unknown = sorted(set(sections) - section_ids)
    if unknown:
        msg = f"{context}: starter lists unknown sections {unknown}."
        raise RegistryError(msg)
    if len(set(sections)) != len(sections):
        msg = f"{context}: starter lists a section more than once."
        raise RegistryError(msg)
    data = payload.get("data", {}) or {}
    if not isinstance(data, dict) or not all(
        isinstance(value, dict) for value in data.values()
    ):
        msg = f"{context}: starter 'data' must map section ids to mappings."
        raise RegistryError(msg)
    return StarterConfig(
        sections=tuple(sections),
        data={str(key): dict(value) for key, value in data.items()},
    )


__all__ = ["DEFAULT_CATALOGUE_PATH", "default_registry", "load_registry"]
