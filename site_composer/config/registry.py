"""Read-only lookups over the loaded section catalogue."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .models import SectionDefinition, StarterConfig, ThemeConfig


class SectionRegistry:
    """Pure lookups of themes, sections, and page-type filters.

    Every lookup tolerates unknown identifiers: missing themes and sections
    return ``None`` (or an empty list) rather than raising, so callers can
    render an inline placeholder instead of failing.
    """

    def __init__(self, themes: typ.Mapping[str, ThemeConfig]) -> None:
        self._themes = dict(themes)

    def themes(self) -> list[ThemeConfig]:
        """Return every theme in catalogue order."""
        return list(self._themes.values())

    def theme_ids(self) -> list[str]:
        return list(self._themes)

    def get_theme_config(self, theme_id: str) -> ThemeConfig | None:
        return self._themes.get(theme_id)

    def get_section_config(
        self, theme_id: str, section_id: str
    ) -> SectionDefinition | None:
        theme = self._themes.get(theme_id)
        if theme is None:
            return None
        return theme.get_section(section_id)

    def get_sections_for_page_type(
        self, theme_id: str, page_type: str
    ) -> list[SectionDefinition]:
        """Return the sections a page type may show, in catalogue order.

        Page types the theme does not list fall back to the full catalogue;
        unknown themes yield an empty list.
        """
        theme = self._themes.get(theme_id)
        if theme is None:
            return []
        allowed = theme.page_types.get(page_type)
        if allowed is None:
            return list(theme.sections)
        return [section for section in theme.sections if section.id in allowed]

    def starter(self, theme_id: str) -> StarterConfig | None:
        """Return the built-in composition of ``theme_id``, if known."""
        theme = self._themes.get(theme_id)
        return None if theme is None else theme.starter


__all__ = ["SectionRegistry"]
