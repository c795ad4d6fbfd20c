"""Common literal values used across site_composer.

Theme identifiers, page types, and the handful of section ids that carry
special behaviour live here so the registry, stores, factories, and tests
can import the same values without drifting.

Examples
--------
>>> from site_composer._constants import PageType, ThemeKind
>>> PageType("privacy-policy").singleton_section
'privacy-section'
>>> ThemeKind.FITNESS_TRAINER.value
'fitness-trainer'
"""

from __future__ import annotations

import enum


class ThemeKind(enum.StrEnum):
    """Closed set of theme variants, each backed by its own builder store."""

    PROFESSIONAL_COACH = "professional-coach"
    FITNESS_TRAINER = "fitness-trainer"
    START_FROM_SCRATCH = "start-from-scratch"


class PageType(enum.StrEnum):
    """Page views a website is composed of."""

    SALES_PAGE = "sales-page"
    PRIVACY_POLICY = "privacy-policy"
    TERMS_OF_SERVICE = "terms-of-service"

    @property
    def singleton_section(self) -> str | None:
        """Return the fixed section id of a static page, or None."""
        return _SINGLETON_SECTIONS.get(self)

    @property
    def is_static(self) -> bool:
        """Return True for pages whose composition cannot be edited."""
        return self in _SINGLETON_SECTIONS


PRIVACY_SECTION_ID = "privacy-section"
TERMS_SECTION_ID = "terms-section"

_SINGLETON_SECTIONS: dict[PageType, str] = {
    PageType.PRIVACY_POLICY: PRIVACY_SECTION_ID,
    PageType.TERMS_OF_SERVICE: TERMS_SECTION_ID,
}

DEFAULT_THEME = ThemeKind.PROFESSIONAL_COACH
DEFAULT_PAGE_TYPE = PageType.SALES_PAGE

BANNER_SECTION_ID = "banner"
DOMAIN_SECTION_ID = "domain"
COMBINED_SECTION_ID = "about-join-combined"

# Combined-section sub-blocks and the two values of its ``position`` field.
SUB_BLOCK_ABOUT = "about"
SUB_BLOCK_JOIN = "join"
POSITION_ABOUT_LEFT = "about-left"
POSITION_JOIN_LEFT = "join-left"

SECTION_ROLES = frozenset({"content", "combined", "settings", "static"})

CONTROL_TYPES = frozenset(
    {
        "text",
        "textarea",
        "file",
        "color",
        "number",
        "select",
        "radio",
        "checkbox",
        "array",
    }
)

__all__ = [
    "BANNER_SECTION_ID",
    "COMBINED_SECTION_ID",
    "CONTROL_TYPES",
    "DEFAULT_PAGE_TYPE",
    "DEFAULT_THEME",
    "DOMAIN_SECTION_ID",
    "POSITION_ABOUT_LEFT",
    "POSITION_JOIN_LEFT",
    "PRIVACY_SECTION_ID",
    "SECTION_ROLES",
    "SUB_BLOCK_ABOUT",
    "SUB_BLOCK_JOIN",
    "TERMS_SECTION_ID",
    "PageType",
    "ThemeKind",
]
