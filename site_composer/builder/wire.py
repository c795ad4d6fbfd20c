"""JSON wire format exchanged with the website persistence service.

Field names are Pythonic; the encoded keys follow the backend contract
(``themeId``, ``addedSections``, ``sectionData``, ``selectedPageType``,
``isMobileView``, ``isPublished``).

Examples
--------
>>> config = WebsiteConfiguration(theme_id="fitness-trainer", active_sections=["hero"])
>>> b'"addedSections":["hero"]' in encode_configuration(config)
True
"""

from __future__ import annotations

import typing as typ

import msgspec


class WebsiteConfiguration(msgspec.Struct, kw_only=True):
    """Serialisable snapshot of one theme builder store."""

    theme_id: str = msgspec.field(name="themeId")
    active_sections: list[str] = msgspec.field(
        default_factory=list, name="addedSections"
    )
    section_data: dict[str, dict[str, typ.Any]] = msgspec.field(
        default_factory=dict, name="sectionData"
    )
    active_page_type: str = msgspec.field(default="sales-page", name="selectedPageType")
    is_mobile_preview: bool = msgspec.field(default=False, name="isMobileView")
    is_published: bool = msgspec.field(default=False, name="isPublished")


class SaveResponse(msgspec.Struct, kw_only=True):
    """Body returned by ``POST /website/save``."""

    success: bool
    message: str = ""
    website_id: str | None = msgspec.field(default=None, name="websiteId")


class AvailabilityResponse(msgspec.Struct, kw_only=True):
    """Body returned by the subdomain availability check."""

    available: bool = False


class SubdomainUpdateResponse(msgspec.Struct, kw_only=True):
    """Body returned by ``PATCH /instructor/subdomain``."""

    success: bool = False
    error: str | None = None
    message: str | None = None


def encode_configuration(config: WebsiteConfiguration) -> bytes:
    return msgspec.json.encode(config)


def decode_configuration(payload: bytes | str) -> WebsiteConfiguration:
    """Decode and validate a configuration body.

    Raises
    ------
    msgspec.ValidationError
        If a required key is missing or a value has the wrong type.
    msgspec.DecodeError
        If ``payload`` is not valid JSON.
    """
    return msgspec.json.decode(payload, type=WebsiteConfiguration)


__all__ = [
    "AvailabilityResponse",
    "SaveResponse",
    "SubdomainUpdateResponse",
    "WebsiteConfiguration",
    "decode_configuration",
    "encode_configuration",
]
