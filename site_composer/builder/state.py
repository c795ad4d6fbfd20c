"""Mutable per-theme builder state."""

from __future__ import annotations

import copy
import dataclasses as dc
import typing as typ

from site_composer._constants import DEFAULT_PAGE_TYPE, PageType


@dc.dataclass(slots=True)
class BuilderState:
    """Everything one theme's builder remembers between edits.

    Attributes
    ----------
    active_sections : list[str]
        Ordered, duplicate-free section ids composing the current page.
    section_data : dict[str, dict[str, typ.Any]]
        Per-section instance data; registry defaults fill the gaps at render
        time.
    selected_section_id : str | None
        Section whose editor panel is open.
    active_page_type : PageType
        Page currently shown in the builder.
    cached_sales_page_sections : list[str]
        Sales-page composition remembered while a static page is shown.
    """

    active_sections: list[str] = dc.field(default_factory=list)
    section_data: dict[str, dict[str, typ.Any]] = dc.field(default_factory=dict)
    selected_section_id: str | None = None
    active_page_type: PageType = DEFAULT_PAGE_TYPE
    cached_sales_page_sections: list[str] = dc.field(default_factory=list)
    is_mobile_preview: bool = False
    is_saving: bool = False
    is_publishing: bool = False
    is_published: bool = False
    is_initialized: bool = False

    def snapshot(self) -> BuilderState:
        """Return a deep copy that later edits cannot reach."""
        return copy.deepcopy(self)


__all__ = ["BuilderState"]
