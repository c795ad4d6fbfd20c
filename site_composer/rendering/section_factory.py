"""Resolve a section id to its component and render it.

Resolution goes theme -> section definition -> component. A missing
definition or component, or a component that raises while rendering,
yields an inline placeholder node so one broken section never takes the
rest of the page down with it.

Examples
--------
>>> from site_composer.config import default_registry
>>> factory = SectionFactory(default_registry())
>>> factory.render("professional-coach", "nonexistent").error
'Section configuration not found'
"""

from __future__ import annotations

import collections.abc as cabc
import functools
import logging
import typing as typ

from markupsafe import Markup, escape

from site_composer._constants import (
    BANNER_SECTION_ID,
    POSITION_ABOUT_LEFT,
    SUB_BLOCK_ABOUT,
    SUB_BLOCK_JOIN,
)

from .components import ComponentRegistry
from .nodes import Handler, RenderedNode, error_node

if typ.TYPE_CHECKING:
    from site_composer.builder import CompositionDispatcher
    from site_composer.config import SectionDefinition, SectionRegistry

logger = logging.getLogger(__name__)

SECTION_NOT_FOUND = "Section configuration not found"


def combined_order(position: object) -> str:
    """Map the combined section's ``position`` to its display order.

    >>> combined_order("about-left")
    'about-first'
    >>> combined_order("join-left")
    'join-first'
    """
    return "about-first" if position == POSITION_ABOUT_LEFT else "join-first"


class SectionFactory:
    """Render catalogue sections through their registered components."""

    def __init__(
        self,
        registry: SectionRegistry,
        components: ComponentRegistry | None = None,
        *,
        dispatcher: CompositionDispatcher | None = None,
    ) -> None:
        self.registry = registry
        self.components = components or ComponentRegistry.from_templates()
        self.dispatcher = dispatcher

    def render(
        self,
        theme_id: str,
        section_id: str,
        instance_data: cabc.Mapping[str, typ.Any] | None = None,
        all_section_data: cabc.Mapping[str, cabc.Mapping[str, typ.Any]] | None = None,
        *,
        is_selected: bool = False,
        is_editable: bool = False,
        on_select: cabc.Callable[[], None] | None = None,
        on_height_change: cabc.Callable[[str], None] | None = None,
        public_view: cabc.Mapping[str, typ.Any] | None = None,
    ) -> RenderedNode:
        """Render ``section_id`` of ``theme_id`` with its instance data.

        Parameters
        ----------
        theme_id, section_id : str
            Catalogue coordinates of the section.
        instance_data : Mapping | None
            The section's stored data; it wins over registry defaults.
        all_section_data : Mapping | None
            Every section's data, for components that read siblings (the
            offer box shows the design colours, for instance).
        is_selected, is_editable : bool
            Display state forwarded to the component.
        on_select : Callable[[], None] | None
            Selection handler. Editable sections default to selecting
            themselves through the dispatcher.
        on_height_change : Callable[[str], None] | None
            Height callback, wired for the banner only. Defaults to writing
            ``bannerHeight`` through the dispatcher.
        public_view : Mapping | None
            Published-site context (subdomain, instructor) for public pages.

        Returns
        -------
        RenderedNode
            The rendered section or an inline placeholder.
        """
        definition = self.registry.get_section_config(theme_id, section_id)
        if definition is None:
            logger.warning(
                "Section config not found for theme %s, section %s", theme_id, section_id
            )
            return error_node(section_id, SECTION_NOT_FOUND)

        component = self.components.get(definition.component_key)
        if component is None:
            logger.warning("Section component not found: %s", definition.component_key)
            return error_node(
                section_id,
                f"Component not found: {definition.component_key}",
                component_key=definition.component_key,
            )

        merged = {**definition.default_data, **(instance_data or {})}
        handlers = self._handlers(
            definition,
            is_editable=is_editable,
            on_select=on_select,
            on_height_change=on_height_change,
        )
        props: dict[str, typ.Any] = {
            **merged,
            "section_id": section_id,
            "theme_id": theme_id,
            "all_section_data": dict(all_section_data or {}),
            "is_editable": is_editable,
            "is_selected": is_selected,
            "editor_mode": merged.get("editorMode"),
            "public_view": dict(public_view or {}),
        }
        if definition.is_combined:
            props["order"] = combined_order(merged.get("position"))

        try:
            body = component(props)
        except Exception:  # noqa: BLE001 - render boundary
            logger.exception("Error rendering section %s", section_id)
            return error_node(
                section_id,
                f"Error rendering section: {section_id}",
                component_key=definition.component_key,
            )

        return RenderedNode(
            section_id=section_id,
            html=_wrap(section_id, definition.component_key, body, is_selected=is_selected),
            component_key=definition.component_key,
            props=props,
            handlers=handlers,
            is_selected=is_selected,
        )

    def render_sections(
        self,
        theme_id: str,
        section_ids: cabc.Iterable[str],
        all_section_data: cabc.Mapping[str, cabc.Mapping[str, typ.Any]],
        *,
        selected_section_id: str | None = None,
        is_editable: bool = False,
        public_view: cabc.Mapping[str, typ.Any] | None = None,
    ) -> list[RenderedNode]:
        """Render ``section_ids`` in order, each isolated from the others."""
        return [
            self.render(
                theme_id,
                section_id,
                all_section_data.get(section_id),
                all_section_data,
                is_selected=section_id == selected_section_id,
                is_editable=is_editable,
                public_view=public_view,
            )
            for section_id in section_ids
        ]

    def _handlers(
        self,
        definition: SectionDefinition,
        *,
        is_editable: bool,
        on_select: cabc.Callable[[], None] | None,
        on_height_change: cabc.Callable[[str], None] | None,
    ) -> dict[str, Handler]:
        handlers: dict[str, Handler] = {}
        dispatcher = self.dispatcher
        section_id = definition.id

        if on_select is None and is_editable and dispatcher is not None:
            on_select = functools.partial(dispatcher.set_selected_section, section_id)
        if on_select is not None:
            handlers["on_select"] = on_select

        if section_id == BANNER_SECTION_ID:
            if on_height_change is None and dispatcher is not None:
                on_height_change = functools.partial(_write_banner_height, dispatcher)
            if on_height_change is not None:
                handlers["on_height_change"] = on_height_change

        if definition.is_combined and dispatcher is not None:
            handlers["on_about_click"] = functools.partial(
                dispatcher.update_section_data, section_id, {"editorMode": SUB_BLOCK_ABOUT}
            )
            handlers["on_join_click"] = functools.partial(
                dispatcher.update_section_data, section_id, {"editorMode": SUB_BLOCK_JOIN}
            )
        return handlers


def _write_banner_height(dispatcher: CompositionDispatcher, height: str) -> None:
    dispatcher.update_section_data(BANNER_SECTION_ID, {"bannerHeight": height})


def _wrap(section_id: str, component_key: str, body: str, *, is_selected: bool) -> Markup:
    classes = "site-section is-selected" if is_selected else "site-section"
    return Markup(
        '<section class="{0}" data-section="{1}" data-component="{2}">{3}</section>'
    ).format(classes, escape(section_id), escape(component_key), Markup(body))


__all__ = ["SECTION_NOT_FOUND", "SectionFactory", "combined_order"]
