"""Plain node objects produced by the section and editor factories."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ

from markupsafe import Markup, escape

Handler = cabc.Callable[..., None]


@dc.dataclass(slots=True)
class RenderedNode:
    """One rendered section, or an inline placeholder when rendering failed.

    Attributes
    ----------
    section_id : str
        Section this node stands for.
    html : Markup
        Fragment produced by the component (or the error placeholder).
    component_key : str | None
        Component that produced ``html``; ``None`` for placeholders raised
        before a component was resolved.
    props : dict[str, typ.Any]
        Defaults merged with instance data, plus derived display props.
    handlers : dict[str, Handler]
        Callbacks wired for the section (``on_select``, ``on_height_change``,
        ``on_about_click``, ``on_join_click``).
    error : str | None
        Placeholder message when the section could not be rendered.
    """

    section_id: str
    html: Markup
    component_key: str | None = None
    props: dict[str, typ.Any] = dc.field(default_factory=dict)
    handlers: dict[str, Handler] = dc.field(default_factory=dict)
    is_selected: bool = False
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


def error_node(
    section_id: str, message: str, *, component_key: str | None = None
) -> RenderedNode:
    """Return an inline placeholder node carrying ``message``."""
    html = Markup(
        '<div class="section-error" data-section="{0}" role="alert">{1}</div>'
    ).format(escape(section_id), escape(message))
    return RenderedNode(
        section_id=section_id,
        html=html,
        component_key=component_key,
        error=message,
    )


@dc.dataclass(slots=True)
class ArrayItemNode:
    """One entry of an array control."""

    index: int
    value: typ.Any
    removable: bool


@dc.dataclass(slots=True)
class ControlNode:
    """A visible editor control with its current value and state."""

    field_id: str
    control_type: str
    label: str
    value: typ.Any
    placeholder: str | None = None
    options: list[tuple[str, str]] = dc.field(default_factory=list)
    required: bool = False
    max_length: int | None = None
    items: list[ArrayItemNode] = dc.field(default_factory=list)
    can_add: bool = False
    max_items: int | None = None
    errors: list[str] = dc.field(default_factory=list)
    live: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class PanelNode:
    """Editor panel for one section."""

    theme_id: str
    section_id: str
    title: str
    controls: list[ControlNode] = dc.field(default_factory=list)
    error: str | None = None

    def control(self, field_id: str) -> ControlNode | None:
        for control in self.controls:
            if control.field_id == field_id:
                return control
        return None

    def field_ids(self) -> list[str]:
        return [control.field_id for control in self.controls]

    @property
    def is_error(self) -> bool:
        return self.error is not None


__all__ = [
    "ArrayItemNode",
    "ControlNode",
    "Handler",
    "PanelNode",
    "RenderedNode",
    "error_node",
]
