"""Drag-and-drop reordering over the builder's visual section list.

The sidebar shows the page's active sections in composition order followed
by the sections that could still be added, in catalogue order. Only active
entries can be dragged or dropped on; visual positions are translated to
positions within ``active_sections`` before the store reorders anything.

The combined about/join section has its own drag surface: dropping one of
its sub-blocks on the other swaps which one sits on the left.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from site_composer._constants import (
    COMBINED_SECTION_ID,
    POSITION_ABOUT_LEFT,
    POSITION_JOIN_LEFT,
    SUB_BLOCK_ABOUT,
    SUB_BLOCK_JOIN,
)

if typ.TYPE_CHECKING:
    from site_composer.builder import CompositionDispatcher
    from site_composer.config import SectionDefinition, SectionRegistry

logger = logging.getLogger(__name__)

_SUB_BLOCKS = frozenset({SUB_BLOCK_ABOUT, SUB_BLOCK_JOIN})


@dc.dataclass(frozen=True, slots=True)
class VisualEntry:
    """One row of the sidebar list."""

    section_id: str
    display_name: str
    is_active: bool
    active_index: int | None = None


class DragDropController:
    """Translate sidebar drags into store reorders for the active theme."""

    def __init__(
        self, registry: SectionRegistry, dispatcher: CompositionDispatcher
    ) -> None:
        self.registry = registry
        self.dispatcher = dispatcher
        self._dragging: int | None = None

    def visual_entries(self) -> list[VisualEntry]:
        """Return active sections, then addable ones, for the current page."""
        state = self.dispatcher.state
        catalogue: dict[str, SectionDefinition] = {
            section.id: section
            for section in self.registry.get_sections_for_page_type(
                self.dispatcher.active_theme.value, state.active_page_type.value
            )
        }
        entries: list[VisualEntry] = []
        for index, section_id in enumerate(state.active_sections):
            definition = catalogue.get(section_id)
            if definition is None:
                continue
            entries.append(
                VisualEntry(section_id, definition.display_name, True, index)
            )
        active = set(state.active_sections)
        entries.extend(
            VisualEntry(section.id, section.display_name, False)
            for section in catalogue.values()
            if section.id not in active
        )
        return entries

    def can_drag(self, visual_index: int) -> bool:
        return self._active_index(visual_index) is not None

    def can_drop(self, visual_index: int) -> bool:
        return self._active_index(visual_index) is not None

    def start_drag(self, visual_index: int) -> bool:
        """Begin dragging the row at ``visual_index`` if it is active."""
        if not self.can_drag(visual_index):
            self._dragging = None
            return False
        self._dragging = visual_index
        return True

    def drop_on(self, visual_index: int) -> bool:
        """Finish the current drag on the row at ``visual_index``."""
        source, self._dragging = self._dragging, None
        if source is None:
            return False
        return self.move(source, visual_index)

    def cancel_drag(self) -> None:
        self._dragging = None

    @property
    def dragging(self) -> int | None:
        return self._dragging

    def move(self, from_visual: int, to_visual: int) -> bool:
        """Reorder by visual positions; inactive rows never change the order.

        Returns
        -------
        bool
            ``True`` when the store was asked to reorder.
        """
        source = self._active_index(from_visual)
        target = self._active_index(to_visual)
        if source is None or target is None:
            logger.debug(
                "Ignoring drop %d -> %d involving an inactive row", from_visual, to_visual
            )
            return False
        if source == target:
            return False
        self.dispatcher.reorder_sections(source, target)
        return True

    def drop_sub_block(self, dragged: str, target: str) -> bool:
        """Swap the combined section's sub-blocks when one lands on the other."""
        if dragged not in _SUB_BLOCKS or target not in _SUB_BLOCKS:
            logger.warning("Unknown sub-block drop %r -> %r", dragged, target)
            return False
        if dragged == target:
            return False
        position = self.combined_position()
        toggled = (
            POSITION_JOIN_LEFT if position == POSITION_ABOUT_LEFT else POSITION_ABOUT_LEFT
        )
        self.dispatcher.update_section_data(COMBINED_SECTION_ID, {"position": toggled})
        return True

    def combined_position(self) -> str:
        """Current ``position`` of the combined section, defaults included."""
        stored = self.dispatcher.state.section_data.get(COMBINED_SECTION_ID, {})
        if "position" in stored:
            return str(stored["position"])
        definition = self.registry.get_section_config(
            self.dispatcher.active_theme.value, COMBINED_SECTION_ID
        )
        default = definition.default_data.get("position") if definition else None
        return str(default or POSITION_ABOUT_LEFT)

    def _active_index(self, visual_index: int) -> int | None:
        entries = self.visual_entries()
        if not 0 <= visual_index < len(entries):
            return None
        entry = entries[visual_index]
        if not entry.is_active:
            return None
        return self.dispatcher.state.active_sections.index(entry.section_id)


__all__ = ["DragDropController", "VisualEntry"]
