"""Per-theme builder store: the composition state machine.

One :class:`ThemeBuilderStore` exists per :class:`ThemeKind`. Each store is
seeded from its theme's starter composition and owns an independent
:class:`BuilderState`. Mutators validate their input, log a warning and
leave the state untouched when the input is unusable, and notify
subscribers with the action name after every state change.

Examples
--------
>>> from site_composer._constants import ThemeKind
>>> from site_composer.config import StarterConfig
>>> store = ThemeBuilderStore(ThemeKind.PROFESSIONAL_COACH, StarterConfig(("banner",)))
>>> store.initialize_defaults()
>>> store.add_section("video")
>>> store.state.active_sections
['banner', 'video']
>>> store.set_active_page_type("privacy-policy")
>>> store.state.active_sections
['privacy-section']
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import logging
import typing as typ

from site_composer._constants import PageType, ThemeKind

from .state import BuilderState
from .wire import WebsiteConfiguration

if typ.TYPE_CHECKING:
    from site_composer.config import StarterConfig

logger = logging.getLogger(__name__)

Listener = cabc.Callable[[str], None]


class ThemeBuilderStore:
    """Builder state machine for a single theme."""

    def __init__(self, theme: ThemeKind, starter: StarterConfig) -> None:
        self.theme = theme
        self.starter = starter
        self._state = BuilderState()
        self._listeners: list[Listener] = []

    def __repr__(self) -> str:
        return f"ThemeBuilderStore(theme={self.theme.value!r})"

    @property
    def state(self) -> BuilderState:
        """Live state object; mutate it only through the store's actions."""
        return self._state

    def subscribe(self, listener: Listener) -> cabc.Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, action: str) -> None:
        logger.debug("%s:%s", self.theme.value, action)
        for listener in list(self._listeners):
            try:
                listener(action)
            except Exception:  # noqa: BLE001 - subscriber boundary
                logger.exception(
                    "%s:%s listener %r failed", self.theme.value, action, listener
                )

    def _reject(self, action: str, reason: str, *args: object) -> None:
        logger.warning("%s:%s rejected: " + reason, self.theme.value, action, *args)

    def _refresh_sales_cache(self) -> None:
        if self._state.active_page_type is PageType.SALES_PAGE:
            self._state.cached_sales_page_sections = list(self._state.active_sections)

    def _editable_page(self, action: str) -> bool:
        page_type = self._state.active_page_type
        if page_type.is_static:
            self._reject(action, "the %s page has a fixed composition", page_type.value)
            return False
        return True

    # -- composition -------------------------------------------------------

    def add_section(self, section_id: str) -> None:
        """Append ``section_id`` and select it; a no-op when already present."""
        if not isinstance(section_id, str) or not section_id:
            self._reject("addSection", "section id must be a non-empty string")
            return
        if not self._editable_page("addSection"):
            return
        if section_id in self._state.active_sections:
            return
        self._state.active_sections.append(section_id)
        self._state.selected_section_id = section_id
        self._refresh_sales_cache()
        self._commit("addSection")

    def remove_section(self, section_id: str) -> None:
        """Drop ``section_id`` from the page along with its instance data."""
        if not isinstance(section_id, str) or not section_id:
            self._reject("removeSection", "section id must be a non-empty string")
            return
        if not self._editable_page("removeSection"):
            return
        state = self._state
        state.active_sections = [s for s in state.active_sections if s != section_id]
        state.section_data.pop(section_id, None)
        if state.selected_section_id == section_id:
            state.selected_section_id = None
        self._refresh_sales_cache()
        self._commit("removeSection")

    def reorder_sections(self, from_index: int, to_index: int) -> None:
        """Move the section at ``from_index`` so it ends up at ``to_index``.

        The source index must address an existing entry; the target index is
        clamped into the list bounds.
        """
        if not self._editable_page("reorderSections"):
            return
        sections = self._state.active_sections
        if not 0 <= from_index < len(sections):
            self._reject(
                "reorderSections",
                "source index %d outside 0..%d",
                from_index,
                len(sections) - 1,
            )
            return
        target = min(max(to_index, 0), len(sections) - 1)
        moved = sections.pop(from_index)
        sections.insert(target, moved)
        self._refresh_sales_cache()
        self._commit("reorderSections")

    def set_selected_section(self, section_id: str | None) -> None:
        """Select an active section, or clear the selection with ``None``."""
        if section_id and section_id not in self._state.active_sections:
            self._reject(
                "setSelectedSection", "%r is not on the current page", section_id
            )
            return
        self._state.selected_section_id = section_id or None
        self._commit("setSelectedSection")

    # -- section data ------------------------------------------------------

    def update_section_data(
        self, section_id: str, partial: cabc.Mapping[str, typ.Any]
    ) -> None:
        """Shallow-merge ``partial`` into the instance data of ``section_id``."""
        if not isinstance(section_id, str) or not section_id:
            self._reject("updateSectionData", "section id must be a non-empty string")
            return
        if not isinstance(partial, cabc.Mapping):
            self._reject(
                "updateSectionData",
                "data for %s must be a mapping, got %s",
                section_id,
                type(partial).__name__,
            )
            return
        current = self._state.section_data.get(section_id, {})
        self._state.section_data[section_id] = {**current, **partial}
        self._commit("updateSectionData")

    def replace_section_data(
        self, section_id: str, data: cabc.Mapping[str, typ.Any]
    ) -> None:
        """Overwrite the instance data of ``section_id`` with ``data``."""
        if not isinstance(section_id, str) or not section_id:
            self._reject("replaceSectionData", "section id must be a non-empty string")
            return
        if not isinstance(data, cabc.Mapping):
            self._reject(
                "replaceSectionData",
                "data for %s must be a mapping, got %s",
                section_id,
                type(data).__name__,
            )
            return
        self._state.section_data[section_id] = copy.deepcopy(dict(data))
        self._commit("replaceSectionData")

    # -- page type ---------------------------------------------------------

    def set_active_page_type(self, page_type: str) -> None:
        """Switch the builder to ``page_type``.

        Leaving the sales page snapshots its composition; static pages show
        their single fixed section; returning to the sales page restores
        the snapshot. The first section of the resulting list is selected.
        """
        try:
            target = PageType(page_type)
        except ValueError:
            self._reject("setActivePageType", "unknown page type %r", page_type)
            return
        state = self._state
        previous = state.active_page_type
        if previous is PageType.SALES_PAGE and target is not PageType.SALES_PAGE:
            state.cached_sales_page_sections = list(state.active_sections)

        match target:
            # The snapshot is restored even when empty; a legal page section
            # never carries over into the sales composition.
            case PageType.SALES_PAGE if previous is not PageType.SALES_PAGE:
                state.active_sections = list(state.cached_sales_page_sections)
            case PageType.SALES_PAGE:
                pass
            case _:
                state.active_sections = [typ.cast("str", target.singleton_section)]

        state.active_page_type = target
        state.selected_section_id = (
            state.active_sections[0] if state.active_sections else None
        )
        self._commit("setActivePageType")

    # -- flags -------------------------------------------------------------

    def set_mobile_preview(self, enabled: bool) -> None:  # noqa: FBT001
        self._state.is_mobile_preview = bool(enabled)
        self._commit("setMobilePreview")

    def set_saving(self, saving: bool) -> None:  # noqa: FBT001
        self._state.is_saving = bool(saving)
        self._commit("setSaving")

    def set_publishing(self, publishing: bool) -> None:  # noqa: FBT001
        self._state.is_publishing = bool(publishing)
        self._commit("setPublishing")

    def set_published(self, published: bool) -> None:  # noqa: FBT001
        self._state.is_published = bool(published)
        self._commit("setPublished")

    # -- lifecycle ---------------------------------------------------------

    def reset_builder(self) -> None:
        """Return every field to its empty initial value."""
        self._state = BuilderState()
        self._commit("resetBuilder")

    def initialize_defaults(self) -> None:
        """Seed the starter composition once; later calls keep user edits."""
        if self._state.is_initialized:
            return
        state = self._state
        state.active_sections = list(self.starter.sections)
        state.section_data = self.starter.section_data()
        state.selected_section_id = (
            state.active_sections[0] if state.active_sections else None
        )
        state.cached_sales_page_sections = list(state.active_sections)
        state.is_initialized = True
        self._commit("initializeDefaults")

    def load_from_template(
        self,
        sections: cabc.Sequence[str],
        data: cabc.Mapping[str, cabc.Mapping[str, typ.Any]],
    ) -> None:
        """Overwrite the composition and its data, selecting the first section."""
        if isinstance(sections, str) or not all(
            isinstance(section, str) and section for section in sections
        ):
            self._reject("loadFromTemplate", "sections must be a list of section ids")
            return
        if not isinstance(data, cabc.Mapping):
            self._reject("loadFromTemplate", "section data must be a mapping")
            return
        state = self._state
        state.active_sections = list(dict.fromkeys(sections))
        state.section_data = {
            str(key): copy.deepcopy(dict(value)) for key, value in data.items()
        }
        state.selected_section_id = (
            state.active_sections[0] if state.active_sections else None
        )
        self._refresh_sales_cache()
        self._commit("loadFromTemplate")

    def hydrate(self, config: WebsiteConfiguration) -> None:
        """Replace the whole state with a persisted configuration."""
        try:
            page_type = PageType(config.active_page_type)
        except ValueError:
            logger.warning(
                "%s:hydrate unknown page type %r, using %s",
                self.theme.value,
                config.active_page_type,
                PageType.SALES_PAGE.value,
            )
            page_type = PageType.SALES_PAGE
        sections = list(dict.fromkeys(config.active_sections))
        if page_type.is_static:
            fixed = [typ.cast("str", page_type.singleton_section)]
            if sections != fixed:
                logger.warning(
                    "%s:hydrate %s page saved with %s, showing %s",
                    self.theme.value,
                    page_type.value,
                    sections,
                    fixed,
                )
            sections = fixed
        self._state = BuilderState(
            active_sections=sections,
            section_data=copy.deepcopy(config.section_data),
            selected_section_id=sections[0] if sections else None,
            active_page_type=page_type,
            cached_sales_page_sections=(
                list(sections) if page_type is PageType.SALES_PAGE else []
            ),
            is_mobile_preview=config.is_mobile_preview,
            is_published=config.is_published,
            is_initialized=True,
        )
        self._commit("hydrate")

    def to_configuration(self, *, is_published: bool | None = None) -> WebsiteConfiguration:
        """Snapshot the store as a wire configuration.

        ``is_published`` overrides the store's own flag when given.
        """
        state = self._state
        return WebsiteConfiguration(
            theme_id=self.theme.value,
            active_sections=list(state.active_sections),
            section_data=copy.deepcopy(state.section_data),
            active_page_type=state.active_page_type.value,
            is_mobile_preview=state.is_mobile_preview,
            is_published=state.is_published if is_published is None else is_published,
        )


__all__ = ["Listener", "ThemeBuilderStore"]
