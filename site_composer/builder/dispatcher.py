"""Route builder actions to the active theme store and persist it.

The dispatcher owns one :class:`ThemeBuilderStore` per theme and a pointer to
the active one. Mutators are forwarded to the active store; ``save``,
``load``, ``publish``, ``unpublish`` and ``delete`` talk to the persistence
service and never raise: failures are logged and reported as ``False``.

Only one persistence call runs at a time. A call that starts while another
is in flight returns ``False`` immediately instead of racing it.
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import threading
import typing as typ

from site_composer._constants import DEFAULT_THEME, ThemeKind

if typ.TYPE_CHECKING:
    from .state import BuilderState
    from .store import ThemeBuilderStore
    from .wire import SaveResponse, WebsiteConfiguration

logger = logging.getLogger(__name__)


class WebsitePersistence(typ.Protocol):
    """The subset of :class:`~site_composer.client.WebsiteClient` used here."""

    def save_configuration(self, config: WebsiteConfiguration) -> SaveResponse: ...

    def load_configuration(
        self, theme_id: str | None = None
    ) -> WebsiteConfiguration | None: ...

    def delete_configuration(self) -> None: ...


class CompositionDispatcher:
    """Select the active theme store and mediate persistence for it."""

    def __init__(
        self,
        stores: cabc.Mapping[ThemeKind, ThemeBuilderStore],
        persistence: WebsitePersistence | None = None,
        *,
        active_theme: ThemeKind = DEFAULT_THEME,
    ) -> None:
        missing = [kind.value for kind in ThemeKind if kind not in stores]
        if missing:
            msg = f"No builder store for themes: {', '.join(missing)}"
            raise ValueError(msg)
        self._stores = dict(stores)
        self.persistence = persistence
        self._active_theme = active_theme
        self.is_saving = False
        self.is_publishing = False
        self._in_flight = threading.Lock()

    # -- store selection ---------------------------------------------------

    @property
    def active_theme(self) -> ThemeKind:
        return self._active_theme

    def set_active_theme(self, theme_id: str) -> None:
        """Point the dispatcher at another theme store without resetting it."""
        try:
            self._active_theme = ThemeKind(theme_id)
        except ValueError:
            logger.warning("Ignoring unknown theme %r", theme_id)

    @property
    def active_store(self) -> ThemeBuilderStore:
        return self._stores[self._active_theme]

    @property
    def state(self) -> BuilderState:
        """State of the active store."""
        return self.active_store.state

    def store_for(self, theme: ThemeKind) -> ThemeBuilderStore:
        return self._stores[theme]

    def stores(self) -> list[ThemeBuilderStore]:
        return list(self._stores.values())

    # -- forwarded mutators ------------------------------------------------

    def add_section(self, section_id: str) -> None:
        self.active_store.add_section(section_id)

    def remove_section(self, section_id: str) -> None:
        self.active_store.remove_section(section_id)

    def set_selected_section(self, section_id: str | None) -> None:
        self.active_store.set_selected_section(section_id)

    def update_section_data(
        self, section_id: str, partial: cabc.Mapping[str, typ.Any]
    ) -> None:
        self.active_store.update_section_data(section_id, partial)

    def replace_section_data(
        self, section_id: str, data: cabc.Mapping[str, typ.Any]
    ) -> None:
        self.active_store.replace_section_data(section_id, data)

    def set_active_page_type(self, page_type: str) -> None:
        self.active_store.set_active_page_type(page_type)

    def reorder_sections(self, from_index: int, to_index: int) -> None:
        self.active_store.reorder_sections(from_index, to_index)

    def set_mobile_preview(self, enabled: bool) -> None:  # noqa: FBT001
        self.active_store.set_mobile_preview(enabled)

    def reset_builder(self) -> None:
        self.active_store.reset_builder()

    def initialize_defaults(self) -> None:
        self.active_store.initialize_defaults()

    def load_from_template(
        self,
        sections: cabc.Sequence[str],
        data: cabc.Mapping[str, cabc.Mapping[str, typ.Any]],
    ) -> None:
        self.active_store.load_from_template(sections, data)

    # -- persistence -------------------------------------------------------

    def save(self) -> bool:
        """Save the active store as an unpublished draft."""
        store = self.active_store
        if not self._begin("save"):
            return False
        try:
            self.is_saving = True
            store.set_saving(True)
            return self._persist(store, is_published=False)
        finally:
            self.is_saving = False
            store.set_saving(False)
            self._in_flight.release()

    def publish(self) -> bool:
        """Save the active store and mark the site as published."""
        return self._publish_as(published=True)

    def unpublish(self) -> bool:
        """Save the active store and take the site offline."""
        return self._publish_as(published=False)

    def load(self) -> bool:
        """Load the saved draft for the active theme into its matching store.

        The response names the theme it belongs to; that store is hydrated
        and becomes the active one.

        Returns
        -------
        bool
            ``True`` when a configuration was found and applied.
        """
        if not self._begin("load"):
            return False
        try:
            persistence = self._require_persistence("load")
            if persistence is None:
                return False
            try:
                config = persistence.load_configuration(self._active_theme.value)
            except Exception:  # noqa: BLE001 - persistence boundary
                logger.exception("Loading website configuration failed")
                return False
            if config is None:
                logger.info("No saved configuration for %s", self._active_theme.value)
                return False
            try:
                theme = ThemeKind(config.theme_id)
            except ValueError:
                logger.warning(
                    "Saved configuration names unknown theme %r", config.theme_id
                )
                return False
            self._stores[theme].hydrate(config)
            self._active_theme = theme
            return True
        finally:
            self._in_flight.release()

    def delete(self) -> bool:
        """Remove the saved configuration from the persistence service."""
        if not self._begin("delete"):
            return False
        try:
            persistence = self._require_persistence("delete")
            if persistence is None:
                return False
            try:
                persistence.delete_configuration()
            except Exception:  # noqa: BLE001 - persistence boundary
                logger.exception("Deleting website configuration failed")
                return False
            return True
        finally:
            self._in_flight.release()

    def _publish_as(self, *, published: bool) -> bool:
        action = "publish" if published else "unpublish"
        store = self.active_store
        if not self._begin(action):
            return False
        try:
            self.is_publishing = True
            store.set_publishing(True)
            succeeded = self._persist(store, is_published=published)
            if succeeded:
                store.set_published(published)
            return succeeded
        finally:
            self.is_publishing = False
            store.set_publishing(False)
            self._in_flight.release()

    def _persist(self, store: ThemeBuilderStore, *, is_published: bool) -> bool:
        persistence = self._require_persistence("save")
        if persistence is None:
            return False
        config = store.to_configuration(is_published=is_published)
        try:
            result = persistence.save_configuration(config)
        except Exception:  # noqa: BLE001 - persistence boundary
            logger.exception("Saving website configuration for %s failed", store.theme.value)
            return False
        if not result.success:
            logger.warning(
                "Saving website configuration for %s was refused: %s",
                store.theme.value,
                result.message or "no message",
            )
        return result.success

    def _begin(self, action: str) -> bool:
        if self._in_flight.acquire(blocking=False):
            return True
        logger.warning("Skipping %s: another persistence call is in progress", action)
        return False

    def _require_persistence(self, action: str) -> WebsitePersistence | None:
        if self.persistence is None:
            logger.warning("Cannot %s: no persistence service configured", action)
        return self.persistence


__all__ = ["CompositionDispatcher", "WebsitePersistence"]
