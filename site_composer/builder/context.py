"""Application context wiring the registry, stores, and dispatcher."""

from __future__ import annotations

import dataclasses as dc
import logging

from site_composer._constants import DEFAULT_THEME, ThemeKind
from site_composer.config import SectionRegistry, StarterConfig, default_registry

from .dispatcher import CompositionDispatcher, WebsitePersistence
from .store import ThemeBuilderStore

logger = logging.getLogger(__name__)


@dc.dataclass(slots=True)
class BuilderContext:
    """Owns every piece of builder state for one editing session.

    Contexts are independent of each other, so tests and concurrent
    sessions never share stores.
    """

    registry: SectionRegistry
    stores: dict[ThemeKind, ThemeBuilderStore]
    dispatcher: CompositionDispatcher

    def store(self, theme: ThemeKind | str) -> ThemeBuilderStore:
        return self.stores[ThemeKind(theme)]


def create_builder_context(
    *,
    registry: SectionRegistry | None = None,
    persistence: WebsitePersistence | None = None,
    active_theme: ThemeKind | str = DEFAULT_THEME,
) -> BuilderContext:
    """Build a fresh context with one store per theme.

    Parameters
    ----------
    registry : SectionRegistry | None, optional
        Catalogue supplying each theme's starter composition. Defaults to the
        packaged catalogue.
    persistence : WebsitePersistence | None, optional
        Service used by save/load/publish; without one those calls return
        ``False``.
    active_theme : ThemeKind | str, optional
        Theme selected when the context is created.

    Examples
    --------
    >>> ctx = create_builder_context(active_theme="fitness-trainer")
    >>> ctx.dispatcher.initialize_defaults()
    >>> ctx.dispatcher.state.active_sections[:2]
    ['hero', 'banner']
    """
    resolved = registry or default_registry()
    stores: dict[ThemeKind, ThemeBuilderStore] = {}
    for kind in ThemeKind:
        starter = resolved.starter(kind.value)
        if starter is None:
            logger.warning("Theme %s missing from catalogue; starting empty", kind.value)
            starter = StarterConfig()
        stores[kind] = ThemeBuilderStore(kind, starter)
    dispatcher = CompositionDispatcher(
        stores, persistence, active_theme=ThemeKind(active_theme)
    )
    return BuilderContext(registry=resolved, stores=stores, dispatcher=dispatcher)


__all__ = ["BuilderContext", "create_builder_context"]
