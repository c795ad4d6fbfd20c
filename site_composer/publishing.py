"""Static rendering of a saved or published website configuration.

``SitePageBuilder`` composes every page of a site (the sales page plus the
privacy and terms pages) through the section factory and wraps them in the
shared ``page.jinja`` layout, mirroring how visitors see a published site.

>>> from site_composer.builder import WebsiteConfiguration
>>> from site_composer.config import default_registry
>>> builder = SitePageBuilder(default_registry())
>>> config = WebsiteConfiguration(theme_id="professional-coach", active_sections=["hero"])
>>> "data-section=\\"hero\\"" in builder.render_page(config)
True
"""

from __future__ import annotations

import datetime as dt
import logging
import typing as typ
from pathlib import Path

from site_composer._constants import PageType
from site_composer.rendering import ComponentRegistry, SectionFactory, create_environment

if typ.TYPE_CHECKING:
    from site_composer.builder import WebsiteConfiguration
    from site_composer.config import SectionRegistry

logger = logging.getLogger(__name__)

PAGE_FILENAMES: dict[PageType, str] = {
    PageType.SALES_PAGE: "index.html",
    PageType.PRIVACY_POLICY: "privacy-policy.html",
    PageType.TERMS_OF_SERVICE: "terms-of-service.html",
}

_STATIC_SECTIONS = frozenset(
    typ.cast("str", page.singleton_section) for page in PageType if page.is_static
)


class SitePageBuilder:
    """Render website configurations to standalone HTML pages."""

    def __init__(
        self,
        registry: SectionRegistry,
        *,
        templates_dir: Path | None = None,
        components: ComponentRegistry | None = None,
    ) -> None:
        """Initialise the Jinja environment and section factory.

        Parameters
        ----------
        registry : SectionRegistry
            Catalogue used to resolve each section's component and defaults.
        templates_dir : Path, optional
            Directory holding ``page.jinja`` and ``sections/``. Defaults to the
            templates packaged with ``site_composer``.
        components : ComponentRegistry, optional
            Components to render sections with. Defaults to the packaged
            section templates.
        """
        self.registry = registry
        self.env = create_environment(templates_dir)
        self.template = self.env.get_template("page.jinja")
        self.factory = SectionFactory(
            registry, components or ComponentRegistry.from_templates(self.env)
        )

    def sections_for(self, config: WebsiteConfiguration, page_type: PageType) -> list[str]:
        """Return the section ids composing ``page_type`` of ``config``."""
        if page_type.is_static:
            return [typ.cast("str", page_type.singleton_section)]
        sections: list[str] = []
        for section_id in config.active_sections:
            definition = self.registry.get_section_config(config.theme_id, section_id)
            if section_id in _STATIC_SECTIONS:
                continue
            # Settings panels are edited in the builder but never shown.
            if definition is not None and definition.is_settings:
                continue
            sections.append(section_id)
        return sections

    def render_page(
        self,
        config: WebsiteConfiguration,
        page_type: PageType = PageType.SALES_PAGE,
        *,
        public_view: typ.Mapping[str, typ.Any] | None = None,
    ) -> str:
        """Render one page of ``config`` to an HTML string."""
        theme = self.registry.get_theme_config(config.theme_id)
        if theme is None:
            logger.warning("Rendering configuration for unknown theme %s", config.theme_id)
        nodes = self.factory.render_sections(
            config.theme_id,
            self.sections_for(config, page_type),
            config.section_data,
            public_view=public_view,
        )
        design = {
            **self._defaults(config.theme_id, "design"),
            **config.section_data.get("design", {}),
        }
        html = self.template.render(
            theme=theme,
            theme_id=config.theme_id,
            page_type=page_type.value,
            pages={page.value: name for page, name in PAGE_FILENAMES.items()},
            sections=nodes,
            design=design,
            is_published=config.is_published,
            generated_at=dt.datetime.now(dt.UTC),
        )
        if not html.endswith("\n"):
            html += "\n"
        return html

    def run(
        self,
        config: WebsiteConfiguration,
        output_dir: Path,
        *,
        public_view: typ.Mapping[str, typ.Any] | None = None,
    ) -> dict[PageType, Path]:
        """Write every page of ``config`` under ``output_dir``.

        Returns
        -------
        dict[PageType, Path]
            Written file per page type.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        written: dict[PageType, Path] = {}
        for page_type, filename in PAGE_FILENAMES.items():
            path = output_dir / filename
            path.write_text(
                self.render_page(config, page_type, public_view=public_view),
                encoding="utf-8",
            )
            written[page_type] = path
        return written

    def _defaults(self, theme_id: str, section_id: str) -> dict[str, typ.Any]:
        definition = self.registry.get_section_config(theme_id, section_id)
        return definition.defaults() if definition else {}


__all__ = ["PAGE_FILENAMES", "SitePageBuilder"]
