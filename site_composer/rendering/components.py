"""Section components: Jinja templates keyed by catalogue component key.

A component turns a section's merged props into an HTML fragment. The
packaged components are Jinja2 templates under ``site_composer/templates``;
callers may register their own callables for keys the catalogue introduces.
"""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, Template

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

# Component key -> template under ``templates/sections``.
COMPONENT_TEMPLATES: dict[str, str] = {
    "Hero": "hero.jinja",
    "FitnessHero": "hero.jinja",
    "Banner": "banner.jinja",
    "FitnessBanner": "banner.jinja",
    "AboutJoinCombined": "about_join_combined.jinja",
    "Video": "video.jinja",
    "FitnessVideo": "video.jinja",
    "OfferBox": "offer_box.jinja",
    "WhatsIncluded": "whats_included.jinja",
    "FitnessWhatsIncluded": "whats_included.jinja",
    "Testimonials": "testimonials.jinja",
    "FitnessTestimonials": "testimonials.jinja",
    "TrainerAbout": "trainer_about.jinja",
    "WorkoutPlans": "workout_plans.jinja",
    "TransformationGallery": "transformation_gallery.jinja",
    "CustomSection": "custom_section.jinja",
    "Design": "settings.jinja",
    "Domain": "settings.jinja",
    "PrivacySection": "legal.jinja",
    "TermsSection": "legal.jinja",
}


class Component(typ.Protocol):
    """Anything that renders section props to an HTML fragment."""

    def __call__(self, props: cabc.Mapping[str, typ.Any]) -> str: ...


class TemplateComponent:
    """Component backed by a Jinja template."""

    def __init__(self, key: str, template: Template) -> None:
        self.key = key
        self.template = template

    def __call__(self, props: cabc.Mapping[str, typ.Any]) -> str:
        return self.template.render({**props, "component": self.key, "props": props})

    def __repr__(self) -> str:
        return f"TemplateComponent({self.key!r}, {self.template.name!r})"


def create_environment(templates_dir: Path | None = None) -> Environment:
    """Return the Jinja environment used for sections and whole pages."""
    return Environment(
        loader=FileSystemLoader(templates_dir or DEFAULT_TEMPLATES_DIR),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


class ComponentRegistry:
    """Lookup of components by catalogue ``component_key``."""

    def __init__(self, components: cabc.Mapping[str, Component] | None = None) -> None:
        self._components: dict[str, Component] = dict(components or {})

    def get(self, key: str) -> Component | None:
        return self._components.get(key)

    def register(self, key: str, component: Component) -> None:
        self._components[key] = component

    def __contains__(self, key: object) -> bool:
        return key in self._components

    def keys(self) -> list[str]:
        return sorted(self._components)

    @classmethod
    def from_templates(
        cls,
        env: Environment | None = None,
        templates: cabc.Mapping[str, str] = COMPONENT_TEMPLATES,
    ) -> ComponentRegistry:
        """Build a registry of template components for ``templates``.

        Templates are loaded eagerly so a missing file surfaces at startup
        rather than on first render.
        """
        environment = env or create_environment()
        cache: dict[str, Template] = {}
        components: dict[str, Component] = {}
        for key, name in templates.items():
            if name not in cache:
                cache[name] = environment.get_template(f"sections/{name}")
            components[key] = TemplateComponent(key, cache[name])
        return cls(components)


__all__ = [
    "COMPONENT_TEMPLATES",
    "DEFAULT_TEMPLATES_DIR",
    "Component",
    "ComponentRegistry",
    "TemplateComponent",
    "create_environment",
]
