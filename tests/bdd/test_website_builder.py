"""Behaviour tests for composing a website with the builder.

These scenarios drive the dispatcher, editor factory, and drag-and-drop
controller the way the builder UI does: sections are added and reordered on
the sales page, the legal pages are visited and left again, and array
editors enforce their item limits.

Usage
-----
Run ``pytest tests/bdd/test_website_builder.py -v``. The scenarios live in
``features/website_builder.feature`` and need no network access.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, scenarios, then, when

from site_composer.builder import BuilderContext, create_builder_context
from site_composer.config import default_registry
from site_composer.rendering import EditorFactory
from site_composer.reordering import DragDropController

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "website_builder.feature"
)
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]

COACH_STARTER = [
    "banner",
    "offer-box",
    "about-join-combined",
    "video",
    "whats-included",
    "testimonials",
]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Share mutable scenario data across pytest-bdd steps."""
    return {}


def _fresh(theme: str) -> BuilderContext:
    ctx = create_builder_context(registry=default_registry(), active_theme=theme)
    ctx.dispatcher.initialize_defaults()
    return ctx


@given("a fresh professional coach builder")
def given_coach_builder(scenario_state: ScenarioState) -> None:
    """Create a builder seeded with the professional coach starter page.

    Parameters
    ----------
    scenario_state : ScenarioState
        Receives the builder context under ``ctx``.
    """
    scenario_state["ctx"] = _fresh("professional-coach")


@given("a fresh fitness trainer builder")
def given_fitness_builder(scenario_state: ScenarioState) -> None:
    """Create a builder seeded with the fitness trainer starter page."""
    scenario_state["ctx"] = _fresh("fitness-trainer")


@when("I add the hero section")
def when_add_hero(scenario_state: ScenarioState) -> None:
    ctx = typ.cast("BuilderContext", scenario_state["ctx"])
    ctx.dispatcher.add_section("hero")


@when("I switch to the privacy policy page")
def when_privacy_page(scenario_state: ScenarioState) -> None:
    ctx = typ.cast("BuilderContext", scenario_state["ctx"])
    ctx.dispatcher.set_active_page_type("privacy-policy")


@when("I switch back to the sales page")
def when_sales_page(scenario_state: ScenarioState) -> None:
    ctx = typ.cast("BuilderContext", scenario_state["ctx"])
    ctx.dispatcher.set_active_page_type("sales-page")


@when("I add two testimonials through the editor")
def when_add_testimonials(scenario_state: ScenarioState) -> None:
    """Press the add button of the testimonials editor twice.

    Parameters
    ----------
    scenario_state : ScenarioState
        Provides ``ctx`` and receives the editor plus each add result.
    """
    ctx = typ.cast("BuilderContext", scenario_state["ctx"])
    editor = EditorFactory(ctx.registry, ctx.dispatcher)
    scenario_state["editor"] = editor
    scenario_state["added"] = [
        editor.add_array_item("testimonials", "testimonials") for _ in range(2)
    ]


@when("I drag the first section onto the third row")
def when_drag_first_to_third(scenario_state: ScenarioState) -> None:
    ctx = typ.cast("BuilderContext", scenario_state["ctx"])
    controller = DragDropController(ctx.registry, ctx.dispatcher)
    assert controller.start_drag(0)
    assert controller.drop_on(2)


@then("only the privacy section is shown")
def then_only_privacy(scenario_state: ScenarioState) -> None:
    ctx = typ.cast("BuilderContext", scenario_state["ctx"])
    assert ctx.dispatcher.state.active_sections == ["privacy-section"]
    assert ctx.dispatcher.state.selected_section_id == "privacy-section"


@then("the sales page keeps the starter sections followed by the hero")
def then_sales_restored(scenario_state: ScenarioState) -> None:
    ctx = typ.cast("BuilderContext", scenario_state["ctx"])
    assert ctx.dispatcher.state.active_sections == [*COACH_STARTER, "hero"], (
        "expected the sales page composition to survive the legal page visit"
    )


@then("the testimonials section holds three entries")
def then_three_testimonials(scenario_state: ScenarioState) -> None:
    """Check the cap of three testimonials held after two add attempts.

    The fitness starter ships two testimonials, so only the first add fits.
    """
    ctx = typ.cast("BuilderContext", scenario_state["ctx"])
    items = ctx.dispatcher.state.section_data["testimonials"]["testimonials"]
    assert len(items) == 3
    assert scenario_state["added"] == [True, False]


@then("the editor no longer offers to add a testimonial")
def then_cannot_add(scenario_state: ScenarioState) -> None:
    editor = typ.cast("EditorFactory", scenario_state["editor"])
    control = editor.render_editor("fitness-trainer", "testimonials").control(
        "testimonials"
    )
    assert control is not None
    assert control.can_add is False


@then("the banner section is third on the page")
def then_banner_third(scenario_state: ScenarioState) -> None:
    ctx = typ.cast("BuilderContext", scenario_state["ctx"])
    assert ctx.dispatcher.state.active_sections[:3] == [
        "offer-box",
        "about-join-combined",
        "banner",
    ]
