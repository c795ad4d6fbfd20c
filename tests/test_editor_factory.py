from __future__ import annotations

import itertools
from pathlib import Path

import pytest

from site_composer.builder import BuilderContext, create_builder_context
from site_composer.config import SectionRegistry
from site_composer.rendering import EditorFactory


@pytest.fixture
def fitness(registry: SectionRegistry) -> BuilderContext:
    ctx = create_builder_context(registry=registry, active_theme="fitness-trainer")
    ctx.dispatcher.initialize_defaults()
    return ctx


@pytest.fixture
def coach(registry: SectionRegistry) -> BuilderContext:
    ctx = create_builder_context(registry=registry)
    ctx.dispatcher.initialize_defaults()
    return ctx


def _editor(ctx: BuilderContext) -> EditorFactory:
    counter = itertools.count(1)
    return EditorFactory(
        ctx.registry, ctx.dispatcher, id_factory=lambda prefix: f"{prefix}-{next(counter)}"
    )


def test_unknown_section_returns_error_panel(coach: BuilderContext) -> None:
    panel = _editor(coach).render_editor("professional-coach", "mystery")
    assert panel.is_error
    assert panel.error == "Section configuration not found"
    assert panel.controls == []


def test_panel_reads_live_values(coach: BuilderContext) -> None:
    coach.dispatcher.update_section_data("video", {"title": "Intro"})
    panel = _editor(coach).render_editor("professional-coach", "video")
    assert panel.title == "Video Section"
    assert panel.field_ids() == ["title", "videoUrl", "layout"]
    title = panel.control("title")
    assert title is not None
    assert title.value == "Intro"


def test_testimonial_cap_rejects_fourth_item(fitness: BuilderContext) -> None:
    editor = _editor(fitness)
    dispatcher = fitness.dispatcher
    assert len(dispatcher.state.section_data["testimonials"]["testimonials"]) == 2

    assert editor.add_array_item("testimonials", "testimonials") is True
    items = dispatcher.state.section_data["testimonials"]["testimonials"]
    assert len(items) == 3
    assert items[-1] == {
        "id": "testimonial-1",
        "clientName": "",
        "quote": "",
        "results": "",
    }

    before = dispatcher.state.snapshot()
    assert editor.add_array_item("testimonials", "testimonials") is False
    assert dispatcher.state.section_data == before.section_data

    control = editor.render_editor("fitness-trainer", "testimonials").control("testimonials")
    assert control is not None
    assert control.can_add is False
    assert control.max_items == 3


def test_string_array_uses_seed_when_unset(coach: BuilderContext) -> None:
    coach.dispatcher.replace_section_data("about-join-combined", {})
    control = _editor(coach).render_editor(
        "professional-coach", "about-join-combined"
    ).control("aboutFeatures")
    assert control is not None
    assert len(control.value) == 4
    assert control.value[0] == "Comprehensive courses with lifetime access"


def test_string_array_add_and_edit(coach: BuilderContext) -> None:
    editor = _editor(coach)
    dispatcher = coach.dispatcher
    assert editor.add_array_item("about-join-combined", "aboutFeatures")
    features = dispatcher.state.section_data["about-join-combined"]["aboutFeatures"]
    assert features[-1] == "New item"

    assert editor.change_array_item("about-join-combined", "aboutFeatures", 4, "Weekly calls")
    features = dispatcher.state.section_data["about-join-combined"]["aboutFeatures"]
    assert features[-1] == "Weekly calls"
    assert not editor.change_array_item(
        "about-join-combined", "aboutFeatures", 0, {"text": "x"}
    )


def test_min_items_blocks_last_removal(fitness: BuilderContext) -> None:
    editor = _editor(fitness)
    fitness.dispatcher.update_section_data("trainer-about", {"credentials": ["NASM"]})

    control = editor.render_editor("fitness-trainer", "trainer-about").control("credentials")
    assert control is not None
    assert [item.removable for item in control.items] == [False]
    assert editor.remove_array_item("trainer-about", "credentials", 0) is False
    assert fitness.dispatcher.state.section_data["trainer-about"]["credentials"] == ["NASM"]


def test_remove_and_merge_object_items(fitness: BuilderContext) -> None:
    editor = _editor(fitness)
    assert editor.change_array_item("testimonials", "testimonials", 1, {"quote": "Great"})
    items = fitness.dispatcher.state.section_data["testimonials"]["testimonials"]
    assert items[1]["quote"] == "Great"
    assert items[1]["clientName"] == "Mike T."

    assert editor.remove_array_item("testimonials", "testimonials", 0)
    items = fitness.dispatcher.state.section_data["testimonials"]["testimonials"]
    assert [item["id"] for item in items] == ["2"]
    assert editor.remove_array_item("testimonials", "testimonials", 5) is False


def test_conditional_fields_follow_editor_mode(coach: BuilderContext) -> None:
    editor = _editor(coach)
    about = editor.render_editor("professional-coach", "about-join-combined")
    assert "aboutDescription" in about.field_ids()
    assert "joinTitle" not in about.field_ids()

    coach.dispatcher.update_section_data("about-join-combined", {"editorMode": "join"})
    join = editor.render_editor("professional-coach", "about-join-combined")
    assert join.field_ids() == ["editorMode", "joinTitle", "joinButtonText"]


def test_dependent_field_hidden_for_free_community(coach: BuilderContext) -> None:
    editor = _editor(coach)
    panel = editor.render_editor("professional-coach", "offer-box")
    assert "monthlyPrice" not in panel.field_ids(), "starter offer box is free"

    assert editor.change_field("offer-box", "communityType", "paid")
    panel = editor.render_editor("professional-coach", "offer-box")
    assert "monthlyPrice" in panel.field_ids()


def test_checkbox_defaults_apply_when_unset(fitness: BuilderContext) -> None:
    editor = _editor(fitness)
    panel = editor.render_editor("fitness-trainer", "whats-included")
    for field_id in ("showWorkoutPlans", "showNutritionGuide", "show247Support"):
        control = panel.control(field_id)
        assert control is not None
        assert control.value is True, f"expected {field_id} to default to checked"

    assert editor.change_field("whats-included", "showNutritionGuide", False)
    control = editor.render_editor("fitness-trainer", "whats-included").control(
        "showNutritionGuide"
    )
    assert control is not None
    assert control.value is False


def test_unset_select_falls_back_to_default(coach: BuilderContext) -> None:
    coach.dispatcher.replace_section_data("video", {})
    control = _editor(coach).render_editor("professional-coach", "video").control("layout")
    assert control is not None
    assert control.value == "container"
    assert control.options == [("full", "Full Width"), ("container", "Container")]


@pytest.mark.parametrize(
    ("section_id", "field_id", "value", "stored"),
    [
        ("offer-box", "monthlyPrice", "19.5", 19.5),
        ("offer-box", "monthlyPrice", 25, 25),
        ("offer-box", "communityType", "paid", "paid"),
        ("design", "primaryColor", "#abc", "#abc"),
        ("design", "darkMode", True, True),
        ("hero", "title", "x" * 150, "x" * 100),
    ],
)
def test_change_field_coerces_values(
    coach: BuilderContext, section_id: str, field_id: str, value: object, stored: object
) -> None:
    assert _editor(coach).change_field(section_id, field_id, value) is True
    assert coach.dispatcher.state.section_data[section_id][field_id] == stored


@pytest.mark.parametrize(
    ("section_id", "field_id", "value"),
    [
        ("offer-box", "monthlyPrice", "lots"),
        ("offer-box", "monthlyPrice", True),
        ("offer-box", "communityType", "premium"),
        ("design", "primaryColor", "purple"),
        ("design", "darkMode", "yes"),
        ("hero", "nonexistent", "x"),
        ("nonexistent", "title", "x"),
    ],
)
def test_change_field_rejects_invalid_values(
    coach: BuilderContext, section_id: str, field_id: str, value: object
) -> None:
    before = coach.dispatcher.state.snapshot()
    assert _editor(coach).change_field(section_id, field_id, value) is False
    assert coach.dispatcher.state.section_data == before.section_data


def test_attach_file_stores_data_url(coach: BuilderContext, tmp_path: Path) -> None:
    image = tmp_path / "banner.png"
    image.write_bytes(b"\x89PNG")
    editor = _editor(coach)

    url = editor.attach_file("banner", "bannerUrl", image)

    assert url == "data:image/png;base64,iVBORw=="
    assert coach.dispatcher.state.section_data["banner"]["bannerUrl"] == url
    assert editor.clear_file("banner", "bannerUrl")
    assert coach.dispatcher.state.section_data["banner"]["bannerUrl"] == ""


def test_attach_file_rejects_non_file_fields(coach: BuilderContext) -> None:
    editor = _editor(coach)
    assert editor.attach_file("hero", "title", b"data") is None
    assert editor.attach_file("banner", "bannerUrl", Path("/nonexistent/x.png")) is None


def test_reset_section_restores_defaults_only_for_that_section(
    coach: BuilderContext,
) -> None:
    editor = _editor(coach)
    dispatcher = coach.dispatcher
    dispatcher.update_section_data("video", {"title": "Edited", "extra": 1})
    dispatcher.update_section_data("banner", {"bannerHeight": "999px"})

    assert editor.reset_section("video")

    definition = coach.registry.get_section_config("professional-coach", "video")
    assert definition is not None
    assert dispatcher.state.section_data["video"] == definition.default_data
    assert dispatcher.state.section_data["banner"]["bannerHeight"] == "999px"
