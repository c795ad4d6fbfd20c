"""Behaviour tests for saving and loading drafts through the website API.

The scenario saves a fitness trainer draft with :class:`WebsiteClient`,
clears the store, and loads the draft back through the dispatcher. Service
responses are replayed from the Betamax cassette
``website/save_and_load_draft`` so no live network calls are made.

Usage
-----
Run ``pytest tests/bdd/test_website_persistence.py -v``. Requests are matched
on method and URI.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import msgspec
import pytest
import requests
from betamax import Betamax
from pytest_bdd import given, scenarios, then, when

from site_composer._constants import ThemeKind
from site_composer.builder import BuilderContext, create_builder_context
from site_composer.client import WebsiteClient
from site_composer.config import default_registry

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "website_persistence.feature"
)
scenarios(FEATURE_FILE)

CASSETTE = "website/save_and_load_draft"
SAVED_SECTIONS = ["hero", "workout-plans", "testimonials"]
HEADLINE = "Stronger Every Day"

ScenarioState = dict[str, typ.Any]


@pytest.fixture(scope="session")
def cassette_dir() -> Path:
    """Locate the directory holding Betamax cassettes.

    Returns
    -------
    Path
        Filesystem path under ``tests/cassettes`` where cassettes live.
    """
    path = Path(__file__).resolve().parents[1] / "cassettes"
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture
def recorded_session(cassette_dir: Path) -> typ.Iterator[requests.Session]:
    """Yield a session replaying the draft cassette for the whole scenario."""
    session = requests.Session()
    recorder = Betamax(
        session,
        cassette_library_dir=str(cassette_dir),
        default_cassette_options={"record_mode": "once"},
    )
    with recorder.use_cassette(CASSETTE):
        yield session


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Share mutable scenario data across pytest-bdd steps."""
    return {}


@given("a fitness trainer builder backed by the recorded service")
def given_recorded_builder(
    scenario_state: ScenarioState,
    recorded_session: requests.Session,
    mocker: MockerFixture,
) -> None:
    """Wire a builder to a client whose session replays the cassette.

    Parameters
    ----------
    scenario_state : ScenarioState
        Receives the builder context and the session spy.
    recorded_session : requests.Session
        Session replaying the ``website/save_and_load_draft`` cassette.
    mocker : MockerFixture
        Used to spy on the session so request bodies can be inspected.
    """
    client = WebsiteClient(
        base_url="http://localhost:8000/api",
        token="test-token",
        session=recorded_session,
    )
    ctx = create_builder_context(
        registry=default_registry(), persistence=client, active_theme="fitness-trainer"
    )
    scenario_state["ctx"] = ctx
    scenario_state["spy"] = mocker.spy(recorded_session, "request")


@when("I save the draft with a custom headline")
def when_save_draft(scenario_state: ScenarioState) -> None:
    """Compose a short fitness page and save it as a draft.

    Parameters
    ----------
    scenario_state : ScenarioState
        Provides ``ctx`` and receives the save result.
    """
    ctx = typ.cast("BuilderContext", scenario_state["ctx"])
    ctx.dispatcher.load_from_template(SAVED_SECTIONS, {"hero": {"headline": HEADLINE}})
    scenario_state["saved"] = ctx.dispatcher.save()


@when("I load the draft for the fitness trainer theme")
def when_load_draft(scenario_state: ScenarioState) -> None:
    """Clear the fitness store and load the saved draft back into it."""
    ctx = typ.cast("BuilderContext", scenario_state["ctx"])
    ctx.dispatcher.reset_builder()
    scenario_state["loaded"] = ctx.dispatcher.load()


@then("the fitness trainer store holds the saved composition")
def then_store_hydrated(scenario_state: ScenarioState) -> None:
    ctx = typ.cast("BuilderContext", scenario_state["ctx"])
    assert scenario_state["saved"] is True
    assert scenario_state["loaded"] is True
    assert ctx.dispatcher.active_theme is ThemeKind.FITNESS_TRAINER
    state = ctx.store(ThemeKind.FITNESS_TRAINER).state
    assert state.active_sections == SAVED_SECTIONS
    assert state.section_data["hero"]["headline"] == HEADLINE
    assert state.selected_section_id == "hero"
    assert state.is_initialized


@then("the save request carried an unpublished configuration")
def then_save_payload(scenario_state: ScenarioState) -> None:
    spy = scenario_state["spy"]
    method, url = spy.call_args_list[0].args
    assert (method, url) == ("POST", "http://localhost:8000/api/website/save")
    payload = msgspec.json.decode(spy.call_args_list[0].kwargs["data"])
    assert payload["themeId"] == "fitness-trainer"
    assert payload["addedSections"] == SAVED_SECTIONS
    assert payload["isPublished"] is False
