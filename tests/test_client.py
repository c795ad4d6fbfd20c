from __future__ import annotations

import typing as typ

import msgspec
import pytest
import requests

from site_composer.builder import WebsiteConfiguration
from site_composer.client import WebsiteApiError, WebsiteClient
from site_composer.settings import ApiSettings

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture

API = "https://builder.example.com/api"


def _response(mocker: MockerFixture, status: int, body: object) -> typ.Any:
    response = mocker.Mock(spec=requests.Response)
    response.status_code = status
    response.content = msgspec.json.encode(body)
    response.text = response.content.decode()
    response.url = f"{API}/stub"
    return response


def _client(
    mocker: MockerFixture, status: int = 200, body: object = None, **kwargs: typ.Any
) -> tuple[WebsiteClient, typ.Any]:
    session = mocker.Mock(spec=requests.Session)
    session.request.return_value = _response(mocker, status, body)
    client = WebsiteClient(base_url=API, token="secret", session=session, **kwargs)
    return client, session


def test_save_configuration_posts_wire_format(mocker: MockerFixture) -> None:
    client, session = _client(
        mocker, body={"success": True, "message": "saved", "websiteId": "w1"}
    )
    config = WebsiteConfiguration(
        theme_id="fitness-trainer",
        active_sections=["hero"],
        section_data={"hero": {"headline": "Go"}},
    )

    result = client.save_configuration(config)

    assert result.success is True
    assert result.website_id == "w1"
    method, url = session.request.call_args.args
    kwargs = session.request.call_args.kwargs
    assert (method, url) == ("POST", f"{API}/website/save")
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["headers"]["Content-Type"] == "application/json"
    payload = msgspec.json.decode(kwargs["data"])
    assert payload == {
        "themeId": "fitness-trainer",
        "addedSections": ["hero"],
        "sectionData": {"hero": {"headline": "Go"}},
        "selectedPageType": "sales-page",
        "isMobileView": False,
        "isPublished": False,
    }


def test_load_configuration_decodes_response(mocker: MockerFixture) -> None:
    client, session = _client(
        mocker,
        body={
            "themeId": "professional-coach",
            "addedSections": ["banner", "video"],
            "sectionData": {},
            "selectedPageType": "sales-page",
            "isPublished": True,
        },
    )

    config = client.load_configuration("professional-coach")

    assert config is not None
    assert config.active_sections == ["banner", "video"]
    assert config.is_published is True
    assert session.request.call_args.kwargs["params"] == {"themeId": "professional-coach"}


def test_load_configuration_missing_returns_none(mocker: MockerFixture) -> None:
    client, _ = _client(mocker, status=404, body={"detail": "not found"})
    assert client.load_configuration() is None


def test_server_error_raises_with_status(mocker: MockerFixture) -> None:
    client, _ = _client(mocker, status=500, body={"detail": "boom"})
    with pytest.raises(WebsiteApiError) as excinfo:
        client.load_configuration()
    assert excinfo.value.status == 500


def test_transport_error_is_wrapped(mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.request.side_effect = requests.ConnectionError("refused")
    client = WebsiteClient(base_url=API, session=session)
    with pytest.raises(WebsiteApiError, match="refused"):
        client.delete_configuration()


def test_malformed_body_is_reported(mocker: MockerFixture) -> None:
    client, _ = _client(mocker, body={"addedSections": "hero"})
    with pytest.raises(WebsiteApiError, match="Unexpected response body"):
        client.load_configuration()


def test_public_configuration_is_unauthenticated(mocker: MockerFixture) -> None:
    client, session = _client(
        mocker, body={"themeId": "fitness-trainer", "addedSections": ["hero"]}
    )
    config = client.load_public_configuration(" my-gym ")
    assert config is not None
    assert config.theme_id == "fitness-trainer"
    _, url = session.request.call_args.args
    assert url == f"{API}/website/public/my-gym"
    assert "Authorization" not in session.request.call_args.kwargs["headers"]


def test_public_configuration_requires_subdomain(mocker: MockerFixture) -> None:
    client, _ = _client(mocker)
    with pytest.raises(ValueError, match="empty"):
        client.load_public_configuration("  ")


def test_tenant_header_is_sent(mocker: MockerFixture) -> None:
    client, session = _client(mocker, body={"available": True}, tenant="acme")
    assert client.check_subdomain("my-site") is True
    headers = session.request.call_args.kwargs["headers"]
    assert headers["X-Tenant"] == "acme"
    assert session.request.call_args.args[1] == f"{API}/auth/check-subdomain/my-site"


def test_update_subdomain_failure_raises(mocker: MockerFixture) -> None:
    client, _ = _client(mocker, body={"success": False, "error": "Subdomain taken"})
    with pytest.raises(WebsiteApiError, match="Subdomain taken"):
        client.update_subdomain("taken")


def test_from_settings_uses_timeout(mocker: MockerFixture) -> None:
    session = mocker.Mock(spec=requests.Session)
    session.request.return_value = _response(mocker, 200, {"available": False})
    settings = ApiSettings(base_url=API, token="t", timeout=3.5)
    client = WebsiteClient.from_settings(settings, session=session)
    assert client.check_subdomain("abc") is False
    assert session.request.call_args.kwargs["timeout"] == 3.5
