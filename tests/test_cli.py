from __future__ import annotations

import typing as typ
from pathlib import Path

import msgspec
import pytest

from site_composer import cli
from site_composer.builder import SaveResponse, WebsiteConfiguration, encode_configuration

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.fixture
def service(mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch) -> typ.Any:
    fake = mocker.Mock()
    fake.save_configuration.return_value = SaveResponse(success=True)
    fake.load_configuration.return_value = None
    monkeypatch.setattr(cli, "_client", lambda *args: fake)
    return fake


def test_themes_lists_catalogue(capsys: pytest.CaptureFixture[str]) -> None:
    cli.themes()
    out = capsys.readouterr().out.splitlines()
    assert out[0].startswith("professional-coach: Professional Coach")
    assert any(line.startswith("fitness-trainer:") for line in out)


def test_sections_filters_by_page_type(capsys: pytest.CaptureFixture[str]) -> None:
    cli.sections(theme="fitness-trainer", page_type="privacy-policy")
    out = capsys.readouterr().out.strip()
    assert out == "privacy-section: Privacy Policy [PrivacySection]"


def test_sections_rejects_unknown_theme() -> None:
    with pytest.raises(ValueError, match="Unknown theme 'nope'"):
        cli.sections(theme="nope")


def test_render_writes_pages(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_file = tmp_path / "site.json"
    config_file.write_bytes(
        encode_configuration(
            WebsiteConfiguration(theme_id="professional-coach", active_sections=["hero"])
        )
    )
    output_dir = tmp_path / "public"

    cli.render(config_file, output_dir=output_dir)

    assert (output_dir / "index.html").exists()
    assert (output_dir / "privacy-policy.html").exists()
    assert (output_dir / "terms-of-service.html").exists()
    assert capsys.readouterr().out.count("wrote ") == 3


def test_push_saves_configuration(tmp_path: Path, service: typ.Any) -> None:
    config_file = tmp_path / "site.json"
    config_file.write_bytes(
        encode_configuration(
            WebsiteConfiguration(
                theme_id="fitness-trainer",
                active_sections=["hero", "video"],
                is_published=True,
            )
        )
    )

    cli.push(config_file)

    sent = service.save_configuration.call_args.args[0]
    assert sent.theme_id == "fitness-trainer"
    assert sent.active_sections == ["hero", "video"]
    assert sent.is_published is False, "push saves a draft"


def test_pull_writes_loaded_draft(tmp_path: Path, service: typ.Any) -> None:
    service.load_configuration.return_value = WebsiteConfiguration(
        theme_id="fitness-trainer", active_sections=["banner"]
    )
    output = tmp_path / "out" / "site.json"

    cli.pull(theme="fitness-trainer", output=output)

    payload = msgspec.json.decode(output.read_bytes())
    assert payload["themeId"] == "fitness-trainer"
    assert payload["addedSections"] == ["banner"]


def test_pull_without_draft_exits(tmp_path: Path, service: typ.Any) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.pull(output=tmp_path / "site.json")
    assert excinfo.value.code == 1


def test_publish_saves_published_copy(service: typ.Any) -> None:
    service.load_configuration.return_value = WebsiteConfiguration(
        theme_id="professional-coach", active_sections=["hero"]
    )
    cli.publish(theme="professional-coach")
    assert service.save_configuration.call_args.args[0].is_published is True


def test_configure_writes_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SITE_COMPOSER_TOKEN", raising=False)
    path = tmp_path / "config.toml"
    cli.configure(api_url="https://b.example.com", token="abc", settings_path=path)
    text = path.read_text(encoding="utf-8")
    assert 'base_url = "https://b.example.com/api"' in text
    assert 'token = "abc"' in text
