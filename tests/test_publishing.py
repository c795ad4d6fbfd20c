from __future__ import annotations

import typing as typ
from pathlib import Path

from bs4 import BeautifulSoup

from site_composer._constants import PageType
from site_composer.builder import WebsiteConfiguration
from site_composer.publishing import PAGE_FILENAMES, SitePageBuilder

if typ.TYPE_CHECKING:
    from site_composer.config import SectionRegistry


def _config(**overrides: typ.Any) -> WebsiteConfiguration:
    values: dict[str, typ.Any] = {
        "theme_id": "fitness-trainer",
        "active_sections": ["hero", "design", "testimonials", "domain", "mystery"],
        "section_data": {
            "hero": {"headline": "Get Strong"},
            "design": {"primaryColor": "#112233"},
        },
        "is_published": True,
    }
    values.update(overrides)
    return WebsiteConfiguration(**values)


def test_sales_page_skips_settings_sections(registry: SectionRegistry) -> None:
    builder = SitePageBuilder(registry)
    assert builder.sections_for(_config(), PageType.SALES_PAGE) == [
        "hero",
        "testimonials",
        "mystery",
    ]


def test_static_pages_show_only_their_section(registry: SectionRegistry) -> None:
    builder = SitePageBuilder(registry)
    assert builder.sections_for(_config(), PageType.PRIVACY_POLICY) == ["privacy-section"]
    assert builder.sections_for(_config(), PageType.TERMS_OF_SERVICE) == ["terms-section"]


def test_render_page_applies_design_and_isolates_errors(registry: SectionRegistry) -> None:
    html = SitePageBuilder(registry).render_page(_config())
    soup = BeautifulSoup(html, "html.parser")

    sections = [node["data-section"] for node in soup.select("main > [data-section]")]
    assert sections == ["hero", "testimonials", "mystery"]
    assert soup.find("div", class_="section-error") is not None
    assert "Get Strong" in soup.get_text()
    assert "--primary: #112233" in html
    assert "--secondary: #1A1A1A" in html, "missing design keys fall back to defaults"
    body = soup.find("body")
    assert body is not None
    assert body["data-published"] == "true"


def test_run_writes_every_page(registry: SectionRegistry, tmp_path: Path) -> None:
    written = SitePageBuilder(registry).run(
        _config(), tmp_path / "public", public_view={"subdomain": "gym"}
    )

    assert set(written) == set(PageType)
    for page_type, path in written.items():
        assert path.name == PAGE_FILENAMES[page_type]
        assert path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")

    privacy = BeautifulSoup(
        written[PageType.PRIVACY_POLICY].read_text(encoding="utf-8"), "html.parser"
    )
    assert privacy.find("h1").get_text() == "Privacy Policy"
    ref = privacy.find("p", class_="site-ref")
    assert ref is not None
    assert ref.get_text() == "gym"
