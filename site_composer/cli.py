"""Cyclopts CLI entrypoint for composing, persisting, and rendering websites.

The ``site-composer`` console script lists the section catalogue, renders a
website configuration to static HTML, and moves drafts between a local JSON
file and the persistence service. Typical usage:

>>> from site_composer.cli import app
>>> app.run(["sections", "--theme", "fitness-trainer"])  # doctest: +SKIP
>>> app.run(["pull", "--theme", "fitness-trainer", "--output", "site.json"])  # doctest: +SKIP
>>> app.run(["render", "site.json", "--output-dir", "public"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import DEFAULT_PAGE_TYPE, DEFAULT_THEME
from .builder import create_builder_context, decode_configuration, encode_configuration
from .client import WebsiteClient
from .config import SectionRegistry, default_registry, load_registry
from .publishing import SitePageBuilder
from .settings import DEFAULT_CONFIG_PATH, resolve_settings, save_settings

app = App(name="site-composer", config=cyclopts.config.Env("SITE_COMPOSER_", command=False))  # type: ignore[unknown-argument]

ApiUrl = typ.Annotated[
    str | None, Parameter(help="Persistence service base URL", env_var="SITE_COMPOSER_API_URL")
]
Token = typ.Annotated[
    str | None, Parameter(help="Bearer token for the service", env_var="SITE_COMPOSER_TOKEN")
]
SettingsPath = typ.Annotated[
    Path,
    Parameter(help="Settings file (TOML)", env_var="SITE_COMPOSER_CONFIG_FILE"),
]
Catalogue = typ.Annotated[
    Path | None, Parameter(help="Alternative section catalogue YAML")
]
Verbose = typ.Annotated[bool, Parameter(help="Log builder activity to stderr")]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(verbose: bool) -> None:  # noqa: FBT001
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _registry(catalogue: Path | None) -> SectionRegistry:
    return load_registry(catalogue) if catalogue else default_registry()


def _client(api_url: str | None, token: str | None, settings_path: Path) -> WebsiteClient:
    settings = resolve_settings(config_path=settings_path, base_url=api_url, token=token)
    return WebsiteClient.from_settings(settings)


@app.command(help="List the themes in the section catalogue.")
def themes(*, catalogue: Catalogue = None) -> None:
    """Print each theme id with its display name and section count."""
    for theme in _registry(catalogue).themes():
        print(f"{theme.id}: {theme.display_name} ({len(theme.sections)} sections)")


@app.command(help="List the sections a page type may show for a theme.")
def sections(
    *,
    theme: typ.Annotated[str, Parameter(help="Theme id")] = DEFAULT_THEME.value,
    page_type: typ.Annotated[str, Parameter(help="Page type")] = DEFAULT_PAGE_TYPE.value,
    catalogue: Catalogue = None,
) -> None:
    """Print section ids, names, and components in catalogue order."""
    registry = _registry(catalogue)
    if registry.get_theme_config(theme) is None:
        msg = f"Unknown theme '{theme}'. Known themes: {', '.join(registry.theme_ids())}"
        raise ValueError(msg)
    for section in registry.get_sections_for_page_type(theme, page_type):
        print(f"{section.id}: {section.display_name} [{section.component_key}]")


@app.command(help="Render a configuration JSON file to static HTML pages.")
def render(
    config_file: typ.Annotated[Path, Parameter(help="Website configuration JSON")],
    *,
    output_dir: typ.Annotated[Path, Parameter(help="Where to write the pages")] = Path(
        "public"
    ),
    catalogue: Catalogue = None,
    verbose: Verbose = False,
) -> None:
    """Render every page of a locally stored configuration.

    Parameters
    ----------
    config_file : Path
        JSON file in the service's wire format (as written by ``pull``).
    output_dir : Path, optional
        Directory receiving ``index.html`` and the legal pages.
    catalogue : Path or None, optional
        Catalogue to resolve sections against; defaults to the packaged one.
    """
    _configure_logging(verbose)
    config = decode_configuration(config_file.read_bytes())
    written = SitePageBuilder(_registry(catalogue)).run(config, output_dir)
    for path in written.values():
        print(f"wrote {_format_path(path)}")


@app.command(name="render-public", help="Render the published site for a subdomain.")
def render_public(
    subdomain: typ.Annotated[str, Parameter(help="Published site subdomain")],
    *,
    output_dir: typ.Annotated[Path, Parameter(help="Where to write the pages")] = Path(
        "public"
    ),
    api_url: ApiUrl = None,
    settings_path: SettingsPath = DEFAULT_CONFIG_PATH,
    catalogue: Catalogue = None,
    verbose: Verbose = False,
) -> None:
    """Fetch a published configuration without credentials and render it."""
    _configure_logging(verbose)
    client = _client(api_url, None, settings_path)
    config = client.load_public_configuration(subdomain)
    if config is None:
        print(f"no published site for '{subdomain}'", file=sys.stderr)
        sys.exit(1)
    written = SitePageBuilder(_registry(catalogue)).run(
        config, output_dir, public_view={"subdomain": subdomain}
    )
    for path in written.values():
        print(f"wrote {_format_path(path)}")


@app.command(help="Download the saved draft for a theme into a JSON file.")
def pull(
    *,
    theme: typ.Annotated[str, Parameter(help="Theme id")] = DEFAULT_THEME.value,
    output: typ.Annotated[Path, Parameter(help="Destination JSON file")] = Path(
        "site.json"
    ),
    api_url: ApiUrl = None,
    token: Token = None,
    settings_path: SettingsPath = DEFAULT_CONFIG_PATH,
    verbose: Verbose = False,
) -> None:
    """Load the saved draft through the builder and write it to ``output``."""
    _configure_logging(verbose)
    ctx = create_builder_context(persistence=_client(api_url, token, settings_path))
    ctx.dispatcher.set_active_theme(theme)
    if not ctx.dispatcher.load():
        print(f"no saved configuration for '{theme}'", file=sys.stderr)
        sys.exit(1)
    config = ctx.dispatcher.active_store.to_configuration()
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(encode_configuration(config))
    print(f"wrote {_format_path(output)} ({config.theme_id})")


@app.command(help="Save a JSON configuration file as the current draft.")
def push(
    config_file: typ.Annotated[Path, Parameter(help="Website configuration JSON")],
    *,
    api_url: ApiUrl = None,
    token: Token = None,
    settings_path: SettingsPath = DEFAULT_CONFIG_PATH,
    verbose: Verbose = False,
) -> None:
    """Hydrate the matching theme store from ``config_file`` and save it."""
    _configure_logging(verbose)
    ctx = create_builder_context(persistence=_client(api_url, token, settings_path))
    config = decode_configuration(config_file.read_bytes())
    ctx.store(config.theme_id).hydrate(config)
    ctx.dispatcher.set_active_theme(config.theme_id)
    if not ctx.dispatcher.save():
        print("save failed", file=sys.stderr)
        sys.exit(1)
    print(f"saved {config.theme_id} draft")


def _set_published(
    theme: str,
    *,
    published: bool,
    api_url: str | None,
    token: str | None,
    settings_path: Path,
) -> None:
    ctx = create_builder_context(persistence=_client(api_url, token, settings_path))
    ctx.dispatcher.set_active_theme(theme)
    if not ctx.dispatcher.load():
        print(f"no saved configuration for '{theme}'", file=sys.stderr)
        sys.exit(1)
    succeeded = ctx.dispatcher.publish() if published else ctx.dispatcher.unpublish()
    if not succeeded:
        print("request failed", file=sys.stderr)
        sys.exit(1)
    state = "published" if published else "unpublished"
    print(f"{ctx.dispatcher.active_theme.value} {state}")


@app.command(help="Publish the saved draft of a theme.")
def publish(
    *,
    theme: typ.Annotated[str, Parameter(help="Theme id")] = DEFAULT_THEME.value,
    api_url: ApiUrl = None,
    token: Token = None,
    settings_path: SettingsPath = DEFAULT_CONFIG_PATH,
    verbose: Verbose = False,
) -> None:
    """Load the draft for ``theme`` and save it with ``isPublished: true``."""
    _configure_logging(verbose)
    _set_published(
        theme, published=True, api_url=api_url, token=token, settings_path=settings_path
    )


@app.command(help="Take the published site of a theme offline.")
def unpublish(
    *,
    theme: typ.Annotated[str, Parameter(help="Theme id")] = DEFAULT_THEME.value,
    api_url: ApiUrl = None,
    token: Token = None,
    settings_path: SettingsPath = DEFAULT_CONFIG_PATH,
    verbose: Verbose = False,
) -> None:
    """Load the draft for ``theme`` and save it with ``isPublished: false``."""
    _configure_logging(verbose)
    _set_published(
        theme, published=False, api_url=api_url, token=token, settings_path=settings_path
    )


@app.command(help="Store API settings in the settings file.")
def configure(
    *,
    api_url: ApiUrl = None,
    token: Token = None,
    tenant: typ.Annotated[str | None, Parameter(help="Tenant slug sent as X-Tenant")] = None,
    timeout: typ.Annotated[float | None, Parameter(help="Request timeout (s)")] = None,
    settings_path: SettingsPath = DEFAULT_CONFIG_PATH,
) -> None:
    """Merge the given values over stored settings and write them back."""
    settings = resolve_settings(
        config_path=settings_path,
        base_url=api_url,
        token=token,
        tenant=tenant,
        timeout=timeout,
    )
    save_settings(settings, path=settings_path)
    print(f"wrote {_format_path(settings_path)}")


def main() -> None:
    """Invoke the Cyclopts application behind the ``site-composer`` command."""
    app()


__all__ = ["app", "main"]

if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
