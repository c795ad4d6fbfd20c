"""Compose multi-page marketing websites from a catalogue of sections.

This package holds the section catalogue, the per-theme builder stores and
their dispatcher, the section and editor factories, and the CLI used to
render and persist website configurations.

Exports
-------
- ``app``: Cyclopts application behind the ``site-composer`` command.
- ``main``: Convenience function that invokes the app.
- ``create_builder_context``: Fresh registry, stores, and dispatcher.

Examples
--------
>>> from site_composer import create_builder_context
>>> ctx = create_builder_context()
>>> ctx.dispatcher.add_section("video")
>>> ctx.dispatcher.state.active_sections
['video']
"""

from __future__ import annotations

from .builder import create_builder_context
from .cli import app, main

__all__ = ["app", "create_builder_context", "main"]
