"""Builder state machine, dispatcher, and wire format.

Examples
--------
>>> from site_composer.builder import create_builder_context
>>> ctx = create_builder_context()
>>> ctx.dispatcher.active_theme.value
'professional-coach'
"""

from .context import BuilderContext, create_builder_context
from .dispatcher import CompositionDispatcher, WebsitePersistence
from .state import BuilderState
from .store import Listener, ThemeBuilderStore
from .wire import (
    AvailabilityResponse,
    SaveResponse,
    SubdomainUpdateResponse,
    WebsiteConfiguration,
    decode_configuration,
    encode_configuration,
)

__all__ = [
    "AvailabilityResponse",
    "BuilderContext",
    "BuilderState",
    "CompositionDispatcher",
    "Listener",
    "SaveResponse",
    "SubdomainUpdateResponse",
    "ThemeBuilderStore",
    "WebsiteConfiguration",
    "WebsitePersistence",
    "create_builder_context",
    "decode_configuration",
    "encode_configuration",
]
