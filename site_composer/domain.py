"""Subdomain editing for the domain settings section.

The editor sanitises what the user types, checks availability after a short
pause (each keystroke supersedes the pending check), and claims the new
subdomain through the persistence service before writing it into the
``domain`` section data.

Examples
--------
>>> sanitize_subdomain("My Coaching_Site!")
'mycoachingsite'
>>> is_valid_subdomain("my-site"), is_valid_subdomain("-bad"), is_valid_subdomain("ab")
(True, False, False)
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import re
import threading
import typing as typ

from site_composer._constants import DOMAIN_SECTION_ID
from site_composer.client import WebsiteApiError

if typ.TYPE_CHECKING:
    from site_composer.builder import CompositionDispatcher

logger = logging.getLogger(__name__)

SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{1,28}[a-z0-9])$")
_DISALLOWED = re.compile(r"[^a-z0-9-]", re.IGNORECASE)

DEFAULT_CHECK_DELAY = 0.5


class SubdomainError(ValueError):
    """Raised when a subdomain cannot be claimed."""


class SubdomainService(typ.Protocol):
    def check_subdomain(self, slug: str) -> bool: ...

    def update_subdomain(self, subdomain: str) -> object: ...


class _Timer(typ.Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = cabc.Callable[[float, cabc.Callable[..., None], list[typ.Any]], _Timer]


def sanitize_subdomain(value: str) -> str:
    """Drop characters outside ``[a-z0-9-]`` and lowercase the rest."""
    return _DISALLOWED.sub("", value).lower()


def is_valid_subdomain(slug: str) -> bool:
    return SUBDOMAIN_PATTERN.match(slug) is not None


@dc.dataclass(frozen=True, slots=True)
class EditorMessage:
    """Feedback shown under the subdomain input."""

    kind: typ.Literal["success", "error"]
    text: str


class SubdomainEditor:
    """Stateful controller behind the subdomain input of the domain section."""

    def __init__(
        self,
        dispatcher: CompositionDispatcher,
        service: SubdomainService,
        *,
        delay: float = DEFAULT_CHECK_DELAY,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        self.dispatcher = dispatcher
        self.service = service
        self.delay = delay
        self._timer_factory = timer_factory
        self._timer: _Timer | None = None
        self._lock = threading.Lock()
        self.value = self.current_subdomain
        self.available: bool | None = None
        self.checking = False
        self.is_saving = False
        self.message: EditorMessage | None = None

    @property
    def domain_data(self) -> dict[str, typ.Any]:
        return dict(self.dispatcher.state.section_data.get(DOMAIN_SECTION_ID, {}))

    @property
    def current_subdomain(self) -> str:
        """Subdomain stored in the active theme's domain section."""
        return str(self.domain_data.get("subdomain") or "")

    @property
    def is_valid(self) -> bool:
        return is_valid_subdomain(self.value)

    def change(self, value: str) -> str:
        """Accept new input and schedule an availability check.

        Returns the sanitised value actually held by the editor.
        """
        clean = sanitize_subdomain(value)
        self.value = clean
        self.message = None
        self.available = None
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if clean and clean != self.current_subdomain:
                self._timer = self._timer_factory(
                    self.delay, self.check_availability, [clean]
                )
                self._timer.start()
        return clean

    def check_availability(self, slug: str) -> bool | None:
        """Ask the service whether ``slug`` is free; ``None`` when unknown."""
        if not is_valid_subdomain(slug):
            self.available = None
            return None
        self.checking = True
        try:
            available = self.service.check_subdomain(slug)
        except WebsiteApiError as exc:
            logger.warning("Subdomain availability check for %s failed: %s", slug, exc)
            available = None
        finally:
            self.checking = False
        # A newer keystroke may have superseded this check while it ran.
        if slug == self.value:
            self.available = available
        return available

    def save(self) -> bool:
        """Claim the edited subdomain and store it in the domain section."""
        self.is_saving = True
        self.message = None
        try:
            changed = self._claim()
        except SubdomainError as exc:
            self.message = EditorMessage("error", str(exc))
            return False
        finally:
            self.is_saving = False
        if changed:
            self.message = EditorMessage("success", "Subdomain updated successfully!")
        return True

    def cancel(self) -> None:
        """Abandon the edit and restore the stored subdomain."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        self.value = self.current_subdomain
        self.available = None
        self.message = None

    def _claim(self) -> bool:
        if not self.is_valid:
            msg = "Invalid subdomain format"
            raise SubdomainError(msg)
        if self.value == self.current_subdomain:
            return False
        if self.available is False:
            msg = "Subdomain already taken"
            raise SubdomainError(msg)
        try:
            self.service.update_subdomain(self.value)
        except WebsiteApiError as exc:
            raise SubdomainError(str(exc) or "Failed to update subdomain") from exc
        self.dispatcher.update_section_data(
            DOMAIN_SECTION_ID,
            {
                "subdomain": self.value,
                "customDomain": self.domain_data.get("customDomain", ""),
            },
        )
        return True

    def snapshot(self) -> dict[str, typ.Any]:
        """Live state merged into the domain editor panel."""
        return {
            "value": self.value,
            "current": self.current_subdomain,
            "valid": self.is_valid,
            "available": self.available,
            "checking": self.checking,
            "saving": self.is_saving,
            "message": None if self.message is None else dc.asdict(self.message),
        }


__all__ = [
    "DEFAULT_CHECK_DELAY",
    "SUBDOMAIN_PATTERN",
    "EditorMessage",
    "SubdomainEditor",
    "SubdomainError",
    "SubdomainService",
    "is_valid_subdomain",
    "sanitize_subdomain",
]
