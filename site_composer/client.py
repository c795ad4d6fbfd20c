r"""HTTP client for the website persistence service.

The client wraps the handful of JSON endpoints the builder needs: saving,
loading and deleting the caller's draft, fetching a published site by
subdomain, and the two subdomain endpoints used by the domain editor.

Example
-------
>>> from site_composer.client import WebsiteClient
>>> client = WebsiteClient(base_url="https://builder.example.com/api", token="t")  # doctest: +SKIP
>>> config = client.load_configuration("fitness-trainer")  # doctest: +SKIP
>>> config.active_sections  # doctest: +SKIP
['hero', 'banner']
"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus
from urllib.parse import quote

import msgspec
import requests

from site_composer.builder.wire import (
    AvailabilityResponse,
    SaveResponse,
    SubdomainUpdateResponse,
    WebsiteConfiguration,
    encode_configuration,
)
from site_composer.settings import DEFAULT_API_URL, DEFAULT_TIMEOUT, ApiSettings

_T = typ.TypeVar("_T")


class WebsiteApiError(RuntimeError):
    """Raised when the persistence service is unreachable or returns an error."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class WebsiteClient:
    """Thin wrapper around the ``/website`` and subdomain endpoints.

    Authentication uses a bearer token when one is configured; the public
    site lookup never sends it. Requests are not retried.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_API_URL,
        token: str | None = None,
        tenant: str | None = None,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/") or DEFAULT_API_URL
        self._session = session or requests.Session()
        self.timeout = timeout
        self._headers = {
            "Accept": "application/json",
            "User-Agent": "site-composer/0.1",
        }
        if tenant:
            self._headers["X-Tenant"] = tenant
        self._auth_headers = dict(self._headers)
        if token:
            self._auth_headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_settings(
        cls, settings: ApiSettings, *, session: requests.Session | None = None
    ) -> WebsiteClient:
        return cls(
            base_url=settings.base_url,
            token=settings.token,
            tenant=settings.tenant,
            session=session,
            timeout=settings.timeout,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    # -- website configuration ---------------------------------------------

    def save_configuration(self, config: WebsiteConfiguration) -> SaveResponse:
        """POST ``config`` to ``/website/save`` and return the service reply."""
        response = self._request(
            "POST",
            "/website/save",
            data=encode_configuration(config),
            headers={"Content-Type": "application/json"},
        )
        return self._decode(response, SaveResponse)

    def load_configuration(self, theme_id: str | None = None) -> WebsiteConfiguration | None:
        """Return the saved draft, or ``None`` when nothing is stored.

        Parameters
        ----------
        theme_id : str | None
            Theme whose draft to load. Without it the service returns the
            most recently saved draft of any theme.
        """
        params = {"themeId": theme_id} if theme_id else None
        response = self._request_optional("GET", "/website/load", params=params)
        if response is None:
            return None
        return self._decode(response, WebsiteConfiguration)

    def delete_configuration(self) -> None:
        self._request("DELETE", "/website/delete")

    def load_public_configuration(self, subdomain: str) -> WebsiteConfiguration | None:
        """Return the published site for ``subdomain`` without credentials."""
        normalized = subdomain.strip()
        if not normalized:
            msg = "Subdomain cannot be empty"
            raise ValueError(msg)
        response = self._request_optional(
            "GET",
            f"/website/public/{quote(normalized, safe='')}",
            authenticated=False,
        )
        if response is None:
            return None
        return self._decode(response, WebsiteConfiguration)

    # -- subdomain ---------------------------------------------------------

    def check_subdomain(self, slug: str) -> bool:
        """Return whether ``slug`` is free to claim."""
        response = self._request("GET", f"/auth/check-subdomain/{quote(slug, safe='')}")
        return self._decode(response, AvailabilityResponse).available

    def update_subdomain(self, subdomain: str) -> SubdomainUpdateResponse:
        """Claim ``subdomain`` for the signed-in instructor.

        Raises
        ------
        WebsiteApiError
            If the request fails or the service reports ``success: false``.
        """
        response = self._request(
            "PATCH",
            "/instructor/subdomain",
            data=msgspec.json.encode({"subdomain": subdomain}),
            headers={"Content-Type": "application/json"},
        )
        result = self._decode(response, SubdomainUpdateResponse)
        if not result.success:
            msg = result.error or result.message or "Failed to update subdomain"
            raise WebsiteApiError(msg, status=response.status_code)
        return result

    # -- transport ---------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        data: bytes | None = None,
        headers: dict[str, str] | None = None,
        authenticated: bool = True,
    ) -> requests.Response:
        url = f"{self._base_url}{path}"
        merged = dict(self._auth_headers if authenticated else self._headers)
        if headers:
            merged.update(headers)
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                data=data,
                headers=merged,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            msg = f"{method} {path} failed: {exc}"
            raise WebsiteApiError(msg) from exc

        if response.status_code >= HTTPStatus.BAD_REQUEST:
            snippet = response.text[:200]
            msg = f"{method} {path} failed with {response.status_code}: {snippet}"
            raise WebsiteApiError(msg, status=response.status_code)
        return response

    def _request_optional(
        self, method: str, path: str, **kwargs: typ.Any
    ) -> requests.Response | None:
        """Like :meth:`_request` but map HTTP 404 to ``None``."""
        try:
            return self._request(method, path, **kwargs)
        except WebsiteApiError as exc:
            if exc.status == HTTPStatus.NOT_FOUND:
                return None
            raise

    @staticmethod
    def _decode(response: requests.Response, kind: type[_T]) -> _T:
        try:
            return msgspec.json.decode(response.content, type=kind)
        except (msgspec.DecodeError, msgspec.ValidationError) as exc:
            msg = f"Unexpected response body from {response.url}: {exc}"
            raise WebsiteApiError(msg, status=response.status_code) from exc


__all__ = ["WebsiteApiError", "WebsiteClient"]
