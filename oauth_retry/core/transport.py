"""HTTP transport used by the retry engine and the default token refresher.

The engine treats the transport as an opaque capability: one call performs one
HTTP exchange. Error statuses surface as ``ResponseError`` so the engine can
classify them; connection-level failures propagate as raised by httpx.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import httpx

from ..utils.errors import ResponseError
from .config import Settings

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class TransportResponse:
    """Outcome of a single HTTP exchange."""

    status_code: int
    entity: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""

    @property
    def ok(self) -> bool:
        """True for 2xx and 3xx statuses."""
        return self.status_code < 400


@runtime_checkable
class Transport(Protocol):
    """Performs a single HTTP exchange."""

    async def send(
        self,
        url: str,
        method: str = "GET",
        body: Any = None,
        headers: dict[str, str] | None = None,
        options: dict[str, Any] | None = None,
    ) -> TransportResponse:
        """Send one request.

        Returns:
            TransportResponse for statuses below 400

        Raises:
            ResponseError: If the remote answers with status >= 400
            httpx.RequestError: On connection-level failures
        """
        ...


def _content_type(headers: dict[str, str]) -> str:
    for name, value in headers.items():
        if name.lower() == "content-type":
            return value.split(";", 1)[0].strip().lower()
    return ""


def _request_kwargs(body: Any, headers: dict[str, str]) -> dict[str, Any]:
    """Choose how httpx should encode the request body."""
    if body is None:
        return {}
    if _content_type(headers) == FORM_CONTENT_TYPE and isinstance(body, dict):
        return {"data": body}
    if isinstance(body, (dict, list)):
        return {"json": body}
    return {"content": body}


def _merge_options(
    kwargs: dict[str, Any], headers: dict[str, str], options: dict[str, Any] | None
) -> None:
    """Fold request options into the httpx keyword arguments.

    Option headers are merged under the explicit headers. Options may not
    replace a body that was already encoded from ``body``.
    """
    options = dict(options or {})
    for name, value in dict(options.pop("headers", None) or {}).items():
        if not any(name.lower() == existing.lower() for existing in headers):
            headers[name] = value

    conflicting = sorted(set(options) & set(kwargs))
    if conflicting:
        raise ValueError(
            f"Request options {conflicting} conflict with the request body; pass the body once"
        )
    kwargs.update(options)


def _parse_entity(response: httpx.Response) -> Any:
    """Decode a response body as JSON when possible, else return its text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpxTransport:
    """Transport backed by ``httpx.AsyncClient``.

    Usage:
        # Client opened per request
        transport = HttpxTransport(settings=Settings())

        # Shared client (caller owns its lifecycle)
        async with httpx.AsyncClient() as client:
            transport = HttpxTransport(client=client)
            response = await transport.send("https://api.example.com/items")
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the transport.

        Args:
            client: Shared client to reuse. When omitted, a client is opened
                for each request and closed afterwards.
            settings: Settings providing the request timeout
        """
        self.client = client
        self.timeout = settings.request_timeout if settings else 30.0

    async def send(
        self,
        url: str,
        method: str = "GET",
        body: Any = None,
        headers: dict[str, str] | None = None,
        options: dict[str, Any] | None = None,
    ) -> TransportResponse:
        """Send one request and translate the outcome.

        Args:
            url: Absolute request URL
            method: HTTP method
            body: Request body. Dicts are form-encoded when the Content-Type
                header is application/x-www-form-urlencoded and JSON-encoded
                otherwise; lists are JSON-encoded; str/bytes are sent as is.
            headers: Request headers
            options: Extra keyword arguments for ``httpx.AsyncClient.request``
                (e.g. timeout, params, follow_redirects). A "headers" option is
                merged with ``headers``, which win on conflicts.

        Returns:
            TransportResponse with the decoded entity

        Raises:
            ValueError: If options carry data/json/content alongside ``body``
            ResponseError: If the response status is 400 or above
            httpx.RequestError: On connection-level failures
        """
        headers = dict(headers or {})
        method = (method or "GET").upper()
        kwargs = _request_kwargs(body, headers)
        _merge_options(kwargs, headers, options)

        logger.debug(f"{method} {url}")

        if self.client is not None:
            response = await self.client.request(method, url, headers=headers, **kwargs)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, headers=headers, **kwargs)

        result = TransportResponse(
            status_code=response.status_code,
            entity=_parse_entity(response),
            headers=dict(response.headers),
            url=str(response.url),
        )

        if not result.ok:
            logger.debug(f"{method} {url} failed with HTTP {result.status_code}")
            raise ResponseError(result)

        return result
