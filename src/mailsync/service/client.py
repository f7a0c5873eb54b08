"""Async HTTP client for the remote mail service.

This module provides the transport used by the optimistic mutation
coordinator and the thread service:
- Bearer token attached from a TokenProvider on every request
- JSON request and response bodies
- Classification of failures into the mailsync error taxonomy
- Request/response logging for debugging

Requests are never retried here. The mutation protocol requires exactly one
remote call per operation; recovery is the caller's refetch.

Usage:
    from mailsync.auth import EnvTokenProvider
    from mailsync.service.client import MailServiceClient

    async with MailServiceClient("http://localhost:8000", EnvTokenProvider()) as client:
        data = await client.request("PATCH", "/api/emails/42/read", json={"read": True})
"""

from typing import Any, Literal, Protocol
from urllib.parse import quote

import httpx

from mailsync.auth.session import TokenProvider
from mailsync.config_schema import DEFAULT_BACKEND_URL, AppConfig
from mailsync.core.errors import (
    AuthenticationMissingError,
    RemoteRejectedError,
    TransportFailureError,
)
from mailsync.core.logging import get_logger

logger = get_logger(__name__)

HttpMethod = Literal["GET", "POST", "PATCH", "DELETE"]

DEFAULT_TIMEOUT = 30.0


def email_path(email_id: str, suffix: str = "") -> str:
    """Build the endpoint for one mail item, quoting the opaque identifier."""
    path = f"/api/emails/{quote(email_id, safe='')}"
    if suffix:
        path += "/" + suffix.lstrip("/")
    return path


class RemoteMailService(Protocol):
    """The request/response contract the sync engine depends on."""

    async def request(
        self,
        method: HttpMethod,
        endpoint: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Issue one request and return the decoded JSON object body."""
        ...


class MailServiceClient:
    """Remote mail service client over httpx.AsyncClient.

    Attributes:
        base_url: Backend base URL
        token_provider: Source of the session bearer token
        timeout: Per-request timeout in seconds

    Example:
        client = MailServiceClient(base_url, StaticTokenProvider(token))
        threads = await client.get("/api/threads")
        await client.aclose()
    """

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Backend base URL (e.g., "http://localhost:8000")
            token_provider: Provider queried for a token before each request
            timeout: Request timeout in seconds
            transport: Custom transport (e.g., httpx.MockTransport for testing)
        """
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

        logger.debug("MailServiceClient initialized", base_url=self.base_url, timeout=timeout)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        token_provider: TokenProvider,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "MailServiceClient":
        """Build a client from the service section of an AppConfig."""
        return cls(
            base_url=config.service.base_url or DEFAULT_BACKEND_URL,
            token_provider=token_provider,
            timeout=config.service.timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def __aenter__(self) -> "MailServiceClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def _get_headers(self) -> dict[str, str]:
        """Get request headers with the current bearer token.

        Raises:
            AuthenticationMissingError: If no token is available
        """
        token = await self.token_provider.get_token()
        if not token:
            logger.warning("Request refused, no session token available")
            raise AuthenticationMissingError("Not authenticated")

        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _decode(self, response: httpx.Response, method: str, endpoint: str) -> dict[str, Any]:
        """Decode a response body and classify HTTP-level failures.

        Raises:
            RemoteRejectedError: Non-2xx response carrying a structured body
            TransportFailureError: Undecodable body, or non-2xx without one
        """
        status_code = response.status_code
        body: Any = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                body = None

        if response.is_success:
            if not response.content:
                return {"success": True}
            if not isinstance(body, dict):
                logger.error(
                    "Mail service returned a non-object body",
                    method=method,
                    endpoint=endpoint,
                    status_code=status_code,
                )
                raise TransportFailureError(
                    f"Unexpected response from {endpoint}: expected a JSON object",
                    status_code=status_code,
                )
            return body

        logger.error(
            "Mail service error",
            method=method,
            endpoint=endpoint,
            status_code=status_code,
            structured=isinstance(body, dict),
        )

        if isinstance(body, dict) and ("error" in body or "success" in body):
            raise RemoteRejectedError(
                str(body.get("error") or f"Request failed with HTTP {status_code}"),
                status_code=status_code,
                response=body,
            )

        raise TransportFailureError(
            f"Request to {endpoint} failed with HTTP {status_code}",
            status_code=status_code,
        )

    async def request(
        self,
        method: HttpMethod,
        endpoint: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make one HTTP request to the mail service.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            endpoint: API endpoint path (e.g., "/api/emails/42/read")
            json: JSON body for POST/PATCH requests
            params: URL query parameters

        Returns:
            The decoded JSON object. A 2xx body is returned verbatim, so a
            ``success: false`` payload is left for the caller to classify.

        Raises:
            AuthenticationMissingError: No token; nothing was sent
            RemoteRejectedError: Non-2xx with a structured error body
            TransportFailureError: Network error, timeout, or unusable response
        """
        headers = await self._get_headers()

        if params:
            params = {k: v for k, v in params.items() if v is not None}

        logger.debug("Mail service request", method=method, endpoint=endpoint)

        try:
            response = await self._client.request(
                method,
                endpoint,
                headers=headers,
                json=json,
                params=params,
            )
        except httpx.TimeoutException as e:
            logger.error("Mail service request timed out", method=method, endpoint=endpoint)
            raise TransportFailureError(
                f"Request to {endpoint} timed out after {self.timeout}s"
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                "Mail service connection error",
                method=method,
                endpoint=endpoint,
                error=str(e),
            )
            raise TransportFailureError(f"Connection to mail service failed: {e}") from e

        return self._decode(response, method, endpoint)

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Make a GET request."""
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
        """Make a POST request."""
        return await self.request("POST", endpoint, json=json)

    async def patch(self, endpoint: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
        """Make a PATCH request."""
        return await self.request("PATCH", endpoint, json=json)

    async def delete(self, endpoint: str) -> dict[str, Any]:
        """Make a DELETE request."""
        return await self.request("DELETE", endpoint)
