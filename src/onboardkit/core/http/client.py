"""Base async client for the remote platform services.

Each remote collaborator (provisioning, identity, notification) gets a thin
subclass. The base owns the ``httpx.AsyncClient``, the auth headers and the
timeout, and turns transport failures into ``ServiceUnavailableError`` so no
caller ever mistakes a dropped connection for success.
"""

from typing import Any

import httpx
import structlog

from onboardkit.core.errors import ServiceUnavailableError


logger = structlog.get_logger()


class RemoteServiceClient:
    """Async HTTP client bound to one remote service."""

    service_name: str = "remote"

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "RemoteServiceClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send one request and return the raw response.

        Status codes are left to the caller; only transport-level failures
        raise here.

        Raises:
            ServiceUnavailableError: On timeout or connection failure
        """
        try:
            return await self._client.request(
                method, path, json=json, params=params, headers=headers
            )
        except httpx.TimeoutException as exc:
            logger.warning(
                "remote_service_timeout",
                service=self.service_name,
                method=method,
                path=path,
                error=str(exc),
            )
            raise ServiceUnavailableError(
                details={"service": self.service_name, "reason": "timeout"}
            ) from exc
        except httpx.TransportError as exc:
            logger.warning(
                "remote_service_unreachable",
                service=self.service_name,
                method=method,
                path=path,
                error=str(exc),
            )
            raise ServiceUnavailableError(
                details={"service": self.service_name, "reason": "transport_error"}
            ) from exc


def response_json(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body, returning an empty dict for anything else."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
