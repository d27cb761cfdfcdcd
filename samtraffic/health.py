"""HTTP client for the messaging server's health endpoint."""

from __future__ import annotations

import ssl

import httpx

from samtraffic.data import HealthCheck


class HealthClient:
    """Queries the server's health status, over TLS when a context is given."""

    def __init__(self, address: str, tls: ssl.SSLContext | None = None) -> None:
        if tls is not None:
            self.url = f"https://{address}"
            self._client = httpx.AsyncClient(verify=tls)
        else:
            self.url = f"http://{address}"
            self._client = httpx.AsyncClient()

    async def __aenter__(self) -> HealthClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def health(self) -> HealthCheck:
        """Fetch the health report.

        Raises httpx.HTTPError when the server cannot be reached and
        ValueError when the body is not a health report.
        """
        response = await self._client.get(f"{self.url}/health")
        return HealthCheck.from_dict(response.json())