"""HTTP client for the scenario dispatcher."""

from __future__ import annotations

import json

import httpx

from samtraffic.data import AccountInfo, ClientInfo, ClientReport, StartInfo


class DispatchError(Exception):
    """Talking to the dispatcher failed."""


class UnauthorizedError(DispatchError):
    """The dispatcher refused the request."""


class SamDispatchClient:
    """Fetches scenario parameters from the dispatcher and uploads results."""

    def __init__(self, address: str) -> None:
        self.url = f"http://{address}"
        self._client = httpx.AsyncClient()

    async def __aenter__(self) -> SamDispatchClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, body: str | None = None) -> httpx.Response:
        try:
            return await self._client.request(method, f"{self.url}{path}", content=body)
        except httpx.HTTPError as exc:
            raise DispatchError(str(exc)) from exc

    @staticmethod
    def _check_authorized(response: httpx.Response) -> None:
        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise UnauthorizedError("dispatcher rejected the request")

    @staticmethod
    def _json(response: httpx.Response) -> object:
        try:
            return response.json()
        except ValueError as exc:
            raise DispatchError(f"invalid JSON from dispatcher: {exc}") from exc

    async def health(self) -> bool:
        """True if the dispatcher answers its health endpoint successfully."""
        try:
            response = await self._client.get(f"{self.url}/health")
        except httpx.HTTPError:
            return False
        return response.is_success

    async def get_client(self) -> ClientInfo:
        response = await self._request("GET", "/client")
        try:
            return ClientInfo.from_dict(self._json(response))
        except ValueError as exc:
            raise DispatchError(str(exc)) from exc

    async def sync(self) -> StartInfo:
        """Wait for the dispatcher to hand out the friends' account ids."""
        response = await self._request("GET", "/sync")
        self._check_authorized(response)
        try:
            return StartInfo.from_dict(self._json(response))
        except ValueError as exc:
            raise DispatchError(str(exc)) from exc

    async def upload_results(self, report: ClientReport) -> None:
        response = await self._request("POST", "/upload", json.dumps(report.to_dict()))
        self._check_authorized(response)

    async def upload_account_id(self, account_info: AccountInfo) -> None:
        response = await self._request("POST", "/id", json.dumps(account_info.to_dict()))
        self._check_authorized(response)