import json

import httpx
import pytest
import respx

from samtraffic.data import AccountInfo, ClientReport, ClientType, MessageLog, MessageType
from samtraffic.dispatch import DispatchError, SamDispatchClient, UnauthorizedError

BASE = "http://dispatch.test"

CLIENT = {
    "clientType": "sam",
    "username": "alice",
    "messageSizeRange": [1, 4],
    "sendRate": 1,
    "replyRate": 2,
    "tickMillis": 10,
    "durationTicks": 5,
    "denimProbability": 0.0,
    "replyProbability": 1.0,
    "staleReply": 0,
    "friends": {"bob": {"username": "bob", "frequency": 1.0, "denim": False}},
}


def test_url_uses_http_scheme():
    client = SamDispatchClient("dispatch.test")
    assert client.url == BASE


@pytest.mark.asyncio
@pytest.mark.parametrize("status, expected", [(200, True), (204, True), (500, False)])
async def test_health_status(status, expected):
    with respx.mock(base_url=BASE) as router:
        router.get("/health").mock(return_value=httpx.Response(status))
        async with SamDispatchClient("dispatch.test") as dispatch:
            assert await dispatch.health() is expected


@pytest.mark.asyncio
async def test_health_connection_error_is_false():
    with respx.mock(base_url=BASE) as router:
        router.get("/health").mock(side_effect=httpx.ConnectError)
        async with SamDispatchClient("dispatch.test") as dispatch:
            assert await dispatch.health() is False


@pytest.mark.asyncio
async def test_get_client_parses_info():
    with respx.mock(base_url=BASE) as router:
        router.get("/client").mock(return_value=httpx.Response(200, json=CLIENT))
        async with SamDispatchClient("dispatch.test") as dispatch:
            info = await dispatch.get_client()
    assert info.client_type is ClientType.SAM
    assert info.to_dict() == CLIENT


@pytest.mark.asyncio
async def test_get_client_bad_body():
    with respx.mock(base_url=BASE) as router:
        router.get("/client").mock(return_value=httpx.Response(200, text="nope"))
        async with SamDispatchClient("dispatch.test") as dispatch:
            with pytest.raises(DispatchError):
                await dispatch.get_client()


@pytest.mark.asyncio
async def test_get_client_connection_error():
    with respx.mock(base_url=BASE) as router:
        router.get("/client").mock(side_effect=httpx.ConnectError)
        async with SamDispatchClient("dispatch.test") as dispatch:
            with pytest.raises(DispatchError):
                await dispatch.get_client()


@pytest.mark.asyncio
async def test_sync_returns_start_info():
    body = {"friends": {"bob": "id-bob"}}
    with respx.mock(base_url=BASE) as router:
        router.get("/sync").mock(return_value=httpx.Response(200, json=body))
        async with SamDispatchClient("dispatch.test") as dispatch:
            start = await dispatch.sync()
    assert start.friends == body["friends"]


@pytest.mark.asyncio
async def test_sync_unauthorized():
    with respx.mock(base_url=BASE) as router:
        router.get("/sync").mock(return_value=httpx.Response(401))
        async with SamDispatchClient("dispatch.test") as dispatch:
            with pytest.raises(UnauthorizedError):
                await dispatch.sync()


@pytest.mark.asyncio
async def test_upload_results_posts_report():
    report = ClientReport(123, [MessageLog(MessageType.REGULAR, "alice", "bob", 3, 1)])
    with respx.mock(base_url=BASE) as router:
        route = router.post("/upload").mock(return_value=httpx.Response(200))
        async with SamDispatchClient("dispatch.test") as dispatch:
            await dispatch.upload_results(report)
    assert route.called
    assert json.loads(route.calls.last.request.content) == report.to_dict()


@pytest.mark.asyncio
async def test_upload_results_unauthorized():
    with respx.mock(base_url=BASE) as router:
        router.post("/upload").mock(return_value=httpx.Response(401))
        async with SamDispatchClient("dispatch.test") as dispatch:
            with pytest.raises(UnauthorizedError):
                await dispatch.upload_results(ClientReport(0, []))


@pytest.mark.asyncio
async def test_upload_account_id():
    info = AccountInfo("id-alice")
    with respx.mock(base_url=BASE) as router:
        route = router.post("/id").mock(return_value=httpx.Response(200))
        async with SamDispatchClient("dispatch.test") as dispatch:
            result = await dispatch.upload_account_id(info)
    assert result is None
    assert route.call_count == 1
    assert json.loads(route.calls.last.request.content) == {"accountId": "id-alice"}


@pytest.mark.asyncio
async def test_upload_account_id_unauthorized():
    with respx.mock(base_url=BASE) as router:
        router.post("/id").mock(return_value=httpx.Response(401))
        async with SamDispatchClient("dispatch.test") as dispatch:
            with pytest.raises(UnauthorizedError):
                await dispatch.upload_account_id(AccountInfo("id-alice"))