# samtraffic

Scenario-driven traffic generation for messaging test clients.

A test client gets its scenario from a dispatch service. The scenario sets its
username, its friends and how often it talks to each of them, the message sizes,
the send and reply rates, the tick length and the duration. The client then sends
and replies to messages tick by tick, over the regular channel or, for deniable
friends, the deniable (DenIM) channel. At the end it produces a report of every
message it sent or received, ready to upload to the dispatch service.

## Installation

```
pip install samtraffic
```

To run the tests as well:

```
pip install "samtraffic[test]"
pytest
```

## Configuration

`samtraffic.config.load_config(path)` reads a JSON file with camelCase keys and
returns a `DenimClientConfig`:

```json
{
  "address": "127.0.0.1:8080",
  "dispatchAddress": "127.0.0.1:9090",
  "certificatePath": null,
  "channelBufferSize": 10,
  "inmemory": true,
  "logging": "info"
}
```

`address`, `dispatchAddress` and `inmemory` are required; the others may be
missing or `null`. A missing required field, a value of the wrong type or a
negative `channelBufferSize` raises `ValueError`. `DenimClientConfig.from_dict`
and `to_dict` convert to and from the same mapping.

## Modules

- `samtraffic.data`: the wire types `Friend`, `ClientInfo`, `StartInfo`,
  `AccountInfo`, `MessageLog`, `ClientReport` and `HealthCheck`, each with
  `from_dict` and `to_dict`; malformed input raises `ValueError`. `ClientType`
  and `MessageType` map unknown names to `OTHER`. `HealthCheck.is_ok()` is true
  when `sam` and `database` are `"OK"` and `denim` is `"OK"` or absent.
  `DispatchData` pairs a `ClientInfo` with a `StartInfo`.
- `samtraffic.dispatch.SamDispatchClient(address)`: an async client for the
  dispatch service at `http://<address>`. `health()` returns a bool;
  `get_client()` returns a `ClientInfo`; `sync()` returns a `StartInfo`;
  `upload_account_id(account_info)` and `upload_results(report)` post JSON.
  Transport and decoding failures raise `DispatchError`; an HTTP 401 from
  `sync` or the uploads raises `UnauthorizedError`. Close it with `aclose()` or
  use it as an `async with` block.
- `samtraffic.health.HealthClient(address, tls=None)`: fetches `/health` from the
  messaging server as a `HealthCheck`, over HTTPS when an `ssl.SSLContext` is
  given.
- `samtraffic.timer.Timer(tick_duration, end_tick)`: `await next()` sleeps one
  tick (in seconds) and returns false once the end tick is reached;
  `do_action(rate)` is true on ticks that are multiples of `rate`.
- `samtraffic.utils`: `normal_friends`, `denim_friends`, `usernames`,
  `get_friend` (weighted by frequency), `weighted_choice`, `random_bytes` and
  `sample_prob`. The random helpers take a `random.Random`.
- `samtraffic.scenario`: `ScenarioRunner(data, client, rng=None)` runs a
  scenario against any object implementing the `MessagingClient` protocol;
  `await runner.start()` returns a `ClientReport`. Its subscribe methods return
  `asyncio.Queue` objects of `Envelope` (timestamp in milliseconds, content,
  source account id). `send_message`, `reply_message` and `recv_logger` are the
  per-tick steps the runner uses.

## Example

```python
from samtraffic.data import AccountInfo, DispatchData
from samtraffic.dispatch import SamDispatchClient
from samtraffic.scenario import ScenarioRunner


async def run(client):
    async with SamDispatchClient("127.0.0.1:9090") as dispatch:
        info = await dispatch.get_client()
        await dispatch.upload_account_id(AccountInfo(account_id=client.account_id()))
        start = await dispatch.sync()
        report = await ScenarioRunner(DispatchData(info, start), client).start()
        await dispatch.upload_results(report)
```

## What this package does not do

- It has no command-line program; the steps above are put together by the
  caller.
- It has no SAM or DenIM messaging client. Registration, encryption, message
  storage and the server connection come from whatever object is passed as the
  `MessagingClient`.
- The configuration's `certificatePath` and `logging` fields are only read, not
  acted on: building an `ssl.SSLContext` and setting up logging are left to the
  caller.