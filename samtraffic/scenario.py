"""Runs a messaging scenario: sends, replies and records traffic tick by tick."""

from __future__ import annotations

import asyncio
import enum
import logging
import random
import time
from collections.abc import Coroutine, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from samtraffic import utils
from samtraffic.data import (
    AccountId,
    ClientReport,
    DispatchData,
    Friend,
    MessageLog,
    MessageType,
)
from samtraffic.timer import Timer

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Envelope:
    """A decrypted message delivered by the messaging client."""

    timestamp: int
    content: bytes
    source_account_id: AccountId


class MessagingClient(Protocol):
    """The operations a scenario needs from a messaging client."""

    def is_denim(self) -> bool: ...

    def account_id(self) -> AccountId: ...

    def regular_subscribe(self) -> asyncio.Queue[Envelope]: ...

    def deniable_subscribe(self) -> asyncio.Queue[Envelope]: ...

    async def process_messages(self) -> None: ...

    async def enqueue_message(self, account_id: AccountId, msg: bytes) -> None: ...

    async def send_message(self, account_id: AccountId, msg: bytes) -> None: ...


class ReplyType(enum.Enum):
    """The channel a received message arrived on, and so the channel to reply on."""

    DENIM = "denim"
    SAM = "sam"

    @property
    def message_type(self) -> MessageType:
        return MessageType.DENIM if self is ReplyType.DENIM else MessageType.REGULAR


_REPLY_TYPES = {MessageType.DENIM: ReplyType.DENIM, MessageType.REGULAR: ReplyType.SAM}


@dataclass(frozen=True)
class IncomingMessage:
    """A received message that may still be replied to."""

    tick: int
    sender: str
    reply_type: ReplyType


async def _next_envelope(recv: asyncio.Queue[Envelope], stop: asyncio.Event) -> Envelope | None:
    getter = asyncio.ensure_future(recv.get())
    stopper = asyncio.ensure_future(stop.wait())
    try:
        await asyncio.wait({getter, stopper}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (getter, stopper):
            if not task.done():
                task.cancel()
    if getter.done() and not getter.cancelled():
        return getter.result()
    return None


async def recv_logger(
    recv: asyncio.Queue[Envelope],
    msg_log: list[MessageLog],
    username: str,
    usernames: Mapping[AccountId, str],
    msg_type: MessageType,
    start_time: int,
    tick_millis: int,
    incoming: list[IncomingMessage],
    stop: asyncio.Event,
) -> None:
    """Record every received message until ``stop`` is set."""
    while not stop.is_set():
        envelope = await _next_envelope(recv, stop)
        if envelope is None:
            continue

        recv_tick = (envelope.timestamp - start_time) // tick_millis
        source = envelope.source_account_id
        sender = usernames.get(source)
        if sender is None:
            _log.error("User with account id '%s' does not exist", source)
            continue

        reply_type = _REPLY_TYPES.get(msg_type)
        if reply_type is None:
            _log.error("Received a message that was neither a denim or sam message!")
            continue

        incoming.append(IncomingMessage(tick=recv_tick, sender=sender, reply_type=reply_type))
        _log.info("Received message from '%s'", sender)
        msg_log.append(
            MessageLog(
                message_type=msg_type,
                sender=sender,
                recipient=username,
                size=len(envelope.content),
                tick=recv_tick,
            )
        )


async def send_message(
    username: str,
    client: MessagingClient,
    friends: Mapping[str, Friend],
    denim_friends: Mapping[str, Friend],
    account_ids: Mapping[str, AccountId],
    msg_log: list[MessageLog],
    denim_prob: float,
    message_sizes: tuple[int, int],
    current_tick: int,
    rng: random.Random,
) -> None:
    """Send a random message to a friend chosen by frequency, deniably when sampled."""
    minimum, maximum = message_sizes
    msg = utils.random_bytes(minimum, maximum, rng)
    deniable = utils.sample_prob(denim_prob, rng) and len(denim_friends) > 0
    deniable = deniable and client.is_denim()

    friend = utils.get_friend(denim_friends if deniable else friends, rng)
    account_id = account_ids.get(friend.username) if friend is not None else None
    if friend is None or account_id is None:
        _log.error("Send Message: Friend does not exist!")
        return

    try:
        if deniable:
            await client.enqueue_message(account_id, msg)
        else:
            await client.send_message(account_id, msg)
    except Exception as exc:
        _log.error("Send Message Client Error: %s", exc)
        return

    _log.info("Sent message to '%s'", friend.username)
    msg_log.append(
        MessageLog(
            message_type=MessageType.DENIM if deniable else MessageType.REGULAR,
            sender=username,
            recipient=friend.username,
            size=len(msg),
            tick=current_tick,
        )
    )


async def reply_message(
    username: str,
    client: MessagingClient,
    friends: Mapping[str, Friend],
    account_ids: Mapping[str, AccountId],
    msg_log: list[MessageLog],
    message_sizes: tuple[int, int],
    stale_ticks: int,
    current_tick: int,
    reply_prob: float,
    incoming: list[IncomingMessage],
    rng: random.Random,
) -> None:
    """Pick one pending incoming message by sender frequency and maybe answer it."""
    minimum, maximum = message_sizes
    msg = utils.random_bytes(minimum, maximum, rng)

    incoming[:] = [m for m in incoming if current_tick - m.tick > stale_ticks]
    if not incoming:
        return

    weights = [
        friends[m.sender].frequency if m.sender in friends else 0.0 for m in incoming
    ]
    reply = utils.weighted_choice(list(incoming), weights, rng)
    if reply is None:
        _log.warning("Reply Message: Did not get a reply index!")
        return

    try:
        incoming.remove(reply)
    except ValueError:
        _log.warning("Reply Message: Could not remove reply")

    if not utils.sample_prob(reply_prob, rng):
        return

    friend_name = reply.sender
    account_id = account_ids.get(friend_name)
    if account_id is None:
        _log.error("Reply Message: Friend does not exist!")
        return

    msg_type = reply.reply_type.message_type
    try:
        if msg_type is MessageType.DENIM:
            await client.enqueue_message(account_id, msg)
        else:
            await client.send_message(account_id, msg)
    except Exception as exc:
        _log.error("Reply Message Client Error: %s", exc)
        return

    _log.info("Sent reply to '%s'", friend_name)
    msg_log.append(
        MessageLog(
            message_type=msg_type,
            sender=username,
            recipient=friend_name,
            size=len(msg),
            tick=current_tick,
        )
    )


class ScenarioRunner:
    """Drives one client through the scenario the dispatcher assigned to it."""

    def __init__(
        self,
        data: DispatchData,
        client: MessagingClient,
        rng: random.Random | None = None,
    ) -> None:
        self.data = data
        self.client = client
        self.start_time = 0
        self.message_logs: list[MessageLog] = []
        self._rng = rng if rng is not None else random.Random()

    async def start(self) -> ClientReport:
        """Run the scenario to its last tick and return everything that was logged."""
        self.start_time = time.time_ns() // 1_000_000
        await self._run()
        return ClientReport(start_time=self.start_time, messages=list(self.message_logs))

    async def _run(self) -> None:
        info = self.data.client
        client = self.client
        rng = self._rng
        logs = self.message_logs

        if client.is_denim():
            regular = utils.normal_friends(info.friends)
            deniable = utils.denim_friends(info.friends)
        else:
            regular, deniable = dict(info.friends), {}

        account_ids = dict(self.data.start.friends)
        names = utils.usernames(account_ids)
        incoming: list[IncomingMessage] = []
        stop = asyncio.Event()
        lock = asyncio.Lock()
        tasks: list[asyncio.Future[Any]] = []

        def spawn(coro: Coroutine[Any, Any, None]) -> None:
            tasks.append(asyncio.ensure_future(coro))

        async def guarded(coro: Coroutine[Any, Any, None]) -> None:
            async with lock:
                await coro

        async def process() -> None:
            async with lock:
                try:
                    await client.process_messages()
                except Exception as exc:
                    _log.error("Error while processing Message: %s", exc)

        def logger(queue: asyncio.Queue[Envelope], msg_type: MessageType) -> Coroutine[Any, Any, None]:
            return recv_logger(
                queue, logs, info.username, names, msg_type,
                self.start_time, info.tick_millis, incoming, stop,
            )

        def send(tick: int) -> Coroutine[Any, Any, None]:
            return guarded(
                send_message(
                    info.username, client, regular, deniable, account_ids, logs,
                    info.denim_probability, info.message_size_range, tick, rng,
                )
            )

        def reply(tick: int) -> Coroutine[Any, Any, None]:
            return guarded(
                reply_message(
                    info.username, client, info.friends, account_ids, logs,
                    info.message_size_range, info.stale_reply, tick,
                    info.reply_probability, incoming, rng,
                )
            )

        spawn(logger(client.regular_subscribe(), MessageType.REGULAR))
        if client.is_denim():
            spawn(logger(client.deniable_subscribe(), MessageType.DENIM))

        timer = Timer(info.tick_millis / 1000, info.duration_ticks)
        spawn(send(timer.current_tick()))
        while await timer.next():
            spawn(process())
            if timer.do_action(info.reply_rate):
                spawn(reply(timer.current_tick()))
            if timer.do_action(info.send_rate):
                spawn(send(timer.current_tick()))
        stop.set()

        await asyncio.gather(*tasks)