"""Records exchanged with the dispatcher and the server's health endpoint."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

AccountId = str

_U32_MAX = 2**32 - 1


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be an object")
    return data


def _get(data: Mapping[str, Any], key: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    return data[key]


def _str(data: Mapping[str, Any], key: str) -> str:
    value = _get(data, key)
    if not isinstance(value, str):
        raise ValueError(f"field `{key}` must be a string")
    return value


def _opt_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"field `{key}` must be a string or null")
    return value


def _uint_value(value: Any, key: str, limit: int | None) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"field `{key}` must be a non-negative integer")
    if limit is not None and value > limit:
        raise ValueError(f"field `{key}` is out of range")
    return value


def _uint(data: Mapping[str, Any], key: str, limit: int | None = _U32_MAX) -> int:
    return _uint_value(_get(data, key), key, limit)


def _float(data: Mapping[str, Any], key: str) -> float:
    value = _get(data, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field `{key}` must be a number")
    return float(value)


def _bool(data: Mapping[str, Any], key: str) -> bool:
    value = _get(data, key)
    if not isinstance(value, bool):
        raise ValueError(f"field `{key}` must be a boolean")
    return value


def _enum_text(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("enum value must be a string")
    return value


@dataclass(frozen=True)
class Friend:
    """A contact and how often the client talks to them."""

    username: str
    frequency: float
    denim: bool

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Friend:
        data = _mapping(data, "friend")
        return cls(
            username=_str(data, "username"),
            frequency=_float(data, "frequency"),
            denim=_bool(data, "denim"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"username": self.username, "frequency": self.frequency, "denim": self.denim}


class ClientType(Enum):
    DENIM = "denim"
    SAM = "sam"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> ClientType:
        """Map a wire name to a client type; unknown names become OTHER."""
        text = _enum_text(value)
        try:
            return cls(text)
        except ValueError:
            return cls.OTHER


class MessageType(Enum):
    DENIM = "denim"
    REGULAR = "regular"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> MessageType:
        """Map a wire name to a message type; unknown names become OTHER."""
        text = _enum_text(value)
        try:
            return cls(text)
        except ValueError:
            return cls.OTHER


@dataclass
class ClientInfo:
    """The scenario parameters the dispatcher assigns to a client."""

    client_type: ClientType
    username: str
    message_size_range: tuple[int, int]
    send_rate: int
    reply_rate: int
    tick_millis: int
    duration_ticks: int
    denim_probability: float
    reply_probability: float
    stale_reply: int
    friends: dict[str, Friend]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ClientInfo:
        data = _mapping(data, "client info")
        size_range = _get(data, "messageSizeRange")
        if not isinstance(size_range, (list, tuple)) or len(size_range) != 2:
            raise ValueError("field `messageSizeRange` must be a pair")
        low, high = (_uint_value(v, "messageSizeRange", _U32_MAX) for v in size_range)
        friends = _mapping(_get(data, "friends"), "friends")
        return cls(
            client_type=ClientType.parse(_get(data, "clientType")),
            username=_str(data, "username"),
            message_size_range=(low, high),
            send_rate=_uint(data, "sendRate"),
            reply_rate=_uint(data, "replyRate"),
            tick_millis=_uint(data, "tickMillis"),
            duration_ticks=_uint(data, "durationTicks"),
            denim_probability=_float(data, "denimProbability"),
            reply_probability=_float(data, "replyProbability"),
            stale_reply=_uint(data, "staleReply"),
            friends={name: Friend.from_dict(f) for name, f in friends.items()},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "clientType": self.client_type.value,
            "username": self.username,
            "messageSizeRange": list(self.message_size_range),
            "sendRate": self.send_rate,
            "replyRate": self.reply_rate,
            "tickMillis": self.tick_millis,
            "durationTicks": self.duration_ticks,
            "denimProbability": self.denim_probability,
            "replyProbability": self.reply_probability,
            "staleReply": self.stale_reply,
            "friends": {name: f.to_dict() for name, f in self.friends.items()},
        }


@dataclass
class MessageLog:
    """One sent or received message in a client's report."""

    message_type: MessageType
    sender: str
    recipient: str
    size: int
    tick: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MessageLog:
        data = _mapping(data, "message log")
        return cls(
            message_type=MessageType.parse(_get(data, "type")),
            sender=_str(data, "from"),
            recipient=_str(data, "to"),
            size=_uint(data, "size", None),
            tick=_uint(data, "tick"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.message_type.value,
            "from": self.sender,
            "to": self.recipient,
            "size": self.size,
            "tick": self.tick,
        }


@dataclass
class ClientReport:
    """The results a client uploads once its scenario is over."""

    start_time: int
    messages: list[MessageLog]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ClientReport:
        data = _mapping(data, "client report")
        messages = _get(data, "messages")
        if not isinstance(messages, list):
            raise ValueError("field `messages` must be a list")
        return cls(
            start_time=_uint(data, "startTime", None),
            messages=[MessageLog.from_dict(m) for m in messages],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "startTime": self.start_time,
            "messages": [m.to_dict() for m in self.messages],
        }


@dataclass
class StartInfo:
    """Account ids of the client's friends, handed out when all clients are ready."""

    friends: dict[str, AccountId]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StartInfo:
        data = _mapping(data, "start info")
        friends = _mapping(_get(data, "friends"), "friends")
        result: dict[str, AccountId] = {}
        for name, account_id in friends.items():
            if not isinstance(account_id, str):
                raise ValueError(f"account id of `{name}` must be a string")
            result[name] = account_id
        return cls(friends=result)

    def to_dict(self) -> dict[str, Any]:
        return {"friends": dict(self.friends)}


@dataclass
class AccountInfo:
    """The account id a client registered with."""

    account_id: AccountId

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AccountInfo:
        data = _mapping(data, "account info")
        return cls(account_id=_str(data, "accountId"))

    def to_dict(self) -> dict[str, Any]:
        return {"accountId": self.account_id}


@dataclass
class HealthCheck:
    """Status strings reported by the server's health endpoint."""

    sam: str
    database: str
    denim: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> HealthCheck:
        data = _mapping(data, "health check")
        return cls(
            sam=_str(data, "sam"),
            database=_str(data, "database"),
            denim=_opt_str(data, "denim"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"sam": self.sam, "denim": self.denim, "database": self.database}

    def is_ok(self) -> bool:
        """True when every reported service says OK; a missing proxy status counts as OK."""
        services_ok = self.sam == "OK" and self.database == "OK"
        return services_ok and (self.denim is None or self.denim == "OK")


@dataclass
class DispatchData:
    """Everything the dispatcher told a client before its scenario starts."""

    client: ClientInfo
    start: StartInfo