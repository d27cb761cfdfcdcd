"""Configuration for a traffic-generating test client."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from os import PathLike
from typing import Any


def _required(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, kind) or (kind is not bool and isinstance(value, bool)):
        raise ValueError(f"field `{key}` must be of type {kind.__name__}")
    return value


def _optional(data: Mapping[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, kind) or isinstance(value, bool):
        raise ValueError(f"field `{key}` must be of type {kind.__name__} or null")
    return value


@dataclass
class DenimClientConfig:
    """Where the client connects and how it stores its state."""

    address: str
    dispatch_address: str
    inmemory: bool
    certificate_path: str | None = None
    channel_buffer_size: int | None = None
    logging: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DenimClientConfig:
        if not isinstance(data, Mapping):
            raise ValueError("configuration must be a JSON object")
        buffer_size = _optional(data, "channelBufferSize", int)
        if buffer_size is not None and buffer_size < 0:
            raise ValueError("field `channelBufferSize` must not be negative")
        return cls(
            address=_required(data, "address", str),
            dispatch_address=_required(data, "dispatchAddress", str),
            inmemory=_required(data, "inmemory", bool),
            certificate_path=_optional(data, "certificatePath", str),
            channel_buffer_size=buffer_size,
            logging=_optional(data, "logging", str),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "dispatchAddress": self.dispatch_address,
            "certificatePath": self.certificate_path,
            "channelBufferSize": self.channel_buffer_size,
            "inmemory": self.inmemory,
            "logging": self.logging,
        }


def load_config(path: str | PathLike[str]) -> DenimClientConfig:
    """Read a client configuration from a JSON file."""
    with open(path, encoding="utf-8") as handle:
        return DenimClientConfig.from_dict(json.load(handle))