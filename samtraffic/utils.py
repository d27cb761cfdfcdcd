"""Friend selection and random payload helpers."""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Mapping
from typing import TypeVar

from samtraffic.data import AccountId, Friend

_log = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


def normal_friends(friends: Mapping[str, Friend]) -> dict[str, Friend]:
    """Friends reached only over the regular channel."""
    return {name: f for name, f in friends.items() if not f.denim}


def denim_friends(friends: Mapping[str, Friend]) -> dict[str, Friend]:
    """Friends that can also be reached over the deniable channel."""
    return {name: f for name, f in friends.items() if f.denim}


def usernames(account_ids: Mapping[str, AccountId]) -> dict[AccountId, str]:
    """Invert a username to account-id map."""
    return {account_id: name for name, account_id in account_ids.items()}


def _valid_weights(weights: list[float]) -> str | None:
    if not weights:
        return "no items to choose from"
    if any(not math.isfinite(w) or w < 0 for w in weights):
        return "a weight is invalid"
    if sum(weights) <= 0:
        return "all weights are zero"
    return None


def weighted_choice(items: list[V], weights: list[float], rng: random.Random) -> V | None:
    """Pick one item in proportion to its weight, or None if the weights are unusable."""
    problem = _valid_weights(weights)
    if problem is not None:
        _log.error(problem)
        return None
    return rng.choices(items, weights=weights)[0]


def get_friend(friends: Mapping[str, Friend], rng: random.Random) -> Friend | None:
    """Pick a friend weighted by how often they are talked to."""
    values = list(friends.values())
    return weighted_choice(values, [f.frequency for f in values], rng)


def random_bytes(minimum: int, maximum: int, rng: random.Random) -> bytes:
    """Random bytes whose length lies in ``[minimum, maximum]``."""
    if minimum > maximum:
        raise ValueError(f"empty size range {minimum}..={maximum}")
    return rng.randbytes(rng.randint(minimum, maximum))


def sample_prob(prob: float, rng: random.Random) -> bool:
    """True with probability ``prob``, clamped to [0, 1]."""
    if math.isnan(prob):
        return False
    return rng.random() < min(max(prob, 0.0), 1.0)