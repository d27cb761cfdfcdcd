import random

import pytest

from samtraffic.data import Friend
from samtraffic.utils import (
    denim_friends,
    get_friend,
    normal_friends,
    random_bytes,
    sample_prob,
    usernames,
)

FRIENDS = {
    "bob": Friend("bob", 1.0, False),
    "carol": Friend("carol", 2.0, True),
    "dave": Friend("dave", 3.0, False),
}


def test_friends_partition():
    normal = normal_friends(FRIENDS)
    denim = denim_friends(FRIENDS)
    assert set(normal) == {"bob", "dave"}
    assert set(denim) == {"carol"}
    assert {**normal, **denim} == FRIENDS


def test_usernames_inverts_mapping():
    ids = {"bob": "id-bob", "carol": "id-carol"}
    inverted = usernames(ids)
    assert inverted == {"id-bob": "bob", "id-carol": "carol"}
    assert usernames(inverted) == ids


def test_get_friend_returns_member():
    rng = random.Random(1)
    for _ in range(50):
        assert get_friend(FRIENDS, rng) in FRIENDS.values()


def test_get_friend_respects_zero_weight():
    friends = {"bob": Friend("bob", 0.0, False), "eve": Friend("eve", 1.0, False)}
    rng = random.Random(2)
    picks = {get_friend(friends, rng).username for _ in range(50)}
    assert picks == {"eve"}


@pytest.mark.parametrize(
    "friends",
    [
        {},
        {"bob": Friend("bob", 0.0, False)},
        {"bob": Friend("bob", -1.0, False), "eve": Friend("eve", 2.0, False)},
        {"bob": Friend("bob", float("nan"), False)},
    ],
)
def test_get_friend_invalid_weights(friends):
    assert get_friend(friends, random.Random(0)) is None


def test_random_bytes_length_in_range():
    rng = random.Random(3)
    for _ in range(100):
        data = random_bytes(5, 9, rng)
        assert 5 <= len(data) <= 9


def test_random_bytes_exact_length():
    assert len(random_bytes(7, 7, random.Random(0))) == 7
    assert random_bytes(0, 0, random.Random(0)) == b""


def test_random_bytes_empty_range():
    with pytest.raises(ValueError):
        random_bytes(10, 2, random.Random(0))


def test_sample_prob_bounds():
    rng = random.Random(4)
    assert not any(sample_prob(0.0, rng) for _ in range(100))
    assert all(sample_prob(1.0, rng) for _ in range(100))
    assert all(sample_prob(5.0, rng) for _ in range(100))
    assert not any(sample_prob(-2.0, rng) for _ in range(100))
    assert sample_prob(float("nan"), rng) is False