import pytest

from samtraffic.timer import Timer


def test_starts_at_zero():
    assert Timer(0, 5).current_tick() == 0


@pytest.mark.asyncio
async def test_next_stops_at_end_tick():
    timer = Timer(0, 3)
    results = [await timer.next() for _ in range(3)]
    assert results == [True, True, False]
    assert timer.current_tick() == timer.end_tick


@pytest.mark.asyncio
async def test_do_action_on_multiples():
    timer = Timer(0, 100)
    actions = []
    for _ in range(6):
        await timer.next()
        actions.append(timer.do_action(3))
    assert actions == [False, False, True, False, False, True]


def test_do_action_at_tick_zero_is_true():
    assert Timer(0, 10).do_action(7) is True


def test_zero_rate_raises():
    with pytest.raises(ZeroDivisionError):
        Timer(0, 10).do_action(0)