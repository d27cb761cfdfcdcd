"""Tick counter driving a scenario."""

from __future__ import annotations

import asyncio


class Timer:
    """Counts ticks of a fixed length until an end tick is reached."""

    def __init__(self, tick_duration: float, end_tick: int) -> None:
        self.tick_duration = tick_duration
        self.end_tick = end_tick
        self._counter = 0

    async def next(self) -> bool:
        """Advance one tick, wait for it to pass, and report whether more ticks remain."""
        self._counter += 1
        await asyncio.sleep(self.tick_duration)
        return self._counter != self.end_tick

    def do_action(self, rate: int) -> bool:
        """True on every tick that is a multiple of ``rate``."""
        return self._counter % rate == 0

    def current_tick(self) -> int:
        return self._counter