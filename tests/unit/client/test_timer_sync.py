from __future__ import annotations

import asyncio

import pytest

from debate_room.client.timer import TimerSynchronizer, format_time


def test_ticks_down_and_freezes_at_zero():
    timer = TimerSynchronizer()
    timer.seed(5, True)

    crossings = [timer.tick() for _ in range(8)]

    assert timer.time_left == 0
    assert timer.active is False
    assert crossings.count(True) == 1
    assert crossings.index(True) == 4


def test_never_negative():
    timer = TimerSynchronizer()
    timer.seed(1, True)
    for _ in range(5):
        timer.tick()

    assert timer.time_left == 0
    assert timer.display == "0:00"


def test_reseed_corrects_drift():
    timer = TimerSynchronizer()
    timer.seed(10, True)
    timer.tick()
    timer.tick()

    timer.seed(9, True)

    assert timer.time_left == 9
    assert timer.active is True


def test_inactive_seed_does_not_tick():
    timer = TimerSynchronizer()
    timer.seed(120, False)

    assert timer.tick() is False
    assert timer.time_left == 120


def test_seed_at_zero_reports_no_crossing():
    timer = TimerSynchronizer()
    timer.seed(0, True)

    assert timer.active is False
    assert timer.tick() is False


def test_format_time():
    assert format_time(125) == "2:05"
    assert format_time(-3) == "0:00"


@pytest.mark.asyncio
async def test_run_reports_zero_once():
    timer = TimerSynchronizer()
    timer.seed(2, True)
    hits: list[int] = []

    task = asyncio.create_task(timer.run(lambda: hits.append(timer.time_left), interval=0))
    for _ in range(20):
        await asyncio.sleep(0)
    task.cancel()

    assert hits == [0]
