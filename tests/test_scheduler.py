import asyncio

import pytest

from snowglobe.config import SceneId
from snowglobe.scheduler import RenderLoop

from .conftest import no_sleep


def test_rejects_non_positive_fps(make_globe):
    with pytest.raises(ValueError):
        RenderLoop(make_globe(), fps=0)


def test_runs_max_frames_and_notifies_listeners(make_globe):
    globe = make_globe("bamboo")
    frames = []

    async def main():
        loop = RenderLoop(globe, sleep=no_sleep)
        loop.add_listener(lambda f: frames.append(f.shape))
        loop.start(max_frames=5)
        await loop.wait()
        return loop

    loop = asyncio.run(main())
    assert len(frames) == 5
    assert globe.state.tick == 5
    assert not loop.running


def test_start_cancels_previous_task(make_globe):
    globe = make_globe("rain")

    async def main():
        loop = RenderLoop(globe, sleep=no_sleep)
        first = loop.start()
        await asyncio.sleep(0)
        second = loop.start()
        await asyncio.sleep(0)
        assert first.cancelled() or first.done()
        assert loop.task is second
        assert loop.running
        await loop.stop()
        assert not loop.running
        assert second.done()

    asyncio.run(main())


def test_switch_scene_restarts_running_loop(make_globe):
    globe = make_globe("winter")

    async def main():
        loop = RenderLoop(globe, sleep=no_sleep)
        loop.start()
        for _ in range(3):
            await asyncio.sleep(0)
        await loop.switch_scene("jellyfish")
        assert globe.scene_id is SceneId.JELLYFISH
        assert globe.text == "Deep Ocean"
        assert loop.running
        for _ in range(3):
            await asyncio.sleep(0)
        assert globe.state.tick > 0
        await loop.stop()

    asyncio.run(main())


def test_switch_scene_when_stopped_stays_stopped(make_globe):
    globe = make_globe("winter")

    async def main():
        loop = RenderLoop(globe, sleep=no_sleep)
        await loop.switch_scene("egypt")
        assert not loop.running
        assert globe.scene_id is SceneId.EGYPT

    asyncio.run(main())


def test_failing_listener_does_not_stop_loop(make_globe):
    globe = make_globe("fish")

    def bad(frame):
        raise RuntimeError("display gone")

    async def main():
        loop = RenderLoop(globe, sleep=no_sleep)
        loop.add_listener(bad)
        loop.start(max_frames=3)
        await loop.wait()
        return loop

    loop = asyncio.run(main())
    assert loop.error is None
    assert globe.frames == 3


def test_step_error_stops_loop_and_is_recorded(make_globe, monkeypatch):
    globe = make_globe("fish")

    def broken(dt=1.0):
        raise ValueError("bad state")

    monkeypatch.setattr(globe, "step", broken)

    async def main():
        loop = RenderLoop(globe, sleep=no_sleep)
        loop.start()
        await loop.wait()
        return loop

    loop = asyncio.run(main())
    assert isinstance(loop.error, ValueError)
    assert not loop.running
