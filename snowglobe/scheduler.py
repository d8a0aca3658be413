"""
Render loop: step the globe once per frame on the asyncio event loop.

Only one loop task is ever alive for a globe. Starting cancels the previous
task, and a scene switch stops the loop, swaps the state in, then restarts it,
so no frame is ever drawn from a half-replaced scene.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, List, Optional

import numpy as np

from .config import DEFAULT_FPS, CustomSceneConfig, SceneId
from .engine import Globe
from .util import log

FrameListener = Callable[[np.ndarray], None]
Sleep = Callable[[float], Awaitable[None]]


class RenderLoop:
    def __init__(
        self,
        globe: Globe,
        fps: float = DEFAULT_FPS,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.perf_counter,
    ):
        if fps <= 0:
            raise ValueError("fps must be > 0")
        self.globe = globe
        self.fps = float(fps)
        self._sleep = sleep
        self._clock = clock
        self._task: Optional[asyncio.Task] = None
        self._listeners: List[FrameListener] = []
        self.error: Optional[BaseException] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    def add_listener(self, fn: FrameListener) -> None:
        self._listeners.append(fn)

    def remove_listener(self, fn: FrameListener) -> None:
        if fn in self._listeners:
            self._listeners.remove(fn)

    def start(self, max_frames: Optional[int] = None) -> asyncio.Task:
        """Cancel any running loop, then schedule a fresh one. Must be called from a running event loop."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self.error = None
        self._task = asyncio.get_running_loop().create_task(self._run(max_frames))
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        if not task.done():
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def wait(self) -> None:
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def switch_scene(
        self,
        scene: "SceneId | str",
        custom: Optional[CustomSceneConfig] = None,
        text: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> None:
        was_running = self.running
        await self.stop()
        self.globe.load_scene(scene, custom=custom, text=text, seed=seed)
        if was_running:
            self.start()

    def _emit(self, frame: np.ndarray) -> None:
        for fn in list(self._listeners):
            try:
                fn(frame)
            except Exception as exc:
                log(f"frame listener failed: {exc!r}")

    async def _run(self, max_frames: Optional[int]) -> None:
        interval = 1.0 / self.fps
        count = 0
        while max_frames is None or count < max_frames:
            t0 = self._clock()
            try:
                frame = self.globe.step()
            except Exception as exc:
                self.error = exc
                log(f"render loop stopped: {exc!r}")
                return
            if frame is not None:
                self._emit(frame)
            count += 1
            elapsed = self._clock() - t0
            await self._sleep(max(0.0, interval - elapsed))
