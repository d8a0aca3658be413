"""
The globe: one active scene, its simulation state, and the surface it is
painted on.

Frame order is fixed: update the state once, clear the surface, clip to the
disc, let the scene paint background, terrain, depth-sorted entities and
weather, release the clip, then draw the glass chrome over everything.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from .chrome import draw_chrome
from .colors import GOLD, WOOD
from .config import CANVAS_PADDING, CustomSceneConfig, SceneId, clip_engraving, default_text_for
from .geometry import GLOBE_RADIUS
from .scenes import SceneDef, get_scene
from .scenes.base import SceneState
from .surface import Surface
from .util import log


def default_canvas_size() -> int:
    return int(GLOBE_RADIUS * 2 + CANVAS_PADDING)


class Globe:
    def __init__(
        self,
        scene: "SceneId | str" = SceneId.WINTER,
        text: Optional[str] = None,
        custom: Optional[CustomSceneConfig] = None,
        seed: Optional[int] = None,
        surface: Optional[Surface] = None,
        size: Optional[int] = None,
    ):
        if surface is None:
            side = size or default_canvas_size()
            surface = Surface(side, side)
        self.surface: Optional[Surface] = surface
        self.custom = custom or CustomSceneConfig()
        self.seed = seed
        self._text: Optional[str] = None
        self.scene_id: SceneId = SceneId.parse(scene)
        self.scene: SceneDef = get_scene(self.scene_id)
        self.state: SceneState = self.scene.init(seed=seed, config=self.custom, previous=None)
        self.text = text if text is not None else default_text_for(self.scene_id)
        self.frames = 0

    # ---------------- text ----------------

    @property
    def text(self) -> str:
        return self._text or ""

    @text.setter
    def text(self, value: str) -> None:
        self._text = clip_engraving(value)

    # ---------------- scene lifecycle ----------------

    def build_state(self, scene_id: SceneId, custom: Optional[CustomSceneConfig] = None, seed: Any = None) -> SceneState:
        """Build a complete state for `scene_id` without touching the live one."""
        scene = get_scene(scene_id)
        previous = self.state if scene_id == SceneId.CUSTOM and self.scene_id == SceneId.CUSTOM else None
        return scene.init(seed=seed, config=custom or self.custom, previous=previous)

    def load_scene(
        self,
        scene: "SceneId | str",
        custom: Optional[CustomSceneConfig] = None,
        text: Optional[str] = None,
        seed: Any = None,
    ) -> SceneState:
        sid = SceneId.parse(scene)
        state = self.build_state(sid, custom, seed)
        # swap in one step: the loop sees either the old scene or the new one
        self.scene, self.scene_id, self.state = get_scene(sid), sid, state
        if custom is not None:
            self.custom = custom
        self.text = text if text is not None else default_text_for(sid)
        log(f"scene={sid.value} text={self.text!r}")
        return state

    def detach(self) -> None:
        self.surface = None

    def attach(self, surface: Surface) -> None:
        self.surface = surface

    # ---------------- per-frame ----------------

    def update(self, dt: float = 1.0) -> None:
        if self.surface is None:
            return
        self.scene.update(self.state, dt)

    def render_frame(self) -> Optional[np.ndarray]:
        surface = self.surface
        if surface is None:
            return None
        cx, cy = surface.center
        surface.clear()
        with surface.translated(cx, cy):
            surface.push_clip_circle(0, 0, GLOBE_RADIUS)
            try:
                self.scene.render(surface, self.state)
            finally:
                surface.pop_clip()
            base, ink = self.chrome_colors()
            draw_chrome(surface, self.text, base, ink)
        self.frames += 1
        return surface.frame

    def step(self, dt: float = 1.0) -> Optional[np.ndarray]:
        """One tick: update then render. No-op without a surface."""
        if self.surface is None:
            return None
        self.update(dt)
        return self.render_frame()

    def chrome_colors(self):
        if self.scene_id == SceneId.CUSTOM:
            return self.custom.base_bgr, self.custom.text_bgr
        return WOOD, GOLD

    def advance(self, ticks: int, dt: float = 1.0) -> None:
        """Run the simulation forward without rendering."""
        for _ in range(max(0, int(ticks))):
            self.update(dt)
