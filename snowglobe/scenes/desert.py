from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import darken, hex_to_bgr
from ..entities import Camel, SandGrain
from ..geometry import GLOBE_RADIUS, GROUND_Y_OFFSET
from ..surface import Pose, Surface
from .base import SceneState, by_depth, draw_sky, new_rng, uniform

CAMEL_COUNT = 4
SAND_COUNT = 60
CAMEL_WRAP = GLOBE_RADIUS + 40

CAMEL_TAN = hex_to_bgr("#b45309")
DUNE = hex_to_bgr("#f59e0b")
DUNE_FAR = hex_to_bgr("#fbbf24")
STONE = hex_to_bgr("#d6a75c")


@dataclass
class DesertState(SceneState):
    camels: List[Camel] = field(default_factory=list)
    sand: List[SandGrain] = field(default_factory=list)

    def ambient(self):
        return {"sand": self.sand}


def make_sand(rng, count: int = SAND_COUNT) -> List[SandGrain]:
    R = GLOBE_RADIUS
    return [
        SandGrain(
            x=(rng.random() - 0.5) * R * 2,
            y=uniform(rng, -40, R - 20),
            speed=uniform(rng, 1.0, 3.0),
            size=uniform(rng, 0.8, 1.8),
            opacity=uniform(rng, 0.2, 0.6),
        )
        for _ in range(count)
    ]


def init(seed: Optional[int] = None, config=None, previous=None) -> DesertState:
    state = DesertState(rng=new_rng(seed))
    rng = state.rng
    state.camels = []
    for i in range(CAMEL_COUNT):
        y = GROUND_Y_OFFSET + uniform(rng, -5, 45)
        state.camels.append(
            Camel(
                x=-GLOBE_RADIUS + i * 130 + rng.random() * 30,
                y=y,
                speed=uniform(rng, 0.3, 0.5),
                scale=0.7 + (y - GROUND_Y_OFFSET) / 100.0,
                gait_offset=rng.random() * math.tau,
            )
        )
    state.sand = make_sand(rng)
    return state


def update(state: DesertState, dt: float = 1.0) -> None:
    R = GLOBE_RADIUS
    rng = state.rng
    for c in state.camels:
        c.x += c.speed * dt
        if c.x > CAMEL_WRAP:
            c.x = -CAMEL_WRAP
    for g in state.sand:
        g.x += g.speed * dt
        g.y += math.sin((g.x + state.time_ms * 0.05) * 0.02) * 0.3 * dt
        if g.x > R:
            g.x = -R
            g.y = uniform(rng, -40, R - 20)
    state.advance(dt)


def draw_camel(surface: Surface, c: Camel, time_ms: float) -> None:
    bob = math.sin(time_ms / 200.0 + c.gait_offset) * 2
    pose = Pose(c.x, c.y - 30 * c.scale + bob, 0.0, c.scale, c.scale)
    color = CAMEL_TAN
    for i, lx in enumerate((-14, -8, 10, 16)):
        swing = math.sin(time_ms / 200.0 + c.gait_offset + i * math.pi / 2) * 4
        a = pose.point(lx, 6)
        b = pose.point(lx + swing, 30)
        surface.line(a[0], a[1], b[0], b[1], darken(color, 0.1), max(1, int(round(3 * c.scale))))
    cx, cy, rx, ry, deg = pose.ellipse(0, 0, 24, 12)
    surface.fill_ellipse(cx, cy, rx, ry, color, angle_deg=deg)
    hx, hy, hrx, hry, hdeg = pose.ellipse(-2, -12, 10, 9)
    surface.fill_ellipse(hx, hy, hrx, hry, color, angle_deg=hdeg)
    surface.fill_poly(pose.points([(18, -4), (26, -24), (32, -22), (24, 2)]), color)
    hx, hy, hrx, hry, hdeg = pose.ellipse(32, -24, 7, 4)
    surface.fill_ellipse(hx, hy, hrx, hry, color, angle_deg=hdeg)
    ex, ey = pose.point(33, -26)
    surface.fill_circle(ex, ey, 1, (0, 0, 0))


def draw_background(surface: Surface, state: DesertState) -> None:
    draw_sky(surface, hex_to_bgr("#fb923c"), hex_to_bgr("#fde68a"))
    surface.glow(-120, -150, 90, hex_to_bgr("#fff7ed"), 0.6)
    surface.fill_circle(-120, -150, 32, hex_to_bgr("#fff7ed"))


def draw_terrain(surface: Surface, state: DesertState) -> None:
    R = GLOBE_RADIUS
    for px, base, w, h in ((70, 60, 190, 150), (-60, 70, 130, 100), (170, 70, 100, 75)):
        apex = (px, base - h)
        surface.fill_poly([(px - w / 2, base), (px + w / 2, base), apex], STONE)
        surface.fill_poly([(px, base), (px + w / 2, base), apex], darken(STONE, 0.25))
    surface.fill_ellipse(-80, GROUND_Y_OFFSET - 20, R, 70, DUNE_FAR)
    surface.fill_ellipse(60, GROUND_Y_OFFSET + 30, R, 80, DUNE)
    surface.fill_rect(-R, GROUND_Y_OFFSET + 30, 2 * R, R, DUNE)


def draw_entities(surface: Surface, state: DesertState) -> None:
    for c in by_depth(state.camels, key=lambda c: c.y):
        draw_camel(surface, c, state.time_ms)


def draw_weather(surface: Surface, state: DesertState) -> None:
    for g in state.sand:
        surface.fill_circle(g.x, g.y, g.size, hex_to_bgr("#fef3c7"), g.opacity)


def render(surface: Surface, state: DesertState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
    draw_weather(surface, state)
