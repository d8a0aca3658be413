from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import hex_to_bgr
from ..entities import Petal
from ..geometry import GLOBE_RADIUS
from ..surface import Pose, Surface
from .base import SceneState, draw_sky, new_rng

PETAL_COUNT = 150
SWING_LEN = 100.0
SWING_AMPLITUDE = 0.4
DRIFT_EDGE = GLOBE_RADIUS + 20

PETAL_PINK = hex_to_bgr("#fce7f3")
BLOSSOM = hex_to_bgr("#fbcfe8")
BARK = hex_to_bgr("#573318")
ROPE = hex_to_bgr("#3f2212")
SKIN = hex_to_bgr("#ffe4c4")


@dataclass
class SakuraState(SceneState):
    petals: List[Petal] = field(default_factory=list)
    swing_angle: float = 0.0

    def ambient(self):
        return {"petals": self.petals}


def make_petals(rng: random.Random, count: int = PETAL_COUNT) -> List[Petal]:
    R = GLOBE_RADIUS
    return [
        Petal(
            x=(rng.random() - 0.5) * R * 2,
            y=(rng.random() - 0.5) * R * 2,
            size=rng.random() * 3 + 2,
            speed_x=rng.random() * 1 - 0.5,
            speed_y=rng.random() * 1 + 0.5,
            angle=rng.random() * math.pi,
            spin_speed=(rng.random() - 0.5) * 0.1,
        )
        for _ in range(count)
    ]


def update_petals(rng: random.Random, petals: List[Petal], time_ms: float, dt: float = 1.0) -> None:
    R = GLOBE_RADIUS
    gust = math.sin(time_ms / 500.0) * 0.5
    for p in petals:
        p.x += (p.speed_x + gust) * dt
        p.y += p.speed_y * dt
        p.angle += p.spin_speed * dt
        if p.y > R:
            p.y = -R
            p.x = (rng.random() - 0.5) * R * 2
        if p.x > DRIFT_EDGE:
            p.x = -DRIFT_EDGE
        elif p.x < -DRIFT_EDGE:
            p.x = DRIFT_EDGE


def draw_petals(surface: Surface, petals: List[Petal]) -> None:
    for p in petals:
        cx, cy, rx, ry, deg = Pose(p.x, p.y, p.angle).ellipse(0, 0, p.size, p.size * 0.6)
        surface.fill_ellipse(cx, cy, rx, ry, PETAL_PINK, angle_deg=deg)


def init(seed: Optional[int] = None, config=None, previous=None) -> SakuraState:
    state = SakuraState(rng=new_rng(seed))
    state.petals = make_petals(state.rng)
    state.swing_angle = 0.0
    return state


def update(state: SakuraState, dt: float = 1.0) -> None:
    state.swing_angle = math.sin(state.time_ms / 1000.0) * SWING_AMPLITUDE
    update_petals(state.rng, state.petals, state.time_ms, dt)
    state.advance(dt)


def draw_background(surface: Surface, state: SakuraState) -> None:
    draw_sky(surface, hex_to_bgr("#a5f3fc"), hex_to_bgr("#67e8f9"))


def draw_terrain(surface: Surface, state: SakuraState) -> None:
    R = GLOBE_RADIUS
    surface.fill_circle(0, R + 200, R + 150, hex_to_bgr("#bef264"))
    bx, by = 0.0, 120.0
    trunk = [
        (bx - 20, by),
        (bx - 12, by - 60),
        (bx - 15, by - 120),
        (bx - 30, by - 180),
        (bx + 30, by - 180),
        (bx + 15, by - 120),
        (bx + 12, by - 60),
        (bx + 20, by),
    ]
    surface.fill_poly(trunk, BARK)
    for ox, oy, r in ((0, -200, 60), (-50, -180, 50), (50, -180, 50), (-30, -240, 40), (30, -240, 40)):
        surface.fill_circle(bx + ox, by + oy, r, BLOSSOM)


def draw_entities(surface: Surface, state: SakuraState) -> None:
    branch_x, branch_y = 40.0, -60.0
    a = state.swing_angle
    seat_x = branch_x + math.sin(a) * SWING_LEN
    seat_y = branch_y + math.cos(a) * SWING_LEN
    surface.line(branch_x, branch_y, seat_x, seat_y, ROPE, 1)
    surface.line(branch_x + 10, branch_y, seat_x + 10, seat_y, ROPE, 1)
    surface.line(seat_x - 5, seat_y, seat_x + 15, seat_y, ROPE, 3)
    surface.fill_rect(seat_x, seat_y - 12, 4, 12, hex_to_bgr("#1e3a8a"))
    surface.fill_rect(seat_x + 6, seat_y - 12, 4, 12, hex_to_bgr("#be123c"))
    surface.fill_circle(seat_x + 2, seat_y - 16, 3, SKIN)
    surface.fill_circle(seat_x + 8, seat_y - 16, 3, SKIN)


def draw_weather(surface: Surface, state: SakuraState) -> None:
    draw_petals(surface, state.petals)


def render(surface: Surface, state: SakuraState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
    draw_weather(surface, state)
