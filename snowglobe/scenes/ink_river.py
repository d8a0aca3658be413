"""Ink-wash river: layered grey mountains, drifting ink motes, a lone fisherman bobbing in his boat."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import hex_to_bgr
from ..entities import InkMountain, InkParticle, Ripple
from ..geometry import GLOBE_RADIUS, GROUND_Y_OFFSET
from ..surface import LinearGradient, Surface
from .base import SceneState, new_rng, uniform

MOTE_COUNT = 80
MAX_RINGS = 12
RING_P = 0.04
BOAT_X = -30.0
BOAT_Y = GROUND_Y_OFFSET + 30
MOTE_EDGE = GLOBE_RADIUS + 10

PAPER = hex_to_bgr("#f5f1e6")
INK = hex_to_bgr("#1c1917")


@dataclass
class InkRiverState(SceneState):
    mountains: List[InkMountain] = field(default_factory=list)
    motes: List[InkParticle] = field(default_factory=list)
    rings: List[Ripple] = field(default_factory=list)
    boat_bob: float = 0.0

    def ambient(self):
        return {"motes": self.motes}

    def pools(self):
        return {"rings": (self.rings, MAX_RINGS)}


def make_mountains(rng) -> List[InkMountain]:
    layers = []
    # far to near, lighter to darker
    for depth, (shade, base_y, count) in enumerate(((200, -10, 4), (150, 30, 3), (95, 70, 3))):
        for k in range(count):
            w = uniform(rng, 160, 260) - depth * 20
            x = -GLOBE_RADIUS + (k + 0.5) * (2 * GLOBE_RADIUS / count) + (rng.random() - 0.5) * 60
            h = uniform(rng, 110, 190) - depth * 30
            layers.append(InkMountain(x, base_y, w, h, (shade, shade, shade)))
    return layers


def make_motes(rng, count: int = MOTE_COUNT) -> List[InkParticle]:
    R = GLOBE_RADIUS
    return [
        InkParticle(
            x=(rng.random() - 0.5) * R * 2,
            y=(rng.random() - 0.5) * R * 2,
            radius=uniform(rng, 0.8, 2.5),
            speed_x=uniform(rng, 0.1, 0.4),
            speed_y=uniform(rng, -0.15, 0.15),
            opacity=uniform(rng, 0.1, 0.45),
        )
        for _ in range(count)
    ]


def init(seed: Optional[int] = None, config=None, previous=None) -> InkRiverState:
    state = InkRiverState(rng=new_rng(seed))
    state.mountains = make_mountains(state.rng)
    state.motes = make_motes(state.rng)
    state.rings = []
    return state


def update(state: InkRiverState, dt: float = 1.0) -> None:
    rng = state.rng
    R = GLOBE_RADIUS
    for m in state.motes:
        m.x += m.speed_x * dt
        m.y += m.speed_y * dt
        if m.x > MOTE_EDGE:
            m.x = -MOTE_EDGE
            m.y = (rng.random() - 0.5) * R * 2
        if m.y > MOTE_EDGE:
            m.y = -MOTE_EDGE
        elif m.y < -MOTE_EDGE:
            m.y = MOTE_EDGE
    state.boat_bob = math.sin(state.time_ms / 700.0) * 3
    if len(state.rings) < MAX_RINGS and rng.random() < RING_P:
        state.rings.append(Ripple(BOAT_X + uniform(rng, -30, 30), BOAT_Y + 8, 2.0, uniform(rng, 18, 30), 0.6))
    for r in state.rings:
        r.radius += 0.4 * dt
        r.opacity -= 0.01 * dt
    state.rings[:] = [r for r in state.rings if r.opacity > 0 and r.radius < r.max_radius * 2]
    state.advance(dt)


def draw_background(surface: Surface, state: InkRiverState) -> None:
    R = GLOBE_RADIUS
    surface.fill_rect(-R, -R, 2 * R, 2 * R, PAPER)
    surface.fill_circle(120, -150, 26, hex_to_bgr("#b91c1c"), 0.8)


def draw_terrain(surface: Surface, state: InkRiverState) -> None:
    for m in state.mountains:
        wash = LinearGradient(0, m.y - m.height, 0, m.y, [(0.0, m.color, 0.95), (1.0, m.color, 0.15)])
        peak = (m.x + m.width * 0.08, m.y - m.height)
        surface.fill_poly(
            [(m.x - m.width / 2, m.y), (m.x - m.width * 0.15, m.y - m.height * 0.7), peak, (m.x + m.width / 2, m.y)],
            wash,
        )
    R = GLOBE_RADIUS
    water = LinearGradient(0, GROUND_Y_OFFSET, 0, R, [(0.0, PAPER, 1.0), (1.0, (200, 200, 200), 1.0)])
    surface.fill_rect(-R, GROUND_Y_OFFSET, 2 * R, R, water)
    for k in range(6):
        y = GROUND_Y_OFFSET + 20 + k * 25
        surface.line(-R * 0.7 + k * 15, y, R * 0.3 - k * 10, y, INK, 1, 0.15)


def draw_boat(surface: Surface, state: InkRiverState) -> None:
    x, y = BOAT_X, BOAT_Y + state.boat_bob
    surface.fill_poly([(x - 45, y - 4), (x + 45, y - 4), (x + 30, y + 8), (x - 30, y + 8)], INK)
    surface.fill_poly([(x - 8, y - 4), (x + 8, y - 4), (x + 4, y - 26), (x - 4, y - 26)], INK, 0.9)
    surface.fill_poly([(x - 16, y - 26), (x + 16, y - 26), (x, y - 38)], INK)
    surface.line(x + 6, y - 20, x + 70, y - 60, INK, 1)
    surface.line(x + 70, y - 60, x + 72, y + 6, INK, 1, 0.6)


def draw_entities(surface: Surface, state: InkRiverState) -> None:
    for r in state.rings:
        surface.stroke_ellipse(r.x, r.y, r.radius, r.radius * 0.25, INK, 1, r.opacity * 0.5)
    draw_boat(surface, state)


def draw_weather(surface: Surface, state: InkRiverState) -> None:
    for m in state.motes:
        surface.fill_circle(m.x, m.y, m.radius, INK, m.opacity)


def render(surface: Surface, state: InkRiverState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
    draw_weather(surface, state)
