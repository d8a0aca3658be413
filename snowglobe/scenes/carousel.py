from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import hex_to_bgr
from ..entities import CarouselHorse, CarouselLight
from ..geometry import GLOBE_RADIUS
from ..surface import Pose, RadialGradient, Surface
from .base import SceneState, new_rng

HORSE_COUNT = 8
LIGHT_COUNT = 16
SPIN_RATE = 0.01
TOGGLE_P = 0.1
BOB_AMPLITUDE = 10.0

BASE_Y = 100.0
DECK_W = 180.0
DECK_H = 40.0

HORSE_COLORS = [hex_to_bgr(c) for c in ("#fca5a5", "#93c5fd", "#86efac", "#fde047")]
RIDER_COLORS = [hex_to_bgr(c) for c in ("#1d4ed8", "#be123c", "#15803d", "#7e22ce")]
LIGHT_ON = hex_to_bgr("#fef08a")
LIGHT_OFF = hex_to_bgr("#713f12")
GOLD_POLE = hex_to_bgr("#fbbf24")


@dataclass
class CarouselState(SceneState):
    horses: List[CarouselHorse] = field(default_factory=list)
    lights: List[CarouselLight] = field(default_factory=list)
    rotation: float = 0.0


def display_angle(state: CarouselState, h: CarouselHorse) -> float:
    return (h.angle + state.rotation) % math.tau


def init(seed: Optional[int] = None, config=None, previous=None) -> CarouselState:
    state = CarouselState(rng=new_rng(seed))
    state.horses = [
        CarouselHorse(
            angle=i / HORSE_COUNT * math.tau,
            color=HORSE_COLORS[i % len(HORSE_COLORS)],
            rider_color=RIDER_COLORS[i % len(RIDER_COLORS)] if i % 2 == 0 else None,
        )
        for i in range(HORSE_COUNT)
    ]
    state.lights = [
        CarouselLight(angle=i / LIGHT_COUNT * math.tau, color=LIGHT_ON, is_on=i % 2 == 0)
        for i in range(LIGHT_COUNT)
    ]
    state.rotation = 0.0
    return state


def update(state: CarouselState, dt: float = 1.0) -> None:
    state.rotation = (state.rotation + SPIN_RATE * dt) % math.tau
    for i, h in enumerate(state.horses):
        h.y_offset = math.sin(state.time_ms / 300.0 + i) * BOB_AMPLITUDE
    if state.rng.random() < TOGGLE_P:
        for light in state.lights:
            light.is_on = not light.is_on
    state.advance(dt)


def draw_horse(surface: Surface, h: CarouselHorse, angle: float) -> None:
    rad = DECK_W - 20
    hx = math.cos(angle) * rad
    hy = BASE_Y + math.sin(angle) * (DECK_H - 10) - 20 + h.y_offset
    scale = 0.8 + (math.sin(angle) + 1) * 0.2
    pose = Pose(hx, hy, 0.0, scale, scale)

    px, py = pose.point(-2, -60)
    surface.fill_rect(px, py, 4 * scale, 100 * scale, (212, 212, 212))
    cx, cy, rx, ry, deg = pose.ellipse(0, 0, 20, 10)
    surface.fill_ellipse(cx, cy, rx, ry, h.color, angle_deg=deg)
    cx, cy, rx, ry, deg = pose.ellipse(15, -10, 8, 5, math.degrees(-0.5))
    surface.fill_ellipse(cx, cy, rx, ry, h.color, angle_deg=deg)
    t = max(1, int(round(2 * scale)))
    for (x0, y0), (x1, y1) in (((-10, 5), (-15, 15)), ((10, 5), (15, 15))):
        a = pose.point(x0, y0)
        b = pose.point(x1, y1)
        surface.line(a[0], a[1], b[0], b[1], h.color, t)
    if h.rider_color is not None:
        body = pose.points([(-5, -8), (5, -8), (4, -24), (-4, -24)])
        surface.fill_poly(body, h.rider_color)
        hx2, hy2 = pose.point(0, -29)
        surface.fill_circle(hx2, hy2, 5 * scale, hex_to_bgr("#ffedd5"))


def draw_background(surface: Surface, state: CarouselState) -> None:
    grad = RadialGradient(0, 0, 50, GLOBE_RADIUS, [(0.0, hex_to_bgr("#4c1d95"), 1.0), (1.0, hex_to_bgr("#2e1065"), 1.0)])
    surface.fill_circle(0, 0, GLOBE_RADIUS, grad)


def draw_terrain(surface: Surface, state: CarouselState) -> None:
    surface.fill_ellipse(0, BASE_Y, DECK_W, DECK_H, hex_to_bgr("#7c2d12"))
    surface.fill_rect(-10, BASE_Y - 180, 20, 180, GOLD_POLE)


def draw_entities(surface: Surface, state: CarouselState) -> None:
    ordered = sorted(((display_angle(state, h), h) for h in state.horses), key=lambda ah: math.sin(ah[0]))
    for angle, h in ordered:
        draw_horse(surface, h, angle)


def draw_weather(surface: Surface, state: CarouselState) -> None:
    surface.fill_poly(
        [(-DECK_W - 10, BASE_Y - 160), (DECK_W + 10, BASE_Y - 160), (0, BASE_Y - 280)],
        hex_to_bgr("#be185d"),
    )
    for light in state.lights:
        lx = math.cos(light.angle) * (DECK_W + 5)
        ly = BASE_Y - 160 + math.sin(light.angle) * 10
        if light.is_on:
            surface.glow(lx, ly, 12, (255, 255, 255), 0.5)
        surface.fill_circle(lx, ly, 4, light.color if light.is_on else LIGHT_OFF)


def render(surface: Surface, state: CarouselState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
    draw_weather(surface, state)
