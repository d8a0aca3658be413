from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import hex_to_bgr, lighten
from ..entities import ChristmasLight, Gift, Snowflake
from ..geometry import GLOBE_RADIUS, GROUND_Y_OFFSET
from ..surface import Surface
from . import winter
from .base import SceneState, by_depth, draw_sky, new_rng, uniform

LIGHT_COUNT = 40
GIFT_COUNT = 5
SNOW_COUNT = 120

TREE_BASE_Y = GROUND_Y_OFFSET + 10
TREE_HEIGHT = 230.0
TREE_HALF_W = 95.0
TIERS = 3

LIGHT_COLORS = [hex_to_bgr(c) for c in ("#ef4444", "#facc15", "#3b82f6", "#22c55e", "#f472b6")]
GIFT_COLORS = [hex_to_bgr(c) for c in ("#dc2626", "#2563eb", "#16a34a", "#9333ea", "#f59e0b")]
RIBBONS = [hex_to_bgr(c) for c in ("#fde047", "#f8fafc", "#fca5a5")]
PINE = hex_to_bgr("#14532d")
PINE_LIGHT = hex_to_bgr("#166534")
STAR_GOLD = hex_to_bgr("#fde047")


@dataclass
class ChristmasState(SceneState):
    lights: List[ChristmasLight] = field(default_factory=list)
    gifts: List[Gift] = field(default_factory=list)
    snow: List[Snowflake] = field(default_factory=list)
    star_phase: float = 0.0

    def ambient(self):
        return {"snow": self.snow}


def tree_half_width(y: float, base_y: float = TREE_BASE_Y, height: float = TREE_HEIGHT) -> float:
    """Half-width of the tree silhouette at height y."""
    t = (base_y - y) / height
    return max(0.0, (1.0 - t)) * TREE_HALF_W


def make_lights(rng: random.Random, count: int = LIGHT_COUNT, cx: float = 0.0) -> List[ChristmasLight]:
    lights = []
    for i in range(count):
        y = TREE_BASE_Y - 15 - rng.random() * (TREE_HEIGHT - 40)
        half = tree_half_width(y) * 0.85
        lights.append(
            ChristmasLight(
                x=cx + (rng.random() - 0.5) * 2 * half,
                y=y,
                color=LIGHT_COLORS[i % len(LIGHT_COLORS)],
                phase=rng.random() * math.tau,
                speed=uniform(rng, 0.03, 0.12),
            )
        )
    return lights


def make_gifts(rng: random.Random, count: int = GIFT_COUNT) -> List[Gift]:
    gifts = []
    for i in range(count):
        w = uniform(rng, 18, 32)
        h = uniform(rng, 14, 26)
        x = (i - (count - 1) / 2) * 42 + (rng.random() - 0.5) * 10
        y = TREE_BASE_Y + 8 + rng.random() * 20
        gifts.append(Gift(x, y, w, h, GIFT_COLORS[i % len(GIFT_COLORS)], RIBBONS[i % len(RIBBONS)]))
    return gifts


def update_lights(lights: List[ChristmasLight], dt: float = 1.0) -> None:
    for light in lights:
        light.phase = (light.phase + light.speed * dt) % math.tau


def brightness(light: ChristmasLight) -> float:
    return 0.5 + 0.5 * math.sin(light.phase)


def draw_christmas_tree(surface: Surface, lights: List[ChristmasLight], star_phase: float, cx: float = 0.0) -> None:
    base = TREE_BASE_Y
    surface.fill_rect(cx - 10, base - 10, 20, 25, hex_to_bgr("#451a03"))
    tier_h = TREE_HEIGHT / TIERS
    for i in range(TIERS):
        bottom = base - i * tier_h * 0.8
        top = bottom - tier_h * 1.4
        half = tree_half_width(bottom) + 8
        surface.fill_poly([(cx - half, bottom), (cx + half, bottom), (cx, top)], PINE)
        surface.fill_poly([(cx, top), (cx + half, bottom), (cx + half * 0.35, bottom)], PINE_LIGHT, 0.6)
    for light in lights:
        b = brightness(light)
        surface.glow(light.x, light.y, 7, light.color, 0.5 * b)
        surface.fill_circle(light.x, light.y, 2.5, lighten(light.color, 0.3 * b), 0.4 + 0.6 * b)
    top_y = base - TREE_HEIGHT - 10
    twinkle = 0.7 + 0.3 * math.sin(star_phase)
    surface.glow(cx, top_y, 26, STAR_GOLD, 0.5 * twinkle)
    pts = []
    for k in range(10):
        r = 12 if k % 2 == 0 else 5
        a = -math.pi / 2 + k * math.pi / 5
        pts.append((cx + math.cos(a) * r, top_y + math.sin(a) * r))
    surface.fill_poly(pts, STAR_GOLD)


def draw_gift(surface: Surface, g: Gift) -> None:
    x0, y0 = g.x - g.width / 2, g.y - g.height
    surface.fill_rect(x0, y0, g.width, g.height, g.color)
    surface.fill_rect(g.x - 2, y0, 4, g.height, g.ribbon_color)
    surface.fill_rect(x0, y0 + g.height / 2 - 2, g.width, 4, g.ribbon_color)
    surface.fill_ellipse(g.x - 4, y0 - 2, 4, 3, g.ribbon_color)
    surface.fill_ellipse(g.x + 4, y0 - 2, 4, 3, g.ribbon_color)


def init(seed: Optional[int] = None, config=None, previous=None) -> ChristmasState:
    state = ChristmasState(rng=new_rng(seed))
    state.lights = make_lights(state.rng)
    state.gifts = make_gifts(state.rng)
    state.snow = winter.make_snow(state.rng, SNOW_COUNT)
    return state


def update(state: ChristmasState, dt: float = 1.0) -> None:
    update_lights(state.lights, dt)
    state.star_phase = (state.star_phase + 0.05 * dt) % math.tau
    winter.update_snow(state.rng, state.snow, dt)
    state.advance(dt)


def draw_background(surface: Surface, state: ChristmasState) -> None:
    draw_sky(surface, hex_to_bgr("#0b1026"), hex_to_bgr("#1e3a5f"))


def draw_terrain(surface: Surface, state: ChristmasState) -> None:
    R = GLOBE_RADIUS
    surface.fill_ellipse(0, GROUND_Y_OFFSET + 20, R - 20, R * 0.35, hex_to_bgr("#f1f5f9"))


def draw_entities(surface: Surface, state: ChristmasState) -> None:
    draw_christmas_tree(surface, state.lights, state.star_phase)
    for g in by_depth(state.gifts, key=lambda g: g.y):
        draw_gift(surface, g)


def draw_weather(surface: Surface, state: ChristmasState) -> None:
    winter.draw_snow(surface, state.snow)


def render(surface: Surface, state: ChristmasState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
    draw_weather(surface, state)
