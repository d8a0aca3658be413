from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import hex_to_bgr
from ..entities import Plant, PlantKind, RainDrop, Ripple
from ..geometry import GLOBE_RADIUS, GROUND_Y_OFFSET, random_pos_in_globe
from ..surface import Surface
from .base import SceneState, by_depth, draw_sky, new_rng

RAIN_COUNT = 400
TREE_COUNT = 3
FLOWER_COUNT = 6
MAX_RIPPLES = 300

TREE_GREEN = hex_to_bgr("#166534")
TRUNK = hex_to_bgr("#451a03")
FLOWER_COLORS = [hex_to_bgr(c) for c in ("#f472b6", "#a78bfa", "#fbbf24")]
STREAK = (255, 230, 200)


@dataclass
class RainState(SceneState):
    drops: List[RainDrop] = field(default_factory=list)
    ripples: List[Ripple] = field(default_factory=list)
    plants: List[Plant] = field(default_factory=list)

    def ambient(self):
        return {"rain": self.drops}

    def pools(self):
        return {"ripples": (self.ripples, MAX_RIPPLES)}


def make_rain(rng: random.Random, count: int = RAIN_COUNT) -> List[RainDrop]:
    R = GLOBE_RADIUS
    return [
        RainDrop(
            x=(rng.random() - 0.5) * R * 2,
            y=(rng.random() - 0.5) * R * 2,
            speed=rng.random() * 10 + 10,
            length=rng.random() * 10 + 5,
        )
        for _ in range(count)
    ]


def make_trees(rng: random.Random, count: int = TREE_COUNT) -> List[Plant]:
    trees = []
    for _ in range(count):
        pos = random_pos_in_globe(rng, GROUND_Y_OFFSET, 20)
        trees.append(Plant(pos.x, pos.y, PlantKind.TREE, TREE_GREEN, height=80, width=40))
    return trees


def make_plants(rng: random.Random) -> List[Plant]:
    plants = make_trees(rng)
    for i in range(FLOWER_COUNT):
        pos = random_pos_in_globe(rng, GROUND_Y_OFFSET, 10)
        plants.append(Plant(pos.x, pos.y, PlantKind.FLOWER, FLOWER_COLORS[i % 3], height=15, width=10))
    plants.sort(key=lambda p: p.y)
    return plants


def update_rain(
    rng: random.Random,
    drops: List[RainDrop],
    ripples: List[Ripple],
    obstacles: List[Plant],
    dt: float = 1.0,
) -> None:
    """
    Move drops; a drop crossing a plant top during the tick or on the ground respawns above
    the globe and leaves a ripple where it hit. Ripples grow and fade, and any
    ripple that fades out is gone by the end of this call.
    """
    R = GLOBE_RADIUS
    for d in drops:
        prev_y = d.y
        d.y += d.speed * dt
        hit_y: Optional[float] = None
        for p in obstacles:
            if abs(d.x - p.x) < p.width / 2:
                top = p.y - p.height
                if prev_y < top <= d.y:
                    hit_y = top
                    break
        if hit_y is None and d.y > GROUND_Y_OFFSET + rng.random() * 20:
            hit_y = d.y
        if hit_y is not None:
            hit_x = d.x
            d.y = -R - rng.random() * 50
            d.x = (rng.random() - 0.5) * R * 1.8
            if len(ripples) < MAX_RIPPLES:
                ripples.append(Ripple(hit_x, hit_y, 1.0, rng.random() * 5 + 5, 1.0))

    for r in ripples:
        r.radius += 0.5 * dt
        r.opacity -= 0.05 * dt
    ripples[:] = [r for r in ripples if r.opacity > 0]


def draw_plant(surface: Surface, p: Plant) -> None:
    surface.fill_ellipse(p.x, p.y, 15, 5, (0, 0, 0), 0.3)
    if p.kind == PlantKind.TREE:
        surface.fill_rect(p.x - 4, p.y - p.height, 8, p.height, TRUNK)
        top = p.y - p.height
        surface.fill_circle(p.x, top, 25, p.color)
        surface.fill_circle(p.x - 15, top + 10, 20, p.color)
        surface.fill_circle(p.x + 15, top + 10, 20, p.color)
    else:
        surface.line(p.x, p.y, p.x, p.y - p.height, TREE_GREEN, 2)
        surface.fill_circle(p.x, p.y - p.height, 5, p.color)


def draw_ripples(surface: Surface, ripples: List[Ripple]) -> None:
    for r in ripples:
        surface.stroke_ellipse(r.x, r.y, r.radius, r.radius * 0.5, (255, 255, 255), 1, 0.4 * r.opacity)


def draw_rain(surface: Surface, drops: List[RainDrop]) -> None:
    for d in drops:
        surface.line(d.x, d.y, d.x, d.y + d.length, STREAK, 1, 0.4)


def init(seed: Optional[int] = None, config=None, previous=None) -> RainState:
    state = RainState(rng=new_rng(seed))
    state.drops = make_rain(state.rng)
    state.plants = make_plants(state.rng)
    state.ripples = []
    return state


def update(state: RainState, dt: float = 1.0) -> None:
    update_rain(state.rng, state.drops, state.ripples, state.plants, dt)
    state.advance(dt)


def draw_background(surface: Surface, state: RainState) -> None:
    draw_sky(surface, hex_to_bgr("#334155"), hex_to_bgr("#475569"))


def draw_terrain(surface: Surface, state: RainState) -> None:
    surface.fill_ellipse(0, GROUND_Y_OFFSET, GLOBE_RADIUS - 20, GLOBE_RADIUS * 0.35, hex_to_bgr("#14532d"))
    surface.fill_ellipse(80, GROUND_Y_OFFSET + 20, 80, 40, hex_to_bgr("#0f172a"))
    surface.fill_ellipse(80, GROUND_Y_OFFSET + 20, 80, 40, hex_to_bgr("#38bdf8"), 0.2)


def draw_entities(surface: Surface, state: RainState) -> None:
    for p in by_depth(state.plants, key=lambda p: p.y):
        draw_plant(surface, p)
    draw_ripples(surface, state.ripples)


def draw_weather(surface: Surface, state: RainState) -> None:
    draw_rain(surface, state.drops)


def render(surface: Surface, state: RainState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
    draw_weather(surface, state)
