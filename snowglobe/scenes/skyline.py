"""Night skyline over the river: boats cross, stars twinkle, office windows switch on and off."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import hex_to_bgr
from ..entities import Boat, BoatKind, Skyscraper, Star
from ..geometry import GLOBE_RADIUS, GROUND_Y_OFFSET
from ..surface import LinearGradient, Surface
from .base import SceneState, new_rng

STAR_COUNT = 50
TWINKLE_P = 0.05
WINDOW_TOGGLE_P = 0.02
BOAT_WRAP = GLOBE_RADIUS + 50
BASELINE = 50.0

WINDOW_LIT = hex_to_bgr("#fef3c7")
TOWER_RED = hex_to_bgr("#be123c")
SILHOUETTE = hex_to_bgr("#020617")
BLOCK = hex_to_bgr("#1e1b4b")


@dataclass
class SkylineState(SceneState):
    boats: List[Boat] = field(default_factory=list)
    stars: List[Star] = field(default_factory=list)
    towers: List[Skyscraper] = field(default_factory=list)

    def ambient(self):
        return {"stars": self.stars}


def make_towers(rng) -> List[Skyscraper]:
    towers = []
    for x, w, h in ((-100, 40, 100), (-140, 30, 60), (-40, 35, 140)):
        cols = 2
        rows = int(h // 10)
        towers.append(Skyscraper(x, w, h, cols, [rng.random() > 0.5 for _ in range(cols * rows)]))
    return towers


def init(seed: Optional[int] = None, config=None, previous=None) -> SkylineState:
    state = SkylineState(rng=new_rng(seed))
    rng = state.rng
    R = GLOBE_RADIUS
    state.boats = [
        Boat(-100, GROUND_Y_OFFSET + 20, 0.5, 1, BoatKind.CRUISE),
        Boat(100, GROUND_Y_OFFSET + 40, 0.3, -1, BoatKind.CARGO),
    ]
    state.stars = [
        Star(
            x=(rng.random() - 0.5) * R * 1.8,
            y=(rng.random() - 0.5) * R * 1.8 - 50,
            opacity=rng.random(),
        )
        for _ in range(STAR_COUNT)
    ]
    state.towers = make_towers(rng)
    return state


def update(state: SkylineState, dt: float = 1.0) -> None:
    rng = state.rng
    for b in state.boats:
        b.x += b.speed * b.direction * dt
        if b.direction > 0 and b.x > BOAT_WRAP:
            b.x = -BOAT_WRAP
        elif b.direction < 0 and b.x < -BOAT_WRAP:
            b.x = BOAT_WRAP
    for s in state.stars:
        if rng.random() < TWINKLE_P:
            s.opacity = rng.random()
    for t in state.towers:
        if t.windows and rng.random() < WINDOW_TOGGLE_P:
            i = rng.randrange(len(t.windows))
            t.windows[i] = not t.windows[i]
    state.advance(dt)


def draw_boat(surface: Surface, b: Boat) -> None:
    x, y = b.x, b.y
    surface.fill_rect(x - 20, y + 5, 40, 10, (255, 255, 255), 0.1)
    cruise = b.kind == BoatKind.CRUISE
    hull = hex_to_bgr("#e2e8f0") if cruise else hex_to_bgr("#78350f")
    cabin = hex_to_bgr("#3b82f6") if cruise else hex_to_bgr("#a16207")
    surface.fill_poly([(x - 20, y), (x + 20, y), (x + 15, y + 10), (x - 15, y + 10)], hull)
    surface.fill_rect(x - 10, y - 8, 20, 8, cabin)
    if cruise:
        surface.fill_circle(x - 5, y - 4, 1, hex_to_bgr("#facc15"))
        surface.fill_circle(x + 5, y - 4, 1, hex_to_bgr("#facc15"))


def draw_background(surface: Surface, state: SkylineState) -> None:
    R = GLOBE_RADIUS
    sky = LinearGradient(0, -R, 0, BASELINE, [(0.0, hex_to_bgr("#0f172a"), 1.0), (1.0, hex_to_bgr("#312e81"), 1.0)])
    surface.fill_circle(0, 0, R, sky)
    for s in state.stars:
        surface.fill_circle(s.x, s.y, 1, (255, 255, 255), s.opacity)


def draw_terrain(surface: Surface, state: SkylineState) -> None:
    R = GLOBE_RADIUS
    tx = 40.0
    surface.fill_rect(tx - 5, BASELINE - 180, 10, 180, SILHOUETTE)
    surface.fill_circle(tx, BASELINE - 140, 15, TOWER_RED)
    surface.fill_circle(tx, BASELINE - 60, 10, TOWER_RED)
    surface.fill_rect(tx - 1, BASELINE - 220, 2, 40, hex_to_bgr("#e11d48"))

    for t in state.towers:
        surface.fill_rect(t.x, BASELINE - t.height, t.width, t.height, BLOCK)
        rows = len(t.windows) // max(1, t.cols)
        for i, lit in enumerate(t.windows):
            if not lit:
                continue
            col, row = i % t.cols, i // t.cols
            wx = t.x + 8 + col * (t.width - 18)
            wy = BASELINE - t.height + 6 + row * (t.height - 10) / max(1, rows)
            surface.fill_rect(wx, wy, 2, 2, WINDOW_LIT)

    river = LinearGradient(0, BASELINE, 0, R, [(0.0, (0, 0, 0), 1.0), (1.0, hex_to_bgr("#1e3a8a"), 1.0)])
    surface.fill_rect(-R, BASELINE, 2 * R, R, river)


def draw_entities(surface: Surface, state: SkylineState) -> None:
    for b in sorted(state.boats, key=lambda b: b.y):
        draw_boat(surface, b)


def render(surface: Surface, state: SkylineState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
