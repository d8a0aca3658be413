from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import hex_to_bgr
from ..entities import CityCar, LightKind, Skyscraper, Star
from ..geometry import GLOBE_RADIUS, GROUND_Y_OFFSET
from ..surface import Surface
from .base import SceneState, by_depth, draw_moon, draw_sky, new_rng, uniform

STAR_COUNT = 40
TOWER_COUNT = 9
CARS_PER_LANE = 3
LANE_YS = (GROUND_Y_OFFSET + 20, GROUND_Y_OFFSET + 42, GROUND_Y_OFFSET + 64)
WINDOW_TOGGLE_P = 0.003
TWINKLE_P = 0.03
CAR_WRAP = GLOBE_RADIUS + 30
STREET_TOP = GROUND_Y_OFFSET + 5

CAR_COLORS = [hex_to_bgr(c) for c in ("#ef4444", "#3b82f6", "#e5e7eb", "#facc15", "#10b981")]
HEADLIGHT = hex_to_bgr("#fef9c3")
TAILLIGHT = hex_to_bgr("#dc2626")
WINDOW_ON = hex_to_bgr("#fde68a")
WINDOW_OFF = hex_to_bgr("#1e293b")


@dataclass
class CityNightState(SceneState):
    towers: List[Skyscraper] = field(default_factory=list)
    cars: List[CityCar] = field(default_factory=list)
    stars: List[Star] = field(default_factory=list)

    def ambient(self):
        return {"stars": self.stars}


def window_rows(t: Skyscraper) -> int:
    return len(t.windows) // max(1, t.cols)


def make_towers(rng) -> List[Skyscraper]:
    towers = []
    x = -GLOBE_RADIUS + 10
    for _ in range(TOWER_COUNT):
        w = uniform(rng, 40, 70)
        h = uniform(rng, 90, 260)
        cols = max(2, int(w // 12))
        rows = max(3, int(h // 16))
        towers.append(Skyscraper(x, w, h, cols, [rng.random() < 0.45 for _ in range(cols * rows)]))
        x += w + uniform(rng, 2, 10)
    return towers


def make_cars(rng) -> List[CityCar]:
    cars = []
    for lane, y in enumerate(LANE_YS):
        direction = 1 if lane % 2 == 0 else -1
        for k in range(CARS_PER_LANE):
            cars.append(
                CityCar(
                    x=-GLOBE_RADIUS + k * (2 * GLOBE_RADIUS / CARS_PER_LANE) + rng.random() * 60,
                    y=y,
                    lane=lane,
                    speed=direction * uniform(rng, 1.2, 2.6),
                    color=CAR_COLORS[rng.randrange(len(CAR_COLORS))],
                    kind=LightKind.HEADLIGHT if direction > 0 else LightKind.TAILLIGHT,
                )
            )
    return cars


def init(seed: Optional[int] = None, config=None, previous=None) -> CityNightState:
    state = CityNightState(rng=new_rng(seed))
    rng = state.rng
    R = GLOBE_RADIUS
    state.towers = make_towers(rng)
    state.cars = make_cars(rng)
    state.stars = [
        Star(x=(rng.random() - 0.5) * R * 1.8, y=uniform(rng, -R * 0.9, -40), opacity=rng.random())
        for _ in range(STAR_COUNT)
    ]
    return state


def update(state: CityNightState, dt: float = 1.0) -> None:
    rng = state.rng
    for t in state.towers:
        for i in range(len(t.windows)):
            if rng.random() < WINDOW_TOGGLE_P:
                t.windows[i] = not t.windows[i]
    for c in state.cars:
        c.x += c.speed * dt
        if c.speed > 0 and c.x > CAR_WRAP:
            c.x = -CAR_WRAP
        elif c.speed < 0 and c.x < -CAR_WRAP:
            c.x = CAR_WRAP
    for s in state.stars:
        if rng.random() < TWINKLE_P:
            s.opacity = rng.random()
    state.advance(dt)


def draw_tower(surface: Surface, t: Skyscraper) -> None:
    top = STREET_TOP - t.height
    surface.fill_rect(t.x, top, t.width, t.height, hex_to_bgr("#0f172a"))
    rows = window_rows(t)
    cw = t.width / t.cols
    rh = (t.height - 12) / max(1, rows)
    for i, lit in enumerate(t.windows):
        col, row = i % t.cols, i // t.cols
        wx = t.x + col * cw + cw * 0.25
        wy = top + 6 + row * rh
        surface.fill_rect(wx, wy, cw * 0.5, rh * 0.55, WINDOW_ON if lit else WINDOW_OFF, 0.9 if lit else 0.6)


def draw_car(surface: Surface, c: CityCar) -> None:
    forward = 1 if c.speed > 0 else -1
    surface.fill_rect(c.x - 14, c.y - 7, 28, 8, c.color)
    surface.fill_rect(c.x - 8, c.y - 12, 16, 6, c.color)
    surface.fill_circle(c.x - 8, c.y + 1, 3, (20, 20, 20))
    surface.fill_circle(c.x + 8, c.y + 1, 3, (20, 20, 20))
    nose = c.x + forward * 14
    if c.kind == LightKind.HEADLIGHT:
        surface.fill_poly([(nose, c.y - 4), (nose + forward * 40, c.y - 10), (nose + forward * 40, c.y + 4)], HEADLIGHT, 0.25)
        surface.fill_circle(nose, c.y - 4, 2, HEADLIGHT)
    else:
        tail = c.x - forward * 14
        surface.glow(tail, c.y - 4, 8, TAILLIGHT, 0.6)
        surface.fill_circle(tail, c.y - 4, 2, TAILLIGHT)


def draw_background(surface: Surface, state: CityNightState) -> None:
    draw_sky(surface, hex_to_bgr("#020617"), hex_to_bgr("#1e1b4b"))
    for s in state.stars:
        surface.fill_circle(s.x, s.y, 1, (255, 255, 255), s.opacity)
    draw_moon(surface, 150, -170, 22)


def draw_terrain(surface: Surface, state: CityNightState) -> None:
    for t in state.towers:
        draw_tower(surface, t)
    R = GLOBE_RADIUS
    surface.fill_rect(-R, STREET_TOP, 2 * R, R, hex_to_bgr("#111827"))
    for y in (LANE_YS[0] + 11, LANE_YS[1] + 11):
        for x in range(-int(R), int(R), 40):
            surface.fill_rect(x, y, 18, 2, hex_to_bgr("#facc15"), 0.5)


def draw_entities(surface: Surface, state: CityNightState) -> None:
    for c in by_depth(state.cars, key=lambda c: c.y):
        draw_car(surface, c)


def render(surface: Surface, state: CityNightState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
