from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import GOLD, hex_to_bgr
from ..entities import Candle, WishParticle
from ..geometry import GLOBE_RADIUS
from ..surface import Surface
from .base import SceneState, new_rng

MAX_WISHES = 60
WISH_P = 0.2
WISH_FADE = 0.01
TABLE_Y = 80.0

FLAME = hex_to_bgr("#ffa000")
FLAME_CORE = hex_to_bgr("#ffffc8")
ICING = hex_to_bgr("#fff1f2")


@dataclass
class BirthdayState(SceneState):
    candles: List[Candle] = field(default_factory=list)
    wishes: List[WishParticle] = field(default_factory=list)

    def pools(self):
        return {"wishes": (self.wishes, MAX_WISHES)}


def init(seed: Optional[int] = None, config=None, previous=None) -> BirthdayState:
    state = BirthdayState(rng=new_rng(seed))
    state.candles = [
        Candle(-10, -20, hex_to_bgr("#f87171")),
        Candle(0, -20, hex_to_bgr("#60a5fa")),
        Candle(10, -20, hex_to_bgr("#fbbf24")),
    ]
    state.wishes = []
    return state


def update(state: BirthdayState, dt: float = 1.0) -> None:
    rng = state.rng
    for c in state.candles:
        c.flicker = 0.8 + rng.random() * 0.4
    if len(state.wishes) < MAX_WISHES and rng.random() < WISH_P:
        state.wishes.append(
            WishParticle(
                x=(rng.random() - 0.5) * 40,
                y=-40,
                vx=(rng.random() - 0.5) * 0.5,
                vy=-rng.random(),
                color=GOLD,
            )
        )
    for p in state.wishes:
        p.x += p.vx * dt
        p.y += p.vy * dt
        p.life -= WISH_FADE * dt
    state.wishes[:] = [p for p in state.wishes if p.life > 0]
    state.advance(dt)


def draw_background(surface: Surface, state: BirthdayState) -> None:
    R = GLOBE_RADIUS
    surface.fill_rect(-R, -R, 2 * R, 2 * R, hex_to_bgr("#270a15"))
    surface.glow(0, TABLE_Y - 60, 160, hex_to_bgr("#ffa000"), 0.15)


def draw_terrain(surface: Surface, state: BirthdayState) -> None:
    cloth = hex_to_bgr("#9f1239")
    surface.fill_ellipse(0, TABLE_Y, 120, 40, cloth)
    surface.fill_rect(-120, TABLE_Y, 240, 100, cloth)


def draw_girl(surface: Surface) -> None:
    gy = TABLE_Y - 20
    surface.fill_poly([(0, gy - 80), (30, gy), (-30, gy)], hex_to_bgr("#fce7f3"))
    surface.fill_circle(0, gy - 90, 20, hex_to_bgr("#fde047"))
    surface.fill_circle(0, gy - 85, 15, hex_to_bgr("#ffedd5"))
    lid = hex_to_bgr("#4b5563")
    surface.line(-5, gy - 85, -2, gy - 85, lid, 1)
    surface.line(2, gy - 85, 5, gy - 85, lid, 1)


def draw_cake(surface: Surface, state: BirthdayState) -> None:
    ky = TABLE_Y - 10
    surface.fill_ellipse(0, ky, 50, 20, ICING)
    surface.fill_rect(-50, ky - 40, 100, 40, ICING)
    surface.fill_ellipse(0, ky - 40, 50, 20, ICING)
    surface.fill_circle(0, ky - 20, 10, hex_to_bgr("#fda4af"))
    for c in state.candles:
        x, y = c.x, ky - 40 + c.y
        surface.fill_rect(x - 2, y, 4, 15, c.color)
        surface.fill_ellipse(x, y, 4 * c.flicker, 8 * c.flicker, FLAME, min(1.0, c.flicker))
        surface.fill_ellipse(x, y + 2, 2, 4, FLAME_CORE, 0.8)


def draw_entities(surface: Surface, state: BirthdayState) -> None:
    draw_girl(surface)
    draw_cake(surface, state)


def draw_weather(surface: Surface, state: BirthdayState) -> None:
    for p in state.wishes:
        surface.fill_circle(p.x, TABLE_Y - 90 + p.y, 2, p.color, p.life)


def render(surface: Surface, state: BirthdayState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
    draw_weather(surface, state)
