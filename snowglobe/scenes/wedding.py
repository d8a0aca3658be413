from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import hex_to_bgr
from ..entities import Confetti
from ..geometry import GLOBE_RADIUS, GROUND_Y_OFFSET
from ..surface import Pose, Surface
from .base import SceneState, draw_sky, new_rng

MAX_CONFETTI = 120
SPAWN_P = 0.6
CONFETTI_FADE = 0.004
ARCH_R = 110.0
ARCH_Y = GROUND_Y_OFFSET

CONFETTI_COLORS = [hex_to_bgr(c) for c in ("#f9a8d4", "#fde68a", "#bfdbfe", "#ffffff", "#fca5a5", "#c4b5fd")]
ROSE = hex_to_bgr("#f472b6")
LEAF = hex_to_bgr("#4d7c0f")
SKIN = hex_to_bgr("#ffedd5")


@dataclass
class WeddingState(SceneState):
    confetti: List[Confetti] = field(default_factory=list)

    def pools(self):
        return {"confetti": (self.confetti, MAX_CONFETTI)}


def spawn_confetti(state: WeddingState) -> Confetti:
    rng = state.rng
    return Confetti(
        x=(rng.random() - 0.5) * GLOBE_RADIUS * 1.6,
        y=-GLOBE_RADIUS + rng.random() * 20,
        color=CONFETTI_COLORS[rng.randrange(len(CONFETTI_COLORS))],
        speed_y=rng.random() * 1.0 + 0.6,
        sway=rng.random() * 1.5 + 0.5,
        sway_offset=rng.random() * math.tau,
    )


def update_confetti(state: WeddingState, dt: float = 1.0) -> None:
    """Confetti falls with a sway; a piece that lands or fades out is dropped in the same call."""
    if len(state.confetti) < MAX_CONFETTI and state.rng.random() < SPAWN_P:
        state.confetti.append(spawn_confetti(state))
    for c in state.confetti:
        c.sway_offset += 0.05 * dt
        c.x += math.sin(c.sway_offset) * c.sway * 0.5 * dt
        c.y += c.speed_y * dt
        c.life -= CONFETTI_FADE * dt
    floor = GROUND_Y_OFFSET + 40
    state.confetti[:] = [c for c in state.confetti if c.life > 0 and c.y < floor]


def init(seed: Optional[int] = None, config=None, previous=None) -> WeddingState:
    state = WeddingState(rng=new_rng(seed))
    state.confetti = []
    return state


def update(state: WeddingState, dt: float = 1.0) -> None:
    update_confetti(state, dt)
    state.advance(dt)


def draw_background(surface: Surface, state: WeddingState) -> None:
    draw_sky(surface, hex_to_bgr("#fdf2f8"), hex_to_bgr("#fbcfe8"))


def draw_terrain(surface: Surface, state: WeddingState) -> None:
    R = GLOBE_RADIUS
    surface.fill_ellipse(0, GROUND_Y_OFFSET + 20, R - 20, R * 0.35, hex_to_bgr("#bbf7d0"))
    surface.fill_poly(
        [(-20, GROUND_Y_OFFSET + 10), (20, GROUND_Y_OFFSET + 10), (60, R), (-60, R)],
        hex_to_bgr("#fecdd3"),
    )
    # arch: two posts and a half ring of roses
    for side in (-1, 1):
        surface.fill_rect(side * ARCH_R - 5, ARCH_Y - ARCH_R, 10, ARCH_R, hex_to_bgr("#f5f5f4"))
    surface.stroke_ellipse(0, ARCH_Y - ARCH_R, ARCH_R, ARCH_R * 0.9, hex_to_bgr("#f5f5f4"), 10, start_deg=180, end_deg=360)
    for k in range(15):
        a = math.pi + k / 14 * math.pi
        fx = math.cos(a) * ARCH_R
        fy = ARCH_Y - ARCH_R + math.sin(a) * ARCH_R * 0.9
        surface.fill_circle(fx + 3, fy + 3, 5, LEAF)
        surface.fill_circle(fx, fy, 6, ROSE if k % 2 == 0 else hex_to_bgr("#fda4af"))


def draw_couple(surface: Surface, state: WeddingState) -> None:
    y = GROUND_Y_OFFSET
    bob = math.sin(state.time_ms / 600.0) * 1.5
    groom = Pose(-18, y + bob)
    surface.fill_poly(groom.points([(-9, 0), (9, 0), (8, -40), (-8, -40)]), hex_to_bgr("#111827"))
    surface.fill_poly(groom.points([(-2, -40), (2, -40), (0, -30)]), (255, 255, 255))
    hx, hy = groom.point(0, -48)
    surface.fill_circle(hx, hy, 8, SKIN)
    bride = Pose(18, y - bob)
    surface.fill_poly(bride.points([(-16, 0), (16, 0), (5, -38), (-5, -38)]), (255, 255, 255))
    hx, hy = bride.point(0, -46)
    surface.fill_circle(hx, hy, 8, SKIN)
    surface.fill_poly(bride.points([(-8, -50), (8, -50), (14, -20), (-14, -20)]), (255, 255, 255), 0.5)
    bx, by = bride.point(-8, -24)
    surface.fill_circle(bx, by, 5, ROSE)


def draw_entities(surface: Surface, state: WeddingState) -> None:
    draw_couple(surface, state)


def draw_weather(surface: Surface, state: WeddingState) -> None:
    for c in state.confetti:
        pose = Pose(c.x, c.y, c.sway_offset)
        surface.fill_poly(pose.points([(-3, -2), (3, -2), (3, 2), (-3, 2)]), c.color, min(1.0, c.life * 2))


def render(surface: Surface, state: WeddingState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
    draw_weather(surface, state)
