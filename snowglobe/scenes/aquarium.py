from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import hex_to_bgr
from ..entities import Bubble, Fish, FishKind
from ..geometry import GLOBE_RADIUS, Vec2, random_pos_in_disc
from ..surface import Pose, Surface
from .base import SceneState, draw_sky, new_rng, signed

FISH_COUNT = 15
BUBBLE_COUNT = 50
FISH_MARGIN = 50.0

SOFT_EDGE = GLOBE_RADIUS - 20
PUSH_BACK = 0.001
IMPULSE_P = 0.02
IMPULSE = 0.25
MAX_SPEED = 2.0
MIN_SPEED = 0.5

FISH_COLORS = [hex_to_bgr(c) for c in ("#fb923c", "#facc15", "#60a5fa", "#f87171")]
SAND = hex_to_bgr("#fde047")
KIND_SHAPE = {
    FishKind.FAT: (1.3, 1.0),
    FishKind.LONG: (1.8, 0.6),
    FishKind.TINY: (1.2, 0.7),
}


@dataclass
class AquariumState(SceneState):
    fish: List[Fish] = field(default_factory=list)
    bubbles: List[Bubble] = field(default_factory=list)

    def ambient(self):
        return {"bubbles": self.bubbles}


def pick_kind(rng) -> FishKind:
    if rng.random() > 0.7:
        return FishKind.FAT
    if rng.random() > 0.4:
        return FishKind.LONG
    return FishKind.TINY


def make_fish(state: SceneState, count: int = FISH_COUNT) -> List[Fish]:
    rng = state.rng
    fish = []
    for i in range(count):
        kind = pick_kind(rng)
        size = rng.random() * 10 + 5
        if kind == FishKind.TINY:
            size *= 0.6
        fish.append(
            Fish(
                id=state.mint_id(),
                pos=random_pos_in_disc(rng, GLOBE_RADIUS - FISH_MARGIN),
                velocity=Vec2(signed(rng, 1.0), signed(rng, 0.5)),
                color=FISH_COLORS[i % len(FISH_COLORS)],
                size=size,
                kind=kind,
                tail_phase=rng.random() * math.pi,
            )
        )
    return fish


def make_bubbles(rng, count: int = BUBBLE_COUNT) -> List[Bubble]:
    R = GLOBE_RADIUS
    return [
        Bubble(
            x=(rng.random() - 0.5) * R * 1.8,
            y=R + rng.random() * 50,
            size=rng.random() * 3 + 1,
            speed=rng.random() * 1 + 0.5,
        )
        for _ in range(count)
    ]


def steer(rng, f: Fish, dt: float = 1.0) -> None:
    """Bounded wander: soft restoring force past the edge, random kicks, speed kept in a band."""
    v = f.velocity
    f.pos.x += v.x * dt
    f.pos.y += v.y * dt
    f.tail_phase += 0.2 * dt

    if f.pos.length() > SOFT_EDGE:
        v.x -= f.pos.x * PUSH_BACK * dt
        v.y -= f.pos.y * PUSH_BACK * dt

    if rng.random() < IMPULSE_P:
        v.x += signed(rng, IMPULSE)
        v.y += signed(rng, IMPULSE)

    speed = v.length()
    if speed > MAX_SPEED:
        v.x *= 0.9
        v.y *= 0.9
    elif speed < MIN_SPEED:
        if speed == 0:
            v.x = MIN_SPEED
        v.x *= 1.1
        v.y *= 1.1


def update_bubbles(rng, bubbles: List[Bubble], dt: float = 1.0) -> None:
    R = GLOBE_RADIUS
    for b in bubbles:
        b.y -= b.speed * dt
        b.x += math.sin(b.y * 0.05) * 0.5 * dt
        if b.y < -R:
            b.y = R + 10
            b.x = (rng.random() - 0.5) * R


def draw_fish(surface: Surface, f: Fish) -> None:
    angle = math.atan2(f.velocity.y, f.velocity.x)
    pose = Pose(f.pos.x, f.pos.y, angle, 1.0, -1.0 if abs(angle) > math.pi / 2 else 1.0)
    sx, sy = KIND_SHAPE[f.kind]
    s = f.size
    wag = math.sin(f.tail_phase) * 5
    surface.fill_poly(pose.points([(-s, 0), (-s * 2, -s * 0.8 + wag), (-s * 2, s * 0.8 + wag)]), f.color)
    cx, cy, rx, ry, deg = pose.ellipse(0, 0, s * sx, s * sy * 0.8)
    surface.fill_ellipse(cx, cy, rx, ry, f.color, angle_deg=deg)
    ex, ey = pose.point(s * 0.8, -s * 0.3)
    surface.fill_circle(ex, ey, 1.5, (0, 0, 0))


def init(seed: Optional[int] = None, config=None, previous=None) -> AquariumState:
    state = AquariumState(rng=new_rng(seed))
    state.fish = make_fish(state)
    state.bubbles = make_bubbles(state.rng)
    return state


def update(state: AquariumState, dt: float = 1.0) -> None:
    for f in state.fish:
        steer(state.rng, f, dt)
    update_bubbles(state.rng, state.bubbles, dt)
    state.advance(dt)


def draw_background(surface: Surface, state: AquariumState) -> None:
    draw_sky(surface, hex_to_bgr("#0ea5e9"), hex_to_bgr("#0c4a6e"))


def draw_terrain(surface: Surface, state: AquariumState) -> None:
    R = GLOBE_RADIUS
    surface.fill_ellipse(0, R - 40, R - 40, 40, SAND)


def draw_entities(surface: Surface, state: AquariumState) -> None:
    for f in sorted(state.fish, key=lambda f: f.pos.y):
        draw_fish(surface, f)


def draw_weather(surface: Surface, state: AquariumState) -> None:
    for b in state.bubbles:
        surface.stroke_circle(b.x, b.y, b.size, (255, 255, 255), 1, 0.4)


def render(surface: Surface, state: AquariumState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
    draw_weather(surface, state)
