from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import darken, hex_to_bgr, lighten
from ..entities import BambooLeaf, BambooStalk
from ..geometry import GLOBE_RADIUS, GROUND_Y_OFFSET
from ..surface import Pose, Surface
from .base import SceneState, by_depth, draw_sky, new_rng, uniform

STALK_COUNT = 9
LEAF_COUNT = 40
LEAF_EDGE = GLOBE_RADIUS + 15

STALK_GREENS = [hex_to_bgr(c) for c in ("#4d7c0f", "#65a30d", "#3f6212")]
LEAF_GREEN = hex_to_bgr("#84cc16")


@dataclass
class BambooState(SceneState):
    stalks: List[BambooStalk] = field(default_factory=list)
    leaves: List[BambooLeaf] = field(default_factory=list)

    def ambient(self):
        return {"leaves": self.leaves}


def make_leaves(rng, count: int = LEAF_COUNT) -> List[BambooLeaf]:
    R = GLOBE_RADIUS
    return [
        BambooLeaf(
            x=(rng.random() - 0.5) * R * 2,
            y=(rng.random() - 0.5) * R * 2,
            angle=rng.random() * math.tau,
            vx=uniform(rng, -0.4, 0.4),
            vy=uniform(rng, 0.3, 0.9),
            opacity=uniform(rng, 0.5, 0.9),
            spin=uniform(rng, -0.04, 0.04),
        )
        for _ in range(count)
    ]


def init(seed: Optional[int] = None, config=None, previous=None) -> BambooState:
    state = BambooState(rng=new_rng(seed))
    rng = state.rng
    state.stalks = []
    for i in range(STALK_COUNT):
        x = -GLOBE_RADIUS + 40 + i * (2 * GLOBE_RADIUS - 80) / (STALK_COUNT - 1) + uniform(rng, -12, 12)
        state.stalks.append(
            BambooStalk(
                x=x,
                width=uniform(rng, 8, 14),
                color=STALK_GREENS[i % len(STALK_GREENS)],
                segments=rng.randrange(6, 10),
                sway=0.0,
                sway_offset=rng.random() * math.tau,
                height=uniform(rng, 260, 380),
            )
        )
    state.leaves = make_leaves(rng)
    return state


def update(state: BambooState, dt: float = 1.0) -> None:
    for s in state.stalks:
        s.sway_offset = (s.sway_offset + 0.02 * dt) % math.tau
        s.sway = math.sin(s.sway_offset) * 0.04
    wind = math.sin(state.time_ms / 1500.0) * 0.3
    for leaf in state.leaves:
        leaf.x += (leaf.vx + wind) * dt
        leaf.y += leaf.vy * dt
        leaf.angle += leaf.spin * dt
        if leaf.y > LEAF_EDGE:
            leaf.y = -LEAF_EDGE
            leaf.x = (state.rng.random() - 0.5) * GLOBE_RADIUS * 2
        if leaf.x > LEAF_EDGE:
            leaf.x = -LEAF_EDGE
        elif leaf.x < -LEAF_EDGE:
            leaf.x = LEAF_EDGE
    state.advance(dt)


def draw_stalk(surface: Surface, s: BambooStalk) -> None:
    base_y = GROUND_Y_OFFSET + 40
    seg_h = s.height / s.segments
    pose = Pose(s.x, base_y, s.sway)
    for k in range(s.segments):
        y0 = -k * seg_h
        y1 = y0 - seg_h + 3
        quad = pose.points([(-s.width / 2, y0), (s.width / 2, y0), (s.width / 2, y1), (-s.width / 2, y1)])
        surface.fill_poly(quad, s.color if k % 2 == 0 else darken(s.color, 0.08))
        jx0, jy0 = pose.point(-s.width / 2 - 1, y1)
        jx1, jy1 = pose.point(s.width / 2 + 1, y1)
        surface.line(jx0, jy0, jx1, jy1, lighten(s.color, 0.35), 2)
        if k > s.segments // 2 and k % 2 == 1:
            side = 1 if k % 4 == 1 else -1
            lx, ly = pose.point(side * s.width / 2, y1)
            cx, cy, rx, ry, deg = Pose(lx, ly, s.sway + side * 0.5).ellipse(side * 14, 0, 16, 4)
            surface.fill_ellipse(cx, cy, rx, ry, LEAF_GREEN, angle_deg=deg)


def draw_background(surface: Surface, state: BambooState) -> None:
    draw_sky(surface, hex_to_bgr("#ecfccb"), hex_to_bgr("#bef264"))


def draw_terrain(surface: Surface, state: BambooState) -> None:
    R = GLOBE_RADIUS
    surface.fill_ellipse(0, GROUND_Y_OFFSET + 40, R - 10, R * 0.35, hex_to_bgr("#3f6212"))
    surface.fill_rect(-R, GROUND_Y_OFFSET + 40, 2 * R, R, hex_to_bgr("#3f6212"))
    for x, y, r in ((-90, GROUND_Y_OFFSET + 70, 16), (60, GROUND_Y_OFFSET + 90, 22), (130, GROUND_Y_OFFSET + 60, 12)):
        surface.fill_ellipse(x, y, r * 1.4, r, hex_to_bgr("#a8a29e"))


def draw_entities(surface: Surface, state: BambooState) -> None:
    for s in by_depth(state.stalks, key=lambda s: s.width):
        draw_stalk(surface, s)


def draw_weather(surface: Surface, state: BambooState) -> None:
    for leaf in state.leaves:
        cx, cy, rx, ry, deg = Pose(leaf.x, leaf.y, leaf.angle).ellipse(0, 0, 7, 2.5)
        surface.fill_ellipse(cx, cy, rx, ry, LEAF_GREEN, leaf.opacity, angle_deg=deg)


def render(surface: Surface, state: BambooState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
    draw_weather(surface, state)
