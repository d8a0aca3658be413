"""
Cat and mouse on a wooden floor.

The cat hunts the nearest mouse each tick and eats it on contact; mice bolt
straight away from the cat once it gets close and otherwise potter about.
The cat outruns a fleeing mouse, so a chase always ends.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..colors import hex_to_bgr
from ..entities import Cat, CatState, Mouse
from ..geometry import GLOBE_RADIUS, GROUND_Y_OFFSET, Vec2, bearing, distance, project_inside, random_pos_in_globe, reflect_inside
from ..surface import Pose, Surface
from .base import SceneState, by_depth, new_rng

START_MICE = 3
MAX_MICE = 5
SPAWN_P = 0.01

CAT_SPEED = 2.5
MOUSE_FLEE_SPEED = 2.0
MOUSE_WANDER_SPEED = 0.5
WANDER_P = 0.05
CAPTURE_RADIUS = 10.0
FLEE_RADIUS = 80.0
EAT_TICKS = 100.0
EDGE = GLOBE_RADIUS - 30
# keeps every spawn point inside EDGE
SPAWN_INSET = 10.0

CAT_GREY = hex_to_bgr("#1f2937")
CAT_EYE = hex_to_bgr("#bef264")
MOUSE_GREY = hex_to_bgr("#d4d4d8")
MOUSE_TAIL = hex_to_bgr("#ffc0cb")


@dataclass
class CatMouseState(SceneState):
    cat: Cat = field(default_factory=lambda: Cat(pos=Vec2(0.0, GROUND_Y_OFFSET - 20)))
    mice: List[Mouse] = field(default_factory=list)
    max_mice: int = MAX_MICE

    def pools(self):
        return {"mice": (self.mice, self.max_mice)}


def make_mouse(state: SceneState, pos: Optional[Vec2] = None) -> Mouse:
    return Mouse(
        id=state.mint_id(),
        pos=pos if pos is not None else random_pos_in_globe(state.rng, radius_modifier=SPAWN_INSET),
        velocity=Vec2(),
        color=MOUSE_GREY,
    )


def nearest(cat: Cat, mice: List[Mouse]) -> Tuple[Optional[Mouse], float]:
    best: Optional[Mouse] = None
    best_d = math.inf
    for m in mice:
        d = distance(cat.pos.x, cat.pos.y, m.pos.x, m.pos.y)
        if d < best_d:
            best, best_d = m, d
    return best, best_d


def eat(cat: Cat, mice: List[Mouse], prey: Mouse) -> None:
    mice[:] = [m for m in mice if m.id != prey.id]
    cat.state = CatState.EATING
    cat.timer = EAT_TICKS
    cat.target_mouse_id = None


def step_cat(cat: Cat, mice: List[Mouse], dt: float = 1.0) -> None:
    """Hunt, eat or rest. Eating removes the mouse from `mice` in place."""
    if cat.state == CatState.EATING:
        cat.timer -= dt
        if cat.timer <= 0:
            cat.state = CatState.IDLE
            cat.timer = 0.0
        return

    prey, d = nearest(cat, mice)
    if prey is None:
        cat.state = CatState.IDLE
        cat.target_mouse_id = None
        return

    cat.state = CatState.HUNTING
    cat.target_mouse_id = prey.id
    if d < CAPTURE_RADIUS:
        eat(cat, mice, prey)
        return

    cat.angle = bearing(cat.pos.x, cat.pos.y, prey.pos.x, prey.pos.y)
    step = min(CAT_SPEED * dt, d)
    cat.pos.x += math.cos(cat.angle) * step
    cat.pos.y += math.sin(cat.angle) * step
    if d - step < CAPTURE_RADIUS:
        eat(cat, mice, prey)
        return

    # back onto the rim, facing the other way
    if project_inside(cat.pos, EDGE):
        cat.angle = (cat.angle + 2 * math.pi) % math.tau - math.pi


def step_mouse(rng, m: Mouse, cat: Cat, dt: float = 1.0) -> None:
    if distance(m.pos.x, m.pos.y, cat.pos.x, cat.pos.y) < FLEE_RADIUS:
        m.panic = True
        away = bearing(cat.pos.x, cat.pos.y, m.pos.x, m.pos.y)
        m.velocity.x = math.cos(away) * MOUSE_FLEE_SPEED
        m.velocity.y = math.sin(away) * MOUSE_FLEE_SPEED
    else:
        m.panic = False
        if rng.random() < WANDER_P:
            a = rng.random() * math.tau
            m.velocity.x = math.cos(a) * MOUSE_WANDER_SPEED
            m.velocity.y = math.sin(a) * MOUSE_WANDER_SPEED

    m.pos.x += m.velocity.x * dt
    m.pos.y += m.velocity.y * dt
    reflect_inside(m.pos, m.velocity, EDGE)


def update_chase(state: SceneState, cat: Cat, mice: List[Mouse], max_mice: int = MAX_MICE, dt: float = 1.0) -> None:
    if len(mice) < max_mice and state.rng.random() < SPAWN_P:
        mice.append(make_mouse(state))
    step_cat(cat, mice, dt)
    for m in mice:
        step_mouse(state.rng, m, cat, dt)


def draw_cat(surface: Surface, cat: Cat) -> None:
    pose = Pose(cat.pos.x, cat.pos.y, 0.0, -1.0 if abs(cat.angle) > math.pi / 2 else 1.0, 1.0)
    cx, cy, rx, ry, deg = pose.ellipse(0, -10, 20, 15)
    surface.fill_ellipse(cx, cy, rx, ry, CAT_GREY, angle_deg=deg)
    hx, hy = pose.point(15, -20)
    surface.fill_circle(hx, hy, 12, CAT_GREY)
    surface.fill_poly(pose.points([(8, -28), (12, -38), (18, -30)]), CAT_GREY)
    surface.fill_poly(pose.points([(18, -30), (24, -38), (26, -26)]), CAT_GREY)
    tail = pose.points([(-18, -10), (-25, -20), (-27, -30), (-20, -40)])
    surface.stroke_poly(tail, CAT_GREY, thickness=4)
    ex, ey = pose.point(18, -22)
    eye_r = 1.0 if cat.state == CatState.EATING else 2.0
    surface.fill_circle(ex, ey, eye_r, CAT_EYE)


def draw_mouse(surface: Surface, m: Mouse) -> None:
    x, y = m.pos.x, m.pos.y
    surface.fill_ellipse(x, y, 8, 5, m.color)
    surface.fill_circle(x - 3, y - 4, 3, m.color)
    surface.fill_circle(x + 3, y - 4, 3, m.color)
    surface.stroke_poly([(x - 8, y), (x - 12, y - 3), (x - 15, y - 3), (x - 18, y)], MOUSE_TAIL, 1)


def draw_chase(surface: Surface, cat: Cat, mice: List[Mouse]) -> None:
    items = [(cat.pos.y, cat)] + [(m.pos.y, m) for m in mice]
    for _, item in by_depth(items, key=lambda it: it[0]):
        if isinstance(item, Cat):
            draw_cat(surface, item)
        else:
            draw_mouse(surface, item)


def init(seed: Optional[int] = None, config=None, previous=None) -> CatMouseState:
    state = CatMouseState(rng=new_rng(seed))
    state.cat = Cat(pos=Vec2(0.0, GROUND_Y_OFFSET - 20))
    state.mice = [make_mouse(state) for _ in range(START_MICE)]
    return state


def update(state: CatMouseState, dt: float = 1.0) -> None:
    update_chase(state, state.cat, state.mice, state.max_mice, dt)
    state.advance(dt)


def draw_background(surface: Surface, state: CatMouseState) -> None:
    R = GLOBE_RADIUS
    surface.fill_rect(-R, -R, 2 * R, 2 * R, hex_to_bgr("#fef3c7"))


def draw_terrain(surface: Surface, state: CatMouseState) -> None:
    R = GLOBE_RADIUS
    surface.fill_ellipse(0, 50, R - 20, R * 0.4, hex_to_bgr("#d97706"))
    surface.fill_rect(-R, 50, 2 * R, R, hex_to_bgr("#d97706"))


def draw_entities(surface: Surface, state: CatMouseState) -> None:
    draw_chase(surface, state.cat, state.mice)


def render(surface: Surface, state: CatMouseState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
