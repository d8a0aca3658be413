"""
Winter village: villagers wander, build snowmen and throw snowballs while
snow falls over everything.

Villagers are goal-seeking state machines. A builder holds the id of the
snowman it works on, never the snowman itself, and looks it up every tick:
the snowman may have melted away in the meantime.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional

from ..colors import hex_to_bgr
from ..entities import Person, PersonState, Snowflake, Snowman
from ..geometry import GLOBE_RADIUS, GROUND_Y_OFFSET, Vec2, distance, random_pos_in_globe
from ..surface import Surface
from .base import SceneState, by_depth, draw_sky, new_rng

SNOW_COUNT = 300
PERSON_COUNT = 12
MAX_SNOWMEN = 5

WALK_SPEED = 0.8
ARRIVE_EPS = 2.0
IDLE_TICKS = 60.0
BUILD_TICKS = 300.0
FIGHT_TICKS = 60.0
BUILD_RATE = 0.005
DECAY_COMPLETE = 0.0005
DECAY_ABANDONED = 0.002

# One uniform draw per decision, thresholds checked in this order.
P_WANDER = 0.6
P_BUILD = 0.85

PALETTE = [hex_to_bgr(c) for c in ("#ef4444", "#3b82f6", "#10b981", "#f59e0b", "#8b5cf6", "#ec4899")]
SKIN = hex_to_bgr("#ffedd5")
SNOWMAN_WHITE = hex_to_bgr("#f8fafc")
COAL = hex_to_bgr("#1e293b")
CARROT = hex_to_bgr("#f97316")
FLAKE = (255, 255, 255)


@dataclass
class WinterState(SceneState):
    snow: List[Snowflake] = field(default_factory=list)
    people: List[Person] = field(default_factory=list)
    snowmen: List[Snowman] = field(default_factory=list)

    def ambient(self):
        return {"snow": self.snow}

    def pools(self):
        return {"snowmen": (self.snowmen, MAX_SNOWMEN)}


# ============================================================
# Snow (shared with the custom scene)
# ============================================================


def make_snow(rng: random.Random, count: int = SNOW_COUNT) -> List[Snowflake]:
    R = GLOBE_RADIUS
    return [
        Snowflake(
            x=(rng.random() - 0.5) * R * 2.2,
            y=(rng.random() - 0.5) * R * 2.2,
            radius=rng.random() * 2 + 1,
            speed=rng.random() * 1 + 0.5,
            wind=rng.random() * 0.5 - 0.25,
            opacity=rng.random() * 0.5 + 0.3,
        )
        for _ in range(count)
    ]


def update_snow(rng: random.Random, flakes: List[Snowflake], dt: float = 1.0) -> None:
    R = GLOBE_RADIUS
    for f in flakes:
        f.y += f.speed * dt
        f.x += f.wind * dt
        if f.y > R or abs(f.x) > R:
            f.y = -R
            f.x = (rng.random() - 0.5) * R * 2


def draw_snow(surface: Surface, flakes: List[Snowflake]) -> None:
    for f in flakes:
        surface.fill_circle(f.x, f.y, f.radius, FLAKE, f.opacity * 0.9)


# ============================================================
# Villagers (shared with the custom scene)
# ============================================================


def make_people(state: SceneState, count: int = PERSON_COUNT) -> List[Person]:
    rng = state.rng
    return [
        Person(
            id=state.mint_id(),
            pos=random_pos_in_globe(rng),
            velocity=Vec2(),
            color=PALETTE[i % len(PALETTE)],
            size=8.0,
            state_timer=rng.random() * 100 + 50,
        )
        for i in range(count)
    ]


def find_snowman(snowmen: List[Snowman], sid: Optional[int]) -> Optional[Snowman]:
    if sid is None:
        return None
    for s in snowmen:
        if s.id == sid:
            return s
    return None


def has_builder(people: List[Person], sid: int) -> bool:
    return any(p.state == PersonState.BUILDING and p.target_entity_id == sid for p in people)


def decay_snowmen(people: List[Person], snowmen: List[Snowman], dt: float = 1.0) -> List[Snowman]:
    for s in snowmen:
        if s.is_complete:
            s.health -= DECAY_COMPLETE * dt
        elif not has_builder(people, s.id):
            s.health -= DECAY_ABANDONED * dt
    return [s for s in snowmen if s.health > 0]


def go_idle(p: Person, timer: float = IDLE_TICKS) -> None:
    p.state = PersonState.IDLE
    p.target = None
    p.target_entity_id = None
    p.state_timer = timer


def decide(state: SceneState, p: Person, snowmen: List[Snowman]) -> None:
    rng = state.rng
    roll = rng.random()
    if roll < P_WANDER:
        p.state = PersonState.WALKING
        p.target = random_pos_in_globe(rng)
        p.target_entity_id = None
        p.state_timer = 0.0
    elif roll < P_BUILD and len(snowmen) < MAX_SNOWMEN:
        s = next((sm for sm in snowmen if not sm.is_complete and sm.health > 0), None)
        if s is None:
            s = Snowman(id=state.mint_id(), pos=random_pos_in_globe(rng))
            snowmen.append(s)
        p.state = PersonState.WALKING
        p.target = Vec2(s.pos.x + 15, s.pos.y)
        p.target_entity_id = s.id
    else:
        p.state = PersonState.FIGHTING
        p.state_timer = FIGHT_TICKS


def step_person(state: SceneState, p: Person, snowmen: List[Snowman], dt: float = 1.0) -> None:
    if p.state_timer > 0:
        p.state_timer -= dt

    if p.state == PersonState.IDLE and p.state_timer <= 0:
        decide(state, p, snowmen)

    if p.state == PersonState.WALKING:
        if p.target is None:
            go_idle(p)
            return
        d = distance(p.pos.x, p.pos.y, p.target.x, p.target.y)
        if d < ARRIVE_EPS:
            p.pos = p.target.copy()
            p.target = None
            if p.target_entity_id is not None:
                p.state = PersonState.BUILDING
                p.state_timer = BUILD_TICKS
            else:
                go_idle(p)
        else:
            step = min(WALK_SPEED * dt, d)
            p.pos.x += (p.target.x - p.pos.x) / d * step
            p.pos.y += (p.target.y - p.pos.y) / d * step

    if p.state == PersonState.BUILDING:
        s = find_snowman(snowmen, p.target_entity_id)
        if s is not None and not s.is_complete and s.health > 0:
            s.progress += BUILD_RATE * dt
            if s.progress >= 1:
                s.progress = 1.0
                s.is_complete = True
                go_idle(p)
        else:
            go_idle(p, 0.0)

    if p.state == PersonState.FIGHTING and p.state_timer <= 0:
        go_idle(p)


def update_villagers(state: SceneState, people: List[Person], snowmen: List[Snowman], dt: float = 1.0) -> List[Snowman]:
    """Advance snowmen decay and every villager; returns the surviving snowmen list."""
    snowmen[:] = decay_snowmen(people, snowmen, dt)
    for p in people:
        step_person(state, p, snowmen, dt)
    return snowmen


def draw_person(surface: Surface, p: Person) -> None:
    x, y = p.pos.x, p.pos.y
    surface.fill_ellipse(x, y, 6, 2, (0, 0, 0), 0.2)
    surface.fill_poly([(x - 4, y), (x - 4, y - 12), (x + 4, y - 12), (x + 4, y)], p.color)
    surface.fill_circle(x, y - 14, 4, SKIN)
    if p.state == PersonState.BUILDING:
        surface.line(x, y - 10, x + 6, y - 8, p.color, 2)
    elif p.state == PersonState.FIGHTING:
        # arm raised, snowball in flight
        surface.line(x, y - 10, x + 5, y - 17, p.color, 2)
        phase = (p.state_timer % 30.0) / 30.0
        bx = x + 6 + phase * 30
        by = y - 18 - math.sin(phase * math.pi) * 12
        surface.fill_circle(bx, by, 2, FLAKE)


def draw_snowman(surface: Surface, s: Snowman) -> None:
    x, y, k = s.pos.x, s.pos.y, s.progress
    surface.fill_ellipse(x, y, 10 * k, 3 * k, (0, 0, 0), 0.1)
    if k > 0.1:
        surface.fill_circle(x, y - 8 * k, 8 * k, SNOWMAN_WHITE)
    if k > 0.4:
        surface.fill_circle(x, y - 18 * k, 6 * k, SNOWMAN_WHITE)
    if k > 0.7:
        surface.fill_circle(x, y - 26 * k, 4 * k, SNOWMAN_WHITE)
        if s.is_complete:
            surface.fill_circle(x - 1.5, y - 27, 1, COAL)
            surface.fill_circle(x + 1.5, y - 27, 1, COAL)
            surface.fill_poly([(x, y - 26), (x + 4, y - 25), (x, y - 24)], CARROT)


def draw_villagers(surface: Surface, people: List[Person], snowmen: List[Snowman]) -> None:
    items = [(p.pos.y, p) for p in people] + [(s.pos.y, s) for s in snowmen]
    for _, item in by_depth(items, key=lambda it: it[0]):
        if isinstance(item, Person):
            draw_person(surface, item)
        else:
            draw_snowman(surface, item)


# ============================================================
# Scene
# ============================================================


def init(seed: Optional[int] = None, config=None, previous=None) -> WinterState:
    state = WinterState(rng=new_rng(seed))
    state.snow = make_snow(state.rng)
    state.people = make_people(state)
    state.snowmen = []
    return state


def update(state: WinterState, dt: float = 1.0) -> None:
    update_snow(state.rng, state.snow, dt)
    update_villagers(state, state.people, state.snowmen, dt)
    state.advance(dt)


def draw_background(surface: Surface, state: WinterState) -> None:
    draw_sky(surface, hex_to_bgr("#020617"), hex_to_bgr("#1e293b"))


def draw_terrain(surface: Surface, state: WinterState) -> None:
    surface.fill_ellipse(0, GROUND_Y_OFFSET, GLOBE_RADIUS - 20, GLOBE_RADIUS * 0.35, hex_to_bgr("#f1f5f9"))


def draw_entities(surface: Surface, state: WinterState) -> None:
    draw_villagers(surface, state.people, state.snowmen)


def draw_weather(surface: Surface, state: WinterState) -> None:
    draw_snow(surface, state.snow)


def render(surface: Surface, state: WinterState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
    draw_weather(surface, state)
