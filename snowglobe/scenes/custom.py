"""
User-composed globe: each feature toggle owns its own populations.

Re-initializing with the previous custom state keeps the populations of
toggles that stay on (same list objects, untouched), builds the ones that
were just switched on, and empties the ones switched off.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..colors import darken, hex_to_bgr, lighten
from ..config import CUSTOM_FEATURES, CustomSceneConfig
from ..entities import Cat, ChristmasLight, Mouse, Person, Petal, Plant, RainDrop, Ripple, Snowflake, Snowman
from ..geometry import GLOBE_RADIUS, GROUND_Y_OFFSET, Vec2
from ..surface import LinearGradient, Surface
from . import cat_mouse, christmas, rain, sakura, winter
from .base import SceneState, by_depth, new_rng

START_MICE = 2
MAX_MICE = 3

# feature toggle -> state attributes it owns
FEATURE_FIELDS: Dict[str, Tuple[str, ...]] = {
    "snow": ("snow",),
    "rain": ("drops", "ripples"),
    "sakura": ("petals",),
    "people": ("people", "snowmen"),
    "forest": ("trees",),
    "christmas_tree": ("lights",),
    "cat": ("cat", "mice"),
}


@dataclass
class CustomState(SceneState):
    config: CustomSceneConfig = field(default_factory=CustomSceneConfig)
    snow: List[Snowflake] = field(default_factory=list)
    drops: List[RainDrop] = field(default_factory=list)
    ripples: List[Ripple] = field(default_factory=list)
    petals: List[Petal] = field(default_factory=list)
    people: List[Person] = field(default_factory=list)
    snowmen: List[Snowman] = field(default_factory=list)
    trees: List[Plant] = field(default_factory=list)
    lights: List[ChristmasLight] = field(default_factory=list)
    cat: Optional[Cat] = None
    mice: List[Mouse] = field(default_factory=list)
    star_phase: float = 0.0

    def ambient(self):
        return {"snow": self.snow, "rain": self.drops, "petals": self.petals}

    def pools(self):
        return {
            "snowmen": (self.snowmen, winter.MAX_SNOWMEN),
            "ripples": (self.ripples, rain.MAX_RIPPLES),
            "mice": (self.mice, MAX_MICE),
        }


def build_feature(state: CustomState, name: str) -> None:
    rng = state.rng
    if name == "snow":
        state.snow = winter.make_snow(rng)
    elif name == "rain":
        state.drops = rain.make_rain(rng)
        state.ripples = []
    elif name == "sakura":
        state.petals = sakura.make_petals(rng)
    elif name == "people":
        state.people = winter.make_people(state, 8)
        state.snowmen = []
    elif name == "forest":
        state.trees = rain.make_trees(rng, 4)
        state.trees.sort(key=lambda p: p.y)
    elif name == "christmas_tree":
        state.lights = christmas.make_lights(rng, 30)
    elif name == "cat":
        state.cat = Cat(pos=Vec2(-60.0, GROUND_Y_OFFSET - 10))
        state.mice = [cat_mouse.make_mouse(state) for _ in range(START_MICE)]
    else:
        raise ValueError(f"Unknown feature: {name}")


def clear_feature(state: CustomState, name: str) -> None:
    for attr in FEATURE_FIELDS[name]:
        setattr(state, attr, None if attr == "cat" else [])


def init(
    seed: Optional[int] = None,
    config: Optional[CustomSceneConfig] = None,
    previous: Optional[CustomState] = None,
) -> CustomState:
    config = config or CustomSceneConfig()
    config.validate()
    if isinstance(previous, CustomState):
        state = CustomState(
            rng=new_rng(seed) if seed is not None else previous.rng,
            config=config,
            tick=previous.tick,
            time_ms=previous.time_ms,
            next_id=previous.next_id,
            star_phase=previous.star_phase,
        )
    else:
        previous = None
        state = CustomState(rng=new_rng(seed), config=config)

    for name in CUSTOM_FEATURES:
        on = getattr(config, name)
        was_on = previous is not None and getattr(previous.config, name)
        if on and was_on:
            for attr in FEATURE_FIELDS[name]:
                setattr(state, attr, getattr(previous, attr))
        elif on:
            build_feature(state, name)
        else:
            clear_feature(state, name)
    return state


def update(state: CustomState, dt: float = 1.0) -> None:
    cfg = state.config
    rng = state.rng
    if cfg.snow:
        winter.update_snow(rng, state.snow, dt)
    if cfg.rain:
        rain.update_rain(rng, state.drops, state.ripples, state.trees if cfg.forest else [], dt)
    if cfg.sakura:
        sakura.update_petals(rng, state.petals, state.time_ms, dt)
    if cfg.people:
        winter.update_villagers(state, state.people, state.snowmen, dt)
    if cfg.christmas_tree:
        christmas.update_lights(state.lights, dt)
        state.star_phase = (state.star_phase + 0.05 * dt) % math.tau
    if cfg.cat and state.cat is not None:
        cat_mouse.update_chase(state, state.cat, state.mice, MAX_MICE, dt)
    state.advance(dt)


def draw_background(surface: Surface, state: CustomState) -> None:
    R = GLOBE_RADIUS
    bg = state.config.background_bgr
    sky = LinearGradient(0, -R, 0, R, [(0.0, darken(bg, 0.3), 1.0), (1.0, lighten(bg, 0.15), 1.0)])
    surface.fill_circle(0, 0, R, sky)


def draw_terrain(surface: Surface, state: CustomState) -> None:
    ground = hex_to_bgr("#f1f5f9") if state.config.snow else hex_to_bgr("#3f6212")
    surface.fill_ellipse(0, GROUND_Y_OFFSET, GLOBE_RADIUS - 20, GLOBE_RADIUS * 0.35, ground)
    if state.config.rain:
        rain.draw_ripples(surface, state.ripples)


def draw_entities(surface: Surface, state: CustomState) -> None:
    items: List[Tuple[float, str, object]] = []
    items += [(t.y, "tree", t) for t in state.trees]
    items += [(p.pos.y, "person", p) for p in state.people]
    items += [(s.pos.y, "snowman", s) for s in state.snowmen]
    items += [(m.pos.y, "mouse", m) for m in state.mice]
    if state.cat is not None:
        items.append((state.cat.pos.y, "cat", state.cat))
    if state.config.christmas_tree:
        items.append((christmas.TREE_BASE_Y, "xmas", None))

    for _, kind, item in by_depth(items, key=lambda it: it[0]):
        if kind == "tree":
            rain.draw_plant(surface, item)
        elif kind == "person":
            winter.draw_person(surface, item)
        elif kind == "snowman":
            winter.draw_snowman(surface, item)
        elif kind == "mouse":
            cat_mouse.draw_mouse(surface, item)
        elif kind == "cat":
            cat_mouse.draw_cat(surface, item)
        else:
            christmas.draw_christmas_tree(surface, state.lights, state.star_phase)


def draw_weather(surface: Surface, state: CustomState) -> None:
    if state.config.rain:
        rain.draw_rain(surface, state.drops)
    if state.config.snow:
        winter.draw_snow(surface, state.snow)
    if state.config.sakura:
        sakura.draw_petals(surface, state.petals)


def render(surface: Surface, state: CustomState) -> None:
    draw_background(surface, state)
    draw_terrain(surface, state)
    draw_entities(surface, state)
    draw_weather(surface, state)
