"""
Entity records for every population a globe can hold.

Everything is a plain mutable dataclass: scenes update their populations in
place each tick. Colors are BGR tuples, ready for OpenCV.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .colors import BGR
from .geometry import Vec2


class PersonState(str, Enum):
    IDLE = "idle"
    WALKING = "walking"
    BUILDING = "building"
    FIGHTING = "fighting"


class CatState(str, Enum):
    IDLE = "idle"
    HUNTING = "hunting"
    EATING = "eating"


class PlantKind(str, Enum):
    TREE = "tree"
    FLOWER = "flower"


class FishKind(str, Enum):
    FAT = "fat"
    LONG = "long"
    TINY = "tiny"


class BoatKind(str, Enum):
    CRUISE = "cruise"
    CARGO = "cargo"


class LightKind(str, Enum):
    HEADLIGHT = "headlight"
    TAILLIGHT = "taillight"


# ============================================================
# Ambient particles
# ============================================================


@dataclass
class Snowflake:
    x: float
    y: float
    radius: float
    speed: float
    wind: float
    opacity: float


@dataclass
class RainDrop:
    x: float
    y: float
    speed: float
    length: float


@dataclass
class Ripple:
    x: float
    y: float
    radius: float
    max_radius: float
    opacity: float


@dataclass
class Bubble:
    x: float
    y: float
    size: float
    speed: float


@dataclass
class Petal:
    x: float
    y: float
    size: float
    speed_x: float
    speed_y: float
    angle: float
    spin_speed: float


@dataclass
class Star:
    x: float
    y: float
    opacity: float


@dataclass
class InkParticle:
    x: float
    y: float
    radius: float
    speed_x: float
    speed_y: float
    opacity: float


@dataclass
class BambooLeaf:
    x: float
    y: float
    angle: float
    vx: float
    vy: float
    opacity: float
    spin: float = 0.02


@dataclass
class SandGrain:
    x: float
    y: float
    speed: float
    size: float
    opacity: float


@dataclass
class Plankton:
    x: float
    y: float
    size: float
    speed: float
    opacity: float


# ============================================================
# Agents
# ============================================================


@dataclass
class Person:
    id: int
    pos: Vec2
    velocity: Vec2
    color: BGR
    size: float
    state: PersonState = PersonState.IDLE
    target: Optional[Vec2] = None
    target_entity_id: Optional[int] = None
    state_timer: float = 0.0


@dataclass
class Snowman:
    id: int
    pos: Vec2
    progress: float = 0.0
    health: float = 1.0
    is_complete: bool = False


@dataclass
class Plant:
    x: float
    y: float
    kind: PlantKind
    color: BGR
    height: float
    width: float


@dataclass
class Fish:
    id: int
    pos: Vec2
    velocity: Vec2
    color: BGR
    size: float
    kind: FishKind
    tail_phase: float = 0.0


@dataclass
class CarouselHorse:
    angle: float
    color: BGR
    rider_color: Optional[BGR] = None
    y_offset: float = 0.0


@dataclass
class CarouselLight:
    angle: float
    color: BGR
    is_on: bool = True


@dataclass
class Boat:
    x: float
    y: float
    speed: float
    direction: int
    kind: BoatKind


@dataclass
class Cat:
    pos: Vec2
    state: CatState = CatState.IDLE
    timer: float = 0.0
    target_mouse_id: Optional[int] = None
    angle: float = 0.0


@dataclass
class Mouse:
    id: int
    pos: Vec2
    velocity: Vec2
    color: BGR
    panic: bool = False


@dataclass
class Candle:
    x: float
    y: float
    color: BGR
    flicker: float = 1.0


@dataclass
class WishParticle:
    x: float
    y: float
    vx: float
    vy: float
    color: BGR
    life: float = 1.0


@dataclass
class ChristmasLight:
    x: float
    y: float
    color: BGR
    phase: float
    speed: float


@dataclass
class Gift:
    x: float
    y: float
    width: float
    height: float
    color: BGR
    ribbon_color: BGR


@dataclass
class Confetti:
    x: float
    y: float
    color: BGR
    speed_y: float
    sway: float
    sway_offset: float
    life: float = 1.0


@dataclass
class Camel:
    x: float
    y: float
    speed: float
    scale: float
    gait_offset: float = 0.0


@dataclass
class Skyscraper:
    x: float
    width: float
    height: float
    cols: int
    windows: List[bool] = field(default_factory=list)


@dataclass
class CityCar:
    x: float
    y: float
    lane: int
    speed: float
    color: BGR
    kind: LightKind


@dataclass
class InkMountain:
    x: float
    y: float
    width: float
    height: float
    color: BGR


@dataclass
class BambooStalk:
    x: float
    width: float
    color: BGR
    segments: int
    sway: float
    sway_offset: float
    height: float = 260.0


@dataclass
class Jellyfish:
    x: float
    y: float
    vx: float
    vy: float
    size: float
    color: BGR
    tentacle_phase: float = 0.0
    is_glowing: bool = False
    glow_timer: float = 0.0
