"""
Globe geometry: the disc, its ground line, and the vector helpers every scene
uses to place and steer entities.

All coordinates are relative to the globe center, +y pointing down.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass

# ============================================================
# Globe constants
# ============================================================

GLOBE_RADIUS = 300.0
GROUND_Y_OFFSET = 100.0
# Ambient particles may sit this far outside the disc before they wrap.
WRAP_MARGIN = 60.0
SPAWN_Y_SQUASH = 0.35


@dataclass
class Vec2:
    x: float = 0.0
    y: float = 0.0

    def copy(self) -> "Vec2":
        return Vec2(self.x, self.y)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def __iter__(self):
        yield self.x
        yield self.y


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    return math.hypot(bx - ax, by - ay)


def bearing(ax: float, ay: float, bx: float, by: float) -> float:
    """Angle in radians of the direction from a to b."""
    return math.atan2(by - ay, bx - ax)


def random_pos_in_globe(
    rng: random.Random,
    ground_offset: float = GROUND_Y_OFFSET,
    radius_modifier: float = 0.0,
) -> Vec2:
    """
    Uniform sample of a squashed disc sitting on the ground line.

    The usable radius is `R - 40 - radius_modifier`; sqrt(u) keeps the density
    uniform over area rather than bunched at the center.
    """
    r = GLOBE_RADIUS - 40.0 - radius_modifier
    angle = rng.random() * math.tau
    dist = math.sqrt(rng.random()) * r
    return Vec2(
        math.cos(angle) * dist,
        ground_offset + math.sin(angle) * dist * SPAWN_Y_SQUASH,
    )


def random_pos_in_disc(rng: random.Random, radius: float) -> Vec2:
    angle = rng.random() * math.tau
    dist = math.sqrt(rng.random()) * radius
    return Vec2(math.cos(angle) * dist, math.sin(angle) * dist)


def project_inside(pos: Vec2, limit: float) -> bool:
    """Move a point lying outside radius `limit` radially back onto that circle."""
    r = math.hypot(pos.x, pos.y)
    if r <= limit:
        return False
    k = limit / r
    pos.x *= k
    pos.y *= k
    return True


def reflect_inside(pos: Vec2, vel: Vec2, limit: float) -> bool:
    """
    Keep a point inside radius `limit`: put it back on the circle and reverse
    its velocity. Returns True when a reflection happened.
    """
    if not project_inside(pos, limit):
        return False
    vel.x = -vel.x
    vel.y = -vel.y
    return True
