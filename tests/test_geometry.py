import math
import random

import pytest

from snowglobe.geometry import (
    GLOBE_RADIUS,
    GROUND_Y_OFFSET,
    SPAWN_Y_SQUASH,
    Vec2,
    project_inside,
    random_pos_in_disc,
    random_pos_in_globe,
    reflect_inside,
)


def test_random_pos_in_globe_stays_in_squashed_disc():
    rng = random.Random(3)
    r = GLOBE_RADIUS - 40
    for _ in range(2000):
        p = random_pos_in_globe(rng)
        dx = p.x / r
        dy = (p.y - GROUND_Y_OFFSET) / (r * SPAWN_Y_SQUASH)
        assert dx * dx + dy * dy <= 1.0 + 1e-9


def test_random_pos_in_globe_radius_modifier_shrinks_area():
    rng = random.Random(4)
    for _ in range(500):
        p = random_pos_in_globe(rng, 0.0, 100.0)
        assert abs(p.x) <= GLOBE_RADIUS - 140 + 1e-9


def test_random_pos_in_disc():
    rng = random.Random(5)
    for _ in range(500):
        p = random_pos_in_disc(rng, 50.0)
        assert math.hypot(p.x, p.y) <= 50.0 + 1e-9


def test_reflect_inside_snaps_to_rim_and_reverses():
    pos, vel = Vec2(300.0, 0.0), Vec2(1.0, -2.0)
    assert reflect_inside(pos, vel, 270.0)
    assert pos.x == pytest.approx(270.0)
    assert pos.y == 0.0
    assert (vel.x, vel.y) == (-1.0, 2.0)
    assert not reflect_inside(Vec2(10.0, 10.0), Vec2(), 270.0)


def test_project_inside_keeps_direction():
    pos = Vec2(300.0, 400.0)
    assert project_inside(pos, 100.0)
    assert (pos.x, pos.y) == pytest.approx((60.0, 80.0))
    inside = Vec2(3.0, 4.0)
    assert not project_inside(inside, 100.0)
    assert (inside.x, inside.y) == (3.0, 4.0)
