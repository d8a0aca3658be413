import math

import pytest

from snowglobe.entities import Cat, CatState, Mouse
from snowglobe.geometry import Vec2
from snowglobe.scenes import cat_mouse


def test_cat_catches_fleeing_mouse():
    state = cat_mouse.init(seed=5)
    state.max_mice = 1
    state.cat.pos = Vec2(-100.0, 0.0)
    mouse = cat_mouse.make_mouse(state, Vec2(-40.0, 0.0))
    state.mice[:] = [mouse]

    ticks = 0
    while state.cat.state != CatState.EATING and ticks < 500:
        cat_mouse.update(state)
        ticks += 1
        if state.cat.state != CatState.EATING:
            assert mouse.panic

    assert state.cat.state == CatState.EATING
    assert state.cat.timer == cat_mouse.EAT_TICKS
    assert state.cat.target_mouse_id is None
    assert mouse not in state.mice
    assert ticks < 200


def test_cat_rests_after_eating():
    state = cat_mouse.init(seed=6)
    state.mice.clear()
    state.max_mice = 0
    state.cat.state = CatState.EATING
    state.cat.timer = 3.0
    for _ in range(3):
        cat_mouse.update(state)
    assert state.cat.state == CatState.IDLE


def test_cat_idles_without_mice():
    state = cat_mouse.init(seed=6)
    state.mice.clear()
    state.max_mice = 0
    cat_mouse.update(state)
    assert state.cat.state == CatState.IDLE
    assert state.cat.target_mouse_id is None


def test_mouse_population_stays_under_cap():
    state = cat_mouse.init(seed=9)
    assert len(state.mice) == cat_mouse.START_MICE
    for _ in range(5000):
        cat_mouse.update(state)
        assert len(state.mice) <= cat_mouse.MAX_MICE
        for m in state.mice:
            assert abs(m.pos.x) <= 300 and abs(m.pos.y) <= 300


def gap(state):
    m = state.mice[0]
    return math.hypot(state.cat.pos.x - m.pos.x, state.cat.pos.y - m.pos.y)


@pytest.mark.parametrize("seed", range(0, 400, 7))
def test_chase_distance_shrinks_every_tick_until_capture(seed):
    state = cat_mouse.init(seed=seed)
    state.max_mice = 1
    del state.mice[1:]
    prev = gap(state)
    for tick in range(3000):
        cat_mouse.update(state)
        if state.cat.state == CatState.EATING:
            assert state.mice == []
            return
        now = gap(state)
        assert now < prev, (tick, prev, now)
        prev = now
    pytest.fail("cat never caught the mouse")


def test_chase_along_the_rim_keeps_closing_in():
    state = cat_mouse.init(seed=127)
    state.max_mice = 1
    state.cat.pos = Vec2(200.0, 150.0)
    state.mice[:] = [cat_mouse.make_mouse(state, Vec2(cat_mouse.EDGE - 1.0, 0.0))]
    prev = gap(state)
    for _ in range(3000):
        cat_mouse.update(state)
        if state.cat.state == CatState.EATING:
            break
        now = gap(state)
        assert now < prev
        prev = now
        assert math.hypot(state.cat.pos.x, state.cat.pos.y) <= cat_mouse.EDGE + 1e-9
    assert state.cat.state == CatState.EATING


def test_cat_turns_around_at_the_rim():
    cat = Cat(pos=Vec2(268.0, 0.0))
    mouse = Mouse(id=1, pos=Vec2(285.0, 0.0), velocity=Vec2(), color=(0, 0, 0))
    cat_mouse.step_cat(cat, [mouse], 1.0)
    assert cat.pos.x == pytest.approx(cat_mouse.EDGE)
    assert abs(cat.angle) == pytest.approx(math.pi)
    assert cat.state == CatState.HUNTING


def test_cat_eats_when_its_step_closes_the_gap():
    cat = Cat(pos=Vec2(0.0, 0.0))
    mouse = Mouse(id=1, pos=Vec2(11.0, 0.0), velocity=Vec2(), color=(0, 0, 0))
    mice = [mouse]
    cat_mouse.step_cat(cat, mice, 1.0)
    assert cat.state == CatState.EATING
    assert mice == []
