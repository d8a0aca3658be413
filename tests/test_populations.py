import pytest

from snowglobe.config import SceneId
from snowglobe.entities import Confetti, Ripple
from snowglobe.geometry import GLOBE_RADIUS, WRAP_MARGIN
from snowglobe.scenes import get_scene, rain, wedding

LIMIT = GLOBE_RADIUS + WRAP_MARGIN

EXPECTED_AMBIENT = {
    SceneId.WINTER: {"snow": 300},
    SceneId.RAIN: {"rain": 400},
    SceneId.FISH: {"bubbles": 50},
    SceneId.SAKURA: {"petals": 150},
    SceneId.SHANGHAI: {"stars": 50},
    SceneId.CHRISTMAS: {"snow": 120},
    SceneId.EGYPT: {"sand": 60},
    SceneId.CITY_NIGHT: {"stars": 40},
    SceneId.FISHERMAN: {"motes": 80},
    SceneId.BAMBOO: {"leaves": 40},
    SceneId.JELLYFISH: {"plankton": 40},
}


@pytest.mark.parametrize("sid", list(SceneId))
def test_ambient_populations_are_stable_and_bounded(sid):
    scene = get_scene(sid)
    state = scene.init(seed=42)
    counts = {k: len(v) for k, v in state.ambient().items()}
    for _ in range(900):
        scene.update(state, 1.0)
    for name, items in state.ambient().items():
        assert len(items) == counts[name], name
        for it in items:
            assert -LIMIT <= it.x <= LIMIT, (name, it)
            assert -LIMIT <= it.y <= LIMIT, (name, it)


@pytest.mark.parametrize("sid", sorted(EXPECTED_AMBIENT, key=lambda s: s.value))
def test_ambient_counts(sid):
    state = get_scene(sid).init(seed=1)
    assert {k: len(v) for k, v in state.ambient().items()} == EXPECTED_AMBIENT[sid]


@pytest.mark.parametrize("sid", list(SceneId))
def test_pools_respect_caps(sid):
    scene = get_scene(sid)
    state = scene.init(seed=3)
    for _ in range(1500):
        scene.update(state, 1.0)
        for name, (items, cap) in state.pools().items():
            assert len(items) <= cap, name


@pytest.mark.parametrize("sid", list(SceneId))
def test_reinit_restores_initial_counts(sid):
    scene = get_scene(sid)
    first = scene.init(seed=8)
    before = {k: len(v) for k, v in first.ambient().items()}
    pools_before = {k: len(v) for k, (v, _) in first.pools().items()}
    for _ in range(300):
        scene.update(first, 1.0)
    again = scene.init(seed=9)
    assert {k: len(v) for k, v in again.ambient().items()} == before
    assert {k: len(v) for k, (v, _) in again.pools().items()} == pools_before
    assert again.tick == 0 and again.time_ms == 0.0


def test_faded_ripples_removed_in_same_call():
    state = rain.init(seed=1)
    faded = Ripple(0.0, 100.0, 3.0, 8.0, 0.04)
    alive = Ripple(10.0, 100.0, 3.0, 8.0, 0.9)
    state.ripples[:] = [faded, alive]
    ref = state.ripples
    rain.update_rain(state.rng, [], state.ripples, [], 1.0)
    assert faded not in state.ripples
    assert alive in state.ripples
    assert state.ripples is ref


def test_rain_hits_plant_top_and_respawns_above():
    state = rain.init(seed=2)
    tree = state.plants[0]
    drop = state.drops[0]
    drop.x = tree.x
    drop.y = tree.y - tree.height - 1
    drop.speed = 2.0
    state.ripples.clear()
    rain.update_rain(state.rng, [drop], state.ripples, [tree], 1.0)
    assert drop.y < -GLOBE_RADIUS + 1
    assert len(state.ripples) == 1
    assert state.ripples[0].y == tree.y - tree.height


def test_fast_rain_cannot_skip_a_plant_top():
    state = rain.init(seed=2)
    plant = state.plants[0]
    top = plant.y - plant.height
    drop = state.drops[0]
    drop.x = plant.x
    drop.y = top - 5
    drop.speed = 18.0
    state.ripples.clear()
    rain.update_rain(state.rng, [drop], state.ripples, [plant], 1.0)
    assert len(state.ripples) == 1
    assert state.ripples[0].y == top
    assert drop.y < -GLOBE_RADIUS + 1


def test_rain_passing_beside_a_plant_keeps_falling():
    state = rain.init(seed=2)
    plant = state.plants[0]
    drop = state.drops[0]
    drop.x = plant.x + plant.width
    drop.y = -200.0
    drop.speed = 10.0
    rain.update_rain(state.rng, [drop], state.ripples, [plant], 1.0)
    assert drop.y == -190.0


def test_faded_confetti_removed_in_same_call():
    state = wedding.init(seed=4)
    dead = Confetti(0.0, 0.0, (0, 0, 255), 0.5, 1.0, 0.0, life=0.002)
    landed = Confetti(0.0, 150.0, (0, 0, 255), 0.5, 1.0, 0.0)
    ok = Confetti(0.0, -50.0, (0, 0, 255), 0.5, 1.0, 0.0)
    state.confetti[:] = [dead, landed, ok]
    wedding.update_confetti(state, 1.0)
    assert dead not in state.confetti
    assert landed not in state.confetti
    assert ok in state.confetti


def test_ids_unique_within_scene():
    state = get_scene(SceneId.CAT_MOUSE).init(seed=1)
    for _ in range(2000):
        get_scene(SceneId.CAT_MOUSE).update(state, 1.0)
    ids = [m.id for m in state.mice]
    assert len(ids) == len(set(ids))
