from snowglobe.entities import Person, PersonState, Snowman
from snowglobe.geometry import Vec2
from snowglobe.scenes import winter


def builder_at(state, snowman):
    p = Person(
        id=state.mint_id(),
        pos=Vec2(snowman.pos.x + 15, snowman.pos.y),
        velocity=Vec2(),
        color=(0, 0, 255),
        size=8.0,
        state=PersonState.BUILDING,
        target_entity_id=snowman.id,
        state_timer=winter.BUILD_TICKS,
    )
    return p


def test_init_counts():
    state = winter.init(seed=7)
    assert len(state.snow) == winter.SNOW_COUNT
    assert len(state.people) == winter.PERSON_COUNT
    assert state.snowmen == []
    assert len({p.id for p in state.people}) == winter.PERSON_COUNT


def test_builder_completes_snowman_then_goes_idle():
    state = winter.init(seed=1)
    s = Snowman(id=state.mint_id(), pos=Vec2(0.0, 100.0))
    p = builder_at(state, s)
    people, snowmen = [p], [s]

    ticks = 0
    while not s.is_complete and ticks < 400:
        winter.update_villagers(state, people, snowmen, 1.0)
        ticks += 1

    assert s.is_complete
    assert s.progress == 1.0
    assert 195 <= ticks <= 205
    assert p.state == PersonState.IDLE
    assert p.target_entity_id is None
    # a builder protects the snowman from abandoned-decay
    assert s.health == 1.0


def test_builder_whose_snowman_vanished_goes_idle():
    state = winter.init(seed=2)
    s = Snowman(id=state.mint_id(), pos=Vec2(0.0, 100.0))
    p = builder_at(state, s)
    winter.step_person(state, p, [], 1.0)
    assert p.state == PersonState.IDLE
    assert p.target_entity_id is None
    assert p.target is None


def test_abandoned_snowman_melts_and_is_removed():
    state = winter.init(seed=3)
    s = Snowman(id=state.mint_id(), pos=Vec2(0.0, 100.0), progress=0.3)
    snowmen = [s]
    ref = snowmen
    for _ in range(499):
        winter.update_villagers(state, [], snowmen, 1.0)
    assert snowmen == [s]
    for _ in range(3):
        winter.update_villagers(state, [], snowmen, 1.0)
    assert snowmen == []
    assert ref is snowmen


def test_completed_snowman_decays_slowly():
    s = Snowman(id=1, pos=Vec2(), progress=1.0, is_complete=True)
    out = winter.decay_snowmen([], [s], 100.0)
    assert out == [s]
    assert abs(s.health - 0.95) < 1e-9


def test_snowmen_never_exceed_cap():
    state = winter.init(seed=11)
    for _ in range(3000):
        winter.update(state)
        assert len(state.snowmen) <= winter.MAX_SNOWMEN
        ids = [s.id for s in state.snowmen]
        assert len(ids) == len(set(ids))
