from snowglobe.config import CustomSceneConfig
from snowglobe.scenes import custom


def cfg(**features):
    return CustomSceneConfig().with_features({k for k, v in features.items() if v})


def test_defaults_build_snow_people_forest():
    state = custom.init(seed=1)
    assert len(state.snow) > 0
    assert len(state.people) > 0
    assert len(state.trees) > 0
    assert state.drops == [] and state.petals == [] and state.lights == []
    assert state.cat is None and state.mice == []


def test_toggle_that_stays_on_keeps_population_objects():
    first = custom.init(seed=2, config=cfg(snow=True, people=True))
    for _ in range(30):
        custom.update(first)
    snow, people = first.snow, first.people
    flake = snow[0]
    y = flake.y

    second = custom.init(config=cfg(snow=True, people=True, rain=True), previous=first)
    assert second.snow is snow
    assert second.people is people
    assert second.snow[0] is flake and flake.y == y
    assert len(second.drops) == 400
    assert second.tick == first.tick


def test_disabled_toggle_clears_population():
    first = custom.init(seed=3, config=cfg(snow=True, cat=True))
    assert first.cat is not None and len(first.mice) == custom.START_MICE
    second = custom.init(config=cfg(snow=True), previous=first)
    assert second.cat is None
    assert second.mice == []
    assert second.snow is first.snow


def test_reenabled_toggle_rebuilds():
    first = custom.init(seed=4, config=cfg(sakura=True))
    off = custom.init(config=cfg(), previous=first)
    assert off.petals == []
    on = custom.init(config=cfg(sakura=True), previous=off)
    assert len(on.petals) == len(first.petals)
    assert on.petals is not first.petals


def test_disabled_features_are_not_simulated():
    state = custom.init(seed=5, config=cfg(rain=True))
    drops_y = [d.y for d in state.drops]
    state.config = cfg(snow=True)
    custom.update(state)
    assert [d.y for d in state.drops] == drops_y


def test_cat_and_people_pools_capped():
    state = custom.init(seed=6, config=cfg(cat=True, people=True, rain=True, forest=True))
    for _ in range(2000):
        custom.update(state)
        for name, (items, cap) in state.pools().items():
            assert len(items) <= cap, name


def test_ids_keep_counting_across_reinit():
    first = custom.init(seed=7, config=cfg(people=True))
    ids = {p.id for p in first.people}
    second = custom.init(config=cfg(people=True, cat=True), previous=first)
    new_ids = {m.id for m in second.mice}
    assert not ids & new_ids
