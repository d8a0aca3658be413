from snowglobe.config import CustomSceneConfig
from snowglobe.entities import Snowman
from snowglobe.geometry import Vec2
from snowglobe.scenes import cat_mouse, christmas, custom, rain, winter


def record_depths(monkeypatch, module, name, depth_of, log):
    monkeypatch.setattr(module, name, lambda surface, item, *rest: log.append(depth_of(item)))


def test_villagers_and_snowmen_drawn_back_to_front(monkeypatch):
    state = winter.init(seed=4)
    for _ in range(400):
        winter.update(state)
    state.snowmen.append(Snowman(id=state.mint_id(), pos=Vec2(0.0, 150.0), progress=0.5))
    state.snowmen.append(Snowman(id=state.mint_id(), pos=Vec2(40.0, 60.0), progress=0.5))
    drawn = []
    record_depths(monkeypatch, winter, "draw_person", lambda p: p.pos.y, drawn)
    record_depths(monkeypatch, winter, "draw_snowman", lambda s: s.pos.y, drawn)
    winter.draw_villagers(None, state.people, state.snowmen)
    assert len(drawn) == len(state.people) + len(state.snowmen)
    assert drawn == sorted(drawn)


def test_cat_and_mice_drawn_back_to_front(monkeypatch):
    state = cat_mouse.init(seed=5)
    drawn = []
    record_depths(monkeypatch, cat_mouse, "draw_cat", lambda c: c.pos.y, drawn)
    record_depths(monkeypatch, cat_mouse, "draw_mouse", lambda m: m.pos.y, drawn)
    cat_mouse.draw_chase(None, state.cat, state.mice)
    assert len(drawn) == 1 + len(state.mice)
    assert drawn == sorted(drawn)


def test_custom_entities_interleave_by_depth(monkeypatch):
    cfg = CustomSceneConfig(snow=False, people=True, forest=True, christmas_tree=True, cat=True)
    state = custom.init(seed=6, config=cfg)
    drawn = []
    record_depths(monkeypatch, rain, "draw_plant", lambda t: t.y, drawn)
    record_depths(monkeypatch, winter, "draw_person", lambda p: p.pos.y, drawn)
    record_depths(monkeypatch, winter, "draw_snowman", lambda s: s.pos.y, drawn)
    record_depths(monkeypatch, cat_mouse, "draw_mouse", lambda m: m.pos.y, drawn)
    record_depths(monkeypatch, cat_mouse, "draw_cat", lambda c: c.pos.y, drawn)
    monkeypatch.setattr(
        christmas, "draw_christmas_tree", lambda surface, lights, phase, *rest: drawn.append(christmas.TREE_BASE_Y)
    )
    custom.draw_entities(None, state)
    expected = len(state.trees) + len(state.people) + len(state.snowmen) + len(state.mice) + 2
    assert len(drawn) == expected
    assert drawn == sorted(drawn)
