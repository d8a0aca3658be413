import pytest

from snowglobe.config import CustomSceneConfig, SceneId
from snowglobe.engine import Globe, default_canvas_size
from snowglobe.util import UnknownSceneError


def test_default_canvas():
    assert default_canvas_size() == 700
    g = Globe("rain", seed=1)
    assert (g.surface.width, g.surface.height) == (700, 700)


def test_no_surface_means_no_work(make_globe):
    g = make_globe("winter")
    g.detach()
    tick = g.state.tick
    assert g.step() is None
    g.update()
    assert g.state.tick == tick
    assert g.render_frame() is None


def test_step_advances_tick_and_frames(make_globe):
    g = make_globe("sakura")
    g.step()
    g.step()
    assert g.state.tick == 2
    assert g.frames == 2
    assert g.state.time_ms == pytest.approx(2 * 1000 / 60)


def test_load_scene_swaps_state_and_text(make_globe):
    g = make_globe("winter", text="Hi")
    assert g.text == "Hi"
    g.load_scene("christmas")
    assert g.scene_id is SceneId.CHRISTMAS
    assert g.text == "Merry Christmas"
    assert len(g.state.lights) == 40
    g.load_scene("wedding", text="A" * 40)
    assert g.text == "A" * 20


def test_load_unknown_scene_leaves_globe_untouched(make_globe):
    g = make_globe("fish")
    state = g.state
    with pytest.raises(UnknownSceneError):
        g.load_scene("moon")
    assert g.scene_id is SceneId.FISH
    assert g.state is state


def test_custom_to_custom_reuses_populations(make_globe):
    g = make_globe("custom")
    snow = g.state.snow
    g.load_scene("custom", custom=CustomSceneConfig(rain=True))
    assert g.state.snow is snow
    assert len(g.state.drops) > 0


def test_seeded_globes_are_reproducible():
    a = Globe("cat_mouse", seed=123, size=200)
    b = Globe("cat_mouse", seed=123, size=200)
    a.advance(200)
    b.advance(200)
    assert [(m.pos.x, m.pos.y) for m in a.state.mice] == [(m.pos.x, m.pos.y) for m in b.state.mice]
