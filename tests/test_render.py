import numpy as np
import pytest

from snowglobe import engine
from snowglobe.config import CustomSceneConfig, SceneId
from snowglobe.scenes import winter


def test_render_phases_in_order_then_chrome(monkeypatch, make_globe):
    calls = []
    globe = make_globe("winter")
    for name in ("draw_background", "draw_terrain", "draw_entities", "draw_weather"):
        monkeypatch.setattr(winter, name, lambda s, st, _n=name: calls.append(_n))

    def fake_chrome(surface, text, base, ink):
        calls.append(("chrome", surface.clip_depth, text))

    monkeypatch.setattr(engine, "draw_chrome", fake_chrome)
    globe.render_frame()
    assert calls == [
        "draw_background",
        "draw_terrain",
        "draw_entities",
        "draw_weather",
        ("chrome", 0, "Magic World"),
    ]


def test_clip_released_when_scene_raises(monkeypatch, make_globe):
    globe = make_globe("winter")

    def boom(surface, state):
        raise RuntimeError("paint failed")

    monkeypatch.setattr(winter, "draw_terrain", boom)
    with pytest.raises(RuntimeError):
        globe.render_frame()
    assert globe.surface.clip_depth == 0
    assert (globe.surface.ox, globe.surface.oy) == (0.0, 0.0)


@pytest.mark.parametrize("sid", list(SceneId))
def test_every_scene_renders(sid):
    from snowglobe.engine import Globe

    globe = Globe(sid, seed=1, size=700)
    for _ in range(3):
        frame = globe.step()
    assert frame.shape == (700, 700, 3)
    assert frame.dtype == np.uint8
    assert frame.any()
    # corners are outside the globe and the pedestal
    assert not frame[0, 0].any()
    assert globe.surface.clip_depth == 0


def test_custom_chrome_uses_config_colors(monkeypatch, make_globe):
    seen = {}
    cfg = CustomSceneConfig(base_color="#112233", text_color="#445566")
    globe = make_globe("custom", custom=cfg)
    monkeypatch.setattr(engine, "draw_chrome", lambda s, t, b, i: seen.update(base=b, ink=i))
    globe.render_frame()
    assert seen == {"base": (0x33, 0x22, 0x11), "ink": (0x66, 0x55, 0x44)}
