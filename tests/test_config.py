import argparse

import pytest

from snowglobe.config import (
    CAPTURE_PRESETS,
    CustomSceneConfig,
    SceneId,
    apply_preset_defaults,
    capture_settings,
    clip_engraving,
    default_text_for,
)
from snowglobe.util import UnknownSceneError


def test_scene_id_parse_normalizes():
    assert SceneId.parse("City-Night") is SceneId.CITY_NIGHT
    assert SceneId.parse("cat mouse") is SceneId.CAT_MOUSE
    assert SceneId.parse(SceneId.FISH) is SceneId.FISH
    with pytest.raises(UnknownSceneError):
        SceneId.parse("atlantis")


def test_sixteen_scenes_with_texts():
    assert len(list(SceneId)) == 16
    for sid in SceneId:
        assert 0 < len(default_text_for(sid)) <= 20


def test_clip_engraving():
    assert clip_engraving("x" * 30) == "x" * 20
    assert clip_engraving("Hello") == "Hello"


def test_custom_config_from_mapping_accepts_camel_case_and_string_bools():
    cfg = CustomSceneConfig.from_mapping(
        {"snow": "false", "christmasTree": True, "cat": "yes", "baseColor": "#112233"}
    )
    assert cfg.snow is False
    assert cfg.christmas_tree is True
    assert cfg.cat is True
    assert cfg.base_bgr == (0x33, 0x22, 0x11)


def test_custom_config_rejects_unknown_keys_and_bad_colors():
    with pytest.raises(ValueError):
        CustomSceneConfig.from_mapping({"lava": True})
    with pytest.raises(ValueError):
        CustomSceneConfig.from_mapping({"textColor": "nope"})


def test_with_features():
    cfg = CustomSceneConfig().with_features({"rain", "cat"})
    assert cfg.enabled() == {"rain", "cat"}
    with pytest.raises(ValueError):
        CustomSceneConfig().with_features({"volcano"})


def test_capture_settings_presets_and_overrides():
    gif = capture_settings("gif")
    assert (gif.fps, gif.duration_ms, gif.scale) == (15.0, 3000, 0.5)
    assert gif.frame_count == 45
    webm = capture_settings("webm", fps=None, duration_ms=1000)
    assert webm.fps == 30.0 and webm.frame_count == 30
    assert webm.extension == "webm"
    with pytest.raises(ValueError):
        capture_settings("avi")


def test_apply_preset_defaults_keeps_explicit_flags():
    ns = argparse.Namespace(format="mp4", fps=24.0, duration_ms=None, scale=None, encoder=None, crf=None)
    apply_preset_defaults(ns, ["record", "winter", "--format", "mp4", "--fps", "24"])
    assert ns.fps == 24.0
    assert ns.duration_ms == CAPTURE_PRESETS["mp4"]["duration_ms"]
    assert ns.encoder == "libx264"
