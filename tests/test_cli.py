import cv2
import pytest

from snowglobe import cli


def test_scenes_lists_all(capsys):
    cli.main(["scenes"])
    out = capsys.readouterr().out
    assert "winter" in out and "jellyfish" in out and "custom" in out
    assert len(out.strip().splitlines()) == 16


def test_still_writes_png(tmp_path):
    out = tmp_path / "globe.png"
    cli.main(["still", "carousel", "--ticks", "5", "--seed", "1", "--size", "300", "--out", str(out)])
    img = cv2.imread(str(out))
    assert img is not None
    assert img.shape == (300, 300, 3)


def test_unknown_scene_exits(capsys):
    with pytest.raises(SystemExit):
        cli.main(["still", "moon", "--ticks", "1"])
    assert "Unknown scene" in capsys.readouterr().err


def test_custom_flags_build_config():
    ap = cli.build_parser()
    args = ap.parse_args(
        ["record", "custom", "--features", "snow,christmas-tree,cat", "--base-color", "#101010", "--format", "webm"]
    )
    cfg = cli.custom_config_from_args(args)
    assert cfg.enabled() == {"snow", "christmas_tree", "cat"}
    assert cfg.base_color == "#101010"


def test_bad_feature_exits(capsys):
    with pytest.raises(SystemExit):
        cli.main(["still", "custom", "--features", "lava", "--ticks", "1"])
