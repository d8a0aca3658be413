from __future__ import annotations

import argparse
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping

from .colors import BGR, parse_color
from .util import UnknownSceneError, bool_flag

CANVAS_PADDING = 100
MAX_ENGRAVING_CHARS = 20
DEFAULT_FPS = 60


class SceneId(str, Enum):
    WINTER = "winter"
    RAIN = "rain"
    FISH = "fish"
    SAKURA = "sakura"
    CAROUSEL = "carousel"
    SHANGHAI = "shanghai"
    CAT_MOUSE = "cat_mouse"
    BIRTHDAY = "birthday"
    CHRISTMAS = "christmas"
    WEDDING = "wedding"
    EGYPT = "egypt"
    CITY_NIGHT = "city_night"
    FISHERMAN = "fisherman"
    BAMBOO = "bamboo"
    JELLYFISH = "jellyfish"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, text: "str | SceneId") -> "SceneId":
        if isinstance(text, SceneId):
            return text
        key = str(text).strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            raise UnknownSceneError(f"Unknown scene: {text!r}") from None


SCENE_LABELS: Dict[SceneId, str] = {
    SceneId.WINTER: "Winter",
    SceneId.RAIN: "Rain",
    SceneId.FISH: "Aquarium",
    SceneId.SAKURA: "Sakura",
    SceneId.CAROUSEL: "Carousel",
    SceneId.SHANGHAI: "Shanghai",
    SceneId.CAT_MOUSE: "Cat & Mouse",
    SceneId.BIRTHDAY: "Birthday",
    SceneId.CHRISTMAS: "Christmas",
    SceneId.WEDDING: "Wedding",
    SceneId.EGYPT: "Egypt",
    SceneId.CITY_NIGHT: "City Night",
    SceneId.FISHERMAN: "Ink River",
    SceneId.BAMBOO: "Bamboo",
    SceneId.JELLYFISH: "Jellyfish",
    SceneId.CUSTOM: "DIY",
}

DEFAULT_TEXT = "Magic World"
SCENE_TEXTS: Dict[SceneId, str] = {
    SceneId.CHRISTMAS: "Merry Christmas",
    SceneId.BIRTHDAY: "Happy Birthday",
    SceneId.SHANGHAI: "I Love Shanghai",
    SceneId.WEDDING: "Forever Love",
    SceneId.EGYPT: "Ancient Sands",
    SceneId.CITY_NIGHT: "City of Stars",
    SceneId.CAROUSEL: "Dreamland",
    SceneId.FISHERMAN: "Inner Peace",
    SceneId.BAMBOO: "Zen Garden",
    SceneId.JELLYFISH: "Deep Ocean",
    SceneId.CUSTOM: "My World",
}


def default_text_for(scene: SceneId) -> str:
    return SCENE_TEXTS.get(scene, DEFAULT_TEXT)


def clip_engraving(text: str) -> str:
    return (text or "")[:MAX_ENGRAVING_CHARS]


# ============================================================
# Custom scene
# ============================================================

CUSTOM_FEATURES = ("snow", "rain", "sakura", "people", "forest", "christmas_tree", "cat")

_CAMEL_KEYS = {
    "christmasTree": "christmas_tree",
    "backgroundColor": "background_color",
    "baseColor": "base_color",
    "textColor": "text_color",
}


@dataclass(frozen=True)
class CustomSceneConfig:
    snow: bool = True
    rain: bool = False
    sakura: bool = False
    people: bool = True
    forest: bool = True
    christmas_tree: bool = False
    cat: bool = False
    background_color: str = "#0f172a"
    base_color: str = "#78350f"
    text_color: str = "#fbbf24"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CustomSceneConfig":
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _CAMEL_KEYS.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown custom scene option: {key!r}")
            if name in CUSTOM_FEATURES and isinstance(value, str):
                value = bool_flag(value)
            kwargs[name] = value
        cfg = cls(**kwargs)
        cfg.validate()
        return cfg

    def validate(self) -> None:
        for name in ("background_color", "base_color", "text_color"):
            parse_color(getattr(self, name))

    def enabled(self) -> set[str]:
        return {name for name in CUSTOM_FEATURES if getattr(self, name)}

    def with_features(self, features: "set[str] | list[str]") -> "CustomSceneConfig":
        unknown = set(features) - set(CUSTOM_FEATURES)
        if unknown:
            raise ValueError(f"Unknown feature(s): {', '.join(sorted(unknown))}")
        return replace(self, **{name: name in features for name in CUSTOM_FEATURES})

    @property
    def background_bgr(self) -> BGR:
        return parse_color(self.background_color)[0]

    @property
    def base_bgr(self) -> BGR:
        return parse_color(self.base_color)[0]

    @property
    def text_bgr(self) -> BGR:
        return parse_color(self.text_color)[0]


# ============================================================
# Capture presets
# ============================================================


@dataclass(frozen=True)
class CaptureSettings:
    fmt: str
    fps: float
    duration_ms: int
    scale: float = 1.0
    encoder: str = "libvpx-vp9"
    crf: int = 30

    @property
    def extension(self) -> str:
        return self.fmt

    @property
    def frame_count(self) -> int:
        return max(1, int(round(self.duration_ms / 1000.0 * self.fps)))


CAPTURE_PRESETS: Dict[str, Dict[str, Any]] = {
    "gif": dict(fps=15.0, duration_ms=3000, scale=0.5, encoder="gif", crf=0),
    "webm": dict(fps=30.0, duration_ms=5000, scale=1.0, encoder="libvpx-vp9", crf=30),
    "mp4": dict(fps=30.0, duration_ms=5000, scale=1.0, encoder="libx264", crf=19),
}


def capture_settings(fmt: str, **overrides: Any) -> CaptureSettings:
    preset = CAPTURE_PRESETS.get(fmt)
    if preset is None:
        raise ValueError(f"Unknown capture format: {fmt!r} (use {'|'.join(CAPTURE_PRESETS)})")
    values = dict(preset)
    values.update({k: v for k, v in overrides.items() if v is not None})
    return CaptureSettings(fmt=fmt, **values)


def apply_preset_defaults(ns: argparse.Namespace, argv: list[str]) -> None:
    """Fill capture options the user did not pass explicitly from the format preset."""
    preset = CAPTURE_PRESETS.get(ns.format)
    if not preset:
        raise SystemExit(f"Unknown format: {ns.format}")

    provided = set()
    for a in argv:
        if a.startswith("--"):
            provided.add(a.split("=")[0])

    def flag_for_attr(attr: str) -> str:
        return "--" + attr.replace("_", "-")

    for attr, val in preset.items():
        if flag_for_attr(attr) not in provided or getattr(ns, attr, None) is None:
            setattr(ns, attr, val)
