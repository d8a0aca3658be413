from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Callable, Dict

from ..config import SceneId
from ..util import UnknownSceneError
from . import (
    aquarium,
    bamboo,
    birthday,
    carousel,
    cat_mouse,
    christmas,
    city_night,
    custom,
    desert,
    ink_river,
    jellyfish,
    rain,
    sakura,
    skyline,
    wedding,
    winter,
)
from .base import SceneState


@dataclass(frozen=True)
class SceneDef:
    scene_id: SceneId
    init: Callable[..., SceneState]
    update: Callable[..., None]
    render: Callable[..., None]

    @classmethod
    def from_module(cls, scene_id: SceneId, module: ModuleType) -> "SceneDef":
        return cls(scene_id, module.init, module.update, module.render)


_MODULES: Dict[SceneId, ModuleType] = {
    SceneId.WINTER: winter,
    SceneId.RAIN: rain,
    SceneId.FISH: aquarium,
    SceneId.SAKURA: sakura,
    SceneId.CAROUSEL: carousel,
    SceneId.SHANGHAI: skyline,
    SceneId.CAT_MOUSE: cat_mouse,
    SceneId.BIRTHDAY: birthday,
    SceneId.CHRISTMAS: christmas,
    SceneId.WEDDING: wedding,
    SceneId.EGYPT: desert,
    SceneId.CITY_NIGHT: city_night,
    SceneId.FISHERMAN: ink_river,
    SceneId.BAMBOO: bamboo,
    SceneId.JELLYFISH: jellyfish,
    SceneId.CUSTOM: custom,
}

SCENES: Dict[SceneId, SceneDef] = {sid: SceneDef.from_module(sid, mod) for sid, mod in _MODULES.items()}


def get_scene(scene_id: "SceneId | str") -> SceneDef:
    sid = SceneId.parse(scene_id)
    try:
        return SCENES[sid]
    except KeyError:
        raise UnknownSceneError(f"No scene registered for {sid.value!r}") from None


__all__ = ["SCENES", "SceneDef", "SceneState", "get_scene"]
