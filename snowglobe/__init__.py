"""Snow globe dioramas: animated scenes inside a glass sphere, with GIF and video export."""

from .capture import CaptureController, CaptureResult
from .config import CustomSceneConfig, SceneId
from .engine import Globe
from .scheduler import RenderLoop

__version__ = "0.1.0"

__all__ = [
    "CaptureController",
    "CaptureResult",
    "CustomSceneConfig",
    "Globe",
    "RenderLoop",
    "SceneId",
    "__version__",
]
