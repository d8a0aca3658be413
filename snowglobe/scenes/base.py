from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from ..colors import BGR
from ..geometry import GLOBE_RADIUS
from ..surface import LinearGradient, Surface

TICK_MS = 1000.0 / 60.0

T = TypeVar("T")


def new_rng(seed: Optional[int]) -> random.Random:
    return random.Random(seed)


def uniform(rng: random.Random, lo: float, hi: float) -> float:
    return lo + rng.random() * (hi - lo)


def signed(rng: random.Random, mag: float) -> float:
    return (rng.random() - 0.5) * 2.0 * mag


@dataclass
class SceneState:
    """Per-scene simulation state: its own RNG, tick clock and id counter."""

    rng: random.Random = field(default_factory=random.Random)
    tick: int = 0
    time_ms: float = 0.0
    next_id: int = 1

    def mint_id(self) -> int:
        nid = self.next_id
        self.next_id += 1
        return nid

    def advance(self, dt: float) -> None:
        self.tick += 1
        self.time_ms += dt * TICK_MS

    def ambient(self) -> Dict[str, List]:
        """Wraparound populations, keyed by name; count is fixed for the life of the state."""
        return {}

    def pools(self) -> Dict[str, Tuple[List, int]]:
        """Spawn/despawn populations with their caps."""
        return {}


def by_depth(items: Iterable[T], key: Callable[[T], float]) -> List[T]:
    """Painter's order: smaller y (further back) first."""
    return sorted(items, key=key)


# ============================================================
# Shared backdrop helpers
# ============================================================


def draw_sky(surface: Surface, top: BGR, bottom: BGR, y0: float = -GLOBE_RADIUS, y1: float = GLOBE_RADIUS) -> None:
    grad = LinearGradient(0, y0, 0, y1, [(0.0, top, 1.0), (1.0, bottom, 1.0)])
    surface.fill_circle(0, 0, GLOBE_RADIUS, grad)


def draw_moon(surface: Surface, x: float, y: float, r: float, color: BGR = (220, 240, 254)) -> None:
    surface.glow(x, y, r * 3.0, color, 0.25)
    surface.fill_circle(x, y, r, color)
