import asyncio

import pytest

from snowglobe.engine import Globe
from snowglobe.surface import Surface


async def no_sleep(_seconds: float) -> None:
    # yield to the event loop without waiting
    await asyncio.sleep(0)


@pytest.fixture
def small_surface():
    return Surface(200, 200)


@pytest.fixture
def make_globe():
    def _make(scene="winter", seed=1, size=200, **kw):
        return Globe(scene, seed=seed, size=size, **kw)

    return _make
