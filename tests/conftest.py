"""Pytest configuration and shared fixtures."""

import random
import pytest

from core.utils import sampling_stream


@pytest.fixture
def stream():
    """Bind a seeded random stream to the test thread."""
    with sampling_stream(random.Random(1234)) as rng:
        yield rng


@pytest.fixture(scope="session")
def renderer():
    from renderer.raytracer import Renderer
    r = Renderer(workers=3)
    yield r
    r.shutdown()
