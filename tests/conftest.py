import io

import numpy as np
import pytest
from PIL import Image

from luma_converter.models.image_model import PixelBuffer


def _make_buffer(width: int, height: int, seed: int = 0) -> PixelBuffer:
    rng = np.random.default_rng(seed)
    data = rng.integers(0, 256, size=width * height * 4, dtype=np.uint8).tobytes()
    return PixelBuffer(width=width, height=height, data=data)


def _png_bytes(image: Image.Image) -> bytes:
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def make_buffer():
    return _make_buffer


@pytest.fixture
def to_png():
    return _png_bytes


@pytest.fixture
def random_buffer() -> PixelBuffer:
    return _make_buffer(7, 5, seed=42)


@pytest.fixture
def sample_png() -> bytes:
    rng = np.random.default_rng(7)
    arr = rng.integers(0, 256, size=(6, 9, 4), dtype=np.uint8)
    return _png_bytes(Image.fromarray(arr))
