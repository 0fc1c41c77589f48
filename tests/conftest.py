from io import BytesIO
import numpy as np
import pytest
from PIL import Image as PILImage

from imagelab.models.raster_buffer import RasterBuffer
from imagelab.services.matrix_scope import MatrixRegistry


@pytest.fixture
def rng() -> np.random.RandomState:
    return np.random.RandomState(42)


@pytest.fixture
def make_image(rng):
    """Factory: random RasterBuffer of a given size, channel count and value range."""
    def _make(width: int = 32, height: int = 24, channels: int = 3, low: int = 0, high: int = 256) -> RasterBuffer:
        shape = (height, width) if channels == 1 else (height, width, channels)
        return RasterBuffer(rng.randint(low, high, size=shape).astype(np.uint8))
    return _make


@pytest.fixture
def registry() -> MatrixRegistry:
    """Private leak counter so tests do not depend on each other."""
    return MatrixRegistry()


@pytest.fixture
def edge_image() -> RasterBuffer:
    """Left half black, right half white: one vertical edge."""
    pixels = np.zeros((20, 20, 3), dtype=np.uint8)
    pixels[:, 10:, :] = 255
    return RasterBuffer(pixels)


def png_bytes(pixels: np.ndarray) -> bytes:
    buffer = BytesIO()
    PILImage.fromarray(pixels).save(buffer, format="PNG")
    return buffer.getvalue()


def decode_png(data: bytes) -> np.ndarray:
    return np.array(PILImage.open(BytesIO(data)))
