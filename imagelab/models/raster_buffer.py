from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from ..errors import InvalidInput

SUPPORTED_CHANNELS = (1, 3, 4)


@dataclass
class RasterBuffer:
    """
    Simple data object: decoded uint8 pixels, nothing else.
    1 channel = gray (H, W), 3 = RGB, 4 = RGBA.  No OpenCV logic in this file.
    """
    pixels: np.ndarray # Shape (H, W) or (H, W, 3|4), dtype uint8, RGB order.

    def __post_init__(self):
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray):
            raise InvalidInput(f"Pixels must be a numpy array, got {type(pixels).__name__}")
        if pixels.dtype != np.uint8:
            raise InvalidInput(f"Pixels must be uint8, got {pixels.dtype}")
        if pixels.ndim == 3 and pixels.shape[2] == 1:
            pixels = pixels[:, :, 0]
        if pixels.ndim not in (2, 3):
            raise InvalidInput(f"Pixels must be 2-D or 3-D, got shape {pixels.shape}")
        if pixels.ndim == 3 and pixels.shape[2] not in SUPPORTED_CHANNELS:
            raise InvalidInput(f"Unsupported channel count: {pixels.shape[2]}")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise InvalidInput(f"Zero-sized buffer: {pixels.shape[1]}x{pixels.shape[0]}")
        self.pixels = np.ascontiguousarray(pixels)

    @classmethod
    def from_bytes(cls, width: int, height: int, channels: int, data: bytes) -> RasterBuffer:
        """Build a buffer from a raw row-major byte buffer."""
        if channels not in SUPPORTED_CHANNELS:
            raise InvalidInput(f"Unsupported channel count: {channels}")
        if width <= 0 or height <= 0:
            raise InvalidInput(f"Zero-sized buffer: {width}x{height}")
        expected = width * height * channels
        if len(data) != expected:
            raise InvalidInput(f"Expected {expected} bytes for {width}x{height}x{channels}, got {len(data)}")

        flat = np.frombuffer(data, dtype=np.uint8).copy()
        shape = (height, width) if channels == 1 else (height, width, channels)
        return cls(flat.reshape(shape))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[2])

    @property
    def size(self):
        """(width, height), the order OpenCV expects for dsize."""
        return self.width, self.height

    @property
    def pixel_data(self) -> bytes:
        return self.pixels.tobytes()
