from typing import Tuple
import cv2
import numpy as np

from ..errors import InvalidInput
from ..models.operation_request import OperationKind
from .matrix_scope import MatrixScope

_TO_GRAY = {3: cv2.COLOR_RGB2GRAY, 4: cv2.COLOR_RGBA2GRAY}
_FROM_GRAY = {3: cv2.COLOR_GRAY2RGB, 4: cv2.COLOR_GRAY2RGBA}


def channel_count(pixels: np.ndarray) -> int:
    return 1 if pixels.ndim == 2 else int(pixels.shape[2])


class ColorspaceService:
    """Channel-layout conversions.  Every new matrix is registered with the scope."""

    @staticmethod
    def to_grayscale(pixels: np.ndarray, scope: MatrixScope) -> np.ndarray:
        channels = channel_count(pixels)
        if channels == 1:
            return pixels
        return scope.adopt(cv2.cvtColor(pixels, _TO_GRAY[channels]), "gray")

    @staticmethod
    def restore_channels(gray: np.ndarray, channels: int, scope: MatrixScope) -> np.ndarray:
        """Explicit gray -> RGB/RGBA step (opaque alpha)."""
        if channels == 1:
            return gray
        if channel_count(gray) != 1:
            raise InvalidInput(f"Expected a single-channel matrix, got {channel_count(gray)} channels")
        return scope.adopt(cv2.cvtColor(gray, _FROM_GRAY[channels]), "restored")

    def adapt_for_operation(
            self,
            pixels: np.ndarray,
            kind: OperationKind,
            grayscale_requested: bool,
            scope: MatrixScope,
    ) -> np.ndarray:
        """
        Luminance only for bitwise operators, and only on request.
        Add/Subtract/Blend keep the original channel layout.
        """
        if grayscale_requested and kind.is_bitwise:
            return self.to_grayscale(pixels, scope)
        return pixels

    def to_luminance(self, pixels: np.ndarray, scope: MatrixScope) -> np.ndarray:
        """Gray content, original channel count."""
        channels = channel_count(pixels)
        if channels == 1:
            return pixels
        gray = self.to_grayscale(pixels, scope)
        restored = self.restore_channels(gray, channels, scope)
        scope.release(gray)
        return restored

    def expand(self, pixels: np.ndarray, channels: int, scope: MatrixScope) -> np.ndarray:
        """Widen a matrix to ``channels`` (gray -> RGB(A), RGB -> RGBA)."""
        current = channel_count(pixels)
        if current == channels:
            return pixels
        if current > channels:
            raise InvalidInput(f"Cannot expand {current} channels down to {channels}")
        if current == 1:
            return self.restore_channels(pixels, channels, scope)
        return scope.adopt(cv2.cvtColor(pixels, cv2.COLOR_RGB2RGBA), "rgba")

    def match_channels(self, a: np.ndarray, b: np.ndarray, scope: MatrixScope) -> Tuple[np.ndarray, np.ndarray]:
        """Bring both operands to the wider of their two channel layouts."""
        channels = max(channel_count(a), channel_count(b))
        return self.expand(a, channels, scope), self.expand(b, channels, scope)

    # ─── BGR round trip for OpenCV routines that need it ─────────
    @staticmethod
    def to_bgr(pixels: np.ndarray, scope: MatrixScope) -> np.ndarray:
        channels = channel_count(pixels)
        if channels == 1:
            return pixels
        code = cv2.COLOR_RGB2BGR if channels == 3 else cv2.COLOR_RGBA2BGR
        return scope.adopt(cv2.cvtColor(pixels, code), "bgr")

    @staticmethod
    def from_bgr(bgr: np.ndarray, like: np.ndarray, scope: MatrixScope) -> np.ndarray:
        """Back to the layout of ``like``; an RGBA source keeps its own alpha."""
        channels = channel_count(like)
        if channels == 1:
            return bgr
        if channels == 3:
            return scope.adopt(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB), "rgb")
        out = scope.adopt(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGBA), "rgba")
        out[:, :, 3] = like[:, :, 3]
        return out
