from typing import Tuple
import logging
import cv2
import numpy as np

from ..errors import InvalidInput
from ..models.crop_region import CropRegion
from ..models.raster_buffer import RasterBuffer
from .matrix_scope import MatrixScope

logger = logging.getLogger(__name__)


def _dimensions(pixels: np.ndarray) -> Tuple[int, int]:
    """(width, height) of a pixel matrix."""
    height, width = pixels.shape[:2]
    if width == 0 or height == 0:
        raise InvalidInput(f"Zero-sized buffer: {width}x{height}")
    return width, height


class DimensionService:
    """
    Brings two operands to a common working size.
    """

    @staticmethod
    def target_size(a: np.ndarray, b: np.ndarray) -> Tuple[int, int]:
        width_a, height_a = _dimensions(a)
        width_b, height_b = _dimensions(b)
        return max(width_a, width_b), max(height_a, height_b)

    def normalize(self, a: np.ndarray, b: np.ndarray, scope: MatrixScope) -> Tuple[np.ndarray, np.ndarray]:
        """
        Args:
            a, b (np.ndarray): operand pixels.
            scope (MatrixScope): owner of any resized copy.

        Returns:
            Both operands at (max width, max height).  An operand already at
            that size is returned as is, without a copy.
        """
        target = self.target_size(a, b)
        return self._fit(a, target, scope, "normalized_a"), self._fit(b, target, scope, "normalized_b")

    @staticmethod
    def _fit(pixels: np.ndarray, target: Tuple[int, int], scope: MatrixScope, label: str) -> np.ndarray:
        if _dimensions(pixels) == target:
            return pixels
        logger.debug(f"Resizing {label} from {pixels.shape[1]}x{pixels.shape[0]} to {target[0]}x{target[1]}")
        return scope.adopt(cv2.resize(pixels, target, interpolation=cv2.INTER_LINEAR), label)

    @staticmethod
    def optimal_crop_size(a: RasterBuffer, b: RasterBuffer) -> Tuple[CropRegion, CropRegion]:
        """
        Largest origin-anchored rectangle both images share, as crop
        percentages of each image.  Advisory only; normalize() works without it.
        """
        min_width = min(a.width, b.width)
        min_height = min(a.height, b.height)

        crop_a = CropRegion(0.0, 0.0, min_width / a.width * 100, min_height / a.height * 100)
        crop_b = CropRegion(0.0, 0.0, min_width / b.width * 100, min_height / b.height * 100)
        return crop_a, crop_b
