from typing import Tuple
import logging

from ..errors import InvalidInput
from ..models.crop_region import CropRegion
from ..models.raster_buffer import RasterBuffer
from .dimension_service import DimensionService

logger = logging.getLogger(__name__)


class CroppingService:
    def __init__(self):
        self.dimension_service = DimensionService()

    def crop(self, img: RasterBuffer, region: CropRegion) -> RasterBuffer:
        """Apply a percentage crop to the native pixels and return a new buffer."""
        bound_l, bound_t, bound_r, bound_b = region.to_pixels(img.width, img.height)
        bound_l, bound_t = max(0, bound_l), max(0, bound_t)
        bound_r, bound_b = min(img.width, bound_r), min(img.height, bound_b)

        if bound_l >= bound_r or bound_t >= bound_b:
            logger.warning(f"Invalid crop {region} on {img.width}x{img.height} image")
            raise InvalidInput(
                f"Crop bounds ({bound_l},{bound_t},{bound_r},{bound_b}) "
                f"leave an empty {bound_r - bound_l}x{bound_b - bound_t} image"
            )

        return RasterBuffer(img.pixels[bound_t:bound_b, bound_l:bound_r].copy())

    def crop_to_common_size(self, a: RasterBuffer, b: RasterBuffer) -> Tuple[RasterBuffer, RasterBuffer]:
        crop_a, crop_b = self.dimension_service.optimal_crop_size(a, b)
        return self.crop(a, crop_a), self.crop(b, crop_b)
