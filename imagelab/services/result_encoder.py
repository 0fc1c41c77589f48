from io import BytesIO
import logging
import os
import numpy as np
from PIL import Image as PILImage
from dotenv import load_dotenv

from ..errors import InternalProcessingFailure, InvalidParameter
from ..models.transform_result import EncodedImage

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

_MIME_TYPES = {"PNG": "image/png", "JPEG": "image/jpeg", "WEBP": "image/webp", "BMP": "image/bmp"}


class ResultEncoder:
    """
    Turns a result matrix into a displayable, compressed image.
    Format and quality come from the environment unless given explicitly.
    """

    def __init__(self, image_format: str = None, jpeg_quality: int = None):
        raw_format = image_format or os.getenv("RESULT_IMAGE_FORMAT", "PNG")
        self.image_format = raw_format.upper()
        if self.image_format == "JPG":
            self.image_format = "JPEG"
        if self.image_format not in _MIME_TYPES:
            raise InvalidParameter("RESULT_IMAGE_FORMAT", raw_format, f"expected one of {sorted(_MIME_TYPES)}")

        raw_quality = jpeg_quality or os.getenv("JPEG_QUALITY", "95")
        try:
            self.jpeg_quality = int(raw_quality)
        except (TypeError, ValueError):
            raise InvalidParameter("JPEG_QUALITY", raw_quality, "expected an integer") from None
        if not 1 <= self.jpeg_quality <= 100:
            raise InvalidParameter("JPEG_QUALITY", raw_quality, "expected a value in [1, 100]")

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self.image_format]

    def encode(self, pixels: np.ndarray) -> EncodedImage:
        np_img = pixels if pixels.flags["C_CONTIGUOUS"] else np.ascontiguousarray(pixels)
        pil_image = PILImage.fromarray(np_img)

        save_kwargs = {}
        if self.image_format == "JPEG":
            if pil_image.mode == "RGBA":
                pil_image = pil_image.convert("RGB")
            save_kwargs["quality"] = self.jpeg_quality

        buffer = BytesIO()
        try:
            pil_image.save(buffer, format=self.image_format, **save_kwargs)
        except (OSError, ValueError) as exc:
            raise InternalProcessingFailure(f"Could not encode result as {self.image_format}: {exc}") from exc

        logger.debug(f"Encoded {pil_image.size[0]}x{pil_image.size[1]} {pil_image.mode} as {self.image_format}")
        return EncodedImage(data=buffer.getvalue(), mime_type=self.mime_type)
