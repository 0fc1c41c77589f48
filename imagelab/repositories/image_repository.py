from pathlib import Path
from typing import Union
import os
import cv2
import numpy as np
from PIL import Image as PILImage
from dotenv import load_dotenv

from ..errors import InvalidInput
from ..models.raster_buffer import RasterBuffer

# Load environment variables
load_dotenv()


class ImageRepository:
    """
    Handles decoding from files/bytes and writing RasterBuffers back out.
    Decoded pixels are RGB(A) or gray, uint8.
    """
    def __init__(self):
        exts = os.getenv("VALID_IMAGE_EXTENSIONS", ".png,.jpg,.jpeg,.bmp,.webp,.tif,.tiff")
        self.VALID_EXTS = {ext.strip().lower() for ext in exts.split(",") if ext.strip()}

    def is_supported(self, path: Union[str, Path]) -> bool:
        return Path(path).suffix.lower() in self.VALID_EXTS

    @staticmethod
    def _to_raster(arr: np.ndarray, source: str) -> RasterBuffer:
        if arr is None:
            raise InvalidInput(f"Image not found or unreadable: {source}")
        if arr.dtype == np.uint16:
            arr = (arr >> 8).astype(np.uint8)
        elif arr.dtype != np.uint8:
            arr = cv2.convertScaleAbs(arr)

        if arr.ndim == 3 and arr.shape[2] == 3:
            arr = cv2.cvtColor(arr, cv2.COLOR_BGR2RGB)
        elif arr.ndim == 3 and arr.shape[2] == 4:
            arr = cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
        return RasterBuffer(arr)

    def load(self, path: Union[str, Path]) -> RasterBuffer:
        path = Path(path)
        if not path.is_file():
            raise InvalidInput(f"Image not found or unreadable: {path}")
        if not self.is_supported(path):
            raise InvalidInput(f"Unsupported image extension: {path.suffix}")
        data = np.fromfile(str(path), dtype=np.uint8)
        return self._to_raster(cv2.imdecode(data, cv2.IMREAD_UNCHANGED), str(path))

    def decode(self, data: bytes, source: str = "<bytes>") -> RasterBuffer:
        if not data:
            raise InvalidInput(f"Empty image payload: {source}")
        arr = np.frombuffer(data, dtype=np.uint8)
        return self._to_raster(cv2.imdecode(arr, cv2.IMREAD_UNCHANGED), source)

    @staticmethod
    def save(image: RasterBuffer, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        PILImage.fromarray(image.pixels).save(path)
        return path

    @staticmethod
    def write_bytes(data: bytes, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path
