from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class CropRegion:
    """Crop rectangle in percent of the source image's native size."""
    x: float = 0.0
    y: float = 0.0
    width: float = 100.0
    height: float = 100.0

    def to_pixels(self, img_width: int, img_height: int):
        """Return (left, top, right, bottom) pixel bounds."""
        left = round(self.x / 100 * img_width)
        top = round(self.y / 100 * img_height)
        right = round((self.x + self.width) / 100 * img_width)
        bottom = round((self.y + self.height) / 100 * img_height)
        return left, top, right, bottom

    def as_dict(self) -> dict:
        return {"unit": "%", "x": self.x, "y": self.y, "width": self.width, "height": self.height}
