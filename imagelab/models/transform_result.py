from __future__ import annotations
from dataclasses import dataclass
import base64

from .raster_buffer import RasterBuffer


@dataclass(frozen=True)
class EncodedImage:
    """Compressed, displayable form of a result."""
    data: bytes
    mime_type: str

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("utf-8")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass(frozen=True)
class TransformResult:
    """
    Output of one invocation.  Created fresh every call and owned by the
    caller from then on.
    """
    buffer: RasterBuffer
    encoded: EncodedImage
