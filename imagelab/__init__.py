"""
imagelab: pixel-wise operations on image pairs and parameterized
single-image filters on top of OpenCV.
"""
from .errors import (
    ImageLabError,
    InternalProcessingFailure,
    InvalidInput,
    InvalidParameter,
    ResourceAllocationFailure,
    UnsupportedFilter,
    UnsupportedOperation,
)
from .models import (
    CropRegion,
    EncodedImage,
    FilterName,
    FilterRequest,
    OperationKind,
    OperationRequest,
    RasterBuffer,
    TransformResult,
    describe_catalog,
)
from .pipeline import apply_dual_op, apply_filter
from .services import DimensionService

optimal_crop_size = DimensionService.optimal_crop_size

__version__ = "1.0.0"
