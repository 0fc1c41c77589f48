from .raster_buffer import RasterBuffer
from .parameter_spec import ParameterKind, ParameterSpec
from .operation_request import OperationKind, OperationRequest
from .filter_catalog import FILTER_CATALOG, FilterName, describe_catalog
from .filter_request import FilterRequest
from .transform_result import EncodedImage, TransformResult
from .crop_region import CropRegion

__all__ = [
    "RasterBuffer",
    "ParameterKind",
    "ParameterSpec",
    "OperationKind",
    "OperationRequest",
    "FILTER_CATALOG",
    "FilterName",
    "describe_catalog",
    "FilterRequest",
    "EncodedImage",
    "TransformResult",
    "CropRegion",
]
