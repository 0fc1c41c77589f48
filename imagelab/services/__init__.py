from .matrix_scope import DEFAULT_REGISTRY, MatrixHandle, MatrixRegistry, MatrixScope
from .colorspace_service import ColorspaceService
from .dimension_service import DimensionService
from .cropping_service import CroppingService
from .dual_operation_service import DualOperationService
from .filter_service import FilterService
from .result_encoder import ResultEncoder

__all__ = [
    "DEFAULT_REGISTRY",
    "MatrixHandle",
    "MatrixRegistry",
    "MatrixScope",
    "ColorspaceService",
    "DimensionService",
    "CroppingService",
    "DualOperationService",
    "FilterService",
    "ResultEncoder",
]
