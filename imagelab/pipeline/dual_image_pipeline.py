import logging

from ..models.operation_request import OperationRequest
from ..models.raster_buffer import RasterBuffer
from ..models.transform_result import TransformResult
from ..services.colorspace_service import ColorspaceService
from ..services.dimension_service import DimensionService
from ..services.dual_operation_service import DualOperationService
from ..services.matrix_scope import MatrixRegistry, MatrixScope
from ..services.result_encoder import ResultEncoder
from .guard import transform_errors

logger = logging.getLogger(__name__)


def apply_dual_op(
    image_a: RasterBuffer,
    image_b: RasterBuffer,
    request: OperationRequest,
    dimension_service: DimensionService = DimensionService(),
    colorspace_service: ColorspaceService = ColorspaceService(),
    operation_service: DualOperationService = DualOperationService(),
    encoder: ResultEncoder = None,
    registry: MatrixRegistry = None,
) -> TransformResult:
    """
    Combine two images pixel-wise.

    Steps: resize both to (max width, max height), convert to gray when a
    bitwise operator asks for it, align channel layouts, run the operator,
    encode.  Every working matrix lives in one MatrixScope and is gone when
    this returns or raises.

    Returns:
        TransformResult: caller-owned buffer plus its encoded form.
    """
    with transform_errors(f"dual-op {request.kind.value}"), MatrixScope("dual-op", registry) as scope:
        encoder = encoder or ResultEncoder()
        a, b = dimension_service.normalize(image_a.pixels, image_b.pixels, scope)

        a = colorspace_service.adapt_for_operation(a, request.kind, request.grayscale_requested, scope)
        b = colorspace_service.adapt_for_operation(b, request.kind, request.grayscale_requested, scope)
        a, b = colorspace_service.match_channels(a, b, scope)

        result = operation_service.apply(a, b, request, scope)
        encoded = encoder.encode(result)
        buffer = RasterBuffer(scope.detach(result))

    logger.info(f"{request.kind.value}: {image_a.size} + {image_b.size} -> {buffer.size}, {buffer.channels} channels")
    return TransformResult(buffer=buffer, encoded=encoded)
