import logging

from ..models.filter_request import FilterRequest
from ..models.raster_buffer import RasterBuffer
from ..models.transform_result import TransformResult
from ..services.filter_service import FilterService
from ..services.matrix_scope import MatrixRegistry, MatrixScope
from ..services.result_encoder import ResultEncoder
from .guard import transform_errors

logger = logging.getLogger(__name__)


def apply_filter(
    image: RasterBuffer,
    request: FilterRequest,
    filter_service: FilterService = FilterService(),
    encoder: ResultEncoder = None,
    registry: MatrixRegistry = None,
) -> TransformResult:
    """Run one catalog filter over ``image`` inside a fresh MatrixScope."""
    with transform_errors(f"filter {request.filter_name.value}"), MatrixScope("filter", registry) as scope:
        encoder = encoder or ResultEncoder()
        result = filter_service.apply(image.pixels, request, scope)
        encoded = encoder.encode(result)
        buffer = RasterBuffer(scope.detach(result))

    logger.info(f"{request.filter_name.value}: {image.width}x{image.height}x{image.channels} done")
    return TransformResult(buffer=buffer, encoded=encoded)
