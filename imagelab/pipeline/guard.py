from contextlib import contextmanager
import logging
import cv2

from ..errors import ImageLabError, InternalProcessingFailure, ResourceAllocationFailure

logger = logging.getLogger(__name__)


@contextmanager
def transform_errors(label: str):
    """
    Surface every failure of a transform step as an ImageLabError.
    Typed errors pass through untouched; the rest are chained.
    """
    try:
        yield
    except ImageLabError:
        raise
    except MemoryError as exc:
        logger.error(f"{label}: out of memory")
        raise ResourceAllocationFailure(f"{label}: could not allocate working matrices") from exc
    except cv2.error as exc:
        logger.error(f"{label}: OpenCV failure: {exc}")
        raise InternalProcessingFailure(f"{label}: {exc}") from exc
    except Exception as exc:
        logger.exception(f"{label}: unexpected failure")
        raise InternalProcessingFailure(f"{label}: {exc}") from exc
