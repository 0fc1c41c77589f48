import logging
import cv2
import numpy as np

from ..errors import InvalidInput, UnsupportedOperation
from ..models.operation_request import OperationKind, OperationRequest
from .matrix_scope import MatrixScope

logger = logging.getLogger(__name__)


def _add(a, b, request, dst):
    cv2.add(a, b, dst=dst)


def _subtract(a, b, request, dst):
    # Saturating: negative differences floor at 0.
    cv2.subtract(a, b, dst=dst)


def _and(a, b, request, dst):
    cv2.bitwise_and(a, b, dst=dst)


def _or(a, b, request, dst):
    cv2.bitwise_or(a, b, dst=dst)


def _xor(a, b, request, dst):
    cv2.bitwise_xor(a, b, dst=dst)


def _not(a, b, request, dst):
    cv2.bitwise_not(a, dst=dst)


def _blend(a, b, request, dst):
    cv2.addWeighted(a, request.alpha, b, request.beta, 0, dst=dst)


class DualOperationService:
    """
    Pixel-wise operators over two operands of identical geometry.
    All arithmetic is saturating uint8.
    """

    _OPERATIONS = {
        OperationKind.ADD: _add,
        OperationKind.SUBTRACT: _subtract,
        OperationKind.AND: _and,
        OperationKind.OR: _or,
        OperationKind.XOR: _xor,
        OperationKind.NOT: _not,
        OperationKind.BLEND: _blend,
    }

    def apply(self, a: np.ndarray, b: np.ndarray, request: OperationRequest, scope: MatrixScope) -> np.ndarray:
        """
        Run ``request.kind`` into a freshly allocated, scope-owned matrix.

        Raises:
            InvalidInput: operands differ in size or channel count.
            UnsupportedOperation: kind has no entry in the dispatch table.
        """
        operation = self._OPERATIONS.get(request.kind)
        if operation is None:
            raise UnsupportedOperation(f"Unknown operation: {request.kind!r}")
        if a.shape != b.shape:
            raise InvalidInput(f"Operands must share geometry, got {a.shape} and {b.shape}")

        dst = scope.allocate(a.shape, np.uint8, "result")
        operation(a, b, request, dst)
        logger.debug(f"{request.kind.value} applied on {a.shape[1]}x{a.shape[0]}")
        return dst
