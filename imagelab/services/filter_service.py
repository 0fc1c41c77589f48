import logging
from typing import Mapping
import cv2
import numpy as np

from ..errors import UnsupportedFilter
from ..models.filter_catalog import FilterName
from ..models.filter_request import FilterRequest
from .colorspace_service import ColorspaceService, channel_count
from .matrix_scope import MatrixScope

logger = logging.getLogger(__name__)


class FilterService:
    """
    Single-image filters.  Each runner takes the source matrix, the resolved
    parameters and the scope, and returns a new scope-owned matrix with the
    source's geometry and channel count.
    """

    def __init__(self):
        self.colorspace = ColorspaceService()
        self._runners = {
            FilterName.NO_FILTER: self._no_filter,
            FilterName.BILATERAL: self._bilateral,
            FilterName.BLUR: self._blur,
            FilterName.BOX: self._box,
            FilterName.DILATE: self._dilate,
            FilterName.ERODE: self._erode,
            FilterName.GAUSSIAN: self._gaussian,
            FilterName.MEDIAN: self._median,
            FilterName.SOBEL: self._sobel,
            FilterName.SCHARR: self._scharr,
            FilterName.SEP_FILTER_2D: self._sep_filter_2d,
            FilterName.LAPLACIAN: self._laplacian,
        }

    # ─── Public API ────────────────────────────────────────────────
    def apply(self, src: np.ndarray, request: FilterRequest, scope: MatrixScope) -> np.ndarray:
        runner = self._runners.get(request.filter_name)
        if runner is None:
            raise UnsupportedFilter(f"Filter {request.filter_name!r} not implemented")

        if request.grayscale_requested:
            src = self.colorspace.to_luminance(src, scope)

        logger.debug(f"Running {request.filter_name.value} with {dict(request.parameters)}")
        return runner(src, request.parameters, scope)

    # ─── Smoothing ─────────────────────────────────────────────────
    @staticmethod
    def _no_filter(src, params, scope):
        return scope.adopt(src.copy(), "copy")

    def _bilateral(self, src, params, scope):
        # bilateralFilter only accepts 1 or 3 channels, and expects BGR.
        bgr = self.colorspace.to_bgr(src, scope)
        filtered = scope.adopt(
            cv2.bilateralFilter(bgr, int(params["d"]), params["sigmaColor"], params["sigmaSpace"]),
            "bilateral",
        )
        return self.colorspace.from_bgr(filtered, src, scope)

    @staticmethod
    def _window(params: Mapping):
        return int(params["ksizeX"]), int(params["ksizeY"])

    def _blur(self, src, params, scope):
        return scope.adopt(cv2.blur(src, self._window(params)), "blur")

    def _box(self, src, params, scope):
        return scope.adopt(cv2.boxFilter(src, -1, self._window(params)), "box")

    def _gaussian(self, src, params, scope):
        # ksize already coerced to odd values by the catalog.
        return scope.adopt(
            cv2.GaussianBlur(src, self._window(params), sigmaX=params["sigmaX"], sigmaY=params["sigmaY"]),
            "gaussian",
        )

    @staticmethod
    def _median(src, params, scope):
        return scope.adopt(cv2.medianBlur(src, int(params["ksize"])), "median")

    # ─── Morphology ────────────────────────────────────────────────
    def _structuring_element(self, params, scope):
        return scope.adopt(cv2.getStructuringElement(cv2.MORPH_RECT, self._window(params)), "kernel")

    def _dilate(self, src, params, scope):
        kernel = self._structuring_element(params, scope)
        dst = scope.adopt(cv2.dilate(src, kernel), "dilate")
        scope.release(kernel)
        return dst

    def _erode(self, src, params, scope):
        kernel = self._structuring_element(params, scope)
        dst = scope.adopt(cv2.erode(src, kernel), "erode")
        scope.release(kernel)
        return dst

    # ─── Edges ─────────────────────────────────────────────────────
    def _edges(self, src, scope, operator) -> np.ndarray:
        """
        Gray -> 16-bit signed response -> 8-bit magnitude -> original
        channel count.
        """
        gray = self.colorspace.to_grayscale(src, scope)
        response = scope.adopt(operator(gray), "response_16s")
        magnitude = scope.adopt(cv2.convertScaleAbs(response), "magnitude")
        scope.release(response)
        return self.colorspace.restore_channels(magnitude, channel_count(src), scope)

    def _sobel(self, src, params, scope):
        dx, dy, ksize = int(params["dx"]), int(params["dy"]), int(params["ksize"])
        return self._edges(src, scope, lambda gray: cv2.Sobel(gray, cv2.CV_16S, dx, dy, ksize=ksize))

    def _scharr(self, src, params, scope):
        dx, dy = int(params["dx"]), int(params["dy"])
        return self._edges(src, scope, lambda gray: cv2.Scharr(gray, cv2.CV_16S, dx, dy))

    def _laplacian(self, src, params, scope):
        ksize = int(params["ksize"])
        return self._edges(src, scope, lambda gray: cv2.Laplacian(gray, cv2.CV_16S, ksize=ksize))

    # ─── Separable ─────────────────────────────────────────────────
    @staticmethod
    def _sep_filter_2d(src, params, scope):
        """
        Identity-valued 1xN / Nx1 kernels: a single 1 at index 0, the rest 0.
        With the anchor at the kernel centre this shifts the image by (N-1)/2
        along each axis.
        """
        size_x, size_y = int(params["kernelX"]), int(params["kernelY"])
        kernel_x = scope.allocate((1, size_x), np.float32, "kernel_x")
        kernel_y = scope.allocate((size_y, 1), np.float32, "kernel_y")
        kernel_x[0, 0] = 1
        kernel_y[0, 0] = 1
        dst = scope.adopt(cv2.sepFilter2D(src, -1, kernel_x, kernel_y), "sep_filter")
        scope.release(kernel_x)
        scope.release(kernel_y)
        return dst
