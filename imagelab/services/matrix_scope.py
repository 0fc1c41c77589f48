"""
Scoped ownership of the working matrices of one transform.

Every matrix created while a transform runs is registered with a
MatrixScope.  Leaving the scope, by return or by exception, releases each
handle that is still live exactly once.  A MatrixRegistry counts live
handles so leaks show up as a counter that does not return to baseline.
"""
from __future__ import annotations

import logging
import threading
from typing import List, Optional, Tuple, Union

import numpy as np

from ..errors import InternalProcessingFailure, ResourceAllocationFailure

logger = logging.getLogger(__name__)


class MatrixRegistry:
    """Thread-safe live/total counters for matrix handles."""

    def __init__(self):
        self._lock = threading.Lock()
        self._live = 0
        self._total = 0

    def acquired(self) -> None:
        with self._lock:
            self._live += 1
            self._total += 1

    def released(self) -> None:
        with self._lock:
            self._live -= 1

    def live_count(self) -> int:
        with self._lock:
            return self._live

    def total_acquired(self) -> int:
        with self._lock:
            return self._total


DEFAULT_REGISTRY = MatrixRegistry()


class MatrixHandle:
    """One registered matrix.  Releasing drops the array reference."""

    __slots__ = ("_mat", "_registry", "label")

    def __init__(self, mat: np.ndarray, registry: MatrixRegistry, label: str = ""):
        self._mat = mat
        self._registry = registry
        self.label = label
        registry.acquired()

    @property
    def live(self) -> bool:
        return self._mat is not None

    @property
    def mat(self) -> np.ndarray:
        if self._mat is None:
            raise InternalProcessingFailure(f"Matrix '{self.label}' used after release")
        return self._mat

    def release(self) -> np.ndarray:
        """Release the handle and return the array it held."""
        if self._mat is None:
            raise InternalProcessingFailure(f"Matrix '{self.label}' released twice")
        mat, self._mat = self._mat, None
        self._registry.released()
        return mat


class MatrixScope:
    """
    Per-invocation arena of matrix handles.

    Usage::

        with MatrixScope("filter") as scope:
            gray = scope.adopt(cv2.cvtColor(src, cv2.COLOR_RGB2GRAY), "gray")
            dst = scope.allocate(src.shape, np.uint8, "dst")
            ...
    """

    def __init__(self, label: str = "transform", registry: Optional[MatrixRegistry] = None):
        self.label = label
        self.registry = registry or DEFAULT_REGISTRY
        self._handles: List[MatrixHandle] = []
        self._closed = False

    # ─── Context manager ──────────────────────────────────────────
    def __enter__(self) -> MatrixScope:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    # ─── Registration ─────────────────────────────────────────────
    def _register(self, mat: np.ndarray, label: str) -> MatrixHandle:
        if self._closed:
            raise InternalProcessingFailure(f"Scope '{self.label}' is closed; cannot register '{label}'")
        handle = MatrixHandle(mat, self.registry, label)
        self._handles.append(handle)
        return handle

    def adopt(self, mat: np.ndarray, label: str = "") -> np.ndarray:
        """Register a matrix produced by OpenCV/numpy and return it."""
        if mat is None:
            raise ResourceAllocationFailure(f"No matrix produced for '{label or self.label}'")
        if self._find(mat) is not None:
            return mat
        return self._register(mat, label).mat

    def allocate(self, shape: Tuple[int, ...], dtype=np.uint8, label: str = "") -> np.ndarray:
        """Create a zeroed matrix owned by this scope."""
        try:
            mat = np.zeros(shape, dtype=dtype)
        except (MemoryError, ValueError) as exc:
            raise ResourceAllocationFailure(
                f"Could not allocate {label or 'matrix'} of shape {shape} ({dtype}): {exc}"
            ) from exc
        return self._register(mat, label).mat

    # ─── Release / transfer ───────────────────────────────────────
    def _find(self, mat: np.ndarray) -> Optional[MatrixHandle]:
        for handle in self._handles:
            if handle.live and handle.mat is mat:
                return handle
        return None

    def owns(self, mat: np.ndarray) -> bool:
        return self._find(mat) is not None

    def release(self, target: Union[MatrixHandle, np.ndarray]) -> None:
        """Release one matrix before the scope ends.  Unknown arrays are ignored."""
        handle = target if isinstance(target, MatrixHandle) else self._find(target)
        if handle is not None and handle.live:
            handle.release()

    def detach(self, mat: np.ndarray) -> np.ndarray:
        """
        Hand a scope-owned matrix over to the caller.  The handle is released
        here; the returned array is no longer tracked.  Arrays the scope does
        not own (e.g. caller input) are copied so the result is always fresh.
        """
        handle = self._find(mat)
        if handle is None:
            return mat.copy()
        return handle.release()

    @property
    def live_handles(self) -> int:
        return sum(1 for handle in self._handles if handle.live)

    def close(self) -> None:
        """Release every live handle once.  Release errors are logged, not raised."""
        if self._closed:
            return
        self._closed = True
        for handle in self._handles:
            if not handle.live:
                continue
            try:
                handle.release()
            except Exception:
                logger.critical(f"Failed to release matrix '{handle.label}' in scope '{self.label}'",
                                exc_info=True)
        self._handles.clear()
