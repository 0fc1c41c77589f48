from __future__ import annotations
from typing import Any


class ImageLabError(Exception):
    """Base class for every failure surfaced by a transform."""


class InvalidInput(ImageLabError):
    """Malformed or zero-sized raster buffer."""


class UnsupportedOperation(ImageLabError):
    """Operation kind outside the dual-image catalog."""


class UnsupportedFilter(ImageLabError):
    """Filter name outside the filter catalog."""


class InvalidParameter(ImageLabError):
    """
    A parameter value outside its declared domain.

    Carries the parameter name and the offending value so the caller can
    point at the control that produced it.
    """

    def __init__(self, name: str, value: Any, reason: str = "outside declared domain"):
        self.name = name
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value {value!r} for parameter '{name}': {reason}")


class ResourceAllocationFailure(ImageLabError):
    """A working matrix could not be created."""


class InternalProcessingFailure(ImageLabError):
    """Catch-all for a transform step that failed."""
