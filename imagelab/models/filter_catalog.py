"""
Declarative filter catalog: which filters exist and which controls each one
exposes.  The algorithms live in services/filter_service.py, keyed by the
same FilterName.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Union

from ..errors import InvalidParameter, UnsupportedFilter
from .parameter_spec import ParameterSpec, ParameterValue, odd_kernel


class FilterName(str, Enum):
    NO_FILTER = "noFilter"
    BILATERAL = "bilateralFilter"
    BLUR = "blur"
    BOX = "boxFilter"
    DILATE = "dilate"
    ERODE = "erode"
    GAUSSIAN = "GaussianBlur"
    MEDIAN = "medianBlur"
    SOBEL = "Sobel"
    SCHARR = "Scharr"
    SEP_FILTER_2D = "sepFilter2D"
    LAPLACIAN = "Laplacian"

    @classmethod
    def parse(cls, value: Union[str, FilterName]) -> FilterName:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedFilter(f"Unknown filter: {value!r}") from None


@dataclass(frozen=True)
class FilterDefinition:
    name: FilterName
    parameters: Mapping[str, ParameterSpec]
    check: Optional[Callable[[Mapping[str, ParameterValue]], None]] = None

    def resolve(self, raw: Mapping[str, object]) -> Mapping[str, ParameterValue]:
        """
        Validate caller values, fill in defaults and run the cross-parameter
        check.  Returns a read-only mapping.
        """
        unknown = sorted(set(raw) - set(self.parameters))
        if unknown:
            raise InvalidParameter(unknown[0], raw[unknown[0]], f"not a parameter of {self.name.value}")

        resolved: Dict[str, ParameterValue] = {}
        for param_name, spec in self.parameters.items():
            value = raw[param_name] if param_name in raw else spec.current
            resolved[param_name] = spec.validate(param_name, value)

        if self.check is not None:
            self.check(resolved)
        return MappingProxyType(resolved)

    def describe(self) -> dict:
        return {
            "name": self.name.value,
            "parameters": {n: spec.describe() for n, spec in self.parameters.items()},
        }


# ─── Cross-parameter checks ─────────────────────────────────────────
def _check_sobel(params):
    if params["dx"] + params["dy"] == 0:
        raise InvalidParameter("dy", params["dy"], "dx and dy cannot both be 0")


def _check_scharr(params):
    if params["dx"] + params["dy"] != 1:
        raise InvalidParameter("dy", params["dy"], "exactly one of dx and dy must be 1")


# ─── Shared control sets ────────────────────────────────────────────
_KSIZE = ParameterSpec.number(1, 31, 2, 3)
_GAUSS_KSIZE = ParameterSpec.number(1, 31, 2, 3, coerce=odd_kernel)
_SIGMA = ParameterSpec.number(0, 10, 0.1, 0)
_APERTURE = ParameterSpec.select(["1", "3", "5", "7"], "3")


def _window():
    return {"ksizeX": _KSIZE, "ksizeY": _KSIZE}


_DEFINITIONS = (
    FilterDefinition(FilterName.NO_FILTER, {}),
    FilterDefinition(FilterName.BILATERAL, {
        "d": ParameterSpec.number(1, 15, 1, 5),
        "sigmaColor": ParameterSpec.number(0, 255, 1, 75),
        "sigmaSpace": ParameterSpec.number(0, 255, 1, 75),
    }),
    FilterDefinition(FilterName.BLUR, _window()),
    FilterDefinition(FilterName.BOX, _window()),
    FilterDefinition(FilterName.DILATE, _window()),
    FilterDefinition(FilterName.ERODE, _window()),
    FilterDefinition(FilterName.GAUSSIAN, {
        "ksizeX": _GAUSS_KSIZE,
        "ksizeY": _GAUSS_KSIZE,
        "sigmaX": _SIGMA,
        "sigmaY": _SIGMA,
    }),
    FilterDefinition(FilterName.MEDIAN, {"ksize": _KSIZE}),
    FilterDefinition(FilterName.SOBEL, {
        "dx": ParameterSpec.number(0, 2, 1, 1),
        "dy": ParameterSpec.number(0, 2, 1, 0),
        "ksize": _APERTURE,
    }, check=_check_sobel),
    FilterDefinition(FilterName.SCHARR, {
        "dx": ParameterSpec.number(0, 1, 1, 1),
        "dy": ParameterSpec.number(0, 1, 1, 0),
    }, check=_check_scharr),
    FilterDefinition(FilterName.SEP_FILTER_2D, {"kernelX": _APERTURE, "kernelY": _APERTURE}),
    FilterDefinition(FilterName.LAPLACIAN, {"ksize": _APERTURE}),
)

FILTER_CATALOG: Mapping[FilterName, FilterDefinition] = MappingProxyType(
    {definition.name: definition for definition in _DEFINITIONS}
)


def get_definition(name: Union[str, FilterName]) -> FilterDefinition:
    return FILTER_CATALOG[FilterName.parse(name)]


def describe_catalog() -> list:
    """Catalog as plain dicts, in menu order."""
    return [definition.describe() for definition in _DEFINITIONS]
