from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping, Union

from .filter_catalog import FilterName, get_definition
from .parameter_spec import ParameterValue


@dataclass(frozen=True)
class FilterRequest:
    """
    Immutable request for the single-image path.

    Parameters are validated against the catalog when the request is built;
    the stored mapping is read-only, complete (defaults filled in) and
    already coerced.
    """
    filter_name: FilterName = FilterName.NO_FILTER
    parameters: Mapping[str, ParameterValue] = field(default_factory=dict)
    grayscale_requested: bool = False

    def __post_init__(self):
        definition = get_definition(self.filter_name)
        object.__setattr__(self, "filter_name", definition.name)
        object.__setattr__(self, "parameters", definition.resolve(dict(self.parameters or {})))
        object.__setattr__(self, "grayscale_requested", bool(self.grayscale_requested))
