from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Union

from ..errors import InvalidParameter, UnsupportedOperation


class OperationKind(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    AND = "and"
    OR = "or"
    XOR = "xor"
    NOT = "not"
    BLEND = "blend"

    @classmethod
    def parse(cls, value: Union[str, OperationKind]) -> OperationKind:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedOperation(f"Unknown operation: {value!r}") from None

    @property
    def is_bitwise(self) -> bool:
        return self in BITWISE_KINDS


BITWISE_KINDS = frozenset({OperationKind.AND, OperationKind.OR, OperationKind.XOR, OperationKind.NOT})


@dataclass(frozen=True)
class OperationRequest:
    """
    Immutable request for the dual-image path.
    alpha/beta are only read by Blend; both live in [0, 1].
    """
    kind: OperationKind
    grayscale_requested: bool = False
    alpha: float = 0.5
    beta: float = 0.5

    def __post_init__(self):
        object.__setattr__(self, "kind", OperationKind.parse(self.kind))
        for name in ("alpha", "beta"):
            weight = getattr(self, name)
            if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not 0.0 <= weight <= 1.0:
                raise InvalidParameter(name, weight, "expected a weight in [0, 1]")
            object.__setattr__(self, name, float(weight))
        object.__setattr__(self, "grayscale_requested", bool(self.grayscale_requested))
