"""Token model for already-tokenized postfix sequences."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Union


@dataclass(frozen=True)
class Number:
    value: float

    kind = "number"

    @property
    def text(self) -> str:
        value = float(self.value)
        if value.is_integer() and abs(value) < 1e16:
            return str(int(value))
        return repr(value)


@dataclass(frozen=True)
class Variable:
    name: str

    kind = "variable"

    @property
    def text(self) -> str:
        return self.name


@dataclass(frozen=True)
class Operator:
    symbol: str
    arity: int
    apply: Callable[..., object] = field(compare=False, repr=False)

    kind = "operator"

    def __post_init__(self) -> None:
        if self.arity not in (1, 2):
            raise ValueError(f"Operator '{self.symbol}' must take 1 or 2 operands, not {self.arity}")

    @property
    def text(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class Function:
    name: str
    arity: int
    apply: Callable[..., object] = field(compare=False, repr=False)

    kind = "function"

    def __post_init__(self) -> None:
        if self.arity < 0:
            raise ValueError(f"Function '{self.name}' cannot take a negative number of arguments")

    @property
    def text(self) -> str:
        return self.name


Token = Union[Number, Variable, Operator, Function]


def stack_effect(token: Token) -> int:
    """Net change in stack depth after applying `token`."""
    if isinstance(token, (Number, Variable)):
        return 1
    if isinstance(token, Operator):
        return -1 if token.arity == 2 else 0
    if isinstance(token, Function):
        return 1 - token.arity
    raise TypeError(f"Unsupported token type {type(token).__name__}")
