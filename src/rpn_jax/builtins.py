"""Built-in operators and functions backed by jax.numpy.

Importing this module turns on JAX double precision for the whole process
(`jax.config.update("jax_enable_x64", True)`), which also affects other JAX
code running in the same interpreter. Set `RPN_JAX_DISABLE_X64=1` before the
first import to keep JAX's float32 default.
"""

from __future__ import annotations

import math
import os
from typing import Callable, Final

import jax
import jax.numpy as jnp

from .errors import UnknownTokenError
from .tokens import Function, Operator

_ENABLE_X64: Final[bool] = os.environ.get("RPN_JAX_DISABLE_X64", "0") != "1"

if _ENABLE_X64:
    jax.config.update("jax_enable_x64", True)

GOLDEN_RATIO: Final[float] = 1.61803398874

DEFAULT_CONSTANTS: Final[dict[str, float]] = {
    "pi": math.pi,
    "π": math.pi,
    "φ": GOLDEN_RATIO,
    "e": math.e,
}

CONSTANT_NAMES: Final[frozenset[str]] = frozenset(DEFAULT_CONSTANTS)


_BINARY_OPS: Final[dict[str, Callable[[object, object], object]]] = {
    "+": lambda l, r: jnp.add(l, r),
    "-": lambda l, r: jnp.subtract(l, r),
    "*": lambda l, r: jnp.multiply(l, r),
    "/": lambda l, r: jnp.true_divide(l, r),
    "^": lambda l, r: jnp.power(l, r),
    # sign follows the dividend
    "%": lambda l, r: jnp.fmod(l, r),
}

_UNARY_OPS: Final[dict[str, Callable[[object], object]]] = {
    "+": lambda x: jnp.positive(x),
    "-": lambda x: jnp.negative(x),
}

_FUNCTIONS: Final[dict[str, tuple[int, Callable[..., object]]]] = {
    "sin": (1, jnp.sin),
    "cos": (1, jnp.cos),
    "tan": (1, jnp.tan),
    "asin": (1, jnp.arcsin),
    "acos": (1, jnp.arccos),
    "atan": (1, jnp.arctan),
    "sinh": (1, jnp.sinh),
    "cosh": (1, jnp.cosh),
    "tanh": (1, jnp.tanh),
    "log": (1, jnp.log),
    "log2": (1, jnp.log2),
    "log10": (1, jnp.log10),
    "log1p": (1, jnp.log1p),
    "abs": (1, jnp.abs),
    "signum": (1, jnp.sign),
    "floor": (1, jnp.floor),
    "ceil": (1, jnp.ceil),
    "sqrt": (1, jnp.sqrt),
    "cbrt": (1, jnp.cbrt),
    "exp": (1, jnp.exp),
    "expm1": (1, jnp.expm1),
    "pow": (2, jnp.power),
}

_BINARY_OPERATOR_TOKENS: Final[dict[str, Operator]] = {
    symbol: Operator(symbol, 2, fn) for symbol, fn in _BINARY_OPS.items()
}
_UNARY_OPERATOR_TOKENS: Final[dict[str, Operator]] = {
    symbol: Operator(symbol, 1, fn) for symbol, fn in _UNARY_OPS.items()
}
_FUNCTION_TOKENS: Final[dict[str, Function]] = {
    name: Function(name, arity, fn) for name, (arity, fn) in _FUNCTIONS.items()
}


def _delta(x):
    return jnp.where(x != 0, 0.0, jnp.inf)


def _floor_derivative(x):
    return jnp.where(x != jnp.trunc(x), 0.0, jnp.nan)


# Placeholder derivatives of the discontinuous built-ins. They are not
# registered, so they can neither shadow variable names nor be differentiated.
DELTA: Final[Function] = Function("delta", 1, _delta)
FLOOR_DERIVATIVE: Final[Function] = Function("floor_derivative", 1, _floor_derivative)

PLACEHOLDER_FUNCTIONS: Final[dict[str, Function]] = {
    DELTA.name: DELTA,
    FLOOR_DERIVATIVE.name: FLOOR_DERIVATIVE,
}


def builtin_operator(symbol: str, arity: int = 2) -> Operator:
    table = _BINARY_OPERATOR_TOKENS if arity == 2 else _UNARY_OPERATOR_TOKENS if arity == 1 else {}
    op = table.get(symbol)
    if op is None:
        raise UnknownTokenError(f"No built-in operator '{symbol}' with {arity} operand(s)")
    return op


def builtin_function(name: str) -> Function:
    fn = _FUNCTION_TOKENS.get(name)
    if fn is None:
        raise UnknownTokenError(f"No built-in function named '{name}'")
    return fn


def is_builtin_function(name: str) -> bool:
    return name in _FUNCTION_TOKENS


def builtin_function_names() -> frozenset[str]:
    return frozenset(_FUNCTION_TOKENS)


def binary_operator_symbols() -> frozenset[str]:
    return frozenset(_BINARY_OPERATOR_TOKENS)
