"""Symbolic differentiation of postfix token sequences.

The derivative of a sequence is dispatched on its last token, since postfix
order puts the top-level operation at the end. Each rule emits a new postfix
sequence built from the operand sub-sequences and their derivatives. Some
constructs are first rewritten into an equivalent form (``sqrt(u)`` into
``u^(1/2)``, ``ceil(u)`` into ``-floor(-u)``, ...) which is then
differentiated through the same entry point.

No simplification is performed: results routinely contain ``0 *`` and
``1 *`` terms.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Callable, Final

from .builtins import DELTA, FLOOR_DERIVATIVE, builtin_function, builtin_operator
from .errors import InvalidExpressionError, UnsupportedDerivativeError
from .segmenter import split_arguments
from .tokens import Function, Number, Operator, Token, Variable

logger = logging.getLogger(__name__)

Tokens = tuple[Token, ...]

_ZERO: Final[Tokens] = (Number(0.0),)
_ONE: Final[Tokens] = (Number(1.0),)


def _op(symbol: str, arity: int = 2) -> Operator:
    return builtin_operator(symbol, arity)


def _fn(name: str) -> Function:
    return builtin_function(name)


def _mentions(tokens: Sequence[Token], var: str) -> bool:
    return any(isinstance(tok, Variable) and tok.name == var for tok in tokens)


def differentiate(tokens: Sequence[Token], var: str) -> Tokens:
    """Return the postfix derivative of `tokens` with respect to `var`.

    `tokens` must be stack balanced; callers validate before differentiating.
    """
    tokens = tuple(tokens)
    if not tokens:
        raise InvalidExpressionError(("Empty expression",))
    last = tokens[-1]
    prefix = tokens[:-1]

    if isinstance(last, Number):
        return _ZERO
    if isinstance(last, Variable):
        return _ONE if last.name == var else _ZERO
    if isinstance(last, Operator):
        rule = _OPERATOR_RULES.get(last.symbol)
        if rule is None:
            raise UnsupportedDerivativeError(last)
        left, right = split_arguments(prefix, last.arity)
        return rule(left, right, last.arity, var)
    if isinstance(last, Function):
        return _differentiate_function(last, prefix, var)
    raise UnsupportedDerivativeError(last)


# Operators


def _sum_rule(symbol: str):
    def rule(left: Tokens, right: Tokens, arity: int, var: str) -> Tokens:
        if arity == 1:
            return (*differentiate(left, var), _op(symbol, 1))
        return (*differentiate(left, var), *differentiate(right, var), _op(symbol))

    return rule


def _product_rule(left: Tokens, right: Tokens, arity: int, var: str) -> Tokens:
    return (
        *differentiate(left, var), *right, _op("*"),
        *left, *differentiate(right, var), _op("*"),
        _op("+"),
    )


def _quotient_rule(left: Tokens, right: Tokens, arity: int, var: str) -> Tokens:
    return (
        *differentiate(left, var), *right, _op("*"),
        *left, *differentiate(right, var), _op("*"),
        _op("-"),
        *right, Number(2.0), _op("^"),
        _op("/"),
    )


def _power_rule(left: Tokens, right: Tokens, arity: int, var: str) -> Tokens:
    if not _mentions(right, var):
        # b * a^(b-1) * a'
        return (
            *right,
            *left, *right, Number(1.0), _op("-"), _op("^"),
            _op("*"),
            *differentiate(left, var), _op("*"),
        )
    if not _mentions(left, var):
        # a^b * ln(a) * b'
        return (
            *left, *right, _op("^"),
            *left, _fn("log"), _op("*"),
            *differentiate(right, var), _op("*"),
        )
    # a^(b-1) * (b*a' + a*ln(a)*b')
    return (
        *left, *right, Number(1.0), _op("-"), _op("^"),
        *right, *differentiate(left, var), _op("*"),
        *left, *left, _fn("log"), _op("*"), *differentiate(right, var), _op("*"),
        _op("+"),
        _op("*"),
    )


def _rewrite_modulo(left: Tokens, right: Tokens) -> Tokens:
    """``a % b`` as ``abs(a - b*floor(a/b)) * signum(a)``."""
    return (
        *left, *right, *left, *right, _op("/"), _fn("floor"), _op("*"), _op("-"), _fn("abs"),
        *left, _fn("signum"),
        _op("*"),
    )


def _modulo_rule(left: Tokens, right: Tokens, arity: int, var: str) -> Tokens:
    logger.debug("rewriting modulo before differentiation")
    return differentiate(_rewrite_modulo(left, right), var)


_OPERATOR_RULES: Final[dict[str, Callable[[Tokens, Tokens, int, str], Tokens]]] = {
    "+": _sum_rule("+"),
    "-": _sum_rule("-"),
    "*": _product_rule,
    "/": _quotient_rule,
    "^": _power_rule,
    "%": _modulo_rule,
}


# Functions


def _rewrite_sqrt(arg: Tokens) -> Tokens:
    return (*arg, Number(1.0 / 2), _op("^"))


def _rewrite_cbrt(arg: Tokens) -> Tokens:
    return (*arg, Number(1.0 / 3), _op("^"))


def _rewrite_exp(arg: Tokens) -> Tokens:
    return (Number(math.e), *arg, _op("^"))


def _rewrite_pow(args: Tokens) -> Tokens:
    return (*args, _op("^"))


def _rewrite_ceil(arg: Tokens) -> Tokens:
    return (*arg, _op("-", 1), _fn("floor"), _op("-", 1))


_FUNCTION_REWRITES: Final[dict[str, Callable[[Tokens], Tokens]]] = {
    "sqrt": _rewrite_sqrt,
    "cbrt": _rewrite_cbrt,
    "exp": _rewrite_exp,
    # expm1 differs from exp by a constant
    "expm1": _rewrite_exp,
    "pow": _rewrite_pow,
    "ceil": _rewrite_ceil,
}


def _asin_factor(u: Tokens) -> Tokens:
    return (Number(1.0), Number(1.0), *u, Number(2.0), _op("^"), _op("-"), _fn("sqrt"), _op("/"))


def _log_factor(scale: float | None):
    def factor(u: Tokens) -> Tokens:
        if scale is None:
            return (Number(1.0), *u, _op("/"))
        return (Number(1.0), *u, Number(scale), _op("*"), _op("/"))

    return factor


# Outer derivative f'(u) for each function; the chain rule multiplies in u'.
_CHAIN_FACTORS: Final[dict[str, Callable[[Tokens], Tokens]]] = {
    "sin": lambda u: (*u, _fn("cos")),
    "cos": lambda u: (*u, _fn("sin"), _op("-", 1)),
    "tan": lambda u: (Number(1.0), *u, _fn("cos"), Number(2.0), _op("^"), _op("/")),
    "asin": _asin_factor,
    "acos": lambda u: (*_asin_factor(u), _op("-", 1)),
    "atan": lambda u: (Number(1.0), *u, Number(2.0), _op("^"), Number(1.0), _op("+"), _op("/")),
    "sinh": lambda u: (*u, _fn("cosh")),
    "cosh": lambda u: (*u, _fn("sinh")),
    "tanh": lambda u: (Number(1.0), *u, _fn("cosh"), Number(2.0), _op("^"), _op("/")),
    "log": _log_factor(None),
    "log2": _log_factor(math.log(2)),
    "log10": _log_factor(math.log(10)),
    "log1p": lambda u: (Number(1.0), *u, Number(1.0), _op("+"), _op("/")),
    "abs": lambda u: (*u, _fn("signum")),
    "signum": lambda u: (*u, DELTA),
    "floor": lambda u: (*u, FLOOR_DERIVATIVE),
}


def _differentiate_function(fn: Function, arg: Tokens, var: str) -> Tokens:
    rewrite = _FUNCTION_REWRITES.get(fn.name)
    if rewrite is not None:
        logger.debug("rewriting %s() before differentiation", fn.name)
        return differentiate(rewrite(arg), var)

    factor = _CHAIN_FACTORS.get(fn.name)
    if factor is None:
        raise UnsupportedDerivativeError(fn)
    return (*differentiate(arg, var), *factor(arg), _op("*"))
