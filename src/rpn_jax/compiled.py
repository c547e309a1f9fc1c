"""Lowering of postfix token sequences into JAX-traceable callables."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import jax
import jax.numpy as jnp

from .errors import InvalidExpressionError, RPNError
from .evaluator import run_stack
from .tokens import Token
from .validation import validate


@dataclass(frozen=True)
class CompiledExpression:
    """Callable wrapper around a token sequence with optional JAX transforms.

    Positional call arguments bind `arg_names` in order; every other name
    resolves through `constants`.
    """

    tokens: tuple[Token, ...]
    arg_names: tuple[str, ...] = ()
    constants: Mapping[str, float] = field(default_factory=dict)

    def _bind(self, args: tuple[object, ...]) -> dict[str, object]:
        if len(args) != len(self.arg_names):
            raise RPNError(f"Expected {len(self.arg_names)} arguments, got {len(args)}")
        bound: dict[str, object] = dict(self.constants)
        bound.update(zip(self.arg_names, args))
        return bound

    def __call__(self, *args):
        return jnp.asarray(run_stack(self.tokens, self._bind(args)), dtype=float)

    def jit(self):
        return jax.jit(self.__call__)

    def grad(self, argnum: int = 0):
        if not 0 <= argnum < len(self.arg_names):
            raise RPNError(f"argnum {argnum} is out of range for arguments {self.arg_names}")
        return jax.grad(self.__call__, argnums=argnum)


def compile_tokens(
    tokens: Sequence[Token],
    *,
    arg_names: tuple[str, ...] = (),
    constants: Mapping[str, float] | None = None,
) -> CompiledExpression:
    """Compile a stack-balanced token sequence into a traceable callable."""
    tokens = tuple(tokens)
    result = validate(tokens, {}, check_variables_set=False)
    if not result.valid:
        raise InvalidExpressionError(result.errors)
    return CompiledExpression(tokens=tokens, arg_names=tuple(arg_names), constants=dict(constants or {}))
