"""Stack-machine evaluation of postfix token sequences."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from .errors import LeftoverOperandsError, OperandCountError, RPNEvaluationError, UnboundVariableError
from .tokens import Function, Number, Operator, Token, Variable


def run_stack(tokens: Sequence[Token], variables: Mapping[str, object]):
    """Evaluate `tokens` and return the raw (possibly traced) jax value."""
    stack: list[object] = []
    for tok in tokens:
        if isinstance(tok, Number):
            stack.append(tok.value)
        elif isinstance(tok, Variable):
            if tok.name not in variables:
                raise UnboundVariableError(tok.name)
            stack.append(variables[tok.name])
        elif isinstance(tok, Operator):
            if len(stack) < tok.arity:
                raise OperandCountError(tok, len(stack))
            if tok.arity == 2:
                # the left operand sits deeper in the stack
                right = stack.pop()
                left = stack.pop()
                stack.append(tok.apply(left, right))
            else:
                stack.append(tok.apply(stack.pop()))
        elif isinstance(tok, Function):
            if len(stack) < tok.arity:
                raise OperandCountError(tok, len(stack))
            args = [stack.pop() for _ in range(tok.arity)]
            args.reverse()
            stack.append(tok.apply(*args))
        else:
            raise TypeError(f"Unsupported token type {type(tok).__name__}")

    if len(stack) > 1:
        raise LeftoverOperandsError(len(stack))
    if not stack:
        raise RPNEvaluationError("Empty expression")
    return stack[0]


def evaluate(tokens: Sequence[Token], variables: Mapping[str, float]) -> float:
    return float(run_stack(tokens, variables))
