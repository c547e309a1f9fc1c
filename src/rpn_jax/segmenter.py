"""Split the tokens preceding an operator into its operand sub-sequences."""

from __future__ import annotations

from collections.abc import Sequence

from .tokens import Token, stack_effect


def split_arguments(prefix: Sequence[Token], arity: int) -> tuple[tuple[Token, ...], tuple[Token, ...]]:
    """Return `(left, right)` operand sequences for an operator of `arity`.

    For a unary operator the whole prefix is the operand and `right` is empty.
    For a binary operator the left operand is a complete postfix expression,
    so the simulated stack depth is exactly 1 at its last token and never
    returns to 1 while the right operand is being pushed. The last index at
    which the depth equals 1 is therefore the split boundary.
    """
    tokens = tuple(prefix)
    if arity == 1:
        return tokens, ()

    depth = 0
    boundary = 0
    for index, tok in enumerate(tokens):
        depth += stack_effect(tok)
        if depth == 1:
            boundary = index
    return tokens[: boundary + 1], tokens[boundary + 1 :]
