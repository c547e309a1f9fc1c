"""Structural validation of postfix token sequences."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Final

from .tokens import Function, Token, Variable, stack_effect


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.valid


SUCCESS: Final[ValidationResult] = ValidationResult(valid=True)


def validate(
    tokens: Sequence[Token],
    variables: Mapping[str, float],
    *,
    check_variables_set: bool = True,
) -> ValidationResult:
    """Diagnose whether `tokens` form a stack-balanced postfix expression.

    A counter simulates the operand stack depth: operands push one entry,
    binary operators consume one net entry and a k-ary function
    leaves 1 - k net entries (a zero-argument function pushes one). The
    depth must stay at least 1 after every token and be exactly 1 at the end.
    Once it drops below 1 the scan stops, since later tokens cannot be
    interpreted meaningfully.
    """
    errors: list[str] = []
    if check_variables_set:
        for tok in tokens:
            if isinstance(tok, Variable) and tok.name not in variables:
                errors.append(f"The variable '{tok.name}' has not been set")

    count = 0
    for tok in tokens:
        if isinstance(tok, Function) and tok.arity > count:
            errors.append(f"Not enough arguments for '{tok.name}'")
        count += stack_effect(tok)
        if count < 1:
            errors.append("Too many operators")
            return ValidationResult(valid=False, errors=tuple(errors))

    if not tokens:
        errors.append("Empty expression")
    elif count > 1:
        errors.append("Too many operands")
    if not errors:
        return SUCCESS
    return ValidationResult(valid=False, errors=tuple(errors))
