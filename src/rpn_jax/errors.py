"""Structured error types for validation, evaluation and differentiation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .tokens import Token


class RPNError(Exception):
    """Base class for structured rpn-jax errors."""


class RPNEvaluationError(RPNError, ValueError):
    """Generic stack-machine failure while evaluating a token sequence."""


class UnboundVariableError(RPNEvaluationError):
    def __init__(self, name: str) -> None:
        super().__init__(f"No value has been set for the variable '{name}'")
        self.name = name


class OperandCountError(RPNEvaluationError):
    """An operator or function found fewer stack entries than its arity."""

    def __init__(self, token: "Token", available: int) -> None:
        kind = "operands" if token.kind == "operator" else "arguments"
        super().__init__(
            f"Invalid number of {kind} available for {token.kind} '{token.text}' "
            f"(needs {token.arity}, found {available})"
        )
        self.token = token
        self.available = available


class LeftoverOperandsError(RPNEvaluationError):
    def __init__(self, count: int) -> None:
        super().__init__(
            f"Invalid number of items left on the stack ({count}); "
            "a function may have been given the wrong number of arguments"
        )
        self.count = count


class InvalidExpressionError(RPNError, ValueError):
    """The token sequence is not stack balanced."""

    def __init__(self, errors: tuple[str, ...]) -> None:
        super().__init__(f"The expression is invalid for the following reasons: {list(errors)}")
        self.errors = tuple(errors)


class ConstantDerivativeError(RPNError, ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Cannot differentiate with respect to '{name}' because it is a constant")
        self.name = name


class InvalidVariableNameError(RPNError, ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f"The variable name '{name}' is invalid since a function with the same name exists")
        self.name = name


class UnsupportedDerivativeError(RPNError, NotImplementedError):
    """The differentiator has no rule for this token."""

    def __init__(self, token: "Token") -> None:
        super().__init__(f"Differentiation of {token.kind} '{token.text}' is not supported")
        self.token = token


class UnknownTokenError(RPNError, KeyError):
    """Lookup miss in the built-in operator/function registry."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class PostfixSyntaxError(RPNError, ValueError):
    def __init__(self, message: str, word: str, start: int, end: int) -> None:
        super().__init__(message)
        self.message = message
        self.word = word
        self.start = start
        self.end = end

    def __str__(self) -> str:
        return f"{self.message} at span [{self.start}, {self.end}); found {self.word!r}"
