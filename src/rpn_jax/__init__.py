"""rpn-jax public API."""

from .builtins import CONSTANT_NAMES, DEFAULT_CONSTANTS, builtin_function, builtin_operator
from .compiled import CompiledExpression, compile_tokens
from .differentiator import differentiate
from .errors import (
    ConstantDerivativeError,
    InvalidExpressionError,
    InvalidVariableNameError,
    LeftoverOperandsError,
    OperandCountError,
    PostfixSyntaxError,
    RPNError,
    RPNEvaluationError,
    UnboundVariableError,
    UnknownTokenError,
    UnsupportedDerivativeError,
)
from .evaluator import evaluate
from .expression import Expression, parse_postfix
from .lexer import to_postfix, tokenize_postfix
from .segmenter import split_arguments
from .tokens import Function, Number, Operator, Token, Variable
from .validation import SUCCESS, ValidationResult, validate

__all__ = [
    "Expression",
    "parse_postfix",
    "tokenize_postfix",
    "to_postfix",
    "evaluate",
    "validate",
    "differentiate",
    "split_arguments",
    "compile_tokens",
    "CompiledExpression",
    "ValidationResult",
    "SUCCESS",
    "Token",
    "Number",
    "Variable",
    "Operator",
    "Function",
    "builtin_operator",
    "builtin_function",
    "DEFAULT_CONSTANTS",
    "CONSTANT_NAMES",
    "RPNError",
    "RPNEvaluationError",
    "UnboundVariableError",
    "OperandCountError",
    "LeftoverOperandsError",
    "InvalidExpressionError",
    "ConstantDerivativeError",
    "InvalidVariableNameError",
    "UnsupportedDerivativeError",
    "UnknownTokenError",
    "PostfixSyntaxError",
]
