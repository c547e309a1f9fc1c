"""Postfix expression with its own variable environment."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import Executor, Future

from .builtins import CONSTANT_NAMES, DEFAULT_CONSTANTS, is_builtin_function
from .compiled import CompiledExpression, compile_tokens
from .differentiator import differentiate
from .errors import ConstantDerivativeError, InvalidExpressionError, InvalidVariableNameError, UnboundVariableError
from .evaluator import evaluate as evaluate_tokens
from .lexer import to_postfix, tokenize_postfix
from .tokens import Function, Token
from .validation import ValidationResult, validate as validate_tokens

logger = logging.getLogger(__name__)


class Expression:
    """An immutable postfix token sequence plus mutable variable bindings.

    Every new expression starts from `DEFAULT_CONSTANTS`. Names in
    `user_function_names` (and the built-in function names) cannot be bound
    as variables.
    """

    def __init__(
        self,
        tokens: Iterable[Token],
        *,
        user_function_names: Iterable[str] = (),
        variables: Mapping[str, float] | None = None,
    ) -> None:
        self._tokens: tuple[Token, ...] = tuple(tokens)
        self._user_function_names: frozenset[str] = frozenset(user_function_names)
        self._variables: dict[str, float] = dict(DEFAULT_CONSTANTS)
        if variables is not None:
            self.set_variables(variables)

    @property
    def tokens(self) -> tuple[Token, ...]:
        return self._tokens

    @property
    def user_function_names(self) -> frozenset[str]:
        return self._user_function_names

    @property
    def variables(self) -> dict[str, float]:
        """Snapshot of the current bindings."""
        return dict(self._variables)

    def copy(self) -> "Expression":
        """Return an independent expression with the same tokens and bindings."""
        duplicate = Expression(self._tokens, user_function_names=self._user_function_names)
        duplicate._variables = dict(self._variables)
        return duplicate

    def __copy__(self) -> "Expression":
        return self.copy()

    def __deepcopy__(self, memo) -> "Expression":
        return self.copy()

    def _check_variable_name(self, name: str) -> None:
        if name in self._user_function_names or is_builtin_function(name):
            raise InvalidVariableNameError(name)

    def set_variable(self, name: str, value: float) -> "Expression":
        self._check_variable_name(name)
        self._variables[name] = float(value)
        return self

    def set_variables(self, variables: Mapping[str, float]) -> "Expression":
        for name, value in variables.items():
            self.set_variable(name, value)
        return self

    def validate(self, check_variables_set: bool = True) -> ValidationResult:
        return validate_tokens(self._tokens, self._variables, check_variables_set=check_variables_set)

    def evaluate(self) -> float:
        return evaluate_tokens(self._tokens, self._variables)

    def evaluate_async(self, executor: Executor) -> Future:
        """Schedule `evaluate()` on `executor`; failures surface through the future."""
        logger.debug("submitting evaluation of %d tokens", len(self._tokens))
        return executor.submit(self.evaluate)

    def derivative(self, variable: str) -> "Expression":
        """Differentiate with respect to `variable`, treating other names as constants.

        The result carries this expression's current bindings.

        Raises:
            InvalidExpressionError: the token sequence is not stack balanced.
            ConstantDerivativeError: `variable` names a built-in constant.
            UnsupportedDerivativeError: an operator or function has no rule.
        """
        validation = self.validate(check_variables_set=False)
        if not validation.valid:
            raise InvalidExpressionError(validation.errors)
        if variable in CONSTANT_NAMES:
            raise ConstantDerivativeError(variable)

        tokens = differentiate(self._tokens, variable)
        logger.debug(
            "derivative with respect to %r: %d tokens -> %d tokens",
            variable,
            len(self._tokens),
            len(tokens),
        )
        result = Expression(tokens, user_function_names=self._user_function_names)
        result.set_variables(self._variables)
        return result

    def compile(self, *arg_names: str) -> CompiledExpression:
        """Lower into a JAX-traceable callable of `arg_names`.

        Names not listed in `arg_names` keep their current bindings.
        """
        constants = {name: value for name, value in self._variables.items() if name not in arg_names}
        return compile_tokens(self._tokens, arg_names=tuple(arg_names), constants=constants)

    def numeric_derivative(self, variable: str) -> float:
        """Evaluate d/d`variable` at the current bindings with `jax.grad`."""
        if variable in CONSTANT_NAMES:
            raise ConstantDerivativeError(variable)
        point = self._variables.get(variable)
        if point is None:
            raise UnboundVariableError(variable)
        grad = self.compile(variable).grad()
        return float(grad(float(point)))

    def to_postfix(self) -> str:
        return to_postfix(self._tokens)

    def __str__(self) -> str:
        return self.to_postfix()

    def __repr__(self) -> str:
        return f"Expression({self.to_postfix()!r})"


def parse_postfix(
    source: str,
    functions: Sequence[Function] | Mapping[str, Function] | None = None,
    *,
    variables: Mapping[str, float] | None = None,
) -> Expression:
    """Read postfix text into an `Expression`.

    Custom `functions` become reserved names that cannot be bound as variables.
    """
    if functions is None:
        custom: dict[str, Function] = {}
    elif isinstance(functions, Mapping):
        custom = dict(functions)
    else:
        custom = {fn.name: fn for fn in functions}
    tokens = tokenize_postfix(source, custom)
    return Expression(tokens, user_function_names=custom, variables=variables)
