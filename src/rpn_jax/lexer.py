"""Reader and writer for whitespace-separated postfix text."""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping, Sequence

from .builtins import PLACEHOLDER_FUNCTIONS, binary_operator_symbols, builtin_function, builtin_operator, is_builtin_function
from .errors import PostfixSyntaxError
from .tokens import Function, Number, Operator, Token, Variable

_UNARY_WORDS = {
    "neg": "-",
    "pos": "+",
}
_UNARY_NAMES = {symbol: word for word, symbol in _UNARY_WORDS.items()}

_NUMBER_RE = re.compile(
    r"""
    ^
    [+-]?                                     # optional sign
    (?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)          # mantissa
    (?:[eE][+-]?[0-9]+)?                      # exponent
    $
    """,
    re.VERBOSE,
)

_WORD_RE = re.compile(r"\S+")


def _words(source: str) -> Iterator[tuple[str, int, int]]:
    for match in _WORD_RE.finditer(source):
        yield match.group(), match.start(), match.end()


def _read_word(word: str, functions: Mapping[str, Function]) -> Token | None:
    if _NUMBER_RE.match(word):
        return Number(float(word))
    if word in binary_operator_symbols():
        return builtin_operator(word, 2)
    if word in _UNARY_WORDS:
        return builtin_operator(_UNARY_WORDS[word], 1)
    if word in functions:
        return functions[word]
    if is_builtin_function(word):
        return builtin_function(word)
    if word in PLACEHOLDER_FUNCTIONS:
        return PLACEHOLDER_FUNCTIONS[word]
    if word.isidentifier():
        return Variable(word)
    return None


def tokenize_postfix(source: str, functions: Mapping[str, Function] | None = None) -> tuple[Token, ...]:
    """Read postfix text such as ``"x 2 ^ 3 x * +"`` into tokens.

    Custom `functions` take precedence over built-ins of the same name.
    """
    custom = {} if functions is None else dict(functions)
    tokens: list[Token] = []
    for word, start, end in _words(source):
        tok = _read_word(word, custom)
        if tok is None:
            raise PostfixSyntaxError("Unrecognized postfix word", word, start, end)
        tokens.append(tok)
    return tuple(tokens)


def to_postfix(tokens: Sequence[Token]) -> str:
    words: list[str] = []
    for tok in tokens:
        if isinstance(tok, Operator) and tok.arity == 1:
            words.append(_UNARY_NAMES.get(tok.symbol, tok.symbol))
        else:
            words.append(tok.text)
    return " ".join(words)
