"""Validate, evaluate and differentiate a postfix expression."""

from __future__ import annotations

import argparse

from rpn_jax import RPNError, parse_postfix


def _binding(text: str) -> tuple[str, float]:
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected name=value, got {text!r}")
    try:
        return name, float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid value in {text!r}") from exc


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("expression", help="postfix expression, e.g. 'x 2 ^ 3 x * +'")
    parser.add_argument(
        "--var",
        action="append",
        type=_binding,
        default=[],
        metavar="NAME=VALUE",
        help="bind a variable (repeatable)",
    )
    parser.add_argument("--wrt", help="differentiate with respect to this variable")
    args = parser.parse_args()

    try:
        expr = parse_postfix(args.expression, variables=dict(args.var))
    except RPNError as exc:
        print(f"error: {exc}")
        return 1

    validation = expr.validate()
    print(f"expression: {expr}")
    if not validation.valid:
        print("invalid:")
        for error in validation.errors:
            print(f"  - {error}")
        return 1

    try:
        print(f"value: {expr.evaluate()!r}")
        if args.wrt:
            derivative = expr.derivative(args.wrt)
            print(f"d/d{args.wrt}: {derivative}")
            print(f"d/d{args.wrt} value: {derivative.evaluate()!r}")
            print(f"jax.grad value: {expr.numeric_derivative(args.wrt)!r}")
    except RPNError as exc:
        print(f"error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
