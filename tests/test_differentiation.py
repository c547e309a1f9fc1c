from __future__ import annotations

import importlib.util
import math
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None

SAMPLES = (-2.5, -1.0, -0.3, 0.4, 1.0, 1.7, 3.0)


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for differentiation tests")
class DifferentiationTests(unittest.TestCase):
    def _derivative_at(self, source: str, x: float, *, wrt: str = "x", **bindings: float) -> float:
        from rpn_jax import parse_postfix

        expr = parse_postfix(source, variables={"x": x, **bindings})
        return expr.derivative(wrt).evaluate()

    def test_leaf_derivatives(self) -> None:
        from rpn_jax import parse_postfix

        cases = [
            ("3", "0"),
            ("x", "1"),
            ("y", "0"),
            ("pi", "0"),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                self.assertEqual(str(parse_postfix(source).derivative("x")), expected)

    def test_rule_shapes(self) -> None:
        from rpn_jax import parse_postfix

        cases = [
            ("x x *", "1 x * x 1 * +"),
            ("x sin", "1 x cos *"),
            ("x 2 ^", "2 x 2 1 - ^ * 1 *"),
            ("x y +", "1 0 +"),
            ("x neg", "1 neg"),
            ("x log", "1 1 x / *"),
            ("x abs", "1 x signum *"),
            ("x signum", "1 x delta *"),
            ("x floor", "1 x floor_derivative *"),
        ]
        for source, expected in cases:
            with self.subTest(source=source):
                self.assertEqual(str(parse_postfix(source).derivative("x")), expected)

    def test_square_by_product_rule(self) -> None:
        for x in SAMPLES:
            with self.subTest(x=x):
                self.assertAlmostEqual(self._derivative_at("x x *", x), 2 * x, places=9)

    def test_sin_derivative_is_cos(self) -> None:
        for x in SAMPLES:
            with self.subTest(x=x):
                self.assertAlmostEqual(self._derivative_at("x sin", x), math.cos(x), places=9)

    def test_constant_exponent_power_rule(self) -> None:
        for x in SAMPLES:
            with self.subTest(x=x):
                self.assertAlmostEqual(self._derivative_at("x 2 ^", x), 2 * x, places=9)
                self.assertAlmostEqual(self._derivative_at("x 3 ^", x), 3 * x**2, places=9)

    def test_closed_forms(self) -> None:
        cases = [
            ("x 2 ^ 3 x * +", 2.0, 7.0),
            ("x 2 ^ 3 x * -", 2.0, 1.0),
            ("1 x /", 2.0, -0.25),
            ("x 1 x + /", 1.0, 0.25),
            ("x x ^", 1.3, 1.3**1.3 * (1 + math.log(1.3))),
            ("2 x ^", 1.5, 2**1.5 * math.log(2)),
            ("x exp", 0.5, math.exp(0.5)),
            ("x expm1", 0.5, math.exp(0.5)),
            ("x sqrt", 4.0, 0.25),
            ("x cbrt", 8.0, 1.0 / 12.0),
            ("x 3 pow", 2.0, 12.0),
            ("x cos", 0.7, -math.sin(0.7)),
            ("x tan", 0.7, 1.0 / math.cos(0.7) ** 2),
            ("x asin", 0.3, 1.0 / math.sqrt(1 - 0.09)),
            ("x acos", 0.3, -1.0 / math.sqrt(1 - 0.09)),
            ("x atan", 2.0, 0.2),
            ("x sinh", 0.7, math.cosh(0.7)),
            ("x cosh", 0.7, math.sinh(0.7)),
            ("x tanh", 0.7, 1.0 / math.cosh(0.7) ** 2),
            ("x log", 4.0, 0.25),
            ("x log2", 3.0, 1.0 / (3.0 * math.log(2))),
            ("x log10", 3.0, 1.0 / (3.0 * math.log(10))),
            ("x log1p", 2.0, 1.0 / 3.0),
            ("x abs", -2.0, -1.0),
            ("x abs", 2.0, 1.0),
            ("x pos", 2.0, 1.0),
            ("x neg 2 *", 2.0, -2.0),
        ]
        for source, x, expected in cases:
            with self.subTest(source=source, x=x):
                self.assertAlmostEqual(self._derivative_at(source, x), expected, places=9)

    def test_chain_rule_composes(self) -> None:
        for x in (0.2, 0.9, 1.4):
            with self.subTest(x=x):
                got = self._derivative_at("x 2 ^ sin", x)
                self.assertAlmostEqual(got, 2 * x * math.cos(x**2), places=9)
                got = self._derivative_at("x sin log", x)
                self.assertAlmostEqual(got, math.cos(x) / math.sin(x), places=9)

    def test_other_variables_are_constants(self) -> None:
        self.assertAlmostEqual(self._derivative_at("x y *", 2.0, y=5.0), 5.0, places=12)
        self.assertAlmostEqual(self._derivative_at("x y *", 2.0, wrt="y", y=5.0), 2.0, places=12)
        self.assertAlmostEqual(self._derivative_at("pi x *", 2.0), math.pi, places=12)

    def test_modulo_is_rewritten_before_differentiation(self) -> None:
        self.assertAlmostEqual(self._derivative_at("x 3 %", 7.5), 1.0, places=12)
        self.assertAlmostEqual(self._derivative_at("x 3 %", 4.0), 1.0, places=12)

    def test_exp_derivative_ignores_rebound_e(self) -> None:
        from rpn_jax import parse_postfix

        for source in ("x exp", "x expm1"):
            with self.subTest(source=source):
                expr = parse_postfix(source, variables={"x": 0.0, "e": 2.0})
                self.assertAlmostEqual(expr.derivative("x").evaluate(), 1.0, places=12)
                expr.set_variable("x", 1.5)
                self.assertAlmostEqual(expr.derivative("x").evaluate(), math.exp(1.5), places=9)

    def test_signum_placeholder(self) -> None:
        self.assertEqual(self._derivative_at("x signum", 1.5), 0.0)
        self.assertEqual(self._derivative_at("x signum", -1.5), 0.0)
        self.assertEqual(self._derivative_at("x signum", 0.0), math.inf)

    def test_floor_and_ceil_placeholders(self) -> None:
        self.assertEqual(self._derivative_at("x floor", 2.5), 0.0)
        self.assertTrue(math.isnan(self._derivative_at("x floor", 2.0)))
        self.assertEqual(self._derivative_at("x ceil", 2.5), 0.0)
        self.assertTrue(math.isnan(self._derivative_at("x ceil", -3.0)))

    def test_second_derivative(self) -> None:
        from rpn_jax import parse_postfix

        expr = parse_postfix("x 3 ^", variables={"x": 2.0})
        self.assertAlmostEqual(expr.derivative("x").derivative("x").evaluate(), 12.0, places=9)
        sin = parse_postfix("x sin", variables={"x": 0.4})
        self.assertAlmostEqual(sin.derivative("x").derivative("x").evaluate(), -math.sin(0.4), places=9)

    def test_result_keeps_bindings_and_reserved_names(self) -> None:
        from rpn_jax import Function, InvalidVariableNameError, parse_postfix

        twice = Function("twice", 1, lambda v: 2 * v)
        expr = parse_postfix("x y *", [twice], variables={"x": 3.0, "y": 2.0})
        expr.set_variable("y", 4.0)
        derivative = expr.derivative("x")
        self.assertEqual(derivative.variables["x"], 3.0)
        self.assertEqual(derivative.variables["y"], 4.0)
        self.assertAlmostEqual(derivative.variables["pi"], math.pi)
        self.assertEqual(derivative.evaluate(), 4.0)
        self.assertIn("twice", derivative.user_function_names)
        with self.assertRaises(InvalidVariableNameError):
            derivative.set_variable("twice", 1.0)

    def test_derivative_does_not_touch_the_source(self) -> None:
        from rpn_jax import parse_postfix

        expr = parse_postfix("x sin x *", variables={"x": 1.0})
        before = expr.tokens
        expr.derivative("x")
        self.assertEqual(expr.tokens, before)
        self.assertEqual(str(expr), "x sin x *")

    def test_reserved_constants_cannot_be_differentiated_against(self) -> None:
        from rpn_jax import ConstantDerivativeError, parse_postfix

        for name in ("pi", "π", "e", "φ"):
            with self.subTest(name=name):
                with self.assertRaises(ConstantDerivativeError) as ctx:
                    parse_postfix("x 2 *").derivative(name)
                self.assertEqual(ctx.exception.name, name)

    def test_invalid_expression_is_rejected(self) -> None:
        from rpn_jax import InvalidExpressionError, parse_postfix

        with self.assertRaises(InvalidExpressionError) as ctx:
            parse_postfix("3 +").derivative("x")
        self.assertEqual(ctx.exception.errors, ("Too many operators",))

    def test_empty_sequence_cannot_be_differentiated(self) -> None:
        from rpn_jax import InvalidExpressionError, differentiate

        with self.assertRaises(InvalidExpressionError) as ctx:
            differentiate((), "x")
        self.assertEqual(ctx.exception.errors, ("Empty expression",))

    def test_unbound_variables_do_not_block_differentiation(self) -> None:
        from rpn_jax import parse_postfix

        self.assertEqual(str(parse_postfix("x y +").derivative("x")), "1 0 +")

    def test_unsupported_constructs(self) -> None:
        from rpn_jax import Expression, Function, Number, Operator, UnsupportedDerivativeError, Variable, parse_postfix

        twice = Function("twice", 1, lambda v: 2 * v)
        with self.assertRaises(UnsupportedDerivativeError) as ctx:
            parse_postfix("x twice", [twice]).derivative("x")
        self.assertEqual(ctx.exception.token, twice)

        hypot = Function("hypot", 2, lambda a, b: (a * a + b * b) ** 0.5)
        with self.assertRaises(UnsupportedDerivativeError):
            parse_postfix("x 1 hypot", [hypot]).derivative("x")

        shift = Operator("#", 2, lambda a, b: a + b)
        with self.assertRaises(UnsupportedDerivativeError) as ctx:
            Expression((Variable("x"), Number(1.0), shift)).derivative("x")
        self.assertIn("'#'", str(ctx.exception))

        with self.assertRaises(UnsupportedDerivativeError) as ctx:
            parse_postfix("x signum").derivative("x").derivative("x")
        self.assertEqual(ctx.exception.token.name, "delta")

    def test_unsupported_construct_in_subterm_is_reported(self) -> None:
        from rpn_jax import Function, UnsupportedDerivativeError, parse_postfix

        twice = Function("twice", 1, lambda v: 2 * v)
        with self.assertRaises(UnsupportedDerivativeError):
            parse_postfix("x twice x +", [twice]).derivative("x")


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for differentiation tests")
class SymbolicAgainstJaxGradTests(unittest.TestCase):
    CASES = (
        ("x 3 ^ sin", 0.7),
        ("x x ^", 1.3),
        ("x 2 ^ 1 + log x cos *", 0.9),
        ("x sqrt x exp /", 2.0),
        ("x atan x tanh -", -0.6),
        ("2 x * asin", 0.2),
        ("x cbrt x log10 +", 5.0),
        ("x 2 pow x sinh *", 1.1),
        ("x 3 % x *", 7.5),
    )

    def test_symbolic_matches_jax_grad(self) -> None:
        from rpn_jax import parse_postfix

        for source, x in self.CASES:
            with self.subTest(source=source, x=x):
                expr = parse_postfix(source, variables={"x": x})
                symbolic = expr.derivative("x").evaluate()
                self.assertAlmostEqual(symbolic, expr.numeric_derivative("x"), places=6)


if __name__ == "__main__":
    unittest.main()
