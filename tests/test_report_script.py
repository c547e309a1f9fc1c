from __future__ import annotations

import contextlib
import importlib.util
import io
from pathlib import Path
import sys
import unittest
from unittest import mock


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None
REPO_ROOT = Path(__file__).resolve().parent.parent
SCRIPT_PATH = REPO_ROOT / "scripts" / "rpn_report.py"


def _load_module():
    spec = importlib.util.spec_from_file_location("rpn_report", SCRIPT_PATH)
    if spec is None or spec.loader is None:
        raise RuntimeError("Unable to load rpn_report module")
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for report script tests")
class ReportScriptTests(unittest.TestCase):
    def _run(self, *argv: str) -> tuple[int, str]:
        module = _load_module()
        out = io.StringIO()
        with mock.patch.object(sys, "argv", ["rpn_report.py", *argv]), contextlib.redirect_stdout(out):
            code = module.main()
        return code, out.getvalue()

    def test_value_and_derivative_are_reported(self) -> None:
        code, text = self._run("x x *", "--var", "x=3", "--wrt", "x")
        self.assertEqual(code, 0)
        self.assertIn("expression: x x *", text)
        self.assertIn("value: 9.0", text)
        self.assertIn("d/dx: 1 x * x 1 * +", text)
        self.assertIn("d/dx value: 6.0", text)

    def test_invalid_expression_exits_with_one(self) -> None:
        code, text = self._run("3 +")
        self.assertEqual(code, 1)
        self.assertIn("Too many operators", text)

    def test_constant_variable_is_reported_as_error(self) -> None:
        code, text = self._run("x 2 *", "--var", "x=1", "--wrt", "pi")
        self.assertEqual(code, 1)
        self.assertIn("constant", text)

    def test_reader_errors_are_reported(self) -> None:
        code, text = self._run("x $")
        self.assertEqual(code, 1)
        self.assertIn("error:", text)


if __name__ == "__main__":
    unittest.main()
