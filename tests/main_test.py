import contextlib
import io
import os
import tempfile
import unittest
from unittest import mock

from tarantula.lang.error import EX_DATAERR, EX_NOINPUT, EX_SOFTWARE, EX_USAGE
from tarantula.main import main


class MainTestCase(unittest.TestCase):

    def write(self, source):
        handle, path = tempfile.mkstemp(suffix=".tt")
        with os.fdopen(handle, "w") as file:
            file.write(source)
        self.addCleanup(os.remove, path)
        return path

    def run_main(self, *argv, stdin=""):
        """Returns (exit code, stdout, stderr) of running main with argv."""
        stdout, stderr = io.StringIO(), io.StringIO()
        code = 0

        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr), \
                mock.patch("sys.stdin", io.StringIO(stdin)):
            try:
                main(["--no-color", *argv])
            except SystemExit as exc:
                code = exc.code

        return code, stdout.getvalue(), stderr.getvalue()

    def test_run_file(self):
        path = self.write("; sum\n(print (+ 1 2 3))\n(let [x 1 y (+ 1 x)] (println \"\" x y))")
        self.assertEqual((0, "6\n1\n2\n", ""), self.run_main(path))

    def test_exit_codes(self):
        cases = {
            "(print \"abc)": (EX_DATAERR, "", ":1:8: LexicalError: Unterminated string starting at ln 1, col 8"),
            "(print 1)\n(print (+ 1 2)": (EX_DATAERR, "", ":2:15: ParseError: Expression 'print' is missing"),
            "(print 1)\n  (print (> 3 2 1))": (EX_SOFTWARE, "1", ":2:11: RuntimeError: Expected the operands to "
                                                              "operator '>'"),
        }
        for source, (expected_code, expected_out, expected_err) in cases.items():
            path = self.write(source)
            code, out, err = self.run_main(path)
            self.assertEqual(expected_code, code, source)
            self.assertEqual(expected_out, out, source)
            self.assertTrue(err.startswith(path + expected_err), err)

    def test_diagnostic(self):
        path = self.write("(print 1)\n    (print (// 1 0))\n")
        code, out, err = self.run_main(path)

        expected = (f"{path}:2:13: RuntimeError: Cannot divide by zero\n"
                    "\n"
                    "\t\"(print (// 1 0))\"\n"
                    "\t         ^^\n")
        self.assertEqual((EX_SOFTWARE, "1", expected), (code, out, err))

    def test_missing_file(self):
        code, out, err = self.run_main("/nonexistent/prog.tt")
        self.assertEqual(EX_NOINPUT, code)
        self.assertIn("'/nonexistent/prog.tt' could not be opened", err)

    def test_undecodable_file(self):
        handle, path = tempfile.mkstemp(suffix=".tt")
        with os.fdopen(handle, "wb") as file:
            file.write(b"\xff\xfe")
        self.addCleanup(os.remove, path)

        code, out, err = self.run_main(path)
        self.assertEqual((EX_NOINPUT, ""), (code, out))
        self.assertEqual(f"Error: '{path}' could not be opened\n", err)

    def test_usage(self):
        code, out, err = self.run_main("a.tt", "b.tt")
        self.assertEqual((EX_USAGE, "Usage: tarantula [script]\n"), (code, out))

    def test_dump(self):
        path = self.write("(print -1)")

        code, out, err = self.run_main("--tokens", path)
        self.assertEqual(0, code)
        self.assertEqual(["1:1 LPAREN '('", "1:2 PRINT 'print'", "1:8 MINUS '-'", "1:9 NUMBER '1' 1.0",
                          "1:10 RPAREN ')'", "1:11 EOF ''"], out.splitlines())

        code, out, err = self.run_main("--ast", path)
        self.assertEqual(0, code)
        self.assertEqual("Print('print')(nodes=[\n    Body(nodes=[\n        Unary('-')(nodes=[\n"
                         "            Literal(1.0)\n        ])\n    ])\n])\n", out)

    def test_interactive(self):
        code, out, err = self.run_main(stdin="(let [x 2] (println (* x x)))\n(print y)\n(print \"done\")\n")
        self.assertEqual(0, code)
        self.assertIn("4\n", out)
        self.assertIn("done", out)
        self.assertTrue(err.startswith("8: RuntimeError: Undefined identifier 'y'"), err)


if __name__ == '__main__':
    unittest.main()
