import contextlib
import io
import os
import tempfile
import unittest

from tarantula.lang.error import ErrorHandler, EvalError, InterpreterError, LexicalError, ParseError
from tarantula.lang.session import Session


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.error_handler = ErrorHandler(color=False)

    def write(self, source):
        handle, path = tempfile.mkstemp(suffix=".tt")
        with os.fdopen(handle, "w") as file:
            file.write(source)
        self.addCleanup(os.remove, path)
        return path

    def test_file(self):
        path = self.write("(println \"a\")\n(print (+ 1 2))\n")
        sess = Session(self.error_handler, path, cmd_line=False, out=self.out)
        sess.run()
        self.assertEqual("a\n3", self.out.getvalue())
        self.assertTrue(self.error_handler.fatal)
        self.assertIsNone(self.error_handler.lexer)

    def test_missing_file(self):
        with self.assertRaises(InterpreterError) as context:
            Session(self.error_handler, "/nonexistent/prog.tt", cmd_line=False)
        self.assertEqual("'/nonexistent/prog.tt' could not be opened", context.exception.message)

    def test_undecodable_file(self):
        handle, path = tempfile.mkstemp(suffix=".tt")
        with os.fdopen(handle, "wb") as file:
            file.write(b"(print \"\xff\xfe\")")
        self.addCleanup(os.remove, path)

        with self.assertRaises(InterpreterError) as context:
            Session(self.error_handler, path, cmd_line=False)
        self.assertEqual(f"'{path}' could not be opened", context.exception.message)

    def test_reserved_filename(self):
        self.assertRaises(InterpreterError, Session, self.error_handler, Session.SH_FILE, cmd_line=False)

    def test_errors_abort_whole_unit(self):
        should_raise = {
            "(print 1) (print \"abc": LexicalError,
            "(print 1) (print 2": ParseError,
            "(print 1) (print (/ 1 0)) (print 3)": EvalError,
        }
        outputs = {LexicalError: "", ParseError: "", EvalError: "1"}

        for source, error in should_raise.items():
            out = io.StringIO()
            sess = Session(ErrorHandler(color=False), Session.SH_FILE, cmd_line=True, out=out)
            self.assertRaises(error, sess.run, source)
            self.assertEqual(outputs[error], out.getvalue(), source)
            self.assertIsNotNone(sess.error_handler.lexer, source)

    def test_cmd_line(self):
        sess = Session(self.error_handler, Session.SH_FILE, cmd_line=True, out=self.out)
        self.assertFalse(self.error_handler.fatal)
        self.assertTrue(self.error_handler.interactive)

        sess.run("(print 1)")
        sess.run("(let [x 2] (print x))")
        self.assertEqual("12", self.out.getvalue())
        self.assertEqual({}, sess.interpreter.globals.values)

    def test_empty_file_warns(self):
        path = self.write("; nothing here\n")
        stderr = io.StringIO()

        with contextlib.redirect_stderr(stderr):
            Session(self.error_handler, path, cmd_line=False, out=self.out).run()

        self.assertIn("warning: ", stderr.getvalue())
        self.assertIn("contains no expressions", stderr.getvalue())

    def test_show(self):
        path = self.write("(print (+ 1 2))")
        sess = Session(self.error_handler, path, cmd_line=False)
        stdout = io.StringIO()

        with contextlib.redirect_stdout(stdout):
            sess.show_tokens()
        lines = stdout.getvalue().splitlines()
        self.assertEqual(9, len(lines))
        self.assertEqual("1:1 LPAREN '('", lines[0])
        self.assertEqual("1:11 NUMBER '1' 1.0", lines[4])

        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout):
            sess.show_tree()
        expected = ("Print('print')(nodes=[\n"
                    "    Body(nodes=[\n"
                    "        Binary('+')(nodes=[\n"
                    "            Literal(1.0),\n"
                    "            Literal(2.0)\n"
                    "        ])\n"
                    "    ])\n"
                    "])\n")
        self.assertEqual(expected, stdout.getvalue())


if __name__ == '__main__':
    unittest.main()
