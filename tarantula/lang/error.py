"""Error handling for the tarantula language. Only InterpreterErrors should be encountered during running: if another
type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Every error is fatal to the unit of input that raised it (a whole file, or one shell line). Output that was already
produced before the error stays visible.
"""

import sys

from termcolor import colored


EX_USAGE = 64     # wrong number of command-line arguments
EX_DATAERR = 65   # lexical or syntax error
EX_NOINPUT = 66   # source file could not be opened
EX_SOFTWARE = 70  # runtime error
EX_INTERRUPT = 130  # interrupted by the user (128 + SIGINT)


class InterpreterError(Exception):
    """Base of all tarantula errors. Holds the offending token (may be None) so that the error can be displayed with
    the source line it came from.
    """
    kind = "Error"
    exit_code = EX_NOINPUT

    def __init__(self, token, message):
        super().__init__(message)
        self.token = token
        self.message = message


class LexicalError(InterpreterError):
    """Malformed lexeme. Only raised for unterminated strings."""
    kind = "LexicalError"
    exit_code = EX_DATAERR


class ParseError(InterpreterError):
    """Grammar violation. The parser aborts on the first one."""
    kind = "ParseError"
    exit_code = EX_DATAERR


class EvalError(InterpreterError):
    """Type mismatch, division by zero or undefined identifier during evaluation."""
    kind = "RuntimeError"
    exit_code = EX_SOFTWARE


class InterruptError(InterpreterError):
    """Stands in for KeyboardInterrupt so that an interrupted run is reported like any other error."""
    exit_code = EX_INTERRUPT


def _plain(text, *args, **kwargs):
    return text


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report tarantula errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True, color=True):
        self.fatal = fatal
        self.interactive = False
        self.colored = colored if color else _plain

        self.path = None   # file being run, used for error context
        self.lexer = None  # lexer of the unit being run, used to recover the offending line

    def register_source(self, path, lexer):
        """Registers the source being run. Should be called prior to parsing/evaluating it."""
        self.path = path
        self.lexer = lexer

    def remove_source(self):
        """Removes source from handler. Should be called after a successful run."""
        self.lexer = None

    def context(self, token):
        """Returns where token occurs: bare column in interactive mode, else file:line:column."""
        if self.interactive:
            return str(token.column)
        return f"{self.path}:{token.line}:{token.column}"

    def diagnose(self, token, warning=False):
        """Returns the offending source line quoted, with the span of token underlined by carets."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        line = self.lexer.line(token.line)
        offset = len(line) - len(line.lstrip())
        underline = " " * (token.column - offset) + "^" * max(len(token.lexeme), 1)

        diagnosis = f"\n\t\"{line.strip()}\"\n"
        diagnosis += "\t" + self.colored(underline, color, attrs=["bold"])
        return diagnosis

    def format(self, error, warning=False):
        """Returns the full report for error (an InterpreterError) as a string."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        kind = "warning" if warning else error.kind

        has_source = error.token is not None and self.lexer is not None
        context = self.context(error.token) if has_source else self.path

        report = ""
        if context:
            report += self.colored(f"{context}: ", attrs=["bold"])
        report += self.colored(f"{kind}: ", color, attrs=["bold"]) + error.message

        if has_source:
            report += "\n" + self.diagnose(error.token, warning)
        return report

    def warn(self, token, message):
        """Prints a warning about token. Never exits."""
        print(self.format(InterpreterError(token, message), warning=True), file=sys.stderr)

    def throw(self, error, internal=False):
        """Reports error (an InterpreterError) to standard error. Exits with the error's exit code if fatal."""
        report = self.format(error)
        if internal:
            report = self.colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"]) + report
        print(report, file=sys.stderr)

        if self.fatal:
            sys.exit(error.exit_code)
        self.remove_source()  # if error occurred, reset source (no need if error is fatal)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(InterruptError(None, "keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(EvalError(None, "maximum nesting depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, InterpreterError):
            self.throw(exc_val)
        elif exc_type is not None:
            error = EvalError(None, f"unknown error: '{exc_type.__name__}: {exc_val}'")
            self.throw(error, internal=True)
            do_exit = True

        return not do_exit
