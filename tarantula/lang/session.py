"""Session control for the tarantula language. Runs units of input (a whole file, or one shell line) through the
lexer, parser and evaluator, either in command-line mode or file interpretation mode.
"""

from tarantula.lang.error import InterpreterError
from tarantula.lang.evaluator import Interpreter
from tarantula.lang.grammar import Parser
from tarantula.lang.lexical import Lexer


class Session:
    """Governs a tarantula session. The Interpreter, and with it the global scope, is kept for the whole session."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, out=None):
        self.error_handler = error_handler
        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.interpreter = Interpreter(out)
        self.source = None

        if self.cmd_line:
            self.error_handler.fatal = False
            self.error_handler.interactive = True

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    self.source = file.read()
            except (OSError, UnicodeDecodeError):
                raise InterpreterError(None, f"'{path}' could not be opened")

        elif not cmd_line:
            raise InterpreterError(None, "'<in>' is a reserved filename")

    def lex(self, source):
        """Returns the tokens of source. Registers source with the error handler so errors can show their line."""
        lexer = Lexer(source)
        self.error_handler.register_source(self.path, lexer)
        tokens = lexer.tokenize()

        if len(tokens) == 1 and not self.cmd_line:
            self.error_handler.warn(tokens[0], f"'{self.path}' contains no expressions")
        return tokens

    def parse(self, source):
        """Returns the top-level expressions of source."""
        return Parser(self.lex(source)).parse()

    def run(self, source=None):
        """Lexes, parses and evaluates source (the file's contents if None). Will raise any errors that are
        encountered; no expression is evaluated if source does not lex or parse.
        """
        if source is None:
            source = self.source

        self.interpreter.interpret(self.parse(source))
        self.error_handler.remove_source()  # error was not raised

    def show_tokens(self, source=None):
        """Prints the tokens of source, one per line."""
        for token in self.lex(self.source if source is None else source):
            print(token)
        self.error_handler.remove_source()

    def show_tree(self, source=None):
        """Prints the syntax tree of every top-level expression of source."""
        for expr in self.parse(self.source if source is None else source):
            print(expr.display())
        self.error_handler.remove_source()
