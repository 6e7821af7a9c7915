"""Handles interactive/command-line mode for the tarantula interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """tarantula interpreter shell. Every line is run on its own, but all lines share the session's global scope."""
    intro = "tarantula interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sess = sess

    def parseline(self, line):
        """Only a line that is exactly 'help', 'exit' or 'EOF' is a shell command; 'help-me' is an identifier."""
        command = line.strip()
        if command in ("help", "exit", "EOF"):
            return command, "", line
        return None, None, line

    def default(self, line):
        """Executes arbitrary tarantula line."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.sess.run(line)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the tarantula interpreter!\n\n"
              "tarantula is a small functional language written in S-expressions. It has \n"
              "numbers, strings, booleans, null, arithmetic, comparisons, 'let' bindings, \n"
              "'if', 'cond', 'and', 'or' and 'print'/'println'.\n\n"
              "Try it out by typing '(let [x 1 y (+ x 1)] (println x y))'. This binds 1 to \n"
              "'x' and 2 to 'y', then prints both on their own line.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
