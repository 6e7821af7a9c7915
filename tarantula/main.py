"""Uses implementation of the tarantula language to interpret source files/run in command-line mode. Also uses error
handling context manager. Called from the tarantula executable script.

Exit codes: 64 on wrong usage, 65 on a lexical or syntax error, 66 if the file can't be read, 70 on a runtime error.
"""

import argparse
import sys

from tarantula.lang.error import EX_USAGE, ErrorHandler
from tarantula.lang.session import Session
from tarantula.lang.shell import Shell


def build_parser():
    """Returns the command-line argument parser."""
    parser = argparse.ArgumentParser(prog="tarantula", description="tarantula language interpreter")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="*")
    parser.add_argument("--no-color", help="do not color error messages", action="store_true")

    dump = parser.add_mutually_exclusive_group()
    dump.add_argument("--tokens", help="print the tokens of the file instead of running it", action="store_true")
    dump.add_argument("--ast", help="print the syntax tree of the file instead of running it", action="store_true")
    return parser


def main(argv=None):
    """Runs tarantula interpreter. Called from tarantula executable script."""
    args = build_parser().parse_args(argv)

    if len(args.file) > 1:
        print("Usage: tarantula [script]")
        sys.exit(EX_USAGE)

    with ErrorHandler(color=not args.no_color) as error_handler:
        if args.file:
            sess = Session(error_handler, args.file[0], cmd_line=False)

            if args.tokens:
                sess.show_tokens()
            elif args.ast:
                sess.show_tree()
            else:
                sess.run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()


if __name__ == "__main__":
    main()
