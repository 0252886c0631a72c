import argparse
import logging
import sys
from typing import List, Optional, TextIO

from predictive_parser import ParseError, Parser
from scanner import InputError, Scanner, ScannerError


class Compiler:
    """
    Front end of the calculator language: scans a source file and either dumps its tokens or its parse tree.

    Attributes:
        scan_only   dump tokens instead of parsing
    """

    def __init__(self,
                 input_path: str = "input.txt",
                 scan_only: bool = False,
                 comments: bool = False,
                 crlf: bool = True,
                 output: Optional[TextIO] = None,
                 parse_tree_path: Optional[str] = None):
        """Inits Compiler

        :arg input_path: the source file
        :arg scan_only: dump tokens instead of parsing
        :arg comments: let the scanner skip // and /* */ comments
        :arg crlf: count CR LF as a single line break
        :arg output: where results and errors are written, stdout by default
        :arg parse_tree_path: if given, the parse tree is also saved in this file
        """
        self._input_path: str = input_path
        self.scan_only: bool = scan_only
        self._comments: bool = comments
        self._crlf: bool = crlf
        self._output: TextIO = output if output is not None else sys.stdout
        self._parse_tree_path: Optional[str] = parse_tree_path

    def run(self) -> bool:
        """Runs the compiler on the input file. Return False if an error was reported."""
        try:
            scanner = Scanner(self._input_path, crlf=self._crlf, comments=self._comments)
            if self.scan_only:
                with scanner:
                    for token in scanner.scan_all():
                        self._output.write(f"{token}\n")
            else:
                parse_tree = Parser(scanner).parse()
                parse_tree.pretty_print(self._output)
                if self._parse_tree_path is not None:
                    parse_tree.save(self._parse_tree_path)
        except ParseError as e:
            self._output.write(f"Parse error: {e}\n")
            return False
        except RecursionError:
            # only reachable through deeply nested parentheses or ! operators
            self._output.write("Parse error: expression nested too deeply\n")
            return False
        except InputError as e:
            self._output.write(f"Input error: {e}\n")
            return False
        except ScannerError as e:
            self._output.write(f"Scan error: {e}\n")
            return False
        return True


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scan and parse a calculator language program.")
    parser.add_argument("source", nargs="?", default="input.txt", help="source file (default: input.txt)")
    parser.add_argument("--scan-only", action="store_true", help="print tokens as '<lexeme> : <kind>' and stop")
    parser.add_argument("--comments", action="store_true", help="skip // and /* */ comments")
    parser.add_argument("--lf-only", action="store_true",
                        help="count carriage returns and line feeds as separate line breaks")
    parser.add_argument("-o", "--output", metavar="PATH", help="also save the parse tree in PATH")
    parser.add_argument("-v", "--verbose", action="store_true", help="log the scanner and parser trace")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_argument_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    compiler = Compiler(args.source,
                        scan_only=args.scan_only,
                        comments=args.comments,
                        crlf=not args.lf_only,
                        parse_tree_path=args.output)
    return 0 if compiler.run() else 1


if __name__ == '__main__':
    sys.exit(main())
