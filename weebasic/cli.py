import argparse
import json
import logging
import sys
from typing import List, Optional

from .codegen import CodeProgram, MAX_LOCALS
from .dump import dump_code, load_code, disassemble
from .exceptions import InterpreterError, ParserError, ErrorCode, compile_error
from .parser import compile_file
from .vm import VM, MAX_STACK

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

# source file -> one-pass compiler -> code program -> vm


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='weebasic', description='Compile and run a weebasic program')
    parser.add_argument('file', help='source file to run')
    output = parser.add_mutually_exclusive_group()
    output.add_argument('--dump', action='store_true',
                        help='print the compiled instructions and exit')
    output.add_argument('--emit-json', action='store_true',
                        help='print the compiled program as JSON and exit')
    parser.add_argument('--load-json', action='store_true',
                        help='treat FILE as a program written by --emit-json')
    parser.add_argument('--max-stack', type=int, default=MAX_STACK,
                        help=f'operand stack capacity (default: {MAX_STACK})')
    parser.add_argument('--max-locals', type=int, default=MAX_LOCALS,
                        help=f'maximum number of locals (default: {MAX_LOCALS})')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log debug information to stderr')
    return parser


def load_json_file(path: str, max_locals: int = MAX_LOCALS) -> CodeProgram:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return load_code(json.load(f), max_locals)
    except (OSError, ValueError, KeyError, TypeError, IndexError) as e:
        raise ParserError(ErrorCode.SOURCE_UNREADABLE, f'failed to load program "{path}": {e}') from e


def main(argv: Optional[List[str]] = None) -> int:
    args = build_argument_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    try:
        if args.load_json:
            code_program = load_json_file(args.file, max_locals=args.max_locals)
        else:
            code_program = compile_file(args.file, max_locals=args.max_locals)
    except compile_error as e:
        print(f'Compile error: {e}', file=sys.stderr)
        return EXIT_FAILURE
    logger.debug('loaded %r from %s', code_program, args.file)

    if args.dump:
        print(disassemble(code_program))
        return EXIT_OK
    if args.emit_json:
        print(json.dumps(dump_code(code_program)))
        return EXIT_OK

    try:
        VM(code_program, max_stack=args.max_stack).run()
    except InterpreterError as e:
        print(f'Runtime error: {e}', file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK
