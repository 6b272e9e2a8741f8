import logging

from .codegen import CodeGenerator, CodeProgram, LocalVariables, OPCodes, MAX_LOCALS, binary_operator_to_opcodes
from .data import StringData
from .exceptions import ParserError, ErrorCode
from .lexer import Lexer, is_digit, is_identifier_start

logger = logging.getLogger(__name__)

binary_operators = ['+', '-', '==', '<']


class Parser:
    """One-pass compiler: every parse method emits code as it goes."""

    def __init__(self, lexer: Lexer, max_locals: int = MAX_LOCALS):
        self.lexer: Lexer = lexer
        self.local_variables: LocalVariables = LocalVariables(max_locals)
        self.generator: CodeGenerator = CodeGenerator()

    def error(self, error_code: ErrorCode, message: str):
        raise ParserError(error_code=error_code, message=f'{message} at {self.lexer.location()!r}')

    def parse(self) -> CodeProgram:
        self.parse_program()
        code_program = self.generator.generate(self.local_variables.names)
        logger.debug('compiled %d codes, %d locals', len(code_program), code_program.num_locals)
        return code_program

    def parse_program(self):
        while True:
            self.lexer.skip_whitespace()
            if self.lexer.at_end():
                break
            self.parse_statement()

    def parse_statement(self):
        self.lexer.skip_whitespace()

        if self.lexer.at_end():
            self.error(ErrorCode.UNEXPECTED_EOF, 'expected statement')
        elif self.lexer.peek_char() == '#':
            # comment
            self.lexer.skip_line_comment()
        elif self.lexer.match_token('let'):
            # let <ident> = <expr>
            name = self.lexer.parse_identifier()
            self.lexer.expect_token('=')
            # the value is compiled before the name exists, so it cannot refer to itself
            self.parse_expression()
            slot = self.local_variables.declare(name)
            self.generator.emit(OPCodes.SET_LOCAL, slot)
        elif self.lexer.match_token('if'):
            # if <expr> then <stmt>
            #
            #     <expr>
            #     IF_NOT a
            #     <stmt>
            # a:
            self.parse_expression()
            self.lexer.expect_token('then')
            if_not_index = self.generator.emit(OPCodes.IF_NOT, 0)
            self.parse_statement()
            self.generator.patch_to_here(if_not_index)
        elif self.lexer.match_token('begin'):
            # begin <stmt>* end
            while not self.lexer.match_token('end'):
                self.lexer.skip_whitespace()
                if self.lexer.at_end():
                    self.error(ErrorCode.UNEXPECTED_EOF, 'expected token "end"')
                self.parse_statement()
        elif self.lexer.match_token('print'):
            self.parse_expression()
            self.generator.emit(OPCodes.PRINT)
        elif self.lexer.match_token('assert'):
            # <expr>
            # IF 1
            # ERROR
            self.parse_expression()
            self.generator.emit(OPCodes.IF, 1)
            self.generator.emit(OPCodes.ERROR)
        else:
            self.error(ErrorCode.INVALID_STATEMENT, f'invalid statement: "{self.lexer.snippet()} [...]"')

    def parse_expression(self):
        self.parse_atom()
        for operator in binary_operators:
            if self.lexer.match_token(operator):
                self.parse_atom()
                self.generator.emit(binary_operator_to_opcodes[operator])
                break

    def parse_atom(self):
        self.lexer.skip_whitespace()
        char = self.lexer.peek_char()

        if self.lexer.match_token('read_int'):
            self.generator.emit(OPCodes.READ_INT)
        elif is_digit(char):
            self.generator.emit(OPCodes.PUSH, self.lexer.parse_integer())
        elif char == '"':
            self.generator.emit(OPCodes.PUSH_CONST, StringData(self.lexer.parse_string()))
        elif is_identifier_start(char):
            start = self.lexer.location()
            name = self.lexer.parse_identifier()
            slot = self.local_variables.lookup(name)
            if slot is None:
                raise ParserError(ErrorCode.UNDECLARED_VARIABLE,
                                  f'reference to undeclared variable "{name}" at {start!r}')
            self.generator.emit(OPCodes.GET_LOCAL, slot)
        elif char == '':
            self.error(ErrorCode.UNEXPECTED_EOF, 'expected expression')
        else:
            self.error(ErrorCode.INVALID_EXPRESSION, f'invalid expression: "{self.lexer.snippet()} [...]"')


def compile_source(text: str, max_locals: int = MAX_LOCALS) -> CodeProgram:
    return Parser(Lexer(text), max_locals=max_locals).parse()


def compile_file(path: str, max_locals: int = MAX_LOCALS) -> CodeProgram:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ParserError(ErrorCode.SOURCE_UNREADABLE, f'failed to open source file "{path}": {e}') from e
    logger.debug('read %d bytes from %s', len(text.encode('utf-8')), path)
    return compile_source(text, max_locals=max_locals)
