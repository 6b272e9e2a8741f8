from enum import Enum


class ErrorCode(Enum):
    # LexerError
    EXPECTED_IDENTIFIER = 'Expected identifier'
    IDENTIFIER_TOO_LONG = 'Identifier too long'
    UNTERMINATED_STRING = 'Unterminated string'

    # ParserError
    SOURCE_UNREADABLE = 'Source unreadable'
    EXPECTED_TOKEN = 'Expected token'
    UNDECLARED_VARIABLE = 'Undeclared variable'
    REDECLARED_VARIABLE = 'Redeclared variable'
    TOO_MANY_LOCALS = 'Too many locals'
    INVALID_EXPRESSION = 'Invalid expression'
    INVALID_STATEMENT = 'Invalid statement'
    UNEXPECTED_EOF = 'Unexpected end of file'

    # CodeGeneratorError
    NOT_A_JUMP = 'Not a jump'

    # VMError
    RUNTIME_ERROR = 'Run-time error'
    UNKNOWN_OPCODE = 'Unknown opcode'
    TYPE_ERROR = 'Type Error'
    UNSET_LOCAL = 'Unset local'
    STACK_OVERFLOW = 'Stack overflow'
    STACK_UNDERFLOW = 'Stack underflow'
    JUMP_OUT_OF_RANGE = 'Jump out of range'


class InterpreterError(Exception):
    def __init__(self, error_code: ErrorCode, message: str = ''):
        self.error_code: ErrorCode = error_code
        self.message: str = message
        # prefix the message with the exception class name
        super().__init__(f'{self.__class__.__name__}: {error_code.value}: {message}')


class LexerError(InterpreterError):
    pass


class ParserError(InterpreterError):
    pass


class CodeGeneratorError(InterpreterError):
    pass


class VMError(InterpreterError):
    pass


compile_error = (LexerError, ParserError, CodeGeneratorError)
