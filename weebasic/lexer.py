from .data import wrap_int64
from .exceptions import LexerError, ParserError, ErrorCode

MAX_IDENT_LEN = 64

WHITESPACE = ' \t\r\n'

escape_sequence = {
    '\\': '\\',
    '\"': '\"',
    'n': '\n',
    't': '\t',
}


def is_identifier_char(char: str) -> bool:
    return char != '' and char.isascii() and (char.isalnum() or char == '_')


def is_identifier_start(char: str) -> bool:
    return char != '' and char.isascii() and (char.isalpha() or char == '_')


def is_digit(char: str) -> bool:
    return char != '' and char in '0123456789'


class Location:
    def __init__(self, lineno: int, column: int, offset: int):
        self.lineno = lineno
        self.column = column
        self.offset = offset

    def __repr__(self):
        return f'{self.lineno}:{self.column}'


class Lexer:
    """Cursor over the source text.

    There is no token stream: keywords and operators are recognized by
    ``match_token`` comparing the upcoming characters directly.
    """

    def __init__(self, text: str, max_ident_len: int = MAX_IDENT_LEN):
        self.text: str = text
        self.position: int = 0
        self.max_ident_len: int = max_ident_len

    def location(self, position: int = None) -> Location:
        if position is None:
            position = self.position
        lineno = self.text.count('\n', 0, position) + 1
        column = position - (self.text.rfind('\n', 0, position) + 1) + 1
        return Location(lineno, column, position)

    def at_end(self) -> bool:
        return self.position >= len(self.text)

    def peek_char(self) -> str:
        if self.at_end():
            return ''
        return self.text[self.position]

    def advance_position(self, count: int = 1):
        self.position = min(self.position + count, len(self.text))

    def snippet(self, limit: int = 10) -> str:
        text = self.text[self.position:self.position + limit]
        return text.replace('\r', ' ').replace('\n', ' ')

    def error(self, error_code: ErrorCode, message: str):
        raise LexerError(error_code=error_code, message=f'{message} at {self.location()!r}')

    def skip_whitespace(self):
        while self.peek_char() != '' and self.peek_char() in WHITESPACE:
            self.advance_position()

    def skip_line_comment(self):
        while not self.at_end():
            char = self.peek_char()
            self.advance_position()
            if char == '\n':
                break

    def match_token(self, token: str) -> bool:
        start = self.position
        self.skip_whitespace()
        end = self.position + len(token)
        if not self.text.startswith(token, self.position) or (
                # a keyword must not be the prefix of a longer identifier
                is_identifier_char(token[-1]) and end < len(self.text) and is_identifier_char(self.text[end])):
            self.position = start
            return False
        self.position = end
        self.skip_whitespace()
        return True

    def expect_token(self, token: str):
        if not self.match_token(token):
            self.skip_whitespace()
            if self.at_end():
                raise ParserError(error_code=ErrorCode.UNEXPECTED_EOF,
                                  message=f'expected token "{token}" at {self.location()!r}')
            raise ParserError(error_code=ErrorCode.EXPECTED_TOKEN,
                              message=f'expected token "{token}" at {self.location()!r}')

    def parse_identifier(self) -> str:
        start = self.position
        while is_identifier_char(self.peek_char()):
            if self.position - start >= self.max_ident_len - 1:
                self.position = start
                self.error(ErrorCode.IDENTIFIER_TOO_LONG, 'identifier too long')
            self.advance_position()
        if self.position == start:
            self.error(ErrorCode.EXPECTED_IDENTIFIER, 'expected identifier')
        return self.text[start:self.position]

    def parse_integer(self) -> int:
        value = 0
        while is_digit(self.peek_char()):
            value = wrap_int64(10 * value + (ord(self.peek_char()) - ord('0')))
            self.advance_position()
        return value

    def parse_string(self) -> bytes:
        start = self.position
        value = ''
        # opening quote
        self.advance_position()
        while self.peek_char() != '"':
            if self.at_end():
                self.position = start
                self.error(ErrorCode.UNTERMINATED_STRING, 'unterminated string literal')
            if self.peek_char() == '\\':
                self.advance_position()
                char = self.peek_char()
                if char in escape_sequence.keys():
                    value += escape_sequence[char]
                else:
                    value += '\\' + char
            else:
                value += self.peek_char()
            self.advance_position()
        # closing quote
        self.advance_position()
        return value.encode('utf-8')
