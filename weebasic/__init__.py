from .lexer import Lexer
from .parser import Parser, compile_source, compile_file
from .codegen import CodeGenerator, CodeProgram, OPCodes
from .vm import VM, run_source
from .dump import dump_code, load_code, disassemble
from .exceptions import InterpreterError, LexerError, ParserError, CodeGeneratorError, VMError, ErrorCode, compile_error
