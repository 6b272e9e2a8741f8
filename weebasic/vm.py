import io
import logging
import sys
from typing import List, Optional, TextIO, Tuple

from .codegen import CodeProgram, OPCodes
from .data import T_Data, IntegerData, WEEBASIC_DATA_TYPE, to_bool, type_name, wrap_int64
from .exceptions import VMError, ErrorCode
from .parser import compile_file, compile_source

logger = logging.getLogger(__name__)

MAX_STACK = 1024

READ_INT_PROMPT = 'Input an integer value:\n> '


class VM:
    def __init__(self,
                 code_program: CodeProgram,
                 stdin: Optional[TextIO] = None,
                 stdout: Optional[TextIO] = None,
                 max_stack: int = MAX_STACK):
        self.code_program: CodeProgram = code_program
        self.stdin: Optional[TextIO] = stdin
        self.stdout: Optional[TextIO] = stdout
        self.max_stack: int = max_stack

        # None marks a slot that has not been set yet
        self.locals: List[Optional[T_Data]] = [None] * code_program.num_locals
        self.operate_stack: List[T_Data] = list()
        self.pc: int = 0

    @classmethod
    def run_file(cls, path: str, **kwargs):
        cls(code_program=compile_file(path), **kwargs).run()

    def error(self, error_code: ErrorCode, message: str = ''):
        raise VMError(error_code, f'{message} (pc={self.pc})' if message else f'pc={self.pc}')

    def check_type(self, value: T_Data, data_type: Tuple[type, ...], operator: str):
        if not isinstance(value, data_type):
            self.error(ErrorCode.TYPE_ERROR, f'unsupported operand type for {operator}: {type_name(value)}')

    def push(self, value: T_Data):
        if len(self.operate_stack) >= self.max_stack:
            self.error(ErrorCode.STACK_OVERFLOW, f'more than {self.max_stack} values')
        self.operate_stack.append(value)

    def pop(self) -> T_Data:
        if len(self.operate_stack) == 0:
            self.error(ErrorCode.STACK_UNDERFLOW, 'pop from empty stack')
        return self.operate_stack.pop()

    def pop_two_integers(self, operator: str) -> Tuple[int, int]:
        arg2 = self.pop()
        arg1 = self.pop()
        if not isinstance(arg1, IntegerData) or not isinstance(arg2, IntegerData):
            self.error(ErrorCode.TYPE_ERROR,
                       f'unsupported operand type(s) for {operator}: {type_name(arg1)} and {type_name(arg2)}')
        return arg1.value, arg2.value

    def pop_test(self, operator: str) -> int:
        arg = self.pop()
        self.check_type(arg, (IntegerData,), operator)
        return arg.value

    def check_slot(self, slot: int):
        if not isinstance(slot, int) or not 0 <= slot < len(self.locals):
            self.error(ErrorCode.UNSET_LOCAL, f'slot {slot!r} out of range')

    def jump(self, offset: int):
        if not isinstance(offset, int):
            self.error(ErrorCode.JUMP_OUT_OF_RANGE, f'bad offset {offset!r}')
        target = self.pc + 1 + offset
        if not 0 <= target <= len(self.code_program.code_list):
            self.error(ErrorCode.JUMP_OUT_OF_RANGE, f'target {target}')
        self.pc = target

    def write(self, text: str):
        stdout = self.stdout if self.stdout is not None else sys.stdout
        stdout.write(text)
        stdout.flush()

    def read_int(self) -> int:
        stdin = self.stdin if self.stdin is not None else sys.stdin
        value = 0
        while True:
            char = stdin.read(1)
            if char == '' or char not in '0123456789':
                break
            value = wrap_int64(10 * value + (ord(char) - ord('0')))
        return value

    def run(self):
        code_list = self.code_program.code_list
        logger.debug('running %d codes with %d locals', len(code_list), len(self.locals))

        while self.pc < len(code_list):
            code = code_list[self.pc]
            opcode = code.opcode

            if opcode == OPCodes.EXIT:
                logger.debug('exit at pc=%d', self.pc)
                return
            elif opcode == OPCodes.ERROR:
                self.error(ErrorCode.RUNTIME_ERROR, 'assertion failed')
            elif opcode == OPCodes.PUSH:
                if not isinstance(code.argument, int):
                    self.error(ErrorCode.TYPE_ERROR, f'PUSH requires an integer, got {code.argument!r}')
                self.push(IntegerData(code.argument))
            elif opcode == OPCodes.PUSH_CONST:
                if not isinstance(code.argument, WEEBASIC_DATA_TYPE):
                    self.error(ErrorCode.TYPE_ERROR, f'PUSH_CONST requires a constant, got {code.argument!r}')
                self.push(code.argument)
            elif opcode == OPCodes.GET_LOCAL:
                self.check_slot(code.argument)
                value = self.locals[code.argument]
                if value is None:
                    self.error(ErrorCode.UNSET_LOCAL, f'slot {code.argument} read before set')
                self.push(value)
            elif opcode == OPCodes.SET_LOCAL:
                self.check_slot(code.argument)
                self.locals[code.argument] = self.pop()
            elif opcode == OPCodes.EQUAL:
                arg2 = self.pop()
                arg1 = self.pop()
                if type(arg1) is not type(arg2):
                    self.error(ErrorCode.TYPE_ERROR,
                               f'unsupported operand type(s) for ==: {type_name(arg1)} and {type_name(arg2)}')
                self.push(to_bool(arg1 == arg2))
            elif opcode == OPCodes.LESS_THAN:
                arg1, arg2 = self.pop_two_integers('<')
                self.push(to_bool(arg1 < arg2))
            elif opcode == OPCodes.ADD:
                arg1, arg2 = self.pop_two_integers('+')
                self.push(IntegerData(arg1 + arg2))
            elif opcode == OPCodes.SUB:
                arg1, arg2 = self.pop_two_integers('-')
                self.push(IntegerData(arg1 - arg2))
            elif opcode == OPCodes.IF:
                if self.pop_test('IF') != 0:
                    self.jump(code.argument)
                    continue
            elif opcode == OPCodes.IF_NOT:
                if self.pop_test('IF_NOT') == 0:
                    self.jump(code.argument)
                    continue
            elif opcode == OPCodes.JUMP:
                self.jump(code.argument)
                continue
            elif opcode == OPCodes.READ_INT:
                self.write(READ_INT_PROMPT)
                self.push(IntegerData(self.read_int()))
            elif opcode == OPCodes.PRINT:
                self.write(f'print: {self.pop()!s}\n')
            else:
                self.error(ErrorCode.UNKNOWN_OPCODE, f'unknown bytecode instruction {opcode!r}')
            self.pc += 1

        logger.debug('ran off the end of the program at pc=%d', self.pc)


def run_source(text: str, stdin: str = '', **kwargs) -> str:
    """Compile and run ``text``, returning everything it printed."""
    stdout = io.StringIO()
    VM(compile_source(text), stdin=io.StringIO(stdin), stdout=stdout, **kwargs).run()
    return stdout.getvalue()
