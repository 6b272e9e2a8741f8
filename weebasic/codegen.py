from enum import Enum
from typing import Dict, List, Optional, Union

from .data import StringData
from .exceptions import CodeGeneratorError, ParserError, ErrorCode

MAX_LOCALS = 256


class ArgumentType(Enum):
    NONE = 'none'
    NUMBER = 'number'
    SLOT = 'slot'
    OFFSET = 'offset'
    CONST = 'const'


class OPCode:
    def __init__(self, name: str, argument_type: ArgumentType):
        self.name: str = name
        self.argument_type: ArgumentType = argument_type

    def __repr__(self):
        return self.name


class OPCodes(Enum):
    EXIT = OPCode('EXIT', ArgumentType.NONE)  # halt
    ERROR = OPCode('ERROR', ArgumentType.NONE)  # abort with a run-time error

    PUSH = OPCode('PUSH', ArgumentType.NUMBER)  # push(int)
    PUSH_CONST = OPCode('PUSH_CONST', ArgumentType.CONST)  # push(string)
    GET_LOCAL = OPCode('GET_LOCAL', ArgumentType.SLOT)  # push(locals[slot])
    SET_LOCAL = OPCode('SET_LOCAL', ArgumentType.SLOT)  # locals[slot] = pop()

    EQUAL = OPCode('EQUAL', ArgumentType.NONE)  # TOS = TOS1 == TOS
    LESS_THAN = OPCode('LESS_THAN', ArgumentType.NONE)  # TOS = TOS1 < TOS
    ADD = OPCode('ADD', ArgumentType.NONE)  # TOS = TOS1 + TOS
    SUB = OPCode('SUB', ArgumentType.NONE)  # TOS = TOS1 - TOS

    # offsets are relative to the instruction after the jump
    IF = OPCode('IF', ArgumentType.OFFSET)  # if pop() != 0: PC += offset
    IF_NOT = OPCode('IF_NOT', ArgumentType.OFFSET)  # if pop() == 0: PC += offset
    JUMP = OPCode('JUMP', ArgumentType.OFFSET)  # PC += offset

    READ_INT = OPCode('READ_INT', ArgumentType.NONE)  # push(int(stdin))
    PRINT = OPCode('PRINT', ArgumentType.NONE)  # print(pop())

    def __repr__(self):
        return repr(self.value)


JUMP_OPCODES = (OPCodes.IF, OPCodes.IF_NOT, OPCodes.JUMP)

binary_operator_to_opcodes = {
    '+': OPCodes.ADD,
    '-': OPCodes.SUB,
    '==': OPCodes.EQUAL,
    '<': OPCodes.LESS_THAN,
}

T_Argument = Union[None, int, StringData]


class Code:
    def __init__(self, opcode: OPCodes, argument: T_Argument = None):
        self.opcode: OPCodes = opcode
        self.argument: T_Argument = argument

    def __eq__(self, other):
        if not isinstance(other, Code):
            return NotImplemented
        return self.opcode == other.opcode and self.argument == other.argument

    def __repr__(self):
        if not isinstance(self.opcode, OPCodes):
            return f'{self.opcode!s} {self.argument!r}'
        if self.opcode.value.argument_type == ArgumentType.NONE:
            return repr(self.opcode)
        return f'{self.opcode!r} {self.argument!r}'


class CodeProgram:
    def __init__(self, code_list: List[Code], num_locals: int, local_names: List[str] = None):
        self.code_list: List[Code] = code_list
        self.num_locals: int = num_locals
        if local_names is None:
            local_names = list()
        self.local_names: List[str] = local_names

    def __len__(self):
        return len(self.code_list)

    def __repr__(self):
        return f'CodeProgram({len(self.code_list)} codes, {self.num_locals} locals)'


class LocalVariables:
    """Flat name -> slot table for one compilation unit.

    Slots are handed out densely from 0 in declaration order and are never
    released, there is no block scoping.
    """

    def __init__(self, max_locals: int = MAX_LOCALS):
        self.max_locals: int = max_locals
        self._names: List[str] = list()
        self._slots: Dict[str, int] = dict()

    def __len__(self):
        return len(self._names)

    def __contains__(self, name: str):
        return name in self._slots

    @property
    def names(self) -> List[str]:
        return list(self._names)

    def lookup(self, name: str) -> Optional[int]:
        return self._slots.get(name)

    def declare(self, name: str) -> int:
        if self.lookup(name) is not None:
            raise ParserError(ErrorCode.REDECLARED_VARIABLE, f'local variable "{name}" already declared')
        if len(self._names) >= self.max_locals:
            raise ParserError(ErrorCode.TOO_MANY_LOCALS, f'more than {self.max_locals} locals')
        slot = len(self._names)
        self._names.append(name)
        self._slots[name] = slot
        return slot


class CodeGenerator:
    def __init__(self):
        self.code_list: List[Code] = list()

    def position(self) -> int:
        return len(self.code_list)

    def emit(self, opcode: OPCodes, argument: T_Argument = None) -> int:
        self.code_list.append(Code(opcode, argument))
        return len(self.code_list) - 1

    def patch(self, index: int, offset: int):
        code = self.code_list[index]
        if code.opcode not in JUMP_OPCODES:
            raise CodeGeneratorError(ErrorCode.NOT_A_JUMP, f'cannot patch {code!r} at {index}')
        code.argument = offset

    def patch_to_here(self, index: int):
        # offset 0 falls through to the instruction after the jump
        self.patch(index, self.position() - index - 1)

    def generate(self, local_names: List[str]) -> CodeProgram:
        self.emit(OPCodes.EXIT)
        return CodeProgram(self.code_list, len(local_names), local_names)
