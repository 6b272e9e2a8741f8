from typing import Dict, List, Union

from .codegen import ArgumentType, OPCodes, Code, CodeProgram, T_Argument, MAX_LOCALS
from .data import StringData
from .exceptions import ParserError, ErrorCode

opcode_name_to_opcodes = {
    opcode.value.name: opcode
    for opcode in OPCodes
}


def dump_argument(argument: T_Argument):
    if isinstance(argument, StringData):
        return ['string', str(argument)]
    return argument


def load_argument(dumped_argument: Union[None, int, list]):
    if isinstance(dumped_argument, list) and len(dumped_argument) == 2 and dumped_argument[0] == 'string' \
            and isinstance(dumped_argument[1], str):
        return StringData(dumped_argument[1])
    return dumped_argument


def opcode_name(opcode: Union[OPCodes, str]) -> str:
    if isinstance(opcode, OPCodes):
        return opcode.value.name
    return str(opcode)


def dump_code(code_program: CodeProgram):
    return {
        'code_list': list(map(lambda x: [opcode_name(x.opcode), dump_argument(x.argument)], code_program.code_list)),
        'num_locals': code_program.num_locals,
        'local_names': list(code_program.local_names),
    }


def check_dumped_code(dumped_code, max_locals: int = MAX_LOCALS):
    if not isinstance(dumped_code, dict):
        raise ParserError(ErrorCode.SOURCE_UNREADABLE, 'program must be an object')
    num_locals = dumped_code.get('num_locals')
    if not isinstance(num_locals, int) or isinstance(num_locals, bool) or not 0 <= num_locals <= max_locals:
        raise ParserError(ErrorCode.SOURCE_UNREADABLE, f'bad num_locals {num_locals!r}')
    code_list = dumped_code.get('code_list')
    if not isinstance(code_list, list):
        raise ParserError(ErrorCode.SOURCE_UNREADABLE, f'bad code_list {code_list!r}')
    for index, item in enumerate(code_list):
        if not isinstance(item, list) or len(item) != 2 or not isinstance(item[0], str):
            raise ParserError(ErrorCode.SOURCE_UNREADABLE, f'bad code {item!r} at {index}')
    local_names = dumped_code.get('local_names', [])
    if not isinstance(local_names, list) or not all(isinstance(name, str) for name in local_names):
        raise ParserError(ErrorCode.SOURCE_UNREADABLE, f'bad local_names {local_names!r}')


def load_code(dumped_code: Dict[str, list], max_locals: int = MAX_LOCALS):
    check_dumped_code(dumped_code, max_locals)
    # unknown names are kept as-is, the VM reports them when reached
    return CodeProgram(
        code_list=list(map(lambda x: Code(opcode_name_to_opcodes.get(x[0], x[0]), load_argument(x[1])),
                           dumped_code['code_list'])),
        num_locals=dumped_code['num_locals'],
        local_names=list(dumped_code.get('local_names', [])),
    )


def disassemble(code_program: CodeProgram) -> str:
    lines: List[str] = list()
    for index, code in enumerate(code_program.code_list):
        line = f'{index:04d}  {code!r}'
        if isinstance(code.opcode, OPCodes) and isinstance(code.argument, int):
            argument_type = code.opcode.value.argument_type
            if argument_type == ArgumentType.OFFSET:
                line += f' (-> {index + 1 + code.argument})'
            elif argument_type == ArgumentType.SLOT and 0 <= code.argument < len(code_program.local_names):
                line += f' ({code_program.local_names[code.argument]})'
        lines.append(line)
    return '\n'.join(lines)
