import io
import json

from weebasic.codegen import OPCodes
from weebasic.data import StringData
from weebasic.dump import disassemble, dump_code, load_code
from weebasic.parser import compile_source
from weebasic.vm import VM, run_source


def test_dump_code():
    dumped = dump_code(compile_source('let x = 1 print x print "hi"'))
    assert dumped == {
        'code_list': [
            ['PUSH', 1],
            ['SET_LOCAL', 0],
            ['GET_LOCAL', 0],
            ['PRINT', None],
            ['PUSH_CONST', ['string', 'hi']],
            ['PRINT', None],
            ['EXIT', None],
        ],
        'num_locals': 1,
        'local_names': ['x'],
    }


def test_load_code_through_json():
    program = compile_source('let x = read_int if x < 3 then print "small" print x')
    loaded = load_code(json.loads(json.dumps(dump_code(program))))
    assert loaded.code_list == program.code_list
    assert loaded.num_locals == program.num_locals
    assert loaded.local_names == ['x']
    assert loaded.code_list[6].opcode == OPCodes.PUSH_CONST
    assert loaded.code_list[6].argument == StringData(b'small')


def test_load_code_keeps_unknown_opcode_name():
    loaded = load_code({'code_list': [['NOPE', 2]], 'num_locals': 0})
    assert loaded.code_list[0].opcode == 'NOPE'
    assert dump_code(loaded)['code_list'] == [['NOPE', 2]]


def test_disassemble():
    listing = disassemble(compile_source('let x = 1\nif x < 2 then print x\nprint 0'))
    assert listing.splitlines() == [
        '0000  PUSH 1',
        '0001  SET_LOCAL 0 (x)',
        '0002  GET_LOCAL 0 (x)',
        '0003  PUSH 2',
        '0004  LESS_THAN',
        '0005  IF_NOT 2 (-> 8)',
        '0006  GET_LOCAL 0 (x)',
        '0007  PRINT',
        '0008  PUSH 0',
        '0009  PRINT',
        '0010  EXIT',
    ]


def test_loaded_program_runs_the_same():
    text = 'let a = 2 let b = a + 3 assert b == 5 print b'
    stdout = io.StringIO()
    VM(load_code(dump_code(compile_source(text))), stdout=stdout).run()
    assert stdout.getvalue() == run_source(text) == 'print: 5\n'
