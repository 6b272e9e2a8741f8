import json
import os
import subprocess
import sys

import pytest

from weebasic.cli import main
from weebasic.data import wrap_int64

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


def write_source(tmp_path, text, name='prog.wb'):
    path = tmp_path / name
    path.write_text(text, encoding='utf-8')
    return str(path)


def run_module(*args, stdin=''):
    return subprocess.run(
        [sys.executable, '-m', 'weebasic', *args],
        input=stdin,
        text=True,
        capture_output=True,
        cwd=ROOT,
        timeout=10,
    )


def test_runs_program(tmp_path, capsys):
    path = write_source(tmp_path, 'let x = 3\nlet y = x + 4\nprint y\n')
    assert main([path]) == 0
    assert capsys.readouterr().out == 'print: 7\n'


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / 'missing.wb')]) == 1
    assert 'Source unreadable' in capsys.readouterr().err


@pytest.mark.parametrize('text', ['let x = +', 'begin print 1', 'print nope'])
def test_compile_error_never_runs(tmp_path, capsys, text):
    path = write_source(tmp_path, 'print 1\n' + text)
    assert main([path]) == 1
    captured = capsys.readouterr()
    assert captured.out == ''
    assert captured.err.startswith('Compile error: ParserError')


def test_assert_failure(tmp_path, capsys):
    path = write_source(tmp_path, 'assert 1 == 2\nprint 5\n')
    assert main([path]) == 1
    captured = capsys.readouterr()
    assert captured.out == ''
    assert 'Runtime error: VMError: Run-time error' in captured.err


def test_dump_does_not_run(tmp_path, capsys):
    path = write_source(tmp_path, 'print 1\n')
    assert main(['--dump', path]) == 0
    assert capsys.readouterr().out == '0000  PUSH 1\n0001  PRINT\n0002  EXIT\n'


def test_emit_and_load_json(tmp_path, capsys):
    path = write_source(tmp_path, 'let x = 3\nprint x + 4\n')
    assert main(['--emit-json', path]) == 0
    json_path = write_source(tmp_path, capsys.readouterr().out, name='prog.json')
    assert main(['--load-json', json_path]) == 0
    assert capsys.readouterr().out == 'print: 7\n'


@pytest.mark.parametrize('text', [
    '{"code_list": 3}',
    '{"code_list": [["EXIT", null]], "num_locals": "3"}',
    '{"code_list": [["EXIT", null]], "num_locals": 1.5}',
    '{"code_list": [["EXIT", null]], "num_locals": true}',
    '{"code_list": [["EXIT", null]], "num_locals": -1}',
    '{"code_list": [["EXIT", null]], "num_locals": 100000000000}',
    '{"code_list": [["EXIT"]], "num_locals": 0}',
    '{"code_list": ["EXIT"], "num_locals": 0}',
    '{"code_list": [["EXIT", null]], "num_locals": 0, "local_names": [1]}',
    '[]',
    'not json',
])
def test_bad_json(tmp_path, capsys, text):
    path = write_source(tmp_path, text, name='prog.json')
    assert main(['--load-json', path]) == 1
    assert 'Compile error: ParserError: Source unreadable' in capsys.readouterr().err


def test_emit_json_wraps_long_literals(tmp_path, capsys):
    path = write_source(tmp_path, 'print ' + '9' * 5000 + '\n')
    assert main(['--emit-json', path]) == 0
    assert json.loads(capsys.readouterr().out)['code_list'][0] == ['PUSH', wrap_int64(10 ** 5000 - 1)]
    assert main([path]) == 0
    assert capsys.readouterr().out == f'print: {wrap_int64(10 ** 5000 - 1)}\n'


def test_max_stack(tmp_path, capsys):
    path = write_source(tmp_path, 'print 1 + 2\n')
    assert main(['--max-stack', '1', path]) == 1
    assert 'Stack overflow' in capsys.readouterr().err


def test_max_locals(tmp_path, capsys):
    path = write_source(tmp_path, 'let a = 1\nlet b = 2\n')
    assert main(['--max-locals', '1', path]) == 1
    assert 'Too many locals' in capsys.readouterr().err


def test_usage_error():
    with pytest.raises(SystemExit) as e:
        main([])
    assert e.value.code == 2


def test_module_entry_point(tmp_path):
    path = write_source(tmp_path, 'let n = read_int\nif n < 10 then print n\nprint 0\n')
    proc = run_module(path, stdin='7\n')
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout == 'Input an integer value:\n> print: 7\nprint: 0\n'


def test_module_entry_point_failure(tmp_path):
    proc = run_module(write_source(tmp_path, 'assert 0\n'))
    assert proc.returncode == 1
    assert 'Run-time error' in proc.stderr


def test_module_verbose_logs_to_stderr(tmp_path):
    proc = run_module('-v', write_source(tmp_path, 'print 1\n'))
    assert proc.returncode == 0
    assert proc.stdout == 'print: 1\n'
    assert 'read 8 bytes' in proc.stderr
