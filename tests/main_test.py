import sys
import os
import json
import pytest
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from main import EXIT_DIFFERENT, EXIT_ERROR, EXIT_IDENTICAL, main


@pytest.fixture
def write_json(tmp_path):
    def _write(name, content):
        path = tmp_path / name
        path.write_text(content, encoding='utf-8')
        return str(path)
    return _write


def test_identical_documents(write_json, capsys):
    left = write_json('left.json', '{"b": 1, "a": [true, null]}')
    right = write_json('right.json', '{\n  "a": [true, null],\n  "b": 1\n}\n')
    assert main([left, right]) == EXIT_IDENTICAL
    out = capsys.readouterr().out
    assert all(line.startswith('  ') for line in out.splitlines())


def test_different_documents(write_json, capsys):
    left = write_json('left.json', '{"a": 1}')
    right = write_json('right.json', '{"a": 2, "b": 3}')
    assert main([left, right]) == EXIT_DIFFERENT
    out = capsys.readouterr().out
    assert out == '  {\n-   "a": 1\n+   "a": 2,\n+   "b": 3\n  }\n'


def test_parse_error_names_side(write_json, capsys):
    left = write_json('left.json', '{}')
    right = write_json('right.json', '{"a": ')
    assert main([left, right]) == EXIT_ERROR
    err = capsys.readouterr().err
    assert 'Right JSON' in err


def test_missing_file(tmp_path, write_json, capsys):
    left = write_json('left.json', '{}')
    assert main([left, str(tmp_path / 'absent.json')]) == EXIT_ERROR
    assert 'Error' in capsys.readouterr().err


def test_byte_order_mark_is_ignored(tmp_path, write_json):
    left = tmp_path / 'bom.json'
    left.write_bytes('\ufeff{"a": 1}'.encode('utf-8'))
    right = write_json('right.json', '{"a": 1}')
    assert main([str(left), right]) == EXIT_IDENTICAL


def test_normalize_only(write_json, capsys):
    left = write_json('left.json', '{"b": 1, "a": 2}')
    right = write_json('right.json', '[1]')
    assert main([left, right, '--normalize-only']) == EXIT_IDENTICAL
    assert capsys.readouterr().out == '{\n  "a": 2,\n  "b": 1\n}\n[\n  1\n]\n'


def test_html_report(tmp_path, write_json, capsys):
    left = write_json('left.json', '[1, 2]')
    right = write_json('right.json', '[1, 3]')
    report = tmp_path / 'out' / 'report.html'
    assert main([left, right, '--html', str(report)]) == EXIT_DIFFERENT
    assert report.exists()
    page = report.read_text(encoding='utf-8')
    assert 'diff-row diff-changed' in page
    assert 'HTML report written' in capsys.readouterr().err


def test_json_report(tmp_path, write_json, capsys):
    left = write_json('left.json', '{"a": 1}')
    right = write_json('right.json', '{"a": 1, "b": 2}')
    report = tmp_path / 'nested' / 'report.json'
    assert main([left, right, '--json', str(report)]) == EXIT_DIFFERENT
    data = json.loads(report.read_text(encoding='utf-8'))
    assert data['summary']['changed_lines'] == 1
    assert data['summary']['added_lines'] == 1
    assert data['entries'][1] == {'type': 'changed', 'left': '  "a": 1', 'right': '  "a": 1,'}
    assert 'JSON report written' in capsys.readouterr().err
