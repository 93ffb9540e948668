import sys

import pytest

from field_relations.io_utils import (
    CommandError,
    RecordDecodeError,
    _run,
    iter_records,
    open_data_file,
    sniff_ndjson,
)


def _write(tmp_path, name, text, gz=False):
    import gzip

    p = tmp_path / name
    if gz:
        with gzip.open(p, "wt", encoding="utf-8") as f:
            f.write(text)
    else:
        p.write_text(text, encoding="utf-8")
    return p


def test_iter_records_ndjson(tmp_path):
    p = _write(tmp_path, "a.ndjson", '{"a":1}\n{"a":2}\n')
    assert list(iter_records(str(p))) == [{"a": 1}, {"a": 2}]


def test_iter_records_json_array(tmp_path):
    p = _write(tmp_path, "a.json", '[{"a":1},{"a":2}]')
    assert list(iter_records(str(p))) == [{"a": 1}, {"a": 2}]


def test_iter_records_single_object(tmp_path):
    p = _write(tmp_path, "a.json", '{"a":1}')
    assert list(iter_records(str(p))) == [{"a": 1}]


def test_iter_records_gz_ndjson(tmp_path):
    p = _write(tmp_path, "a.ndjson.gz", '{"a":1}\n{"a":2}\n', gz=True)
    assert list(iter_records(str(p))) == [{"a": 1}, {"a": 2}]


def test_iter_records_empty_file(tmp_path):
    p = _write(tmp_path, "empty.json", "  \n")
    assert list(iter_records(p)) == []


def test_sniff_ndjson():
    assert sniff_ndjson('{"a":1}\n{"a":2}')
    assert not sniff_ndjson('{"a":\n 1}')


def test_run_rejects_shell_metacharacters():
    with pytest.raises(ValueError):
        _run(["echo", "a; rm -rf /"])


def test_run_nonzero_exit():
    args = [sys.executable, "-c", "import sys; sys.exit(3)"]
    with pytest.raises(CommandError) as exc_info:
        _run(args, check_untrusted=False)
    assert exc_info.value.returncode == 3
    assert _run(args, check_untrusted=False, check=False).returncode == 3


def test_bad_ndjson_line_reports_line_number(tmp_path):
    p = _write(tmp_path, "a.ndjson", '{"a":1}\n{"a":2}\n{"a":\n')
    with pytest.raises(RecordDecodeError) as exc_info:
        list(iter_records(p))
    assert exc_info.value.line_number == 3


def test_open_data_file_binary_gzip(tmp_path):
    p = _write(tmp_path, "a.json.gz", "[1, 2]", gz=True)
    with open_data_file(p, binary=True) as f:
        assert f.read() == b"[1, 2]"
