"""Tests for the on-disk line sort"""

import os

import pytest

from dwca_validator.sorting import FILE_ENCODING, FILE_ERRORS, external_sort, iter_lines


def _write(path, lines, terminator="\n"):
    with open(path, "w", encoding="utf-8", newline="") as f:
        for line in lines:
            f.write(line + terminator)


def _read(path, terminator="\n"):
    with open(path, "r", encoding="utf-8", newline="") as f:
        return list(iter_lines(f, terminator))


def test_sorts_across_many_runs(tmp_path):
    values = [f"id{i:03d}" for i in range(50)][::-1]
    source, target = tmp_path / "in.txt", tmp_path / "out.txt"
    _write(source, values)

    written = external_sort(source, target, chunk_size=7)

    assert written == 50
    assert _read(target) == sorted(values)
    assert sorted(os.listdir(tmp_path)) == ["in.txt", "out.txt"]


def test_case_insensitive_and_stable(tmp_path):
    source, target = tmp_path / "in.txt", tmp_path / "out.txt"
    _write(source, ["b", "B", "a", "A", "b"])

    external_sort(source, target, chunk_size=2)

    assert _read(target) == ["a", "A", "b", "B", "b"]


def test_custom_line_terminator(tmp_path):
    source, target = tmp_path / "in.txt", tmp_path / "out.txt"
    _write(source, ["c", "a", "b"], terminator="\r\n")

    external_sort(source, target, line_terminator="\r\n", chunk_size=1)

    assert target.read_bytes() == b"a\r\nb\r\nc\r\n"


def test_empty_input(tmp_path):
    source, target = tmp_path / "in.txt", tmp_path / "out.txt"
    source.write_text("")

    assert external_sort(source, target) == 0
    assert target.read_text() == ""


def test_missing_input_raises_and_leaves_no_runs(tmp_path):
    with pytest.raises(OSError):
        external_sort(tmp_path / "missing.txt", tmp_path / "out.txt")
    assert os.listdir(tmp_path) == []


def test_iter_lines_handles_blocks_and_trailing_line(tmp_path):
    path = tmp_path / "lines.txt"
    long_value = "x" * 100000
    path.write_text(f"{long_value}\nshort\nlast", encoding="utf-8")

    with open(path, "r", encoding="utf-8", newline="") as f:
        assert list(iter_lines(f)) == [long_value, "short", "last"]


def test_lone_surrogates_survive_the_sort(tmp_path):
    source, target = tmp_path / "in.txt", tmp_path / "out.txt"
    with open(source, "w", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="") as f:
        f.write("z\ud800\nb\udc80\na\n")

    external_sort(source, target, chunk_size=1)

    with open(target, "r", encoding=FILE_ENCODING, errors=FILE_ERRORS, newline="") as f:
        assert list(iter_lines(f)) == ["a", "b\udc80", "z\ud800"]
