import os

import pytest

import tester


@pytest.mark.parametrize("name", tester.list_testcases())
def test_testcase(name, capsys):
    assert tester.run_testcase(os.path.join(tester.TESTCASES_DIR, name), detailed=True), capsys.readouterr().out


def test_reports_differences(tmp_path, capsys):
    (tmp_path / "input.txt").write_text("x := 1;\n", encoding="utf-8")
    (tmp_path / "parse_tree.txt").write_text("program\n  stmtList\n", encoding="utf-8")
    assert not tester.run_testcase(str(tmp_path), detailed=True)
    out = capsys.readouterr().out
    assert "parse_tree.txt differs from the expected output" in out
    assert "--- expected/parse_tree.txt" in out
    assert "\n-  stmtList\n" in out
    assert "\n+ stmtList\n" in out


def test_summary_without_details(tmp_path, capsys):
    (tmp_path / "input.txt").write_text("read x;\n", encoding="utf-8")
    (tmp_path / "tokens.txt").write_text("read : READ\nx : ID\n", encoding="utf-8")
    assert not tester.run_testcase(str(tmp_path))
    assert capsys.readouterr().out == "tokens.txt differs from the expected output\n"


def test_trailing_whitespace_is_ignored(tmp_path):
    (tmp_path / "input.txt").write_text("read x;\n", encoding="utf-8")
    (tmp_path / "tokens.txt").write_text("read : READ  \nx : ID\n; : DELIMITER\n : EOF\n", encoding="utf-8")
    assert tester.run_testcase(str(tmp_path))
