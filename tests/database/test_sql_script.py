from __future__ import annotations

from office_attendance.database.bootstrap import SCHEMA_PATH, SEED_PATH, prepare_script, split_sql_script


def test_semicolons_inside_literals_do_not_split():
    sql = "INSERT INTO t VALUES ('a;b'); INSERT INTO t VALUES (\"c;d\");SELECT 'it\\'s;ok'"

    assert list(split_sql_script(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        'INSERT INTO t VALUES ("c;d")',
        "SELECT 'it\\'s;ok'",
    ]


def test_blank_statements_are_skipped():
    assert list(split_sql_script(";;\n  ;SELECT 1;\n")) == ["SELECT 1"]


def test_prepare_drops_database_lines_and_comments():
    sql = "CREATE DATABASE IF NOT EXISTS x;\nUSE x;\n-- note\nCREATE TABLE a (id INT);\n"

    assert list(split_sql_script(prepare_script(sql))) == ["CREATE TABLE a (id INT)"]


def test_bundled_schema_has_two_tables():
    statements = list(split_sql_script(prepare_script(SCHEMA_PATH.read_text(encoding="utf-8"))))

    assert [s.split("(")[0].split()[-1] for s in statements] == ["offices", "attendance_sessions"]
    assert "UNIQUE KEY uq_sessions_open_day (employee_id, open_day)" in statements[1]


def test_bundled_seed_is_three_guarded_inserts():
    statements = list(split_sql_script(prepare_script(SEED_PATH.read_text(encoding="utf-8"))))

    assert len(statements) == 3
    assert all(s.startswith("INSERT INTO offices") and "WHERE NOT EXISTS" in s for s in statements)
