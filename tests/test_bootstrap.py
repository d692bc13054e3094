from __future__ import annotations

from src.qr_attendance.qr_attendance.database.bootstrap import split_statements


def test_split_ignores_database_selection_and_comments():
    sql = """
    CREATE DATABASE IF NOT EXISTS other_name;
    USE other_name;
    -- courses
    CREATE TABLE a (id INT);
    INSERT INTO a VALUES (1)
    """
    assert list(split_statements(sql)) == ["CREATE TABLE a (id INT)", "INSERT INTO a VALUES (1)"]


def test_split_keeps_semicolons_inside_literals():
    sql = "INSERT INTO c (name) VALUES ('a;b'); INSERT INTO c (name) VALUES (\"it\\\"s;\");"
    assert list(split_statements(sql)) == [
        "INSERT INTO c (name) VALUES ('a;b')",
        "INSERT INTO c (name) VALUES (\"it\\\"s;\")",
    ]
