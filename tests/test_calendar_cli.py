from __future__ import annotations

import pytest

from rokuyo_calendar import main, month_rows, parse_month_arguments


def test_parse_single_month():
    assert parse_month_arguments("2024-02") == [(2024, 2)]


def test_parse_range_across_year():
    assert parse_month_arguments("2024-11:2025-02") == [
        (2024, 11),
        (2024, 12),
        (2025, 1),
        (2025, 2),
    ]


def test_parse_list_drops_duplicates():
    assert parse_month_arguments("2024-03, 2024-01,2024-03") == [(2024, 3), (2024, 1)]


@pytest.mark.parametrize("arg", ["", "2024-13", "2024", "2024-03:2024-01", "abcd-ef"])
def test_parse_rejects_bad_arguments(arg: str):
    with pytest.raises(ValueError):
        parse_month_arguments(arg)


def test_month_rows():
    rows = month_rows(2024, 2, 9.0, "civil")
    assert len(rows) == 29
    new_year = rows[9]
    assert new_year.startswith("2024-02-10 (土)")
    assert "旧暦  1/1" in new_year
    assert new_year.endswith("先勝 Sensho")


def test_main_prints_report(capsys: pytest.CaptureFixture[str]):
    assert main(["2024-02", "--offset", "9"]) == 0
    out = capsys.readouterr().out
    assert "2024年2月" in out
    assert "2024-02-29" in out


def test_main_rejects_bad_month(capsys: pytest.CaptureFixture[str]):
    assert main(["2024-13"]) == 1
    assert "引数が不正です" in capsys.readouterr().err
