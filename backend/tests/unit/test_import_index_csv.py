"""Tests for the import_index_csv script."""

from datetime import date
from decimal import Decimal

import pytest

from models import IndexPoint, RentalCashflow
from scripts.import_index_csv import import_index_csv, parse_date, parse_number, read_rows
from tests.fixtures import add_index_points


def _write_csv(tmp_path, text):
    path = tmp_path / "index.csv"
    path.write_text(text, encoding="utf-8")
    return str(path)


@pytest.fixture
def script_db(db, monkeypatch):
    monkeypatch.setattr(
        "scripts.import_index_csv.get_session_local",
        lambda: lambda: db,
    )
    monkeypatch.setattr(db, "close", lambda: None)
    return db


class TestParseNumber:
    def test_plain(self):
        assert parse_number("2.7") == Decimal("2.7")

    def test_decimal_comma_and_percent(self):
        assert parse_number('"2,7%"') == Decimal("2.7")

    def test_invalid(self):
        with pytest.raises(ValueError, match="Not a number"):
            parse_number("n/a")


class TestParseDate:
    def test_month(self):
        assert parse_date("2024-03") == date(2024, 3, 1)

    def test_day(self):
        assert parse_date("2024-03-15") == date(2024, 3, 15)

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_date("2024")


class TestReadRows:
    def test_skips_header_and_comments(self, tmp_path):
        path = _write_csv(
            tmp_path,
            "month,value,interannual\n# provisional\n2023-01,\"6,0%\",98.8\n2023-02,6.6,\n",
        )
        rows = read_rows(path, "IPC")

        assert [r.date for r in rows] == [date(2023, 1, 1), date(2023, 2, 1)]
        assert rows[0].value == Decimal("6.0")
        assert rows[0].interannual_value == Decimal("98.8")
        assert rows[1].interannual_value is None
        assert all(not r.is_manual for r in rows)

    def test_out_of_range_value_names_line(self, tmp_path):
        path = _write_csv(tmp_path, "2023-01,6\n2023-02,75\n")
        with pytest.raises(ValueError, match="Line 2"):
            read_rows(path, "IPC")

    def test_missing_value_names_line(self, tmp_path):
        path = _write_csv(tmp_path, "2023-01\n")
        with pytest.raises(ValueError, match="Line 1"):
            read_rows(path, "IPC")


class TestImportIndexCsv:
    def test_creates_points_and_regenerates(self, script_db, tmp_path, ipc_contract):
        path = _write_csv(tmp_path, "2023-01,2\n2023-02,3\n2023-03,1\n")

        import_index_csv("ipc", path)

        assert script_db.query(IndexPoint).filter_by(type="IPC").count() == 3
        rows = (
            script_db.query(RentalCashflow)
            .filter_by(contract_id=ipc_contract.id)
            .order_by(RentalCashflow.month_index)
            .all()
        )
        assert len(rows) == 12
        assert rows[3].amount == Decimal("1061.11")

    def test_keeps_manual_values(self, script_db, tmp_path):
        add_index_points(script_db, "IPC", {date(2023, 1, 1): "2.5"}, is_manual=True)
        script_db.commit()
        path = _write_csv(tmp_path, "2023-01,2\n")

        import_index_csv("IPC", path)

        assert script_db.query(IndexPoint).one().value == Decimal("2.5")

    def test_force_overwrites_manual_values(self, script_db, tmp_path):
        add_index_points(script_db, "IPC", {date(2023, 1, 1): "2.5"}, is_manual=True)
        script_db.commit()
        path = _write_csv(tmp_path, "2023-01,2\n")

        import_index_csv("IPC", path, force=True)

        point = script_db.query(IndexPoint).one()
        assert point.value == Decimal("2")
        assert point.is_manual is False

    def test_dry_run_does_not_persist(self, script_db, tmp_path):
        path = _write_csv(tmp_path, "2023-01,2\n")

        import_index_csv("IPC", path, dry_run=True)

        assert script_db.query(IndexPoint).count() == 0
