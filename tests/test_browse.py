"""Tests for catalog lookup, bounded sampling and cell edits against SQLite."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
)

from tablebrowser.browse.catalog import TableCatalog, match_name
from tablebrowser.browse.coercion import coerce_value
from tablebrowser.browse.models import ColumnType, EditRequest
from tablebrowser.browse.sampler import SAMPLE_LIMIT, TableSampler
from tablebrowser.browse.service import TableBrowser
from tablebrowser.errors import (
    AmbiguousColumnError,
    AmbiguousTableError,
    ColumnNotFoundError,
    InvalidValueError,
    QueryExecutionError,
    TableNotFoundError,
)
from tests.conftest import run_sql


def _fill(db, table: str, count: int) -> None:
    run_sql(db, f"CREATE TABLE {table} (id INTEGER PRIMARY KEY, label TEXT)")
    run_sql(db, *[f"INSERT INTO {table} (label) VALUES ('row {i}')" for i in range(count)])


class TestMatchName:
    def test_case_insensitive(self):
        assert match_name("USERS", ["Users", "orders"]) == ["Users"]

    def test_exact_case_wins(self):
        assert match_name("users", ["Users", "users"]) == ["users"]

    def test_no_match(self):
        assert match_name("nonexistent", ["Users", "orders"]) == []


class TestTableCatalog:
    @pytest.fixture
    def catalog(self, db):
        run_sql(
            db,
            'CREATE TABLE "Users" (id INTEGER PRIMARY KEY, name TEXT)',
            "CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER)",
        )
        return TableCatalog(db)

    def test_list_tables(self, catalog):
        assert sorted(catalog.list_tables()) == ["Users", "orders"]

    def test_list_includes_views(self, catalog):
        run_sql(catalog.db, "CREATE VIEW recent_orders AS SELECT * FROM orders")
        assert "recent_orders" in catalog.list_tables()

    def test_resolve_case_insensitive(self, catalog):
        assert catalog.resolve_table("USERS") == "Users"
        assert catalog.resolve_table("Orders") == "orders"

    def test_resolve_not_found(self, catalog):
        with pytest.raises(TableNotFoundError) as exc_info:
            catalog.resolve_table("nonexistent")
        assert exc_info.value.table == "nonexistent"

    def test_resolve_ambiguous(self, catalog):
        with patch.object(catalog, "list_tables", return_value=["Users", "USERS"]):
            with pytest.raises(AmbiguousTableError) as exc_info:
                catalog.resolve_table("users")
        assert exc_info.value.matches == ["Users", "USERS"]

    def test_describe_empty_table(self, catalog):
        columns = catalog.describe("Users")
        assert [c.name for c in columns] == ["id", "name"]
        assert [c.type for c in columns] == [ColumnType.INTEGER, ColumnType.TEXT]

    def test_key_column_from_primary_key(self, db):
        run_sql(db, "CREATE TABLE codes (code TEXT PRIMARY KEY, label TEXT)")
        catalog = TableCatalog(db)
        with db.connection() as conn:
            assert catalog.key_column(catalog.reflect("codes", conn), conn) == "code"

    def test_key_column_configured(self, db):
        run_sql(db, "CREATE TABLE audit (entry_id INTEGER, note TEXT)")
        catalog = TableCatalog(db, key_columns={"audit": "entry_id"})
        with db.connection() as conn:
            assert catalog.key_column(catalog.reflect("audit", conn), conn) == "entry_id"

    def test_key_column_defaults_to_id(self, catalog):
        with catalog.db.connection() as conn:
            assert catalog.key_column(catalog.reflect("orders", conn), conn) == "id"

    def test_resolve_column_case_insensitive(self, catalog):
        with catalog.db.connection() as conn:
            assert catalog.resolve_column(catalog.reflect("Users", conn), "NAME") == "name"

    def test_resolve_column_ambiguous(self, catalog):
        people = Table("people", MetaData(), Column("Name", String), Column("NAME", String))
        with pytest.raises(AmbiguousColumnError) as exc_info:
            catalog.resolve_column(people, "name")
        assert exc_info.value.status_code == 409
        assert exc_info.value.matches == ["Name", "NAME"]

    def test_resolve_column_exact_case_wins(self, catalog):
        people = Table("people", MetaData(), Column("Name", String), Column("NAME", String))
        assert catalog.resolve_column(people, "NAME") == "NAME"


class TestTableSampler:
    def test_caps_at_ten_rows(self, db):
        _fill(db, "many", 15)
        sample = TableSampler(TableCatalog(db)).sample("many")
        assert SAMPLE_LIMIT == 10
        assert len(sample.rows) == 10

    def test_small_table_returns_all_rows(self, db):
        _fill(db, "few", 3)
        sample = TableSampler(TableCatalog(db)).sample("few")
        assert sample.columns == ["id", "label"]
        assert len(sample.rows) == 3

    def test_empty_table_still_reports_columns(self, db):
        _fill(db, "empty", 0)
        sample = TableSampler(TableCatalog(db)).sample("empty")
        assert sample.columns == ["id", "label"]
        assert sample.rows == []

    def test_rows_match_column_count(self, db):
        _fill(db, "some", 5)
        sample = TableSampler(TableCatalog(db)).sample("some")
        assert all(len(row) == len(sample.columns) for row in sample.rows)

    def test_typed_values(self, db):
        run_sql(
            db,
            "CREATE TABLE events (id INTEGER PRIMARY KEY, happened TIMESTAMP, day DATE, "
            "payload JSON, note TEXT)",
            "INSERT INTO events VALUES (1, '2024-01-02 03:04:05', '2024-01-02', "
            "'{\"kind\": \"signup\"}', NULL)",
        )
        sample = TableSampler(TableCatalog(db)).sample("events")
        assert sample.rows == [
            ["1", "2024-01-02T03:04:05", "2024-01-02", '{"kind": "signup"}', "NULL"]
        ]

    def test_reports_key_column(self, db):
        run_sql(db, "CREATE TABLE codes (code TEXT PRIMARY KEY, label TEXT)")
        assert TableSampler(TableCatalog(db)).sample("codes").key_column == "code"

    def test_key_column_is_none_without_identifier(self, db):
        run_sql(db, "CREATE TABLE audit (entry_id INTEGER, note TEXT)")
        assert TableSampler(TableCatalog(db)).sample("audit").key_column is None

    def test_values_that_do_not_fit_the_declared_type(self, db):
        run_sql(
            db,
            "CREATE TABLE loose (id INTEGER PRIMARY KEY, amount FLOAT, qty INTEGER)",
            "INSERT INTO loose VALUES (1, 'abc', 2.5)",
        )
        sample = TableSampler(TableCatalog(db)).sample("loose")
        assert sample.rows == [["1", "abc", "2.5"]]

    def test_undecodable_timestamp_is_execution_error(self, db):
        run_sql(
            db,
            "CREATE TABLE stamps (id INTEGER PRIMARY KEY, at TIMESTAMP)",
            "INSERT INTO stamps VALUES (1, 'not a time')",
        )
        with pytest.raises(QueryExecutionError):
            TableSampler(TableCatalog(db)).sample("stamps")


class TestCellEditor:
    def test_edit_matching_row(self, browser):
        request = EditRequest(table="accounts", column="balance", id="1", value="200.0")
        result = browser.edit(request)
        assert result.affected == 1
        assert result.matched
        assert result.key_column == "id"

    def test_edit_missing_row_is_no_match(self, browser):
        result = browser.edit(EditRequest(table="accounts", column="balance", id="99", value="1.0"))
        assert result.affected == 0
        assert not result.matched

    def test_edit_resolves_names_case_insensitively(self, browser):
        result = browser.edit(EditRequest(table="ACCOUNTS", column="Balance", id="1", value="5.5"))
        assert result.table == "accounts"
        assert result.column == "balance"
        assert browser.sample("accounts").rows[0][1] == "5.5"

    def test_edit_counts_every_matching_row(self, db):
        run_sql(
            db,
            "CREATE TABLE tags (id INTEGER, tag TEXT)",
            "INSERT INTO tags VALUES (1, 'a'), (1, 'b'), (2, 'c')",
        )
        result = TableBrowser(db).edit(EditRequest(table="tags", column="tag", id="1", value="z"))
        assert result.affected == 2

    def test_edit_unknown_table(self, browser):
        with pytest.raises(TableNotFoundError):
            browser.edit(EditRequest(table="nope", column="balance", id="1", value="1"))

    def test_edit_unknown_column(self, browser):
        with pytest.raises(ColumnNotFoundError):
            browser.edit(EditRequest(table="accounts", column="nope", id="1", value="1"))

    def test_edit_without_key_column(self, db):
        run_sql(db, "CREATE TABLE audit (entry_id INTEGER, note TEXT)")
        with pytest.raises(ColumnNotFoundError):
            TableBrowser(db).edit(EditRequest(table="audit", column="note", id="1", value="x"))

    def test_edit_with_configured_key_column(self, db):
        run_sql(
            db,
            "CREATE TABLE audit (entry_id INTEGER, note TEXT)",
            "INSERT INTO audit VALUES (7, 'before')",
        )
        browser = TableBrowser(db, key_columns={"audit": "entry_id"})
        result = browser.edit(EditRequest(table="audit", column="note", id="7", value="after"))
        assert result.matched
        assert browser.sample("audit").rows == [["7", "after"]]

    def test_rejected_statement_is_execution_error(self, db):
        run_sql(
            db,
            "CREATE TABLE stock (id INTEGER PRIMARY KEY, qty INTEGER NOT NULL CHECK (qty >= 0))",
            "INSERT INTO stock VALUES (1, 5)",
        )
        browser = TableBrowser(db)
        with pytest.raises(QueryExecutionError):
            browser.edit(EditRequest(table="stock", column="qty", id="1", value="-5"))
        assert browser.sample("stock").rows == [["1", "5"]]

    def test_value_is_bound_not_interpolated(self, db):
        _fill(db, "notes", 1)
        value = "x'; DROP TABLE notes; --"
        browser = TableBrowser(db)
        assert browser.edit(EditRequest(table="notes", column="label", id="1", value=value)).matched
        assert browser.list_tables() == ["notes"]
        assert browser.sample("notes").rows == [["1", value]]

    def test_boolean_text_is_stored_as_boolean(self, browser):
        browser.edit(EditRequest(table="accounts", column="active", id="1", value="false"))
        assert browser.sample("accounts").rows == [["1", "100.5", "false"]]

        browser.edit(EditRequest(table="accounts", column="active", id="1", value="T"))
        assert browser.sample("accounts").rows == [["1", "100.5", "true"]]

    def test_value_not_readable_as_column_type(self, browser):
        with pytest.raises(InvalidValueError) as exc_info:
            browser.edit(EditRequest(table="accounts", column="balance", id="1", value="lots"))
        assert exc_info.value.status_code == 400
        assert isinstance(exc_info.value, QueryExecutionError)
        assert browser.sample("accounts").rows == [["1", "100.5", "true"]]

    def test_unrecognised_boolean_text(self, browser):
        with pytest.raises(InvalidValueError):
            browser.edit(EditRequest(table="accounts", column="active", id="1", value="maybe"))

    def test_timestamp_and_json_values(self, db):
        run_sql(
            db,
            "CREATE TABLE events (id INTEGER PRIMARY KEY, happened TIMESTAMP, payload JSON)",
            "INSERT INTO events VALUES (1, NULL, NULL)",
        )
        browser = TableBrowser(db)
        browser.edit(
            EditRequest(table="events", column="happened", id="1", value="2024-03-04T05:06:07")
        )
        browser.edit(EditRequest(table="events", column="payload", id="1", value='{"n": 1}'))
        assert browser.sample("events").rows == [["1", "2024-03-04T05:06:07", '{"n": 1}']]


class TestAccountsScenario:
    def test_fetch_edit_refetch(self, browser):
        sample = browser.sample("accounts")
        assert sample.columns == ["id", "balance", "active"]
        assert sample.rows == [["1", "100.5", "true"]]

        result = browser.edit(
            EditRequest(table="accounts", column="balance", id="1", value="200.0")
        )
        assert result.affected == 1

        assert browser.sample("accounts").rows == [["1", "200.0", "true"]]


class TestCoerceValue:
    @pytest.mark.parametrize(
        "sql_type, text, expected",
        [
            (Boolean(), "No", False),
            (Boolean(), " on ", True),
            (Integer(), "-42", -42),
            (Float(), "2.5", 2.5),
            (Numeric(10, 2), "12.50", Decimal("12.50")),
            (Date(), "2024-02-29", date(2024, 2, 29)),
            (DateTime(), "2024-01-02 03:04:05", datetime(2024, 1, 2, 3, 4, 5)),
            (String(), "  kept as typed ", "  kept as typed "),
        ],
    )
    def test_parses_column_type(self, sql_type, text, expected):
        assert coerce_value(Column("c", sql_type), text) == expected

    def test_integer_rejects_fraction(self):
        with pytest.raises(InvalidValueError) as exc_info:
            coerce_value(Column("qty", Integer()), "2.5")
        assert "integer" in exc_info.value.message
