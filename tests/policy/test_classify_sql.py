"""Test the read-only verdict for raw SQL text."""

import pytest

from tenantguard.diagnostics import codes
from tenantguard.policy import Malformed, Mutating, ReadOnly, classify_sql
from tenantguard.scoping import build_scoped_query


class TestReadOnly:
    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT * FROM orders",
            "SELECT id, name FROM customers WHERE id = 'ALFKI' ORDER BY name",
            'SELECT * FROM "Orders" WHERE customerId = \'ALFKI\'',
            "WITH recent AS (SELECT * FROM orders) SELECT count(*) FROM recent",
            "SELECT a FROM t1 UNION ALL SELECT b FROM t2",
            "SELECT o.id FROM orders o JOIN customers c ON o.customer_id = c.id",
            "SELECT * FROM orders WHERE note = 'a;b'",
            "SELECT * FROM orders;",
            "SELECT * FROM orders; -- trailing",
            "SELECT * FROM orders -- trailing",
        ],
    )
    def test_select_is_read_only(self, sql: str) -> None:
        assert isinstance(classify_sql(sql), ReadOnly)

    def test_tables_reported(self) -> None:
        verdict = classify_sql(
            "WITH c AS (SELECT * FROM customers) SELECT * FROM c JOIN orders ON 1=1"
        )
        assert verdict == ReadOnly(tables=("customers", "orders"))

    def test_empty_statement_list(self) -> None:
        assert classify_sql("") == ReadOnly()
        assert classify_sql("   ") == ReadOnly()

    def test_literal_only(self) -> None:
        assert isinstance(classify_sql("SELECT 1"), ReadOnly)
        assert isinstance(classify_sql("1"), ReadOnly)


class TestMutating:
    @pytest.mark.parametrize(
        "sql,code",
        [
            ("INSERT INTO orders (id) VALUES (1)", codes.WRITE_BLOCKED),
            ("UPDATE orders SET status = 'x' WHERE id = 1", codes.WRITE_BLOCKED),
            ("DELETE FROM orders WHERE id = 1", codes.WRITE_BLOCKED),
            ("DROP TABLE orders", codes.DDL_BLOCKED),
            ("ALTER TABLE orders ADD COLUMN x INT", codes.DDL_BLOCKED),
            ("CREATE TABLE x (id INT)", codes.DDL_BLOCKED),
            ("TRUNCATE TABLE orders", codes.DDL_BLOCKED),
            ("SELECT * INTO backup FROM orders", codes.DDL_BLOCKED),
            ("GRANT SELECT ON orders TO someone", codes.ADMIN_BLOCKED),
        ],
    )
    def test_write_statements(self, sql: str, code) -> None:
        verdict = classify_sql(sql)
        assert isinstance(verdict, Mutating)
        assert verdict.diagnostics[0].code == code

    def test_stacked_query_rejected_whole(self) -> None:
        verdict = classify_sql("SELECT * FROM orders; DROP TABLE orders")
        assert isinstance(verdict, Mutating)
        assert verdict.reason == "multiple statements detected"
        assert verdict.diagnostics[0].code == codes.MULTIPLE_STATEMENTS

    def test_two_reads_rejected(self) -> None:
        verdict = classify_sql("SELECT 1; SELECT 2")
        assert isinstance(verdict, Mutating)
        assert verdict.diagnostics[0].position == len("SELECT 1")

    def test_writable_cte(self) -> None:
        verdict = classify_sql(
            "WITH d AS (DELETE FROM t WHERE id=1 RETURNING *) SELECT * FROM d"
        )
        assert isinstance(verdict, Mutating)

    def test_row_lock(self) -> None:
        verdict = classify_sql("SELECT * FROM orders FOR UPDATE")
        assert isinstance(verdict, Mutating)
        assert verdict.diagnostics[0].code == codes.ROW_LOCK

    def test_dangerous_function(self) -> None:
        verdict = classify_sql("SELECT pg_terminate_backend(42)")
        assert isinstance(verdict, Mutating)
        assert verdict.diagnostics[0].code == codes.DANGEROUS_FUNCTION

    @pytest.mark.parametrize("name", ["lo_unlink", "lo_create", "lo_put", "pg_reload_conf"])
    def test_writing_builtins_blocked(self, name: str) -> None:
        verdict = classify_sql(f"SELECT {name}(1)")
        assert isinstance(verdict, Mutating)
        assert verdict.diagnostics[0].code == codes.DANGEROUS_FUNCTION

    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT delete_all_orders()",
            "SELECT my_side_effect(1)",
            "SELECT * FROM orders WHERE id = purge_cache(id)",
            "WITH x AS (SELECT archive_orders()) SELECT * FROM x",
        ],
    )
    def test_unrecognized_function_fails_closed(self, sql: str) -> None:
        verdict = classify_sql(sql)
        assert isinstance(verdict, Mutating)
        assert verdict.diagnostics[0].code == codes.UNKNOWN_FUNCTION
        assert verdict.reason.startswith("function call of unknown effect")

    def test_allowed_function_is_read_only(self) -> None:
        sql = "SELECT order_total(id) FROM orders"
        assert isinstance(classify_sql(sql), Mutating)
        verdict = classify_sql(sql, allowed_functions=frozenset({"order_total"}))
        assert verdict == ReadOnly(tables=("orders",))

    def test_blocklist_wins_over_allowlist(self) -> None:
        verdict = classify_sql(
            "SELECT my_side_effect(1)",
            blocked_functions=frozenset({"my_side_effect"}),
            allowed_functions=frozenset({"my_side_effect"}),
        )
        assert isinstance(verdict, Mutating)
        assert verdict.diagnostics[0].code == codes.DANGEROUS_FUNCTION

    @pytest.mark.parametrize(
        "sql", ["EXEC sp_who", "CALL refresh_all()", "SET ROLE admin", "BEGIN", "COMMIT"]
    )
    def test_exec_like_never_read_only(self, sql: str) -> None:
        assert not classify_sql(sql).is_read_only


class TestMalformed:
    def test_unclosed_string(self) -> None:
        verdict = classify_sql("SELECT 'unclosed")
        assert isinstance(verdict, Malformed)
        assert verdict.errors
        assert verdict.reason.startswith("SQL syntax error")

    def test_unbalanced_paren_is_positioned(self) -> None:
        verdict = classify_sql("SELECT (1")
        assert isinstance(verdict, Malformed)
        first = verdict.errors[0]
        assert first.code == codes.SYNTAX_ERROR
        assert first.line == 1
        assert first.position is not None


def test_idempotent() -> None:
    for sql in ["SELECT * FROM orders", "DROP TABLE orders", "SELECT (1"]:
        assert classify_sql(sql) == classify_sql(sql)


class TestEscaping:
    @pytest.mark.parametrize(
        "value",
        ["O'Brien", "'", "x'; DROP TABLE orders; --", "' OR '1'='1"],
    )
    def test_escaped_value_stays_read_only(self, value: str) -> None:
        sql = build_scoped_query("orders", "note", value)
        assert value.replace("'", "''") in sql
        assert isinstance(classify_sql(sql), ReadOnly)

    def test_unescaped_injection_is_caught(self) -> None:
        sql = "SELECT * FROM orders WHERE note = 'x'; DROP TABLE orders; --'"
        assert isinstance(classify_sql(sql), Mutating)
