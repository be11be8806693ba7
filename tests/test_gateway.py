"""Test the gateway: identity building, intent resolution, dispatch and audit."""

import json
from unittest.mock import patch

from tenantguard.config import GuardConfig, default_config
from tenantguard.decisions import Parameterize, PassThrough, Reject, RewriteQuery
from tenantguard.gateway import Gateway
from tenantguard.identity import Role
from tenantguard.intents import LiteralQuery, NamedFunctionCall, NamedTableRead


class TestIdentity:
    def test_role_from_hint(self, gateway):
        assert gateway.identity("ALFKI", "Admin").role == Role.ADMIN
        assert gateway.identity("ALFKI", "admin").role == Role.ADMIN
        assert gateway.identity("ALFKI", "User").role == Role.USER
        assert gateway.identity("ALFKI", "superuser").role == Role.USER

    def test_hint_overrides_admin_ids(self, gateway):
        assert gateway.identity("AROUT", "User").role == Role.USER

    def test_role_from_admin_ids(self, gateway):
        assert gateway.identity("AROUT").role == Role.ADMIN
        assert gateway.identity("BLONP").role == Role.ADMIN
        assert gateway.identity("ALFKI").role == Role.USER

    def test_properties(self, gateway):
        identity = gateway.identity("ALFKI", properties={"OrderId": "10248"})
        assert identity.get_property("OrderId") == "10248"
        assert identity.get_property("missing") is None


class TestResolveIntent:
    def test_function_names(self, gateway):
        assert gateway.resolve_intent("CustOrders") == NamedFunctionCall("CustOrders")
        assert gateway.resolve_intent("tenmostexpensiveproducts") == NamedFunctionCall(
            "tenmostexpensiveproducts"
        )

    def test_literal_template(self, gateway):
        assert gateway.resolve_intent("CustomerOrders") == LiteralQuery("customerorders")

    def test_explicit_query(self, gateway):
        assert gateway.resolve_intent("adhoc", query="SELECT 1") == LiteralQuery("SELECT 1")

    def test_table_read(self, gateway):
        assert gateway.resolve_intent("Orders") == NamedTableRead("Orders")
        assert gateway.resolve_intent("item-1", table="Orders") == NamedTableRead("Orders")


class TestDispatch:
    def test_user_orders(self, gateway):
        identity = gateway.identity("ALFKI", "User")
        decision = gateway.dispatch(identity, "sales", table="Orders")
        assert decision == RewriteQuery("SELECT * FROM \"Orders\" WHERE customerId = 'ALFKI'")

    def test_admin_orders(self, gateway):
        identity = gateway.identity("AROUT")
        assert gateway.dispatch(identity, "Orders") == PassThrough()

    def test_procedure(self, gateway):
        identity = gateway.identity("ALFKI")
        decision = gateway.dispatch(identity, "custorders")
        assert decision == Parameterize("custorders", {"customer_id": "ALFKI"})

    def test_literal_query(self, gateway):
        identity = gateway.identity("ALFKI", properties={"OrderId": "99999"})
        decision = gateway.dispatch(identity, "customerorders")
        assert decision == RewriteQuery("SELECT * FROM orders WHERE orderId = '99999'")

    def test_reject(self, gateway):
        identity = gateway.identity("BAD1")
        decision = gateway.dispatch(identity, "Orders")
        assert isinstance(decision, Reject)


def test_from_config_loads_registry():
    config = GuardConfig(resources=({"table": "Orders", "column": "CustomerID"},))
    gateway = Gateway.from_config(config)
    assert gateway.registry.lookup("orders") is not None
    assert isinstance(gateway.dispatch(gateway.identity("ALFKI"), "Orders"), RewriteQuery)


def test_audit_log_written(tmp_path, registry):
    config = GuardConfig(audit_log=True)
    gateway = Gateway(config, registry)
    with patch("tenantguard.decisionlog._LOG_ROOT", tmp_path), patch(
        "tenantguard.decisionlog.os.getcwd", return_value="/test/project"
    ):
        gateway.dispatch(gateway.identity("BAD1"), "Orders")

    lines = next((tmp_path / "test-project").glob("*.jsonl")).read_text().splitlines()
    entry = json.loads(lines[0])
    assert entry["decision"] == "reject"
    assert entry["kind"] == "invalid_identifier_format"
    assert entry["identity"] == "BAD1"


def test_no_audit_log_by_default(tmp_path, registry):
    gateway = Gateway(default_config(), registry)
    with patch("tenantguard.decisionlog._LOG_ROOT", tmp_path):
        gateway.dispatch(gateway.identity("ALFKI"), "Orders")
    assert not any(tmp_path.iterdir())
