"""Root conftest: shared fixtures."""

from __future__ import annotations

import pytest

from tenantguard.config import default_config
from tenantguard.gateway import Gateway
from tenantguard.identity import Identity, Role
from tenantguard.registry import ResourceRegistry, load_registry
from tenantguard.scoping import ScopingPolicy

ALLOWED_TABLES = [
    {"TABLE_NAME": "Orders", "COLUMN_NAME": "CustomerID"},
    {"TABLE_NAME": "Customers", "COLUMN_NAME": "CustomerID"},
    {"TABLE_NAME": "Shippers", "COLUMN_NAME": "ShipperID"},
    {"TABLE_NAME": "Products"},
]


@pytest.fixture
def registry() -> ResourceRegistry:
    return load_registry(ALLOWED_TABLES)


@pytest.fixture
def policy(registry) -> ScopingPolicy:
    return ScopingPolicy(default_config(), registry)


@pytest.fixture
def gateway(registry) -> Gateway:
    return Gateway(default_config(), registry)


@pytest.fixture
def user() -> Identity:
    return Identity(id="ALFKI", role=Role.USER)


@pytest.fixture
def admin() -> Identity:
    return Identity(id="AROUT", role=Role.ADMIN)
