"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures for the entire test suite.
"""

import tempfile
from pathlib import Path

import pytest

from order_payment_recon.config import ReconConfig, load_config
from tests.fixtures.factories import write_csv, write_orders_csv


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_path:
        yield Path(temp_path)


@pytest.fixture
def config() -> ReconConfig:
    """Default application configuration."""
    return load_config(None)


@pytest.fixture
def statement_csv(temp_dir) -> Path:
    """A bank statement export with title rows above the table."""
    return write_csv(
        temp_dir / "statement.csv",
        [
            ["Banco Nacional - Estado de Cuenta"],
            ["Cuenta: 0102-0000-00-0000000000"],
            [],
            ["Fecha", "Referencia", "Descripcion", "Monto"],
            ["15/08/2024", "00098765", "PAGO MOVIL CASHEA", "1500.00"],
            ["16/08/2024", "111122223333", "TRANSFERENCIA", "2,000.50"],
            ["", "", "", ""],
            ["17/08/2024", "555", "COMISION", "12.00"],
        ],
    )


@pytest.fixture
def orders_csv(temp_dir) -> Path:
    """An order table export with Cashea orders pending verification."""
    return write_orders_csv(
        temp_dir / "orders.csv",
        [
            {
                "id": "s1",
                "orden": "1001",
                "nombre": "Ana Perez",
                "canal": "Cashea",
                "referencia": "98765",
                "montoBs": "1500.00",
                "estadoEntrega": "En proceso",
            },
            {
                "id": "s2",
                "orden": "1002",
                "nombre": "Luis Rojas",
                "canal": "cashea",
                "referencia": "999922223333",
                "montoBs": "2000.00",
                "estadoEntrega": "En proceso",
            },
            {
                "id": "s3",
                "orden": "1003",
                "nombre": "Marta Diaz",
                "canal": "Shopify",
                "referencia": "98765",
                "montoBs": "1500.00",
                "estadoEntrega": "En proceso",
            },
            {
                "id": "s4",
                "orden": "1004",
                "nombre": "Jose Gil",
                "canal": "Cashea",
                "referencia": "",
                "montoBs": "800.00",
                "estadoEntrega": "En proceso",
                "montoFleteUsd": "15.00",
            },
        ],
    )
