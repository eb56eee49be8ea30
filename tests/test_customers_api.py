# tests/test_customers_api.py
"""Tests de clientes y cuenta corriente."""

from decimal import Decimal

import pytest

from belleza_pos.models.customers import Customer
from belleza_pos.models.enums import UserRole
from belleza_pos.services import ledger

API = "/api/v1"


def create_customer(client, headers, **overrides):
    payload = {"first_name": "Ana", "last_name": "García", "document_type": "DNI", "document_number": "30111222"}
    payload.update(overrides)
    response = client.post(f"{API}/customers/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def credit_customer(client, admin_headers):
    return create_customer(
        client, admin_headers,
        credit_enabled=True, credit_limit_type="LIMITED", credit_limit="1000.00",
    )


# -------------------------------------------------------------------
# Alta y consultas
# -------------------------------------------------------------------

def test_customer_numbers_are_generated(client, auth_headers):
    headers = auth_headers(UserRole.SELLER)

    first = create_customer(client, headers)
    second = create_customer(client, headers, first_name="Beatriz", document_number="30111333")

    assert first["customer_number"] == "CLI000001"
    assert second["customer_number"] == "CLI000002"
    assert first["full_name"] == "Ana García"


def test_customer_without_credit_account(client, admin_headers):
    customer = create_customer(client, admin_headers)

    assert customer["credit_state"] == "NO_ACCOUNT"
    assert customer["available_credit"] == 0.0
    assert customer["balance"] == 0.0


def test_full_address(client, admin_headers):
    customer = create_customer(
        client, admin_headers, street="San Martín", street_number="123", city="Rosario",
        province="Santa Fe", postal_code="2000",
    )
    assert customer["full_address"] == "San Martín 123, Rosario, Santa Fe (2000)"


@pytest.mark.parametrize(
    "field, value",
    [("document_number", "30111222"), ("email", "ana@mail.test"), ("customer_number", "CLI000001")],
)
def test_unique_customer_fields(client, admin_headers, field, value):
    create_customer(client, admin_headers, email="ana@mail.test")
    payload = {"first_name": "Otra", "document_number": "99999999", field: value}
    if field != "email":
        payload["email"] = "otra@mail.test"

    response = client.post(f"{API}/customers/", json=payload, headers=admin_headers)

    assert response.status_code == 400


def test_lookup_by_number_and_document(client, admin_headers, auth_headers):
    customer = create_customer(client, admin_headers)
    headers = auth_headers(UserRole.CASHIER)

    by_number = client.get(f"{API}/customers/number/CLI000001", headers=headers)
    by_document = client.get(f"{API}/customers/document/30111222", headers=headers)
    missing = client.get(f"{API}/customers/document/0", headers=headers)

    assert by_number.json()["id"] == customer["id"]
    assert by_document.json()["id"] == customer["id"]
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Cliente no encontrado con documento: '0'"
    assert missing.json()["timestamp"].endswith("+00:00")


def test_existence_checks(client, admin_headers, auth_headers):
    create_customer(client, admin_headers, email="ana@mail.test")
    headers = auth_headers(UserRole.SELLER)

    assert client.get(f"{API}/customers/exists/document/30111222", headers=headers).json() is True
    assert client.get(f"{API}/customers/exists/email/nadie@mail.test", headers=headers).json() is False
    assert client.get(f"{API}/customers/exists/number/CLI000001", headers=auth_headers(UserRole.CASHIER)).status_code == 403


def test_search_customers(client, admin_headers, auth_headers):
    create_customer(client, admin_headers)
    create_customer(client, admin_headers, first_name="Beatriz", last_name="López", document_number="30999888")

    response = client.get(f"{API}/customers/search", params={"q": "lópez"}, headers=auth_headers(UserRole.CASHIER))

    assert [c["full_name"] for c in response.json()] == ["Beatriz López"]


# -------------------------------------------------------------------
# Cuenta corriente
# -------------------------------------------------------------------

def test_sale_within_limit_and_warning_state(client, credit_customer, auth_headers):
    url = f"{API}/customers/{credit_customer['id']}/sales"

    response = client.post(url, json={"amount": "801.00"}, headers=auth_headers(UserRole.SELLER))

    assert response.status_code == 200
    body = response.json()
    assert body["balance"] == 801.0
    assert body["available_credit"] == 199.0
    assert body["credit_state"] == "WARNING"


def test_sale_over_limit_is_rejected(client, credit_customer, auth_headers):
    url = f"{API}/customers/{credit_customer['id']}/sales"
    headers = auth_headers(UserRole.SELLER)

    client.post(url, json={"amount": "900.00"}, headers=headers)
    rejected = client.post(url, json={"amount": "100.01"}, headers=headers)
    customer = client.get(f"{API}/customers/{credit_customer['id']}", headers=headers).json()

    assert rejected.status_code == 400
    assert rejected.json()["detail"] == "La venta excede el límite de crédito del cliente"
    assert customer["balance"] == 900.0


def test_payment_never_leaves_negative_balance(client, credit_customer, auth_headers, mocker):
    spy = mocker.spy(ledger, "apply_payment")
    client.post(f"{API}/customers/{credit_customer['id']}/sales", json={"amount": "300.00"}, headers=auth_headers(UserRole.SELLER))

    response = client.post(
        f"{API}/customers/{credit_customer['id']}/payments", json={"amount": "500.00"},
        headers=auth_headers(UserRole.CASHIER),
    )

    assert response.status_code == 200
    assert response.json()["balance"] == 0.0
    assert spy.call_count == 1


@pytest.mark.parametrize("amount", ["0", "-50.00"])
def test_non_positive_payment_is_rejected(client, credit_customer, auth_headers, amount):
    response = client.post(
        f"{API}/customers/{credit_customer['id']}/payments", json={"amount": amount},
        headers=auth_headers(UserRole.CASHIER),
    )
    assert response.status_code == 400


def test_movements_require_credit_account(client, admin_headers):
    customer = create_customer(client, admin_headers)

    response = client.post(f"{API}/customers/{customer['id']}/sales", json={"amount": "10.00"}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "El cliente no tiene cuenta corriente habilitada"


def test_movement_permissions(client, credit_customer, auth_headers):
    base = f"{API}/customers/{credit_customer['id']}"

    assert client.post(f"{base}/payments", json={"amount": "1"}, headers=auth_headers(UserRole.SELLER)).status_code == 403
    assert client.post(f"{base}/sales", json={"amount": "1"}, headers=auth_headers(UserRole.CASHIER)).status_code == 403


def test_unlimited_account(client, admin_headers):
    customer = create_customer(client, admin_headers, credit_enabled=True, credit_limit_type="UNLIMITED")

    response = client.post(f"{API}/customers/{customer['id']}/sales", json={"amount": "50000.00"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["available_credit"] is None
    assert response.json()["credit_state"] == "UNLIMITED"


def test_credit_reports(client, admin_headers, db_session):
    over = create_customer(client, admin_headers, credit_enabled=True, credit_limit="100.00")
    pending = create_customer(client, admin_headers, first_name="Beatriz", document_number="30111333",
                              credit_enabled=True, credit_limit="1000.00")
    create_customer(client, admin_headers, first_name="Carla", document_number="30111444")

    # El límite puede bajar por debajo del saldo después de una venta
    client.post(f"{API}/customers/{over['id']}/sales", json={"amount": "100.00"}, headers=admin_headers)
    client.patch(f"{API}/customers/{over['id']}", json={"credit_limit": "50.00"}, headers=admin_headers)
    client.post(f"{API}/customers/{pending['id']}/sales", json={"amount": "10.00"}, headers=admin_headers)

    accounts = client.get(f"{API}/customers/credit-accounts", headers=admin_headers).json()
    exceeded = client.get(f"{API}/customers/credit-exceeded", headers=admin_headers).json()
    with_balance = client.get(f"{API}/customers/pending-balance", headers=admin_headers).json()

    assert {c["id"] for c in accounts} == {over["id"], pending["id"]}
    assert [c["id"] for c in exceeded] == [over["id"]]
    assert exceeded[0]["credit_state"] == "EXCEEDED"
    assert exceeded[0]["available_credit"] == -50.0
    assert {c["id"] for c in with_balance} == {over["id"], pending["id"]}
    assert db_session.query(Customer).filter(Customer.balance > Decimal("0")).count() == 2
