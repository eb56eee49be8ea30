# tests/test_articles_api.py
"""Tests de artículos: precios, proveedores, stock y vencimientos."""

from datetime import date, timedelta

import pytest

from belleza_pos.models.enums import UserRole

API = "/api/v1"


@pytest.fixture
def default_list(client, admin_headers):
    response = client.post(f"{API}/price-lists/", json={"name": "Minorista", "is_default": True}, headers=admin_headers)
    return response.json()


@pytest.fixture
def wholesale_list(client, admin_headers):
    response = client.post(f"{API}/price-lists/", json={"name": "Mayorista"}, headers=admin_headers)
    return response.json()


@pytest.fixture
def supplier(client, admin_headers):
    response = client.post(
        f"{API}/suppliers/", json={"business_name": "Distribuidora Sur SA", "tax_id": "30-11111111-1"},
        headers=admin_headers,
    )
    return response.json()


def create_article(client, headers, **overrides):
    payload = {"barcode": "779100000001", "description": "Crema hidratante"}
    payload.update(overrides)
    response = client.post(f"{API}/articles/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# -------------------------------------------------------------------
# Alta y consultas
# -------------------------------------------------------------------

def test_create_article_with_prices_and_suppliers(client, admin_headers, default_list, wholesale_list, supplier):
    article = create_article(
        client, admin_headers,
        prices=[
            {"price_list_id": default_list["id"], "sale_price": "100.00", "cost_price": "60.00"},
            {"price_list_id": wholesale_list["id"], "sale_price": "80.00"},
        ],
        suppliers=[{"supplier_id": supplier["id"], "cost": "55.00", "is_default": True}],
    )

    prices = {price["price_list_name"]: price for price in article["prices"]}
    assert prices["Minorista"]["tax_inclusive_price"] == 121.0
    assert prices["Mayorista"]["tax_inclusive_price"] == 96.8
    assert article["suppliers"][0]["business_name"] == "Distribuidora Sur SA"
    assert article["stock_level"] == "UNTRACKED"


def test_duplicate_barcode_is_rejected(client, admin_headers):
    create_article(client, admin_headers)
    response = client.post(f"{API}/articles/", json={"barcode": "779100000001", "description": "Otra"}, headers=admin_headers)

    assert response.status_code == 400
    exists = client.get(f"{API}/articles/exists/barcode/779100000001", headers=admin_headers)
    assert exists.json() is True


def test_unknown_category_is_not_found(client, admin_headers):
    response = client.post(f"{API}/articles/", json={
        "barcode": "779100000009", "description": "Sin rubro",
        "category_id": "00000000-0000-0000-0000-000000000000",
    }, headers=admin_headers)
    assert response.status_code == 404


def test_seller_cannot_create_articles(client, auth_headers):
    response = client.post(f"{API}/articles/", json={"barcode": "1", "description": "x"}, headers=auth_headers(UserRole.SELLER))
    assert response.status_code == 403


def test_active_list_shows_default_price(client, admin_headers, auth_headers, default_list, wholesale_list):
    create_article(client, admin_headers, prices=[
        {"price_list_id": default_list["id"], "sale_price": "100.00"},
        {"price_list_id": wholesale_list["id"], "sale_price": "80.00"},
    ])
    create_article(client, admin_headers, barcode="779100000002", description="Esmalte", prices=[
        {"price_list_id": wholesale_list["id"], "sale_price": "20.00"},
    ])

    response = client.get(f"{API}/articles/active", headers=auth_headers(UserRole.CASHIER))

    prices = {item["description"]: item["sale_price"] for item in response.json()}
    assert prices == {"Crema hidratante": 100.0, "Esmalte": None}


def test_search_by_description_or_barcode(client, admin_headers, auth_headers):
    create_article(client, admin_headers)
    create_article(client, admin_headers, barcode="779100000002", description="Esmalte rojo")
    headers = auth_headers(UserRole.CASHIER)

    by_text = client.get(f"{API}/articles/search", params={"q": "esmalte"}, headers=headers).json()
    by_code = client.get(f"{API}/articles/search", params={"q": "0001"}, headers=headers).json()

    assert [a["description"] for a in by_text] == ["Esmalte rojo"]
    assert [a["description"] for a in by_code] == ["Crema hidratante"]


def test_count_by_unknown_category(client, admin_headers):
    response = client.get(f"{API}/articles/count/by-category/00000000-0000-0000-0000-000000000000", headers=admin_headers)
    assert response.status_code == 404


# -------------------------------------------------------------------
# Precios
# -------------------------------------------------------------------

def test_upsert_price_updates_existing_entry(client, admin_headers, default_list):
    article = create_article(client, admin_headers, prices=[{"price_list_id": default_list["id"], "sale_price": "100.00"}])
    url = f"{API}/articles/{article['id']}/prices"

    response = client.post(url, json={"price_list_id": default_list["id"], "sale_price": "150.00"}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["tax_inclusive_price"] == 181.5
    assert len(client.get(url, headers=admin_headers).json()) == 1


def test_price_must_be_positive(client, admin_headers, default_list):
    article = create_article(client, admin_headers)
    response = client.post(
        f"{API}/articles/{article['id']}/prices",
        json={"price_list_id": default_list["id"], "sale_price": "0"},
        headers=admin_headers,
    )
    assert response.status_code == 422


def test_replace_all_prices(client, admin_headers, default_list, wholesale_list):
    article = create_article(client, admin_headers, prices=[{"price_list_id": default_list["id"], "sale_price": "100.00"}])

    response = client.put(f"{API}/articles/{article['id']}/prices", json=[
        {"price_list_id": default_list["id"], "sale_price": "110.00"},
        {"price_list_id": wholesale_list["id"], "sale_price": "90.00"},
    ], headers=admin_headers)

    assert response.status_code == 200
    assert sorted(price["sale_price"] for price in response.json()) == [90.0, 110.0]


def test_remove_missing_price_is_not_found(client, admin_headers, default_list):
    article = create_article(client, admin_headers)
    response = client.delete(f"{API}/articles/{article['id']}/prices/{default_list['id']}", headers=admin_headers)
    assert response.status_code == 404


# -------------------------------------------------------------------
# Proveedores del artículo
# -------------------------------------------------------------------

def test_supplier_cannot_be_linked_twice(client, admin_headers, supplier):
    article = create_article(client, admin_headers)
    url = f"{API}/articles/{article['id']}/suppliers"

    first = client.post(url, json={"supplier_id": supplier["id"], "cost": "10.00"}, headers=admin_headers)
    second = client.post(url, json={"supplier_id": supplier["id"], "cost": "12.00"}, headers=admin_headers)

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json()["detail"] == "El proveedor ya está asociado a este artículo"


def test_new_default_supplier_replaces_previous(client, admin_headers, supplier):
    other = client.post(
        f"{API}/suppliers/", json={"business_name": "Cosméticos Norte", "tax_id": "30-22222222-2"},
        headers=admin_headers,
    ).json()
    article = create_article(client, admin_headers, suppliers=[{"supplier_id": supplier["id"], "is_default": True}])
    url = f"{API}/articles/{article['id']}/suppliers"

    client.post(url, json={"supplier_id": other["id"], "is_default": True}, headers=admin_headers)

    defaults = {link["business_name"]: link["is_default"] for link in client.get(url, headers=admin_headers).json()}
    assert defaults == {"Distribuidora Sur SA": False, "Cosméticos Norte": True}

    blocked = client.delete(f"{API}/suppliers/{supplier['id']}/permanent", headers=admin_headers)
    assert blocked.status_code == 400


def test_permanent_delete_removes_prices_and_links(client, admin_headers, default_list, supplier):
    article = create_article(
        client, admin_headers,
        prices=[{"price_list_id": default_list["id"], "sale_price": "100.00"}],
        suppliers=[{"supplier_id": supplier["id"]}],
    )

    assert client.delete(f"{API}/articles/{article['id']}/permanent", headers=admin_headers).status_code == 204
    assert client.delete(f"{API}/suppliers/{supplier['id']}/permanent", headers=admin_headers).status_code == 204
    assert client.get(f"{API}/price-lists/{default_list['id']}", headers=admin_headers).json()["article_count"] == 0


# -------------------------------------------------------------------
# Stock
# -------------------------------------------------------------------

def test_stock_adjustments(client, admin_headers):
    article = create_article(client, admin_headers, tracks_stock=True, stock_current="10", stock_min="5")
    base = f"{API}/articles/{article['id']}/stock"

    increased = client.post(f"{base}/increment", json={"quantity": "3"}, headers=admin_headers)
    decreased = client.post(f"{base}/decrement", json={"quantity": "8"}, headers=admin_headers)
    too_much = client.post(f"{base}/decrement", json={"quantity": "6"}, headers=admin_headers)
    set_value = client.post(f"{base}/adjust", json={"quantity": "0", "kind": "set", "reason": "Inventario"}, headers=admin_headers)

    assert increased.json()["stock_current"] == 13.0
    assert decreased.json()["stock_current"] == 5.0
    assert decreased.json()["stock_level"] == "LOW"
    assert too_much.status_code == 400
    assert too_much.json()["detail"] == "No hay suficiente stock disponible"
    assert set_value.json()["stock_level"] == "EMPTY"


def test_unknown_adjustment_kind_is_business_error(client, admin_headers):
    article = create_article(client, admin_headers, tracks_stock=True)
    response = client.post(
        f"{API}/articles/{article['id']}/stock/adjust", json={"quantity": "1", "kind": "TRANSFER"},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_increment_requires_positive_quantity(client, admin_headers):
    article = create_article(client, admin_headers, tracks_stock=True)
    response = client.post(f"{API}/articles/{article['id']}/stock/increment", json={"quantity": "0"}, headers=admin_headers)
    assert response.status_code == 422


def test_untracked_article_rejects_stock_changes(client, admin_headers):
    article = create_article(client, admin_headers)
    response = client.post(f"{API}/articles/{article['id']}/stock/increment", json={"quantity": "1"}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "El artículo no tiene control de stock habilitado"


def test_low_stock_report_includes_equality_boundary(client, admin_headers):
    create_article(client, admin_headers, barcode="A1", description="Bajo", tracks_stock=True, stock_current="5", stock_min="10")
    create_article(client, admin_headers, barcode="A2", description="Justo", tracks_stock=True, stock_current="10", stock_min="10")
    create_article(client, admin_headers, barcode="A3", description="Sobra", tracks_stock=True, stock_current="11", stock_min="10")
    create_article(client, admin_headers, barcode="A4", description="Sin control", stock_current="0", stock_min="10")

    report = client.get(f"{API}/articles/low-stock", headers=admin_headers).json()

    assert {item["description"]: item["stock_level"] for item in report} == {"Bajo": "CRITICAL", "Justo": "LOW"}
    assert {item["description"]: item["shortfall"] for item in report} == {"Bajo": 5.0, "Justo": 0.0}


# -------------------------------------------------------------------
# Vencimientos
# -------------------------------------------------------------------

def test_expiration_reports(client, admin_headers):
    today = date.today()
    create_article(client, admin_headers, barcode="E1", description="Vencido",
                   expiration_date=(today - timedelta(days=1)).isoformat())
    create_article(client, admin_headers, barcode="E2", description="Critico",
                   expiration_date=(today + timedelta(days=5)).isoformat())
    create_article(client, admin_headers, barcode="E3", description="Proximo",
                   expiration_date=(today + timedelta(days=15)).isoformat())
    create_article(client, admin_headers, barcode="E4", description="Lejano",
                   expiration_date=(today + timedelta(days=60)).isoformat())

    upcoming = client.get(f"{API}/articles/expirations/upcoming", headers=admin_headers).json()
    expired = client.get(f"{API}/articles/expirations/expired", headers=admin_headers).json()
    within_week = client.get(f"{API}/articles/expirations/upcoming", params={"days": 7}, headers=admin_headers).json()

    assert [(a["description"], a["expiration_state"]) for a in upcoming] == [
        ("Critico", "CRITICAL"), ("Proximo", "UPCOMING"),
    ]
    assert [(a["description"], a["days_remaining"]) for a in expired] == [("Vencido", -1)]
    assert [a["description"] for a in within_week] == ["Critico"]


def test_article_response_flags_expiring_soon(client, admin_headers):
    article = create_article(client, admin_headers, expiration_date=(date.today() + timedelta(days=15)).isoformat())

    assert article["days_to_expiration"] == 15
    assert article["expiring_soon"] is True
