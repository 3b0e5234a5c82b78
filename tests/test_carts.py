from decimal import Decimal

import pytest

from storefront.services.cart_service import compute_line_subtotal
from storefront.data.models import ProductModel, SizeModel, VariantModel


@pytest.fixture
def setup(make_user, make_product, make_size, make_variant, auth_header):
    user_id = make_user()
    return {
        "user_id": user_id,
        "headers": auth_header(user_id),
        "product": make_product(name="Latte", price=20000, stock=5, discount_percent=10),
        "size": make_size("Large", 5000),
        "variant": make_variant("Iced", 2000),
    }


def cart_body(setup, amount):
    return {"productId": setup["product"], "sizeId": setup["size"], "variantId": setup["variant"], "amount": amount}


def test_line_subtotal_uses_discount_price():
    product = ProductModel(price=Decimal("20000"), discount_percent=Decimal("10"))
    size = SizeModel(size_cost=Decimal("5000"))
    variant = VariantModel(variant_cost=Decimal("2000"))

    # (18000 + 5000 + 2000) * 2
    assert compute_line_subtotal(product, size, variant, 2) == Decimal("50000.00")


def test_line_subtotal_without_discount():
    product = ProductModel(price=Decimal("20000"), discount_percent=Decimal("0"))

    assert compute_line_subtotal(product, None, None, 3) == Decimal("60000.00")


def test_add_and_list(client, setup):
    resp = client.post("/carts", json=cart_body(setup, 2), headers=setup["headers"])

    assert resp.status_code == 201
    line = resp.json()["data"]
    assert line["subtotal"] == 50000
    assert line["discountPrice"] == 18000
    assert line["sizeName"] == "Large"
    assert line["variantName"] == "Iced"

    lines = client.get("/carts", headers=setup["headers"]).json()["data"]
    assert [l["id"] for l in lines] == [line["id"]]


def test_same_line_is_merged(client, setup):
    client.post("/carts", json=cart_body(setup, 1), headers=setup["headers"])
    resp = client.post("/carts", json=cart_body(setup, 2), headers=setup["headers"])

    assert resp.json()["data"]["amount"] == 3
    assert resp.json()["data"]["subtotal"] == 75000
    assert len(client.get("/carts", headers=setup["headers"]).json()["data"]) == 1


def test_merged_amount_checked_against_stock(client, setup):
    client.post("/carts", json=cart_body(setup, 4), headers=setup["headers"])

    resp = client.post("/carts", json=cart_body(setup, 2), headers=setup["headers"])

    assert resp.status_code == 400
    assert resp.json()["message"] == "Amount exceeds available stock"


@pytest.mark.parametrize("amount", [0, -1])
def test_invalid_amount(client, setup, amount):
    resp = client.post("/carts", json=cart_body(setup, amount), headers=setup["headers"])

    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid amount, must be greater than 0"


def test_unknown_product(client, setup):
    body = cart_body(setup, 1)
    body["productId"] = 999

    resp = client.post("/carts", json=body, headers=setup["headers"])

    assert resp.status_code == 404
    assert resp.json()["message"] == "Product not found"


def test_unknown_size(client, setup):
    body = cart_body(setup, 1)
    body["sizeId"] = 999

    resp = client.post("/carts", json=body, headers=setup["headers"])

    assert resp.status_code == 404
    assert resp.json()["message"] == "Size not found"


def test_delete_own_line_only(client, setup, make_user, auth_header):
    line_id = client.post("/carts", json=cart_body(setup, 1), headers=setup["headers"]).json()["data"]["id"]

    other = auth_header(make_user())
    assert client.delete(f"/carts/{line_id}", headers=other).status_code == 404

    assert client.delete(f"/carts/{line_id}", headers=setup["headers"]).status_code == 200
    assert client.get("/carts", headers=setup["headers"]).json()["data"] == []


def test_cart_requires_token(client):
    assert client.get("/carts").status_code == 401
