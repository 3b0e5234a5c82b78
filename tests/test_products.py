import pytest


@pytest.fixture
def catalog(make_category, make_product):
    coffee = make_category("Coffee")
    tea = make_category("Tea")
    return {
        "coffee": coffee,
        "tea": tea,
        "latte": make_product(name="Latte", price=25000, category_ids=[coffee], images=["latte.png", "latte2.png"]),
        "mocha": make_product(name="Mocha", price=30000, discount_percent=20, category_ids=[coffee], is_favourite=True),
        "americano": make_product(name="Americano", price=18000, category_ids=[coffee]),
        "green_tea": make_product(name="Green Tea", price=15000, category_ids=[tea], is_favourite=True),
        "hidden": make_product(name="Hidden Blend", price=50000, is_active=False, category_ids=[coffee]),
    }


def names(resp):
    return [p["name"] for p in resp.json()["data"]]


def test_only_active_products_listed(client, catalog):
    resp = client.get("/products")

    assert resp.status_code == 200
    assert "Hidden Blend" not in names(resp)
    assert resp.json()["meta"]["totalData"] == 4


def test_search_and_category_filter(client, catalog):
    assert names(client.get("/products?q=lat")) == ["Latte"]
    assert sorted(names(client.get("/products?cat=Tea"))) == ["Green Tea"]
    assert len(names(client.get("/products?cat=Tea&cat=Coffee"))) == 4


def test_price_range_and_sort(client, catalog):
    resp = client.get("/products?minprice=16000&maxprice=26000&sort[price]=desc")
    assert names(resp) == ["Latte", "Americano"]

    resp = client.get("/products?sort[name]=asc")
    assert names(resp) == ["Americano", "Green Tea", "Latte", "Mocha"]


def test_invalid_sort(client, catalog):
    assert client.get("/products?sort[name]=up").status_code == 400


def test_discount_price_and_image(client, catalog):
    products = {p["name"]: p for p in client.get("/products").json()["data"]}

    assert products["Mocha"]["discountPrice"] == 24000
    assert products["Latte"]["discountPrice"] == 0
    assert products["Latte"]["image"] == "http://testserver/uploads/latte.png"


def test_pagination_links(client, catalog):
    body = client.get("/products?page=2&limit=1&q=a").json()
    links = body["_links"]

    assert body["meta"] == {"currentPage": 2, "perPage": 1, "totalData": 4, "totalPages": 4}
    assert links["self"].endswith("/products?q=a&page=2&limit=1")
    assert links["prev"].endswith("page=1&limit=1")
    assert links["next"].endswith("page=3&limit=1")
    assert links["first"].endswith("page=1&limit=1")
    assert links["last"].endswith("page=4&limit=1")

    last = client.get("/products?page=4&limit=1&q=a").json()
    assert last["_links"]["next"] is None


@pytest.mark.parametrize(
    "query, message",
    [
        ("page=0", "Invalid pagination parameter: 'page' must be greater than 0"),
        ("limit=0", "Invalid pagination parameter: 'limit' must be greater than 0"),
        ("limit=101", "Invalid pagination parameter: 'limit' cannot exceed 100"),
        ("page=9", "Page is out of range"),
    ],
)
def test_bad_pagination(client, catalog, query, message):
    resp = client.get(f"/products?{query}")

    assert resp.status_code == 400
    assert resp.json()["message"] == message


def test_non_numeric_page(client):
    assert client.get("/products?page=abc").status_code == 400


def test_favourites(client, catalog):
    assert sorted(names(client.get("/favourite-products"))) == ["Green Tea", "Mocha"]
    assert len(names(client.get("/favourite-products?limit=1"))) == 1
    assert client.get("/favourite-products?limit=21").status_code == 400


def test_product_detail_with_recommendations(client, catalog):
    resp = client.get(f"/products/{catalog['latte']}")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["images"] == ["http://testserver/uploads/latte.png", "http://testserver/uploads/latte2.png"]
    assert data["categories"] == [{"id": catalog["coffee"], "name": "Coffee"}]
    # same category, active, not the product itself
    assert sorted(r["name"] for r in data["recommendations"]) == ["Americano", "Mocha"]


def test_inactive_product_detail(client, catalog):
    assert client.get(f"/products/{catalog['hidden']}").status_code == 404
    assert client.get("/products/999").status_code == 404


def test_order_and_payment_methods(client):
    order_methods = client.get("/order-methods").json()["data"]
    assert [m["name"] for m in order_methods] == ["Dine In", "Door Delivery", "Pick Up"]
    assert order_methods[1]["deliveryFee"] == 10000

    payment_methods = client.get("/payment-methods").json()["data"]
    assert len(payment_methods) == 6
    assert payment_methods[0]["image"] == "http://testserver/uploads/bri.png"
