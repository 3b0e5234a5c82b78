import pytest


@pytest.fixture
def admin(make_user, auth_header):
    return auth_header(make_user(email="admin@mail.com", role="admin"), "admin")


# =====================================================
# CATALOG LOOKUPS
# =====================================================
def test_size_crud(client, admin, fake_redis):
    assert client.get("/sizes").json()["data"] == []
    assert fake_redis.keys("/sizes*")

    resp = client.post("/admin/sizes", json={"name": "Large", "cost": 5000}, headers=admin)
    assert resp.status_code == 201
    size = resp.json()["data"]
    assert size == {"id": size["id"], "name": "Large", "sizeCost": 5000}
    assert fake_redis.keys("/sizes*") == []

    assert [s["name"] for s in client.get("/sizes").json()["data"]] == ["Large"]

    resp = client.patch(f"/admin/sizes/{size['id']}", json={"cost": 6000}, headers=admin)
    assert resp.json()["data"]["sizeCost"] == 6000

    assert client.delete(f"/admin/sizes/{size['id']}", headers=admin).status_code == 200
    assert client.get(f"/admin/sizes/{size['id']}", headers=admin).status_code == 404


def test_duplicate_names_conflict(client, admin):
    client.post("/admin/variants", json={"name": "Iced"}, headers=admin)
    resp = client.post("/admin/variants", json={"name": "iced"}, headers=admin)

    assert resp.status_code == 409


def test_category_has_no_cost(client, admin):
    resp = client.post("/admin/categories", json={"name": "Coffee", "cost": 100}, headers=admin)

    assert resp.json()["data"] == {"id": resp.json()["data"]["id"], "name": "Coffee"}


def test_catalog_search(client, admin):
    for name in ("Small", "Regular", "Large"):
        client.post("/admin/sizes", json={"name": name}, headers=admin)

    body = client.get("/sizes?search=ar").json()
    assert [s["name"] for s in body["data"]] == ["Regular", "Large"]
    assert body["meta"]["totalData"] == 2


def test_admin_routes_require_token(client):
    assert client.post("/admin/sizes", json={"name": "Large"}).status_code == 401
    assert client.get("/admin/users").status_code == 401
    assert client.get("/admin/products").status_code == 401


# =====================================================
# PRODUCTS
# =====================================================
def test_product_crud(client, admin, make_size, make_category, fake_redis):
    size_id = make_size("Regular")
    category_id = make_category("Coffee")
    client.get("/products")
    assert fake_redis.keys("/products*")

    resp = client.post(
        "/admin/products",
        json={
            "name": "Caramel Latte",
            "price": 32000,
            "stock": 20,
            "images": ["https://cdn.example.com/a.png", "https://cdn.example.com/b.png"],
            "sizeIds": [size_id],
            "categoryIds": [category_id],
        },
        headers=admin,
    )
    assert resp.status_code == 201, resp.text
    product = resp.json()["data"]
    assert product["image"] == "https://cdn.example.com/a.png"
    assert product["sizes"] == [{"id": size_id, "name": "Regular", "sizeCost": 0}]
    assert fake_redis.keys("/products*") == []

    resp = client.patch(
        f"/admin/products/{product['id']}",
        json={"price": 35000, "images": ["https://cdn.example.com/c.png"]},
        headers=admin,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["price"] == 35000
    assert resp.json()["data"]["images"] == ["https://cdn.example.com/c.png"]
    assert resp.json()["data"]["sizes"][0]["id"] == size_id

    listed = client.get("/admin/products?search=coffee", headers=admin).json()
    assert [p["name"] for p in listed["data"]] == ["Caramel Latte"]

    assert client.delete(f"/admin/products/{product['id']}", headers=admin).status_code == 200
    assert client.get(f"/admin/products/{product['id']}", headers=admin).status_code == 404


def test_product_name_conflict(client, admin, make_product):
    make_product(name="Latte")

    resp = client.post("/admin/products", json={"name": "latte", "price": 10000}, headers=admin)

    assert resp.status_code == 409


def test_product_unknown_size(client, admin):
    resp = client.post("/admin/products", json={"name": "Latte", "price": 10000, "sizeIds": [42]}, headers=admin)

    assert resp.status_code == 404
    assert resp.json()["message"] == "Invalid size id 42"


def test_product_invalid_price(client, admin):
    resp = client.post("/admin/products", json={"name": "Latte", "price": 0}, headers=admin)

    assert resp.status_code == 400


# =====================================================
# USERS
# =====================================================
def test_user_crud(client, admin):
    resp = client.post(
        "/admin/users",
        json={"fullName": "Rina Wati", "email": "rina@mail.com", "password": "Rina#2024", "phone": "0811"},
        headers=admin,
    )
    assert resp.status_code == 201, resp.text
    user = resp.json()["data"]
    assert user["phone"] == "0811"

    listed = client.get("/admin/users?search=rina", headers=admin).json()
    assert [u["email"] for u in listed["data"]] == ["rina@mail.com"]

    resp = client.patch(f"/admin/users/{user['id']}", json={"role": "admin", "address": "Jl. Mawar"}, headers=admin)
    assert resp.json()["data"]["role"] == "admin"
    assert resp.json()["data"]["address"] == "Jl. Mawar"

    assert client.delete(f"/admin/users/{user['id']}", headers=admin).status_code == 200
    assert client.get(f"/admin/users/{user['id']}", headers=admin).status_code == 404


def test_user_email_conflict(client, admin):
    resp = client.post(
        "/admin/users",
        json={"fullName": "Admin Two", "email": "admin@mail.com", "password": "Admin#2024"},
        headers=admin,
    )

    assert resp.status_code == 409
