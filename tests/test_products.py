import uuid

from sqlmodel import select

from essence.core.display_id import display_id
from essence.models.cart import CartItem
from essence.models.product import Product
from essence.repositories.product_repo import escape_like
from essence.services import product_service
from tests.conftest import API


def test_list_products_sorted_by_name(client, products):
    resp = client.get(f"{API}/products")
    assert resp.status_code == 200
    names = [p["name"] for p in resp.json()]
    assert names == sorted(products)


def test_store_product_shape(client, products):
    rose = products["Rose Elegance"]
    resp = client.get(f"{API}/products/{rose.id}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["original_id"] == str(rose.id)
    assert body["id"] == display_id(rose.id)
    assert body["image"] == rose.image_url
    assert body["category"] == "Floral"


def test_get_unknown_product_404(client, products):
    resp = client.get(f"{API}/products/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Product not found"


def test_search_matches_name_and_description(client, products):
    resp = client.get(f"{API}/products", params={"search": "AMBER"})
    names = {p["name"] for p in resp.json()}
    assert names == {"Golden Amber", "Midnight Oud"}


def test_category_filter_and_all(client, products):
    resp = client.get(f"{API}/products", params={"category": "Oriental"})
    assert {p["name"] for p in resp.json()} == {"Golden Amber", "Midnight Oud"}

    resp = client.get(f"{API}/products", params={"category": "All"})
    assert len(resp.json()) == len(products)


def test_price_range_is_inclusive(client, products):
    resp = client.get(f"{API}/products", params={"min_price": 80, "max_price": 94.99})
    assert {p["name"] for p in resp.json()} == {"Rose Elegance", "Vanilla Dreams"}


def test_inverted_price_range_rejected(client, products):
    resp = client.get(f"{API}/products", params={"min_price": 150, "max_price": 10})
    assert resp.status_code == 400


def test_categories_start_with_all(client, products):
    resp = client.get(f"{API}/products/categories")
    assert resp.status_code == 200
    assert resp.json() == ["All", "Aquatic", "Citrus", "Floral", "Gourmand", "Oriental"]


def test_create_product_requires_admin(client, customer):
    payload = {"name": "Cedar Smoke", "price": 99.0, "category": "Woody"}

    assert client.post(f"{API}/products", json=payload).status_code == 401
    assert client.post(f"{API}/products", json=payload, headers=customer).status_code == 403


def test_admin_creates_and_updates_product(client, admin):
    resp = client.post(
        f"{API}/products",
        json={"name": "  Cedar Smoke ", "price": 99.0, "category": "Woody"},
        headers=admin,
    )
    assert resp.status_code == 201
    created = resp.json()
    assert created["name"] == "Cedar Smoke"

    resp = client.patch(
        f"{API}/products/{created['id']}",
        json={"price": 109.5, "description": "Smoky cedar and vetiver"},
        headers=admin,
    )
    assert resp.status_code == 200
    assert resp.json()["price"] == 109.5
    assert resp.json()["description"] == "Smoky cedar and vetiver"
    assert resp.json()["name"] == "Cedar Smoke"


def test_create_product_rejects_blank_name(client, admin):
    resp = client.post(
        f"{API}/products",
        json={"name": "   ", "price": 10.0, "category": "Woody"},
        headers=admin,
    )
    assert resp.status_code == 422


def test_delete_product_drops_cart_rows(client, session, products, admin, customer):
    ocean = products["Ocean Mist"]
    client.post(f"{API}/cart", json={"product_id": str(ocean.id)}, headers=customer)

    resp = client.delete(f"{API}/products/{ocean.id}", headers=admin)
    assert resp.status_code == 204

    session.expire_all()
    assert session.get(Product, ocean.id) is None
    assert session.exec(select(CartItem).where(CartItem.product_id == ocean.id)).first() is None


def test_delete_ordered_product_conflicts(client, products, admin, customer):
    rose = products["Rose Elegance"]
    client.post(f"{API}/cart", json={"product_id": str(rose.id)}, headers=customer)
    address = client.post(
        f"{API}/addresses",
        json={
            "full_name": "Alice Carter",
            "phone": "555-0100",
            "address_line_1": "1 Main St",
            "city": "Austin",
            "state": "TX",
            "postal_code": "73301",
        },
        headers=customer,
    ).json()
    client.post(
        f"{API}/orders/checkout", json={"address_id": address["id"]}, headers=customer
    )

    resp = client.delete(f"{API}/products/{rose.id}", headers=admin)
    assert resp.status_code == 409


def test_upload_product_image(client, products, admin, monkeypatch):
    uploads = []
    removed = []

    def fake_upload(path, file_bytes, content_type):
        uploads.append((path, file_bytes, content_type))
        return f"https://cdn.test/{path}"

    monkeypatch.setattr(product_service, "upload_to_storage", fake_upload)
    monkeypatch.setattr(product_service, "delete_public_url", removed.append)

    citrus = products["Citrus Breeze"]
    resp = client.post(
        f"{API}/products/{citrus.id}/image",
        files={"file": ("bottle.png", b"\x89PNG fake", "image/png")},
        headers=admin,
    )
    assert resp.status_code == 200
    assert resp.json()["image_url"] == f"https://cdn.test/products/{citrus.id}/image.png"
    assert uploads == [(f"products/{citrus.id}/image.png", b"\x89PNG fake", "image/png")]
    # previous (external) image is handed to the cleanup helper
    assert removed == [citrus.image_url]


def test_upload_rejects_unsupported_type(client, products, admin):
    citrus = products["Citrus Breeze"]
    resp = client.post(
        f"{API}/products/{citrus.id}/image",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=admin,
    )
    assert resp.status_code == 400


def test_upload_failure_maps_to_bad_gateway(client, products, admin, monkeypatch):
    def broken_upload(path, file_bytes, content_type):
        raise ConnectionError("storage down")

    monkeypatch.setattr(product_service, "upload_to_storage", broken_upload)
    monkeypatch.setattr(product_service, "delete_public_url", lambda url: None)

    citrus = products["Citrus Breeze"]
    resp = client.post(
        f"{API}/products/{citrus.id}/image",
        files={"file": ("bottle.jpg", b"jpeg", "image/jpeg")},
        headers=admin,
    )
    assert resp.status_code == 502


def test_search_treats_wildcards_literally(client, session, products):
    assert client.get(f"{API}/products", params={"search": "%"}).json() == []
    assert client.get(f"{API}/products", params={"search": "_"}).json() == []

    session.add(Product(name="Eau No_5", price=55.0, category="Floral"))
    session.add(Product(name="Eau No15", price=55.0, category="Floral"))
    session.commit()

    resp = client.get(f"{API}/products", params={"search": "no_5"})
    assert [p["name"] for p in resp.json()] == ["Eau No_5"]


def test_escape_like():
    assert escape_like("50% off_now\\") == "50\\% off\\_now\\\\"


def test_clearing_image_url_removes_stored_file(client, products, admin, monkeypatch):
    removed = []
    monkeypatch.setattr(product_service, "delete_public_url", removed.append)
    oud = products["Midnight Oud"]

    resp = client.patch(f"{API}/products/{oud.id}", json={"price": 139.99}, headers=admin)
    assert resp.status_code == 200
    assert removed == []

    resp = client.patch(f"{API}/products/{oud.id}", json={"image_url": None}, headers=admin)
    assert resp.status_code == 200
    assert resp.json()["image_url"] is None
    assert removed == [oud.image_url]


def test_replacing_image_url_removes_previous_file(client, products, admin, monkeypatch):
    removed = []
    monkeypatch.setattr(product_service, "delete_public_url", removed.append)
    amber = products["Golden Amber"]

    new_url = "https://cdn.test/amber-v2.png"
    resp = client.patch(f"{API}/products/{amber.id}", json={"image_url": new_url}, headers=admin)
    assert resp.json()["image_url"] == new_url
    assert removed == [amber.image_url]

    client.patch(f"{API}/products/{amber.id}", json={"image_url": new_url}, headers=admin)
    assert removed == [amber.image_url]
