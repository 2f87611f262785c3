import uuid

from sqlalchemy.exc import SQLAlchemyError

from essence.core.display_id import display_id
from essence.routers import cart as cart_router
from tests.conftest import API


def _lines(resp):
    return {line["original_id"]: line for line in resp.json()["items"]}


def test_guest_sees_empty_cart(client, products):
    resp = client.get(f"{API}/cart")
    assert resp.status_code == 200
    assert resp.json() == {
        "items": [],
        "item_count": 0,
        "subtotal": 0.0,
        "skipped_product_ids": [],
    }


def test_guest_cannot_add(client, products):
    rose = products["Rose Elegance"]
    resp = client.post(f"{API}/cart", json={"product_id": str(rose.id)})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "You need to be logged in to add items to cart"


def test_add_new_item_starts_at_one(client, products, customer):
    rose = products["Rose Elegance"]
    resp = client.post(f"{API}/cart", json={"product_id": str(rose.id)}, headers=customer)
    assert resp.status_code == 200

    line = _lines(resp)[str(rose.id)]
    assert line["quantity"] == 1
    assert line["id"] == display_id(rose.id)
    assert line["name"] == "Rose Elegance"
    assert line["line_total"] == 89.99
    assert resp.json()["item_count"] == 1


def test_adding_existing_item_increments_by_one(client, products, customer):
    rose = products["Rose Elegance"]
    body = {"product_id": str(rose.id)}
    client.post(f"{API}/cart", json=body, headers=customer)
    resp = client.post(f"{API}/cart", json=body, headers=customer)

    assert _lines(resp)[str(rose.id)]["quantity"] == 2
    assert len(resp.json()["items"]) == 1


def test_add_with_explicit_quantity(client, products, customer):
    oud = products["Midnight Oud"]
    resp = client.post(
        f"{API}/cart", json={"product_id": str(oud.id), "quantity": 3}, headers=customer
    )
    assert _lines(resp)[str(oud.id)]["quantity"] == 3
    assert resp.json()["subtotal"] == 389.97


def test_add_unknown_product_404(client, products, customer):
    resp = client.post(f"{API}/cart", json={"product_id": str(uuid.uuid4())}, headers=customer)
    assert resp.status_code == 404


def test_cart_totals_across_lines(client, products, customer):
    rose = products["Rose Elegance"]
    citrus = products["Citrus Breeze"]
    client.post(f"{API}/cart", json={"product_id": str(rose.id), "quantity": 2}, headers=customer)
    resp = client.post(f"{API}/cart", json={"product_id": str(citrus.id)}, headers=customer)

    body = resp.json()
    assert body["item_count"] == 3
    assert body["subtotal"] == 249.97


def test_update_quantity(client, products, customer):
    rose = products["Rose Elegance"]
    client.post(f"{API}/cart", json={"product_id": str(rose.id)}, headers=customer)

    resp = client.patch(f"{API}/cart/{rose.id}", json={"quantity": 5}, headers=customer)
    assert resp.status_code == 200
    assert _lines(resp)[str(rose.id)]["quantity"] == 5


def test_update_quantity_zero_removes_line(client, products, customer):
    rose = products["Rose Elegance"]
    client.post(f"{API}/cart", json={"product_id": str(rose.id)}, headers=customer)

    resp = client.patch(f"{API}/cart/{rose.id}", json={"quantity": 0}, headers=customer)
    assert resp.status_code == 200
    assert resp.json()["items"] == []


def test_update_negative_quantity_rejected(client, products, customer):
    rose = products["Rose Elegance"]
    client.post(f"{API}/cart", json={"product_id": str(rose.id)}, headers=customer)

    resp = client.patch(f"{API}/cart/{rose.id}", json={"quantity": -1}, headers=customer)
    assert resp.status_code == 422


def test_update_missing_line_404(client, products, customer):
    rose = products["Rose Elegance"]
    resp = client.patch(f"{API}/cart/{rose.id}", json={"quantity": 2}, headers=customer)
    assert resp.status_code == 404


def test_remove_item(client, products, customer):
    rose = products["Rose Elegance"]
    citrus = products["Citrus Breeze"]
    client.post(f"{API}/cart", json={"product_id": str(rose.id)}, headers=customer)
    client.post(f"{API}/cart", json={"product_id": str(citrus.id)}, headers=customer)

    resp = client.delete(f"{API}/cart/{rose.id}", headers=customer)
    assert resp.status_code == 200
    assert set(_lines(resp)) == {str(citrus.id)}

    assert client.delete(f"{API}/cart/{rose.id}", headers=customer).status_code == 404


def test_clear_cart(client, products, customer):
    for product in products.values():
        client.post(f"{API}/cart", json={"product_id": str(product.id)}, headers=customer)

    resp = client.delete(f"{API}/cart", headers=customer)
    assert resp.status_code == 200
    assert resp.json()["items"] == []
    assert client.get(f"{API}/cart", headers=customer).json()["item_count"] == 0


def test_carts_are_per_user(client, products, customer, other_customer):
    rose = products["Rose Elegance"]
    client.post(f"{API}/cart", json={"product_id": str(rose.id)}, headers=customer)

    assert client.get(f"{API}/cart", headers=other_customer).json()["items"] == []


def test_merge_guest_cart_sums_quantities(client, products, customer):
    rose = products["Rose Elegance"]
    oud = products["Midnight Oud"]
    unknown = uuid.uuid4()
    client.post(f"{API}/cart", json={"product_id": str(rose.id)}, headers=customer)

    resp = client.post(
        f"{API}/cart/merge",
        json={
            "items": [
                {"product_id": str(rose.id), "quantity": 2},
                {"product_id": str(oud.id)},
                {"product_id": str(oud.id), "quantity": 1},
                {"product_id": str(unknown), "quantity": 4},
            ]
        },
        headers=customer,
    )
    assert resp.status_code == 200

    lines = _lines(resp)
    assert lines[str(rose.id)]["quantity"] == 3
    assert lines[str(oud.id)]["quantity"] == 2
    assert resp.json()["skipped_product_ids"] == [str(unknown)]


def test_merge_requires_login(client, products):
    rose = products["Rose Elegance"]
    resp = client.post(
        f"{API}/cart/merge", json={"items": [{"product_id": str(rose.id)}]}
    )
    assert resp.status_code == 401


def test_invalid_token_rejected(client, products):
    resp = client.get(f"{API}/cart", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_failed_insert_returns_500(client, products, customer, monkeypatch):
    def broken_create(db, item):
        raise SQLAlchemyError("insert failed")

    monkeypatch.setattr(cart_router.cart_repo, "create", broken_create)

    rose = products["Rose Elegance"]
    resp = client.post(f"{API}/cart", json={"product_id": str(rose.id)}, headers=customer)
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to add item to cart"

    monkeypatch.undo()
    assert client.get(f"{API}/cart", headers=customer).json()["items"] == []


def test_failed_update_rolls_back_quantity(client, products, customer, monkeypatch):
    rose = products["Rose Elegance"]
    client.post(f"{API}/cart", json={"product_id": str(rose.id)}, headers=customer)

    def flush_then_fail(db, item):
        db.add(item)
        db.flush()
        raise SQLAlchemyError("update failed")

    monkeypatch.setattr(cart_router.cart_repo, "update", flush_then_fail)

    resp = client.patch(f"{API}/cart/{rose.id}", json={"quantity": 7}, headers=customer)
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Failed to update quantity"

    monkeypatch.undo()
    assert _lines(client.get(f"{API}/cart", headers=customer))[str(rose.id)]["quantity"] == 1
