from sqlmodel import select

from conftest import auth_headers
from storefront.models import ActivityLog, CartItem, WishlistItem


def test_cart_requires_sign_in(client):
    assert client.get("/api/cart").status_code == 401
    assert client.post("/api/cart", json={"productId": "x"}).status_code == 401
    assert client.get("/api/user/wishlist").status_code == 401


def test_empty_cart(client, make_user):
    user = make_user()

    resp = client.get("/api/cart", headers=auth_headers(user))

    assert resp.status_code == 200
    assert resp.json() == {"items": [], "total": 0}


def test_add_uses_catalogue_price(client, make_user, make_product):
    user = make_user()
    headphones = make_product(name="Headphones", price=349.99)
    cable = make_product(name="Cable", price=4.5)
    headers = auth_headers(user)

    client.post("/api/cart", json={"productId": headphones.id, "quantity": 2}, headers=headers)
    resp = client.post("/api/cart", json={"productId": cable.id}, headers=headers)

    assert resp.status_code == 200
    body = resp.json()
    assert [(line["name"], line["quantity"]) for line in body["items"]] == [("Headphones", 2), ("Cable", 1)]
    assert body["items"][0]["unitPrice"] == 349.99
    assert body["items"][0]["lineTotal"] == 699.98
    assert body["total"] == 704.48


def test_adding_again_merges_the_line(client, session, make_user, make_product):
    user = make_user()
    product = make_product(price=10)
    headers = auth_headers(user)

    client.post("/api/cart", json={"productId": product.id}, headers=headers)
    resp = client.post("/api/cart", json={"productId": product.id, "quantity": 3}, headers=headers)

    assert len(resp.json()["items"]) == 1
    assert resp.json()["items"][0]["quantity"] == 4
    assert resp.json()["total"] == 40.0
    assert len(session.exec(select(CartItem).where(CartItem.user_id == user.id)).all()) == 1


def test_unknown_product_is_not_found(client, make_user):
    user = make_user()

    resp = client.post("/api/cart", json={"productId": "missing"}, headers=auth_headers(user))

    assert resp.status_code == 404
    assert "error" in resp.json()


def test_concurrent_first_add_merges_into_one_line(client, session, make_user, make_product, competing_insert):
    user = make_user()
    product = make_product(price=10)

    with competing_insert(CartItem(user_id=user.id, product_id=product.id, quantity=1)):
        resp = client.post("/api/cart", json={"productId": product.id, "quantity": 2}, headers=auth_headers(user))

    assert resp.status_code == 200
    assert [line["quantity"] for line in resp.json()["items"]] == [3]
    assert resp.json()["total"] == 30.0
    assert len(session.exec(select(CartItem).where(CartItem.user_id == user.id)).all()) == 1


def test_zero_quantity_is_rejected(client, make_user, make_product):
    user = make_user()
    product = make_product()

    resp = client.post("/api/cart", json={"productId": product.id, "quantity": 0}, headers=auth_headers(user))

    assert resp.status_code == 400


def test_remove_line(client, make_user, make_product):
    user = make_user()
    keep = make_product(name="Keep", price=5)
    drop = make_product(name="Drop", price=7)
    headers = auth_headers(user)
    client.post("/api/cart", json={"productId": keep.id}, headers=headers)
    client.post("/api/cart", json={"productId": drop.id}, headers=headers)

    resp = client.delete("/api/cart", params={"productId": drop.id}, headers=headers)

    assert [line["name"] for line in resp.json()["items"]] == ["Keep"]
    assert resp.json()["total"] == 5.0


def test_removing_absent_product_is_a_no_op(client, make_user):
    user = make_user()

    resp = client.delete("/api/cart", params={"productId": "not-in-cart"}, headers=auth_headers(user))

    assert resp.status_code == 200
    assert resp.json()["items"] == []


def test_remove_without_product_id(client, make_user):
    user = make_user()

    resp = client.delete("/api/cart", headers=auth_headers(user))

    assert resp.status_code == 400
    assert resp.json() == {"error": "Product ID is required"}


def test_carts_are_per_user(client, make_user, make_product):
    alice, bob = make_user(), make_user()
    product = make_product()
    client.post("/api/cart", json={"productId": product.id}, headers=auth_headers(alice))

    assert client.get("/api/cart", headers=auth_headers(bob)).json()["items"] == []


def test_wishlist_toggle_adds_then_removes(client, session, make_user, make_product):
    user = make_user()
    product = make_product()
    headers = auth_headers(user)

    added = client.post("/api/user/wishlist", json={"productId": product.id}, headers=headers)
    removed = client.post("/api/user/wishlist", json={"productId": product.id}, headers=headers)

    assert added.json() == {"success": True, "wishlist": [product.id], "inWishlist": True}
    assert removed.json() == {"success": True, "wishlist": [], "inWishlist": False}

    actions = session.exec(
        select(ActivityLog.action_type).where(ActivityLog.user_id == user.id).order_by(ActivityLog.id)
    ).all()
    assert actions == ["wishlist_add", "wishlist_remove"]


def test_wishlist_lists_products_in_insertion_order(client, make_user, make_product):
    user = make_user()
    first = make_product(name="First")
    second = make_product(name="Second")
    headers = auth_headers(user)
    client.post("/api/user/wishlist", json={"productId": second.id}, headers=headers)
    client.post("/api/user/wishlist", json={"productId": first.id}, headers=headers)

    resp = client.get("/api/user/wishlist", headers=headers)

    assert [p["name"] for p in resp.json()["wishlist"]] == ["Second", "First"]


def test_wishlist_unknown_product(client, make_user):
    user = make_user()

    resp = client.post("/api/user/wishlist", json={"productId": "missing"}, headers=auth_headers(user))

    assert resp.status_code == 404


def test_concurrent_wishlist_add_keeps_one_row(client, session, make_user, make_product, competing_insert):
    user = make_user()
    product = make_product()

    with competing_insert(WishlistItem(user_id=user.id, product_id=product.id)):
        resp = client.post("/api/user/wishlist", json={"productId": product.id}, headers=auth_headers(user))

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "wishlist": [product.id], "inWishlist": True}
    assert len(session.exec(select(WishlistItem).where(WishlistItem.user_id == user.id)).all()) == 1
