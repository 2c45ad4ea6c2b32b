from datetime import datetime, timedelta, timezone

from storefront.models import ProductReview


def _names(resp):
    return [p["name"] for p in resp.json()["products"]]


def test_listing_is_newest_first_and_skips_inactive(client, make_product):
    make_product(name="Old")
    make_product(name="New")
    make_product(name="Retired", is_active=False)

    resp = client.get("/api/products")

    assert resp.status_code == 200
    assert _names(resp) == ["New", "Old"]
    assert resp.json()["pagination"] == {"total": 2, "limit": 20, "offset": 0, "hasMore": False}


def test_category_filter_is_case_insensitive_substring(client, make_product):
    make_product(name="Yoga Mat", category="Sports Equipment")
    make_product(name="Laptop", category="Electronics")

    assert _names(client.get("/api/products", params={"category": "sports"})) == ["Yoga Mat"]


def test_search_matches_name_description_or_tag(client, make_product):
    make_product(name="Running Shoes", description="Light trainers")
    make_product(name="Kettle", description="Boils water fast")
    make_product(name="Camera", tags=["photography", "mirrorless"])
    make_product(name="Tripod", tags=["photography-gear"])

    assert _names(client.get("/api/products", params={"search": "running"})) == ["Running Shoes"]
    assert _names(client.get("/api/products", params={"search": "water"})) == ["Kettle"]
    assert _names(client.get("/api/products", params={"search": "photography"})) == ["Camera"]


def test_like_wildcards_in_filters_match_literally(client, make_product):
    make_product(name="Mug 50% off", category="Home_Decor")
    make_product(name="Mug 5000", category="HomeXDecor")

    assert _names(client.get("/api/products", params={"search": "50%"})) == ["Mug 50% off"]
    assert _names(client.get("/api/products", params={"category": "home_"})) == ["Mug 50% off"]


def test_price_bounds_are_inclusive(client, make_product):
    make_product(name="Cheap", price=10)
    make_product(name="Mid", price=50)
    make_product(name="Dear", price=100)

    resp = client.get("/api/products", params={"minPrice": 10, "maxPrice": 50})

    assert sorted(_names(resp)) == ["Cheap", "Mid"]


def test_trending_filter_orders_by_score(client, make_product):
    make_product(name="Low", trending=True, trending_score=10)
    make_product(name="High", trending=True, trending_score=90)
    make_product(name="Flat", trending=False, trending_score=99)

    assert _names(client.get("/api/products", params={"trending": "true"})) == ["High", "Low"]


def test_pagination(client, make_product):
    for i in range(5):
        make_product(name=f"P{i}")

    first = client.get("/api/products", params={"limit": 2})
    last = client.get("/api/products", params={"limit": 2, "offset": 4})

    assert _names(first) == ["P4", "P3"]
    assert first.json()["pagination"]["hasMore"] is True
    assert _names(last) == ["P0"]
    assert last.json()["pagination"]["hasMore"] is False
    assert last.json()["pagination"]["total"] == 5


def test_listing_attaches_three_newest_reviews(client, session, make_product):
    product = make_product(name="Reviewed")
    base = datetime(2024, 2, 1, tzinfo=timezone.utc)
    for i in range(4):
        session.add(
            ProductReview(product_id=product.id, rating=i + 1, content=f"review {i}", created_at=base + timedelta(days=i))
        )
    session.commit()

    reviews = client.get("/api/products").json()["products"][0]["productReviews"]

    assert [r["content"] for r in reviews] == ["review 3", "review 2", "review 1"]


def test_trending_endpoint(client, make_product):
    make_product(name="A", trending=True, trending_score=5)
    make_product(name="B", trending=True, trending_score=50)
    make_product(name="C")

    resp = client.get("/api/products/trending")

    assert _names(resp) == ["B", "A"]
    assert resp.json()["count"] == 2


def test_create_product(client):
    payload = {
        "name": "Sony WH-1000XM5",
        "price": 349.99,
        "category": "Electronics",
        "brand": "Sony",
        "tags": ["audio"],
        "stockQuantity": 12,
    }

    resp = client.post("/api/products", json=payload)

    assert resp.status_code == 201
    body = resp.json()
    assert body["name"] == "Sony WH-1000XM5"
    assert body["stockQuantity"] == 12
    assert body["isActive"] is True
    assert client.get(f"/api/products/{body['id']}").json()["brand"] == "Sony"


def test_duplicate_product_name_is_rejected(client, make_product):
    make_product(name="Taken")

    resp = client.post("/api/products", json={"name": "Taken", "price": 1, "category": "Books"})

    assert resp.status_code == 400
    assert "already exists" in resp.json()["error"]


def test_create_requires_name_price_and_category(client):
    resp = client.post("/api/products", json={"name": "No price"})

    assert resp.status_code == 400
    assert "price" in resp.json()["error"]


def test_unknown_product(client):
    resp = client.get("/api/products/does-not-exist")

    assert resp.status_code == 404
    assert resp.json()["error"] == "Product with id 'does-not-exist' was not found."
