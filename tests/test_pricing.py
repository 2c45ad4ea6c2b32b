from decimal import Decimal

import pytest

from conftest import auth_headers
from storefront.api import shop
from storefront.services.pricing import evaluate_price


@pytest.mark.parametrize(
    "tier, expected_discount, expected_reason",
    [
        ("gold", Decimal("15.00"), "Gold member discount"),
        ("silver", Decimal("10.00"), "Silver member discount"),
        ("bronze", Decimal("5.00"), "Bronze member discount"),
        ("platinum", Decimal("0.00"), None),
        (None, Decimal("0.00"), None),
    ],
)
def test_loyalty_tiers_at_daytime(tier, expected_discount, expected_reason):
    quote = evaluate_price(100.0, loyalty_tier=tier, hour=12)

    assert quote.discount == expected_discount
    assert quote.final_price == Decimal("100.00") - expected_discount
    assert quote.discount_reason == expected_reason


def test_accessibility_beats_bronze():
    quote = evaluate_price(80.0, loyalty_tier="bronze", accessibility_needs=["Large Fonts"], hour=12)

    assert quote.discount == Decimal("8.00")
    assert quote.final_price == Decimal("72.00")
    assert quote.discount_reason == "Accessibility support discount"


def test_gold_beats_accessibility():
    quote = evaluate_price(100.0, loyalty_tier="gold", accessibility_needs=["Screen Reader Support"], hour=12)

    assert quote.final_price == Decimal("85.00")
    assert quote.discount_reason == "Gold member discount"


def test_night_owl_without_other_signals():
    quote = evaluate_price(40.0, hour=3)

    assert quote.discount == Decimal("2.00")
    assert quote.discount_reason == "Night owl discount"
    assert quote.time_discount == Decimal("2.00")


@pytest.mark.parametrize("hour, applies", [(1, False), (2, True), (6, True), (7, False)])
def test_night_owl_window_is_inclusive(hour, applies):
    quote = evaluate_price(100.0, hour=hour)

    assert (quote.discount_reason == "Night owl discount") is applies


def test_discounts_are_not_additive():
    quote = evaluate_price(100.0, loyalty_tier="silver", accessibility_needs=["High Contrast"], hour=4)

    assert quote.final_price == Decimal("90.00")


def test_night_owl_wins_a_tie_with_bronze():
    quote = evaluate_price(100.0, loyalty_tier="bronze", hour=5)

    assert quote.final_price == Decimal("95.00")
    assert quote.discount_reason == "Night owl discount"


def test_non_us_region_multiplies_discounted_price():
    quote = evaluate_price(100.0, loyalty_tier="gold", hour=12, region="DE")

    # 100 * 0.85 (gold) * 0.85 (region)
    assert quote.final_price == Decimal("72.25")
    assert quote.region_adjustment == Decimal("-15.00")
    assert quote.region == "DE"


def test_rounding_is_half_up_at_the_end():
    # 10.05 * 0.95 = 9.5475 -> 9.55
    quote = evaluate_price(10.05, loyalty_tier="bronze", hour=12)

    assert quote.final_price == Decimal("9.55")
    assert quote.discount == Decimal("0.50")


def test_rejects_non_positive_base_price():
    with pytest.raises(ValueError):
        evaluate_price(0)


def test_pricing_endpoint_for_gold_member(client, make_user):
    user = make_user(loyalty_tier="gold")

    resp = client.post(
        "/api/autumn/pricing",
        json={"productId": "p1", "basePrice": 200},
        headers=auth_headers(user),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["finalPrice"] == 170.0
    assert body["discount"] == 30.0
    assert body["discountPercentage"] == 15
    assert body["discountReason"] == "Gold member discount"
    assert body["currency"] == "USD"
    assert body["region"] == "US"
    assert body["priceBreakdown"]["loyaltyDiscount"] == 30.0


def test_pricing_endpoint_uses_the_clock(client, make_user, clock):
    user = make_user(loyalty_tier="none")
    clock["hour"] = 3

    resp = client.post(
        "/api/autumn/pricing",
        json={"productId": "p1", "basePrice": 100},
        headers=auth_headers(user),
    )

    assert resp.json()["discountReason"] == "Night owl discount"
    assert resp.json()["finalPrice"] == 95.0


def test_anonymous_shopper_gets_no_personal_discount(client, clock):
    clock["hour"] = 3

    resp = client.post("/api/autumn/pricing", json={"productId": "p1", "basePrice": 100})

    assert resp.status_code == 200
    assert resp.json()["finalPrice"] == 100.0
    assert resp.json()["discountReason"] is None


def test_configured_region_applies_multiplier(client, monkeypatch):
    monkeypatch.setattr(shop.settings, "PRICING_REGION", "CA")

    resp = client.post("/api/autumn/pricing", json={"productId": "p1", "basePrice": 100})

    assert resp.json()["finalPrice"] == 85.0
    assert resp.json()["region"] == "CA"


@pytest.mark.parametrize(
    "payload",
    [{"basePrice": 100}, {"productId": "p1"}, {"productId": "p1", "basePrice": 0}],
)
def test_missing_fields_are_a_client_error(client, payload):
    resp = client.post("/api/autumn/pricing", json=payload)

    assert resp.status_code == 400
    assert "error" in resp.json()


def test_infinite_base_price_is_a_client_error(client):
    resp = client.post(
        "/api/autumn/pricing",
        content='{"productId": "p1", "basePrice": Infinity}',
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert "error" in resp.json()
