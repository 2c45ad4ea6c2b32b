"""
storefront/api/shop.py
──────────────────────
Cart, wishlist and dynamic-pricing endpoints.

GET/POST/DELETE /cart      list, add (merging quantities), remove a line
GET/POST /user/wishlist    list, toggle a product
POST /autumn/pricing       price quote for the calling shopper
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from storefront.api.deps import get_current_hour, get_current_user, get_optional_user
from storefront.core.config import get_settings
from storefront.core.exceptions import BadRequestError
from storefront.database import get_session
from storefront.models import User
from storefront.schemas import (
    CartAddRequest,
    CartResponse,
    PriceBreakdown,
    PricingRequest,
    PricingResponse,
    WishlistResponse,
    WishlistToggleRequest,
    WishlistToggleResponse,
)
from storefront.services import cart
from storefront.services.pricing import evaluate_price

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


@router.get("/cart", response_model=CartResponse, tags=["Cart"], summary="Current cart")
def get_cart(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> CartResponse:
    return cart.get_cart(db, user.id)


@router.post(
    "/cart",
    response_model=CartResponse,
    tags=["Cart"],
    summary="Add to cart",
    description="Adding a product already in the cart increases its quantity.",
)
def add_to_cart(
    data: CartAddRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> CartResponse:
    return cart.add_item(db, user.id, data.product_id, data.quantity)


@router.delete("/cart", response_model=CartResponse, tags=["Cart"], summary="Remove from cart")
def remove_from_cart(
    product_id: Optional[str] = Query(default=None, alias="productId"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> CartResponse:
    if not product_id:
        raise BadRequestError("Product ID is required")
    return cart.remove_item(db, user.id, product_id)


@router.get("/user/wishlist", response_model=WishlistResponse, tags=["Wishlist"], summary="Wishlist products")
def get_wishlist(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> WishlistResponse:
    return WishlistResponse(wishlist=cart.get_wishlist(db, user.id))


@router.post(
    "/user/wishlist",
    response_model=WishlistToggleResponse,
    tags=["Wishlist"],
    summary="Toggle a wishlist product",
)
def toggle_wishlist(
    data: WishlistToggleRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> WishlistToggleResponse:
    ids, in_wishlist = cart.toggle_wishlist(db, user.id, data.product_id)
    return WishlistToggleResponse(wishlist=ids, in_wishlist=in_wishlist)


@router.post(
    "/autumn/pricing",
    response_model=PricingResponse,
    tags=["Pricing"],
    summary="Dynamic price quote",
    description=(
        "Applies the best of the loyalty, accessibility and night-owl discounts for "
        "signed-in shoppers, then the regional multiplier."
    ),
)
def price_quote(
    data: PricingRequest,
    user: Optional[User] = Depends(get_optional_user),
    hour: int = Depends(get_current_hour),
) -> PricingResponse:
    if user is not None:
        quote = evaluate_price(
            data.base_price,
            loyalty_tier=user.loyalty_tier,
            accessibility_needs=user.accessibility_needs,
            hour=hour,
            region=settings.PRICING_REGION,
        )
    else:
        quote = evaluate_price(data.base_price, region=settings.PRICING_REGION)

    logger.info(
        "pricing: product_id=%s base=%s final=%s reason=%s",
        data.product_id,
        quote.base_price,
        quote.final_price,
        quote.discount_reason,
    )
    return PricingResponse(
        product_id=data.product_id,
        original_price=data.base_price,
        final_price=float(quote.final_price),
        discount=float(quote.discount),
        discount_percentage=quote.discount_percentage,
        discount_reason=quote.discount_reason,
        region=quote.region,
        price_breakdown=PriceBreakdown(
            base_price=data.base_price,
            loyalty_discount=float(quote.loyalty_discount),
            accessibility_discount=float(quote.accessibility_discount),
            time_discount=float(quote.time_discount),
            region_adjustment=float(quote.region_adjustment),
        ),
    )
