"""
storefront/services/cart.py
───────────────────────────
Cart and wishlist mutators, persisted per (user, product).

Cart totals are computed from each product's current catalogue price.
Quantities default to 1; there is no stock-level check.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Tuple

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from storefront.models import CartItem, Product, WishlistItem
from storefront.schemas import CartLine, CartResponse, ProductRead
from storefront.services import activity
from storefront.services.catalog import attach_reviews, get_product

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


def _money(value: Decimal) -> float:
    return float(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def get_cart(db: Session, user_id: str) -> CartResponse:
    statement = (
        select(CartItem, Product)
        .join(Product, col(CartItem.product_id) == col(Product.id))
        .where(CartItem.user_id == user_id)
        .order_by(col(CartItem.added_at), col(CartItem.id))
    )
    lines: List[CartLine] = []
    total = Decimal(0)
    for item, product in db.exec(statement).all():
        unit = Decimal(str(product.price))
        line_total = unit * item.quantity
        total += line_total
        lines.append(
            CartLine(
                product_id=product.id,
                name=product.name,
                quantity=item.quantity,
                unit_price=product.price,
                line_total=_money(line_total),
                added_at=item.added_at,
            )
        )
    return CartResponse(items=lines, total=_money(total))


def _bump_quantity(db: Session, user_id: str, product_id: str, quantity: int) -> int:
    """Atomically add to an existing line; returns the number of rows touched."""
    statement = (
        update(CartItem)
        .where(col(CartItem.user_id) == user_id, col(CartItem.product_id) == product_id)
        .values(quantity=col(CartItem.quantity) + quantity)
        .execution_options(synchronize_session=False)
    )
    return db.exec(statement).rowcount


def add_item(db: Session, user_id: str, product_id: str, quantity: int = 1) -> CartResponse:
    """Add `quantity` of a product; an existing line has its quantity increased."""
    get_product(db, product_id)

    if not _bump_quantity(db, user_id, product_id, quantity):
        db.add(CartItem(user_id=user_id, product_id=product_id, quantity=quantity))
    try:
        db.commit()
    except IntegrityError:
        # a concurrent request created the line first
        db.rollback()
        _bump_quantity(db, user_id, product_id, quantity)
        db.commit()

    logger.info("cart add: user_id=%s product_id=%s quantity=%d", user_id, product_id, quantity)
    return get_cart(db, user_id)


def remove_item(db: Session, user_id: str, product_id: str) -> CartResponse:
    """Drop the product's line; removing an absent product is not an error."""
    statement = delete(CartItem).where(
        col(CartItem.user_id) == user_id, col(CartItem.product_id) == product_id
    ).execution_options(synchronize_session=False)
    if db.exec(statement).rowcount:
        logger.info("cart remove: user_id=%s product_id=%s", user_id, product_id)
    db.commit()
    return get_cart(db, user_id)


def wishlist_ids(db: Session, user_id: str) -> List[str]:
    statement = (
        select(WishlistItem.product_id)
        .where(WishlistItem.user_id == user_id)
        .order_by(col(WishlistItem.added_at), col(WishlistItem.id))
    )
    return list(db.exec(statement).all())


def get_wishlist(db: Session, user_id: str) -> List[ProductRead]:
    ids = wishlist_ids(db, user_id)
    if not ids:
        return []
    products = db.exec(select(Product).where(col(Product.id).in_(ids))).all()
    by_id = {p.id: p for p in products}
    ordered = [by_id[i] for i in ids if i in by_id]
    return attach_reviews(db, ordered, take=1)


def toggle_wishlist(db: Session, user_id: str, product_id: str) -> Tuple[List[str], bool]:
    """Add the product if absent, remove it if present. Returns (wishlist ids, now in wishlist)."""
    get_product(db, product_id)

    statement = delete(WishlistItem).where(
        col(WishlistItem.user_id) == user_id, col(WishlistItem.product_id) == product_id
    ).execution_options(synchronize_session=False)
    in_wishlist = not db.exec(statement).rowcount
    if in_wishlist:
        db.add(WishlistItem(user_id=user_id, product_id=product_id))

    activity.record(
        db,
        user_id,
        "wishlist_add" if in_wishlist else "wishlist_remove",
        product_id=product_id,
        commit=False,
    )
    try:
        db.commit()
    except IntegrityError:
        # a concurrent request added the same product; it is in the wishlist either way
        db.rollback()
        logger.info("wishlist add raced: user_id=%s product_id=%s", user_id, product_id)
        return wishlist_ids(db, user_id), True
    return wishlist_ids(db, user_id), in_wishlist
