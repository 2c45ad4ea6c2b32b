"""
storefront/services/catalog.py
──────────────────────────────
Product catalogue queries: filtered listing, trending list, lookups,
and attaching the most recent reviews to each product.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from storefront.core.exceptions import BadRequestError, ProductNotFoundError
from storefront.models import Product, ProductReview
from storefront.schemas import ProductCreate, ProductRead, ReviewSummary

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def _escape_like(value: str) -> str:
    """Make % and _ in user input match literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def attach_reviews(
    db: Session,
    products: Sequence[Product],
    take: int = 3,
) -> List[ProductRead]:
    """Convert products to ProductRead, each carrying its `take` newest reviews."""
    if not products:
        return []

    ids = [p.id for p in products]
    statement = (
        select(ProductReview)
        .where(col(ProductReview.product_id).in_(ids))
        .order_by(col(ProductReview.created_at).desc(), col(ProductReview.id).desc())
    )
    by_product: Dict[str, List[ReviewSummary]] = defaultdict(list)
    for review in db.exec(statement):
        bucket = by_product[review.product_id]
        if len(bucket) < take:
            bucket.append(ReviewSummary.model_validate(review))

    return [
        ProductRead.model_validate(p).model_copy(update={"product_reviews": by_product.get(p.id, [])})
        for p in products
    ]


def list_products(
    db: Session,
    *,
    category: Optional[str] = None,
    search: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    trending: bool = False,
    limit: int = 20,
    offset: int = 0,
) -> Tuple[List[Product], int]:
    """Return one page of active products matching the filters, plus the total match count."""
    conditions = [col(Product.is_active).is_(True)]

    if category:
        conditions.append(col(Product.category).ilike(f"%{_escape_like(category)}%", escape=LIKE_ESCAPE))
    if search:
        term = _escape_like(search)
        conditions.append(
            or_(
                col(Product.name).ilike(f"%{term}%", escape=LIKE_ESCAPE),
                col(Product.description).ilike(f"%{term}%", escape=LIKE_ESCAPE),
                # exact tag match against the JSON-encoded list
                cast(col(Product.tags), String).like(f'%"{term}"%', escape=LIKE_ESCAPE),
            )
        )
    if min_price is not None:
        conditions.append(col(Product.price) >= min_price)
    if max_price is not None:
        conditions.append(col(Product.price) <= max_price)
    if trending:
        conditions.append(col(Product.trending).is_(True))

    order = col(Product.trending_score).desc() if trending else col(Product.created_at).desc()
    statement = select(Product).where(*conditions).order_by(order).offset(offset).limit(limit)
    products = list(db.exec(statement).all())

    total = db.exec(select(func.count()).select_from(Product).where(*conditions)).one()
    return products, total


def trending_products(db: Session, limit: int = 10) -> List[Product]:
    """Active trending products, highest trending score first."""
    statement = (
        select(Product)
        .where(col(Product.is_active).is_(True), col(Product.trending).is_(True))
        .order_by(col(Product.trending_score).desc())
        .limit(limit)
    )
    return list(db.exec(statement).all())


def get_product(db: Session, product_id: str) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def create_product(db: Session, data: ProductCreate) -> Product:
    product = Product(**data.model_dump())
    db.add(product)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise BadRequestError(f"A product named '{data.name}' already exists.") from exc
    db.refresh(product)
    logger.info("Product created: id=%s name=%s", product.id, product.name)
    return product
