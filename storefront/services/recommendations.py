"""
storefront/services/recommendations.py
──────────────────────────────────────
Product recommendation selector.

Decision procedure
──────────────────
1. No user                    → trending list.
2. User without preferences   → trending list.
3. Otherwise OR together:
     category ∈ category interests
     brand    ∈ brand preferences
     category ∈ categories seen in the last 50 "view" activity entries
   and AND the preferred price range on top. An empty OR falls back to
   "trending = true" (price range still applies).
4. Order by trending, trending score, created_at (all descending), cap at limit.
5. Record one "recommendations_viewed" activity entry with the count.

A database error on the personalised path is logged and answered with the
trending list, so the widget always has something to show.
"""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from storefront.models import Product, User, UserPreference
from storefront.services import activity
from storefront.services.catalog import trending_products

logger = logging.getLogger(__name__)

VIEW_HISTORY_WINDOW = 50


def recommend(db: Session, user_id: Optional[str], limit: int = 10) -> List[Product]:
    if not user_id:
        return trending_products(db, limit)

    try:
        return _personalised(db, user_id, limit)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Personalised recommendations failed for user_id=%s: %s", user_id, exc)
        return trending_products(db, limit)


def _personalised(db: Session, user_id: str, limit: int) -> List[Product]:
    user = db.get(User, user_id)
    preferences = db.exec(
        select(UserPreference).where(UserPreference.user_id == user_id)
    ).first()

    if user is None or preferences is None:
        return trending_products(db, limit)

    viewed_categories = activity.recent_view_categories(db, user_id, VIEW_HISTORY_WINDOW)

    signals = []
    if preferences.category_interests:
        signals.append(col(Product.category).in_(preferences.category_interests))
    if preferences.brand_preferences:
        signals.append(col(Product.brand).in_(preferences.brand_preferences))
    if viewed_categories:
        signals.append(col(Product.category).in_(viewed_categories))

    conditions = [col(Product.is_active).is_(True)]
    conditions.append(or_(*signals) if signals else col(Product.trending).is_(True))

    # Zero bounds are treated as "not set".
    if preferences.price_range_min:
        conditions.append(col(Product.price) >= preferences.price_range_min)
    if preferences.price_range_max:
        conditions.append(col(Product.price) <= preferences.price_range_max)

    statement = (
        select(Product)
        .where(*conditions)
        .order_by(
            col(Product.trending).desc(),
            col(Product.trending_score).desc(),
            col(Product.created_at).desc(),
        )
        .limit(limit)
    )
    products = list(db.exec(statement).all())

    activity.record(
        db,
        user_id,
        "recommendations_viewed",
        metadata={"count": len(products)},
    )
    logger.info("recommendations: user_id=%s signals=%d count=%d", user_id, len(signals), len(products))
    return products
