"""
storefront/services/activity.py
───────────────────────────────
Append-only activity log. Entries are never updated or deleted.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlmodel import Session, col, select

from storefront.models import ActivityLog, Product
from storefront.schemas import ActivityRead, ProductSummary

logger = logging.getLogger(__name__)


def record(
    db: Session,
    user_id: str,
    action_type: str,
    *,
    product_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    commit: bool = True,
) -> ActivityLog:
    """
    Append one activity entry. Every entry carries an ISO timestamp in its
    metadata as well as the indexed timestamp column.

    commit=False leaves the entry pending in the caller's unit of work.
    """
    now = datetime.now(timezone.utc)
    details = dict(metadata or {})
    details["timestamp"] = now.isoformat()

    entry = ActivityLog(
        user_id=user_id,
        action_type=action_type,
        product_id=product_id,
        details=details,
        timestamp=now,
    )
    db.add(entry)
    if commit:
        db.commit()
        db.refresh(entry)
    logger.debug("activity: user_id=%s action=%s product_id=%s", user_id, action_type, product_id)
    return entry


def to_read(entry: ActivityLog, product: Optional[Product] = None) -> ActivityRead:
    return ActivityRead(
        id=entry.id,
        user_id=entry.user_id,
        action_type=entry.action_type,
        product_id=entry.product_id,
        metadata=entry.details,
        timestamp=entry.timestamp,
        product=ProductSummary.model_validate(product) if product is not None else None,
    )


def list_for_user(
    db: Session,
    user_id: str,
    action_type: Optional[str] = None,
    limit: int = 50,
) -> List[ActivityRead]:
    """Newest entries first, each joined with a summary of its product (if any)."""
    statement = (
        select(ActivityLog, Product)
        .join(Product, col(ActivityLog.product_id) == col(Product.id), isouter=True)
        .where(ActivityLog.user_id == user_id)
    )
    if action_type:
        statement = statement.where(ActivityLog.action_type == action_type)
    statement = statement.order_by(col(ActivityLog.timestamp).desc(), col(ActivityLog.id).desc()).limit(limit)

    return [to_read(entry, product) for entry, product in db.exec(statement).all()]


def recent_view_categories(db: Session, user_id: str, window: int = 50) -> List[str]:
    """Distinct categories recorded on the user's last `window` "view" entries, newest first."""
    statement = (
        select(ActivityLog)
        .where(ActivityLog.user_id == user_id, ActivityLog.action_type == "view")
        .order_by(col(ActivityLog.timestamp).desc(), col(ActivityLog.id).desc())
        .limit(window)
    )
    categories: List[str] = []
    for entry in db.exec(statement):
        category = (entry.details or {}).get("category")
        if isinstance(category, str) and category and category not in categories:
            categories.append(category)
    return categories
