"""
storefront/models.py
────────────────────
SQLModel table definitions.

Each class that carries  table=True  maps to a database table.
List and dict attributes are stored in JSON columns; assign a new object
when changing them so the ORM notices the update.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    """Return the current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class Product(SQLModel, table=True):
    """Catalogue entry. Immutable once created except by an explicit admin update."""

    __tablename__ = "products"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=64)

    name: str = Field(max_length=256, unique=True, index=True)
    description: Optional[str] = Field(default=None)

    # Pricing
    price: float = Field(ge=0)
    original_price: Optional[float] = Field(default=None, ge=0)

    # Classification
    category: str = Field(max_length=64, index=True)
    subcategory: Optional[str] = Field(default=None, max_length=64)
    brand: Optional[str] = Field(default=None, max_length=128, index=True)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    features: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    specifications: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    # Media
    image_url: Optional[str] = Field(default=None, max_length=512)
    image_urls: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    # Availability & ranking signals
    stock_quantity: int = Field(default=0, ge=0)
    trending: bool = Field(default=False, index=True)
    trending_score: float = Field(default=0)
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class ProductReview(SQLModel, table=True):
    __tablename__ = "product_reviews"

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: str = Field(foreign_key="products.id", index=True)

    source: str = Field(default="manual", max_length=32)
    rating: int = Field(ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=256)
    content: str = Field(default="")
    author: Optional[str] = Field(default=None, max_length=128)
    verified: bool = Field(default=False)
    helpful: int = Field(default=0, ge=0)

    created_at: datetime = Field(default_factory=_utcnow)


class Persona(SQLModel, table=True):
    """
    A named bundle of UI and preference defaults used to simulate
    different shopper types. Served to clients as plain configuration.
    """

    __tablename__ = "personas"

    id: str = Field(primary_key=True, max_length=64)  # slug, e.g. "tech-enthusiast"
    name: str = Field(max_length=128, unique=True)
    description: str = Field(default="")

    preferences: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    accessibility_settings: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    demographic_profile: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    shopping_behavior: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    ui_settings: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=_new_id, primary_key=True, max_length=64)
    email: str = Field(max_length=320, unique=True, index=True)
    name: Optional[str] = Field(default=None, max_length=128)
    password_hash: str = Field(max_length=256)

    language_preference: str = Field(default="en", max_length=8)
    accessibility_needs: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    loyalty_tier: str = Field(default="bronze", max_length=16)  # bronze | silver | gold
    total_spent: float = Field(default=0, ge=0)

    persona_id: Optional[str] = Field(default=None, foreign_key="personas.id")

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class UserProfile(SQLModel, table=True):
    """One-to-one with User; created at signup, completed by onboarding."""

    __tablename__ = "user_profiles"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True)

    interests: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    onboarding_completed: bool = Field(default=False)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class UserPreference(SQLModel, table=True):
    """Stored shopping preferences that drive personalised recommendations."""

    __tablename__ = "user_preferences"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True)

    category_interests: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    brand_preferences: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    price_range_min: Optional[float] = Field(default=None, ge=0)
    price_range_max: Optional[float] = Field(default=None, ge=0)
    shopping_habits: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    updated_at: datetime = Field(default_factory=_utcnow)


class ActivityLog(SQLModel, table=True):
    """Append-only audit trail of user actions."""

    __tablename__ = "activity_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    action_type: str = Field(max_length=64, index=True)
    product_id: Optional[str] = Field(default=None, foreign_key="products.id")

    # Stored in a column named "metadata"; the attribute name is reserved by SQLAlchemy.
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON, nullable=False))

    timestamp: datetime = Field(default_factory=_utcnow, index=True)


class CartItem(SQLModel, table=True):
    """A cart line. One row per (user, product); adding again bumps the quantity."""

    __tablename__ = "cart_items"
    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_cart_user_product"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    product_id: str = Field(foreign_key="products.id")
    quantity: int = Field(default=1, gt=0)

    added_at: datetime = Field(default_factory=_utcnow)


class WishlistItem(SQLModel, table=True):
    __tablename__ = "wishlist_items"
    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_wishlist_user_product"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    product_id: str = Field(foreign_key="products.id")

    added_at: datetime = Field(default_factory=_utcnow)
