"""
storefront/schemas.py
─────────────────────
Pydantic v2 request / response schemas (DTOs).

Kept separate from SQLModel table models so that the API contract
can evolve independently of the persistence layer. Field names are
snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        # Infinity and NaN are valid JSON to Python but never a valid price
        allow_inf_nan=False,
    )


# ── Health ───────────────────────────────────────────────────────────────────

class ServiceStatus(CamelModel):
    database: str
    api: str


class HealthResponse(CamelModel):
    status: str
    timestamp: datetime
    services: ServiceStatus
    version: str
    environment: str
    error: Optional[str] = None


# ── Products ─────────────────────────────────────────────────────────────────

class ReviewSummary(CamelModel):
    rating: int
    content: Optional[str] = None
    author: Optional[str] = None
    created_at: Optional[datetime] = None


class ProductCreate(CamelModel):
    name: str = Field(min_length=1, max_length=256, examples=["Sony WH-1000XM5"])
    description: Optional[str] = None
    price: float = Field(ge=0, examples=[349.99])
    original_price: Optional[float] = Field(default=None, ge=0)
    category: str = Field(min_length=1, max_length=64, examples=["Electronics"])
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    image_url: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    specifications: Dict[str, Any] = Field(default_factory=dict)
    stock_quantity: int = Field(default=0, ge=0)
    trending: bool = False
    trending_score: float = 0
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)


class ProductRead(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    original_price: Optional[float] = None
    category: str
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    image_url: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    specifications: Dict[str, Any] = Field(default_factory=dict)
    stock_quantity: int
    trending: bool
    trending_score: float
    rating: Optional[float] = None
    review_count: int
    is_active: bool
    created_at: datetime
    product_reviews: List[ReviewSummary] = Field(default_factory=list)


class ProductSummary(CamelModel):
    id: str
    name: str
    category: str
    brand: Optional[str] = None
    price: float
    image_url: Optional[str] = None


class Pagination(CamelModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class ProductListResponse(CamelModel):
    products: List[ProductRead]
    pagination: Pagination


class TrendingResponse(CamelModel):
    products: List[ProductRead]
    count: int


class RecommendationResponse(CamelModel):
    recommendations: List[ProductRead]


# ── Pricing ──────────────────────────────────────────────────────────────────

class PricingRequest(CamelModel):
    """Request body for the dynamic-pricing endpoint."""

    product_id: str = Field(min_length=1, examples=["prod_001"])
    base_price: float = Field(gt=0, examples=[349.99])


class PriceBreakdown(CamelModel):
    base_price: float
    loyalty_discount: float
    accessibility_discount: float
    time_discount: float
    region_adjustment: float


class PricingResponse(CamelModel):
    product_id: str
    original_price: float
    final_price: float
    discount: float
    discount_percentage: int
    discount_reason: Optional[str] = None
    currency: str = "USD"
    region: str
    price_breakdown: PriceBreakdown


# ── Cart & wishlist ──────────────────────────────────────────────────────────

class CartAddRequest(CamelModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)


class CartLine(CamelModel):
    product_id: str
    name: str
    quantity: int
    unit_price: float
    line_total: float
    added_at: datetime


class CartResponse(CamelModel):
    items: List[CartLine] = Field(default_factory=list)
    total: float = 0


class WishlistToggleRequest(CamelModel):
    product_id: str = Field(min_length=1)


class WishlistToggleResponse(CamelModel):
    success: bool = True
    wishlist: List[str]
    in_wishlist: bool


class WishlistResponse(CamelModel):
    wishlist: List[ProductRead]


# ── Activity ─────────────────────────────────────────────────────────────────

class ActivityCreate(CamelModel):
    action_type: str = Field(min_length=1, max_length=64, examples=["view"])
    product_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ActivityRead(CamelModel):
    id: int
    user_id: str
    action_type: str
    product_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime
    product: Optional[ProductSummary] = None


class ActivityCreateResponse(CamelModel):
    success: bool = True
    activity_log: ActivityRead


class ActivityListResponse(CamelModel):
    activities: List[ActivityRead]


# ── Users ────────────────────────────────────────────────────────────────────

class PriceRange(CamelModel):
    min: Optional[float] = Field(default=None, ge=0)
    max: Optional[float] = Field(default=None, ge=0)


class OnboardingRequest(CamelModel):
    user_id: str = Field(min_length=1)
    interests: List[str] = Field(default_factory=list)
    accessibility_needs: List[str] = Field(default_factory=list)
    language_preference: str = "en"
    price_range: PriceRange = Field(default_factory=PriceRange)
    shopping_frequency: Optional[str] = None
    preferred_categories: List[str] = Field(default_factory=list)


class SuccessResponse(CamelModel):
    success: bool = True


class UserUpdate(CamelModel):
    name: Optional[str] = None
    language_preference: Optional[str] = None
    accessibility_needs: Optional[List[str]] = None
    persona_id: Optional[str] = None


class ProfileUpdate(CamelModel):
    interests: Optional[List[str]] = None
    onboarding_completed: Optional[bool] = None


class PreferenceUpdate(CamelModel):
    category_interests: Optional[List[str]] = None
    brand_preferences: Optional[List[str]] = None
    price_range_min: Optional[float] = Field(default=None, ge=0)
    price_range_max: Optional[float] = Field(default=None, ge=0)
    shopping_habits: Optional[Dict[str, Any]] = None


class ProfileUpdateRequest(CamelModel):
    user: Optional[UserUpdate] = None
    profile: Optional[ProfileUpdate] = None
    preferences: Optional[PreferenceUpdate] = None


class ProfileRead(CamelModel):
    interests: List[str] = Field(default_factory=list)
    onboarding_completed: bool
    updated_at: datetime


class PreferenceRead(CamelModel):
    category_interests: List[str] = Field(default_factory=list)
    brand_preferences: List[str] = Field(default_factory=list)
    price_range_min: Optional[float] = None
    price_range_max: Optional[float] = None
    shopping_habits: Dict[str, Any] = Field(default_factory=dict)


class PersonaRead(CamelModel):
    id: str
    name: str
    description: str
    preferences: Dict[str, Any] = Field(default_factory=dict)
    accessibility_settings: Dict[str, Any] = Field(default_factory=dict)
    demographic_profile: Dict[str, Any] = Field(default_factory=dict)
    shopping_behavior: Dict[str, Any] = Field(default_factory=dict)
    ui_settings: Dict[str, Any] = Field(default_factory=dict)


class UserRead(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    language_preference: str
    accessibility_needs: List[str] = Field(default_factory=list)
    loyalty_tier: str
    total_spent: float
    persona_id: Optional[str] = None


class UserDetail(UserRead):
    profile: Optional[ProfileRead] = None
    preferences: Optional[PreferenceRead] = None
    persona: Optional[PersonaRead] = None


class UserDetailResponse(CamelModel):
    user: UserDetail


class PersonaListResponse(CamelModel):
    personas: List[PersonaRead]


# ── Auth ─────────────────────────────────────────────────────────────────────

class SignupRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    name: Optional[str] = Field(default=None, max_length=128)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


# ── Assistant ────────────────────────────────────────────────────────────────

class ChatMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str = Field(min_length=1, max_length=4000)


class ChatRequest(CamelModel):
    messages: List[ChatMessage] = Field(
        min_length=1,
        description="Conversation so far, oldest first. The last message is the user's turn.",
    )


class ChatResponse(CamelModel):
    reply: str
    tool_calls: List[str] = Field(default_factory=list)
