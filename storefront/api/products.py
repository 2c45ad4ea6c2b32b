"""
storefront/api/products.py
──────────────────────────
Catalogue endpoints.

GET  /products                   filtered, paginated listing
POST /products                   create a product
GET  /products/trending          trending products by score
GET  /products/recommendations   personalised (or trending) picks
GET  /products/{product_id}      single product
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from storefront.api.deps import get_optional_user
from storefront.database import get_session
from storefront.models import User
from storefront.schemas import (
    Pagination,
    ProductCreate,
    ProductListResponse,
    ProductRead,
    RecommendationResponse,
    TrendingResponse,
)
from storefront.services import catalog, recommendations

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


@router.get(
    "",
    response_model=ProductListResponse,
    summary="Browse and search products",
)
def list_products(
    category: Optional[str] = Query(default=None, description="Case-insensitive category match."),
    search: Optional[str] = Query(default=None, description="Matches name, description or an exact tag."),
    min_price: Optional[float] = Query(default=None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(default=None, alias="maxPrice", ge=0),
    trending: bool = Query(default=False),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_session),
) -> ProductListResponse:
    products, total = catalog.list_products(
        db,
        category=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
        trending=trending,
        limit=limit,
        offset=offset,
    )
    return ProductListResponse(
        products=catalog.attach_reviews(db, products),
        pagination=Pagination(total=total, limit=limit, offset=offset, has_more=offset + limit < total),
    )


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
def create_product(data: ProductCreate, db: Session = Depends(get_session)) -> ProductRead:
    product = catalog.create_product(db, data)
    return ProductRead.model_validate(product)


@router.get(
    "/trending",
    response_model=TrendingResponse,
    summary="Trending products",
)
def trending_products(
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_session),
) -> TrendingResponse:
    products = catalog.attach_reviews(db, catalog.trending_products(db, limit))
    return TrendingResponse(products=products, count=len(products))


@router.get(
    "/recommendations",
    response_model=RecommendationResponse,
    summary="Recommended products",
    description=(
        "Signed-in shoppers get picks from their stored category/brand interests, "
        "price range and recently viewed categories; everyone else gets the trending list."
    ),
)
def recommended_products(
    limit: int = Query(default=10, ge=1, le=100),
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_session),
) -> RecommendationResponse:
    products = recommendations.recommend(db, user.id if user else None, limit)
    return RecommendationResponse(recommendations=catalog.attach_reviews(db, products, take=1))


@router.get(
    "/{product_id}",
    response_model=ProductRead,
    summary="Get one product",
)
def get_product(product_id: str, db: Session = Depends(get_session)) -> ProductRead:
    product = catalog.get_product(db, product_id)
    return catalog.attach_reviews(db, [product])[0]
