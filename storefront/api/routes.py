"""
storefront/api/routes.py
────────────────────────
Storefront API router.

Endpoints defined here
──────────────────────
POST /assistant/chat
    • Accepts the conversation so far.
    • Lets the AI search products, fetch recommendations, add to the cart
      and read the shopper's preferences through tool calls.
    • Returns the assistant's reply and the tools it used.

GET /health
    • Readiness probe: round-trips a trivial query to the database.

The catalogue, shop and user routers are mounted alongside.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from storefront.api import products, shop, users
from storefront.api.deps import get_optional_user
from storefront.core.config import get_settings
from storefront.database import get_session, ping
from storefront.models import User
from storefront.schemas import ChatRequest, ChatResponse, HealthResponse, ServiceStatus
from storefront.services.assistant import chat

logger = logging.getLogger(__name__)
settings = get_settings()

API_VERSION = "1.0.0"

router = APIRouter()
router.include_router(products.router)
router.include_router(shop.router)
router.include_router(users.router)


@router.post(
    "/assistant/chat",
    response_model=ChatResponse,
    status_code=status.HTTP_200_OK,
    tags=["Assistant"],
    summary="Chat with the shopping assistant",
    description=(
        "Send the conversation so far. The assistant can search the catalogue, "
        "recommend products, add items to the cart and read the shopper's preferences."
    ),
)
async def assistant_chat(
    request: ChatRequest,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_session),
) -> ChatResponse:
    logger.info(
        "assistant_chat: user_id=%s messages=%d",
        user.id if user else None,
        len(request.messages),
    )
    return await chat(db, user, request.messages)


@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Readiness probe",
    responses={500: {"model": HealthResponse}},
)
def health_check(db: Session = Depends(get_session)):
    try:
        ping(db)
    except SQLAlchemyError as exc:
        logger.error("Health check failed: %s", exc)
        unhealthy = HealthResponse(
            status="unhealthy",
            timestamp=datetime.now(timezone.utc),
            services=ServiceStatus(database="disconnected", api="running"),
            version=API_VERSION,
            environment=settings.APP_ENV,
            error=str(exc),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=unhealthy.model_dump(mode="json", by_alias=True),
        )

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        services=ServiceStatus(database="connected", api="running"),
        version=API_VERSION,
        environment=settings.APP_ENV,
    )
