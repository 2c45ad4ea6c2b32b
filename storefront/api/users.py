"""
storefront/api/users.py
───────────────────────
Accounts, onboarding, profile, activity log and persona endpoints.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, col, select

from storefront.api.deps import get_current_user
from storefront.core.exceptions import ForbiddenError, PersonaNotFoundError
from storefront.database import get_session
from storefront.models import Persona, User
from storefront.schemas import (
    ActivityCreate,
    ActivityCreateResponse,
    ActivityListResponse,
    LoginRequest,
    OnboardingRequest,
    PersonaListResponse,
    PersonaRead,
    ProfileUpdateRequest,
    SignupRequest,
    SuccessResponse,
    TokenResponse,
    UserDetailResponse,
    UserRead,
)
from storefront.services import accounts, activity

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Auth ─────────────────────────────────────────────────────────────────────

@router.post(
    "/auth/signup",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Auth"],
    summary="Create an account",
)
def signup(data: SignupRequest, db: Session = Depends(get_session)) -> TokenResponse:
    user, token = accounts.signup(db, data.email, data.password, data.name)
    return TokenResponse(access_token=token, user=UserRead.model_validate(user))


@router.post("/auth/login", response_model=TokenResponse, tags=["Auth"], summary="Sign in")
def login(data: LoginRequest, db: Session = Depends(get_session)) -> TokenResponse:
    user, token = accounts.login(db, data.email.lower(), data.password)
    logger.info("login: user_id=%s", user.id)
    return TokenResponse(access_token=token, user=UserRead.model_validate(user))


@router.get("/auth/me", response_model=UserRead, tags=["Auth"], summary="Current user")
def me(user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(user)


# ── Onboarding & profile ─────────────────────────────────────────────────────

@router.post(
    "/user/onboarding",
    response_model=SuccessResponse,
    tags=["User"],
    summary="Save onboarding answers",
)
def onboarding(
    data: OnboardingRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> SuccessResponse:
    if data.user_id != user.id:
        raise ForbiddenError("Onboarding can only be completed for your own account")
    accounts.complete_onboarding(db, data)
    return SuccessResponse()


@router.get("/user/profile", response_model=UserDetailResponse, tags=["User"], summary="Profile")
def get_profile(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> UserDetailResponse:
    return UserDetailResponse(user=accounts.user_detail(db, user))


@router.put("/user/profile", response_model=SuccessResponse, tags=["User"], summary="Update profile")
def update_profile(
    data: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> SuccessResponse:
    accounts.update_profile(db, user, data)
    return SuccessResponse()


# ── Activity ─────────────────────────────────────────────────────────────────

@router.post(
    "/user/activity",
    response_model=ActivityCreateResponse,
    tags=["Activity"],
    summary="Record an activity",
)
def log_activity(
    data: ActivityCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> ActivityCreateResponse:
    entry = activity.record(
        db,
        user.id,
        data.action_type,
        product_id=data.product_id or None,
        metadata=data.metadata,
    )
    return ActivityCreateResponse(activity_log=activity.to_read(entry))


@router.get("/user/activity", response_model=ActivityListResponse, tags=["Activity"], summary="Activity history")
def list_activity(
    action_type: Optional[str] = Query(default=None, alias="actionType"),
    limit: int = Query(default=50, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> ActivityListResponse:
    return ActivityListResponse(activities=activity.list_for_user(db, user.id, action_type, limit))


# ── Personas ─────────────────────────────────────────────────────────────────

@router.get("/personas", response_model=PersonaListResponse, tags=["Personas"], summary="All personas")
def list_personas(db: Session = Depends(get_session)) -> PersonaListResponse:
    personas = db.exec(select(Persona).order_by(col(Persona.name))).all()
    return PersonaListResponse(personas=[PersonaRead.model_validate(p) for p in personas])


@router.get("/personas/{persona_id}", response_model=PersonaRead, tags=["Personas"], summary="One persona")
def get_persona(persona_id: str, db: Session = Depends(get_session)) -> PersonaRead:
    persona = db.get(Persona, persona_id)
    if persona is None:
        raise PersonaNotFoundError(persona_id)
    return PersonaRead.model_validate(persona)


@router.get(
    "/user/persona",
    response_model=PersonaRead,
    tags=["Personas"],
    summary="Persona for the current shopper",
    description="The assigned persona, or one derived from the shopper's preferences.",
)
def current_persona(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> PersonaRead:
    return accounts.resolve_persona(db, user)
