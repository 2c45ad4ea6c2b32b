"""
storefront/services/accounts.py
───────────────────────────────
Signup / login, onboarding, and profile reads & updates.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from storefront.core.exceptions import (
    EmailAlreadyRegisteredError,
    PersonaNotFoundError,
    UnauthorizedError,
    UserNotFoundError,
)
from storefront.core.security import create_access_token, hash_password, verify_password
from storefront.models import Persona, User, UserPreference, UserProfile
from storefront.schemas import (
    OnboardingRequest,
    PersonaRead,
    PreferenceRead,
    ProfileRead,
    ProfileUpdateRequest,
    UserDetail,
)
from storefront.services import activity

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _profile_of(db: Session, user_id: str) -> Optional[UserProfile]:
    return db.exec(select(UserProfile).where(UserProfile.user_id == user_id)).first()


def _preferences_of(db: Session, user_id: str) -> Optional[UserPreference]:
    return db.exec(select(UserPreference).where(UserPreference.user_id == user_id)).first()


def signup(db: Session, email: str, password: str, name: Optional[str] = None) -> Tuple[User, str]:
    """
    Create the user together with an empty profile and preference row,
    and log a "user_created" entry. Returns (user, access token).
    """
    if db.exec(select(User).where(User.email == email)).first() is not None:
        raise EmailAlreadyRegisteredError(email)

    user = User(email=email, name=name, password_hash=hash_password(password))
    db.add(user)
    try:
        # a concurrent signup with the same email fails at this flush
        db.flush()
        db.add(UserProfile(user_id=user.id, onboarding_completed=False))
        db.add(UserPreference(user_id=user.id, category_interests=[], brand_preferences=[]))
        activity.record(db, user.id, "user_created", metadata={"source": "signup"}, commit=False)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise EmailAlreadyRegisteredError(email) from exc
    db.refresh(user)

    logger.info("User created: id=%s", user.id)
    return user, create_access_token(user.id)


def login(db: Session, email: str, password: str) -> Tuple[User, str]:
    user = db.exec(select(User).where(User.email == email)).first()
    if user is None or not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid email or password")
    return user, create_access_token(user.id)


def complete_onboarding(db: Session, data: OnboardingRequest) -> None:
    """Apply the onboarding wizard answers to the user, profile and preferences in one commit."""
    user = db.get(User, data.user_id)
    if user is None:
        raise UserNotFoundError(data.user_id)

    profile = _profile_of(db, user.id) or UserProfile(user_id=user.id)
    profile.interests = list(data.interests)
    profile.onboarding_completed = True
    profile.updated_at = _utcnow()
    db.add(profile)

    preferences = _preferences_of(db, user.id) or UserPreference(user_id=user.id)
    preferences.category_interests = list(data.preferred_categories)
    preferences.price_range_min = data.price_range.min
    preferences.price_range_max = data.price_range.max
    preferences.shopping_habits = {
        "frequency": data.shopping_frequency,
        "interests": list(data.interests),
    }
    preferences.updated_at = _utcnow()
    db.add(preferences)

    user.language_preference = data.language_preference
    user.accessibility_needs = list(data.accessibility_needs)
    user.updated_at = _utcnow()
    db.add(user)

    activity.record(
        db,
        user.id,
        "onboarding_completed",
        metadata={
            "interests": data.interests,
            "accessibilityNeeds": data.accessibility_needs,
            "languagePreference": data.language_preference,
            "preferredCategories": data.preferred_categories,
        },
        commit=False,
    )
    db.commit()
    logger.info("Onboarding completed: user_id=%s", user.id)


def user_detail(db: Session, user: User) -> UserDetail:
    profile = _profile_of(db, user.id)
    preferences = _preferences_of(db, user.id)
    persona = db.get(Persona, user.persona_id) if user.persona_id else None

    return UserDetail.model_validate(user).model_copy(
        update={
            "profile": ProfileRead.model_validate(profile) if profile else None,
            "preferences": PreferenceRead.model_validate(preferences) if preferences else None,
            "persona": PersonaRead.model_validate(persona) if persona else None,
        }
    )


def update_profile(db: Session, user: User, data: ProfileUpdateRequest) -> None:
    """
    Apply whichever of the user / profile / preferences sections were sent.
    Profile and preference rows are created if missing.
    """
    if data.user is not None:
        changes = data.user.model_dump(exclude_unset=True)
        persona_id = changes.get("persona_id")
        if persona_id and db.get(Persona, persona_id) is None:
            raise PersonaNotFoundError(persona_id)
        for field, value in changes.items():
            # null clears the persona; for the other columns it means "unchanged"
            if value is None and field != "persona_id":
                continue
            setattr(user, field, value)
        user.updated_at = _utcnow()
        db.add(user)

    if data.profile is not None:
        profile = _profile_of(db, user.id) or UserProfile(user_id=user.id)
        for field, value in data.profile.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(profile, field, value)
        profile.updated_at = _utcnow()
        db.add(profile)

    if data.preferences is not None:
        preferences = _preferences_of(db, user.id) or UserPreference(user_id=user.id)
        for field, value in data.preferences.model_dump(exclude_unset=True).items():
            if value is None and field not in ("price_range_min", "price_range_max"):
                continue
            setattr(preferences, field, value)
        preferences.updated_at = _utcnow()
        db.add(preferences)

    updated = [s for s in ("user", "profile", "preferences") if s in data.model_fields_set]
    activity.record(db, user.id, "profile_updated", metadata={"updatedFields": updated}, commit=False)
    db.commit()
    logger.info("Profile updated: user_id=%s fields=%s", user.id, updated)


def resolve_persona(db: Session, user: User) -> PersonaRead:
    """
    The persona the client should render for this shopper: the assigned
    catalogue persona if there is one, otherwise one derived from the
    shopper's own preferences and accessibility needs.
    """
    if user.persona_id:
        persona = db.get(Persona, user.persona_id)
        if persona is not None:
            return PersonaRead.model_validate(persona)

    preferences = _preferences_of(db, user.id)
    needs = list(user.accessibility_needs or [])
    ui = {
        "theme": "high-contrast" if "High Contrast" in needs else "light",
        "fontSize": "large" if "Large Fonts" in needs else "medium",
        "reducedMotion": "Reduced Motion" in needs,
    }
    habits = preferences.shopping_habits if preferences else {}

    return PersonaRead(
        id=user.id,
        name=user.name or "User",
        description="Derived from your profile",
        preferences={
            "categories": preferences.category_interests if preferences else [],
            "brands": preferences.brand_preferences if preferences else [],
            "priceRange": {
                "min": (preferences.price_range_min if preferences else None) or 0,
                "max": (preferences.price_range_max if preferences else None) or 1000,
            },
            "accessibilityNeeds": needs,
            "languagePreference": user.language_preference or "en",
        },
        accessibility_settings=dict(ui),
        shopping_behavior={
            "frequency": habits.get("frequency") or "monthly",
            "avgOrderValue": user.total_spent,
            "loyaltyTier": user.loyalty_tier or "bronze",
        },
        ui_settings=ui,
    )
