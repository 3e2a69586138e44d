"""Reading and replacing user profiles."""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from plikeme.models import Community, User, UserDiseaseHistory, UserHospital
from plikeme.models.user import PROFILE_FIELDS
from plikeme.schemas.user import ProfileUpdateRequest
from plikeme.services.membership import get_user_memberships
from plikeme.services.user_search import serialize_user

__all__ = ["get_disease_history", "get_user_profile", "update_user_profile"]

logger = logging.getLogger(__name__)


def get_disease_history(db: Session, user_id: int) -> list[dict[str, Any]]:
    rows = (
        db.query(UserDiseaseHistory)
        .filter(UserDiseaseHistory.user_id == user_id)
        .order_by(UserDiseaseHistory.id)
        .all()
    )
    return [
        {
            "community_id": row.community_id,
            "stage": row.stage or None,
            "type": row.type or None,
            "disease": row.disease,
            "onset_date": row.onset_date,
        }
        for row in rows
    ]


def get_user_profile(db: Session, user_id: int) -> dict[str, Any] | None:
    """Public profile of a user, or None when the user does not exist."""
    user = db.get(User, user_id)
    if user is None:
        return None

    profile = serialize_user(user)
    profile["guru_intro"] = user.guru_intro
    profile["disease_history"] = get_disease_history(db, user_id)
    profile["hospitals"] = [
        row.hospital
        for row in db.query(UserHospital)
        .filter(UserHospital.user_id == user_id)
        .order_by(UserHospital.id)
    ]
    profile["communities"] = get_user_memberships(db, user_id)
    return profile


def update_user_profile(db: Session, user_id: int, update: ProfileUpdateRequest) -> dict[str, Any]:
    """Replace every profile field, the disease history and the hospital list.

    Raises:
        LookupError: If the user does not exist.
        ValueError: If a disease entry references an unknown community.
    """
    user = db.get(User, user_id)
    if user is None:
        raise LookupError(f"user {user_id} not found")

    entries = update.effective_disease_history()
    linked = {entry.community_id for entry in entries if entry.community_id is not None}
    if linked:
        known = {row.id for row in db.query(Community.id).filter(Community.id.in_(linked))}
        if linked - known:
            raise ValueError("疾病史中的社区不存在")

    try:
        for name in PROFILE_FIELDS:
            setattr(user, name, getattr(update, name))

        db.query(UserDiseaseHistory).filter(UserDiseaseHistory.user_id == user_id).delete(
            synchronize_session=False
        )
        for entry in entries:
            db.add(
                UserDiseaseHistory(
                    user_id=user_id,
                    community_id=entry.community_id,
                    stage=entry.stage or "",
                    type=entry.type or "",
                    disease=entry.disease,
                    onset_date=entry.onset_date,
                )
            )

        db.query(UserHospital).filter(UserHospital.user_id == user_id).delete(
            synchronize_session=False
        )
        seen: set[str] = set()
        for hospital in update.hospitals or []:
            name = hospital.strip()
            if not name or name in seen:
                continue
            seen.add(name)
            db.add(UserHospital(user_id=user_id, hospital=name))

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("profile updated for user %s", user_id)
    return get_user_profile(db, user_id) or {}
