# src/plikeme/api/v1/endpoints/auth.py
"""Account, session and profile endpoints."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from plikeme.api.v1.dependencies import CurrentUserDep, SessionDep
from plikeme.core import limits
from plikeme.core.security import (
    create_access_token,
    hash_password,
    validate_password,
    verify_password,
)
from plikeme.core.settings import settings
from plikeme.models import User
from plikeme.schemas.common import ok
from plikeme.schemas.search import CommunityFilter, UserSearchFilters
from plikeme.schemas.user import LoginRequest, ProfileUpdateRequest, SignupRequest, UserPublic
from plikeme.services.profile import get_user_profile, update_user_profile
from plikeme.services.user_search import search_users

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

USERNAME_TAKEN = "用户名已被使用"


def _username_taken(db: Session, username: str) -> bool:
    return db.query(User.id).filter(User.username == username).first() is not None


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )


def _session_payload(user: User) -> dict[str, Any]:
    token = create_access_token(user.id, user.username)
    return {"user": UserPublic.model_validate(user).model_dump(), "token": token}


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(payload: SignupRequest, response: Response, db: SessionDep) -> dict[str, Any]:
    """Register an account and start a session."""
    username, password = payload.username, payload.password
    if not username or not password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="用户名和密码不能为空")
    if not limits.USERNAME_MIN <= len(username) <= limits.USERNAME_MAX:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"用户名需要 {limits.USERNAME_MIN}-{limits.USERNAME_MAX} 个字符",
        )
    if _username_taken(db, username):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=USERNAME_TAKEN)

    problems = validate_password(password)
    if problems:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": problems[0], "errors": problems},
        )

    user = User(username=username, password_hash=hash_password(password))
    try:
        db.add(user)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        # Lost a race with a concurrent signup for the same name.
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=USERNAME_TAKEN) from exc
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    logger.info("registered user %s", user.id)

    data = _session_payload(user)
    _set_session_cookie(response, data["token"])
    return ok(data, message="注册成功")


@router.post("/login")
async def login(payload: LoginRequest, response: Response, db: SessionDep) -> dict[str, Any]:
    """Verify credentials and start a session."""
    if not payload.username or not payload.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="用户名和密码不能为空")

    user = db.query(User).filter(User.username == payload.username.strip()).first()
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="用户名或密码错误")

    data = _session_payload(user)
    _set_session_cookie(response, data["token"])
    return ok(data, message="登录成功")


@router.post("/logout")
async def logout(response: Response) -> dict[str, Any]:
    """End the session by clearing the cookie."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )
    return ok(None, message="已退出登录")


@router.get("/me")
async def me(current_user: CurrentUserDep) -> dict[str, Any]:
    return ok(UserPublic.model_validate(current_user).model_dump())


@router.get("/profile")
async def own_profile(current_user: CurrentUserDep, db: SessionDep) -> dict[str, Any]:
    """Full profile of the signed-in user."""
    return ok(get_user_profile(db, current_user.id))


@router.get("/profile/{username}")
async def public_profile(username: str, db: SessionDep) -> dict[str, Any]:
    """Public profile of any user."""
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="用户不存在")
    return ok(get_user_profile(db, user.id))


@router.put("/profile")
async def update_profile(
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> dict[str, Any]:
    """Replace the signed-in user's profile."""
    try:
        profile = update_user_profile(db, current_user.id, payload)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return ok(profile, message="资料更新成功")


def _parse_community_filters(
    community_filters: str | None, communities: str | None
) -> list[CommunityFilter]:
    """Read the JSON ``community_filters`` array, or the legacy comma list of ids."""
    if community_filters:
        try:
            raw = json.loads(community_filters)
        except ValueError as err:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="社区筛选条件格式错误",
            ) from err
        if not isinstance(raw, list):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="社区筛选条件格式错误",
            )
        try:
            return [CommunityFilter.model_validate(item) for item in raw]
        except ValidationError as err:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="社区筛选条件格式错误",
            ) from err

    if communities:
        ids = []
        for part in communities.split(","):
            part = part.strip()
            if part.isdigit():
                ids.append(int(part))
        return [CommunityFilter(id=community_id) for community_id in ids]
    return []


@router.get("/users/search")
async def search(
    db: SessionDep,
    community_filters: str | None = None,
    communities: str | None = None,
    disease_tag: str | None = None,
    hospital: str | None = None,
    gender: str | None = None,
    hukou: str | None = None,
    education: str | None = None,
    income_individual: str | None = None,
    income_family: str | None = None,
    consumption_level: str | None = None,
    housing_status: str | None = None,
    economic_dependency: str | None = None,
    marriage_status: str | None = None,
    fertility_status: str | None = None,
    age_min: str | None = None,
    age_max: str | None = None,
    location: str | None = None,
    location_district: str | None = None,
    location_street: str | None = None,
    profession: str | None = None,
    exclude_user: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> dict[str, Any]:
    """Find similar users; public, no session required."""
    parsed = _parse_community_filters(community_filters, communities)
    try:
        filters = UserSearchFilters(
            community_filters=parsed,
            disease_tag=disease_tag,
            hospital=hospital,
            gender=gender,
            hukou=hukou,
            education=education,
            income_individual=income_individual,
            income_family=income_family,
            consumption_level=consumption_level,
            housing_status=housing_status,
            economic_dependency=economic_dependency,
            marriage_status=marriage_status,
            fertility_status=fertility_status,
            age_min=age_min,
            age_max=age_max,
            location=location,
            location_district=location_district,
            location_street=location_street,
            profession=profession,
            exclude_user=exclude_user,
        )
    except ValidationError as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="搜索条件格式错误",
        ) from err

    limit = min(max(limit, 1), limits.SEARCH_LIMIT_MAX)
    result = search_users(db, filters, limit=limit, offset=max(offset, 0))
    return ok(result.as_dict())
