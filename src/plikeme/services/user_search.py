"""Similar-user search.

Filters come from independent *sources*. Set sources (community membership,
disease history, hospitals) each produce a set of candidate user ids; the sets are
intersected. Column filters on ``users`` are AND-ed SQL predicates applied on top.
A search with no filter at all returns nothing rather than every user.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from plikeme.models import User, UserCommunity, UserDiseaseHistory, UserHospital
from plikeme.schemas.search import CommunityFilter, UserSearchFilters
from plikeme.services.membership import memberships_for_users

__all__ = [
    "CommunityFilter",
    "SearchResult",
    "UserSearchFilters",
    "search_users",
    "serialize_user",
]

logger = logging.getLogger(__name__)

# Columns matched exactly against the filter of the same name.
EXACT_FIELDS: tuple[str, ...] = (
    "gender",
    "hukou",
    "education",
    "income_individual",
    "income_family",
    "consumption_level",
    "housing_status",
    "economic_dependency",
    "marriage_status",
    "fertility_status",
)

PUBLIC_USER_FIELDS: tuple[str, ...] = (
    "id",
    "username",
    "gender",
    "age",
    "profession",
    "marriage_status",
    "fertility_status",
    "location_from",
    "location_living",
    "location_living_district",
    "location_living_street",
    "hukou",
    "education",
    "income_individual",
    "income_family",
    "family_size",
    "consumption_level",
    "housing_status",
    "economic_dependency",
    "is_guru",
    "created_at",
)


@dataclass
class SearchResult:
    users: list[dict[str, Any]] = field(default_factory=list)
    total: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {"users": self.users, "total": self.total}


def serialize_user(user: User) -> dict[str, Any]:
    """Public columns of a user row (never the password hash)."""
    return {name: getattr(user, name) for name in PUBLIC_USER_FIELDS}


def _community_user_ids(db: Session, filters: list[CommunityFilter]) -> set[int]:
    """Users matching ANY of the community filters.

    A stage-only filter also matches Level III rows with that stage, and likewise for
    type; a filter with both dimensions matches only the exact Level III row.
    """
    clauses: list[ColumnElement[bool]] = []
    for item in filters:
        clause = UserCommunity.community_id == item.id
        if item.stage:
            clause = clause & (UserCommunity.stage == item.stage)
        if item.type:
            clause = clause & (UserCommunity.type == item.type)
        clauses.append(clause)
    rows = db.query(UserCommunity.user_id).filter(or_(*clauses)).distinct().all()
    return {row.user_id for row in rows}


def _disease_user_ids(db: Session, term: str) -> set[int]:
    rows = (
        db.query(UserDiseaseHistory.user_id)
        .filter(UserDiseaseHistory.disease.contains(term, autoescape=True))
        .distinct()
        .all()
    )
    return {row.user_id for row in rows}


def _hospital_user_ids(db: Session, term: str) -> set[int]:
    rows = (
        db.query(UserHospital.user_id)
        .filter(UserHospital.hospital.contains(term, autoescape=True))
        .distinct()
        .all()
    )
    return {row.user_id for row in rows}


def _column_predicates(filters: UserSearchFilters) -> list[ColumnElement[bool]]:
    predicates: list[ColumnElement[bool]] = []
    for name in EXACT_FIELDS:
        value = getattr(filters, name)
        if value:
            predicates.append(getattr(User, name) == value)
    if filters.age_min is not None:
        predicates.append(User.age >= filters.age_min)
    if filters.age_max is not None:
        predicates.append(User.age <= filters.age_max)
    if filters.location:
        predicates.append(
            or_(
                User.location_from.contains(filters.location, autoescape=True),
                User.location_living.contains(filters.location, autoescape=True),
            )
        )
    if filters.location_district:
        predicates.append(
            User.location_living_district.contains(filters.location_district, autoescape=True)
        )
    if filters.location_street:
        predicates.append(
            User.location_living_street.contains(filters.location_street, autoescape=True)
        )
    if filters.profession:
        predicates.append(User.profession.contains(filters.profession, autoescape=True))
    return predicates


def _enrich(db: Session, users: list[User]) -> list[dict[str, Any]]:
    """Attach communities, disease history and hospitals with one query per table."""
    user_ids = [user.id for user in users]
    if not user_ids:
        return []

    memberships = memberships_for_users(db, user_ids)

    history: dict[int, list[dict[str, Any]]] = {user_id: [] for user_id in user_ids}
    for entry in (
        db.query(UserDiseaseHistory)
        .filter(UserDiseaseHistory.user_id.in_(user_ids))
        .order_by(UserDiseaseHistory.id)
    ):
        history[entry.user_id].append(
            {
                "community_id": entry.community_id,
                "stage": entry.stage or None,
                "type": entry.type or None,
                "disease": entry.disease,
                "onset_date": entry.onset_date,
            }
        )

    hospitals: dict[int, list[str]] = {user_id: [] for user_id in user_ids}
    for row in (
        db.query(UserHospital)
        .filter(UserHospital.user_id.in_(user_ids))
        .order_by(UserHospital.id)
    ):
        hospitals[row.user_id].append(row.hospital)

    enriched = []
    for user in users:
        data = serialize_user(user)
        seen: set[int] = set()
        communities = []
        for membership in memberships[user.id]:
            if membership["id"] in seen:
                continue
            seen.add(membership["id"])
            communities.append({"id": membership["id"], "name": membership["name"]})
        data["communities"] = communities
        data["memberships"] = memberships[user.id]
        data["disease_history"] = history[user.id]
        data["hospitals"] = hospitals[user.id]
        enriched.append(data)
    return enriched


def search_users(
    db: Session,
    filters: UserSearchFilters,
    limit: int = 50,
    offset: int = 0,
) -> SearchResult:
    """Find users matching every supplied filter source.

    Args:
        db: Database session.
        filters: Optional filters; ``exclude_user`` alone does not count as a filter.
        limit: Page size.
        offset: Rows to skip, applied after filtering.

    Returns:
        One page of enriched users and the total number of matches.
    """
    candidate_ids: set[int] | None = None
    has_filter = False

    set_sources: list[set[int]] = []
    if filters.community_filters:
        set_sources.append(_community_user_ids(db, filters.community_filters))
    if filters.disease_tag:
        set_sources.append(_disease_user_ids(db, filters.disease_tag))
    if filters.hospital:
        set_sources.append(_hospital_user_ids(db, filters.hospital))

    for ids in set_sources:
        has_filter = True
        candidate_ids = ids if candidate_ids is None else candidate_ids & ids
        if not candidate_ids:
            logger.debug("user search short-circuited on an empty filter source")
            return SearchResult()

    predicates = _column_predicates(filters)
    if predicates:
        has_filter = True

    if not has_filter:
        return SearchResult()

    query = db.query(User)
    if candidate_ids is not None:
        query = query.filter(User.id.in_(candidate_ids))
    if predicates:
        query = query.filter(*predicates)
    if filters.exclude_user:
        query = query.filter(User.username != filters.exclude_user)

    total = query.count()
    users = (
        query.order_by(User.created_at.desc(), User.id.desc())
        .offset(max(offset, 0))
        .limit(max(limit, 0))
        .all()
    )
    logger.debug(
        "user search: %d set sources, %d predicates, %d total",
        len(set_sources),
        len(predicates),
        total,
    )
    return SearchResult(users=_enrich(db, users), total=total)
