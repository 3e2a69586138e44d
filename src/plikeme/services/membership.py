"""Hierarchical community membership and its denormalized counters.

Memberships live in ``user_communities`` as ``(user_id, community_id, stage, type)``
rows where an empty ``stage``/``type`` means "not narrowed by that dimension":

* Level I   ``('', '')``        the whole community
* Level II  ``(stage, '')`` or ``('', type)``
* Level III ``(stage, type)``

Joining a deeper level also joins every level above it, leaving a level removes
every deeper level beneath it. ``communities.member_count`` counts Level I rows and
``sub_community_members.member_count`` counts Level II/III rows; both are adjusted in
the same transaction as the membership rows they describe.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import case, func, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from plikeme.models import Community, SubCommunityMember, UserCommunity

__all__ = [
    "JoinResult",
    "classify_level",
    "display_path",
    "get_sub_community_member_counts",
    "get_user_communities",
    "get_user_community_ids",
    "get_user_memberships",
    "get_user_sub_communities",
    "is_user_in_community",
    "memberships_for_users",
    "join_community",
    "leave_community",
    "reconcile_member_counts",
]

logger = logging.getLogger(__name__)

LEVEL_COMMUNITY = 1
LEVEL_SINGLE_DIMENSION = 2
LEVEL_BOTH_DIMENSIONS = 3


def _normalise(value: str | None) -> str:
    return (value or "").strip()


def classify_level(stage: str | None = None, type_: str | None = None) -> int:
    """Return 1, 2 or 3 for the membership level a (stage, type) pair addresses."""
    stage_value, type_value = _normalise(stage), _normalise(type_)
    if stage_value and type_value:
        return LEVEL_BOTH_DIMENSIONS
    if stage_value or type_value:
        return LEVEL_SINGLE_DIMENSION
    return LEVEL_COMMUNITY


def display_path(name: str, stage: str | None, type_: str | None) -> str:
    """Render ``"name > stage · type"``, omitting absent dimensions."""
    parts = [part for part in (stage, type_) if part]
    if not parts:
        return name
    return f"{name} > {' · '.join(parts)}"


@dataclass(frozen=True)
class JoinResult:
    """Outcome of :func:`join_community`.

    ``created`` lists the ``(stage, type)`` rows that were actually inserted, in
    insertion order. ``legacy_joined`` reproduces the historical boolean: for a
    Level I request it is true whether or not the membership already existed.
    """

    level: int
    requested: tuple[str, str]
    created: list[tuple[str, str]] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.created)

    @property
    def joined(self) -> bool:
        """True when the requested row itself was newly inserted."""
        return self.requested in self.created

    @property
    def legacy_joined(self) -> bool:
        if self.level == LEVEL_COMMUNITY:
            return True
        return self.joined


def _insert_membership(
    db: Session, user_id: int, community_id: int, stage: str, type_: str
) -> bool:
    """INSERT OR IGNORE one membership row; return True when a row was added."""
    stmt = (
        sqlite_insert(UserCommunity.__table__)
        .values(user_id=user_id, community_id=community_id, stage=stage, type=type_)
        .on_conflict_do_nothing(index_elements=["user_id", "community_id", "stage", "type"])
    )
    result = db.execute(stmt)
    return bool(result.rowcount)


def _increment_sub_count(db: Session, community_id: int, stage: str, type_: str) -> None:
    members = SubCommunityMember.__table__
    stmt = sqlite_insert(members).values(
        community_id=community_id, stage=stage, type=type_, member_count=1
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["community_id", "stage", "type"],
        set_={"member_count": members.c.member_count + 1},
    )
    db.execute(stmt)


def _decrement_sub_count(db: Session, community_id: int, stage: str, type_: str) -> None:
    db.execute(
        update(SubCommunityMember)
        .where(
            SubCommunityMember.community_id == community_id,
            SubCommunityMember.stage == stage,
            SubCommunityMember.type == type_,
        )
        .values(
            member_count=case(
                (SubCommunityMember.member_count > 0, SubCommunityMember.member_count - 1),
                else_=0,
            )
        )
    )


def _adjust_community_count(db: Session, community_id: int, delta: int) -> None:
    new_value = Community.member_count + delta
    db.execute(
        update(Community)
        .where(Community.id == community_id)
        .values(member_count=case((new_value > 0, new_value), else_=0))
    )


def join_community(
    db: Session,
    user_id: int,
    community_id: int,
    stage: str | None = None,
    type_: str | None = None,
) -> JoinResult:
    """Join a community at the level addressed by ``stage``/``type_``.

    Every level above the requested one is joined as well; levels already held
    are left untouched. Counters are incremented only for newly inserted rows.
    """
    stage_value, type_value = _normalise(stage), _normalise(type_)
    level = classify_level(stage_value, type_value)
    result = JoinResult(level=level, requested=(stage_value, type_value))

    try:
        if _insert_membership(db, user_id, community_id, "", ""):
            result.created.append(("", ""))
            _adjust_community_count(db, community_id, 1)

        if level == LEVEL_BOTH_DIMENSIONS:
            for parent in ((stage_value, ""), ("", type_value)):
                if _insert_membership(db, user_id, community_id, *parent):
                    result.created.append(parent)
                    _increment_sub_count(db, community_id, *parent)

        if level != LEVEL_COMMUNITY:
            if _insert_membership(db, user_id, community_id, stage_value, type_value):
                result.created.append((stage_value, type_value))
                _increment_sub_count(db, community_id, stage_value, type_value)

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "user %s joined community %s level %s: %d new rows",
        user_id,
        community_id,
        level,
        len(result.created),
    )
    return result


def _delete_memberships(db: Session, rows: list[UserCommunity]) -> None:
    for row in rows:
        db.delete(row)
    db.flush()


def leave_community(
    db: Session,
    user_id: int,
    community_id: int,
    stage: str | None = None,
    type_: str | None = None,
) -> bool:
    """Leave the addressed level and everything beneath it.

    Returns True iff the targeted membership row itself existed and was removed.
    """
    stage_value, type_value = _normalise(stage), _normalise(type_)
    level = classify_level(stage_value, type_value)

    base = db.query(UserCommunity).filter(
        UserCommunity.user_id == user_id,
        UserCommunity.community_id == community_id,
    )

    try:
        if level == LEVEL_COMMUNITY:
            rows = base.all()
            removed_target = False
            for row in rows:
                if row.stage or row.type:
                    _decrement_sub_count(db, community_id, row.stage, row.type)
                else:
                    removed_target = True
            _delete_memberships(db, rows)
            if removed_target:
                _adjust_community_count(db, community_id, -1)
        else:
            if level == LEVEL_SINGLE_DIMENSION:
                if stage_value:
                    dependents = base.filter(
                        UserCommunity.stage == stage_value, UserCommunity.type != ""
                    ).all()
                else:
                    dependents = base.filter(
                        UserCommunity.type == type_value, UserCommunity.stage != ""
                    ).all()
                for row in dependents:
                    _decrement_sub_count(db, community_id, row.stage, row.type)
                _delete_memberships(db, dependents)

            target = base.filter(
                UserCommunity.stage == stage_value, UserCommunity.type == type_value
            ).first()
            removed_target = target is not None
            if target is not None:
                _decrement_sub_count(db, community_id, stage_value, type_value)
                _delete_memberships(db, [target])

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "user %s left community %s level %s (removed=%s)",
        user_id,
        community_id,
        level,
        removed_target,
    )
    return removed_target


def is_user_in_community(
    db: Session,
    user_id: int,
    community_id: int,
    stage: str | None = None,
    type_: str | None = None,
) -> bool:
    """Check for the exact membership row addressed by ``stage``/``type_``."""
    return (
        db.query(UserCommunity.id)
        .filter(
            UserCommunity.user_id == user_id,
            UserCommunity.community_id == community_id,
            UserCommunity.stage == _normalise(stage),
            UserCommunity.type == _normalise(type_),
        )
        .first()
        is not None
    )


def get_user_community_ids(db: Session, user_id: int) -> list[int]:
    """Distinct ids of communities the user belongs to at any level."""
    rows = (
        db.query(UserCommunity.community_id)
        .filter(UserCommunity.user_id == user_id)
        .distinct()
        .order_by(UserCommunity.community_id)
        .all()
    )
    return [row.community_id for row in rows]


def get_user_communities(db: Session, user_id: int) -> list[Community]:
    ids = get_user_community_ids(db, user_id)
    if not ids:
        return []
    return db.query(Community).filter(Community.id.in_(ids)).order_by(Community.id).all()


def get_user_sub_communities(db: Session, user_id: int, community_id: int) -> list[dict[str, Any]]:
    """Level II/III memberships of the user in one community."""
    rows = (
        db.query(UserCommunity)
        .filter(
            UserCommunity.user_id == user_id,
            UserCommunity.community_id == community_id,
            (UserCommunity.stage != "") | (UserCommunity.type != ""),
        )
        .order_by(UserCommunity.id)
        .all()
    )
    return [{"stage": row.stage or None, "type": row.type or None} for row in rows]


def memberships_for_users(db: Session, user_ids: list[int]) -> dict[int, list[dict[str, Any]]]:
    """Every membership of each user with community name and display path.

    Two queries regardless of how many users are requested.
    """
    if not user_ids:
        return {}
    rows = (
        db.query(UserCommunity)
        .filter(UserCommunity.user_id.in_(user_ids))
        .order_by(UserCommunity.id)
        .all()
    )
    community_ids = {row.community_id for row in rows}
    names: dict[int, str] = {}
    if community_ids:
        names = {
            c.id: c.name
            for c in db.query(Community.id, Community.name).filter(Community.id.in_(community_ids))
        }

    result: dict[int, list[dict[str, Any]]] = {user_id: [] for user_id in user_ids}
    for row in rows:
        name = names.get(row.community_id)
        if name is None:
            continue
        stage, type_ = row.stage or None, row.type or None
        result[row.user_id].append(
            {
                "id": row.community_id,
                "name": name,
                "stage": stage,
                "type": type_,
                "display_path": display_path(name, stage, type_),
            }
        )
    return result


def get_user_memberships(db: Session, user_id: int) -> list[dict[str, Any]]:
    """Every membership of one user, each with its display path."""
    return memberships_for_users(db, [user_id])[user_id]


def get_sub_community_member_counts(db: Session, community_id: int) -> list[dict[str, Any]]:
    rows = (
        db.query(SubCommunityMember)
        .filter(SubCommunityMember.community_id == community_id)
        .order_by(SubCommunityMember.id)
        .all()
    )
    return [
        {"stage": row.stage or None, "type": row.type or None, "member_count": row.member_count}
        for row in rows
    ]


def reconcile_member_counts(db: Session, community_id: int | None = None) -> int:
    """Recompute every denormalized counter from the membership rows.

    Args:
        db: Database session.
        community_id: Restrict the repair to one community.

    Returns:
        Number of counter rows whose stored value was corrected or created.
    """
    level_one = (
        db.query(UserCommunity.community_id, func.count(UserCommunity.id))
        .filter(UserCommunity.stage == "", UserCommunity.type == "")
        .group_by(UserCommunity.community_id)
    )
    sub_levels = (
        db.query(
            UserCommunity.community_id,
            UserCommunity.stage,
            UserCommunity.type,
            func.count(UserCommunity.id),
        )
        .filter((UserCommunity.stage != "") | (UserCommunity.type != ""))
        .group_by(UserCommunity.community_id, UserCommunity.stage, UserCommunity.type)
    )
    communities = db.query(Community)
    counters = db.query(SubCommunityMember)
    if community_id is not None:
        level_one = level_one.filter(UserCommunity.community_id == community_id)
        sub_levels = sub_levels.filter(UserCommunity.community_id == community_id)
        communities = communities.filter(Community.id == community_id)
        counters = counters.filter(SubCommunityMember.community_id == community_id)

    actual_main = {cid: count for cid, count in level_one.all()}
    actual_sub = {(cid, stage, type_): count for cid, stage, type_, count in sub_levels.all()}

    corrected = 0
    try:
        for community in communities.all():
            expected = actual_main.get(community.id, 0)
            if community.member_count != expected:
                logger.warning(
                    "community %s member_count %s -> %s",
                    community.id,
                    community.member_count,
                    expected,
                )
                community.member_count = expected
                corrected += 1

        existing: set[tuple[int, str, str]] = set()
        for counter in counters.all():
            key = (counter.community_id, counter.stage, counter.type)
            existing.add(key)
            expected = actual_sub.get(key, 0)
            if counter.member_count != expected:
                logger.warning(
                    "sub-community %s member_count %s -> %s", key, counter.member_count, expected
                )
                counter.member_count = expected
                corrected += 1

        for key, count in actual_sub.items():
            if key in existing:
                continue
            cid, stage, type_ = key
            db.add(SubCommunityMember(community_id=cid, stage=stage, type=type_, member_count=count))
            corrected += 1

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("reconciled member counts: %d corrections", corrected)
    return corrected
