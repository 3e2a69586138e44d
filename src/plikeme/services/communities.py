"""Community catalogue lookups and dimension handling."""
from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from plikeme.models import Community

__all__ = [
    "DIMENSION_KEYS",
    "dimension_values",
    "get_community",
    "list_communities",
    "parse_dimensions",
    "search_communities",
    "serialize_community",
    "validate_dimension_values",
]

logger = logging.getLogger(__name__)

DIMENSION_KEYS: tuple[str, str] = ("stage", "type")


def parse_dimensions(raw: Any) -> dict[str, Any] | None:
    """Return the dimension mapping, or None when absent or malformed.

    Accepts the decoded mapping or its JSON text.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("ignoring malformed community dimensions: %r", raw[:80])
            return None
    if not isinstance(raw, dict):
        return None
    return raw


def dimension_values(dimensions: dict[str, Any] | None, key: str) -> list[str]:
    """Allowed values of one dimension (empty when the dimension is not declared)."""
    if not dimensions:
        return []
    spec = dimensions.get(key)
    if not isinstance(spec, dict):
        return []
    values = spec.get("values")
    if not isinstance(values, list):
        return []
    return [str(value) for value in values]


def serialize_community(community: Community, hint: str | None = None) -> dict[str, Any]:
    data = {
        "id": community.id,
        "name": community.name,
        "description": community.description,
        "keywords": community.keywords,
        "member_count": community.member_count,
        "dimensions": parse_dimensions(community.dimensions),
        "created_at": community.created_at,
    }
    if hint:
        data["sub_community_hint"] = hint
    return data


def list_communities(db: Session) -> list[Community]:
    return db.query(Community).order_by(Community.id).all()


def get_community(db: Session, community_id: int) -> Community | None:
    return db.get(Community, community_id)


def _dimension_hint(community: Community, term: str) -> str | None:
    dimensions = parse_dimensions(community.dimensions)
    matched = [
        value
        for key in DIMENSION_KEYS
        for value in dimension_values(dimensions, key)
        if term in value.lower()
    ]
    return ", ".join(matched) if matched else None


def search_communities(db: Session, q: str) -> list[dict[str, Any]]:
    """Search by name, description and keywords, then by dimension values.

    Direct matches come first ordered by member count; communities that only match
    through one of their stage/type values are appended. Every result whose
    dimension values contain the term carries ``sub_community_hint``.
    """
    term = q.strip()
    if not term:
        return [serialize_community(c) for c in list_communities(db)]
    lowered = term.lower()

    direct = (
        db.query(Community)
        .filter(
            or_(
                Community.name.contains(term, autoescape=True),
                Community.description.contains(term, autoescape=True),
                Community.keywords.contains(term, autoescape=True),
            )
        )
        .order_by(Community.member_count.desc(), Community.id)
        .all()
    )
    results = [serialize_community(c, _dimension_hint(c, lowered)) for c in direct]

    seen = {c.id for c in direct}
    for community in list_communities(db):
        if community.id in seen:
            continue
        hint = _dimension_hint(community, lowered)
        if hint:
            results.append(serialize_community(community, hint))
    return results


def validate_dimension_values(
    community: Community, stage: str | None, type_: str | None
) -> str | None:
    """Return an error message when a value is not one the community declares.

    Communities that declare no dimensions are not checked; otherwise each value
    must be one listed for its dimension.
    """
    dimensions = parse_dimensions(community.dimensions)
    if not dimensions:
        return None
    for key, value in (("stage", stage), ("type", type_)):
        if not value:
            continue
        allowed = dimension_values(dimensions, key)
        if not allowed:
            return "该社区没有此细分维度"
        if value not in allowed:
            return "无效的细分社区"
    return None
