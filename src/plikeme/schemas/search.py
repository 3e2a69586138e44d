"""Schemas for the similar-user search."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

_STRING_FILTERS = (
    "disease_tag",
    "hospital",
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
    "location",
    "location_district",
    "location_street",
    "profession",
    "exclude_user",
)


class CommunityFilter(BaseModel):
    """Match members of a community, optionally narrowed to a sub-community."""

    id: int
    stage: str = ""
    type: str = ""

    @field_validator("stage", "type", mode="before")
    @classmethod
    def normalise(cls, v: Any) -> str:
        """Store absent dimensions as empty strings."""
        if v is None:
            return ""
        return str(v).strip()


class UserSearchFilters(BaseModel):
    """Every optional filter accepted by the user search."""

    community_filters: list[CommunityFilter] = Field(default_factory=list)
    disease_tag: str | None = None
    hospital: str | None = None

    gender: str | None = None
    hukou: str | None = None
    education: str | None = None
    income_individual: str | None = None
    income_family: str | None = None
    consumption_level: str | None = None
    housing_status: str | None = None
    economic_dependency: str | None = None
    marriage_status: str | None = None
    fertility_status: str | None = None

    age_min: int | None = None
    age_max: int | None = None

    location: str | None = None
    location_district: str | None = None
    location_street: str | None = None
    profession: str | None = None

    exclude_user: str | None = None

    @field_validator(*_STRING_FILTERS, mode="before")
    @classmethod
    def blank_is_absent(cls, v: Any) -> Any:
        """Trim filter values; blanks do not filter."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("age_min", "age_max", mode="before")
    @classmethod
    def blank_age(cls, v: Any) -> Any:
        """Blank age bounds are absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v
