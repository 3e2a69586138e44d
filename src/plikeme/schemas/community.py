# src/plikeme/schemas/community.py
"""Community-related Pydantic schemas."""


from pydantic import BaseModel, Field, field_validator


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class JoinRequest(BaseModel):
    """Body of a join request; omit both fields for the whole community."""

    stage: str | None = Field(None, max_length=100)
    type: str | None = Field(None, max_length=100)

    @field_validator("stage", "type")
    @classmethod
    def strip_values(cls, v: str | None) -> str | None:
        """Treat blank strings as absent."""
        return _blank_to_none(v)
