"""User-related Pydantic schemas."""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from plikeme.core import limits

ONSET_DATE_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class SignupRequest(BaseModel):
    """Schema for account registration."""

    username: str = Field("", description="2-20 characters, unique")
    password: str = Field("", description="Must satisfy the password rules")

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        """Ignore surrounding whitespace."""
        return v.strip()


class LoginRequest(BaseModel):
    """Schema for login submissions."""

    username: str = ""
    password: str = ""


class UserPublic(BaseModel):
    """Minimal account view returned by auth endpoints."""

    id: int
    username: str
    is_guru: bool = False
    created_at: Any = None

    model_config = ConfigDict(from_attributes=True)


class DiseaseHistoryEntry(BaseModel):
    """One condition on a profile, linked to a (sub-)community or free text."""

    community_id: int | None = None
    stage: str | None = None
    type: str | None = None
    disease: str = Field(..., description="Condition name shown on the profile")
    onset_date: str | None = Field(None, description="Onset month as YYYY-MM")

    @field_validator("stage", "type", mode="before")
    @classmethod
    def blank_dimension(cls, v: Any) -> Any:
        """Normalise blank dimension values to None."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("disease")
    @classmethod
    def validate_disease(cls, v: str) -> str:
        """Require a non-blank disease name within the length limit."""
        v = v.strip()
        if not v:
            raise ValueError("疾病名称不能为空")
        if len(v) > limits.DISEASE_TEXT_MAX:
            raise ValueError(f"疾病名称不能超过{limits.DISEASE_TEXT_MAX}个字符")
        return v

    @field_validator("onset_date", mode="before")
    @classmethod
    def validate_onset_date(cls, v: Any) -> Any:
        """Accept YYYY-MM with a real month; blank means unknown."""
        if v is None:
            return None
        v = str(v).strip()
        if not v:
            return None
        if not ONSET_DATE_PATTERN.match(v):
            raise ValueError("发病时间格式应为 YYYY-MM")
        return v


_TEXT_FIELDS = (
    "gender",
    "profession",
    "marriage_status",
    "fertility_status",
    "location_from",
    "location_living",
    "location_living_district",
    "location_living_street",
    "income_individual",
    "income_family",
    "hukou",
    "education",
    "consumption_level",
    "housing_status",
    "economic_dependency",
)


class ProfileUpdateRequest(BaseModel):
    """Wholesale replacement of a user's profile.

    Fields left out are cleared. ``disease_tags`` is the older free-text form and is
    only used when ``disease_history`` is absent.
    """

    gender: str | None = None
    age: int | None = None
    profession: str | None = None
    marriage_status: str | None = None
    fertility_status: str | None = None
    location_from: str | None = None
    location_living: str | None = None
    location_living_district: str | None = None
    location_living_street: str | None = None
    income_individual: str | None = None
    income_family: str | None = None
    family_size: int | None = None
    hukou: str | None = None
    education: str | None = None
    consumption_level: str | None = None
    housing_status: str | None = None
    economic_dependency: str | None = None

    disease_history: list[DiseaseHistoryEntry] | None = None
    disease_tags: list[str] | None = None
    hospitals: list[str] | None = None

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def validate_text(cls, v: Any) -> Any:
        """Trim text fields, clear blanks and enforce the field length limit."""
        if v is None:
            return None
        v = str(v).strip()
        if not v:
            return None
        if len(v) > limits.PROFILE_FIELD_MAX:
            raise ValueError(f"资料字段不能超过{limits.PROFILE_FIELD_MAX}个字符")
        return v

    @field_validator("age", mode="before")
    @classmethod
    def validate_age(cls, v: Any) -> Any:
        """Age must be an integer between 0 and the upper bound."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        try:
            age = int(v)
        except (TypeError, ValueError) as err:
            raise ValueError("请输入有效的年龄") from err
        if age < 0 or age > limits.AGE_MAX:
            raise ValueError("请输入有效的年龄")
        return age

    @field_validator("family_size", mode="before")
    @classmethod
    def validate_family_size(cls, v: Any) -> Any:
        """Family size is a non-negative integer."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        try:
            size = int(v)
        except (TypeError, ValueError) as err:
            raise ValueError("请输入有效的家庭人数") from err
        if size < 0:
            raise ValueError("请输入有效的家庭人数")
        return size

    @field_validator("disease_history")
    @classmethod
    def limit_disease_history(
        cls, v: list[DiseaseHistoryEntry] | None
    ) -> list[DiseaseHistoryEntry] | None:
        """Cap the number of disease history entries."""
        if v is not None and len(v) > limits.MAX_DISEASE_ENTRIES:
            raise ValueError(f"疾病史最多{limits.MAX_DISEASE_ENTRIES}条")
        return v

    @field_validator("disease_tags")
    @classmethod
    def limit_disease_tags(cls, v: list[str] | None) -> list[str] | None:
        """Apply the disease limits to the free-text form as well."""
        if v is None:
            return None
        if len(v) > limits.MAX_DISEASE_ENTRIES:
            raise ValueError(f"疾病史最多{limits.MAX_DISEASE_ENTRIES}条")
        for tag in v:
            if len(tag.strip()) > limits.DISEASE_TEXT_MAX:
                raise ValueError(f"疾病名称不能超过{limits.DISEASE_TEXT_MAX}个字符")
        return v

    @field_validator("hospitals")
    @classmethod
    def limit_hospitals(cls, v: list[str] | None) -> list[str] | None:
        """Cap hospital count and name length."""
        if v is None:
            return None
        if len(v) > limits.MAX_HOSPITALS:
            raise ValueError(f"医院最多{limits.MAX_HOSPITALS}个")
        for hospital in v:
            if len(hospital.strip()) > limits.HOSPITAL_NAME_MAX:
                raise ValueError(f"医院名称不能超过{limits.HOSPITAL_NAME_MAX}个字符")
        return v

    def effective_disease_history(self) -> list[DiseaseHistoryEntry]:
        """Disease entries to store, converting ``disease_tags`` when needed."""
        if self.disease_history is not None:
            return list(self.disease_history)
        entries: list[DiseaseHistoryEntry] = []
        for tag in self.disease_tags or []:
            if tag and tag.strip():
                entries.append(DiseaseHistoryEntry(disease=tag.strip()))
        return entries
