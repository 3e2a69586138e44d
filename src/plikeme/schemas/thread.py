"""Thread and reply Pydantic schemas."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from plikeme.core import limits


class CommunityLink(BaseModel):
    """A thread's link to a community, optionally at sub-community level."""

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


class ThreadWrite(BaseModel):
    """Body for creating or replacing a thread."""

    title: str
    content: str
    community_ids: list[int] = Field(default_factory=list, description="Level I links")
    community_links: list[CommunityLink] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("标题不能为空")
        if len(v) > limits.THREAD_TITLE_MAX:
            raise ValueError(f"标题不能超过{limits.THREAD_TITLE_MAX}个字符")
        return v

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("内容不能为空")
        if len(v) > limits.THREAD_CONTENT_MAX:
            raise ValueError(f"内容不能超过{limits.THREAD_CONTENT_MAX}个字符")
        return v

    def links(self) -> list[tuple[int, str, str]]:
        """Every requested link as ``(community_id, stage, type)``, de-duplicated."""
        seen: list[tuple[int, str, str]] = []
        for community_id in self.community_ids:
            key = (community_id, "", "")
            if key not in seen:
                seen.append(key)
        for link in self.community_links:
            key = (link.id, link.stage, link.type)
            if key not in seen:
                seen.append(key)
        return seen


class ReplyCreate(BaseModel):
    """Body for a thread reply."""

    content: str
    parent_reply_id: int | None = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("回复内容不能为空")
        if len(v) > limits.REPLY_CONTENT_MAX:
            raise ValueError(f"回复内容不能超过{limits.REPLY_CONTENT_MAX}个字符")
        return v
