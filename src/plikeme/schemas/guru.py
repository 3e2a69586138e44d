"""Guru Q&A Pydantic schemas."""

from pydantic import BaseModel, field_validator

from plikeme.core import limits


class IntroUpdate(BaseModel):
    """Body for updating a guru's introduction."""

    intro: str = ""

    @field_validator("intro")
    @classmethod
    def validate_intro(cls, v: str) -> str:
        v = v.strip()
        if len(v) > limits.GURU_INTRO_MAX:
            raise ValueError(f"简介不能超过{limits.GURU_INTRO_MAX}个字符")
        return v


class QuestionCreate(BaseModel):
    """Body for asking a guru a question."""

    title: str
    content: str

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("标题不能为空")
        if len(v) > limits.GURU_QUESTION_TITLE_MAX:
            raise ValueError(f"标题不能超过{limits.GURU_QUESTION_TITLE_MAX}个字符")
        return v

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("内容不能为空")
        if len(v) > limits.GURU_QUESTION_CONTENT_MAX:
            raise ValueError(f"内容不能超过{limits.GURU_QUESTION_CONTENT_MAX}个字符")
        return v


class QuestionReplyCreate(BaseModel):
    """Body for replying under a guru question."""

    content: str
    parent_reply_id: int | None = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("回复内容不能为空")
        if len(v) > limits.GURU_REPLY_CONTENT_MAX:
            raise ValueError(f"回复内容不能超过{limits.GURU_REPLY_CONTENT_MAX}个字符")
        return v
