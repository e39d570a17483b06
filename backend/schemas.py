# schemas.py
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, HttpUrl, Field, StrictInt, TypeAdapter, field_validator, model_validator
from pydantic.alias_generators import to_camel

OPTIONS_PER_ITEM = 4
ITEMS_PER_QUIZ = 10

_http_url = TypeAdapter(HttpUrl)


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
        str_strip_whitespace = True


class QuizItem(CamelModel):
    stem: str = Field(min_length=1)
    options: List[str] = Field(min_length=OPTIONS_PER_ITEM, max_length=OPTIONS_PER_ITEM)
    correct_option: int = Field(ge=0)
    source_snippet: str = Field(min_length=1)

    @model_validator(mode="after")
    def _correct_option_in_range(self):
        if self.correct_option >= len(self.options):
            raise ValueError("correctOption must index into options")
        return self


class GeneratedQuiz(CamelModel):
    """Shape the generator must return for a first-time quiz."""
    title: str = Field(min_length=1)
    slug: Optional[str] = None
    items: List[QuizItem]


class QuizInsert(CamelModel):
    title: str
    slug: str
    items: List[QuizItem]
    deleted_items: List[QuizItem] = []
    source_id: UUID
    parent_id: Optional[UUID] = None


# --- HTTP bodies

class CreateQuizIn(CamelModel):
    url: str

    @field_validator("url")
    @classmethod
    def _valid_http_url(cls, v: str) -> str:
        # validated as an http(s) URL but stored as submitted; the url is the dedup key
        try:
            _http_url.validate_python(v)
        except ValueError:
            raise ValueError("url must be an http(s) URL")
        return v


class EditQuizIn(CamelModel):
    quiz_id: UUID
    deleted_item_idxs: List[StrictInt]
    additional_instructions: str = ""


class TogglePublishIn(CamelModel):
    quiz_id: UUID


class QuizSlugOut(CamelModel):
    quiz_slug: str


class PublishOut(CamelModel):
    published_at: Optional[datetime]


class SourceOut(CamelModel):
    url: str
    title: str
    favicon: Optional[str] = None


class QuizOut(CamelModel):
    id: UUID
    title: str
    slug: str
    items: List[QuizItem]
    deleted_items: List[QuizItem]
    source_id: UUID
    parent_id: Optional[UUID]
    created_at: datetime
    published_at: Optional[datetime]
    source: SourceOut


class RevisionOut(CamelModel):
    id: UUID
    slug: str
    parent_id: Optional[UUID]
    created_at: datetime
