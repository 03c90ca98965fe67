"""Student-facing projection of a test (no answer keys)."""
from __future__ import annotations

from pydantic import Field

from exam_api.models.document import DocumentModel, QuestionType, SectionId, Stats


class PreviewOption(DocumentModel):
    label: str
    description: str = ""
    image_url: str | None = None


class PreviewSubQuestion(DocumentModel):
    id: str
    text: str = ""
    image_url: str | None = None


class PreviewQuestion(DocumentModel):
    id: str
    type: QuestionType
    is_example: bool = False
    # None for examples, which are labelled "Ex." instead
    number: int | None = None
    label: str
    text: str = ""
    text_after: str | None = None
    options: list[PreviewOption] = Field(default_factory=list)
    sub_questions: list[PreviewSubQuestion] = Field(default_factory=list)
    disordered_words: str | None = None
    image_url: str | None = None


class PreviewPart(DocumentModel):
    id: str
    title: str = ""
    passage: str | None = None
    audio_url: str | None = None
    questions: list[PreviewQuestion] = Field(default_factory=list)


class PreviewSection(DocumentModel):
    id: SectionId
    title: str
    parts: list[PreviewPart] = Field(default_factory=list)


class TestPreview(DocumentModel):
    __test__ = False  # not a pytest test class

    id: str | None = None
    title: str
    time_limit: int | None = None
    stats: Stats
    sections: list[PreviewSection] = Field(default_factory=list)
