"""Test document model: sections -> parts -> questions -> options/sub-questions.

All models are frozen; edits go through `exam_api.services.tree_editor`, which
returns new snapshots. On the wire (API payloads and the stored document) the
keys are camelCase.
"""
from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Annotated

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PositiveInt,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from exam_api.config import DEFAULT_TEST_TITLE, DEFAULT_TIME_LIMIT_MINUTES


def new_id() -> str:
    """Generate a unique id for a test, part, question, option or sub-question."""
    return uuid.uuid4().hex


def _coerce_id(value: object) -> object:
    # Documents written by the earlier builder used numeric timestamp ids
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


EntityId = Annotated[str, BeforeValidator(_coerce_id)]


class SectionId(str, enum.Enum):
    """The four fixed sections of every test, in display order."""

    LISTENING = "listening"
    READING = "reading"
    WRITING = "writing"
    SPEAKING = "speaking"


SECTION_TITLES = {
    SectionId.LISTENING: "Listening",
    SectionId.READING: "Reading",
    SectionId.WRITING: "Writing",
    SectionId.SPEAKING: "Speaking",
}


class QuestionType(str, enum.Enum):
    MCQ = "mcq"
    MCQ_IMAGE = "mcq-image"
    FILL_IN_BLANK = "fib"
    TRUE_FALSE = "true-false"
    WRITE_THE_WORD = "write-the-word"
    WRITING_FILL_IN_WORD = "writing-fill-in-word"
    WRITING_ORDER_WORDS = "writing-order-words"
    WRITING_PARAGRAPH = "writing-paragraph"
    SPEAKING_QA = "speaking-qa"


MULTIPLE_CHOICE_TYPES = frozenset({QuestionType.MCQ, QuestionType.MCQ_IMAGE})


class DocumentModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict[str, object]:
        """Serialize to the camelCase document shape."""
        return self.model_dump(mode="json", by_alias=True)


class Option(DocumentModel):
    id: EntityId
    # Display letter (A/B/C...); stored under "text" in saved documents
    label: str = Field(default="", alias="text")
    is_correct: bool = False
    description: str = ""
    image_prompt: str | None = None
    image_url: str | None = None


class SubQuestion(DocumentModel):
    id: EntityId
    text: str = ""
    answer: str = ""


class ImageItem(DocumentModel):
    """Image slot paired 1:1 with the SubQuestion of the same id."""

    id: EntityId
    image_url: str | None = None


class Question(DocumentModel):
    id: EntityId
    type: QuestionType
    text: str = ""
    text_after: str | None = None
    answer: str | None = None
    options: list[Option] = Field(default_factory=list)
    is_example: bool = False
    is_true: bool | None = None
    images: list[ImageItem] = Field(default_factory=list)
    sub_questions: list[SubQuestion] = Field(default_factory=list)
    disordered_words: str | None = None
    image_url: str | None = None
    reference_answer: str | None = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "Question":
        correct = sum(1 for option in self.options if option.is_correct)
        if correct > 1:
            raise ValueError(
                f"Question {self.id} has {correct} correct options; at most one is allowed"
            )
        if self.type == QuestionType.WRITING_FILL_IN_WORD:
            image_ids = [image.id for image in self.images]
            sub_ids = [sub.id for sub in self.sub_questions]
            if image_ids != sub_ids:
                raise ValueError(
                    f"Question {self.id} images and sub-questions are not paired"
                )
        return self

    @property
    def is_multiple_choice(self) -> bool:
        return self.type in MULTIPLE_CHOICE_TYPES


class Part(DocumentModel):
    id: EntityId
    title: str = ""
    passage: str | None = None
    audio_url: str | None = None
    questions: list[Question] = Field(default_factory=list)


class Section(DocumentModel):
    id: SectionId
    title: str = ""
    parts: list[Part] = Field(default_factory=list)


class Stats(DocumentModel):
    total_questions: int = 0
    total_score: float = 0.0
    total_parts: int = 0


def empty_sections() -> list[Section]:
    return [Section(id=section_id, title=title) for section_id, title in SECTION_TITLES.items()]


class Test(DocumentModel):
    __test__ = False  # not a pytest test class

    id: str | None = None
    title: str = ""
    sections: list[Section] = Field(default_factory=empty_sections)
    curriculum_id: str | None = None
    knowledge_unit_id: str | None = None
    time_limit: PositiveInt | None = None
    stats: Stats = Field(default_factory=Stats)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("sections", mode="after")
    @classmethod
    def _normalize_sections(cls, sections: list[Section]) -> list[Section]:
        by_id: dict[SectionId, Section] = {}
        for section in sections:
            if section.id in by_id:
                raise ValueError(f"Duplicate section: {section.id.value}")
            by_id[section.id] = section
        return [
            by_id.get(section_id) or Section(id=section_id, title=title)
            for section_id, title in SECTION_TITLES.items()
        ]

    def section(self, section_id: SectionId | str) -> Section:
        return next(s for s in self.sections if s.id == SectionId(section_id))

    def iter_parts(self):
        for section in self.sections:
            for part in section.parts:
                yield section, part


def new_test(
    title: str = DEFAULT_TEST_TITLE,
    *,
    curriculum_id: str | None = None,
    knowledge_unit_id: str | None = None,
    time_limit: int | None = DEFAULT_TIME_LIMIT_MINUTES,
) -> Test:
    """An unsaved test with the four fixed sections and no parts."""
    return Test(
        title=title,
        curriculum_id=curriculum_id,
        knowledge_unit_id=knowledge_unit_id,
        time_limit=time_limit,
    )
