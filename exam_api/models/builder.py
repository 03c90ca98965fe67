"""Edit operations accepted by the builder endpoint."""
from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from exam_api.models.document import EntityId, QuestionType, Stats, Test


class _Operation(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    section_id: str


class _PartOperation(_Operation):
    part_id: EntityId


class _QuestionOperation(_PartOperation):
    question_id: EntityId


class AddPart(_Operation):
    op: Literal["addPart"]


class DeletePart(_PartOperation):
    op: Literal["deletePart"]


class ChangePart(_PartOperation):
    op: Literal["changePart"]
    changes: dict[str, Any]


class AddQuestion(_PartOperation):
    op: Literal["addQuestion"]
    question_type: QuestionType


class AddGeneratedQuestions(_PartOperation):
    op: Literal["addGeneratedQuestions"]
    # Raw items: unrecognized ones are dropped by the editor, not rejected here
    questions: list[Any]


class DeleteQuestion(_QuestionOperation):
    op: Literal["deleteQuestion"]


class ChangeQuestion(_QuestionOperation):
    op: Literal["changeQuestion"]
    changes: dict[str, Any]


class ChangeOption(_QuestionOperation):
    op: Literal["changeOption"]
    option_id: EntityId
    changes: dict[str, Any]


class AddOption(_QuestionOperation):
    op: Literal["addOption"]


class DeleteOptionImage(_QuestionOperation):
    op: Literal["deleteOptionImage"]
    option_id: EntityId


class SetOptionImagePrompts(_QuestionOperation):
    op: Literal["setOptionImagePrompts"]
    prompts: list[str | None]


class SetOptionImages(_QuestionOperation):
    op: Literal["setOptionImages"]
    images: list[str | None]


class AddSubQuestion(_QuestionOperation):
    op: Literal["addSubQuestion"]


class DeleteSubQuestion(_QuestionOperation):
    op: Literal["deleteSubQuestion"]
    sub_question_id: EntityId


class ChangeSubQuestion(_QuestionOperation):
    op: Literal["changeSubQuestion"]
    sub_question_id: EntityId
    changes: dict[str, Any]


class ChangeImage(_QuestionOperation):
    op: Literal["changeImage"]
    image_id: EntityId
    image_url: str | None = None


EditOperation = Annotated[
    Union[
        AddPart,
        DeletePart,
        ChangePart,
        AddQuestion,
        AddGeneratedQuestions,
        DeleteQuestion,
        ChangeQuestion,
        ChangeOption,
        AddOption,
        DeleteOptionImage,
        SetOptionImagePrompts,
        SetOptionImages,
        AddSubQuestion,
        DeleteSubQuestion,
        ChangeSubQuestion,
        ChangeImage,
    ],
    Field(discriminator="op"),
]


class ApplyRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    test: Test
    operation: EditOperation


class ApplyResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    test: Test
    stats: Stats
