"""Pydantic models for test documents, builder operations and AI flows."""
from exam_api.models.builder import ApplyRequest, ApplyResponse, EditOperation
from exam_api.models.document import (
    ImageItem,
    Option,
    Part,
    Question,
    QuestionType,
    Section,
    SectionId,
    Stats,
    SubQuestion,
    Test,
    new_id,
    new_test,
)
from exam_api.models.knowledge import CumulativeKnowledge, Curriculum, KnowledgeUnit, UnitKnowledge

__all__ = [
    "ApplyRequest",
    "ApplyResponse",
    "EditOperation",
    "ImageItem",
    "Option",
    "Part",
    "Question",
    "QuestionType",
    "Section",
    "SectionId",
    "Stats",
    "SubQuestion",
    "Test",
    "new_id",
    "new_test",
    "CumulativeKnowledge",
    "Curriculum",
    "KnowledgeUnit",
    "UnitKnowledge",
]
