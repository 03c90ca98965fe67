"""Curriculum reference data models."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class KnowledgeModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class KnowledgeUnit(KnowledgeModel):
    id: str
    title: str
    vocabulary: tuple[str, ...] = ()
    sentence_patterns: tuple[str, ...] = ()


class Curriculum(KnowledgeModel):
    id: str
    name: str
    units: tuple[KnowledgeUnit, ...] = ()


class CumulativeKnowledge(KnowledgeModel):
    vocabulary: tuple[str, ...] = ()
    sentence_patterns: tuple[str, ...] = ()


class UnitKnowledge(KnowledgeModel):
    """Current-unit and cumulative knowledge for one unit."""

    current: KnowledgeUnit
    cumulative: CumulativeKnowledge
