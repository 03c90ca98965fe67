"""Request/response bodies of the HTTP API that are not documents themselves."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, PositiveInt
from pydantic.alias_generators import to_camel

from exam_api.config import DEFAULT_TEST_TITLE, DEFAULT_TIME_LIMIT_MINUTES
from exam_api.models.document import Stats, Test


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TestSummary(ApiModel):
    __test__ = False  # not a pytest test class

    id: str
    title: str
    time_limit: int | None = None
    curriculum_id: str | None = None
    knowledge_unit_id: str | None = None
    stats: Stats
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_test(cls, test: Test) -> "TestSummary":
        return cls(
            id=test.id or "",
            title=test.title,
            time_limit=test.time_limit,
            curriculum_id=test.curriculum_id,
            knowledge_unit_id=test.knowledge_unit_id,
            stats=test.stats,
            created_at=test.created_at,
            updated_at=test.updated_at,
        )


class NewTestRequest(ApiModel):
    title: str = DEFAULT_TEST_TITLE
    curriculum_id: str | None = None
    knowledge_unit_id: str | None = None
    time_limit: PositiveInt | None = DEFAULT_TIME_LIMIT_MINUTES


class DeleteResponse(ApiModel):
    id: str
    deleted: bool
