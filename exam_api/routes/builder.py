"""Builder endpoints: new documents and structural edits.

Edits are stateless: the client sends the whole test plus one operation and
gets the edited test back. Nothing is persisted until the test is saved.
"""
import logging

from fastapi import APIRouter

from exam_api.models.api import NewTestRequest
from exam_api.models.builder import ApplyRequest, ApplyResponse
from exam_api.models.document import new_test
from exam_api.services.stats_service import compute_stats
from exam_api.services.tree_editor import apply_operation

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/builder", tags=["builder"])


@router.post("/new")
def create_empty_test(payload: NewTestRequest | None = None) -> dict[str, object]:
    """An empty test with the four fixed sections."""
    payload = payload or NewTestRequest()
    test = new_test(
        payload.title,
        curriculum_id=payload.curriculum_id,
        knowledge_unit_id=payload.knowledge_unit_id,
        time_limit=payload.time_limit,
    )
    return test.to_document()


@router.post("/apply")
def apply_edit(payload: ApplyRequest) -> dict[str, object]:
    edited = apply_operation(payload.test, payload.operation)
    stats = compute_stats(edited.sections)
    edited = edited.model_copy(update={"stats": stats})
    log.debug("Applied %s to test %s", payload.operation.op, edited.id)
    return ApplyResponse(test=edited, stats=stats).model_dump(mode="json", by_alias=True)
