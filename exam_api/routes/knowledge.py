"""Curriculum knowledge base endpoints."""
from fastapi import APIRouter, HTTPException

from exam_api.dependencies import KnowledgeDep
from exam_api.models.knowledge import UnitKnowledge

router = APIRouter(prefix="/api/curricula", tags=["knowledge"])


@router.get("")
def list_curricula(kb: KnowledgeDep) -> list[dict[str, object]]:
    return [curriculum.model_dump(by_alias=True) for curriculum in kb.curricula()]


@router.get("/{curriculum_id}/units/{unit_id}/knowledge")
def unit_knowledge(curriculum_id: str, unit_id: str, kb: KnowledgeDep) -> dict[str, object]:
    """Current-unit and cumulative vocabulary/patterns for one unit."""
    current = kb.current_unit_knowledge(curriculum_id, unit_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Unit not found")
    knowledge = UnitKnowledge(
        current=current,
        cumulative=kb.cumulative_knowledge(curriculum_id, unit_id),
    )
    return knowledge.model_dump(by_alias=True)
