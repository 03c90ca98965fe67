"""Curriculum knowledge base: ordered units of vocabulary and sentence patterns.

Loaded once from the bundled JSON resource and never modified afterwards.
Lookups with unknown curriculum or unit ids return empty results.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path

from pydantic import TypeAdapter

from exam_api.config import KNOWLEDGE_BASE_PATH
from exam_api.models.generation import PassageKnowledge
from exam_api.models.knowledge import CumulativeKnowledge, Curriculum, KnowledgeUnit
from exam_api.utils import read_json_file

log = logging.getLogger(__name__)

_curricula_adapter = TypeAdapter(list[Curriculum])


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


class KnowledgeBase:
    def __init__(self, curricula: Iterable[Curriculum]):
        self._curricula = tuple(curricula)
        self._by_id = {curriculum.id: curriculum for curriculum in self._curricula}

    def curricula(self) -> tuple[Curriculum, ...]:
        return self._curricula

    def curriculum(self, curriculum_id: str) -> Curriculum | None:
        return self._by_id.get(curriculum_id)

    def _unit_index(self, curriculum_id: str, unit_id: str) -> tuple[Curriculum, int] | None:
        curriculum = self.curriculum(curriculum_id)
        if curriculum is None:
            return None
        for index, unit in enumerate(curriculum.units):
            if unit.id == unit_id:
                return curriculum, index
        return None

    def current_unit_knowledge(self, curriculum_id: str, unit_id: str) -> KnowledgeUnit | None:
        found = self._unit_index(curriculum_id, unit_id)
        if found is None:
            return None
        curriculum, index = found
        return curriculum.units[index]

    def cumulative_knowledge(self, curriculum_id: str, unit_id: str) -> CumulativeKnowledge:
        """Union of the unit and every earlier unit, duplicates removed.

        Values keep the order in which they first appear in the curriculum.
        """
        found = self._unit_index(curriculum_id, unit_id)
        if found is None:
            return CumulativeKnowledge()
        curriculum, index = found
        units = curriculum.units[: index + 1]
        return CumulativeKnowledge(
            vocabulary=_unique(term for unit in units for term in unit.vocabulary),
            sentence_patterns=_unique(
                pattern for unit in units for pattern in unit.sentence_patterns
            ),
        )

    def generation_knowledge(self, curriculum_id: str, unit_id: str) -> PassageKnowledge | None:
        """The knowledge block sent with passage and question generation."""
        unit = self.current_unit_knowledge(curriculum_id, unit_id)
        if unit is None:
            return None
        cumulative = self.cumulative_knowledge(curriculum_id, unit_id)
        return PassageKnowledge(
            unit_title=unit.title,
            vocabulary=list(cumulative.vocabulary),
            sentence_patterns=list(cumulative.sentence_patterns),
            current_unit_vocabulary=list(unit.vocabulary),
            current_unit_sentence_patterns=list(unit.sentence_patterns),
        )


def load_knowledge_base(path: Path = KNOWLEDGE_BASE_PATH) -> KnowledgeBase:
    """Load curricula from a JSON file; a missing file gives an empty base."""
    payload = read_json_file(Path(path), [])
    curricula = _curricula_adapter.validate_python(payload)
    log.info("Loaded %d curricula from %s", len(curricula), path)
    return KnowledgeBase(curricula)


@lru_cache(maxsize=1)
def get_knowledge_base() -> KnowledgeBase:
    return load_knowledge_base()
