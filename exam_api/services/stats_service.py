"""Service layer for test statistics.

Stats are derived from the section tree and never edited directly.
"""
from collections.abc import Iterable

from exam_api.models.document import Question, QuestionType, Section, Stats

QUESTION_SCORE = 0.25
PARAGRAPH_SCORE = 1.0


def count_weight(question: Question) -> int:
    """Number of scored units the question contributes."""
    if question.is_example:
        return 0
    if question.type == QuestionType.WRITING_FILL_IN_WORD:
        return len(question.sub_questions)
    return 1


def score_weight(question: Question) -> float:
    """Points the question contributes to the total score."""
    if question.is_example:
        return 0.0
    if question.type == QuestionType.WRITING_PARAGRAPH:
        return PARAGRAPH_SCORE
    return count_weight(question) * QUESTION_SCORE


def compute_stats(sections: Iterable[Section]) -> Stats:
    """Recompute totals from the section/part/question tree."""
    total_questions = 0
    total_score = 0.0
    total_parts = 0
    for section in sections:
        total_parts += len(section.parts)
        for part in section.parts:
            for question in part.questions:
                total_questions += count_weight(question)
                total_score += score_weight(question)
    return Stats(
        total_questions=total_questions,
        total_score=total_score,
        total_parts=total_parts,
    )
