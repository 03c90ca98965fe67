"""Builds the read-only student view of a test."""
from exam_api.models.document import Part, Question, Test
from exam_api.models.preview import (
    PreviewOption,
    PreviewPart,
    PreviewQuestion,
    PreviewSection,
    PreviewSubQuestion,
    TestPreview,
)
from exam_api.services.stats_service import compute_stats

EXAMPLE_LABEL = "Ex."


def _preview_question(question: Question, number: int | None) -> PreviewQuestion:
    images = {image.id: image.image_url for image in question.images}
    return PreviewQuestion(
        id=question.id,
        type=question.type,
        is_example=question.is_example,
        number=number,
        label=EXAMPLE_LABEL if number is None else f"{number}.",
        text=question.text,
        text_after=question.text_after,
        options=[
            PreviewOption(
                label=option.label,
                description=option.description,
                image_url=option.image_url,
            )
            for option in question.options
        ],
        sub_questions=[
            PreviewSubQuestion(id=sub.id, text=sub.text, image_url=images.get(sub.id))
            for sub in question.sub_questions
        ],
        disordered_words=question.disordered_words,
        image_url=question.image_url,
    )


def preview_part(part: Part) -> PreviewPart:
    """Examples first and unnumbered, then scored questions numbered from 1."""
    examples = [q for q in part.questions if q.is_example]
    scored = [q for q in part.questions if not q.is_example]
    questions = [_preview_question(q, None) for q in examples]
    questions += [_preview_question(q, index) for index, q in enumerate(scored, start=1)]
    return PreviewPart(
        id=part.id,
        title=part.title,
        passage=part.passage,
        audio_url=part.audio_url,
        questions=questions,
    )


def build_preview(test: Test) -> TestPreview:
    return TestPreview(
        id=test.id,
        title=test.title,
        time_limit=test.time_limit,
        stats=compute_stats(test.sections),
        sections=[
            PreviewSection(
                id=section.id,
                title=section.title,
                parts=[preview_part(part) for part in section.parts],
            )
            for section in test.sections
        ],
    )
