"""Structural edits on a test document.

Every function takes a `Test` and an id path (section -> part -> question ->
option/sub-question) and returns a new `Test`. The input is never modified.
Targeting an id that does not exist returns the input unchanged.

Two invariants are enforced here rather than by callers:

* multiple-choice questions have at most one correct option: setting an
  option correct replaces the whole option list in one step;
* writing-fill-in-word sub-questions and image slots share ids and are
  added/removed together.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from exam_api.models import builder as ops
from exam_api.models.document import (
    ImageItem,
    Option,
    Part,
    Question,
    QuestionType,
    Section,
    SectionId,
    SubQuestion,
    Test,
    new_id,
)
from exam_api.models.generation import (
    GeneratedFib,
    GeneratedMcq,
    GeneratedQuestion,
    GeneratedTrueFalse,
)

log = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_OPTION_COUNT = 3
_GENERATED_TAGS = {"mcq", "fib", "true-false"}
_generated_adapter = TypeAdapter(GeneratedQuestion)

_PROTECTED_PART_FIELDS = {"id", "questions"}
_PROTECTED_QUESTION_FIELDS = {"id", "type", "options", "images", "sub_questions"}


# --- tree navigation -------------------------------------------------------


def _section_key(section_id: SectionId | str) -> SectionId | None:
    try:
        return SectionId(section_id)
    except ValueError:
        return None


def _replace_item(container: M, field: str, item_id: str, fn: Callable) -> M:
    """Apply `fn` to the child with `item_id` in `container.<field>`."""
    items = getattr(container, field)
    for index, item in enumerate(items):
        if item.id != item_id:
            continue
        updated = fn(item)
        if updated is item:
            return container
        new_items = list(items)
        new_items[index] = updated
        return container.model_copy(update={field: new_items})
    return container


def _remove_item(container: M, field: str, item_id: str) -> M:
    items = getattr(container, field)
    kept = [item for item in items if item.id != item_id]
    if len(kept) == len(items):
        return container
    return container.model_copy(update={field: kept})


def _update_section(test: Test, section_id, fn: Callable[[Section], Section]) -> Test:
    key = _section_key(section_id)
    if key is None:
        return test
    return _replace_item(test, "sections", key, fn)


def _update_part(test: Test, section_id, part_id, fn: Callable[[Part], Part]) -> Test:
    return _update_section(
        test, section_id, lambda section: _replace_item(section, "parts", part_id, fn)
    )


def _update_question(
    test: Test, section_id, part_id, question_id, fn: Callable[[Question], Question]
) -> Test:
    return _update_part(
        test,
        section_id,
        part_id,
        lambda part: _replace_item(part, "questions", question_id, fn),
    )


def _merge(model: M, changes: Mapping[str, Any], protected: set[str] = frozenset({"id"})) -> M:
    """Merge partial changes (field names or camelCase aliases) and re-validate."""
    fields = type(model).model_fields
    by_alias = {info.alias: name for name, info in fields.items() if info.alias}
    updates: dict[str, Any] = {}
    for key, value in changes.items():
        name = key if key in fields else by_alias.get(key)
        if name is None:
            log.debug("Ignoring unknown field %r for %s", key, type(model).__name__)
            continue
        if name in protected:
            continue
        updates[name] = value
    if not updates:
        return model
    try:
        return type(model).model_validate({**dict(model), **updates})
    except ValidationError as exc:
        log.warning("Rejected changes to %s %s: %s", type(model).__name__, model.id, exc)
        return model


def _option_label(index: int) -> str:
    return chr(ord("A") + index)


def _blank_option(index: int) -> Option:
    return Option(id=new_id(), label=_option_label(index), image_prompt="")


# --- parts -----------------------------------------------------------------


def add_part(test: Test, section_id: SectionId | str) -> Test:
    """Append an empty part; reading parts get a passage slot."""

    def append(section: Section) -> Section:
        part = Part(
            id=new_id(),
            title=f"Part {len(section.parts) + 1}: ",
            passage="" if section.id == SectionId.READING else None,
        )
        return section.model_copy(update={"parts": [*section.parts, part]})

    return _update_section(test, section_id, append)


def delete_part(test: Test, section_id: SectionId | str, part_id: str) -> Test:
    return _update_section(
        test, section_id, lambda section: _remove_item(section, "parts", part_id)
    )


def change_part(
    test: Test, section_id: SectionId | str, part_id: str, changes: Mapping[str, Any]
) -> Test:
    return _update_part(
        test, section_id, part_id, lambda part: _merge(part, changes, _PROTECTED_PART_FIELDS)
    )


# --- questions -------------------------------------------------------------


def build_question(question_type: QuestionType | str) -> Question:
    """A new question of `question_type` with its default payload shape."""
    question_type = QuestionType(question_type)
    fields: dict[str, Any] = {"id": new_id(), "type": question_type}
    if question_type in (QuestionType.MCQ, QuestionType.MCQ_IMAGE):
        fields["options"] = [_blank_option(i) for i in range(DEFAULT_OPTION_COUNT)]
    if question_type in (
        QuestionType.FILL_IN_BLANK,
        QuestionType.WRITE_THE_WORD,
        QuestionType.WRITING_ORDER_WORDS,
    ):
        fields["answer"] = ""
    if question_type == QuestionType.WRITE_THE_WORD:
        fields["text_after"] = ""
    if question_type == QuestionType.WRITING_ORDER_WORDS:
        fields["disordered_words"] = ""
    if question_type == QuestionType.SPEAKING_QA:
        fields["reference_answer"] = ""
    if question_type == QuestionType.WRITING_FILL_IN_WORD:
        pair_id = new_id()
        fields["sub_questions"] = [SubQuestion(id=pair_id)]
        fields["images"] = [ImageItem(id=pair_id)]
    return Question(**fields)


def add_question(
    test: Test, section_id: SectionId | str, part_id: str, question_type: QuestionType | str
) -> Test:
    try:
        question = build_question(question_type)
    except ValueError:
        return test
    return _update_part(
        test,
        section_id,
        part_id,
        lambda part: part.model_copy(update={"questions": [*part.questions, question]}),
    )


def question_from_generated(item: object) -> Question | None:
    """Map one AI-generated item to a Question, or None if it is unusable."""
    if isinstance(item, Mapping):
        if item.get("type") not in _GENERATED_TAGS:
            log.info("Dropping generated question with unknown type %r", item.get("type"))
            return None
        try:
            item = _generated_adapter.validate_python(dict(item))
        except ValidationError as exc:
            log.info("Dropping malformed generated question: %s", exc.error_count())
            return None

    if isinstance(item, GeneratedMcq):
        if sum(1 for option in item.options if option.is_correct) > 1:
            log.info("Dropping generated mcq with several correct options")
            return None
        return Question(
            id=new_id(),
            type=QuestionType.MCQ,
            text=item.question,
            options=[
                Option(
                    id=new_id(),
                    label=_option_label(index),
                    is_correct=option.is_correct,
                    description=option.text,
                    image_prompt="",
                )
                for index, option in enumerate(item.options)
            ],
        )
    if isinstance(item, GeneratedFib):
        return Question(
            id=new_id(), type=QuestionType.FILL_IN_BLANK, text=item.question, answer=item.answer
        )
    if isinstance(item, GeneratedTrueFalse):
        return Question(
            id=new_id(), type=QuestionType.TRUE_FALSE, text=item.statement, is_true=item.is_true
        )
    return None


def add_generated_questions(
    test: Test, section_id: SectionId | str, part_id: str, generated: Iterable[object]
) -> Test:
    """Append AI-generated questions; unrecognized items are dropped."""
    questions = [q for q in (question_from_generated(item) for item in generated) if q]
    if not questions:
        return test
    return _update_part(
        test,
        section_id,
        part_id,
        lambda part: part.model_copy(update={"questions": [*part.questions, *questions]}),
    )


def delete_question(
    test: Test, section_id: SectionId | str, part_id: str, question_id: str
) -> Test:
    return _update_part(
        test, section_id, part_id, lambda part: _remove_item(part, "questions", question_id)
    )


def change_question(
    test: Test,
    section_id: SectionId | str,
    part_id: str,
    question_id: str,
    changes: Mapping[str, Any],
) -> Test:
    """Merge scalar field changes (text, answer, isExample, ...) into a question."""
    return _update_question(
        test,
        section_id,
        part_id,
        question_id,
        lambda question: _merge(question, changes, _PROTECTED_QUESTION_FIELDS),
    )


# --- options ---------------------------------------------------------------


def change_option(
    test: Test,
    section_id: SectionId | str,
    part_id: str,
    question_id: str,
    option_id: str,
    changes: Mapping[str, Any],
) -> Test:
    """Merge changes into one option.

    When the change marks the option correct, all sibling options are
    cleared in the same returned snapshot.
    """

    def update(question: Question) -> Question:
        if not any(option.id == option_id for option in question.options):
            return question
        target = _merge(
            next(option for option in question.options if option.id == option_id), changes
        )
        options = []
        for option in question.options:
            if option.id == option_id:
                options.append(target)
            elif target.is_correct and option.is_correct:
                options.append(option.model_copy(update={"is_correct": False}))
            else:
                options.append(option)
        return question.model_copy(update={"options": options})

    return _update_question(test, section_id, part_id, question_id, update)


def add_option(test: Test, section_id: SectionId | str, part_id: str, question_id: str) -> Test:
    def append(question: Question) -> Question:
        option = _blank_option(len(question.options))
        return question.model_copy(update={"options": [*question.options, option]})

    return _update_question(test, section_id, part_id, question_id, append)


def delete_option_image(
    test: Test, section_id: SectionId | str, part_id: str, question_id: str, option_id: str
) -> Test:
    return _update_question(
        test,
        section_id,
        part_id,
        question_id,
        lambda question: _replace_item(
            question,
            "options",
            option_id,
            lambda option: option.model_copy(update={"image_url": None}),
        ),
    )


def _set_option_field(field: str, values: Sequence[str | None]):
    def update(question: Question) -> Question:
        options = [
            option.model_copy(update={field: values[index]})
            if index < len(values) and values[index]
            else option
            for index, option in enumerate(question.options)
        ]
        return question.model_copy(update={"options": options})

    return update


def set_option_image_prompts(
    test: Test,
    section_id: SectionId | str,
    part_id: str,
    question_id: str,
    prompts: Sequence[str | None],
) -> Test:
    """Apply prompts to options by position; empty entries keep the old prompt."""
    return _update_question(
        test, section_id, part_id, question_id, _set_option_field("image_prompt", prompts)
    )


def set_option_images(
    test: Test,
    section_id: SectionId | str,
    part_id: str,
    question_id: str,
    images: Sequence[str | None],
) -> Test:
    """Apply generated images to options by position."""
    return _update_question(
        test, section_id, part_id, question_id, _set_option_field("image_url", images)
    )


# --- writing-fill-in-word sub-questions ------------------------------------


def _fill_in_word_only(fn: Callable[[Question], Question]) -> Callable[[Question], Question]:
    def guarded(question: Question) -> Question:
        if question.type != QuestionType.WRITING_FILL_IN_WORD:
            return question
        return fn(question)

    return guarded


def add_sub_question(
    test: Test, section_id: SectionId | str, part_id: str, question_id: str
) -> Test:
    """Add a sub-question together with its image slot under one new id."""

    def append(question: Question) -> Question:
        pair_id = new_id()
        return question.model_copy(
            update={
                "sub_questions": [*question.sub_questions, SubQuestion(id=pair_id)],
                "images": [*question.images, ImageItem(id=pair_id)],
            }
        )

    return _update_question(test, section_id, part_id, question_id, _fill_in_word_only(append))


def delete_sub_question(
    test: Test, section_id: SectionId | str, part_id: str, question_id: str, sub_question_id: str
) -> Test:
    """Remove a sub-question and its paired image slot."""

    def remove(question: Question) -> Question:
        if not any(sub.id == sub_question_id for sub in question.sub_questions):
            return question
        return question.model_copy(
            update={
                "sub_questions": [s for s in question.sub_questions if s.id != sub_question_id],
                "images": [i for i in question.images if i.id != sub_question_id],
            }
        )

    return _update_question(test, section_id, part_id, question_id, _fill_in_word_only(remove))


def change_sub_question(
    test: Test,
    section_id: SectionId | str,
    part_id: str,
    question_id: str,
    sub_question_id: str,
    changes: Mapping[str, Any],
) -> Test:
    return _update_question(
        test,
        section_id,
        part_id,
        question_id,
        lambda question: _replace_item(
            question, "sub_questions", sub_question_id, lambda sub: _merge(sub, changes)
        ),
    )


def change_image(
    test: Test,
    section_id: SectionId | str,
    part_id: str,
    question_id: str,
    image_id: str,
    image_url: str | None,
) -> Test:
    return _update_question(
        test,
        section_id,
        part_id,
        question_id,
        lambda question: _replace_item(
            question,
            "images",
            image_id,
            lambda image: image.model_copy(update={"image_url": image_url}),
        ),
    )


# --- dispatch --------------------------------------------------------------

_HANDLERS: dict[type, Callable[[Test, Any], Test]] = {
    ops.AddPart: lambda t, o: add_part(t, o.section_id),
    ops.DeletePart: lambda t, o: delete_part(t, o.section_id, o.part_id),
    ops.ChangePart: lambda t, o: change_part(t, o.section_id, o.part_id, o.changes),
    ops.AddQuestion: lambda t, o: add_question(t, o.section_id, o.part_id, o.question_type),
    ops.AddGeneratedQuestions: lambda t, o: add_generated_questions(
        t, o.section_id, o.part_id, o.questions
    ),
    ops.DeleteQuestion: lambda t, o: delete_question(t, o.section_id, o.part_id, o.question_id),
    ops.ChangeQuestion: lambda t, o: change_question(
        t, o.section_id, o.part_id, o.question_id, o.changes
    ),
    ops.ChangeOption: lambda t, o: change_option(
        t, o.section_id, o.part_id, o.question_id, o.option_id, o.changes
    ),
    ops.AddOption: lambda t, o: add_option(t, o.section_id, o.part_id, o.question_id),
    ops.DeleteOptionImage: lambda t, o: delete_option_image(
        t, o.section_id, o.part_id, o.question_id, o.option_id
    ),
    ops.SetOptionImagePrompts: lambda t, o: set_option_image_prompts(
        t, o.section_id, o.part_id, o.question_id, o.prompts
    ),
    ops.SetOptionImages: lambda t, o: set_option_images(
        t, o.section_id, o.part_id, o.question_id, o.images
    ),
    ops.AddSubQuestion: lambda t, o: add_sub_question(t, o.section_id, o.part_id, o.question_id),
    ops.DeleteSubQuestion: lambda t, o: delete_sub_question(
        t, o.section_id, o.part_id, o.question_id, o.sub_question_id
    ),
    ops.ChangeSubQuestion: lambda t, o: change_sub_question(
        t, o.section_id, o.part_id, o.question_id, o.sub_question_id, o.changes
    ),
    ops.ChangeImage: lambda t, o: change_image(
        t, o.section_id, o.part_id, o.question_id, o.image_id, o.image_url
    ),
}


def apply_operation(test: Test, operation: BaseModel) -> Test:
    """Dispatch one builder `EditOperation` to its editor function."""
    handler = _HANDLERS.get(type(operation))
    if handler is None:
        raise TypeError(f"Unsupported edit operation: {type(operation).__name__}")
    return handler(test, operation)
