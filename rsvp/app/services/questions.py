"""Question-set operations: draft validation, diffing and copying.

The store has no "replace the question set" operation, so edits are turned
into explicit insert/update/delete lists here before any write is issued.
"""
# app/services/questions.py
from dataclasses import dataclass, field
from typing import Any, Iterable

from pydantic import ValidationError

from rsvp.app.core.errors import QuestionValidationError
from rsvp.app.schemas.question import QuestionBase, parse_question


@dataclass
class QuestionDiff:
    to_insert: list[QuestionBase] = field(default_factory=list)
    to_update: list[QuestionBase] = field(default_factory=list)
    to_delete: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.to_insert or self.to_update or self.to_delete)


def clean_options(options: Iterable[Any]) -> list[str]:
    """Trim options, drop blanks and duplicates, keep first-seen order."""
    cleaned: list[str] = []
    for option in options or []:
        text = str(option).strip()
        if text and text not in cleaned:
            cleaned.append(text)
    return cleaned


def validate_question_draft(draft: Any) -> QuestionBase:
    """Validate a question before it joins an event's working question list.

    Args:
        draft: A question model or a mapping with at least `text` and `type`.

    Returns:
        QuestionBase: The question with trimmed text and cleaned options.

    Raises:
        QuestionValidationError: Blank text, unknown type, or a choice
            question with fewer than two distinct options.
    """
    try:
        question = parse_question(draft)
    except ValidationError as e:
        err = e.errors()[0]
        # loc[0] is the question type tag once the type itself was accepted
        fields = [str(part) for part in err["loc"][1:] if isinstance(part, str)]
        if err["type"].startswith("union_tag") or not fields:
            raise QuestionValidationError(
                "Unsupported question type.", errors={"type": str(err.get("msg"))}
            ) from e
        raise QuestionValidationError(
            f"Invalid value for {fields[0]}.", errors={fields[0]: str(err.get("msg"))}
        ) from e

    text = (question.text or "").strip()
    if not text:
        raise QuestionValidationError(errors={"text": "Enter the question text."})

    options = clean_options(question.options) if question.is_choice else []
    if question.is_choice and len(options) < 2:
        raise QuestionValidationError(
            errors={"options": "Choice questions need at least two distinct options."}
        )
    return question.model_copy(update={"text": text, "options": options})


def diff_questions(existing: Iterable[Any], desired: Iterable[Any]) -> QuestionDiff:
    """Compute the writes that turn `existing` into `desired`.

    Positions come from the index in `desired`. Questions with an id are
    updates, questions without one are inserts, and existing ids missing from
    `desired` are deletes.
    """
    diff = QuestionDiff()
    desired_ids = set()
    for index, item in enumerate(desired):
        question = parse_question(item).model_copy(update={"sort_order": index})
        if question.id:
            desired_ids.add(question.id)
            diff.to_update.append(question)
        else:
            diff.to_insert.append(question)

    for item in existing:
        question_id = item.get("id") if isinstance(item, dict) else item.id
        if question_id and question_id not in desired_ids and question_id not in diff.to_delete:
            diff.to_delete.append(question_id)
    return diff


def questions_from_event(event, clear_ids: bool = True) -> list[QuestionBase]:
    """Copy an event's questions in display order, e.g. to seed a new event
    from a template."""
    ordered = sorted(event.questions, key=lambda q: q.sort_order)
    out = []
    for index, q in enumerate(ordered):
        update = {"sort_order": index}
        if clear_ids:
            update["id"] = None
        out.append(q.model_copy(update=update, deep=True))
    return out
