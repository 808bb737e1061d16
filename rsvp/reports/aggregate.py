"""Aggregating event responses into report figures.

Filters are a mapping {question_id: selected value}. A response matches when
its (comma-split) answer to every filtered question contains the value.
When a figure is computed for a question, that question's own filter is not
applied, so its chart keeps showing every option while the other filters
narrow it down.
"""
from collections import Counter
from typing import Iterable, Mapping

from rsvp.app.core.config import settings
from rsvp.app.schemas.event import Event
from rsvp.app.schemas.question import QuestionBase, split_answer_value
from rsvp.app.schemas.report import (
    EventReport,
    FreeTextEntry,
    OptionParticipants,
    OptionTally,
    QuestionReport,
    ResponseMetrics,
    TagCount,
    TextListSummary,
)
from rsvp.app.schemas.response import ResponseRecord
from rsvp.reports.utils import natural_key

TOP_TAGS = 10


def apply_filters(
    responses: Iterable[ResponseRecord] | None,
    filters: Mapping[str, str] | None,
    exclude_question_id: str | None = None,
) -> list[ResponseRecord]:
    if not responses:
        return []
    responses = list(responses)
    if not filters:
        return responses

    def matches(response: ResponseRecord) -> bool:
        for question_id, wanted in filters.items():
            if exclude_question_id is not None and question_id == exclude_question_id:
                continue
            answer = response.answer_for(question_id)
            if not answer or not answer.value:
                return False
            if wanted not in split_answer_value(answer.value):
                return False
        return True

    return [r for r in responses if matches(r)]


def tally_choices(
    question: QuestionBase, responses: Iterable[ResponseRecord], filters: Mapping[str, str] | None = None
) -> list[OptionTally]:
    """Count how often each option was picked.

    The percentage base is the number of responses that answered the
    question, so multi-select percentages can add up to more than 100.
    """
    counts: Counter = Counter()
    responding = 0
    for response in apply_filters(responses, filters, question.id):
        answer = response.answer_for(question.id)
        if not answer or not answer.value:
            continue
        counts.update(split_answer_value(answer.value))
        responding += 1

    tallies = [
        OptionTally(
            label=label,
            count=count,
            percentage=round(count / responding * 100, 1) if responding else 0.0,
        )
        for label, count in counts.items()
    ]
    return sorted(tallies, key=lambda t: natural_key(t.label))


def collect_free_text(
    question: QuestionBase, responses: Iterable[ResponseRecord], filters: Mapping[str, str] | None = None
) -> list[FreeTextEntry]:
    out = []
    for response in apply_filters(responses, filters, question.id):
        answer = response.answer_for(question.id)
        if not answer or not answer.value:
            continue
        out.append(FreeTextEntry(
            value=answer.value,
            submitted_at=response.submitted_at,
            respondent=response.user.name if response.user else None,
        ))
    return out


def compute_metrics(responses: Iterable[ResponseRecord] | None) -> ResponseMetrics:
    responses = list(responses or [])
    stamps = [r.submitted_at for r in responses if r.submitted_at is not None]
    if not responses or not stamps:
        return ResponseMetrics(total=len(responses))
    return ResponseMetrics(
        total=len(responses),
        first_submitted_at=min(stamps),
        last_submitted_at=max(stamps),
    )


def summarize_text_list(
    question: QuestionBase, responses: Iterable[ResponseRecord], filters: Mapping[str, str] | None = None
) -> TextListSummary:
    filtered = apply_filters(responses, filters, question.id)
    counts: Counter = Counter()
    total = 0
    for response in filtered:
        answer = response.answer_for(question.id)
        if not answer or not answer.value:
            continue
        tags = split_answer_value(answer.value)
        total += len(tags)
        counts.update(tags)

    return TextListSummary(
        total_tags=total,
        total_responses=len(filtered),
        top_tags=[TagCount(name=name, count=count) for name, count in counts.most_common(TOP_TAGS)],
        all_tags=dict(counts),
    )


def _participant_names(response: ResponseRecord, name_question_ids: set[str]) -> list[str]:
    for answer in response.answers:
        if answer.question_id in name_question_ids and answer.value:
            names = split_answer_value(answer.value)
            if names:
                return names
    if response.user:
        return [response.user.name]
    return [settings.UNKNOWN_PARTICIPANT_LABEL]


def participants_by_option(
    question: QuestionBase,
    responses: Iterable[ResponseRecord],
    questions: Iterable[QuestionBase],
    filters: Mapping[str, str] | None = None,
) -> dict[str, OptionParticipants]:
    """Who picked what.

    Names come from the response's text-list answer when the event has one
    (every listed person counts), otherwise from the submitting user.
    """
    name_question_ids = {q.id for q in questions if q.type == "text_list"}
    groups: dict[str, OptionParticipants] = {}
    for response in apply_filters(responses, filters, question.id):
        answer = response.answer_for(question.id)
        if not answer or not answer.value:
            continue
        if question.type == "multiple_choice":
            values = split_answer_value(answer.value)
        else:
            values = [answer.value]
        names = _participant_names(response, name_question_ids)
        for value in values:
            group = groups.setdefault(value, OptionParticipants())
            group.count += len(names)
            group.names.extend(names)
    return {label: groups[label] for label in sorted(groups, key=natural_key)}


def build_event_report(
    event: Event, responses: Iterable[ResponseRecord], filters: Mapping[str, str] | None = None
) -> EventReport:
    responses = list(responses)
    filters = dict(filters or {})
    sections = []
    for question in event.questions:
        section = QuestionReport(question_id=question.id, text=question.text, type=question.type)
        if question.is_choice or question.type == "time":
            section.tallies = tally_choices(question, responses, filters)
            section.participants = participants_by_option(question, responses, event.questions, filters)
        elif question.type == "text_list":
            section.text_list = summarize_text_list(question, responses, filters)
        else:
            section.free_text = collect_free_text(question, responses, filters)
        sections.append(section)

    return EventReport(
        event_id=event.id,
        title=event.title,
        filters=filters,
        metrics=compute_metrics(apply_filters(responses, filters)),
        questions=sections,
    )
