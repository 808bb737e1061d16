import pytest

from rsvp.app.core.errors import QuestionValidationError
from rsvp.app.schemas.question import (
    MultipleChoiceQuestion,
    SingleChoiceQuestion,
    TextListQuestion,
    TimeQuestion,
    encode_answer_value,
    parse_question,
    split_answer_value,
)
from rsvp.app.services.events import normalize_event
from rsvp.app.services.questions import (
    clean_options,
    diff_questions,
    questions_from_event,
    validate_question_draft,
)


def test_parse_question_dispatches_on_type():
    q = parse_question({"id": "q1", "text": "When?", "type": "time"})
    assert isinstance(q, TimeQuestion)
    assert q.options == []
    assert q.sort_order == 0


def test_validate_draft_trims_text_and_cleans_options():
    q = validate_question_draft({
        "text": "  Colour ",
        "type": "single_choice",
        "options": [" Red", "", "Blue ", "Red", "   "],
    })
    assert isinstance(q, SingleChoiceQuestion)
    assert q.text == "Colour"
    assert q.options == ["Red", "Blue"]


def test_validate_draft_rejects_blank_text():
    with pytest.raises(QuestionValidationError) as exc:
        validate_question_draft({"text": "   ", "type": "short_text"})
    assert "text" in exc.value.errors


@pytest.mark.parametrize("options", [[], ["Only"], ["Same", " Same ", ""]])
def test_validate_draft_needs_two_distinct_options_for_choice(options):
    with pytest.raises(QuestionValidationError) as exc:
        validate_question_draft({"text": "Pick", "type": "multiple_choice", "options": options})
    assert "options" in exc.value.errors


def test_validate_draft_rejects_unknown_type():
    with pytest.raises(QuestionValidationError) as exc:
        validate_question_draft({"text": "Pick", "type": "slider"})
    assert "type" in exc.value.errors
    assert str(exc.value) == "Unsupported question type."


def test_validate_draft_reports_the_invalid_field():
    with pytest.raises(QuestionValidationError) as exc:
        validate_question_draft({"text": "Pick", "type": "single_choice", "options": [1, 2]})
    assert "options" in exc.value.errors
    assert "type" not in exc.value.errors
    assert str(exc.value) == "Invalid value for options."


def test_validate_draft_drops_options_of_text_questions():
    q = validate_question_draft({"text": "Notes", "type": "long_text", "options": ["x"]})
    assert q.options == []


def test_clean_options_keeps_first_seen_order():
    assert clean_options(["b", "a", " b", "c"]) == ["b", "a", "c"]


def test_diff_partitions_questions():
    existing = [
        {"id": "q1", "text": "A", "type": "short_text"},
        {"id": "q2", "text": "B", "type": "short_text"},
        {"id": "q3", "text": "C", "type": "short_text"},
    ]
    desired = [
        {"id": "q3", "text": "C2", "type": "short_text"},
        {"text": "New", "type": "long_text"},
        {"id": "q1", "text": "A", "type": "short_text"},
    ]
    diff = diff_questions(existing, desired)

    assert [(q.id, q.sort_order) for q in diff.to_update] == [("q3", 0), ("q1", 2)]
    assert [(q.text, q.sort_order) for q in diff.to_insert] == [("New", 1)]
    assert diff.to_delete == ["q2"]

    updated = {q.id for q in diff.to_update}
    assert updated.isdisjoint(diff.to_delete)
    assert updated | set(diff.to_delete) == {"q1", "q2", "q3"}


def test_diff_of_identical_sets_only_updates():
    existing = [{"id": "q1", "text": "A", "type": "short_text", "sort_order": 0}]
    diff = diff_questions(existing, existing)
    assert not diff.to_insert and not diff.to_delete
    assert not diff.is_empty()


def test_diff_from_empty_desired_deletes_everything():
    diff = diff_questions([{"id": "q1"}, {"id": "q2"}], [])
    assert diff.to_delete == ["q1", "q2"]
    assert diff.to_insert == [] and diff.to_update == []


def test_normalize_orders_questions_by_sort_order():
    raw = {
        "id": "e1",
        "title": "Party",
        "event_questions": [
            {"id": "c", "text": "C", "type": "short_text", "sort_order": 2},
            {"id": "a", "text": "A", "type": "short_text", "sort_order": 0},
            {"id": "b", "text": "B", "type": "short_text", "sort_order": 1},
        ],
        "event_responses": [{"count": 4}],
    }
    event = normalize_event(raw)
    assert [q.sort_order for q in event.questions] == [0, 1, 2]
    assert [q.id for q in event.questions] == ["a", "b", "c"]
    assert event.responses_count == 4


def test_normalize_tolerates_missing_optional_fields():
    raw = {
        "id": "e1",
        "title": "Party",
        "event_questions": [
            {"id": "y", "text": "Y", "type": "single_choice", "options": None},
            {"id": "x", "text": "X", "type": "short_text", "sort_order": None},
        ],
    }
    event = normalize_event(raw)
    # equal positions keep row order
    assert [q.id for q in event.questions] == ["y", "x"]
    assert event.questions[0].options == []
    assert event.responses_count == 0
    assert event.status == "awaiting"


def test_questions_from_event_clears_ids():
    event = normalize_event({
        "id": "e1",
        "title": "Template",
        "event_questions": [
            {"id": "q2", "text": "B", "type": "short_text", "sort_order": 5},
            {"id": "q1", "text": "A", "type": "short_text", "sort_order": 1},
        ],
    })
    copies = questions_from_event(event)
    assert [(q.id, q.text, q.sort_order) for q in copies] == [(None, "A", 0), (None, "B", 1)]


@pytest.mark.parametrize("value, expected", [
    (None, None),
    ("", None),
    ([], None),
    (["a", "b"], "a, b"),
    (7, "7"),
    ("text", "text"),
])
def test_encode_answer_value(value, expected):
    assert encode_answer_value(value) == expected


def test_split_answer_value_trims_and_drops_blanks():
    assert split_answer_value("Red, Blue,, ") == ["Red", "Blue"]
    assert split_answer_value(None) == []


def test_answer_checks_per_question_type():
    single = SingleChoiceQuestion(id="s", text="S", options=["Yes", "No"], required=True)
    assert single.check_answer("Yes") is None
    assert single.check_answer("Maybe") is not None
    assert single.check_answer(["Yes", "No"]) is not None
    assert single.check_answer("") is not None

    multi = MultipleChoiceQuestion(id="m", text="M", options=["Red", "Blue"])
    assert multi.check_answer(["Red", "Blue"]) is None
    assert multi.check_answer(None) is None
    assert multi.check_answer(["Pink"]) is not None

    time = TimeQuestion(id="t", text="T")
    assert time.check_answer("09:30") is None
    assert time.check_answer("25:00") is not None

    names = TextListQuestion(id="n", text="N")
    assert names.encode_answer([" Ann ", "", "Bob"]) == "Ann, Bob"
