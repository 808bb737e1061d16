"""Question variants.

One class per question type. Each variant owns how an answer to it is
checked (`check_answer`) and stored (`encode_answer`); callers dispatch on
the class, never on the type string.
"""
# app/schemas/question.py
import re
from typing import Annotated, Any, ClassVar, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

ANSWER_SEPARATOR = ", "
TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$")


def encode_answer_value(value: Any) -> str | None:
    """Flatten a submitted answer into its stored string form.

    `None`, empty strings and empty lists mean "not answered" and yield None.
    Lists are joined with `", "`; anything else is converted with `str()`.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        return ANSWER_SEPARATOR.join(str(v) for v in value)
    if isinstance(value, str) and value == "":
        return None
    return str(value)


def split_answer_value(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in str(value).split(",") if part.strip()]


class QuestionBase(BaseModel):
    id: Optional[str] = None
    text: str = ""
    required: bool = False
    options: List[str] = Field(default_factory=list)
    sort_order: int = 0

    is_choice: ClassVar[bool] = False

    @field_validator("options", mode="before")
    @classmethod
    def _default_options(cls, value):
        if not isinstance(value, list):
            return []
        return value

    @field_validator("sort_order", mode="before")
    @classmethod
    def _default_sort(cls, value):
        return 0 if value is None else value

    @field_validator("required", mode="before")
    @classmethod
    def _default_required(cls, value):
        return bool(value)

    def check_answer(self, value: Any) -> str | None:
        """Return an error message for `value`, or None when it is acceptable."""
        if self.required and encode_answer_value(value) is None:
            return "This question requires an answer."
        return None

    def encode_answer(self, value: Any) -> str | None:
        return encode_answer_value(value)

    def to_row(self, event_id: str, sort_order: int) -> dict:
        return {
            "event_id": event_id,
            "text": self.text,
            "type": self.type,
            "required": bool(self.required),
            "options": list(self.options) if self.is_choice else [],
            "sort_order": sort_order,
        }


class ShortTextQuestion(QuestionBase):
    type: Literal["short_text"] = "short_text"


class LongTextQuestion(QuestionBase):
    type: Literal["long_text"] = "long_text"


class TimeQuestion(QuestionBase):
    type: Literal["time"] = "time"

    def check_answer(self, value: Any) -> str | None:
        error = super().check_answer(value)
        if error:
            return error
        encoded = encode_answer_value(value)
        if encoded is not None and not TIME_PATTERN.match(encoded):
            return "Time answers must use the HH:MM format."
        return None


class SingleChoiceQuestion(QuestionBase):
    type: Literal["single_choice"] = "single_choice"
    is_choice: ClassVar[bool] = True

    def check_answer(self, value: Any) -> str | None:
        error = super().check_answer(value)
        if error:
            return error
        if isinstance(value, (list, tuple)):
            if len(value) > 1:
                return "Only one option can be selected."
            value = value[0] if value else None
        if value not in (None, "") and str(value) not in self.options:
            return f"Unknown option: {value}"
        return None


class MultipleChoiceQuestion(QuestionBase):
    type: Literal["multiple_choice"] = "multiple_choice"
    is_choice: ClassVar[bool] = True

    def check_answer(self, value: Any) -> str | None:
        error = super().check_answer(value)
        if error:
            return error
        selected = value if isinstance(value, (list, tuple)) else split_answer_value(value)
        unknown = [str(v) for v in selected if str(v) not in self.options]
        if unknown:
            return f"Unknown option: {', '.join(unknown)}"
        return None


class TextListQuestion(QuestionBase):
    """A free list of entries (e.g. names of the people attending)."""
    type: Literal["text_list"] = "text_list"

    def encode_answer(self, value: Any) -> str | None:
        if isinstance(value, (list, tuple)):
            value = [str(v).strip() for v in value if str(v).strip()]
        return encode_answer_value(value)


Question = Annotated[
    Union[
        ShortTextQuestion,
        LongTextQuestion,
        TimeQuestion,
        SingleChoiceQuestion,
        MultipleChoiceQuestion,
        TextListQuestion,
    ],
    Field(discriminator="type"),
]

QuestionAdapter = TypeAdapter(Question)
QuestionListAdapter = TypeAdapter(List[Question])


def parse_question(data: Any) -> QuestionBase:
    if isinstance(data, QuestionBase):
        return data
    return QuestionAdapter.validate_python(data)
