from .user import User, UserRole, UserStatus
from .event import Event, EventStatus
from .question import EventQuestion, QuestionType, CHOICE_TYPES
from .response import EventResponse
from .answer import EventAnswer
