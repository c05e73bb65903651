"""Quiz configuration, generation, progression and scoring."""

from .engine import QuizEngine, compute_score, effective_count, filter_pool
from .models import (
    ALL_QUESTIONS,
    OPTIONS_PER_QUESTION,
    AnswerRecord,
    Question,
    QuestionCount,
    QuestionCountOption,
    QuizFormat,
    QuizResult,
    QuizSession,
    QuizState,
    parse_question_count,
    wants_all,
)
from .validation import (
    MAX_NICKNAME_LENGTH,
    InvalidNicknameError,
    NicknameError,
    require_valid_nickname,
    validate_nickname,
)

__all__ = [
    "QuizEngine",
    "compute_score",
    "effective_count",
    "filter_pool",
    "ALL_QUESTIONS",
    "OPTIONS_PER_QUESTION",
    "AnswerRecord",
    "Question",
    "QuestionCount",
    "QuestionCountOption",
    "QuizFormat",
    "QuizResult",
    "QuizSession",
    "QuizState",
    "parse_question_count",
    "wants_all",
    "MAX_NICKNAME_LENGTH",
    "InvalidNicknameError",
    "NicknameError",
    "require_valid_nickname",
    "validate_nickname",
]
