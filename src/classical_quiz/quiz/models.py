"""Quiz data types: formats, questions, answers and session state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from ..catalog.models import Piece

OPTIONS_PER_QUESTION = 4
ALL_QUESTIONS_THRESHOLD = 999


class QuizFormat(Enum):
    """Presentation modes: what is shown, and what the options display."""

    AUDIO_TO_TITLE = "audio-to-title"
    TITLE_TO_COMPOSER = "title-to-composer"
    TITLE_TO_TRACK = "title-to-track"

    @classmethod
    def from_value(cls, value: Union[str, "QuizFormat"]) -> "QuizFormat":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        expected = ", ".join(member.value for member in cls)
        raise ValueError(
            f"Unknown quiz format '{value}'. Expected one of: {expected}."
        )

    def prompt_for(self, piece: Piece) -> str:
        if self is QuizFormat.AUDIO_TO_TITLE:
            return piece.audio_url
        return piece.title

    def option_label(self, piece: Piece) -> str:
        if self is QuizFormat.TITLE_TO_COMPOSER:
            return piece.composer
        if self is QuizFormat.TITLE_TO_TRACK:
            return piece.audio_url
        return piece.title


class QuestionCountOption(Enum):
    ALL = "all"


ALL_QUESTIONS = QuestionCountOption.ALL

QuestionCount = Union[int, QuestionCountOption]


def parse_question_count(value: Union[str, int, QuestionCountOption]) -> QuestionCount:
    """Accept ``"all"``, the enum sentinel, or a positive integer."""

    if isinstance(value, QuestionCountOption):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text == ALL_QUESTIONS.value:
            return ALL_QUESTIONS
        try:
            value = int(text)
        except ValueError as exc:
            raise ValueError(
                f"Question count must be a positive integer or 'all', got '{value}'."
            ) from exc
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValueError(
            f"Question count must be a positive integer or 'all', got {value!r}."
        )
    return value


def wants_all(count: QuestionCount) -> bool:
    """True for the sentinel and for legacy integer requests of 999 or more."""

    if isinstance(count, QuestionCountOption):
        return True
    return count >= ALL_QUESTIONS_THRESHOLD


class QuizState(Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Question:
    """A correct piece plus distractors in presentation order."""

    correct_answer: Piece
    options: tuple[Piece, ...]
    format: QuizFormat

    @property
    def is_degraded(self) -> bool:
        return len(self.options) < OPTIONS_PER_QUESTION

    @property
    def prompt(self) -> str:
        return self.format.prompt_for(self.correct_answer)

    def option_ids(self) -> list[str]:
        return [piece.id for piece in self.options]


@dataclass(frozen=True)
class AnswerRecord:
    question: Question
    selected_id: str
    is_correct: bool


@dataclass
class QuizSession:
    """Configuration plus the mutable progress of one play-through."""

    nickname: str = "Guest"
    format: QuizFormat = QuizFormat.AUDIO_TO_TITLE
    category: str = "all"
    requested_count: QuestionCount = 5
    questions: list[Question] = field(default_factory=list)
    position: int = 0
    correct_count: int = 0
    start_timestamp: float = 0.0
    end_timestamp: float = 0.0
    history: list[AnswerRecord] = field(default_factory=list)


@dataclass(frozen=True)
class QuizResult:
    """Finalized outcome handed to the ranking service and summary view."""

    nickname: str
    category: str
    format: QuizFormat
    total_questions: int
    correct_count: int
    total_time: float
    final_score: int
    history: tuple[AnswerRecord, ...]

    @property
    def accuracy(self) -> float:
        if self.total_questions == 0:
            return 0.0
        return self.correct_count / self.total_questions
