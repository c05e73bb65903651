"""Quiz generation, progression and scoring.

A :class:`QuizEngine` owns exactly one :class:`QuizSession` and reads pieces
from the :class:`CatalogCache` it was constructed with. All transitions are
synchronous; invalid transitions are ignored and logged rather than raised
so a presentation layer can simply observe the session state.
"""

from __future__ import annotations

import logging
import math
import random
import time
from typing import Callable, Optional, Sequence, Union

from ..catalog.cache import ALL_CATEGORIES, CatalogCache
from ..catalog.composers import normalize
from ..catalog.models import Piece
from .models import (
    OPTIONS_PER_QUESTION,
    AnswerRecord,
    Question,
    QuestionCount,
    QuizFormat,
    QuizResult,
    QuizSession,
    QuizState,
    wants_all,
)

logger = logging.getLogger(__name__)

POINTS_PER_CORRECT = 1000
PENALTY_PER_SECOND = 10

Clock = Callable[[], float]


def compute_score(correct_count: int, total_time: float) -> int:
    """``max(0, correct * 1000 - round(seconds) * 10)``, halves rounded up."""

    seconds = math.floor(total_time + 0.5)
    return max(0, correct_count * POINTS_PER_CORRECT - seconds * PENALTY_PER_SECOND)


def filter_pool(pieces: Sequence[Piece], category: str) -> list[Piece]:
    if category == ALL_CATEGORIES:
        return list(pieces)
    return [piece for piece in pieces if normalize(piece.composer) == category]


def effective_count(requested: QuestionCount, pool_size: int) -> int:
    if wants_all(requested):
        return pool_size
    return max(0, min(int(requested), pool_size))


class QuizEngine:
    """Configure, generate, play and score a single quiz session."""

    def __init__(
        self,
        catalog: CatalogCache,
        *,
        rng: Optional[random.Random] = None,
        clock: Clock = time.time,
    ) -> None:
        self.catalog = catalog
        self.session = QuizSession()
        self._rng = rng or random.Random()
        self._clock = clock
        self._configured = False
        self._started = False
        self._finished = False
        catalog.add_listener(self._on_language_changed)

    def close(self) -> None:
        """Stop following catalog language switches."""

        self.catalog.remove_listener(self._on_language_changed)

    # -- configuration & generation ------------------------------------

    def setup_quiz(
        self,
        nickname: str,
        format: Union[QuizFormat, str],
        category: str,
        requested_count: QuestionCount,
    ) -> list[Question]:
        """Discard prior state and generate a fresh question sequence."""

        quiz_format = QuizFormat.from_value(format)
        self.session = QuizSession(
            nickname=nickname,
            format=quiz_format,
            category=category,
            requested_count=requested_count,
        )
        pool = filter_pool(self.catalog.pieces, category)
        count = effective_count(requested_count, len(pool))
        self.session.questions = self._generate(pool, count, quiz_format)
        self._configured = True
        self._started = False
        self._finished = False

        if not pool:
            logger.info(
                "No pieces available for category",
                extra={"category": category},
            )
        elif len(pool) < OPTIONS_PER_QUESTION:
            logger.warning(
                "Category pool too small for full option sets",
                extra={"category": category, "pool_size": len(pool)},
            )
        logger.info(
            "Quiz configured",
            extra={
                "category": category,
                "format": quiz_format,
                "requested": requested_count,
                "questions": count,
            },
        )
        return list(self.session.questions)

    def set_format(self, format: Union[QuizFormat, str]) -> None:
        """Change the session format; existing questions keep theirs."""

        self.session.format = QuizFormat.from_value(format)

    def _generate(
        self, pool: list[Piece], count: int, quiz_format: QuizFormat
    ) -> list[Question]:
        questions: list[Question] = []
        for correct in self._rng.sample(pool, count):
            others = [piece for piece in pool if piece.id != correct.id]
            distractors = self._rng.sample(
                others, min(OPTIONS_PER_QUESTION - 1, len(others))
            )
            options = [correct, *distractors]
            self._rng.shuffle(options)
            questions.append(
                Question(
                    correct_answer=correct,
                    options=tuple(options),
                    format=quiz_format,
                )
            )
        return questions

    # -- progression ---------------------------------------------------

    @property
    def state(self) -> QuizState:
        if not self._configured:
            return QuizState.UNCONFIGURED
        if self._finished:
            return QuizState.COMPLETED
        if self._started:
            return QuizState.IN_PROGRESS
        return QuizState.CONFIGURED

    def start_quiz(self) -> bool:
        """Reset progress and start the clock; questions are untouched."""

        state = self.state
        if state not in (QuizState.CONFIGURED, QuizState.COMPLETED):
            logger.warning("start_quiz ignored", extra={"state": state})
            return False
        session = self.session
        session.correct_count = 0
        session.position = 0
        # keeps correct_count consistent with history across restarts
        session.history = []
        session.end_timestamp = 0.0
        session.start_timestamp = self._clock()
        self._started = True
        self._finished = False
        logger.debug(
            "Quiz started",
            extra={
                "questions": len(session.questions),
                "restart": state is QuizState.COMPLETED,
            },
        )
        return True

    def answer_question(self, selected_id: str) -> Optional[AnswerRecord]:
        """Record an answer for the current question and advance."""

        if self.state is not QuizState.IN_PROGRESS:
            return None
        session = self.session
        if not 0 <= session.position < len(session.questions):
            return None

        question = session.questions[session.position]
        record = AnswerRecord(
            question=question,
            selected_id=selected_id,
            is_correct=selected_id == question.correct_answer.id,
        )
        session.history.append(record)
        if record.is_correct:
            session.correct_count += 1

        session.position += 1
        if session.position >= len(session.questions):
            self.end_quiz()
        return record

    def end_quiz(self) -> None:
        self.session.end_timestamp = self._clock()
        self._finished = True
        logger.info(
            "Quiz completed",
            extra={
                "correct": self.session.correct_count,
                "questions": len(self.session.questions),
                "total_time": self.total_time,
                "score": self.final_score,
            },
        )

    # -- derived values ------------------------------------------------

    @property
    def total_time(self) -> float:
        session = self.session
        if not (self._started and self._finished):
            return 0.0
        return session.end_timestamp - session.start_timestamp

    @property
    def final_score(self) -> int:
        if self.state is not QuizState.COMPLETED:
            return 0
        return compute_score(self.session.correct_count, self.total_time)

    @property
    def current_question(self) -> Optional[Question]:
        questions = self.session.questions
        if 0 <= self.session.position < len(questions):
            return questions[self.session.position]
        return None

    def result(self) -> QuizResult:
        session = self.session
        return QuizResult(
            nickname=session.nickname,
            category=session.category,
            format=session.format,
            total_questions=len(session.questions),
            correct_count=session.correct_count,
            total_time=self.total_time,
            final_score=self.final_score,
            history=tuple(session.history),
        )

    # -- catalog coupling ----------------------------------------------

    def _on_language_changed(self, language: str) -> None:
        if not self._configured:
            return
        try:
            relocalized = [self._relocalize(q) for q in self.session.questions]
            history = [
                AnswerRecord(
                    question=self._relocalize(record.question),
                    selected_id=record.selected_id,
                    is_correct=record.is_correct,
                )
                for record in self.session.history
            ]
        except KeyError as exc:
            logger.warning(
                "Discarding quiz after language switch",
                extra={"language": language, "missing_id": exc.args[0]},
            )
            self.session = QuizSession()
            self._configured = False
            self._started = False
            self._finished = False
            return
        self.session.questions = relocalized
        self.session.history = history
        logger.info("Quiz re-localized", extra={"language": language})

    def _relocalize(self, question: Question) -> Question:
        return Question(
            correct_answer=self._lookup(question.correct_answer.id),
            options=tuple(self._lookup(piece.id) for piece in question.options),
            format=question.format,
        )

    def _lookup(self, piece_id: str) -> Piece:
        piece = self.catalog.get_by_id(piece_id)
        if piece is None:
            raise KeyError(piece_id)
        return piece
