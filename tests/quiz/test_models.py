from __future__ import annotations

import pytest

from classical_quiz.quiz import (
    ALL_QUESTIONS,
    Question,
    QuizFormat,
    parse_question_count,
    wants_all,
)
from fixtures import make_piece


def test_parse_question_count_accepts_numbers_and_all() -> None:
    assert parse_question_count("10") == 10
    assert parse_question_count(30) == 30
    assert parse_question_count(" ALL ") is ALL_QUESTIONS
    assert parse_question_count(ALL_QUESTIONS) is ALL_QUESTIONS


@pytest.mark.parametrize("value", ["0", "-3", "many", 0, True, 2.5])
def test_parse_question_count_rejects_invalid(value) -> None:
    with pytest.raises(ValueError):
        parse_question_count(value)


def test_wants_all_honours_legacy_threshold() -> None:
    assert wants_all(ALL_QUESTIONS)
    assert wants_all(999)
    assert not wants_all(998)


def test_format_prompt_and_labels() -> None:
    piece = make_piece("x", "Mozart", title="Requiem")

    assert QuizFormat.AUDIO_TO_TITLE.prompt_for(piece) == piece.audio_url
    assert QuizFormat.AUDIO_TO_TITLE.option_label(piece) == "Requiem"
    assert QuizFormat.TITLE_TO_COMPOSER.prompt_for(piece) == "Requiem"
    assert QuizFormat.TITLE_TO_COMPOSER.option_label(piece) == "Mozart"
    assert QuizFormat.TITLE_TO_TRACK.option_label(piece) == piece.audio_url


def test_format_from_value() -> None:
    assert QuizFormat.from_value("Title-To-Composer") is QuizFormat.TITLE_TO_COMPOSER
    assert QuizFormat.from_value(QuizFormat.TITLE_TO_TRACK) is QuizFormat.TITLE_TO_TRACK
    with pytest.raises(ValueError):
        QuizFormat.from_value("video-to-title")


def test_question_prompt_and_degraded_flag() -> None:
    piece = make_piece("1", title="Bolero")
    question = Question(piece, (piece,), QuizFormat.TITLE_TO_COMPOSER)

    assert question.prompt == "Bolero"
    assert question.is_degraded
