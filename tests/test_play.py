from __future__ import annotations

import random

import pytest
from rich.console import Console

from classical_quiz.play import (
    PlayCommand,
    option_key,
    parse_play_command,
    run_quiz,
)
from classical_quiz.quiz import ALL_QUESTIONS, QuizEngine, QuizState
from fixtures import make_piece, make_pieces


def _console() -> Console:
    return Console(record=True, width=100, force_terminal=False, color_system=None)


@pytest.fixture
def engine(catalog_factory, clock) -> QuizEngine:
    quiz = QuizEngine(catalog_factory(make_pieces(6)), rng=random.Random(5), clock=clock)
    quiz.setup_quiz("Clara", "audio-to-title", "all", 3)
    return quiz


def _answer_key(engine: QuizEngine, correct: bool) -> str:
    question = engine.current_question
    for index, piece in enumerate(question.options):
        if (piece.id == question.correct_answer.id) is correct:
            return option_key(index)
    raise AssertionError("no matching option")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("a", PlayCommand("select", 0)),
        (" D ", PlayCommand("select", 3)),
        ("2", PlayCommand("select", 1)),
        ("q", PlayCommand("quit")),
        ("Exit", PlayCommand("quit")),
        ("e", None),
        ("5", None),
        ("0", None),
        ("", None),
        (None, None),
        ("ab", None),
    ],
)
def test_parse_play_command(raw, expected) -> None:
    assert parse_play_command(raw, 4) == expected


def test_run_quiz_to_completion(engine, clock) -> None:
    console = _console()
    answers = iter([True, False, True])

    def provider() -> str:
        clock.advance(2)
        return _answer_key(engine, next(answers))

    outcome = run_quiz(engine, console, provider)

    assert outcome.exit_action == "completed"
    assert outcome.result.correct_count == 2
    assert outcome.result.total_time == 6
    assert outcome.result.final_score == 2000 - 60
    text = console.export_text()
    assert "Correct!" in text
    assert "Incorrect." in text
    assert "Quiz Summary" in text
    assert "1940" in text


def test_unrecognized_input_reprompts(engine) -> None:
    console = _console()
    inputs = iter(["zz"])

    def provider() -> str:
        try:
            return next(inputs)
        except StopIteration:
            return _answer_key(engine, True)

    outcome = run_quiz(engine, console, provider)

    assert outcome.result.correct_count == 3
    assert "Unrecognized answer" in console.export_text()


def test_quit_leaves_quiz_in_progress(engine) -> None:
    console = _console()
    inputs = iter(["A", "q"])

    outcome = run_quiz(engine, console, lambda: next(inputs))

    assert outcome.exit_action == "quit"
    assert len(outcome.result.history) == 1
    assert outcome.result.final_score == 0
    assert engine.state is QuizState.IN_PROGRESS
    assert "Quiz Summary" not in console.export_text()


def test_interrupt_is_treated_as_quit(engine) -> None:
    def provider() -> str:
        raise KeyboardInterrupt

    outcome = run_quiz(engine, _console(), provider)

    assert outcome.exit_action == "quit"
    assert outcome.result.history == ()


def test_empty_quiz_is_reported(catalog_factory) -> None:
    engine = QuizEngine(catalog_factory(make_pieces(3)))
    engine.setup_quiz("Clara", "audio-to-title", "Chopin", 5)
    console = _console()

    outcome = run_quiz(engine, console, lambda: "A")

    assert outcome.exit_action == "empty"
    assert engine.state is QuizState.CONFIGURED
    assert "No pieces match" in console.export_text()


def test_trivia_panel_toggle(catalog_factory) -> None:
    items = [
        make_piece(str(i), trivia=f"fact {i}") for i in range(1, 5)
    ]
    engine = QuizEngine(catalog_factory(items), rng=random.Random(2))
    engine.setup_quiz("Clara", "title-to-composer", "all", 1)
    console = _console()

    run_quiz(engine, console, lambda: "A", show_trivia=False)
    assert "fact" not in console.export_text()

    engine.setup_quiz("Clara", "title-to-composer", "all", 1)
    console = _console()
    run_quiz(engine, console, lambda: "A")
    assert "fact" in console.export_text()


def test_bracketed_text_renders_literally(catalog_factory) -> None:
    items = [
        make_piece(
            str(i),
            "[/composer]",
            title=f"[bold]Odd {i}[/x]",
            trivia="see [/note] below",
        )
        for i in range(1, 5)
    ]
    engine = QuizEngine(catalog_factory(items), rng=random.Random(4))
    engine.setup_quiz("[/x]Bob", "title-to-composer", "all", ALL_QUESTIONS)
    console = _console()

    outcome = run_quiz(engine, console, lambda: "B")

    assert outcome.exit_action == "completed"
    text = console.export_text()
    assert "[/x]Bob" in text
    assert "see [/note] below" in text
    assert "[bold]Odd" in text
    assert "[/composer]" in text
