"""Rich-powered terminal play loop for a configured quiz.

The loop only drives :class:`QuizEngine` transitions and renders state; all
scoring and progression rules live in the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .quiz.engine import QuizEngine
from .quiz.models import AnswerRecord, Question, QuizResult, QuizState

InputProvider = Callable[[], str]
ExitAction = Literal["completed", "quit", "empty"]


@dataclass(frozen=True)
class PlayCommand:
    type: Literal["select", "quit"]
    index: Optional[int] = None


@dataclass(frozen=True)
class PlayOutcome:
    result: QuizResult
    exit_action: ExitAction


def option_key(index: int) -> str:
    return chr(ord("A") + index)


def parse_play_command(raw: Optional[str], option_count: int) -> Optional[PlayCommand]:
    """Accept a letter (A..) or 1-based number for an option, or quit."""

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    if text.lower() in {"q", "quit", "exit"}:
        return PlayCommand("quit")
    if text.isdigit():
        index = int(text) - 1
    elif len(text) == 1 and text.isalpha():
        index = ord(text.upper()) - ord("A")
    else:
        return None
    if 0 <= index < option_count:
        return PlayCommand("select", index)
    return None


def run_quiz(
    engine: QuizEngine,
    console: Console,
    input_provider: InputProvider,
    *,
    show_trivia: bool = True,
) -> PlayOutcome:
    """Start ``engine``'s configured quiz and play it to completion or quit."""

    if not engine.session.questions:
        console.print(
            Panel(
                "No pieces match this category.",
                title="Quiz",
                border_style="yellow",
            )
        )
        return PlayOutcome(engine.result(), "empty")

    engine.start_quiz()
    exit_action: ExitAction = "completed"
    while engine.state is QuizState.IN_PROGRESS:
        question = engine.current_question
        if question is None:  # pragma: no cover - engine guarantees range
            break
        _render_question(console, engine, question)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Quiz interrupted.[/]")
            exit_action = "quit"
            break
        command = parse_play_command(raw, len(question.options))
        if command is None:
            console.print("[red]Unrecognized answer. Try again.[/]")
            continue
        if command.type == "quit":
            console.print("\n[bold yellow]Leaving the quiz.[/]")
            exit_action = "quit"
            break
        selected = question.options[command.index or 0]
        record = engine.answer_question(selected.id)
        if record is not None:
            _render_feedback(console, record, show_trivia=show_trivia)

    result = engine.result()
    if exit_action == "completed":
        render_summary(console, result)
    return PlayOutcome(result, exit_action)


def _render_question(
    console: Console, engine: QuizEngine, question: Question
) -> None:
    header = Text.assemble(
        (f"Question {engine.session.position + 1}", "bold cyan"),
        (f" / {len(engine.session.questions)}", "dim"),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.prompt or "(no prompt)", style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Option")
    for index, piece in enumerate(question.options):
        table.add_row(
            option_key(index), Text(question.format.option_label(piece))
        )
    console.print(table)

    keys = ", ".join(option_key(i) for i in range(len(question.options)))
    console.print(
        Text(
            f"Correct so far {engine.session.correct_count} | "
            f"Answer with [{keys}] or q to quit",
            style="dim",
        )
    )


def _render_feedback(
    console: Console, record: AnswerRecord, *, show_trivia: bool
) -> None:
    piece = record.question.correct_answer
    if record.is_correct:
        console.print("[bold green]Correct![/]")
    else:
        label = escape(record.question.format.option_label(piece))
        console.print(f"[bold red]Incorrect.[/] The answer was [bold]{label}[/].")
    if show_trivia and piece.trivia:
        console.print(
            Panel(
                Text(piece.trivia),
                title=Text(piece.title),
                border_style="magenta",
            )
        )


def render_summary(console: Console, result: QuizResult) -> None:
    console.print()
    console.rule(Text("Quiz Summary", style="bold magenta"))

    overview = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD)
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Player", Text(result.nickname))
    overview.add_row("Category", Text(result.category))
    overview.add_row("Format", result.format.value)
    overview.add_row(
        "Correct", f"{result.correct_count} / {result.total_questions}"
    )
    overview.add_row("Accuracy", f"{result.accuracy * 100:.1f}%")
    overview.add_row("Time", f"{result.total_time:.1f}s")
    overview.add_row("Score", str(result.final_score))
    console.print(overview)

    answers = Table(title="Answers", box=box.SIMPLE, expand=True)
    answers.add_column("#", justify="right")
    answers.add_column("Piece", overflow="fold")
    answers.add_column("Composer")
    answers.add_column("Result", justify="center")
    for index, record in enumerate(result.history, start=1):
        piece = record.question.correct_answer
        answers.add_row(
            str(index),
            Text(piece.title),
            Text(piece.composer),
            "✅" if record.is_correct else "❌",
        )
    console.print(answers)
