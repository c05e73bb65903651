from __future__ import annotations

import pytest
from rich.console import Console

from classical_quiz import cli
from classical_quiz.settings import CONFIG_FILENAME
from fixtures import FakeResponse, FakeSession, sample_pieces

CATALOG_URL = "http://catalog.test"
RANKING_URL = "http://rank.test"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch) -> None:
    for key in (
        "CLASSICAL_QUIZ_HOME",
        "CLASSICAL_QUIZ_CONFIG",
        "CLASSICAL_QUIZ_CATALOG_URL",
        "CLASSICAL_QUIZ_RANKING_URL",
        "CLASSICAL_QUIZ_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def console() -> Console:
    return Console(record=True, width=120, color_system=None)


def _run(tmp_path, console, *argv, session=None, provider=None) -> int:
    args = [
        *argv,
        "--workspace",
        str(tmp_path / "ws"),
        "--catalog-url",
        CATALOG_URL,
        "--ranking-url",
        RANKING_URL,
    ]
    return cli.main(
        args,
        console=console,
        input_provider=provider,
        http_session=session,
    )


def _catalog_payload() -> list[dict[str, str]]:
    return [piece.to_record() for piece in sample_pieces()]


def test_init_creates_workspace(tmp_path, console) -> None:
    code = cli.main(["init", "--workspace", str(tmp_path / "ws")], console=console)

    assert code == 0
    assert (tmp_path / "ws" / "state").is_dir()
    assert "Workspace ready" in console.export_text()


def test_config_init_writes_template_once(tmp_path, console, capsys) -> None:
    assert _run(tmp_path, console, "config", "init") == 0
    target = tmp_path / "ws" / "config" / CONFIG_FILENAME
    assert "[catalog]" in target.read_text(encoding="utf-8")

    assert _run(tmp_path, console, "config", "init") == 1
    assert "already exists" in capsys.readouterr().err
    assert _run(tmp_path, console, "config", "init", "--force") == 0


def test_invalid_config_exits_with_usage_code(tmp_path, console, capsys) -> None:
    bad = tmp_path / "bad.toml"
    bad.write_text("[quiz]\ndefault_count = -1\n", encoding="utf-8")

    code = _run(tmp_path, console, "language", "--config", str(bad))

    assert code == 2
    assert "positive integer" in capsys.readouterr().err


def test_language_persists_and_drives_catalog_url(tmp_path, console) -> None:
    assert _run(tmp_path, console, "language") == 0
    assert console.export_text().strip() == "ja"

    assert _run(tmp_path, console, "language", "en") == 0

    session = FakeSession().respond(_catalog_payload())
    assert _run(tmp_path, console, "catalog", session=session) == 0
    assert session.calls[0].url == f"{CATALOG_URL}/music.en.json"


def test_catalog_lists_filtered_pieces(tmp_path, console) -> None:
    session = FakeSession().respond(_catalog_payload())

    code = _run(tmp_path, console, "catalog", "--category", "Beethoven", session=session)

    text = console.export_text()
    assert code == 0
    assert "fur_elise" in text
    assert "symphony_5_beethoven" in text
    assert "canon" not in text


def test_catalog_composer_counts(tmp_path, console) -> None:
    session = FakeSession().respond(_catalog_payload())

    code = _run(tmp_path, console, "catalog", "--composers", session=session)

    text = console.export_text()
    assert code == 0
    assert "Beethoven" in text
    assert "Satie" in text


def test_catalog_failure_reports_error(tmp_path, console, capsys) -> None:
    session = FakeSession().queue(FakeResponse(status_code=404))

    code = _run(tmp_path, console, "catalog", session=session)

    assert code == 1
    assert "Failed to fetch music data for ja" in capsys.readouterr().err


def test_play_rejects_bad_nickname(tmp_path, console, capsys) -> None:
    session = FakeSession()

    code = _run(tmp_path, console, "play", "--nickname", "<b>hi</b>", session=session)

    assert code == 2
    assert "invalid characters" in capsys.readouterr().err
    assert session.calls == []


def test_play_rejects_bad_count(tmp_path, console, capsys) -> None:
    code = _run(
        tmp_path, console, "play", "--nickname", "Clara", "--count", "zero",
        session=FakeSession(),
    )

    assert code == 2
    assert "Question count" in capsys.readouterr().err


def test_play_and_submit(tmp_path, console) -> None:
    session = FakeSession().respond(_catalog_payload())
    session.respond({"data": {"rank": 4, "nickname": "Clara", "score": 1000}})

    code = _run(
        tmp_path,
        console,
        "play",
        "--nickname",
        "  Clara ",
        "--format",
        "title-to-composer",
        "--count",
        "2",
        "--submit",
        "--no-trivia",
        session=session,
        provider=lambda: "A",
    )

    assert code == 0
    post = session.calls[1]
    assert post.method == "POST"
    assert post.url == f"{RANKING_URL}/api/ranking"
    body = post.kwargs["json"]
    assert body["nickname"] == "Clara"
    assert body["region"] == "all"
    assert body["format"] == "title-to-composer"
    assert 0 <= body["score"] <= 2000
    text = console.export_text()
    assert "Quiz Summary" in text
    assert "Ranked #4" in text
    assert (tmp_path / "ws" / "logs" / "classical_quiz.log").exists()


def test_play_empty_category(tmp_path, console) -> None:
    session = FakeSession().respond(_catalog_payload())

    code = _run(
        tmp_path, console, "play", "--nickname", "Clara", "--category", "Mahler",
        session=session, provider=lambda: "A",
    )

    assert code == 1
    assert "No pieces match" in console.export_text()


def test_ranking_table(tmp_path, console) -> None:
    session = FakeSession().respond(
        {"ranking": [{"rank": 1, "nickname": "Player1", "score": 9500}]}
    )

    code = _run(
        tmp_path, console, "ranking", "--type", "all_time", "--category", "Chopin",
        session=session,
    )

    assert code == 0
    assert session.calls[0].kwargs["params"]["type"] == "all_time"
    assert "Player1" in console.export_text()


def test_ranking_failure(tmp_path, console, capsys) -> None:
    session = FakeSession().respond({"error": "Database unavailable"}, status_code=503)

    assert _run(tmp_path, console, "ranking", session=session) == 1
    assert "Database unavailable" in capsys.readouterr().err


def test_catalog_and_ranking_render_bracketed_text(tmp_path, console) -> None:
    record = sample_pieces()[0].to_record()
    record["title"] = "[/b]Moonlight"
    session = FakeSession().respond([record])
    session.respond(
        {"ranking": [{"rank": 1, "nickname": "[/x]Bob", "score": 10}]}
    )

    assert _run(tmp_path, console, "catalog", session=session) == 0
    code = _run(
        tmp_path, console, "ranking", "--category", "[/all]", session=session
    )
    assert code == 0

    text = console.export_text()
    assert "[/b]Moonlight" in text
    assert "[/x]Bob" in text
