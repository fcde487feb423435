"""Unit tests for issue_chess/core/models.py and issue_chess/core/config.py"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from issue_chess.core.config import Settings
from issue_chess.core.models import GameIdentity, GameStats, LogEntry

IDENTITY = GameIdentity(namespace="chess", sequence="7")
NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def entry(title: str) -> LogEntry:
    return LogEntry(id=1, title=title, author="alice", created_at=NOW)


def test_move_descriptor() -> None:
    assert IDENTITY.move_descriptor("e2e4") == "chess|move|e2e4|7"


@pytest.mark.parametrize(
    "title, is_boundary, is_move",
    [
        ("chess|new", True, False),
        ("chess|new||3", True, False),
        ("chess|move|e2e4|7", False, True),
        ("chess|move|e2e4", False, True),
        ("checkers|move|e2e4|7", False, False),
        ("Bug report: board not updating", False, False),
    ],
)
def test_entry_classification(title: str, is_boundary: bool, is_move: bool) -> None:
    assert entry(title).is_new_game_boundary(IDENTITY) is is_boundary
    assert entry(title).is_move_record(IDENTITY) is is_move


def test_entry_move_notation() -> None:
    assert entry("chess|move|e2e4|7").move_notation == "e2e4"
    assert entry("chess|new").move_notation == ""


def test_stats_hours() -> None:
    stats = GameStats(start_time=NOW, end_time=NOW + timedelta(hours=5, minutes=59))
    assert stats.hours == 5
    assert GameStats().hours == 0


def test_settings_validation() -> None:
    with pytest.raises(ValidationError):
        Settings(history_state="deleted")
    with pytest.raises(ValidationError):
        Settings(frontier_workers=0)


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ISSUE_CHESS_GAME_DATA_PATH", "games/current.pgn")
    monkeypatch.setenv("ISSUE_CHESS_PRIVILEGED_PLAYERS", '["admin", "owner"]')
    settings = Settings()
    assert settings.game_data_path == "games/current.pgn"
    assert settings.privileged_players == ["admin", "owner"]
