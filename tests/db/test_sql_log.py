"""Unit tests for issue_chess/db/sql_log.py"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from issue_chess.core.exceptions import LogUnavailableError, RecordNotFoundError
from issue_chess.core.models import LogEntry
from issue_chess.db.sql_log import SQLProposalLog

START = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_create_entry(db_session_repo: Session) -> None:
    log = SQLProposalLog(db_session_repo)
    entry = log.create_entry("chess|new", "", "alice", created_at=START)

    assert isinstance(entry, LogEntry)
    assert entry.title == "chess|new"
    assert entry.author == "alice"
    assert entry.created_at == START
    assert entry.closed is False
    assert entry.confused_reaction_count == 0


def test_list_newest_first(db_session_repo: Session) -> None:
    log = SQLProposalLog(db_session_repo)
    for minutes, title in enumerate(["chess|new", "chess|move|e2e4|1", "chess|move|e7e5|1"]):
        entry = log.create_entry(title, "", "alice", created_at=START + timedelta(minutes=minutes))
        log.close_entry(entry.id)

    titles = [entry.title for entry in log.list_entries()]
    assert titles == ["chess|move|e7e5|1", "chess|move|e2e4|1", "chess|new"]


def test_list_by_state(db_session_repo: Session) -> None:
    log = SQLProposalLog(db_session_repo)
    closed = log.create_entry("chess|new", "", "alice", created_at=START)
    log.close_entry(closed.id)
    log.create_entry("chess|move|e2e4|1", "", "bob", created_at=START + timedelta(minutes=1))

    assert [entry.title for entry in log.list_entries("closed")] == ["chess|new"]
    assert [entry.title for entry in log.list_entries("open")] == ["chess|move|e2e4|1"]
    assert len(log.list_entries("all")) == 2


def test_confused_entries_filtered(db_session_repo: Session) -> None:
    log = SQLProposalLog(db_session_repo)
    entry = log.create_entry("chess|move|e2e5|1", "", "bob", created_at=START)
    log.react(entry.id, "rocket")
    log.react(entry.id, "confused")
    log.close_entry(entry.id)

    assert log.list_entries() == []
    unfiltered = log.list_entries(exclude_confused=False)
    assert len(unfiltered) == 1
    assert unfiltered[0].confused_reaction_count == 1


def test_comments(db_session_repo: Session) -> None:
    log = SQLProposalLog(db_session_repo)
    entry = log.create_entry("chess|new", "", "alice", created_at=START)
    log.comment(entry.id, "first")
    log.comment(entry.id, "second")
    assert log.comments(entry.id) == ["first", "second"]


def test_get_entry(db_session_repo: Session) -> None:
    log = SQLProposalLog(db_session_repo)
    entry = log.create_entry("chess|new", "", "alice", created_at=START)
    log.close_entry(entry.id)

    found = log.get_entry(entry.id)
    assert found is not None
    assert found.closed is True
    assert log.get_entry(entry.id + 1) is None


def test_unknown_entry(db_session_repo: Session) -> None:
    log = SQLProposalLog(db_session_repo)
    with pytest.raises(RecordNotFoundError):
        log.close_entry(42)
    with pytest.raises(RecordNotFoundError):
        log.comment(42, "hello?")
    with pytest.raises(RecordNotFoundError):
        log.react(42, "rocket")


def test_listing_failure_reported_as_unavailable(db_session_repo: Session) -> None:
    log = SQLProposalLog(db_session_repo)
    with patch.object(
        db_session_repo, "scalars", side_effect=OperationalError("SELECT", {}, Exception("down"))
    ):
        with pytest.raises(LogUnavailableError):
            log.list_entries()
