"""Unit tests for issue_chess/api/models.py"""

import pytest
from pydantic import ValidationError

from issue_chess.api.models import GameView, ProposalRequest
from issue_chess.core.shared_types import Color, Status


def test_proposal_request() -> None:
    request = ProposalRequest(entry_id=3, descriptor="chess|move|e2e4|1", author=" alice ")
    assert request.author == "alice"
    assert request.created_at is None


def test_proposal_needs_author() -> None:
    with pytest.raises(ValidationError):
        ProposalRequest(entry_id=3, descriptor="chess|new", author="   ")


def test_game_view_serializes() -> None:
    view = GameView(
        game="chess",
        sequence="1",
        status=Status.IN_PROGRESS,
        status_text="Game is in progress.",
        active_color=Color.WHITE,
        board={"a1": "R", "a3": None},
        legal_moves=[],
        recent_moves=[],
        leaderboard=[],
    )
    dumped = view.model_dump(mode="json")
    assert dumped["status"] == "in_progress"
    assert dumped["active_color"] == "white"
    assert dumped["board"] == {"a1": "R", "a3": None}
    assert dumped["stats"] is None
    assert dumped["history_available"] is True
