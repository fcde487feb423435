"""Requests and Response models"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from issue_chess.core.shared_types import Color, Status

Square = str
PlayerName = str


# --- REQUEST MODELS ---
class ProposalRequest(BaseModel):
    """A new log entry proposing an action: its id, title (the descriptor) and author."""

    entry_id: int
    descriptor: str
    author: PlayerName
    created_at: Optional[datetime] = None

    @field_validator("author")
    @classmethod
    def validate_author(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("A proposal needs an author.")
        return value.strip()


# --- RESPONSE MODELS ---
class NextMove(BaseModel):
    to_square: Square
    # descriptor to submit to play this move
    descriptor: str


class FrontierRow(BaseModel):
    from_square: Square
    to_squares: list[NextMove]


class PlayedMoveResponse(BaseModel):
    from_square: Square
    to_square: Square
    author: PlayerName


class LeaderboardRow(BaseModel):
    author: PlayerName
    moves: int


class GameStatsResponse(BaseModel):
    move_count: int
    players: list[PlayerName]
    hours: int
    start_time: Optional[datetime]
    end_time: Optional[datetime]


class GameView(BaseModel):
    """Everything needed to render the board for the next proposer."""

    game: str
    sequence: str
    status: Status
    status_text: str
    active_color: Color
    # square -> FEN letter of the piece on it (None when empty)
    board: dict[Square, Optional[str]]
    legal_moves: list[FrontierRow]
    recent_moves: list[PlayedMoveResponse]
    leaderboard: list[LeaderboardRow]
    stats: Optional[GameStatsResponse] = None
    history_available: bool = True


class PlayResponse(BaseModel):
    entry_id: int
    accepted: bool
    message: str
    view: Optional[GameView] = None
