"""Application configuration: environment-driven settings via pydantic-settings.

Services receive a Settings value explicitly; `get_settings()` only provides the process default.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from ISSUE_CHESS_* environment variables (or a .env file)."""

    model_config = SettingsConfigDict(
        env_prefix="ISSUE_CHESS_", env_file=".env", case_sensitive=False
    )

    # Database backing both the Store and the Log
    database_url: str = "sqlite:///issue_chess.db"
    database_echo: bool = False

    # Where the game encoding lives in the Store
    game_data_path: str = "chess_games/chess.pgn"

    # Players allowed to reset a game that is still in progress
    privileged_players: list[str] = []

    # Which log entries count as history ("closed", "open" or "all")
    history_state: str = "closed"

    # Rendering
    recent_moves_limit: int = 4
    leaderboard_limit: int = 20

    # Threads used to enumerate the legal move frontier (1 = sequential)
    frontier_workers: int = 1

    @field_validator("history_state")
    @classmethod
    def validate_history_state(cls, value: str) -> str:
        if value not in ("closed", "open", "all"):
            raise ValueError(f"history_state must be closed, open or all. Got {value!r}")
        return value

    @field_validator("frontier_workers")
    @classmethod
    def validate_frontier_workers(cls, value: int) -> int:
        if value < 1:
            raise ValueError("frontier_workers must be at least 1")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
