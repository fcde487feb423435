"""
Everything derived from the proposal log.

All scans walk the entries newest first and stop at the most recent new-game boundary, so they only see the
current game. The log is eventually consistent: a scan can miss proposals still in flight.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional

from issue_chess.core.exceptions import TurnConflictError
from issue_chess.core.models import GameIdentity, GameStats, LogEntry, PlayerName


@dataclass(frozen=True)
class PlayedMove:
    from_square: str
    to_square: str
    author: PlayerName


def current_game(
    entries: Iterable[LogEntry], identity: GameIdentity
) -> list[LogEntry]:
    """Move records of the current game, newest first."""
    moves: list[LogEntry] = []
    for entry in entries:
        if entry.is_new_game_boundary(identity):
            break
        if entry.is_move_record(identity):
            moves.append(entry)
    return moves


def check_turn(
    entries: Optional[Iterable[LogEntry]], proposer: PlayerName, identity: GameIdentity
) -> None:
    """
    Refuse a proposer who also made the previous move of this game.
    ----

    Only the nearest prior move record matters: the scan stops at the first move by somebody else
    (the proposer is cleared) or at the new-game boundary.

    NOTE this is a heuristic. The log may lag behind the Store, so two quick moves by the same player can both
    pass. Correctness of the board never depends on it: that is the compare-and-swap commit's job.
    Without history (`entries is None`) nobody is refused.
    """
    if entries is None:
        return

    for entry in entries:
        if entry.is_new_game_boundary(identity):
            return
        if not entry.is_move_record(identity):
            continue
        if entry.author == proposer:
            raise TurnConflictError(
                f"{proposer} made the previous move. Someone else has to take this turn."
            )
        return


def aggregate_stats(entries: Iterable[LogEntry], identity: GameIdentity) -> GameStats:
    """
    Move count, distinct players and duration of the current game.

    start_time is the earliest move, end_time the latest, whatever order the entries come in.
    """
    stats = GameStats()
    for entry in current_game(entries, identity):
        stats.move_count += 1
        stats.players.add(entry.author)
        if stats.start_time is None or entry.created_at < stats.start_time:
            stats.start_time = entry.created_at
        if stats.end_time is None or entry.created_at > stats.end_time:
            stats.end_time = entry.created_at
    return stats


def recent_moves(
    entries: Iterable[LogEntry], identity: GameIdentity, limit: int
) -> list[PlayedMove]:
    """The last `limit` moves of this game, newest first."""
    return [
        PlayedMove(
            from_square=entry.move_notation[:2],
            to_square=entry.move_notation[2:4],
            author=entry.author,
        )
        for entry in current_game(entries, identity)[:limit]
    ]


def leaderboard(
    entries: Iterable[LogEntry],
    identity: GameIdentity,
    limit: int,
    exclude: Iterable[PlayerName] = (),
) -> list[tuple[PlayerName, int]]:
    """Most moves across all games (not just the current one). Ties are listed alphabetically."""
    excluded = set(exclude)
    counts = Counter(
        entry.author
        for entry in entries
        if entry.is_move_record(identity) and entry.author not in excluded
    )
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:limit]
