"""Orchestration of a single proposal: decode, load, check the turn, commit, summarise and render."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from issue_chess.api.models import (
    FrontierRow,
    GameStatsResponse,
    GameView,
    LeaderboardRow,
    NextMove,
    PlayedMoveResponse,
    PlayResponse,
    ProposalRequest,
)
from issue_chess.core.config import Settings, get_settings
from issue_chess.core.exceptions import (
    ConcurrencyConflictError,
    GameError,
    IllegalMoveError,
    LogUnavailableError,
    ParseError,
    RecordNotFoundError,
    StaleVersionError,
    StateLoadError,
    TurnConflictError,
)
from issue_chess.core.models import (
    Command,
    GameIdentity,
    GameStats,
    LegalFrontier,
    LogEntry,
    VersionToken,
)
from issue_chess.core.shared_types import STATUS_TEXT, CommandKind, Status
from issue_chess.db.proposal_log import ProposalLog
from issue_chess.db.store import GameStore
from issue_chess.rules.engine import BoardState, ChessEngine, RulesEngine
from issue_chess.rules.frontier import SQUARES, enumerate_frontier
from issue_chess.services.commands import decode_descriptor, format_descriptor
from issue_chess.services.history import (
    aggregate_stats,
    check_turn,
    leaderboard,
    recent_moves,
)

logger = logging.getLogger(__name__)

RECEIVED_REACTION = "rocket"
REJECTED_REACTION = "confused"

# Messages posted on a rejected proposal. Fields: author, move, path
ERROR_MESSAGES: dict[type[GameError], str] = {
    ParseError: "@{author} The game title or move was unable to be parsed.",
    StateLoadError: "@{author} Game data couldn't be loaded: {path}",
    IllegalMoveError: "@{author} Whaaa.. '{move}' is an invalid move! Usually this is because someone squeezed a move in just before you.",
    TurnConflictError: "@{author} Slow down! You _just_ moved, so can't immediately take the next turn. Invite a friend to take the next turn!",
    ConcurrencyConflictError: "@{author} Someone else moved at the same time as you. Have a look at the new board and try again.",
}
GAME_IN_PROGRESS_MESSAGE = "@{author} A game is already in progress. Finish it before starting a new one."
DONE_MESSAGE = "@{author} Done. Ask a friend to take the next move!"
NEW_GAME_MESSAGE = "@{author} A new game has started. White to move!"
GAME_OVER_MESSAGE = (
    "That's game over! Thank you for playing that chess game. That game had {moves} moves, "
    "{player_count} players, and went for {hours} hours.\n\nPlayers that game: {players}"
)
GAME_OVER_NO_HISTORY_MESSAGE = "That's game over! Thank you for playing that chess game."


@dataclass(frozen=True)
class ProposalContext:
    """Everything known about the proposal being handled. Passed along explicitly, never mutated."""

    entry_id: int
    descriptor: str
    author: str
    created_at: datetime

    @classmethod
    def from_request(cls, request: ProposalRequest) -> "ProposalContext":
        return cls(
            entry_id=request.entry_id,
            descriptor=request.descriptor,
            author=request.author,
            created_at=request.created_at or datetime.now(timezone.utc),
        )

    def as_log_entry(self) -> LogEntry:
        return LogEntry(
            id=self.entry_id,
            title=self.descriptor,
            author=self.author,
            created_at=self.created_at,
        )


class StateLoader:
    """Resolve the board to play on: resume the stored game or start a fresh one."""

    def __init__(self, store: GameStore, engine: RulesEngine, settings: Settings) -> None:
        self.store = store
        self.engine = engine
        self.path = settings.game_data_path

    def load(
        self, identity: GameIdentity, command: Command, privileged: bool
    ) -> tuple[BoardState, Optional[VersionToken]]:
        """
        Returns the board and the version it was read at (None for a fresh board that is not stored yet).

        ---
        A stored game is thrown away (compare-and-swap delete) when it is over, or when a privileged player
        asks for a new one.
        """
        stored = self.store.read(self.path)
        if stored is None:
            logger.info("No game stored at %s: starting %s", self.path, identity)
            return self.engine.new_game(), None

        state = self.engine.load(stored.content)
        wants_reset = privileged and command.kind == CommandKind.NEW
        if not wants_reset and self.engine.status(state) == Status.IN_PROGRESS:
            return state, stored.version

        logger.info("Discarding stored game at %s: starting %s", self.path, identity)
        try:
            self.store.delete(self.path, stored.version)
        except StaleVersionError as e:
            raise ConcurrencyConflictError(
                f"Stored game changed while starting a new one: {e}"
            ) from e
        except RecordNotFoundError:
            # someone else already removed it: the fresh board is still what we want
            pass
        return self.engine.new_game(), None


class MoveCommitter:
    """Apply one move and persist the result: the single point where the stored game changes."""

    def __init__(self, store: GameStore, engine: RulesEngine, settings: Settings) -> None:
        self.store = store
        self.engine = engine
        self.path = settings.game_data_path

    def commit(
        self,
        state: BoardState,
        version: Optional[VersionToken],
        move_notation: str,
    ) -> tuple[BoardState, VersionToken]:
        """
        1. rules engine applies the move (IllegalMoveError: nothing is written)
        2. conditional write against `version` (ConcurrencyConflictError: store unchanged, no retry)
        """
        new_state = self.engine.apply(state, move_notation)
        try:
            new_version = self.store.write(
                self.path, self.engine.encode(new_state), version
            )
        except StaleVersionError as e:
            raise ConcurrencyConflictError(str(e)) from e
        return new_state, new_version


class GameService:
    """Handle proposals end to end. The only place that notifies proposers."""

    def __init__(
        self,
        store: GameStore,
        log: ProposalLog,
        engine: Optional[RulesEngine] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.log = log
        self.engine = engine or ChessEngine()
        self.settings = settings or get_settings()
        self.loader = StateLoader(store, self.engine, self.settings)
        self.committer = MoveCommitter(store, self.engine, self.settings)

    def handle_proposal(self, request: ProposalRequest) -> PlayResponse:
        """
        Top-level handler
        ----

        Acknowledge the proposal, play it, then comment the outcome and close the entry.
        A rejected proposal gets a "confused" reaction, which keeps it out of the history of later scans.
        """
        context = ProposalContext.from_request(request)
        self.log.react(context.entry_id, RECEIVED_REACTION)

        try:
            view, message, accepted = self.play(context)
        except GameError as e:
            message = self._error_message(e, context)
            logger.warning("Rejected proposal %s (%r): %s", context.entry_id, context.descriptor, e)
            self._notify(context, message, rejected=True)
            return PlayResponse(entry_id=context.entry_id, accepted=False, message=message)

        self._notify(context, message, rejected=not accepted)
        return PlayResponse(
            entry_id=context.entry_id, accepted=accepted, message=message, view=view
        )

    def play(self, context: ProposalContext) -> tuple[GameView, str, bool]:
        """Returns the view for the next player, the message for this one and whether the proposal took effect."""
        command, identity = decode_descriptor(context.descriptor, str(context.entry_id))
        # history scans match titles by prefix, so the open proposal is recorded without stray whitespace
        context = replace(context, descriptor=format_descriptor(command, identity))
        privileged = context.author in self.settings.privileged_players
        state, version = self.loader.load(identity, command, privileged)
        history = self._history()

        if command.kind == CommandKind.NEW:
            if version is not None:
                # the stored game goes on: this entry must not become a new-game boundary
                view = self._build_view(identity, state, history, None, None)
                return view, GAME_IN_PROGRESS_MESSAGE.format(author=context.author), False
            view = self._build_view(identity, state, history, context, None)
            return view, NEW_GAME_MESSAGE.format(author=context.author), True

        check_turn(history, context.author, identity)
        state, _ = self.committer.commit(state, version, command.move_notation)
        logger.info(
            "%s played %s in %s", context.author, command.move_notation, identity
        )

        message = DONE_MESSAGE.format(author=context.author)
        stats = None
        status = self.engine.status(state)
        if status != Status.IN_PROGRESS:
            logger.info("Game over in %s: %s", identity, status)
            if history is not None:
                stats = aggregate_stats([context.as_log_entry(), *history], identity)
            message = f"{message}\n\n{self._game_over_message(stats)}"
        view = self._build_view(identity, state, history, context, stats)
        return view, message, True

    # -- Internal helpers --
    def _history(self) -> Optional[list[LogEntry]]:
        """Past proposals, newest first. None when the log cannot be read: play goes on without history."""
        try:
            return self.log.list_entries(
                state=self.settings.history_state, exclude_confused=True
            )
        except LogUnavailableError as e:
            logger.warning("History unavailable, continuing without it: %s", e)
            return None

    def _build_view(
        self,
        identity: GameIdentity,
        state: BoardState,
        history: Optional[list[LogEntry]],
        context: Optional[ProposalContext],
        stats: Optional[GameStats],
    ) -> GameView:
        status = self.engine.status(state)
        frontier = enumerate_frontier(self.engine, state, self.settings.frontier_workers)

        entries = history or []
        if history is not None and context is not None:
            # the current proposal is still open, so not part of the listed history yet
            entries = [context.as_log_entry(), *entries]

        return GameView(
            game=identity.namespace,
            sequence=identity.sequence,
            status=status,
            status_text=STATUS_TEXT[status],
            active_color=self.engine.active_color(state),
            board={square: self.engine.piece_at(state, square) for square in SQUARES},
            legal_moves=self._frontier_rows(identity, frontier),
            recent_moves=[
                PlayedMoveResponse(
                    from_square=move.from_square,
                    to_square=move.to_square,
                    author=move.author,
                )
                for move in recent_moves(
                    entries, identity, self.settings.recent_moves_limit + 1
                )
            ],
            leaderboard=[
                LeaderboardRow(author=author, moves=moves)
                for author, moves in leaderboard(
                    entries,
                    identity,
                    self.settings.leaderboard_limit,
                    exclude=self.settings.privileged_players,
                )
            ],
            stats=self._stats_response(stats) if stats is not None else None,
            history_available=history is not None,
        )

    def _frontier_rows(
        self, identity: GameIdentity, frontier: LegalFrontier
    ) -> list[FrontierRow]:
        return [
            FrontierRow(
                from_square=origin,
                to_squares=[
                    NextMove(
                        to_square=destination,
                        descriptor=identity.move_descriptor(f"{origin}{destination}"),
                    )
                    for destination in destinations
                ],
            )
            for origin, destinations in frontier.items()
        ]

    def _stats_response(self, stats: GameStats) -> GameStatsResponse:
        return GameStatsResponse(
            move_count=stats.move_count,
            players=sorted(stats.players),
            hours=stats.hours,
            start_time=stats.start_time,
            end_time=stats.end_time,
        )

    def _game_over_message(self, stats: Optional[GameStats]) -> str:
        if stats is None:
            return GAME_OVER_NO_HISTORY_MESSAGE
        return GAME_OVER_MESSAGE.format(
            moves=stats.move_count,
            player_count=len(stats.players),
            hours=stats.hours,
            players=", ".join(sorted(stats.players)),
        )

    def _error_message(self, error: GameError, context: ProposalContext) -> str:
        template = ERROR_MESSAGES.get(type(error), "@{author} {error}")
        return template.format(
            author=context.author,
            move=context.as_log_entry().move_notation,
            path=self.settings.game_data_path,
            error=error,
        )

    def _notify(self, context: ProposalContext, message: str, rejected: bool) -> None:
        if rejected:
            self.log.react(context.entry_id, REJECTED_REACTION)
        self.log.comment(context.entry_id, message)
        self.log.close_entry(context.entry_id)
