"""
The rules engine is the only place that knows chess.

Legality, board representation and move notation are delegated to python-chess.
The rest of the code base only sees an opaque BoardState and the RulesEngine protocol below.
"""

import io
from dataclasses import dataclass
from typing import Optional, Protocol

import chess
import chess.pgn

from issue_chess.core.exceptions import IllegalMoveError, StateLoadError
from issue_chess.core.shared_types import Color, Status

RESIGN = "resign"
RESIGN_TERMINATION = "resign"
FIFTY_MOVE_HALFMOVES = 100

# python-chess terminations -> the statuses we report
TERMINATION_STATUS: dict[chess.Termination, Status] = {
    chess.Termination.STALEMATE: Status.STALEMATE,
    chess.Termination.INSUFFICIENT_MATERIAL: Status.INSUFFICIENT_MATERIAL,
    chess.Termination.FIFTY_MOVES: Status.FIFTY_RULE_MOVE,
    chess.Termination.SEVENTYFIVE_MOVES: Status.FIFTY_RULE_MOVE,
    chess.Termination.THREEFOLD_REPETITION: Status.THREEFOLD_REPETITION,
    chess.Termination.FIVEFOLD_REPETITION: Status.THREEFOLD_REPETITION,
}


@dataclass(frozen=True)
class BoardState:
    """
    Snapshot of a game.

    The engine never mutates `board` in place: every move produces a new BoardState.
    `resigned` records the color that gave up (None while nobody did).
    """

    board: chess.Board
    resigned: Optional[Color] = None


class RulesEngine(Protocol):
    """Everything the services need from a chess implementation."""

    def new_game(self) -> BoardState: ...
    def load(self, encoding: bytes) -> BoardState: ...
    def apply(self, state: BoardState, move_notation: str) -> BoardState: ...
    def encode(self, state: BoardState) -> bytes: ...
    def snapshot(self, state: BoardState) -> BoardState: ...
    def status(self, state: BoardState) -> Status: ...
    def active_color(self, state: BoardState) -> Color: ...
    def piece_at(self, state: BoardState, square: str) -> Optional[str]: ...


class ChessEngine:
    """RulesEngine backed by python-chess. Persisted encoding is PGN text."""

    def new_game(self) -> BoardState:
        return BoardState(chess.Board())

    def load(self, encoding: bytes) -> BoardState:
        """Rebuild a game (including its move stack) from stored PGN."""
        try:
            pgn_text = encoding.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StateLoadError(f"Stored game is not valid UTF-8: {e}") from e

        game = chess.pgn.read_game(io.StringIO(pgn_text))
        if game is None:
            raise StateLoadError("Stored game does not contain a PGN game.")
        if game.errors:
            raise StateLoadError(f"Stored game could not be replayed: {game.errors[0]}")

        resigned = None
        if game.headers.get("Termination") == RESIGN_TERMINATION:
            result = game.headers.get("Result")
            if result == "1-0":
                resigned = Color.BLACK
            elif result == "0-1":
                resigned = Color.WHITE
        return BoardState(game.end().board(), resigned)

    def apply(self, state: BoardState, move_notation: str) -> BoardState:
        """
        Play a move on a copy of the board.

        Accepted notations:
        * coordinates: "e2e4", "e7e8q" (a pawn reaching the last rank without a piece letter becomes a queen)
        * standard algebraic notation: "Nf3", "exd5", "O-O"
        * "resign": the side to move gives up
        """
        if state.resigned is not None:
            raise IllegalMoveError(f"Game is over, {state.resigned} resigned.")

        if move_notation.strip().lower() == RESIGN:
            return BoardState(state.board.copy(), self.active_color(state))

        move = self._parse_move(state.board, move_notation.strip())
        board = state.board.copy()
        board.push(move)
        return BoardState(board)

    def encode(self, state: BoardState) -> bytes:
        game = chess.pgn.Game.from_board(state.board)
        if state.resigned is not None:
            game.headers["Result"] = "0-1" if state.resigned == Color.WHITE else "1-0"
            game.headers["Termination"] = RESIGN_TERMINATION
        return str(game).encode("utf-8")

    def snapshot(self, state: BoardState) -> BoardState:
        """Lightweight copy without the move stack. Enough to test legality, not to detect repetition."""
        return BoardState(state.board.copy(stack=False), state.resigned)

    def status(self, state: BoardState) -> Status:
        if state.resigned == Color.WHITE:
            return Status.BLACK_WON_RESIGN
        if state.resigned == Color.BLACK:
            return Status.WHITE_WON_RESIGN

        board = state.board
        outcome = board.outcome(claim_draw=False)
        if outcome is not None:
            if outcome.termination == chess.Termination.CHECKMATE:
                return Status.WHITE_WON if outcome.winner == chess.WHITE else Status.BLACK_WON
            return TERMINATION_STATUS.get(outcome.termination, Status.UNKNOWN)

        # claimable draws end the game once reached, not one move ahead of it
        if board.is_repetition(3):
            return Status.THREEFOLD_REPETITION
        if board.halfmove_clock >= FIFTY_MOVE_HALFMOVES:
            return Status.FIFTY_RULE_MOVE
        return Status.IN_PROGRESS

    def active_color(self, state: BoardState) -> Color:
        return Color.WHITE if state.board.turn == chess.WHITE else Color.BLACK

    def piece_at(self, state: BoardState, square: str) -> Optional[str]:
        """FEN letter of the piece on the square (uppercase = white), None if empty."""
        piece = state.board.piece_at(chess.parse_square(square))
        return piece.symbol() if piece else None

    # -- PRIVATE HELPERS ---
    def _parse_move(self, board: chess.Board, notation: str) -> chess.Move:
        try:
            move = chess.Move.from_uci(notation)
        except ValueError:
            move = None

        if move is not None:
            if board.is_legal(move) and not self._is_rook_square_castling(board, move):
                return move
            if move.promotion is None:
                queen_promotion = chess.Move(
                    move.from_square, move.to_square, promotion=chess.QUEEN
                )
                if board.is_legal(queen_promotion):
                    return queen_promotion
            raise IllegalMoveError(f"Move not allowed: {notation}")

        try:
            return board.parse_san(notation)
        except ValueError as e:
            raise IllegalMoveError(f"Move not allowed: {notation}") from e

    @staticmethod
    def _is_rook_square_castling(board: chess.Board, move: chess.Move) -> bool:
        """Castling written as king-takes-rook ("e1h1"). Only the king's destination ("e1g1") is accepted."""
        return board.is_castling(move) and chess.square_distance(move.from_square, move.to_square) != 2
