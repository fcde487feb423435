"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in_progress"
    WHITE_WON = "white_won"
    BLACK_WON = "black_won"
    WHITE_WON_RESIGN = "white_won_resign"
    BLACK_WON_RESIGN = "black_won_resign"
    STALEMATE = "stalemate"
    INSUFFICIENT_MATERIAL = "insufficient_material"
    FIFTY_RULE_MOVE = "fifty_rule_move"
    THREEFOLD_REPETITION = "threefold_repetition"
    UNKNOWN = "unknown"


# Human readable description of each status, shown next to the board.
STATUS_TEXT: dict[Status, str] = {
    Status.IN_PROGRESS: "Game is in progress.",
    Status.WHITE_WON: "Game won by white with a checkmate.",
    Status.BLACK_WON: "Game won by black with a checkmate.",
    Status.WHITE_WON_RESIGN: "Game won by white by resign.",
    Status.BLACK_WON_RESIGN: "Game won by black by resign.",
    Status.STALEMATE: "Game was a draw due to stalemate.",
    Status.INSUFFICIENT_MATERIAL: "Game was a draw due to insufficient material to checkmate.",
    Status.FIFTY_RULE_MOVE: "Game was a draw due to the fifty move rule.",
    Status.THREEFOLD_REPETITION: "Game was a draw due to threefold repetition.",
    Status.UNKNOWN: "Game terminated. Something went wrong.",
}


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class CommandKind(StrEnum):
    NEW = "new"
    MOVE = "move"
