"""
Brute force enumeration of every legal (origin, destination) pair.

Rather than asking the engine for its move list, every one of the 64 x 64 square pairs is tried against the
rules engine. Whatever the engine accepts is a move the next player can click on.
"""

from concurrent.futures import ThreadPoolExecutor
from string import ascii_lowercase

from issue_chess.core.exceptions import IllegalMoveError
from issue_chess.core.models import LegalFrontier, Square
from issue_chess.core.shared_types import Status
from issue_chess.rules.engine import BoardState, RulesEngine

BOARD_DIMENSIONS = (8, 8)

# a1, a2, ..., a8, b1, ..., h8  (file-major, then rank, both ascending)
SQUARES: list[Square] = [
    f"{file}{rank}"
    for file in ascii_lowercase[: BOARD_DIMENSIONS[0]]
    for rank in range(1, BOARD_DIMENSIONS[1] + 1)
]


def enumerate_frontier(
    engine: RulesEngine, state: BoardState, workers: int = 1
) -> LegalFrontier:
    """
    Map each origin square to the destinations the engine accepts, in square order.

    ---
    The board is snapshotted once. Every trial applies its move to that same snapshot, and the engine
    returns a new state instead of mutating, so trials share no mutable data and can run on threads.
    Origins without any legal destination are left out. A finished game has an empty frontier.
    """
    if engine.status(state) != Status.IN_PROGRESS:
        return {}

    snapshot = engine.snapshot(state)
    if workers <= 1:
        destinations = [_destinations_from(engine, snapshot, origin) for origin in SQUARES]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() hands results back in submission order: output does not depend on scheduling
            destinations = list(
                executor.map(
                    lambda origin: _destinations_from(engine, snapshot, origin), SQUARES
                )
            )

    return {
        origin: targets for origin, targets in zip(SQUARES, destinations) if targets
    }


def frontier_size(frontier: LegalFrontier) -> int:
    """Number of (origin, destination) pairs."""
    return sum(len(targets) for targets in frontier.values())


def _destinations_from(
    engine: RulesEngine, snapshot: BoardState, origin: Square
) -> list[Square]:
    """Trial every destination for one origin square. Self-pairs are never legal and get skipped."""
    accepted: list[Square] = []
    for destination in SQUARES:
        if destination == origin:
            continue
        try:
            engine.apply(snapshot, f"{origin}{destination}")
        except IllegalMoveError:
            continue
        accepted.append(destination)
    return accepted
