"""
Boundary layer data model(s).

These objects are passed between the services, the rules engine and the Store / Log collaborators.
None of them outlive a single proposal: everything durable lives in the Store or the Log.
"""

from dataclasses import dataclass, field
from datetime import datetime

from issue_chess.core.shared_types import CommandKind

# Type aliases to make the models easier to read
VersionToken = str
Square = str
PlayerName = str

# origin square -> destination squares, in the order they were found
LegalFrontier = dict[Square, list[Square]]

DESCRIPTOR_SEPARATOR = "|"


@dataclass(frozen=True)
class GameIdentity:
    """Identifies one game among possibly many sharing the same log."""

    namespace: str
    sequence: str

    @property
    def new_game_prefix(self) -> str:
        return f"{self.namespace}{DESCRIPTOR_SEPARATOR}{CommandKind.NEW}"

    @property
    def move_prefix(self) -> str:
        return f"{self.namespace}{DESCRIPTOR_SEPARATOR}{CommandKind.MOVE}{DESCRIPTOR_SEPARATOR}"

    def move_descriptor(self, move_notation: str) -> str:
        """The descriptor a proposer submits to play `move_notation` in this game."""
        return DESCRIPTOR_SEPARATOR.join(
            [self.namespace, CommandKind.MOVE, move_notation, self.sequence]
        )


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    move_notation: str
    sequence: str


@dataclass(frozen=True)
class StoredBlob:
    """Bytes read from the Store, plus the version needed to replace them."""

    content: bytes
    version: VersionToken


@dataclass(frozen=True)
class LogEntry:
    """One proposal in the log. Only the Log itself ever changes `closed` / the reaction counts."""

    id: int
    title: str
    author: PlayerName
    created_at: datetime
    closed: bool = False
    confused_reaction_count: int = 0

    def is_new_game_boundary(self, identity: GameIdentity) -> bool:
        return self.title.startswith(identity.new_game_prefix)

    def is_move_record(self, identity: GameIdentity) -> bool:
        return self.title.startswith(identity.move_prefix)

    @property
    def move_notation(self) -> str:
        """Third descriptor field (empty if the title has none)."""
        fields = self.title.split(DESCRIPTOR_SEPARATOR)
        return fields[2].strip() if len(fields) > 2 else ""


@dataclass
class GameStats:
    move_count: int = 0
    players: set[PlayerName] = field(default_factory=set)
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def hours(self) -> int:
        """Whole hours between first and last move (0 without moves)."""
        if self.start_time is None or self.end_time is None:
            return 0
        return int(abs((self.end_time - self.start_time).total_seconds())) // 3600
