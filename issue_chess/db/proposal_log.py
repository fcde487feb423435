"""Protocol of the append-only proposal log (one entry per proposed action)."""

from typing import Literal, Protocol

from issue_chess.core.models import LogEntry

EntryState = Literal["open", "closed", "all"]


class ProposalLog(Protocol):
    """
    Entries are only ever appended, closed, commented on or reacted to.

    The services read the log to make decisions; the write operations are only used to notify proposers.
    """

    def list_entries(
        self, state: EntryState = "closed", exclude_confused: bool = True
    ) -> list[LogEntry]:
        """Entries newest first. Raises LogUnavailableError when the log cannot be read."""
        ...

    def create_entry(self, title: str, body: str, author: str) -> LogEntry:
        """Append a new (open) entry."""
        ...

    def close_entry(self, entry_id: int) -> None: ...

    def comment(self, entry_id: int, text: str) -> None: ...

    def react(self, entry_id: int, kind: str) -> None: ...
