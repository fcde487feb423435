"""Implementation of the ProposalLog using SQLAlchemy"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from issue_chess.core.exceptions import LogUnavailableError, RecordNotFoundError
from issue_chess.core.models import LogEntry
from issue_chess.db.proposal_log import EntryState
from issue_chess.db.schema import DBComment, DBLogEntry, utc_now

logger = logging.getLogger(__name__)

CONFUSED = "confused"


class SQLProposalLog:
    """Log entries, comments and reactions stored in SQL tables."""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def list_entries(
        self, state: EntryState = "closed", exclude_confused: bool = True
    ) -> list[LogEntry]:
        """Entries newest first, optionally leaving out entries someone reacted 'confused' to."""
        query = select(DBLogEntry).order_by(
            DBLogEntry.created_at.desc(), DBLogEntry.id.desc()
        )
        if state != "all":
            query = query.where(DBLogEntry.closed == (state == "closed"))

        try:
            records = self.db.scalars(query).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning("Listing log entries failed: %s", e)
            raise LogUnavailableError(f"Could not list log entries: {e}") from e

        entries = [self._to_model(record) for record in records]
        if exclude_confused:
            entries = [entry for entry in entries if entry.confused_reaction_count == 0]
        return entries

    def create_entry(
        self, title: str, body: str, author: str, created_at: datetime | None = None
    ) -> LogEntry:
        """Append a new (open) entry."""
        record = DBLogEntry(
            title=title,
            body=body,
            author=author,
            closed=False,
            reactions={},
            created_at=created_at or utc_now(),
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return self._to_model(record)

    def get_entry(self, entry_id: int) -> LogEntry | None:
        record = self.db.get(DBLogEntry, entry_id)
        if record:
            return self._to_model(record)
        return None

    def comments(self, entry_id: int) -> list[str]:
        return [comment.text for comment in self._fetch_entry(entry_id).comments]

    def close_entry(self, entry_id: int) -> None:
        record = self._fetch_entry(entry_id)
        record.closed = True
        self.db.commit()

    def comment(self, entry_id: int, text: str) -> None:
        record = self._fetch_entry(entry_id)
        self.db.add(DBComment(entry_id=record.id, text=text))
        self.db.commit()

    def react(self, entry_id: int, kind: str) -> None:
        record = self._fetch_entry(entry_id)
        # assign a new dict: in-place changes to a JSON column are not tracked
        reactions = dict(record.reactions or {})
        reactions[kind] = reactions.get(kind, 0) + 1
        record.reactions = reactions
        self.db.commit()

    def _fetch_entry(self, entry_id: int) -> DBLogEntry:
        record = self.db.get(DBLogEntry, entry_id)
        if record is None:
            raise RecordNotFoundError(f"Log entry {entry_id} not found.")
        return record

    def _to_model(self, record: DBLogEntry) -> LogEntry:
        """Convert SQLAlchemy model to data transfer model."""
        return LogEntry(
            id=record.id,
            title=record.title,
            author=record.author,
            created_at=_as_utc(record.created_at),
            closed=record.closed,
            confused_reaction_count=(record.reactions or {}).get(CONFUSED, 0),
        )


def _as_utc(moment: datetime) -> datetime:
    """SQLite hands back naive datetimes: they were stored as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
