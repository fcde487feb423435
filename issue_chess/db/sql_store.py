"""Implementation of the GameStore using SQLAlchemy"""

import logging
from typing import Optional
from uuid import uuid4

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from issue_chess.core.exceptions import RecordNotFoundError, StaleVersionError
from issue_chess.core.models import StoredBlob, VersionToken
from issue_chess.db.schema import DBBlob, utc_now

logger = logging.getLogger(__name__)


def new_version() -> VersionToken:
    return uuid4().hex


class SQLGameStore:
    """
    Compare-and-swap storage on a single table.

    Each conditional write / delete is a single statement whose WHERE clause contains the expected version,
    so the check and the change cannot be separated by another writer.
    """

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def read(self, path: str) -> StoredBlob | None:
        """Content + version at path, if anything is stored there."""
        row = self.db.execute(
            select(DBBlob.content, DBBlob.version).where(DBBlob.path == path)
        ).first()
        if row is None:
            return None
        return StoredBlob(content=row.content, version=row.version)

    def write(
        self, path: str, content: bytes, expected_version: Optional[VersionToken]
    ) -> VersionToken:
        """Replace the content at path. `expected_version=None` means: create, only if nothing is stored yet."""
        version = new_version()
        if expected_version is None:
            self._create(path, content, version)
        else:
            self._replace(path, content, expected_version, version)
        logger.debug("Stored %s (version %s)", path, version)
        return version

    def delete(self, path: str, expected_version: VersionToken) -> None:
        """Remove the content at path, if it still has the expected version."""
        result = self.db.execute(
            delete(DBBlob).where(
                DBBlob.path == path, DBBlob.version == expected_version
            )
        )
        if result.rowcount == 0:
            self.db.rollback()
            if self.read(path) is None:
                raise RecordNotFoundError(f"Nothing stored at {path!r}.")
            raise StaleVersionError(
                f"Cannot delete {path!r}: version {expected_version} is no longer current."
            )
        self.db.commit()

    def _create(self, path: str, content: bytes, version: VersionToken) -> None:
        try:
            self.db.execute(
                insert(DBBlob).values(
                    path=path, content=content, version=version, updated_at=utc_now()
                )
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise StaleVersionError(
                f"Cannot create {path!r}: it was created by another writer."
            ) from e

    def _replace(
        self,
        path: str,
        content: bytes,
        expected_version: VersionToken,
        version: VersionToken,
    ) -> None:
        result = self.db.execute(
            update(DBBlob)
            .where(DBBlob.path == path, DBBlob.version == expected_version)
            .values(content=content, version=version, updated_at=utc_now())
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise StaleVersionError(
                f"Cannot write {path!r}: version {expected_version} is no longer current."
            )
        self.db.commit()
