"""Database tables / schema"""

from datetime import datetime, timezone

from sqlalchemy import JSON, ForeignKey, LargeBinary
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBBlob(Base):
    """Versioned content of the Store. `version` changes on every successful write."""

    __tablename__ = "stored_blobs"
    path: Mapped[str] = mapped_column(primary_key=True)
    content: Mapped[bytes] = mapped_column(LargeBinary)
    version: Mapped[str]
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)


class DBLogEntry(Base):
    __tablename__ = "log_entries"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str]
    body: Mapped[str] = mapped_column(default="")
    author: Mapped[str]
    closed: Mapped[bool] = mapped_column(default=False)
    # reaction kind -> count (ex. {"rocket": 1, "confused": 1})
    reactions: Mapped[dict[str, int]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    comments: Mapped[list["DBComment"]] = relationship(
        back_populates="entry", order_by="DBComment.id"
    )


class DBComment(Base):
    __tablename__ = "log_comments"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    entry_id: Mapped[int] = mapped_column(ForeignKey("log_entries.id"))
    text: Mapped[str]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    entry: Mapped[DBLogEntry] = relationship(back_populates="comments")
