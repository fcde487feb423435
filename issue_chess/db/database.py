"""Generate database sessions"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from issue_chess.core.config import Settings
from issue_chess.db.schema import Base


def create_session_factory(settings: Settings) -> sessionmaker[Session]:
    """Engine + session factory for the configured database. Ensures all tables exist."""
    engine: Engine = create_engine(settings.database_url, echo=settings.database_echo)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine)
