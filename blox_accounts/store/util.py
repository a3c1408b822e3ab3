"""Engine and transaction helpers."""

from typing import Generator
from contextlib import contextmanager
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from .models import Base

logger = logging.getLogger(__name__)


class Database(object):
    """Holds the engine and session factory for the account tables."""

    def __init__(self, uri: str, echo: bool = False) -> None:
        if uri.startswith('sqlite'):
            args = {"check_same_thread": False, "timeout": 30}
        else:
            args = {}
        self.engine: Engine = create_engine(uri, echo=echo,
                                            connect_args=args)
        if uri.startswith('sqlite'):
            event.listen(self.engine, 'connect', _enable_sqlite_foreign_keys)
        self._sessions = sessionmaker(bind=self.engine,
                                      autoflush=False,
                                      expire_on_commit=False)

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """Context manager for database transaction."""
        session = self._sessions()
        try:
            yield session
            session.commit()
        except Exception as e:
            logger.error('Commit failed, rolling back: %s', str(e))
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        """Create all tables in the database."""
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        """Drop all tables in the database."""
        Base.metadata.drop_all(self.engine)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()
