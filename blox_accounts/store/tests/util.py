"""Testing helpers."""

from contextlib import contextmanager
from typing import Generator

from ..util import Database


@contextmanager
def temporary_db(database_url: str = 'sqlite:///:memory:',
                 create: bool = True,
                 drop: bool = True) -> Generator[Database, None, None]:
    """Provide an in-memory sqlite database for testing purposes."""
    db = Database(database_url)
    if create:
        db.create_all()
    try:
        yield db
    finally:
        if drop:
            db.drop_all()
        db.engine.dispose()
