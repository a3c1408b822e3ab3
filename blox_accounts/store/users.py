"""
Persistence for user accounts.

Each method is a single atomic operation against the ``users`` and
``linked_accounts`` tables, so that callers never need to read, decide, and
write in separate steps. Uniqueness of usernames is enforced by the database
(see :class:`.models.DBUser`), not by checking first.
"""

from typing import Any, Dict, Optional
import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError

from .. import domain
from .models import DBUser, DBLinkedAccount
from .util import Database

logger = logging.getLogger(__name__)


class UserStore(object):
    """User accounts, keyed by username."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def insert_if_absent(self, user: domain.User, hash: str) -> bool:
        """
        Insert ``user`` unless its username is already taken.

        The user and its linked accounts are written together; either all of
        them become visible or none do.

        Parameters
        ----------
        user : :class:`.domain.User`
        hash : str
            Credential hash for the new account.

        Returns
        -------
        bool
            ``False`` if a user with the same username already exists.

        """
        with self.db.transaction() as session:
            db_user = DBUser(
                username=user.username,
                email=user.email,
                group_id=user.group_id,
                hash=hash,
                linked_accounts=[
                    DBLinkedAccount(username=acct.username, type=acct.type)
                    for acct in user.linked_accounts
                ]
            )
            session.add(db_user)
            try:
                session.flush()
            except IntegrityError:
                logger.debug('Username %s is taken', user.username)
                session.rollback()
                return False
        return True

    def find_one(self, username: str) -> Optional[domain.User]:
        """Get a user by username."""
        with self.db.transaction() as session:
            db_user = session.query(DBUser) \
                .filter(DBUser.username == username) \
                .first()
            if db_user is None:
                return None
            return db_user.to_domain()

    def find_by_linked_account(self, username: str, type: str) \
            -> Optional[domain.User]:
        """Get the user to which an external identity is linked."""
        with self.db.transaction() as session:
            db_user = session.query(DBUser) \
                .join(DBUser.linked_accounts) \
                .filter(DBLinkedAccount.username == username) \
                .filter(DBLinkedAccount.type == type) \
                .first()
            if db_user is None:
                return None
            return db_user.to_domain()

    def conditional_update(self, username: str, values: Dict[str, Any],
                           expected_hash: Optional[str] = None) -> int:
        """
        Update a user, optionally only if its hash is ``expected_hash``.

        Returns
        -------
        int
            Number of rows matched (0 or 1).

        """
        stmt = update(DBUser).where(DBUser.username == username)
        if expected_hash is not None:
            stmt = stmt.where(DBUser.hash == expected_hash)
        stmt = stmt.values(**values) \
            .execution_options(synchronize_session=False)
        with self.db.transaction() as session:
            result = session.execute(stmt)
            return int(result.rowcount)

    def find_one_and_update(self, username: str, values: Dict[str, Any]) \
            -> Optional[domain.User]:
        """
        Update a user and return it as it was before the update.

        Returns ``None`` (and changes nothing) if there is no such user.
        """
        with self.db.transaction() as session:
            db_user = session.query(DBUser) \
                .filter(DBUser.username == username) \
                .with_for_update() \
                .first()
            if db_user is None:
                return None
            previous = db_user.to_domain()
            for field, value in values.items():
                setattr(db_user, field, value)
            return previous

    def add_linked_account(self, username: str,
                           account: domain.LinkedAccount) -> int:
        """
        Link ``account`` to a user, unless it is already linked to it.

        Returns
        -------
        int
            Number of users matched (0 or 1).

        """
        with self.db.transaction() as session:
            user_id = session.execute(
                select(DBUser.user_id)
                .where(DBUser.username == username)
                .with_for_update()
            ).scalar()
            if user_id is None:
                return 0
            existing = session.query(DBLinkedAccount) \
                .filter(DBLinkedAccount.user_id == user_id) \
                .filter(DBLinkedAccount.username == account.username) \
                .filter(DBLinkedAccount.type == account.type) \
                .first()
            if existing is None:
                session.add(DBLinkedAccount(user_id=user_id,
                                            username=account.username,
                                            type=account.type))
                try:
                    session.flush()
                except IntegrityError:  # Linked concurrently.
                    session.rollback()
            return 1

    def remove_linked_account(self, username: str,
                              account: domain.LinkedAccount) -> int:
        """
        Unlink every entry equal to ``account`` from a user.

        Returns
        -------
        int
            Number of users matched (0 or 1), whether or not anything was
            unlinked.

        """
        with self.db.transaction() as session:
            user_id = session.execute(
                select(DBUser.user_id).where(DBUser.username == username)
            ).scalar()
            if user_id is None:
                return 0
            session.execute(
                delete(DBLinkedAccount)
                .where(DBLinkedAccount.user_id == user_id)
                .where(DBLinkedAccount.username == account.username)
                .where(DBLinkedAccount.type == account.type)
                .execution_options(synchronize_session=False)
            )
            return 1

    def delete_one(self, username: str) -> int:
        """Delete a user and its linked accounts. Returns rows deleted."""
        user_ids = select(DBUser.user_id).where(DBUser.username == username)
        with self.db.transaction() as session:
            session.execute(
                delete(DBLinkedAccount)
                .where(DBLinkedAccount.user_id.in_(user_ids))
                .execution_options(synchronize_session=False)
            )
            result = session.execute(
                delete(DBUser)
                .where(DBUser.username == username)
                .execution_options(synchronize_session=False)
            )
            return int(result.rowcount)
