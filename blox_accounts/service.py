"""
Account management and authentication.

:class:`AccountService` creates, authenticates, links and deletes user
accounts, and binds an authenticated user to a live client connection. It
holds no state of its own: users and projects live in the
:mod:`blox_accounts.store`, client connections in the
:class:`.ClientRegistry`.

Every operation that acts on behalf of a requestor asks the
:class:`.PermissionChecker` first, and touches nothing if the check fails.
"""

from itertools import islice
from typing import Optional
import logging

from sqlalchemy.exc import SQLAlchemyError

from . import domain
from .auth import passwords
from .auth.permissions import PermissionChecker, Requestor, READ_USER, \
    WRITE_USER, DELETE_USER, WRITE_GROUP
from .auth.strategies import Strategy
from .clients import ClientRegistry
from .exceptions import MissingArguments, InvalidArgument, RequestError, \
    ClientNotFound, UsernamesExhausted, UserNotFound, IncorrectUserOrPassword
from .mail import MailSession, templates
from .store import UserStore, ProjectStore

logger = logging.getLogger(__name__)


class AccountService(object):
    """Orchestrates the user, project and client stores."""

    def __init__(self, users: UserStore, projects: ProjectStore,
                 clients: ClientRegistry, permissions: PermissionChecker,
                 mailer: MailSession, temporary_password_length: int = 8,
                 max_username_attempts: int = 100) -> None:
        self.users = users
        self.projects = projects
        self.clients = clients
        self.permissions = permissions
        self.mailer = mailer
        self.temporary_password_length = temporary_password_length
        self.max_username_attempts = max_username_attempts

    def create(self, requestor: Optional[Requestor], username: str,
               email: str, group_id: Optional[str] = None,
               password: Optional[str] = None,
               dryrun: bool = False) -> domain.User:
        """
        Create a new user.

        Parameters
        ----------
        requestor : :class:`.Requestor`
            Only consulted when ``group_id`` is given.
        username : str
        email : str
        group_id : str
            If given, the requestor must be allowed to write to the group.
        password : str
        dryrun : bool
            Check that the user could be created, without creating it.

        Returns
        -------
        :class:`.domain.User`
            The new user, without store identifier or credential hash.

        Raises
        ------
        :class:`.MissingArguments`
        :class:`.InvalidArgument`
            The username contains disallowed characters.
        :class:`.NotAuthorized`
        :class:`.RequestError`
            A user with the same username already exists.

        """
        if not username:
            raise MissingArguments('username')
        if not email:
            raise MissingArguments('email')
        if not password:
            raise MissingArguments('password')
        if not domain.is_valid_username(username):
            raise InvalidArgument('username')

        if group_id:
            self.permissions.ensure_authorized(
                requestor, WRITE_GROUP.for_resource(group_id)
            )

        user = domain.User(username=username, email=email, group_id=group_id)
        hash = passwords.hash_password(password)

        if dryrun:
            already_exists = self.users.find_one(username) is not None
        else:
            already_exists = not self.users.insert_if_absent(user, hash)

        if already_exists:
            raise RequestError(f'User "{username}" already exists.')
        logger.debug('Created user %s (dryrun: %s)', username, dryrun)
        return user

    def view(self, requestor: Optional[Requestor],
             username: str) -> Optional[domain.User]:
        """Get a user without store identifier or credential hash."""
        self.permissions.ensure_authorized(requestor,
                                           READ_USER.for_resource(username))
        user = self.users.find_one(username)
        if user is None:
            return None
        return user.public()

    def delete(self, requestor: Optional[Requestor], username: str) -> int:
        """
        Delete a user and the projects it owns.

        The user is deleted first. Failing to delete its projects afterwards
        is logged but not raised; the projects are left orphaned.

        Returns
        -------
        int
            Number of projects deleted.

        Raises
        ------
        :class:`.UserNotFound`

        """
        self.permissions.ensure_authorized(requestor,
                                           DELETE_USER.for_resource(username))
        if self.users.delete_one(username) == 0:
            raise UserNotFound(username)

        try:
            return self.projects.delete_many(username)
        except SQLAlchemyError as e:
            logger.error('Could not delete projects of %s: %s', username, e)
            return 0

    def set_password(self, requestor: Optional[Requestor], username: str,
                     new_password: str,
                     old_password: Optional[str] = None) -> None:
        """
        Change a user's password.

        If ``old_password`` is given, the change only happens if it matches
        the current password. Without it, the password is overwritten.

        Raises
        ------
        :class:`.IncorrectUserOrPassword`
            The user does not exist, or ``old_password`` is wrong.

        """
        self.permissions.ensure_authorized(requestor,
                                           WRITE_USER.for_resource(username))
        if not new_password:
            raise MissingArguments('password')

        expected = None
        if old_password:
            expected = passwords.hash_password(old_password)
        matched = self.users.conditional_update(
            username,
            {'hash': passwords.hash_password(new_password)},
            expected_hash=expected
        )
        if matched != 1:
            raise IncorrectUserOrPassword()

    def reset_password(self, username: str) -> None:
        """
        Set a random password and send it to the user's e-mail address.

        Anyone may reset anyone's password; the new password only reaches
        the address on file. If the message cannot be sent the error is
        raised, although the password has already changed.

        Raises
        ------
        :class:`.UserNotFound`
        :class:`.DeliveryFailed`

        """
        password = passwords.generate_password(self.temporary_password_length)
        previous = self.users.find_one_and_update(
            username, {'hash': passwords.hash_password(password)}
        )
        if previous is None:
            raise UserNotFound(username)

        self.mailer.send_mail(
            to=previous.email,
            subject=templates.TEMPORARY_PASSWORD_SUBJECT,
            html=templates.temporary_password(username, password)
        )

    def login(self, username: str, password: str,
              strategy: Optional[Strategy] = None,
              client_id: Optional[str] = None) -> domain.User:
        """
        Authenticate a user, locally or with an external provider.

        Parameters
        ----------
        username : str
            Local username, or the username on the external provider.
        password : str
        strategy : :class:`.Strategy`
            External provider. The first login through a provider creates a
            local account linked to the external identity.
        client_id : str
            If given, the client is bound to the user, and the project it is
            working on is transferred to the user if it is still anonymous.

        Returns
        -------
        :class:`.domain.User`
            Without store identifier or credential hash.

        Raises
        ------
        :class:`.MissingArguments`
        :class:`.IncorrectUserOrPassword`
            Local authentication failed.
        :class:`.AuthenticationFailed`
            The external provider rejected the credentials.
        :class:`.InvalidArgument`
            No local username can be derived from the external one.
        :class:`.ClientNotFound`

        """
        if not username:
            raise MissingArguments('username')
        if not password:
            raise MissingArguments('password')

        if strategy is not None:
            user = self._federated_login(username, password, strategy)
        else:
            user = self.users.find_one(username)
            if user is None or user.hash is None \
                    or not passwords.check_password(password, user.hash):
                logger.debug('Local authentication failed for %s', username)
                raise IncorrectUserOrPassword()

        if client_id:
            self._bind_client(client_id, user)
        return user.public()

    def logout(self, requestor: Optional[Requestor], client_id: str) -> None:
        """Clear the user binding of a client."""
        client = self.clients.get_client(client_id)
        if client is None:
            raise ClientNotFound('Client not found.')
        if client.username is None:
            # Nothing to clear, so there is no user to check against.
            logger.debug('Client %s is not logged in', client_id)
            return
        # Checked against the user recorded for the client.
        self.permissions.ensure_authorized(
            requestor, WRITE_USER.for_resource(client.username)
        )
        self.clients.logout(client_id)

    def link_account(self, requestor: Optional[Requestor], username: str,
                     strategy: Strategy, strategy_username: str,
                     password: str) -> bool:
        """
        Link an external identity to a user.

        Raises
        ------
        :class:`.AuthenticationFailed`
        :class:`.RequestError`
            The external identity is already linked to an account.
        :class:`.UserNotFound`

        """
        self.permissions.ensure_authorized(requestor,
                                           WRITE_USER.for_resource(username))
        strategy.authenticate(strategy_username, password)
        if self.users.find_by_linked_account(strategy_username,
                                             strategy.type):
            raise RequestError(
                f'{strategy_username} is already linked to an account.'
            )

        account = domain.LinkedAccount(username=strategy_username,
                                       type=strategy.type)
        if self.users.add_linked_account(username, account) == 0:
            raise UserNotFound(username)
        return True

    def unlink_account(self, requestor: Optional[Requestor], username: str,
                       account: domain.LinkedAccount) -> None:
        """Unlink an external identity. Unknown accounts are ignored."""
        self.permissions.ensure_authorized(requestor,
                                           WRITE_USER.for_resource(username))
        if self.users.remove_linked_account(username, account) == 0:
            raise UserNotFound(username)

    def _federated_login(self, username: str, password: str,
                         strategy: Strategy) -> domain.User:
        strategy.authenticate(username, password)
        user = self.users.find_by_linked_account(username, strategy.type)
        if user is not None:
            return user

        email = strategy.get_email(username, password)
        account = domain.LinkedAccount(username=username, type=strategy.type)
        user = self._create_linked_user(username, email, account)
        logger.info('Created %s for %s user %s', user.username,
                    strategy.type, username)

        try:
            self.mailer.send_mail(
                to=user.email,
                subject=templates.WELCOME_SUBJECT,
                html=templates.welcome(user.username, username)
            )
        except Exception as e:
            logger.error('Unable to send welcome email: %s', e)
        return user

    def _create_linked_user(self, username: str, email: str,
                            account: domain.LinkedAccount) -> domain.User:
        """Persist a new user under the first free candidate username."""
        base = domain.local_username(username)
        if not base:
            raise InvalidArgument('username')
        candidates = islice(domain.candidate_usernames(base, account.type),
                            self.max_username_attempts)
        for candidate in candidates:
            user = domain.User(username=candidate, email=email,
                               linked_accounts=[account])
            if self.users.insert_if_absent(user, None):
                return user
        raise UsernamesExhausted(
            f'No free username for {username} after '
            f'{self.max_username_attempts} attempts.'
        )

    def _bind_client(self, client_id: str, user: domain.User) -> None:
        """
        Bind a client to ``user`` and claim its anonymous project.

        The client binding and the project update are two writes to
        different stores; if the second does not happen, logging in again
        through the same client claims the project.
        """
        client = self.clients.get_client(client_id)
        if client is None:
            raise ClientNotFound('Client not found.')
        self.clients.set_username(client_id, user.username)

        if client.project_id is None:
            return
        project = self.projects.find_one(client.project_id)
        if project is None or not project.anonymous:
            return

        name = domain.unique_project_name(
            project.name, self.projects.names_for(user.username)
        )
        matched = self.projects.update_one(
            project.project_id,
            {'owner': user.username, 'name': name},
            owner=project.owner
        )
        if matched:
            logger.debug('Project %s now owned by %s', project.project_id,
                         user.username)
            self.clients.notify_project_updated(project.project_id)
