"""Testing helpers for the account service."""

from typing import Dict, Tuple
from unittest import mock

from ..auth.permissions import PERMISSIONS, Requestor, \
    ScopedPermissionChecker
from ..auth.strategies import Strategy
from ..clients import ClientRegistry
from ..exceptions import AuthenticationFailed
from ..mail import MailSession
from ..service import AccountService
from ..store import Database, UserStore, ProjectStore

SECRET = 'foosecret-that-is-long-enough-for-hs256'

ADMIN = Requestor('admin', [perm.as_global() for perm in PERMISSIONS])


class FakeStrategy(Strategy):
    """An identity provider that knows a fixed set of accounts."""

    def __init__(self, type: str = 'Snap!',
                 accounts: Dict[str, Tuple[str, str]] = None) -> None:
        self.type = type
        self.accounts = accounts or {}

    def authenticate(self, username: str, password: str) -> None:
        if username not in self.accounts \
                or self.accounts[username][0] != password:
            raise AuthenticationFailed(f'Bad credentials for {username}')

    def get_email(self, username: str, password: str) -> str:
        return self.accounts[username][1]


class ServiceMixin(object):
    """Mixin that sets up an :class:`.AccountService` with test backends."""

    database_uri = 'sqlite:///:memory:'

    def setUp(self):
        self.db = Database(self.database_uri)
        self.db.create_all()
        self.clients = ClientRegistry('localhost', 6379, 0, SECRET,
                                      fake=True)
        self.clients.r.flushall()
        self.mailer = mock.MagicMock(spec=MailSession)
        self.users = UserStore(self.db)
        self.projects = ProjectStore(self.db)
        self.service = AccountService(
            users=self.users,
            projects=self.projects,
            clients=self.clients,
            permissions=ScopedPermissionChecker(),
            mailer=self.mailer,
            max_username_attempts=5
        )

    def tearDown(self):
        self.db.drop_all()
        self.db.engine.dispose()
