"""Construct the account service and its collaborators."""

from typing import Any, Mapping, Optional

from . import config as default_config
from .app_logging import setup_logger
from .auth.permissions import PermissionChecker, ScopedPermissionChecker
from .clients import ClientRegistry
from .mail import MailSession
from .service import AccountService
from .store import Database, UserStore, ProjectStore


def get_config(overrides: Optional[Mapping[str, Any]] = None) -> dict:
    """Settings from :mod:`.config`, updated with ``overrides``."""
    config = {key: getattr(default_config, key)
              for key in dir(default_config) if key.isupper()}
    config.update(overrides or {})
    return config


def create_service(overrides: Optional[Mapping[str, Any]] = None,
                   permissions: Optional[PermissionChecker] = None,
                   setup_logging: bool = False) -> AccountService:
    """
    Create an :class:`.AccountService` from configuration.

    Call this once at process start and pass the service to request
    handlers.
    """
    config = get_config(overrides)
    if setup_logging:
        setup_logger(config['LOGLEVEL'], config['LOG_JSON'])

    db = Database(config['DATABASE_URI'], echo=config['ECHO_SQL'])
    db.create_all()
    clients = ClientRegistry(
        host=config['REDIS_HOST'],
        port=int(config['REDIS_PORT']),
        db=int(config['REDIS_DATABASE']),
        secret=config['JWT_SECRET'],
        channel=config['PROJECT_UPDATES_CHANNEL'],
        cluster=str(config['REDIS_CLUSTER']) == '1',
        fake=str(config['REDIS_FAKE']).lower() in ('1', 'true', 'yes')
    )
    mailer = MailSession(host=config['SMTP_HOST'],
                         port=int(config['SMTP_PORT']),
                         sender=config['MAIL_SENDER'])
    return AccountService(
        users=UserStore(db),
        projects=ProjectStore(db),
        clients=clients,
        permissions=permissions or ScopedPermissionChecker(),
        mailer=mailer,
        temporary_password_length=int(config['TEMPORARY_PASSWORD_LENGTH']),
        max_username_attempts=int(config['MAX_USERNAME_ATTEMPTS'])
    )
