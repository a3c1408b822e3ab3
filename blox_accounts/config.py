"""Service configuration."""
import secrets
import os

#################### Persistence ####################
DATABASE_URI = os.environ.get('DATABASE_URI', 'sqlite:///accounts.db')
"""SQLAlchemy URI for the user and project tables."""

ECHO_SQL = bool(int(os.environ.get('ECHO_SQL', '0')))

#################### Session registry ####################
REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = os.environ.get('REDIS_PORT', '7000')
REDIS_DATABASE = os.environ.get('REDIS_DATABASE', '0')
REDIS_CLUSTER = os.environ.get('REDIS_CLUSTER', '1')

REDIS_FAKE = os.environ.get('REDIS_FAKE', False)
"""Use the FakeRedis library instead of a redis service.

Useful for testing, dev, beta."""

JWT_SECRET = os.environ.get('JWT_SECRET', secrets.token_urlsafe(16))
"""Secret used to sign client state in the registry."""

PROJECT_UPDATES_CHANNEL = os.environ.get('PROJECT_UPDATES_CHANNEL',
                                         'project-updates')
"""Redis channel on which project ownership changes are published."""

#################### Mail ####################
SMTP_HOST = os.environ.get('SMTP_HOST', 'localhost')
SMTP_PORT = os.environ.get('SMTP_PORT', '25')
MAIL_SENDER = os.environ.get('MAIL_SENDER', 'no-reply@netsblox.org')

#################### Accounts ####################
TEMPORARY_PASSWORD_LENGTH = int(os.environ.get('TEMPORARY_PASSWORD_LENGTH',
                                               '8'))
"""Length of the password generated by a password reset."""

MAX_USERNAME_ATTEMPTS = int(os.environ.get('MAX_USERNAME_ATTEMPTS', '100'))
"""
Number of usernames tried when a federated login creates a new account.

The first attempt uses the external username as-is; later attempts add a
suffix derived from the provider type.
"""

#################### Logging ####################
LOGLEVEL = int(os.environ.get('LOGLEVEL', '20'))
LOG_JSON = bool(int(os.environ.get('LOG_JSON', '1')))
