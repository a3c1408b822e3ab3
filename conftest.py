from unittest import mock

import pytest

from blox_accounts.factory import create_service
from blox_accounts.mail import MailSession


@pytest.fixture()
def service():
    service = create_service({
        'DATABASE_URI': 'sqlite:///:memory:',
        'REDIS_FAKE': '1',
        'JWT_SECRET': 'test-secret-that-is-long-enough-for-hs256',
    })
    service.clients.r.flushall()
    service.mailer = mock.MagicMock(spec=MailSession)
    yield service
    service.users.db.drop_all()
    service.users.db.engine.dispose()
