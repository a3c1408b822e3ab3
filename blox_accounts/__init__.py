"""
NetsBlox user accounts and authentication.

This package creates, authenticates, links and deletes user accounts, and
binds an authenticated user to a live client connection.

Quick start
-----------

Create the service once, at process start, and pass it to the code that
handles requests:

.. code-block:: python

   from blox_accounts.factory import create_service
   from blox_accounts.auth import Requestor

   service = create_service({'DATABASE_URI': 'sqlite:///accounts.db'})
   admin = Requestor(permissions=[...])
   service.create(admin, 'alice', 'alice@example.com', password='secret')
   user = service.login('alice', 'secret', client_id=client_id)

Authorization is delegated to a :class:`.PermissionChecker`. The default,
:class:`.ScopedPermissionChecker`, grants the permissions attached to the
:class:`.Requestor` and lets users read and change their own accounts.

Logins through external identity providers are handled by
:class:`.Strategy` implementations; the first such login creates a linked
local account.
"""

from .domain import User, LinkedAccount, Client, Project
from .service import AccountService
