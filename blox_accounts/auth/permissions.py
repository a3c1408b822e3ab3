"""
Permissions checked by the account service.

The account service does not decide who may do what. Before each mutation it
asks a :class:`PermissionChecker` whether the requestor holds a
:class:`Permission`, and aborts on :class:`.NotAuthorized`. Only the four
permissions defined here are ever requested:

- :data:`READ_USER` for a username
- :data:`WRITE_USER` for a username
- :data:`DELETE_USER` for a username
- :data:`WRITE_GROUP` for a group id

The :class:`ScopedPermissionChecker` shipped with this package grants a
permission when it is attached to the requestor, either for the specific
resource or globally (``*``), or when an optional authorizer function says so.
Applications with real policy needs should provide their own checker.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, NamedTuple, Optional
import logging

from ..exceptions import NotAuthorized

logger = logging.getLogger(__name__)


class Permission(NamedTuple):
    """Represents an authorization grant."""

    domain: str
    """The kind of resource to which the permission applies."""

    action: str
    """An action within ``domain``."""

    resource: Optional[str] = None
    """The specific resource to which this permission applies."""

    def __str__(self) -> str:
        """Return this permission as a :-delimited string."""
        return ":".join([o for o in self if o is not None])

    def for_resource(self, resource_id: str) -> 'Permission':
        """Create a copy of this permission with a specific resource."""
        return Permission(self.domain, self.action, resource_id)

    def as_global(self) -> 'Permission':
        """Create a copy of this permission with a global resource."""
        return self.for_resource('*')

    def as_generic(self) -> 'Permission':
        """Create a copy of this permission without a resource."""
        return Permission(self.domain, self.action)

    @classmethod
    def parse(cls, value: str) -> 'Permission':
        """Parse a :-delimited string, e.g. ``user:write:alice``."""
        return cls(*value.split(':', 2))

    class domains:
        """Known permission domains."""

        USER = 'user'
        GROUP = 'group'

    class actions:
        """Known permission actions."""

        READ = 'read'
        WRITE = 'write'
        DELETE = 'delete'


READ_USER = Permission(Permission.domains.USER, Permission.actions.READ)
"""Authorizes viewing a user account."""

WRITE_USER = Permission(Permission.domains.USER, Permission.actions.WRITE)
"""
Authorizes changing a user account.

This covers passwords, linked accounts and the client binding (logout).
"""

DELETE_USER = Permission(Permission.domains.USER, Permission.actions.DELETE)
"""Authorizes deleting a user account and the projects it owns."""

WRITE_GROUP = Permission(Permission.domains.GROUP, Permission.actions.WRITE)
"""Authorizes adding members to a group."""

PERMISSIONS = frozenset([READ_USER, WRITE_USER, DELETE_USER, WRITE_GROUP])


class Requestor(NamedTuple):
    """The party on whose behalf an operation is performed."""

    username: Optional[str] = None
    """``None`` for anonymous requestors."""

    permissions: List[Permission] = []
    """Permissions attached to the requestor."""


Authorizer = Callable[[Requestor, Permission], bool]


class PermissionChecker(ABC):
    """Boundary between the account service and authorization policy."""

    @abstractmethod
    def ensure_authorized(self, requestor: Optional[Requestor],
                          permission: Permission) -> None:
        """
        Check that ``requestor`` holds ``permission``.

        Raises
        ------
        :class:`.NotAuthorized`

        """


def is_owner(requestor: Requestor, permission: Permission) -> bool:
    """Users may read and change (but not delete) their own account."""
    return (permission.domain == Permission.domains.USER
            and permission.action != Permission.actions.DELETE
            and requestor.username is not None
            and requestor.username == permission.resource)


class ScopedPermissionChecker(PermissionChecker):
    """Grants permissions attached to the requestor."""

    def __init__(self, authorizer: Optional[Authorizer] = is_owner) -> None:
        self._authorizer = authorizer

    def ensure_authorized(self, requestor: Optional[Requestor],
                          permission: Permission) -> None:
        if permission.as_generic() not in PERMISSIONS:
            raise ValueError(f'Unknown permission: {permission}')
        if requestor is None:
            logger.debug('Anonymous requestor; %s denied', permission)
            raise NotAuthorized(f'Not authorized: {permission}')

        granted = requestor.permissions
        if permission.as_global() in granted or permission in granted:
            return
        if self._authorizer and self._authorizer(requestor, permission):
            return
        logger.debug('%s is not authorized for %s', requestor.username,
                     permission)
        raise NotAuthorized(f'Not authorized: {permission}')
