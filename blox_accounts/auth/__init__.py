"""Permissions, password hashing and external identity providers."""

from . import permissions, passwords, strategies
from .permissions import Permission, PermissionChecker, Requestor, \
    ScopedPermissionChecker
from .strategies import Strategy
