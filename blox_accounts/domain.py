"""Defines user, client and project concepts for the account service."""

import re
from typing import Any, Optional, NamedTuple, List, Callable, Iterable, \
    Union, get_type_hints, get_origin, get_args
from datetime import datetime
from functools import partial
import dateutil.parser

ANONYMOUS_PREFIX = '_'
"""
Reserved first character.

Owners of projects created by anonymous clients start with this character;
usernames never do.
"""

USERNAME_PATTERN = re.compile(r'[a-zA-Z0-9_\-().]+')


class LinkedAccount(NamedTuple):
    """An association between a local user and an external identity."""

    username: str
    """Username on the external identity provider."""

    type: str
    """Type tag of the identity provider (see :class:`.Strategy`)."""


class User(NamedTuple):
    """Represents a user account."""

    username: str
    """Slug-like username. Unique."""

    email: str
    """The user's e-mail address."""

    group_id: Optional[str] = None
    """Group to which the user belongs, if any."""

    linked_accounts: List[LinkedAccount] = []
    """External identities that may be used to log in as this user."""

    user_id: Optional[str] = None
    """Store identifier. If ``None``, the user has not been persisted."""

    hash: Optional[str] = None
    """Credential hash. Never the raw password."""

    def public(self) -> 'User':
        """Copy of this user without store identifier or credential hash."""
        return self._replace(user_id=None, hash=None)

    @classmethod
    def before_init(cls, data: dict) -> None:
        """Make sure that linked accounts are :class:`.LinkedAccount`s."""
        data['linked_accounts'] = [
            LinkedAccount(**obj) if type(obj) is dict else LinkedAccount(*obj)
            for obj in data.get('linked_accounts', [])
        ]


class Client(NamedTuple):
    """A live connection tracked by the client registry."""

    client_id: str
    """Connection identifier. Starts with :data:`ANONYMOUS_PREFIX`."""

    username: Optional[str] = None
    """The user bound to the connection. ``None`` for anonymous clients."""

    project_id: Optional[str] = None
    """The project the client is currently working on."""

    connected_at: Optional[datetime] = None

    @property
    def anonymous(self) -> bool:
        return self.username is None


class Project(NamedTuple):
    """A persisted project."""

    project_id: str
    owner: str
    name: str

    @property
    def anonymous(self) -> bool:
        """Whether the project is still owned by an anonymous client."""
        return is_anonymous_owner(self.owner)


def is_anonymous_owner(owner: Optional[str]) -> bool:
    """Determine whether ``owner`` is an anonymous-client marker."""
    return bool(owner) and owner.startswith(ANONYMOUS_PREFIX)


def is_valid_username(username: str) -> bool:
    """
    Check a username against the naming rules.

    Letters, digits and ``_ - ( ) .`` are allowed, but the first character
    may not be :data:`ANONYMOUS_PREFIX`.
    """
    if username.startswith(ANONYMOUS_PREFIX):
        return False
    return USERNAME_PATTERN.fullmatch(username) is not None


def local_username(external_username: str) -> str:
    """
    Derive a local username from a username on an identity provider.

    Disallowed characters are dropped, as are leading
    :data:`ANONYMOUS_PREFIX` characters. The result may be empty.
    """
    username = re.sub(r'[^a-zA-Z0-9_\-().]', '', external_username)
    return username.lstrip(ANONYMOUS_PREFIX)


def strategy_suffix(strategy_type: str) -> str:
    """Username suffix for accounts created by a login strategy."""
    return re.sub(r'[^a-zA-Z]', '', strategy_type.lower())


def candidate_usernames(username: str, strategy_type: str) -> Iterable[str]:
    """
    Generate usernames to try for a new federated account.

    ``bob``, ``bob_<suffix>``, ``bob2_<suffix>``, ``bob3_<suffix>``, ...
    The generator is unbounded; callers decide when to give up.
    """
    suffix = strategy_suffix(strategy_type)
    yield username
    yield f'{username}_{suffix}'
    count = 2
    while True:
        yield f'{username}{count}_{suffix}'
        count += 1


def unique_project_name(name: str, taken: Iterable[str]) -> str:
    """Pick ``name``, or ``name (N)`` for the lowest free N >= 2."""
    taken = set(taken)
    if name not in taken:
        return name
    count = 2
    while f'{name} ({count})' in taken:
        count += 1
    return f'{name} ({count})'


# Helpers and private functions.


def to_dict(obj: tuple) -> dict:
    """
    Generate a dict representation of a NamedTuple instance.

    This just uses the built-in ``_asdict`` method on the intance, but also
    calls this on any child NamedTuple instances (recursively) so that the
    entire tree is cast to ``dict``.

    Parameters
    ----------
    obj : tuple
        A NamedTuple instance.

    Returns
    -------
    dict

    """
    if not hasattr(obj, '_asdict'):  # NamedTuple-generated classes have this.
        return {}
    data = obj._asdict()  # type: ignore
    _data = {}

    def _cast(obj: Any) -> Any:
        if hasattr(obj, '_asdict'):
            obj = to_dict(obj)
        elif isinstance(obj, datetime):
            obj = obj.isoformat()
        elif isinstance(obj, list):
            obj = [_cast(o) for o in obj]
        return obj

    for key, value in data.items():
        _data[key] = _cast(value)
    return _data


def from_dict(cls: type, data: dict) -> Any:
    """
    Generate a NamedTuple instance from a dict, with recursion.

    This is the inverse of :func:`to_dict`.

    Parameters
    ----------
    cls: type
        Any NamedTuple class.

    data: dict
        Data with which to instantiate ``cls`` and its children.

    Returns
    -------
    NamedTuple
        An instance of ``cls``.
    """
    _data = {}
    for field, field_type in get_type_hints(cls).items():
        if field not in data:
            continue
        value = data[field]
        target_type = _get_cast_type(field_type, value)
        if target_type:
            value = target_type(value)
        _data[field] = value
    if hasattr(cls, 'before_init'):
        cls.before_init(_data)
    return cls(**_data)


def _is_a_namedtuple(field_type: Any) -> bool:
    """Determine whether or not a field type is a NamedTuple class."""
    return hasattr(field_type, '_fields')


def _candidate_types(field_type: Any) -> tuple:
    """Unpack ``Optional[X]`` and other unions into their member types."""
    if get_origin(field_type) is Union:
        return get_args(field_type)
    return (field_type,)


def _get_cast_type(field_type: Any, value: Any) -> Optional[Callable]:
    """Get a casting callable for a field type/value."""
    for s_type in _candidate_types(field_type):
        if type(value) is dict and _is_a_namedtuple(s_type):
            return partial(from_dict, s_type)
        if type(value) is str and s_type is datetime:
            return dateutil.parser.parse
    return None
