"""Exceptions raised by the account service."""


class AccountError(RuntimeError):
    """Base class for request failures reported by the account service."""


class InvalidArgument(AccountError):
    """A request argument is not acceptable."""

    def __init__(self, field: str) -> None:
        self.field = field
        super(InvalidArgument, self).__init__(f'Invalid argument: {field}')


class MissingArguments(InvalidArgument):
    """A required request argument was not provided."""

    def __init__(self, field: str) -> None:
        self.field = field
        AccountError.__init__(self, f'Missing required argument: {field}')


class RequestError(AccountError):
    """The request conflicts with the current state of the system."""


class ClientNotFound(RequestError):
    """No live client exists for the requested connection identifier."""


class UsernamesExhausted(RequestError):
    """No free username was found for a new federated account."""


class UserNotFound(AccountError):
    """User does not exist."""

    def __init__(self, username: str) -> None:
        self.username = username
        super(UserNotFound, self).__init__(f'User not found: {username}')


class IncorrectUserOrPassword(AccountError):
    """The user does not exist or the password is not correct."""

    def __init__(self) -> None:
        super(IncorrectUserOrPassword, self).__init__(
            'Incorrect username or password'
        )


class NotAuthorized(AccountError):
    """The requestor lacks the permission required for the operation."""


class AuthenticationFailed(RuntimeError):
    """An external identity provider rejected the provided credentials."""
