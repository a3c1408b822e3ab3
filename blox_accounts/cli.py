"""
Command-line administration of user accounts.

Each command performs one :class:`.AccountService` operation as an
administrator and exits with:

- 0 on success
- 1 if the request was invalid or conflicts with existing data
- 2 if the user does not exist
- 3 if the operation was not authorized
- 4 if the client registry could not be reached
- 5 if a password was reset but the message could not be delivered
"""

import sys
from typing import Callable, Any

import click

from .auth.permissions import PERMISSIONS, Requestor
from .clients import RegistryUnavailable
from .exceptions import AccountError, UserNotFound, NotAuthorized, \
    IncorrectUserOrPassword
from .factory import create_service
from .mail import DeliveryFailed

ADMIN = Requestor(username=None,
                  permissions=[perm.as_global() for perm in PERMISSIONS])

EXIT_OK = 0
EXIT_REQUEST_ERROR = 1
EXIT_NOT_FOUND = 2
EXIT_NOT_AUTHORIZED = 3
EXIT_UNAVAILABLE = 4
EXIT_NOT_DELIVERED = 5


def _run(operation: Callable[[], Any]) -> Any:
    """Run an operation, mapping account errors to exit codes."""
    try:
        return operation()
    except (UserNotFound, IncorrectUserOrPassword) as e:
        click.echo(str(e), err=True)
        sys.exit(EXIT_NOT_FOUND)
    except NotAuthorized as e:
        click.echo(str(e), err=True)
        sys.exit(EXIT_NOT_AUTHORIZED)
    except AccountError as e:
        click.echo(str(e), err=True)
        sys.exit(EXIT_REQUEST_ERROR)
    except RegistryUnavailable as e:
        click.echo(str(e), err=True)
        sys.exit(EXIT_UNAVAILABLE)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Manage user accounts."""
    if ctx.obj is None:
        ctx.obj = create_service(setup_logging=True)


@cli.command('add-user')
@click.argument('username')
@click.argument('email')
@click.option('--password', prompt=True, hide_input=True,
              confirmation_prompt=True)
@click.option('--group', 'group_id', default=None)
@click.option('--dry-run', is_flag=True, default=False)
@click.pass_obj
def add_user(service, username: str, email: str, password: str,
             group_id: str, dry_run: bool) -> None:
    """Create a user."""
    _run(lambda: service.create(ADMIN, username, email, group_id, password,
                                dryrun=dry_run))
    click.echo(f'Created {username}' if not dry_run
               else f'{username} can be created')


@cli.command('view-user')
@click.argument('username')
@click.pass_obj
def view_user(service, username: str) -> None:
    """Show a user."""
    user = _run(lambda: service.view(ADMIN, username))
    if user is None:
        click.echo(f'User not found: {username}', err=True)
        sys.exit(EXIT_NOT_FOUND)
    click.echo(f'username: {user.username}')
    click.echo(f'email: {user.email}')
    if user.group_id:
        click.echo(f'group: {user.group_id}')
    for account in user.linked_accounts:
        click.echo(f'linked: {account.username} ({account.type})')


@cli.command('set-password')
@click.argument('username')
@click.option('--password', prompt=True, hide_input=True,
              confirmation_prompt=True)
@click.pass_obj
def set_password(service, username: str, password: str) -> None:
    """Overwrite a user's password."""
    _run(lambda: service.set_password(ADMIN, username, password))
    click.echo(f'Password changed for {username}')


@cli.command('reset-password')
@click.argument('username')
@click.pass_obj
def reset_password(service, username: str) -> None:
    """E-mail a temporary password to a user."""
    try:
        _run(lambda: service.reset_password(username))
    except DeliveryFailed as e:
        click.echo(f'The password of {username} was reset, but the '
                   f'temporary password was not delivered: {e}', err=True)
        sys.exit(EXIT_NOT_DELIVERED)
    click.echo(f'Temporary password sent to {username}')


@cli.command('delete-user')
@click.argument('username')
@click.confirmation_option(prompt='Delete the user and all of its projects?')
@click.pass_obj
def delete_user(service, username: str) -> None:
    """Delete a user and its projects."""
    count = _run(lambda: service.delete(ADMIN, username))
    click.echo(f'Deleted {username} and {count} project(s)')
