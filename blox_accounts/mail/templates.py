"""Message bodies."""

from html import escape

WELCOME_SUBJECT = 'Welcome to NetsBlox!'
TEMPORARY_PASSWORD_SUBJECT = 'Temporary Password'


def welcome(username: str, external_username: str) -> str:
    """Body of the message sent when a federated login creates an account."""
    body = (f'<p>Hello {escape(external_username)},</p>'
            f'<p>Welcome to NetsBlox! An account has been created for you '
            f'with the username <b>{escape(username)}</b>.')
    if username != external_username:
        body += (' Your usual username was already taken, so a suffix was '
                 'added to it.')
    return body + ' You can keep logging in with your existing credentials.</p>'


def temporary_password(username: str, password: str) -> str:
    return (f'<p>Hello {escape(username)},<br/><br/>Your NetsBlox password '
            f'has been temporarily set to {escape(password)}. Please change '
            f'it after logging in.</p>')
