"""Database models for users and projects."""

from sqlalchemy import Column, ForeignKey, Integer, String, \
    UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship

from .. import domain

Base = declarative_base()


class DBUser(Base):  # type: ignore
    """
    User accounts.

    +-------------+--------------+------+-----+----------------+
    | Field       | Type         | Null | Key | Extra          |
    +-------------+--------------+------+-----+----------------+
    | user_id     | int(11)      | NO   | PRI | auto_increment |
    | username    | varchar(255) | NO   | UNI |                |
    | email       | varchar(255) | NO   |     |                |
    | group_id    | varchar(64)  | YES  | MUL |                |
    | hash        | varchar(128) | YES  |     |                |
    +-------------+--------------+------+-----+----------------+

    The unique key on ``username`` is what makes account creation safe under
    concurrent writers: a second insert with the same username fails.
    """

    __tablename__ = 'users'

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True)
    email = Column(String(255), nullable=False)
    group_id = Column(String(64), index=True)
    hash = Column(String(128))

    linked_accounts = relationship('DBLinkedAccount', back_populates='user',
                                   cascade='all, delete-orphan',
                                   order_by='DBLinkedAccount.link_id',
                                   lazy='selectin')

    def to_domain(self) -> domain.User:
        return domain.User(
            user_id=str(self.user_id),
            username=self.username,
            email=self.email,
            group_id=self.group_id,
            hash=self.hash,
            linked_accounts=[
                domain.LinkedAccount(username=acct.username, type=acct.type)
                for acct in self.linked_accounts
            ]
        )


class DBLinkedAccount(Base):  # type: ignore
    """External identities linked to a user."""

    __tablename__ = 'linked_accounts'
    __table_args__ = (
        UniqueConstraint('user_id', 'username', 'type'),
    )

    link_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey('users.user_id', ondelete='CASCADE'),
                     nullable=False, index=True)
    username = Column(String(255), nullable=False, index=True)
    """Username on the external identity provider."""
    type = Column(String(64), nullable=False)

    user = relationship('DBUser', back_populates='linked_accounts')


class DBProject(Base):  # type: ignore
    """Projects. ``owner`` is a username or an anonymous client id."""

    __tablename__ = 'projects'

    project_id = Column(String(36), primary_key=True)
    owner = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)

    def to_domain(self) -> domain.Project:
        return domain.Project(project_id=self.project_id, owner=self.owner,
                              name=self.name)
