"""
Persistence for user accounts and projects.

Users and projects live in a relational database accessed via SQLAlchemy.
The account service only relies on the atomic operations exposed by
:class:`.UserStore` and :class:`.ProjectStore`.
"""

from . import models, util
from .util import Database
from .users import UserStore
from .projects import ProjectStore
