"""Tests for :mod:`blox_accounts.store.projects`."""

from unittest import TestCase

from ..projects import ProjectStore
from .util import temporary_db


class TestProjectStore(TestCase):
    """Tests for :class:`.ProjectStore`."""

    def setUp(self):
        self._db = temporary_db()
        self.store = ProjectStore(self._db.__enter__())
        self.anon = self.store.create('_client_1', 'myproject')
        self.owned = self.store.create('alice', 'myproject')

    def tearDown(self):
        self._db.__exit__(None, None, None)

    def test_find_one(self):
        project = self.store.find_one(self.anon.project_id)
        self.assertEqual(project, self.anon)
        self.assertTrue(project.anonymous)
        self.assertFalse(self.store.find_one(self.owned.project_id).anonymous)

    def test_find_missing(self):
        self.assertIsNone(self.store.find_one('nope'))

    def test_names_for(self):
        self.store.create('alice', 'other')
        self.assertEqual(sorted(self.store.names_for('alice')),
                         ['myproject', 'other'])
        self.assertEqual(self.store.names_for('bob'), [])

    def test_update_one_with_owner(self):
        """The update only applies while the owner is the expected one."""
        values = {'owner': 'alice', 'name': 'myproject (2)'}
        self.assertEqual(
            self.store.update_one(self.anon.project_id, values,
                                  owner='_client_1'),
            1
        )
        self.assertEqual(
            self.store.update_one(self.anon.project_id, {'owner': 'bob'},
                                  owner='_client_1'),
            0
        )
        project = self.store.find_one(self.anon.project_id)
        self.assertEqual(project.owner, 'alice')
        self.assertEqual(project.name, 'myproject (2)')

    def test_delete_many(self):
        self.store.create('alice', 'other')
        self.assertEqual(self.store.delete_many('alice'), 2)
        self.assertIsNone(self.store.find_one(self.owned.project_id))
        self.assertIsNotNone(self.store.find_one(self.anon.project_id))
        self.assertEqual(self.store.delete_many('alice'), 0)
