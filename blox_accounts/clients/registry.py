"""
Registry of live client connections.

Each client is stored under its connection id as a signed JWT. Project
ownership changes are published on a Redis channel so that the servers
holding the affected connections can refresh them.
"""

import json
import uuid
from datetime import datetime
from pytz import UTC
from typing import Any, Optional
import logging

import jwt
import redis
from redis.cluster import RedisCluster

from .. import domain

logger = logging.getLogger(__name__)

KEY_PREFIX = 'client:'


class RegistryUnavailable(RuntimeError):
    """Failed to read or write client data."""


class InvalidClientData(RuntimeError):
    """Client data in the registry could not be decoded."""


class ClientRegistry(object):
    """
    Manages a connection to Redis.

    The Redis instance is thread safe and is not created until a command
    needs it, so a registry can be constructed without a reachable server.
    """

    def __init__(self, host: str, port: int, db: int, secret: str,
                 channel: str = 'project-updates', cluster: bool = True,
                 fake: bool = False) -> None:
        self._host = host
        self._port = port
        self._db = db
        self._cluster = cluster
        self._fake = fake
        self._secret = secret
        self._channel = channel
        self._r: Optional[redis.Redis] = None

    @property
    def r(self) -> redis.Redis:
        """The Redis connection, opened on first use."""
        if self._r is None:
            self._r = self._new_connection()
        return self._r

    def _new_connection(self) -> redis.Redis:
        logger.debug('New Redis connection at %s, port %s', self._host,
                     self._port)
        if self._fake:
            import fakeredis
            return fakeredis.FakeRedis()
        if not self._cluster:
            return redis.Redis(host=self._host, port=self._port, db=self._db)
        try:
            return RedisCluster(host=self._host, port=self._port)
        except (redis.exceptions.RedisError,
                redis.exceptions.RedisClusterException) as e:
            raise RegistryUnavailable(f'Failed to connect: {e}') from e

    def connect(self, project_id: Optional[str] = None,
                client_id: Optional[str] = None) -> domain.Client:
        """Register a new anonymous client."""
        if client_id is None:
            client_id = f'{domain.ANONYMOUS_PREFIX}client_{uuid.uuid4().hex}'
        client = domain.Client(
            client_id=client_id,
            project_id=project_id,
            connected_at=datetime.now(tz=UTC)
        )
        self._save(client)
        return client

    def disconnect(self, client_id: str) -> None:
        try:
            self.r.delete(self._key(client_id))
        except redis.exceptions.RedisError as e:
            raise RegistryUnavailable(f'Failed to delete: {e}') from e

    def get_client(self, client_id: str) -> Optional[domain.Client]:
        """Get a live client, or ``None`` if it is not connected."""
        try:
            client_jwt = self.r.get(self._key(client_id))
        except redis.exceptions.RedisError as e:
            raise RegistryUnavailable(f'Failed to load: {e}') from e
        if not client_jwt:
            logger.debug('No such client: %s', client_id)
            return None
        return self._decode(client_jwt)

    def set_username(self, client_id: str, username: Optional[str]) \
            -> domain.Client:
        """Bind a client to a user (or unbind it, with ``None``)."""
        client = self.get_client(client_id)
        if client is None:
            raise KeyError(client_id)
        client = client._replace(username=username)
        self._save(client)
        return client

    def logout(self, client_id: str) -> domain.Client:
        """Clear the user binding of a client."""
        return self.set_username(client_id, None)

    def notify_project_updated(self, project_id: str) -> None:
        """Tell subscribers that a project's owner or name changed."""
        message = json.dumps({'project_id': project_id, 'event': 'update'})
        try:
            self.r.publish(self._channel, message)
        except redis.exceptions.RedisError as e:
            raise RegistryUnavailable(f'Failed to publish: {e}') from e

    def _key(self, client_id: str) -> str:
        return f'{KEY_PREFIX}{client_id}'

    def _save(self, client: domain.Client) -> None:
        try:
            self.r.set(self._key(client.client_id),
                       self._encode(domain.to_dict(client)))
        except redis.exceptions.RedisError as e:
            raise RegistryUnavailable(f'Failed to save: {e}') from e

    def _encode(self, client_data: dict) -> str:
        return jwt.encode(client_data, self._secret, algorithm='HS256')

    def _decode(self, client_jwt: Any) -> domain.Client:
        try:
            client: domain.Client = domain.from_dict(
                domain.Client,
                jwt.decode(client_jwt, self._secret, algorithms=['HS256'])
            )
        except jwt.exceptions.InvalidTokenError as e:
            raise InvalidClientData('Invalid or corrupted client data') from e
        return client
