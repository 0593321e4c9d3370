"""Redis connection used by the redis snapshot cache"""

import os
import logging
from typing import Optional
import redis


class RedisClient:
    """
    Stores whole text values under single keys

    The job board keeps its entire snapshot under one key, so a write is one
    ``SET``: readers see either the previous snapshot or the new one, never a
    partial value.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        db: Optional[int] = None,
        client: Optional[redis.Redis] = None
    ):
        """
        Connect to redis, or wrap an existing connection

        Connection settings default to REDIS_HOST, REDIS_PORT and REDIS_DB,
        then to localhost:6379/0.

        Args:
            host: Server host
            port: Server port
            db: Database number
            client: Connection to wrap instead of opening a new one

        Raises:
            redis.ConnectionError: If a new connection cannot reach the server
        """
        self.logger = logging.getLogger("gojobs.utils.redis")
        self.host = host or os.getenv('REDIS_HOST', 'localhost')
        self.port = int(port or os.getenv('REDIS_PORT', 6379))
        self.db = int(db or os.getenv('REDIS_DB', 0))
        self.client = client if client is not None else self._connect()

    def _connect(self) -> redis.Redis:
        connection = redis.Redis(
            host=self.host,
            port=self.port,
            db=self.db,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5
        )
        try:
            connection.ping()
        except redis.ConnectionError as e:
            self.logger.error(f"Failed to connect to Redis at {self.host}:{self.port}/{self.db}: {e}")
            raise
        self.logger.info(f"Connected to Redis at {self.host}:{self.port}/{self.db}")
        return connection

    def load(self, key: str) -> Optional[str]:
        """Value stored under key, None if the key does not exist"""
        value = self.client.get(key)
        if isinstance(value, bytes):
            value = value.decode('utf-8')
        return value

    def store(self, key: str, value: str) -> None:
        self.client.set(key, value)

    def delete(self, key: str) -> bool:
        """Delete key; returns whether it existed"""
        return bool(self.client.delete(key))

    def close(self) -> None:
        try:
            self.client.close()
        except redis.RedisError as e:
            self.logger.error(f"Error closing Redis connection: {e}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
