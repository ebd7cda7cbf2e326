"""
RabbitMQ publisher (pika, blocking connection).

Messages go to the default exchange with the queue name as routing key. The
queue is declared durable on first use. The connection is opened lazily so
that building the app never needs a running broker.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import pika

from payload_router.config import SnifferSettings

logger = logging.getLogger(__name__)


class RabbitPublisher:
    """
    Parameters
    ----------
    host, port, user, password : broker coordinates.
    queue : str
        Durable queue name (also the routing key).
    connect : callable, optional
        Factory taking `pika.ConnectionParameters` and returning a connection;
        defaults to `pika.BlockingConnection`.
    """

    def __init__(
        self,
        *,
        host: str = "localhost",
        port: int = 5672,
        user: str = "guest",
        password: str = "guest",
        queue: str = "sniffer",
        connect: Optional[Callable[[pika.ConnectionParameters], Any]] = None,
    ) -> None:
        self.queue = queue
        self._params = pika.ConnectionParameters(
            host=host,
            port=port,
            credentials=pika.PlainCredentials(user, password),
        )
        self._connect = connect or pika.BlockingConnection
        self._connection = None
        self._channel = None

    @classmethod
    def from_settings(cls, settings: SnifferSettings, **kwargs: Any) -> "RabbitPublisher":
        return cls(
            host=settings.rabbit_host,
            port=settings.rabbit_port,
            user=settings.rabbit_user,
            password=settings.rabbit_password,
            queue=settings.rabbit_queue,
            **kwargs,
        )

    def _ensure_channel(self):
        if self._channel is not None and self._channel.is_open:
            return self._channel

        self.close()
        self._connection = self._connect(self._params)
        self._channel = self._connection.channel()
        self._channel.queue_declare(
            queue=self.queue,
            durable=True,
            exclusive=False,
            auto_delete=False,
        )
        logger.info("Connected to RabbitMQ at %s:%s, queue=%s",
                    self._params.host, self._params.port, self.queue)
        return self._channel

    def publish(self, message: str) -> None:
        channel = self._ensure_channel()
        channel.basic_publish(
            exchange="",
            routing_key=self.queue,
            body=message.encode("utf-8"),
        )

    def close(self) -> None:
        conn, self._connection, self._channel = self._connection, None, None
        if conn is not None and conn.is_open:
            conn.close()
