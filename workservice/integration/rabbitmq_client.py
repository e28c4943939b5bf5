"""Publishing of work events to a RabbitMQ exchange."""

from __future__ import annotations

import json
import logging
import time
from typing import Optional

import pika
import pika.exceptions
from pika.adapters.blocking_connection import BlockingChannel

from ..models import WorkCreatedEvent, to_json_dict


class MessagingError(Exception):
    """Raised when the message broker cannot be reached or used."""


def new_connection(url: str) -> pika.BlockingConnection:
    """Open a blocking connection to the broker at *url*."""
    try:
        return pika.BlockingConnection(pika.URLParameters(url))
    except (pika.exceptions.AMQPError, ValueError) as exc:
        raise MessagingError(f"failed to connect to RabbitMQ: {exc}") from exc


def new_channel(connection: pika.BlockingConnection) -> BlockingChannel:
    """Open a channel on an existing connection."""
    try:
        return connection.channel()
    except pika.exceptions.AMQPError as exc:
        raise MessagingError(f"failed to open channel: {exc}") from exc


def _close_quietly(resource, logger: logging.Logger, what: str) -> None:
    try:
        resource.close()
    except pika.exceptions.AMQPError as exc:
        logger.error(f"Failed to close RabbitMQ {what}", extra={"fields": {"error": str(exc)}})


class RabbitMQClient:
    """Declares a durable direct exchange and queue and publishes events to it."""

    def __init__(
        self,
        url: str,
        exchange: str,
        routing_key: str,
        queue_name: str,
        logger: logging.Logger,
    ) -> None:
        self._logger = logger
        self._exchange = exchange
        self._routing_key = routing_key

        connection = new_connection(url)
        try:
            channel = connection.channel()
        except pika.exceptions.AMQPError as exc:
            _close_quietly(connection, logger, "connection")
            raise MessagingError(f"failed to open channel: {exc}") from exc

        try:
            self._queue_name = self._declare(channel, queue_name)
        except MessagingError:
            _close_quietly(channel, logger, "channel")
            _close_quietly(connection, logger, "connection")
            raise

        self._connection: Optional[pika.BlockingConnection] = connection
        self._channel: Optional[BlockingChannel] = channel

        logger.info(
            "Connected to RabbitMQ",
            extra={
                "fields": {
                    "exchange": exchange,
                    "queue": self._queue_name,
                    "routing_key": routing_key,
                }
            },
        )

    @property
    def queue_name(self) -> str:
        return self._queue_name

    def _declare(self, channel: BlockingChannel, queue_name: str) -> str:
        try:
            channel.exchange_declare(
                exchange=self._exchange,
                exchange_type="direct",
                durable=True,
                auto_delete=False,
                internal=False,
            )
        except pika.exceptions.AMQPError as exc:
            raise MessagingError(f"failed to declare exchange: {exc}") from exc

        try:
            result = channel.queue_declare(
                queue=queue_name, durable=True, exclusive=False, auto_delete=False
            )
        except pika.exceptions.AMQPError as exc:
            raise MessagingError(f"failed to declare queue: {exc}") from exc
        declared = result.method.queue

        try:
            channel.queue_bind(
                queue=declared, exchange=self._exchange, routing_key=self._routing_key
            )
        except pika.exceptions.AMQPError as exc:
            raise MessagingError(f"failed to bind queue: {exc}") from exc
        return declared

    def publish_work_created(self, event: WorkCreatedEvent) -> None:
        """Publish *event* as a persistent JSON message."""
        if self._channel is None:
            raise MessagingError("failed to publish message: client is closed")
        body = json.dumps(to_json_dict(event), separators=(",", ":")).encode("utf-8")
        properties = pika.BasicProperties(
            content_type="application/json",
            delivery_mode=2,
            timestamp=int(time.time()),
        )
        try:
            self._channel.basic_publish(
                exchange=self._exchange,
                routing_key=self._routing_key,
                body=body,
                properties=properties,
                mandatory=False,
            )
        except pika.exceptions.AMQPError as exc:
            raise MessagingError(f"failed to publish message: {exc}") from exc

        self._logger.info(
            "Work created event published",
            extra={"fields": {"work_id": event.work_id, "file_id": event.file_id}},
        )

    def close(self) -> None:
        """Close channel and connection; failures are logged, not raised."""
        if self._channel is not None:
            _close_quietly(self._channel, self._logger, "channel")
            self._channel = None
        if self._connection is not None:
            _close_quietly(self._connection, self._logger, "connection")
            self._connection = None

    def __enter__(self) -> "RabbitMQClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()