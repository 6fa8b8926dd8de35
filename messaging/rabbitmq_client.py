# messaging/rabbitmq_client.py

import pika
import json
import threading
import time
import logging
from django.conf import settings

logger = logging.getLogger(__name__)


class RabbitMQClient:
    """
    Publishes JSON messages to RabbitMQ. Each thread gets its own blocking
    connection; each publish uses a fresh channel and is retried after
    transient broker or network failures.
    """
    _thread_local = threading.local()

    def __init__(self, max_retries=3, retry_delay=1, socket_timeout=5):
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.socket_timeout = socket_timeout

    def _connection_parameters(self):
        params = pika.URLParameters(settings.RABBITMQ_URL)
        # Publishing happens inside request handlers; never let a dead broker hang them.
        params.socket_timeout = self.socket_timeout
        params.blocked_connection_timeout = self.socket_timeout
        params.connection_attempts = 1
        return params

    def _get_connection(self):
        connection = getattr(self._thread_local, 'connection', None)
        if connection is None or connection.is_closed:
            logger.info(f"Thread {threading.get_ident()}: opening RabbitMQ connection.")
            self._thread_local.connection = pika.BlockingConnection(self._connection_parameters())
        return self._thread_local.connection

    def _invalidate_connection(self):
        connection = getattr(self._thread_local, 'connection', None)
        if connection is not None and connection.is_open:
            try:
                connection.close()
            except pika.exceptions.AMQPError:
                logger.debug("Ignoring error while closing a broken RabbitMQ connection.", exc_info=True)
        self._thread_local.connection = None

    def publish(self, exchange_name, routing_key, body, exchange_type='topic'):
        """Publishes `body` as persistent JSON, raising after the last failed attempt."""
        for attempt in range(1, self.max_retries + 1):
            try:
                connection = self._get_connection()
                with connection.channel() as channel:
                    channel.exchange_declare(
                        exchange=exchange_name,
                        exchange_type=exchange_type,
                        durable=True
                    )
                    channel.basic_publish(
                        exchange=exchange_name,
                        routing_key=routing_key,
                        body=json.dumps(body, default=str),
                        properties=pika.BasicProperties(
                            content_type='application/json',
                            delivery_mode=pika.DeliveryMode.Persistent,
                        )
                    )
                logger.info(f"Published '{routing_key}' to exchange '{exchange_name}' (attempt {attempt}).")
                return
            except (pika.exceptions.AMQPError, OSError) as e:
                logger.warning(f"Publish attempt {attempt} of '{routing_key}' failed: {e}")
                self._invalidate_connection()
                if attempt == self.max_retries:
                    logger.error(f"Giving up on '{routing_key}' after {self.max_retries} attempts.")
                    raise
                time.sleep(self.retry_delay)


# Create a single, globally accessible instance.
rabbitmq_client = RabbitMQClient()
