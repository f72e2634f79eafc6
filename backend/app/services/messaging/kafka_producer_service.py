"""
Kafka message sink.

Publishes free-text messages to the configured topic. Sends are fire-and-forget:
the call returns once aiokafka has queued the record, and the broker's
acknowledgement is only logged.
"""

import asyncio
import logging
from typing import Optional

from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaError

from app.core.config import settings

logger = logging.getLogger("employees.kafka")


class KafkaProducerService:
    """
    Lazily started AIOKafkaProducer bound to a single topic.
    """

    def __init__(
        self,
        bootstrap_servers: Optional[str] = None,
        topic: Optional[str] = None,
        client_id: Optional[str] = None,
    ):
        self.bootstrap_servers = bootstrap_servers or settings.KAFKA_BOOTSTRAP_SERVERS
        self.topic = topic or settings.KAFKA_TOPIC
        self.client_id = client_id or settings.KAFKA_CLIENT_ID
        self._producer: Optional[AIOKafkaProducer] = None
        self._lock = asyncio.Lock()

    async def _get_producer(self) -> AIOKafkaProducer:
        async with self._lock:
            if self._producer is None:
                producer = AIOKafkaProducer(
                    bootstrap_servers=self.bootstrap_servers,
                    client_id=self.client_id,
                    request_timeout_ms=settings.KAFKA_REQUEST_TIMEOUT_MS,
                    value_serializer=lambda v: v.encode("utf-8"),
                )
                try:
                    await producer.start()
                except KafkaError:
                    # Release whatever start() opened before failing
                    await producer.stop()
                    raise
                self._producer = producer
                logger.info(f"Kafka producer connected to {self.bootstrap_servers}")
            return self._producer

    async def send_message(self, message: str) -> None:
        """Queue `message` for the topic; delivery is not awaited."""
        producer = await self._get_producer()
        delivery = await producer.send(self.topic, message)
        delivery.add_done_callback(self._log_delivery)
        logger.info(f"Message queued for topic '{self.topic}'")

    def _log_delivery(self, delivery: asyncio.Future) -> None:
        if delivery.cancelled():
            logger.warning(f"Delivery to '{self.topic}' was cancelled")
            return
        error = delivery.exception()
        if error is not None:
            logger.error(f"Delivery to '{self.topic}' failed: {error}")
            return
        metadata = delivery.result()
        logger.debug(
            f"Delivered to {metadata.topic}[{metadata.partition}] at offset {metadata.offset}"
        )

    async def close(self) -> None:
        if self._producer is not None:
            try:
                await self._producer.stop()
            except KafkaError as e:
                logger.warning(f"Error while stopping Kafka producer: {e}")
            finally:
                self._producer = None


# Global producer instance
_producer_service: Optional[KafkaProducerService] = None


def get_kafka_producer_service() -> KafkaProducerService:
    global _producer_service
    if _producer_service is None:
        _producer_service = KafkaProducerService()
    return _producer_service


async def close_kafka_producer_service() -> None:
    global _producer_service
    if _producer_service is not None:
        await _producer_service.close()
        _producer_service = None
