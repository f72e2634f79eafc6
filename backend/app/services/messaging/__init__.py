# Messaging Services Package
# Publishing to the message broker

from app.services.messaging.kafka_producer_service import (
    KafkaProducerService,
    close_kafka_producer_service,
    get_kafka_producer_service,
)

__all__ = [
    "KafkaProducerService",
    "get_kafka_producer_service",
    "close_kafka_producer_service",
]
