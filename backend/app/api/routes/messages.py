from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from app.api.deps import get_message_producer
from app.core.rate_limiter import RateLimits, limiter
from app.services.messaging import KafkaProducerService

router = APIRouter()

PUBLISHED_CONFIRMATION = "Message published successfully!"


@router.post("/publish", response_class=PlainTextResponse)
@limiter.limit(RateLimits.MESSAGE_PUBLISH)
async def publish_message(
    request: Request,
    message: str = Query(..., description="Free-text payload for the message topic"),
    producer: KafkaProducerService = Depends(get_message_producer),
) -> str:
    """
    Publish a message to the broker topic. Delivery is not awaited.
    """
    await producer.send_message(message)
    return PUBLISHED_CONFIRMATION
