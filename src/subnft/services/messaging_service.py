"""
Messaging service publishing subscription events to SQS for external indexers.
"""
import json
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.subnft.core.config import settings

logger = logging.getLogger(__name__)


class MessagingService:
    """
    Service for publishing ledger events to an SQS queue.

    Publishing happens after the command's transaction commits, so a queue
    outage never undoes a committed command. Failures are logged and the
    event stays available from the event log table.
    """

    def __init__(self, queue_name: str, region: str = settings.AWS_REGION, endpoint_url: Optional[str] = None):
        self.queue_name = queue_name
        self.sqs = boto3.client(
            "sqs",
            region_name=region,
            endpoint_url=endpoint_url or None
        )

        # Cache for queue URLs
        self._queue_urls: Dict[str, str] = {}

        logger.info(f"Initialized MessagingService with region {region}" +
                    (f" and endpoint {endpoint_url}" if endpoint_url else ""))

    async def get_queue_url(self, queue_name: str) -> str:
        """
        Get the URL for an SQS queue with caching.

        Args:
            queue_name: Name of the queue

        Returns:
            Queue URL
        """
        if queue_name in self._queue_urls:
            return self._queue_urls[queue_name]

        response = self.sqs.get_queue_url(QueueName=queue_name)
        queue_url = response["QueueUrl"]
        self._queue_urls[queue_name] = queue_url

        logger.info(f"Got URL for queue {queue_name}: {queue_url}")
        return queue_url

    def _create_message(self, event: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": str(uuid.uuid4()),
            "type": "subscription_event",
            "published_at": datetime.utcnow().isoformat(),
            "payload": event,
        }

    async def publish_event(self, event: Dict[str, Any]) -> Optional[str]:
        """
        Send one event to the event queue.

        Args:
            event: Serialised event row (operation, token_id, actor, amount, timestamp)

        Returns:
            Message ID, or None when the queue rejected the message
        """
        message = self._create_message(event)
        try:
            queue_url = await self.get_queue_url(self.queue_name)
            self.sqs.send_message(
                QueueUrl=queue_url,
                MessageBody=json.dumps(message)
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to publish {event.get('operation')} event: {e}")
            return None

        logger.info(f"Published {event.get('operation')} event {message['id']} to {self.queue_name}")
        return message["id"]


_messaging_service: Optional[MessagingService] = None


def get_messaging_service() -> Optional[MessagingService]:
    """Shared publisher, or None when EVENT_QUEUE_NAME is not configured."""
    global _messaging_service
    if not settings.EVENT_QUEUE_NAME:
        return None
    if _messaging_service is None:
        _messaging_service = MessagingService(
            settings.EVENT_QUEUE_NAME,
            region=settings.AWS_REGION,
            endpoint_url=settings.AWS_ENDPOINT_URL,
        )
    return _messaging_service
