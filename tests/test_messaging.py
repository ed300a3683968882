import json
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError

from src.subnft.services import messaging_service
from src.subnft.services.messaging_service import MessagingService, get_messaging_service

EVENT = {"id": 1, "operation": "subscribe", "token_id": 0, "actor": "0xabc", "amount": 5, "timestamp": 1}


def make_service():
    sqs = MagicMock()
    sqs.get_queue_url.return_value = {"QueueUrl": "https://sqs.local/subnft-events"}
    with patch.object(messaging_service.boto3, "client", return_value=sqs):
        service = MessagingService("subnft-events", region="eu-central-1")
    return service, sqs


async def test_publish_event_sends_wrapped_payload():
    service, sqs = make_service()

    message_id = await service.publish_event(EVENT)

    sqs.send_message.assert_called_once()
    kwargs = sqs.send_message.call_args.kwargs
    assert kwargs["QueueUrl"] == "https://sqs.local/subnft-events"
    body = json.loads(kwargs["MessageBody"])
    assert body["id"] == message_id
    assert body["type"] == "subscription_event"
    assert body["payload"] == EVENT


async def test_queue_url_is_cached():
    service, sqs = make_service()

    await service.publish_event(EVENT)
    await service.publish_event(EVENT)

    sqs.get_queue_url.assert_called_once_with(QueueName="subnft-events")
    assert sqs.send_message.call_count == 2


async def test_publish_failure_is_logged_not_raised():
    service, sqs = make_service()
    sqs.send_message.side_effect = ClientError(
        {"Error": {"Code": "AWS.SimpleQueueService.NonExistentQueue", "Message": "gone"}}, "SendMessage"
    )

    assert await service.publish_event(EVENT) is None


def test_publishing_disabled_without_queue(monkeypatch):
    monkeypatch.setattr(messaging_service.settings, "EVENT_QUEUE_NAME", "")
    assert get_messaging_service() is None
