import json

import pytest
from botocore.exceptions import ClientError

from app.utils import event_publisher
from app.utils.event_publisher import (
    NotificationError,
    publish_installment_paid_event,
    publish_installment_plan_created_event,
)


class FakeSQS:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.sent: list[dict] = []

    def send_message(self, **kwargs):
        if self.error:
            raise self.error
        self.sent.append(kwargs)
        return {"MessageId": "1"}


@pytest.fixture
def fake_sqs(monkeypatch):
    fake = FakeSQS()
    monkeypatch.setattr(event_publisher, "_build_sqs_client", lambda: fake)
    return fake


async def test_no_queue_configured_sends_nothing(monkeypatch, fake_sqs):
    monkeypatch.setattr(event_publisher.Config, "NOTIFICATION_QUEUE_URL", None)

    await publish_installment_paid_event({"event": "installment.paid", "installment_id": "i-1"})

    assert fake_sqs.sent == []


async def test_paid_event_on_fifo_queue(monkeypatch, fake_sqs):
    monkeypatch.setattr(
        event_publisher.Config, "NOTIFICATION_QUEUE_URL", "https://sqs.local/ledger.fifo"
    )
    event = {"event": "installment.paid", "installment_id": "i-1", "reservation_id": "r-1"}

    await publish_installment_paid_event(event)

    (message,) = fake_sqs.sent
    assert message["QueueUrl"] == "https://sqs.local/ledger.fifo"
    assert json.loads(message["MessageBody"]) == event
    assert message["MessageGroupId"] == "r-1"
    assert message["MessageDeduplicationId"] == "paid-i-1"


async def test_plan_event_on_standard_queue(monkeypatch, fake_sqs):
    monkeypatch.setattr(
        event_publisher.Config, "NOTIFICATION_QUEUE_URL", "https://sqs.local/ledger"
    )

    await publish_installment_plan_created_event(
        {"event": "installment_plan.created", "plan_id": "p-1", "reservation_id": "r-1"}
    )

    (message,) = fake_sqs.sent
    assert "MessageGroupId" not in message
    assert "MessageDeduplicationId" not in message


async def test_client_error_becomes_notification_error(monkeypatch):
    error = ClientError({"Error": {"Code": "AccessDenied", "Message": "nope"}}, "SendMessage")
    monkeypatch.setattr(event_publisher, "_build_sqs_client", lambda: FakeSQS(error))
    monkeypatch.setattr(
        event_publisher.Config, "NOTIFICATION_QUEUE_URL", "https://sqs.local/ledger"
    )

    with pytest.raises(NotificationError):
        await publish_installment_paid_event({"event": "installment.paid", "installment_id": "i-1"})
