from __future__ import annotations

import asyncio
import json

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import Config
from app.core.middlewares import logger


class NotificationError(Exception):
    pass


def _build_sqs_client():
    client_kwargs: dict[str, str] = {}
    if Config.AWS_REGION:
        client_kwargs["region_name"] = Config.AWS_REGION
    if Config.AWS_ACCESS_KEY and Config.AWS_SECRET_KEY:
        client_kwargs["aws_access_key_id"] = Config.AWS_ACCESS_KEY
        client_kwargs["aws_secret_access_key"] = Config.AWS_SECRET_KEY
    return boto3.client("sqs", **client_kwargs)


def _send_event(event_data: dict, deduplication_id: str | None = None) -> None:
    if not Config.NOTIFICATION_QUEUE_URL:
        logger.debug(f"[event_publisher] no queue configured, skipping {event_data.get('event')}")
        return

    message = {
        "QueueUrl": Config.NOTIFICATION_QUEUE_URL,
        "MessageBody": json.dumps(event_data),
    }
    if Config.NOTIFICATION_QUEUE_URL.endswith(".fifo"):
        message["MessageGroupId"] = str(event_data.get("reservation_id") or "ledger-events")
        message["MessageDeduplicationId"] = str(deduplication_id)

    try:
        _build_sqs_client().send_message(**message)
    except (BotoCoreError, ClientError) as exc:
        raise NotificationError(f"send_message failed: {exc}") from exc
    logger.debug(f"[event_publisher] sent {event_data.get('event')}")


async def publish_installment_paid_event(event_data: dict) -> None:
    await asyncio.to_thread(
        _send_event, event_data, f"paid-{event_data.get('installment_id')}"
    )


async def publish_installment_plan_created_event(event_data: dict) -> None:
    await asyncio.to_thread(
        _send_event, event_data, f"plan-{event_data.get('plan_id')}"
    )
