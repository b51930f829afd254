"""Tests for notifications.notifiers module."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import orjson
import pytest

from railwatch.notifications import (
    LoggingNotifier,
    Notification,
    NotificationCategory,
    NotificationDeliveryError,
    SoundCue,
    WebhookNotifier,
)
from railwatch.notifications.notifiers import _dumps


def _notification() -> Notification:
    return Notification(
        identifier="svc-a-1",
        source_id="svc-a",
        title="✅ api Deployed",
        body="Deployment completed successfully",
        category=NotificationCategory.STATUS_CHANGE,
        url="https://railway.com/project/proj-1/service/svc-a",
        sound=SoundCue.SUCCESS,
        project_id="proj-1",
        timestamp=1714564800.0,
    )


def _mock_session(status: int, text: str = ""):
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value=text)
    post_cm = MagicMock()
    post_cm.__aenter__ = AsyncMock(return_value=response)
    post_cm.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.post = MagicMock(return_value=post_cm)
    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=session)
    session_cm.__aexit__ = AsyncMock(return_value=False)
    return session_cm, session


def test_notification_to_dict_uses_wire_values() -> None:
    payload = _notification().to_dict()

    assert payload["category"] == "STATUS_CHANGE"
    assert payload["sound"] == "success"
    assert orjson.loads(_dumps(payload))["title"] == "✅ api Deployed"


@pytest.mark.asyncio
async def test_webhook_posts_json() -> None:
    session_cm, session = _mock_session(204)
    notifier = WebhookNotifier("https://hooks.example.com/railwatch")

    with patch("railwatch.notifications.notifiers.aiohttp.ClientSession", return_value=session_cm):
        await notifier.deliver(_notification())

    args, kwargs = session.post.call_args
    assert args == ("https://hooks.example.com/railwatch",)
    assert kwargs["json"]["identifier"] == "svc-a-1"


@pytest.mark.asyncio
async def test_webhook_error_status_raises() -> None:
    session_cm, _ = _mock_session(500, "boom")
    notifier = WebhookNotifier("https://hooks.example.com/railwatch")

    with patch("railwatch.notifications.notifiers.aiohttp.ClientSession", return_value=session_cm):
        with pytest.raises(NotificationDeliveryError, match="500: boom"):
            await notifier.deliver(_notification())


@pytest.mark.asyncio
async def test_logging_notifier_writes_log(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="railwatch.notifications.notifiers"):
        await LoggingNotifier().deliver(_notification())

    assert "✅ api Deployed | Deployment completed successfully" in caplog.text
