"""Unit tests for the portfolio event webhook client"""

import asyncio
import json
import httpx
import pytest
from lendbox.domain.exceptions import EventDeliveryError
from lendbox.infrastructure.clients.events import EventClient

WEBHOOK_URL = "http://subscriber.test/events"


def test_send_event_posts_payload():
    """Test event name is merged into the JSON body"""
    received = []

    def handler(request: httpx.Request) -> httpx.Response:
        received.append(json.loads(request.content))
        return httpx.Response(202)

    client = EventClient(WEBHOOK_URL, transport=httpx.MockTransport(handler))
    asyncio.run(client.send_event("loan.created", {"loan_id": "l1", "principal": 30000.0}))

    assert received == [{"event": "loan.created", "loan_id": "l1", "principal": 30000.0}]


def test_send_event_retries_then_succeeds():
    """Test transient 5xx responses are retried"""
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(503 if len(attempts) < 3 else 200)

    client = EventClient(WEBHOOK_URL, transport=httpx.MockTransport(handler), max_retries=5, backoff_base=0)
    asyncio.run(client.send_event("installment.paid", {"loan_id": "l1", "installment_no": 1}))

    assert len(attempts) == 3


def test_send_event_gives_up_after_max_retries():
    """Test persistent failure raises after the configured attempts"""
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(500)

    client = EventClient(WEBHOOK_URL, transport=httpx.MockTransport(handler), max_retries=2, backoff_base=0)

    with pytest.raises(EventDeliveryError):
        asyncio.run(client.send_event("client.created", {"client_id": "c1"}))
    assert len(attempts) == 2
