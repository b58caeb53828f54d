"""Integration tests for the send-email endpoint."""

import pytest
from fastapi import status

from mailbridge.infrastructure.resilience import DispatchError, ErrorKind


@pytest.mark.asyncio
async def test_send_email_success(client, auth_headers, email_provider):
    response = await client.post(
        "/api/v1/send-email",
        json={"to": "friend@example.com", "subject": "Hi", "message": "Hello there"},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["message_id"].startswith("log_")
    assert data["to"] == "friend@example.com"
    assert data["subject"] == "Hi"

    sent = email_provider.sent[-1]
    assert sent.to == ["friend@example.com"]
    assert sent.text == "Hello there"
    assert sent.reply_to == "alice@mailbridge.test"


@pytest.mark.asyncio
async def test_send_email_defaults(client, auth_headers, email_provider):
    response = await client.post(
        "/api/v1/send-email",
        json={"to": "friend@example.com"},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    assert email_provider.sent[-1].subject == "Test Email from MailBridge"


@pytest.mark.asyncio
async def test_send_email_requires_auth(client):
    response = await client.post("/api/v1/send-email", json={"to": "friend@example.com"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_send_email_invalid_address(client, auth_headers):
    response = await client.post(
        "/api/v1/send-email",
        json={"to": "not-an-email"},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"]["code"] == "INVALID_REQUEST"


@pytest.mark.asyncio
async def test_send_email_provider_failure_then_circuit_open(
    client, auth_headers, email_provider, monkeypatch
):
    calls = []

    async def failing_send(message):
        calls.append(message)
        raise DispatchError("Invalid `to` field", ErrorKind.VALIDATION, status=422)

    monkeypatch.setattr(email_provider, "send", failing_send)
    payload = {"to": "friend@example.com"}

    for _ in range(2):
        response = await client.post("/api/v1/send-email", json=payload, headers=auth_headers)
        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["error"]["message"] == "Invalid `to` field"

    response = await client.post("/api/v1/send-email", json=payload, headers=auth_headers)

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["error"]["code"] == "SERVICE_UNAVAILABLE"
    assert len(calls) == 2
