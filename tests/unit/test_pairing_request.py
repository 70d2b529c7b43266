import asyncio
import json

import httpx
import pytest

from beecli.config import ENVIRONMENTS, Environment
from beecli.errors import (
    EndpointNotFound,
    MalformedResponse,
    PairingError,
    RequestFailed,
    ValidationError,
)
from beecli.pairing import (
    CompletedPairing,
    ExpiredPairing,
    PairingClient,
    PendingPairing,
    request_pairing,
)

STAGING = ENVIRONMENTS[Environment.STAGING]


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_pending_response_posts_app_id_and_public_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "ok": True,
                "status": "pending",
                "requestId": "r1",
                "expiresAt": "2026-10-18T12:00:00Z",
            },
        )

    async with _client(handler) as http:
        outcome = await request_pairing(STAGING, STAGING.app_id, "abc123base64", client=http)

    assert outcome == PendingPairing(request_id="r1", expires_at="2026-10-18T12:00:00Z")
    assert seen["url"] == STAGING.pairing_url + "/apps/pairing/request"
    assert seen["body"] == {"app_id": STAGING.app_id, "publicKey": "abc123base64"}


@pytest.mark.asyncio
async def test_completed_and_expired_responses():
    responses = iter(
        [
            {"ok": True, "status": "completed", "requestId": "r1", "result": {"encryptedToken": "ct"}},
            {"ok": True, "status": "expired", "requestId": "r1"},
        ]
    )

    async with _client(lambda request: httpx.Response(200, json=next(responses))) as http:
        client = PairingClient(STAGING, client=http)
        completed = await client.request("app", "pk")
        expired = await client.request("app", "pk")

    assert completed == CompletedPairing(request_id="r1", encrypted_token="ct")
    assert expired == ExpiredPairing(request_id="r1")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"ok": False, "status": "pending", "requestId": "r1", "expiresAt": "x"},
        {"ok": True, "status": "approved", "requestId": "r1"},
        {"ok": True, "status": "pending", "requestId": "r1"},
        {"ok": True, "status": "completed", "requestId": "r1", "result": {}},
        {"ok": True, "status": "expired"},
        ["not", "an", "object"],
    ],
)
async def test_unrecognised_shapes_are_malformed(body):
    async with _client(lambda request: httpx.Response(200, json=body)) as http:
        with pytest.raises(MalformedResponse):
            await PairingClient(STAGING, client=http).request("app", "pk")


@pytest.mark.asyncio
async def test_non_json_success_is_malformed():
    async with _client(lambda request: httpx.Response(200, text="<html>")) as http:
        with pytest.raises(MalformedResponse):
            await PairingClient(STAGING, client=http).request("app", "pk")


@pytest.mark.asyncio
async def test_bare_404_means_endpoint_not_found():
    async with _client(lambda request: httpx.Response(404, text="nope")) as http:
        with pytest.raises(EndpointNotFound):
            await PairingClient(STAGING, client=http).request("app", "pk")


@pytest.mark.asyncio
async def test_error_code_is_surfaced():
    handler = lambda request: httpx.Response(400, json={"error": "unknown_app"})
    async with _client(handler) as http:
        with pytest.raises(RequestFailed) as excinfo:
            await PairingClient(STAGING, client=http).request("app", "pk")
    assert str(excinfo.value) == "unknown_app"
    assert excinfo.value.status_code == 400
    assert excinfo.value.code == "unknown_app"


@pytest.mark.asyncio
async def test_bare_error_status_is_surfaced():
    async with _client(lambda request: httpx.Response(503)) as http:
        with pytest.raises(RequestFailed, match="Request failed with status 503"):
            await PairingClient(STAGING, client=http).request("app", "pk")


@pytest.mark.asyncio
async def test_empty_public_key_is_rejected_without_request():
    def handler(request):  # pragma: no cover - must not be called
        raise AssertionError("request should not be sent")

    async with _client(handler) as http:
        with pytest.raises(ValidationError):
            await PairingClient(STAGING, client=http).request("app", "")


@pytest.mark.asyncio
async def test_transport_errors_become_pairing_errors():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as http:
        with pytest.raises(PairingError, match="Could not reach the pairing endpoint"):
            await PairingClient(STAGING, client=http).request("app", "pk")


@pytest.mark.asyncio
async def test_caller_timeout_interrupts_in_flight_request():
    async def slow(request):
        await asyncio.sleep(10)
        return httpx.Response(200, json={"ok": True, "status": "expired", "requestId": "r1"})

    async with _client(slow) as http:
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(PairingClient(STAGING, client=http).request("app", "pk"), 0.01)
