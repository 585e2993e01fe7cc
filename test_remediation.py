import asyncio
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from config import Settings
from services.remediation import (
    CachePurgeAction,
    RemediationDispatcher,
    RemediationFailure,
    build_dispatcher,
)

MOCK_URL = "https://www.example.com"
ZONE_ID = "zone-123"
API_TOKEN = "token-abc"


def mock_purge_client(mock_client, status_code=200, payload=None, error=None):
    mock_instance = AsyncMock()
    if error is not None:
        mock_instance.post.side_effect = error
    else:
        response = MagicMock(status_code=status_code, reason_phrase="Forbidden")
        response.json.return_value = payload if payload is not None else {"success": True}
        mock_instance.post.return_value = response
    mock_client.return_value.__aenter__.return_value = mock_instance
    return mock_instance


@pytest.mark.asyncio
async def test_dispatch_runs_registered_handler():
    handler = AsyncMock()
    dispatcher = RemediationDispatcher()
    dispatcher.register("restart", handler)

    assert await dispatcher.dispatch("restart", MOCK_URL) is True
    handler.assert_awaited_once_with(MOCK_URL)
    assert dispatcher.actions() == ["restart"]


@pytest.mark.asyncio
async def test_unknown_action_is_ignored():
    dispatcher = RemediationDispatcher()
    assert await dispatcher.dispatch("reboot_the_internet", MOCK_URL) is False


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    RemediationFailure("purge rejected"),
    httpx.ConnectError("connection refused"),
    ValueError("not json"),
])
async def test_handler_failures_are_contained(error):
    dispatcher = RemediationDispatcher()
    dispatcher.register("clear_cache", AsyncMock(side_effect=error))

    assert await dispatcher.dispatch("clear_cache", MOCK_URL) is False


@pytest.mark.asyncio
async def test_cache_purge_posts_to_cloudflare():
    action = CachePurgeAction(ZONE_ID, API_TOKEN, timeout=5)

    with patch("services.remediation.httpx.AsyncClient") as mock_client:
        mock_instance = mock_purge_client(mock_client)
        await action(MOCK_URL)

    mock_client.assert_called_once_with(timeout=5)
    mock_instance.post.assert_awaited_once_with(
        f"https://api.cloudflare.com/client/v4/zones/{ZONE_ID}/purge_cache",
        json={"files": [MOCK_URL]},
        headers={"Authorization": f"Bearer {API_TOKEN}"},
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("zone_id,api_token", [(None, API_TOKEN), (ZONE_ID, None), (None, None)])
async def test_cache_purge_requires_credentials(zone_id, api_token):
    action = CachePurgeAction(zone_id, api_token)

    with patch("services.remediation.httpx.AsyncClient") as mock_client:
        with pytest.raises(RemediationFailure):
            await action(MOCK_URL)
        mock_client.assert_not_called()


@pytest.mark.asyncio
async def test_cache_purge_http_error_raises():
    action = CachePurgeAction(ZONE_ID, API_TOKEN)

    with patch("services.remediation.httpx.AsyncClient") as mock_client:
        mock_purge_client(mock_client, status_code=403)
        with pytest.raises(RemediationFailure, match="403"):
            await action(MOCK_URL)


@pytest.mark.asyncio
async def test_cache_purge_rejected_by_api():
    action = CachePurgeAction(ZONE_ID, API_TOKEN)
    payload = {"success": False, "errors": [{"code": 1012, "message": "Invalid zone"}]}

    with patch("services.remediation.httpx.AsyncClient") as mock_client:
        mock_purge_client(mock_client, payload=payload)
        with pytest.raises(RemediationFailure, match="Invalid zone"):
            await action(MOCK_URL)


@pytest.mark.asyncio
async def test_default_dispatcher_without_credentials_fails_gracefully():
    dispatcher = build_dispatcher(Settings())

    assert dispatcher.actions() == ["clear_cache"]
    assert await dispatcher.dispatch("clear_cache", MOCK_URL) is False


@pytest.mark.asyncio
async def test_cache_purge_is_bounded_by_its_timeout():
    action = CachePurgeAction(ZONE_ID, API_TOKEN, timeout=0.05)

    async def hanging_post(*args, **kwargs):
        await asyncio.sleep(5)

    with patch("services.remediation.httpx.AsyncClient") as mock_client:
        mock_instance = AsyncMock()
        mock_instance.post.side_effect = hanging_post
        mock_client.return_value.__aenter__.return_value = mock_instance

        with pytest.raises(RemediationFailure, match="timed out"):
            await asyncio.wait_for(action(MOCK_URL), timeout=1)
