import asyncio
import httpx
from typing import Awaitable, Callable, Dict, List, Optional

CLOUDFLARE_API_BASE = "https://api.cloudflare.com/client/v4"

RemediationHandler = Callable[[str], Awaitable[None]]


class RemediationFailure(Exception):
    """A recovery action could not be carried out."""


class CachePurgeAction:
    """Purges the edge cache for a URL through the Cloudflare API."""

    def __init__(self, zone_id: Optional[str], api_token: Optional[str], timeout: float = 5):
        self.zone_id = zone_id
        self.api_token = api_token
        self.timeout = timeout

    async def __call__(self, url: str) -> None:
        if not self.zone_id or not self.api_token:
            raise RemediationFailure("Cloudflare zone id or API token is not configured")

        endpoint = f"{CLOUDFLARE_API_BASE}/zones/{self.zone_id}/purge_cache"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await asyncio.wait_for(
                    client.post(
                        endpoint,
                        json={"files": [url]},
                        headers={"Authorization": f"Bearer {self.api_token}"},
                    ),
                    timeout=self.timeout,
                )
        except asyncio.TimeoutError:
            raise RemediationFailure(f"Cache purge timed out after {self.timeout}s")

        if response.status_code >= 400:
            raise RemediationFailure(f"{response.status_code} {response.reason_phrase}")
        payload = response.json()
        if not payload.get("success", False):
            errors = payload.get("errors") or []
            detail = ", ".join(str(err.get("message", err)) for err in errors) or "unknown error"
            raise RemediationFailure(f"Cache purge rejected: {detail}")


class RemediationDispatcher:
    def __init__(self):
        self._handlers: Dict[str, RemediationHandler] = {}

    def register(self, name: str, handler: RemediationHandler) -> None:
        self._handlers[name] = handler

    def actions(self) -> List[str]:
        return sorted(self._handlers)

    async def dispatch(self, action: str, url: str) -> bool:
        """Run a recovery action. Never raises; returns whether it succeeded."""
        handler = self._handlers.get(action)
        if handler is None:
            print(f"⚠️ Unknown remediation action '{action}' for {url}, ignoring")
            return False

        try:
            await handler(url)
        except RemediationFailure as e:
            print(f"❌ Remediation '{action}' failed for {url}: {e}")
            return False
        except httpx.HTTPError as e:
            print(f"❌ Remediation '{action}' request failed for {url}: {e or type(e).__name__}")
            return False
        except Exception as e:
            print(f"❌ Unexpected error in remediation '{action}' for {url}: {e}")
            return False

        print(f"🧹 Remediation '{action}' completed for {url}")
        return True


def build_dispatcher(settings) -> RemediationDispatcher:
    dispatcher = RemediationDispatcher()
    dispatcher.register(
        "clear_cache",
        CachePurgeAction(
            settings.cloudflare_zone_id,
            settings.cloudflare_api_token,
            timeout=settings.remediation_timeout_seconds,
        ),
    )
    return dispatcher
