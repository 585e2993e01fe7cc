import asyncio
import httpx
import time
from datetime import datetime, timezone

from models.site import Site
from services.status_machine import DEFAULT_ERROR_MESSAGE, ProbeOutcome, StatusStateMachine


class UptimeChecker:
    def __init__(self, state_machine: StatusStateMachine, timeout_ms: int = 5000):
        self.state_machine = state_machine
        self.timeout_ms = timeout_ms

    @property
    def timeout_message(self) -> str:
        return f"Timeout of {self.timeout_ms}ms exceeded"

    async def probe(self, url: str) -> ProbeOutcome:
        """Send one GET to ``url``. Any response at all counts as the site being up.

        The timeout is a deadline for the whole exchange, redirects and body included.
        """
        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self.timeout_ms / 1000) as client:
                await asyncio.wait_for(
                    client.get(url, follow_redirects=True),
                    timeout=self.timeout_ms / 1000,
                )
        except asyncio.TimeoutError:
            error = self.timeout_message
        except httpx.TimeoutException as e:
            error = str(e) or self.timeout_message
        except httpx.RequestError as e:
            error = str(e) or DEFAULT_ERROR_MESSAGE
        except Exception as e:
            error = str(e) or DEFAULT_ERROR_MESSAGE
        else:
            latency = round((time.perf_counter() - start) * 1000)
            return ProbeOutcome(True, latency=latency, checked_at=datetime.now(timezone.utc))

        return ProbeOutcome(False, error=error, checked_at=datetime.now(timezone.utc))

    async def record(self, site: Site, outcome: ProbeOutcome) -> Site:
        if outcome.success:
            print(f"✅ Checked {site.name} ({site.url}): UP ({outcome.latency} ms)")
        else:
            print(f"❌ Checked {site.name} ({site.url}): DOWN ({outcome.error})")
        return await self.state_machine.apply(site, outcome)

    async def check_site(self, site: Site) -> Site:
        outcome = await self.probe(site.url)
        return await self.record(site, outcome)
