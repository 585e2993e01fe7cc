import asyncio
from typing import Callable, List, Optional, Set

from services.site_registry import SiteRegistry
from services.uptime_checker import UptimeChecker

CHECK_INTERVAL = 10  # seconds
MAX_CONCURRENT_CHECKS = 10


class UptimeScheduler:
    def __init__(
        self,
        registry: SiteRegistry,
        checker: UptimeChecker,
        interval: float = CHECK_INTERVAL,
        max_concurrent: int = MAX_CONCURRENT_CHECKS,
        on_crash: Optional[Callable[[BaseException], None]] = None,
    ):
        self.registry = registry
        self.checker = checker
        self.interval = interval
        self.on_crash = on_crash
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._running = False
        self._in_flight: Set[str] = set()  # site ids with a check underway
        self._pending: Set[asyncio.Task] = set()
        self._loop_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Fire a tick every ``interval`` seconds, measured from tick start.

        Ticks do not wait for their checks, so a slow site never pushes back the
        next tick; it is simply skipped while its previous check is still running.
        """
        self._running = True
        print(f"🔄 Uptime scheduler started (every {self.interval}s).")
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while self._running:
            self.tick()
            next_tick += self.interval
            await asyncio.sleep(max(0, next_tick - loop.time()))

    def start_background(self) -> asyncio.Task:
        self._loop_task = asyncio.create_task(self.start())
        self._loop_task.add_done_callback(self._on_loop_done)
        return self._loop_task

    def _on_loop_done(self, task: asyncio.Task):
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._running = False
            print(f"💥 Uptime scheduler crashed: {error!r}")
            if self.on_crash:
                self.on_crash(error)

    def tick(self) -> List[asyncio.Task]:
        """Start a check for every registered site and return without waiting."""
        sites = self.registry.list()
        if sites:
            print(f"🩺 Running health checks for {len(sites)} site(s)...")
        return [self.check_now(site.id) for site in sites]

    async def run_once(self):
        """One tick, waiting for all of its checks to finish."""
        await asyncio.gather(*self.tick())

    async def check_site(self, site_id: str) -> bool:
        """Check one site unless a check for it is already running.

        Returns False when the check was skipped.
        """
        if site_id in self._in_flight:
            return False
        self._in_flight.add(site_id)
        try:
            site = self.registry.get(site_id)
            if site is None:
                return False
            # Only the probe holds a worker slot; remediation runs outside it.
            async with self._semaphore:
                outcome = await self.checker.probe(site.url)
            await self.checker.record(site, outcome)
            return True
        except Exception as e:
            print(f"❌ Error checking site {site_id}: {e}")
            return False
        finally:
            self._in_flight.discard(site_id)

    def check_now(self, site_id: str) -> asyncio.Task:
        """Schedule an immediate out-of-band check without waiting for it."""
        task = asyncio.get_running_loop().create_task(self.check_site(site_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def stop(self):
        self._running = False
        if self._loop_task:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None
        for task in list(self._pending):
            task.cancel()
        print("⛔ Uptime scheduler stopped.")
