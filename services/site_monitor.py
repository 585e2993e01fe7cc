import asyncio
import os
import signal
from typing import Iterable, Optional

from config import Settings
from jobs.scheduler import UptimeScheduler
from models.site import Site
from services.event_log import EventLog
from services.remediation import RemediationDispatcher, build_dispatcher
from services.site_registry import SiteRegistry
from services.status_machine import StatusStateMachine
from services.uptime_checker import UptimeChecker


class SiteMonitor:
    """Owns the monitoring state and the components that act on it.

    One instance per application; the HTTP layer reaches it through
    ``app.state.monitor``.
    """

    def __init__(self, settings: Optional[Settings] = None, dispatcher: Optional[RemediationDispatcher] = None):
        self.settings = settings or Settings()
        self.event_log = EventLog(retention=self.settings.event_log_retention)
        self.dispatcher = dispatcher or build_dispatcher(self.settings)
        self.registry = SiteRegistry()
        self.state_machine = StatusStateMachine(self.registry, self.event_log, self.dispatcher)
        self.checker = UptimeChecker(self.state_machine, timeout_ms=self.settings.probe_timeout_ms)
        self.scheduler = UptimeScheduler(
            self.registry,
            self.checker,
            interval=self.settings.check_interval_seconds,
            max_concurrent=self.settings.max_concurrent_checks,
            on_crash=self._on_scheduler_crash,
        )
        self.registry.on_add = self._on_site_added

    def _on_site_added(self, site: Site):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No running event loop (e.g. seeding before startup); the first tick covers it.
            return
        self.scheduler.check_now(site.id)

    def _on_scheduler_crash(self, error: BaseException):
        # uvicorn shuts down cleanly on SIGTERM.
        print(f"💥 Stopping the service: scheduler loop failed with {error!r}")
        os.kill(os.getpid(), signal.SIGTERM)

    def add_site(self, name: Optional[str], url: str, recovery_plans: Iterable[str] = ()) -> Site:
        return self.registry.add(name, url, recovery_plans)

    def seed(self):
        for entry in self.settings.monitored_sites:
            self.add_site(entry.name, entry.url, entry.recovery_plans)

    async def start(self):
        self.seed()
        if self.settings.disable_scheduler:
            print("⏸️ Scheduler disabled by configuration.")
            return
        self.scheduler.start_background()

    async def stop(self):
        await self.scheduler.stop()

    def reset(self):
        self.registry.reset()
        self.event_log.reset()
