import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from models.event_log import EventLogEntry
from models.site import HISTORY_LIMIT, Site, SiteStatus
from services.event_log import EventLog
from services.remediation import RemediationDispatcher
from services.site_registry import SiteRegistry

RECOVERED_MESSAGE = "Service recovered"
DEFAULT_ERROR_MESSAGE = "Connection Error"


@dataclass(frozen=True)
class ProbeOutcome:
    success: bool
    latency: int = 0  # ms, only meaningful on success
    error: Optional[str] = None
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class Transition:
    site: Site
    event: Optional[EventLogEntry] = None
    remediation: List[str] = field(default_factory=list)


def _event(site: Site, status: SiteStatus, message: str, timestamp: datetime) -> EventLogEntry:
    return EventLogEntry(
        id=uuid.uuid4().hex,
        website_id=site.id,
        name=site.name,
        status=status,
        timestamp=timestamp,
        message=message,
    )


def next_state(site: Site, outcome: ProbeOutcome) -> Transition:
    """Compute the site state that follows a probe outcome.

    Pure: returns a new ``Site`` plus the event to log (if the status changed in a
    way worth reporting) and the recovery plans to run. ``site`` is left untouched.
    """
    event = None
    remediation: List[str] = []

    if outcome.success:
        if site.status == SiteStatus.DOWN:
            event = _event(site, SiteStatus.UP, RECOVERED_MESSAGE, outcome.checked_at)
        status, latency = SiteStatus.UP, max(0, outcome.latency)
    else:
        if site.status in (SiteStatus.UP, SiteStatus.PENDING):
            message = outcome.error or DEFAULT_ERROR_MESSAGE
            event = _event(site, SiteStatus.DOWN, message, outcome.checked_at)
        status, latency = SiteStatus.DOWN, 0
        # Fires on every failed check, not just the first one of an outage.
        remediation = list(site.recovery_plans)

    history = (site.history + [latency])[-HISTORY_LIMIT:]
    updated = site.model_copy(
        update={
            "status": status,
            "latency": latency,
            "history": history,
            "last_checked": outcome.checked_at,
        }
    )
    return Transition(site=updated, event=event, remediation=remediation)


class StatusStateMachine:
    def __init__(self, registry: SiteRegistry, event_log: EventLog, dispatcher: RemediationDispatcher):
        self.registry = registry
        self.event_log = event_log
        self.dispatcher = dispatcher

    async def apply(self, site: Site, outcome: ProbeOutcome) -> Site:
        transition = next_state(site, outcome)

        # Commit before the first await so readers see old or new state, never a mix.
        self.registry.update(transition.site)
        if transition.event:
            self.event_log.append(transition.event)

        for action in transition.remediation:
            await self.dispatcher.dispatch(action, site.url)

        return transition.site
