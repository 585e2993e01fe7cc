from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone

from models.site import SiteStatus


class EventLogEntry(BaseModel):
    """A status transition, with a copy of the site's identity at the time it happened."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    website_id: str = Field(alias="websiteId")
    name: str
    status: SiteStatus  # the status transitioned into
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    message: str
