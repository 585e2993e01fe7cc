from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError, field_validator
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

HISTORY_LIMIT = 20

_http_url = TypeAdapter(HttpUrl)


class SiteStatus(str, Enum):
    PENDING = "PENDING"
    UP = "UP"
    DOWN = "DOWN"


class SiteCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    url: str
    recovery_plans: List[str] = Field(default_factory=list, alias="recoveryPlans")

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """Must be an absolute http(s) URL; kept as submitted apart from surrounding whitespace."""
        value = value.strip()
        try:
            _http_url.validate_python(value)
        except ValidationError:
            raise ValueError(f"Invalid URL: {value!r}")
        return value


class Site(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    url: str
    status: SiteStatus = SiteStatus.PENDING
    latency: int = Field(0, description="Latest round-trip time in ms, 0 unless UP")
    history: List[int] = Field(default_factory=list, max_length=HISTORY_LIMIT)
    last_checked: Optional[datetime] = Field(None, alias="lastChecked")
    recovery_plans: List[str] = Field(default_factory=list, alias="recoveryPlans")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="createdAt"
    )
