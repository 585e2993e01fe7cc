import uuid
from typing import Callable, Dict, Iterable, List, Optional

from models.site import Site, SiteStatus


class SiteRegistry:
    """In-memory set of monitored sites.

    Sites are never edited in place: checks store a new ``Site`` object through
    ``update()``, so anything returned by ``get()`` or ``list()`` is a consistent
    snapshot.
    """

    def __init__(self, on_add: Optional[Callable[[Site], None]] = None):
        self._sites: Dict[str, Site] = {}
        self.on_add = on_add

    def add(self, name: Optional[str], url: str, recovery_plans: Iterable[str] = ()) -> Site:
        site = Site(
            id=uuid.uuid4().hex,
            name=name or url,
            url=url,
            status=SiteStatus.PENDING,
            latency=0,
            history=[],
            recovery_plans=list(recovery_plans),
        )
        self._sites[site.id] = site
        print(f"➕ Registered {site.name} ({site.url}) as {site.id}")
        if self.on_add:
            self.on_add(site)
        return site

    def remove(self, site_id: str) -> bool:
        removed = self._sites.pop(site_id, None)
        if removed:
            print(f"🗑️ Removed {removed.name} ({removed.url})")
        return removed is not None

    def get(self, site_id: str) -> Optional[Site]:
        return self._sites.get(site_id)

    def list(self) -> List[Site]:
        return list(self._sites.values())

    def update(self, site: Site) -> bool:
        # A site deleted while its check was in flight stays deleted.
        if site.id not in self._sites:
            return False
        self._sites[site.id] = site
        return True

    def reset(self) -> None:
        self._sites.clear()

    def __len__(self) -> int:
        return len(self._sites)
