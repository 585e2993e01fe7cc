from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from typing import List

from models.event_log import EventLogEntry
from models.site import Site, SiteCreate
from services.event_log import RECENT_LIMIT
from services.site_monitor import SiteMonitor

router = APIRouter(tags=["Uptime Monitoring"])


def get_monitor(request: Request) -> SiteMonitor:
    return request.app.state.monitor


# 📊 Current status of all sites
@router.get("/status", response_model=List[Site])
async def get_all_status(monitor: SiteMonitor = Depends(get_monitor)):
    """Snapshot of every monitored site with its latest status and latency history"""
    try:
        return monitor.registry.list()
    except Exception as e:
        print(f"Error reading site status: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# 📜 Recent status transitions
@router.get("/logs", response_model=List[EventLogEntry])
async def get_logs(
    limit: int = Query(RECENT_LIMIT, ge=1, le=RECENT_LIMIT),
    monitor: SiteMonitor = Depends(get_monitor),
):
    """Most recent status transitions, newest first"""
    try:
        return monitor.event_log.recent(limit)
    except Exception as e:
        print(f"Error reading event log: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# 🚀 Add a site
@router.post("/sites", response_model=Site, status_code=status.HTTP_201_CREATED)
async def add_site(payload: SiteCreate, monitor: SiteMonitor = Depends(get_monitor)):
    """Register a site. It is returned as PENDING; the first check runs in the background."""
    try:
        return monitor.add_site(payload.name, payload.url, payload.recovery_plans)
    except Exception as e:
        print(f"Error adding site {payload.url}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# 🔍 A single site
@router.get("/sites/{site_id}", response_model=Site)
async def get_site(site_id: str, monitor: SiteMonitor = Depends(get_monitor)):
    site = monitor.registry.get(site_id)
    if not site:
        raise HTTPException(status_code=404, detail=f"Site not found: {site_id}")
    return site


# 🧾 Transitions for one site
@router.get("/sites/{site_id}/logs", response_model=List[EventLogEntry])
async def get_site_logs(site_id: str, monitor: SiteMonitor = Depends(get_monitor)):
    """Retained transitions for a site, newest first. Works for deleted sites too."""
    return monitor.event_log.for_site(site_id)[:RECENT_LIMIT]


# ❌ Delete a site
@router.delete("/sites/{site_id}")
async def delete_site(site_id: str, monitor: SiteMonitor = Depends(get_monitor)):
    """Stop monitoring a site. Deleting an unknown id is not an error."""
    try:
        monitor.registry.remove(site_id)
        return {"message": "Deleted"}
    except Exception as e:
        print(f"Error deleting site {site_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
