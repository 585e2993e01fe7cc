import pytest
from unittest.mock import MagicMock

from models.event_log import EventLogEntry
from models.site import SiteStatus
from services.event_log import EventLog
from services.site_registry import SiteRegistry


def make_entry(i, site_id="site-1"):
    return EventLogEntry(
        id=f"event-{i}",
        website_id=site_id,
        name="Example",
        status=SiteStatus.DOWN if i % 2 else SiteStatus.UP,
        message=f"event {i}",
    )


def test_add_initializes_pending_site_and_notifies():
    on_add = MagicMock()
    registry = SiteRegistry(on_add=on_add)

    site = registry.add("Example", "https://www.example.com", ["clear_cache"])

    assert site.status == SiteStatus.PENDING
    assert site.history == []
    assert site.latency == 0
    assert site.last_checked is None
    assert site.recovery_plans == ["clear_cache"]
    assert registry.get(site.id) == site
    on_add.assert_called_once_with(site)


def test_add_assigns_unique_ids_and_defaults_name():
    registry = SiteRegistry()
    a = registry.add(None, "https://a.example.com")
    b = registry.add("B", "https://b.example.com")

    assert a.id != b.id
    assert a.name == "https://a.example.com"
    assert [s.id for s in registry.list()] == [a.id, b.id]


def test_remove_is_idempotent():
    registry = SiteRegistry()
    site = registry.add("Example", "https://www.example.com")

    assert registry.remove("missing") is False
    assert registry.remove("missing") is False
    assert len(registry) == 1
    assert registry.remove(site.id) is True
    assert registry.remove(site.id) is False
    assert len(registry) == 0
    assert registry.get(site.id) is None


def test_list_is_a_snapshot():
    registry = SiteRegistry()
    registry.add("A", "https://a.example.com")
    snapshot = registry.list()

    registry.add("B", "https://b.example.com")

    assert len(snapshot) == 1
    assert len(registry.list()) == 2


def test_update_ignores_removed_sites():
    registry = SiteRegistry()
    site = registry.add("Example", "https://www.example.com")
    updated = site.model_copy(update={"status": SiteStatus.UP, "latency": 42})

    assert registry.update(updated) is True
    assert registry.get(site.id).latency == 42

    registry.remove(site.id)
    assert registry.update(updated) is False
    assert registry.get(site.id) is None


def test_event_log_is_newest_first_and_capped_for_reads():
    log = EventLog(retention=100)
    for i in range(60):
        log.append(make_entry(i))

    recent = log.recent()
    assert len(recent) == 50
    assert recent[0].id == "event-59"
    assert recent[-1].id == "event-10"
    assert [e.id for e in log.recent(3)] == ["event-59", "event-58", "event-57"]


def test_event_log_retention_bounds_storage():
    log = EventLog(retention=60)
    for i in range(200):
        log.append(make_entry(i))

    assert len(log) == 60


def test_event_log_filters_by_site():
    log = EventLog()
    log.append(make_entry(1, "a"))
    log.append(make_entry(2, "b"))
    log.append(make_entry(3, "a"))

    assert [e.id for e in log.for_site("a")] == ["event-3", "event-1"]


def test_event_entries_are_immutable():
    entry = make_entry(1)
    with pytest.raises(Exception):
        entry.message = "changed"
