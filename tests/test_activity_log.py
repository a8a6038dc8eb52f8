"""Tests for ActivityLog recording and time display."""

from __future__ import annotations

import asyncio
import datetime

from teamhub.activity_log import describe_activity, format_activity_time
from teamhub.models import ACTIVITIES, Activity, InventoryItem
from teamhub.sync_client import SyncResult


def test_record_uses_placeholders_when_nobody_is_signed_in(store, remote) -> None:
    activity = asyncio.run(store.activity_log.record(None, "added new item", "Zip Ties"))

    assert activity.user == "Current User"
    assert activity.avatar == "CU"
    assert remote.tables[ACTIVITIES][0]["user_name"] == "Current User"
    assert store.activities[0] == activity


def test_record_failure_adds_nothing(store, remote) -> None:
    remote.fail("create", ACTIVITIES)

    activity = asyncio.run(store.activity_log.record("Sarah Chen", "created event", "Practice"))

    assert activity is None
    assert store.activities == []


def test_record_discards_response_without_id(store, remote, monkeypatch) -> None:
    monkeypatch.setattr(
        remote, "create", lambda collection, payload: SyncResult.success({"action": "x"})
    )

    activity = asyncio.run(store.activity_log.record("Sarah Chen", "created event"))

    assert activity is None
    assert store.activities == []


def test_non_object_activity_response_keeps_item_commit(store, remote, monkeypatch) -> None:
    create = remote.create

    def create_with_list_for_activities(collection, payload):
        if collection == ACTIVITIES:
            return SyncResult.success([{"id": 9, "action": "added new item"}])
        return create(collection, payload)

    monkeypatch.setattr(remote, "create", create_with_list_for_activities)

    item, _ = asyncio.run(
        store.add_inventory_item(
            InventoryItem(
                name="Motor", control_id="MTR-012", quantity=4, status="available", type="motors"
            )
        )
    )

    assert item is not None
    assert [i.name for i in store.inventory] == ["Motor"]
    assert store.activities == []


def test_actor_comes_from_signed_in_member(store, remote, session) -> None:
    remote.credentials["taylor@example.com"] = (
        "pw",
        {"id": 6, "name": "Taylor Swift", "role": "Adviser", "avatar": "TS"},
    )
    asyncio.run(session.login("taylor@example.com", "pw"))

    asyncio.run(
        store.add_inventory_item(
            InventoryItem(
                name="Vision Sensor",
                control_id="SNS-008",
                quantity=2,
                status="used",
                type="sensors",
            )
        )
    )

    assert store.activities[0].user == "Taylor Swift"
    assert store.activities[0].avatar == "TS"


def test_format_activity_time() -> None:
    now = datetime.datetime(2024, 11, 25, 12, 0, tzinfo=datetime.timezone.utc)

    assert format_activity_time("2024-11-25T11:59:30Z", now) == "Just now"
    assert format_activity_time("2024-11-25T11:55:00+00:00", now) == "5 minutes ago"
    assert format_activity_time("2024-11-25T11:00:00", now) == "1 hour ago"
    assert format_activity_time("2024-11-23T12:00:00Z", now) == "2 days ago"
    assert format_activity_time("2 hours ago", now) == "2 hours ago"


def test_describe_activity_uses_relative_time() -> None:
    now = datetime.datetime(2024, 11, 25, 12, 0, tzinfo=datetime.timezone.utc)
    added = Activity(user="Sarah Chen", action="added new item", item="Motor", time="2024-11-25T10:00:00Z")
    joined = Activity(user="Alex Kim", action="joined the team", time="1 day ago")

    assert describe_activity(added, now) == "Sarah Chen added new item Motor (2 hours ago)"
    assert describe_activity(joined, now) == "Alex Kim joined the team (1 day ago)"
