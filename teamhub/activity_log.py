"""Derived audit entries for a closed set of data store mutations."""

import asyncio
import datetime
import logging
from typing import TYPE_CHECKING, Optional

from teamhub.config import get_config_value
from teamhub.models import ACTIVITIES, Activity, Event, InventoryItem
from teamhub.sync_client import SyncClient

if TYPE_CHECKING:
    from teamhub.auth_session import AuthSession
    from teamhub.data_store import DataStore

ITEM_ADDED = "added new item"
ITEM_MARKED_BROKEN = "marked item as broken"
EVENT_CREATED = "created event"


def format_activity_time(value: str, now: Optional[datetime.datetime] = None) -> str:
    """Turn a server timestamp into a relative display string.

    Values that are not ISO timestamps (e.g. "2 hours ago") are returned unchanged.
    """
    try:
        stamp = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return value
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=datetime.timezone.utc)
    now = now or datetime.datetime.now(datetime.timezone.utc)

    seconds = int((now - stamp).total_seconds())
    if seconds < 60:
        return "Just now"
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return "Just now"


def describe_activity(activity: Activity, now: Optional[datetime.datetime] = None) -> str:
    """One display line for the activity feed, e.g. "Sarah Chen added new item Motor (2 hours ago)"."""
    parts = [activity.user, activity.action]
    if activity.item:
        parts.append(activity.item)
    return f"{' '.join(parts)} ({format_activity_time(activity.time, now)})"


class ActivityLog:
    """Persists an activity for each qualifying mutation and prepends it to the store.

    The trigger set is exactly item_added, item_marked_broken and event_created.
    """

    def __init__(
        self,
        store: "DataStore",
        client: SyncClient,
        session: Optional["AuthSession"] = None,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.store = store
        self.client = client
        self.session = session

    async def record(
        self,
        actor: Optional[str],
        action: str,
        item: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> Optional[Activity]:
        """Create the activity remotely; only a confirmed entry reaches the store."""
        payload = {
            "user_name": actor or get_config_value("activity.default_actor", "Current User"),
            "action": action,
            "item": item,
            "avatar": avatar or get_config_value("activity.default_avatar", "CU"),
        }
        result = await asyncio.to_thread(self.client.create, ACTIVITIES, payload)
        if not result.ok:
            self.logger.error(
                f"Activity '{action}' for '{item}' was not recorded: {result.error}"
            )
            return None

        try:
            activity = Activity.from_api(result.data)
        except (AttributeError, TypeError, ValueError) as e:
            self.logger.error(f"Unreadable response for activity '{action}': {e}")
            return None
        if activity.id is None:
            self.logger.error(
                f"Activity '{action}' response carried no id; discarding it."
            )
            return None
        self.store.add_activity(activity)
        return activity

    async def _record_for_actor(self, action: str, item: str) -> Optional[Activity]:
        actor = self.session.actor_name if self.session else None
        avatar = self.session.actor_avatar if self.session else None
        return await self.record(actor, action, item, avatar)

    async def item_added(self, item: InventoryItem) -> Optional[Activity]:
        return await self._record_for_actor(ITEM_ADDED, item.name)

    async def item_marked_broken(self, item: InventoryItem) -> Optional[Activity]:
        return await self._record_for_actor(ITEM_MARKED_BROKEN, item.name)

    async def event_created(self, event: Event) -> Optional[Activity]:
        return await self._record_for_actor(EVENT_CREATED, event.title)
