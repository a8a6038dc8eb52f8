"""
In-memory state for one session, kept consistent with the remote service.

DataStore owns the four collections (inventory, events, activities, team members).
Remote mutations are pessimistic: the local snapshot changes only after the remote
call has succeeded, so a failed call never needs a rollback. Blocking HTTP calls run
in worker threads so the four initial fetches can proceed concurrently.

Key components:
- DataStore.load / refresh: fetch all collections, keeping prior data on failure
- Inventory mutations: remote-backed create, update and delete
- Event mutations: remote-backed create, local-only update and delete
- subscribe: snapshot listeners notified after every commit

Every action returns a (value, message) pair and never raises for an expected
network failure; the failure is logged and the snapshot is left untouched.
"""

import asyncio
import copy
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from teamhub.activity_log import ActivityLog
from teamhub.auth_session import AuthSession
from teamhub.models import (
    ACTIVITIES,
    COLLECTIONS,
    EVENTS,
    INVENTORY,
    ITEM_STATUSES,
    ITEM_TYPES,
    TEAM_MEMBERS,
    Activity,
    Event,
    InventoryItem,
    StoreSnapshot,
    TeamMember,
)
from teamhub.sync_client import SyncClient
from teamhub.voting import VotingEngine, seed_attendees

Listener = Callable[[StoreSnapshot], None]

PARSERS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    INVENTORY: InventoryItem.from_api,
    EVENTS: Event.from_api,
    ACTIVITIES: Activity.from_api,
    TEAM_MEMBERS: TeamMember.from_api,
}


def validate_item(item: InventoryItem) -> Optional[str]:
    """Return a reason the item cannot be saved, or None when it is valid."""
    if not item.name:
        return "Item name is required"
    if (
        not isinstance(item.quantity, int)
        or isinstance(item.quantity, bool)
        or item.quantity < 0
    ):
        return "Quantity must be a non-negative integer"
    if item.status not in ITEM_STATUSES:
        return f"Invalid item status: {item.status}"
    if item.type not in ITEM_TYPES:
        return f"Invalid item type: {item.type}"
    return None


class DataStore:
    """Single authoritative snapshot of all collections for one session."""

    def __init__(self, client: SyncClient, session: Optional[AuthSession] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.client = client
        self.session = session
        self._collections: Dict[str, List[Any]] = {name: [] for name in COLLECTIONS}
        self._listeners: List[Listener] = []
        self.activity_log = ActivityLog(self, client, session)
        self.voting = VotingEngine(self)

    # --- Snapshots ---

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            inventory=tuple(copy.deepcopy(self._collections[INVENTORY])),
            events=tuple(copy.deepcopy(self._collections[EVENTS])),
            activities=tuple(copy.deepcopy(self._collections[ACTIVITIES])),
            team_members=tuple(copy.deepcopy(self._collections[TEAM_MEMBERS])),
        )

    @property
    def inventory(self) -> List[InventoryItem]:
        return copy.deepcopy(self._collections[INVENTORY])

    @property
    def events(self) -> List[Event]:
        return copy.deepcopy(self._collections[EVENTS])

    @property
    def activities(self) -> List[Activity]:
        return copy.deepcopy(self._collections[ACTIVITIES])

    @property
    def team_members(self) -> List[TeamMember]:
        return copy.deepcopy(self._collections[TEAM_MEMBERS])

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with a fresh snapshot after every commit.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                self.logger.exception("Snapshot listener raised; continuing.")

    def _index_of(self, collection: str, id: int) -> Optional[int]:
        for index, entry in enumerate(self._collections[collection]):
            if entry.id == id:
                return index
        return None

    def find_inventory_item(self, id: int) -> Optional[InventoryItem]:
        index = self._index_of(INVENTORY, id)
        if index is None:
            return None
        return copy.deepcopy(self._collections[INVENTORY][index])

    def find_event(self, id: int) -> Optional[Event]:
        index = self._index_of(EVENTS, id)
        if index is None:
            return None
        return copy.deepcopy(self._collections[EVENTS][index])

    # --- Loading ---

    async def _fetch(self, collection: str) -> Optional[List[Any]]:
        result = await asyncio.to_thread(self.client.list, collection)
        if not result.ok:
            self.logger.error(
                f"Failed to load {collection}, keeping previous data: {result.error}"
            )
            return None
        try:
            return [PARSERS[collection](row) for row in result.data]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            self.logger.error(
                f"Malformed {collection} data, keeping previous data: {str(e)}"
            )
            return None

    async def load(self) -> Dict[str, bool]:
        """Fetch every collection concurrently; each one is replaced only on success."""
        self.logger.info("Loading all collections...")
        fetched = await asyncio.gather(*(self._fetch(name) for name in COLLECTIONS))

        outcome: Dict[str, bool] = {}
        for name, rows in zip(COLLECTIONS, fetched):
            outcome[name] = rows is not None
            if rows is not None:
                self._collections[name] = rows
                self.logger.debug(f"Loaded {len(rows)} {name} records.")

        self._notify()
        loaded = sum(outcome.values())
        self.logger.info(f"Loaded {loaded}/{len(COLLECTIONS)} collections.")
        return outcome

    async def refresh(self) -> Dict[str, bool]:
        return await self.load()

    # --- Inventory ---

    async def add_inventory_item(
        self, draft: InventoryItem
    ) -> Tuple[Optional[InventoryItem], str]:
        problem = validate_item(draft)
        if problem:
            self.logger.warning(f"Rejected new item '{draft.name}': {problem}")
            return None, problem

        payload = draft.to_api()
        payload.pop("id", None)
        result = await asyncio.to_thread(self.client.create, INVENTORY, payload)
        if not result.ok:
            self.logger.error(f"Failed to add item '{draft.name}': {result.error}")
            return None, f"Failed to add item: {result.error.message}"

        try:
            created = InventoryItem.from_api(result.data)
        except (AttributeError, TypeError, ValueError) as e:
            self.logger.error(f"Unreadable response when adding '{draft.name}': {e}")
            return None, "Unexpected response from server"
        if created.id is None:
            self.logger.error(f"Server returned no id for new item '{draft.name}'")
            return None, "Unexpected response from server"

        self._collections[INVENTORY].append(created)
        self._notify()
        self.logger.info(f"Added item '{created.name}' (ID: {created.id})")

        await self.activity_log.item_added(created)
        return copy.deepcopy(created), "Item added"

    async def update_inventory_item(
        self, item: InventoryItem
    ) -> Tuple[Optional[InventoryItem], str]:
        if item.id is None:
            return None, "Item has no id"
        problem = validate_item(item)
        if problem:
            self.logger.warning(f"Rejected update of item {item.id}: {problem}")
            return None, problem

        patch = item.to_api()
        patch.pop("id", None)
        result = await asyncio.to_thread(self.client.update, INVENTORY, item.id, patch)
        if not result.ok:
            self.logger.error(f"Failed to update item {item.id}: {result.error}")
            return None, f"Failed to update item: {result.error.message}"

        updated = copy.deepcopy(item)
        if isinstance(result.data, dict) and result.data.get("id") == item.id:
            updated = InventoryItem.from_api(result.data)

        # Prior status comes from the snapshot as it stands right before replacement
        index = self._index_of(INVENTORY, item.id)
        previous_status = None
        if index is None:
            self._collections[INVENTORY].append(updated)
        else:
            previous_status = self._collections[INVENTORY][index].status
            self._collections[INVENTORY][index] = updated
        self._notify()
        self.logger.info(f"Updated item {updated.id} ('{updated.name}')")

        if (
            previous_status is not None
            and previous_status != "broken"
            and updated.status == "broken"
        ):
            await self.activity_log.item_marked_broken(updated)
        return copy.deepcopy(updated), "Item updated"

    async def delete_inventory_item(self, id: int) -> Tuple[bool, str]:
        result = await asyncio.to_thread(self.client.remove, INVENTORY, id)
        if not result.ok:
            self.logger.error(f"Failed to delete item {id}: {result.error}")
            return False, f"Failed to delete item: {result.error.message}"

        self._collections[INVENTORY] = [
            entry for entry in self._collections[INVENTORY] if entry.id != id
        ]
        self._notify()
        self.logger.info(f"Deleted item {id}")
        return True, "Item deleted"

    # --- Events ---

    async def add_event(self, draft: Event) -> Tuple[Optional[Event], str]:
        if not draft.title:
            return None, "Event title is required"

        draft = copy.deepcopy(draft)
        if draft.gather_availability and not draft.attendees:
            draft.attendees = seed_attendees(self._collections[TEAM_MEMBERS])

        payload = draft.to_api()
        payload.pop("id", None)
        result = await asyncio.to_thread(self.client.create, EVENTS, payload)
        if not result.ok:
            self.logger.error(f"Failed to create event '{draft.title}': {result.error}")
            return None, f"Failed to create event: {result.error.message}"

        try:
            created = Event.from_api(result.data)
        except (AttributeError, TypeError, ValueError) as e:
            self.logger.error(f"Unreadable response creating '{draft.title}': {e}")
            return None, "Unexpected response from server"
        if created.id is None:
            self.logger.error(f"Server returned no id for event '{draft.title}'")
            return None, "Unexpected response from server"
        # The create response omits attendees; they come back on the next list
        if "attendees" not in result.data:
            created.attendees = copy.deepcopy(draft.attendees)

        self._collections[EVENTS].append(created)
        self._notify()
        self.logger.info(
            f"Created event '{created.title}' (ID: {created.id}) with {len(created.attendees)} attendees"
        )

        await self.activity_log.event_created(created)
        return copy.deepcopy(created), "Event created"

    async def update_event(self, event: Event) -> Tuple[Optional[Event], str]:
        """Replace the event by id. Local only: events have no remote update."""
        index = self._index_of(EVENTS, event.id) if event.id is not None else None
        if index is None:
            self.logger.warning(f"Cannot update unknown event {event.id}")
            return None, f"Event {event.id} not found"

        self._collections[EVENTS][index] = copy.deepcopy(event)
        self._notify()
        self.logger.debug(f"Updated event {event.id} locally")
        return copy.deepcopy(event), "Event updated"

    async def delete_event(self, id: int) -> Tuple[bool, str]:
        """Remove the event by id. Local only: events have no remote delete."""
        if self._index_of(EVENTS, id) is None:
            self.logger.warning(f"Cannot delete unknown event {id}")
            return False, f"Event {id} not found"

        self._collections[EVENTS] = [
            entry for entry in self._collections[EVENTS] if entry.id != id
        ]
        self._notify()
        self.logger.info(f"Deleted event {id} locally")
        return True, "Event deleted"

    # --- Activities ---

    def add_activity(self, activity: Activity) -> None:
        """Prepend a remotely confirmed activity. Reserved for ActivityLog."""
        self._collections[ACTIVITIES].insert(0, copy.deepcopy(activity))
        self._notify()
