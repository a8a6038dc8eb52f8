"""Availability voting on events.

Every (event, member) pair is in one of three states: pending, available or
not-available. Any state can move to any other; there is no terminal state.
"""

import copy
import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple

from teamhub.models import VOTE_STATUSES, Event, EventAttendee, TeamMember

if TYPE_CHECKING:
    from teamhub.data_store import DataStore


def seed_attendees(members: Iterable[TeamMember]) -> List[EventAttendee]:
    """One pending attendee per member, in roster order."""
    seeded: List[EventAttendee] = []
    seen = set()
    for member in members:
        if member.id is None or member.id in seen:
            continue
        seen.add(member.id)
        seeded.append(EventAttendee(member_id=member.id, name=member.name))
    return seeded


def attendees_by_status(event: Event, status: str) -> List[EventAttendee]:
    return [a for a in event.attendees if a.status == status]


def current_vote(event: Event, member_id: int) -> Optional[str]:
    """The member's status on this event, or None when they have no entry."""
    for attendee in event.attendees:
        if attendee.member_id == member_id:
            return attendee.status
    return None


def tally(event: Event) -> Dict[str, int]:
    counts = {status: 0 for status in VOTE_STATUSES}
    for attendee in event.attendees:
        if attendee.status in counts:
            counts[attendee.status] += 1
    return counts


class VotingEngine:
    """Casts votes through the data store's event mutation path."""

    def __init__(self, store: "DataStore"):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.store = store

    async def cast_vote(
        self, event_id: int, member_id: int, member_name: str, status: str
    ) -> Tuple[Optional[Event], str]:
        if status not in VOTE_STATUSES:
            return None, f"Invalid vote status: {status}"

        event = self.store.find_event(event_id)
        if event is None:
            self.logger.warning(f"Vote for unknown event {event_id} ignored.")
            return None, f"Event {event_id} not found"

        updated = copy.deepcopy(event)
        existing = next(
            (a for a in updated.attendees if a.member_id == member_id), None
        )
        if existing is not None:
            existing.status = status
        else:
            updated.attendees.append(
                EventAttendee(member_id=member_id, name=member_name, status=status)
            )

        self.logger.debug(
            f"Member {member_id} voted '{status}' on event {event_id}"
        )
        return await self.store.update_event(updated)
