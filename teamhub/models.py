"""Data models for the application."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

INVENTORY = "inventory"
EVENTS = "events"
ACTIVITIES = "activities"
TEAM_MEMBERS = "team_members"

COLLECTIONS = (INVENTORY, EVENTS, ACTIVITIES, TEAM_MEMBERS)

ITEM_STATUSES = ("available", "used", "broken")
ITEM_TYPES = ("metal", "consumable", "sensors", "motors", "electronics")
MEMBER_STATUSES = ("online", "offline", "available", "not-available", "pending")
VOTE_STATUSES = ("available", "not-available", "pending")


@dataclass
class InventoryItem:
    """Model for a piece of team equipment."""

    name: str
    control_id: str
    quantity: int
    status: str
    type: str
    id: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "InventoryItem":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            control_id=data.get("control_id", ""),
            quantity=int(data.get("quantity") or 0),
            status=data.get("status", "available"),
            type=data.get("type", "metal"),
        )

    def to_api(self) -> Dict[str, Any]:
        payload = {
            "name": self.name,
            "control_id": self.control_id,
            "quantity": self.quantity,
            "status": self.status,
            "type": self.type,
        }
        if self.id is not None:
            payload["id"] = self.id
        return payload


@dataclass
class TeamMember:
    """Model for a roster entry."""

    name: str
    role: str
    status: str = "offline"
    avatar: Optional[str] = None
    email: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TeamMember":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            role=data.get("role", ""),
            status=data.get("status") or "offline",
            avatar=data.get("avatar"),
            email=data.get("email"),
        )


@dataclass
class EventAttendee:
    """Model for one member's availability vote on an event."""

    member_id: int
    name: str
    status: str = "pending"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "EventAttendee":
        member_id = data.get("member_id")
        if member_id is None:
            member_id = data.get("id")
        return cls(
            member_id=member_id,
            name=data.get("name", ""),
            status=data.get("status", "pending"),
        )

    def to_api(self) -> Dict[str, Any]:
        return {"id": self.member_id, "name": self.name, "status": self.status}


@dataclass
class Event:
    """Model for a scheduled team event."""

    title: str
    date: str = ""
    time: str = ""
    location: str = ""
    description: str = ""
    gather_availability: bool = False
    attendees: List[EventAttendee] = field(default_factory=list)
    id: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Event":
        return cls(
            id=data.get("id"),
            title=data.get("title", ""),
            date=data.get("event_date") or "",
            time=data.get("event_time") or "",
            location=data.get("location") or "",
            description=data.get("description") or "",
            gather_availability=bool(data.get("gather_availability")),
            attendees=[
                EventAttendee.from_api(a) for a in data.get("attendees") or []
            ],
        )

    def to_api(self) -> Dict[str, Any]:
        payload = {
            "title": self.title,
            "event_date": self.date,
            "event_time": self.time,
            "location": self.location,
            "description": self.description,
            "gather_availability": self.gather_availability,
            "attendees": [a.to_api() for a in self.attendees],
        }
        if self.id is not None:
            payload["id"] = self.id
        return payload


@dataclass
class Activity:
    """Model for an audit log entry."""

    user: str
    action: str
    item: Optional[str] = None
    time: str = "Just now"
    avatar: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Activity":
        return cls(
            id=data.get("id"),
            user=data.get("user_name") or data.get("user", ""),
            action=data.get("action", ""),
            item=data.get("item"),
            time=data.get("time") or "Just now",
            avatar=data.get("avatar"),
        )


@dataclass
class MemberProfile:
    """Public profile of the signed-in member. Never holds a secret."""

    id: int
    name: str
    role: str
    avatar: str
    email: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "MemberProfile":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            role=data.get("role", ""),
            avatar=data.get("avatar") or "",
            email=data.get("email"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "avatar": self.avatar,
            "email": self.email,
        }


@dataclass(frozen=True)
class StoreSnapshot:
    """Read-only view of all four collections at one point in time."""

    inventory: Tuple[InventoryItem, ...] = ()
    events: Tuple[Event, ...] = ()
    activities: Tuple[Activity, ...] = ()
    team_members: Tuple[TeamMember, ...] = ()
