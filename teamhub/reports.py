"""Read-only summaries over the collections of a snapshot."""

import csv
import datetime
import io
from typing import Dict, Iterable, List, Optional

from teamhub.models import ITEM_STATUSES, ITEM_TYPES, Event, InventoryItem, TeamMember

ALL = "all"

BROKEN_REPORT_HEADERS = ["Item Name", "Control ID", "Category", "Status", "Last Checked"]


def inventory_stats(items: Iterable[InventoryItem]) -> Dict[str, int]:
    """Count of items overall and per status."""
    stats = {"total": 0}
    stats.update({status: 0 for status in ITEM_STATUSES})
    for item in items:
        stats["total"] += 1
        if item.status in stats:
            stats[item.status] += 1
    return stats


def inventory_by_type(items: Iterable[InventoryItem]) -> Dict[str, int]:
    counts = {item_type: 0 for item_type in ITEM_TYPES}
    for item in items:
        counts[item.type] = counts.get(item.type, 0) + 1
    return counts


def broken_items(items: Iterable[InventoryItem]) -> List[InventoryItem]:
    return [item for item in items if item.status == "broken"]


def inventory_percentages(items: Iterable[InventoryItem]) -> Dict[str, float]:
    """Share of items per status, as percentages. All zero for an empty inventory."""
    stats = inventory_stats(items)
    total = stats["total"]
    return {
        status: (stats[status] / total) * 100 if total > 0 else 0.0
        for status in ITEM_STATUSES
    }


def broken_items_csv(
    items: Iterable[InventoryItem], checked_on: Optional[datetime.date] = None
) -> str:
    """Export the broken items as CSV text, one row per item after the header.

    Items without a control id are written as "N/A". Last Checked is the export
    date unless ``checked_on`` is given.
    """
    checked = (checked_on or datetime.date.today()).isoformat()
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(BROKEN_REPORT_HEADERS)
    for item in broken_items(items):
        writer.writerow([item.name, item.control_id or "N/A", item.type, item.status, checked])
    return buffer.getvalue()


def filter_inventory(
    items: Iterable[InventoryItem],
    query: str = "",
    item_type: Optional[str] = ALL,
    status: Optional[str] = ALL,
) -> List[InventoryItem]:
    """Search by name or control id (case-insensitive), then filter by type and status.

    Passing "all" (or None) for type or status disables that filter.
    """
    needle = (query or "").strip().lower()
    matches = []
    for item in items:
        if needle and needle not in item.name.lower() and needle not in item.control_id.lower():
            continue
        if item_type not in (None, ALL) and item.type != item_type:
            continue
        if status not in (None, ALL) and item.status != status:
            continue
        matches.append(item)
    return matches


def events_on(events: Iterable[Event], date: str) -> List[Event]:
    """Events scheduled on an ISO date (YYYY-MM-DD)."""
    return [event for event in events if event.date == date]


def team_presence(members: Iterable[TeamMember]) -> Dict[str, int]:
    members = list(members)
    return {
        "online": sum(1 for member in members if member.status == "online"),
        "total": len(members),
    }
