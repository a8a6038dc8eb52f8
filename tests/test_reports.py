"""Tests for snapshot summaries."""

from __future__ import annotations

import datetime

import pytest

from teamhub.models import Event, InventoryItem, TeamMember
from teamhub.reports import (
    broken_items,
    broken_items_csv,
    events_on,
    filter_inventory,
    inventory_by_type,
    inventory_percentages,
    inventory_stats,
    team_presence,
)

INVENTORY = [
    InventoryItem(id=1, name="Aluminum C-Channel", control_id="MTL-001", quantity=25, status="available", type="metal"),
    InventoryItem(id=2, name="VEX V5 Brain", control_id="ELC-001", quantity=2, status="used", type="electronics"),
    InventoryItem(id=3, name="Line Tracking Sensor", control_id="SNS-004", quantity=4, status="available", type="sensors"),
    InventoryItem(id=6, name="Cortex Controller", control_id="ELC-002", quantity=1, status="broken", type="electronics"),
]


def test_inventory_stats() -> None:
    assert inventory_stats(INVENTORY) == {"total": 4, "available": 2, "used": 1, "broken": 1}
    assert inventory_stats([]) == {"total": 0, "available": 0, "used": 0, "broken": 0}


def test_inventory_by_type_lists_every_type() -> None:
    assert inventory_by_type(INVENTORY) == {
        "metal": 1,
        "consumable": 0,
        "sensors": 1,
        "motors": 0,
        "electronics": 2,
    }


def test_broken_items() -> None:
    assert [item.id for item in broken_items(INVENTORY)] == [6]


def test_filter_inventory() -> None:
    assert [i.id for i in filter_inventory(INVENTORY, "elc")] == [2, 6]
    assert [i.id for i in filter_inventory(INVENTORY, "sensor")] == [3]
    assert [i.id for i in filter_inventory(INVENTORY, item_type="electronics", status="used")] == [2]
    assert len(filter_inventory(INVENTORY, "", "all", "all")) == 4


def test_events_on() -> None:
    events = [
        Event(id=1, title="Regional Competition", date="2024-12-15"),
        Event(id=2, title="Team Practice", date="2024-11-25"),
    ]

    assert [e.id for e in events_on(events, "2024-11-25")] == [2]
    assert events_on(events, "2024-01-01") == []


def test_team_presence() -> None:
    members = [
        TeamMember(id=1, name="Sarah Chen", role="Driver", status="online"),
        TeamMember(id=2, name="Emily Davis", role="Notebook", status="offline"),
    ]

    assert team_presence(members) == {"online": 1, "total": 2}


def test_inventory_percentages() -> None:
    shares = inventory_percentages(INVENTORY)

    assert shares["available"] == pytest.approx(50.0)
    assert shares["used"] == pytest.approx(25.0)
    assert shares["broken"] == pytest.approx(25.0)


def test_inventory_percentages_of_empty_inventory_are_zero() -> None:
    assert inventory_percentages([]) == {"available": 0.0, "used": 0.0, "broken": 0.0}


def test_broken_items_csv_lists_only_broken_items() -> None:
    items = INVENTORY + [
        InventoryItem(id=7, name="Motor, 393", control_id="", quantity=1, status="broken", type="motors"),
    ]

    text = broken_items_csv(items, checked_on=datetime.date(2024, 11, 25))

    assert text.splitlines() == [
        "Item Name,Control ID,Category,Status,Last Checked",
        "Cortex Controller,ELC-002,electronics,broken,2024-11-25",
        '"Motor, 393",N/A,motors,broken,2024-11-25',
    ]


def test_broken_items_csv_of_empty_inventory_is_header_only() -> None:
    assert broken_items_csv([]).splitlines() == [
        "Item Name,Control ID,Category,Status,Last Checked"
    ]
