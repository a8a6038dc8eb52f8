"""Shared fixtures: an in-memory remote service and wired-up sessions."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest

from teamhub.auth_session import AuthSession
from teamhub.data_store import DataStore
from teamhub.database import SessionStore
from teamhub.models import ACTIVITIES, COLLECTIONS, EVENTS, TEAM_MEMBERS
from teamhub.sync_client import SyncResult


class FakeSyncClient:
    """In-memory stand-in for SyncClient that behaves like the remote data API."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {name: [] for name in COLLECTIONS}
        self.failures: Set[Tuple[str, str]] = set()
        self.calls: List[Tuple[str, str]] = []
        self.next_ids: Dict[str, int] = {name: 1 for name in COLLECTIONS}
        self.forced_ids: Dict[str, int] = {}
        self.credentials: Dict[str, Tuple[str, Dict[str, Any]]] = {}

    def fail(self, method: str, collection: str) -> None:
        self.failures.add((method, collection))

    def _failed(self, method: str, collection: str) -> Optional[SyncResult]:
        self.calls.append((method, collection))
        if (method, collection) in self.failures:
            return SyncResult.failure("simulated failure", 500)
        return None

    def _assign_id(self, collection: str) -> int:
        if collection in self.forced_ids:
            return self.forced_ids.pop(collection)
        new_id = self.next_ids[collection]
        self.next_ids[collection] += 1
        return new_id

    def seed(self, collection: str, *rows: Dict[str, Any]) -> None:
        for row in rows:
            row = dict(row)
            row.setdefault("id", self._assign_id(collection))
            self.tables[collection].append(row)

    def list(self, collection: str) -> SyncResult:
        failed = self._failed("list", collection)
        if failed:
            return failed
        return SyncResult.success(copy.deepcopy(self.tables[collection]))

    def create(self, collection: str, payload: Dict[str, Any]) -> SyncResult:
        failed = self._failed("create", collection)
        if failed:
            return failed
        row = copy.deepcopy(payload)
        row["id"] = self._assign_id(collection)
        if collection == ACTIVITIES:
            row.setdefault("time", "Just now")
        if collection == TEAM_MEMBERS:
            row.pop("password", None)
        self.tables[collection].append(row)
        response = copy.deepcopy(row)
        # Like the real service, the event create response omits attendees
        if collection == EVENTS:
            response.pop("attendees", None)
        return SyncResult.success(response)

    def update(self, collection: str, id: int, patch: Dict[str, Any]) -> SyncResult:
        failed = self._failed("update", collection)
        if failed:
            return failed
        for row in self.tables[collection]:
            if row["id"] == id:
                row.update(copy.deepcopy(patch))
                return SyncResult.success(copy.deepcopy(row))
        return SyncResult.failure("not found", 404)

    def remove(self, collection: str, id: int) -> SyncResult:
        failed = self._failed("remove", collection)
        if failed:
            return failed
        self.tables[collection] = [r for r in self.tables[collection] if r["id"] != id]
        return SyncResult.success()

    def authenticate(self, identifier: str, secret: str) -> SyncResult:
        failed = self._failed("authenticate", "auth")
        if failed:
            return failed
        stored = self.credentials.get(identifier)
        if stored is None or stored[0] != secret:
            return SyncResult.failure("Invalid email or password", 401)
        return SyncResult.success(copy.deepcopy(stored[1]))


@pytest.fixture
def remote() -> FakeSyncClient:
    return FakeSyncClient()


@pytest.fixture
def session_store(tmp_path) -> SessionStore:
    return SessionStore(str(tmp_path / "session.db"))


@pytest.fixture
def session(remote, session_store) -> AuthSession:
    return AuthSession(remote, session_store)


@pytest.fixture
def store(remote, session) -> DataStore:
    return DataStore(remote, session)


@pytest.fixture
def roster(remote) -> FakeSyncClient:
    """Remote with three team members."""
    remote.seed(
        TEAM_MEMBERS,
        {"name": "Sarah Chen", "role": "Driver", "status": "online", "avatar": "SC"},
        {"name": "Mike Johnson", "role": "Programmer", "status": "online", "avatar": "MJ"},
        {"name": "Jordan Lee", "role": "Coach", "status": "offline", "avatar": "JL"},
    )
    return remote
