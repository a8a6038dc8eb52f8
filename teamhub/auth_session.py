"""
Identity of the signed-in team member.

AuthSession keeps the public profile of the current member, caches it in the
client-side SessionStore so that it survives restarts, and answers the role-based
permission questions used to decide who may manage events and inventory.
Credential verification itself happens on the remote authentication endpoint;
login and register are coroutines that run that call in a worker thread.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from teamhub.config import get_config_value
from teamhub.database import SessionStore
from teamhub.errors import ValidationFailure
from teamhub.models import TEAM_MEMBERS, MemberProfile
from teamhub.sync_client import SyncClient

CURRENT_MEMBER_KEY = "current_member"


def make_initials(name: str) -> str:
    """Build a two-letter avatar from a display name ('Sarah Chen' -> 'SC')."""
    parts = [part for part in name.split() if part]
    return "".join(part[0] for part in parts).upper()[:2]


class AuthSession:
    """Current member identity, persisted between runs."""

    def __init__(self, client: SyncClient, store: SessionStore):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.client = client
        self.store = store
        self.current_member: Optional[MemberProfile] = None
        self._rehydrate()

    def _rehydrate(self) -> None:
        cached = self.store.get_json(CURRENT_MEMBER_KEY)
        if not cached:
            self.logger.debug("No cached member profile found.")
            return
        try:
            self.current_member = MemberProfile.from_api(cached)
            self.logger.info(
                f"Restored session for {self.current_member.name} (ID: {self.current_member.id})"
            )
        except (KeyError, TypeError) as e:
            self.logger.warning(f"Ignoring malformed cached profile: {e}")
            self.store.delete(CURRENT_MEMBER_KEY)

    def _sign_in(self, data: Dict[str, Any], email: Optional[str]) -> MemberProfile:
        profile = MemberProfile.from_api(data)
        if not profile.avatar:
            profile.avatar = make_initials(profile.name)
        if email and not profile.email:
            profile.email = email.lower()
        self.current_member = profile
        self.store.set_json(CURRENT_MEMBER_KEY, profile.to_dict())
        return profile

    @property
    def is_authenticated(self) -> bool:
        return self.current_member is not None

    @property
    def actor_name(self) -> Optional[str]:
        return self.current_member.name if self.current_member else None

    @property
    def actor_avatar(self) -> Optional[str]:
        if self.current_member and self.current_member.avatar:
            return self.current_member.avatar
        return None

    async def login(self, identifier: str, secret: str) -> Tuple[Optional[MemberProfile], str]:
        """Authenticate with the remote endpoint and cache the returned profile."""
        if not identifier or not secret:
            raise ValidationFailure("Email and password are required")

        result = await asyncio.to_thread(
            self.client.authenticate, identifier.strip().lower(), secret
        )
        if not result.ok:
            if result.error.status_code == 401:
                self.logger.warning("Login rejected: invalid credentials.")
                return None, "Invalid email or password"
            self.logger.error(f"Login failed: {result.error}")
            return None, f"Login failed: {result.error.message}"

        try:
            profile = self._sign_in(result.data, identifier)
        except (KeyError, TypeError) as e:
            self.logger.error(f"Authentication response missing profile fields: {e}")
            return None, "Unexpected response from authentication service"
        self.logger.info(f"Signed in as {profile.name} (role: {profile.role})")
        return profile, "Signed in"

    async def register(
        self, name: str, email: str, secret: str, role: str
    ) -> Tuple[Optional[MemberProfile], str]:
        """Create a team member record and sign the new member in."""
        missing = [
            label
            for label, value in (
                ("name", name),
                ("email", email),
                ("password", secret),
                ("role", role),
            )
            if not value
        ]
        if missing:
            raise ValidationFailure(f"Missing required fields: {', '.join(missing)}")

        draft = {
            "name": name,
            "email": email.strip().lower(),
            "password": secret,
            "role": role,
            "status": "online",
            "avatar": make_initials(name),
        }
        result = await asyncio.to_thread(self.client.create, TEAM_MEMBERS, draft)
        if not result.ok:
            self.logger.error(f"Registration failed for {name}: {result.error}")
            return None, f"Failed to create account: {result.error.message}"

        try:
            profile = self._sign_in(result.data, email)
        except (KeyError, TypeError) as e:
            self.logger.error(f"Registration response missing profile fields: {e}")
            return None, "Unexpected response from registration"
        self.logger.info(f"Registered and signed in {profile.name} ({profile.role})")
        return profile, "Account created"

    def logout(self) -> None:
        if self.current_member:
            self.logger.info(f"Signing out {self.current_member.name}")
        self.current_member = None
        self.store.delete(CURRENT_MEMBER_KEY)

    def _has_role(self, config_key: str, fallback: list) -> bool:
        if not self.current_member:
            return False
        return self.current_member.role in get_config_value(config_key, fallback)

    def can_manage_events(self) -> bool:
        return self._has_role(
            "permissions.event_manager_roles", ["Coach", "Adviser"]
        )

    def can_manage_inventory(self) -> bool:
        return self._has_role(
            "permissions.inventory_manager_roles", ["Coach", "Adviser", "Builder"]
        )
