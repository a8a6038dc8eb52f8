"""Main entry point for the application."""

import asyncio
import logging
import sys

from teamhub.activity_log import describe_activity
from teamhub.auth_session import AuthSession
from teamhub.config import get_config_value, validate_config
from teamhub.data_store import DataStore
from teamhub.database import SessionStore
from teamhub.logging_setup import setup_logging
from teamhub.reports import inventory_stats, team_presence
from teamhub.sync_client import SyncClient
from teamhub.voting import tally

RECENT_ACTIVITY_COUNT = 5

# Setup logging first
setup_logging()

logger = logging.getLogger(__name__)

validate_config()


async def run() -> int:
    client = SyncClient.from_config()
    session = AuthSession(
        client, SessionStore(get_config_value("session.store_file", "teamhub_session.db"))
    )
    store = DataStore(client, session)

    outcome = await store.load()
    failed = [name for name, ok in outcome.items() if not ok]
    if failed:
        logger.warning(f"Some collections could not be loaded: {', '.join(failed)}")

    snapshot = store.snapshot()
    stats = inventory_stats(snapshot.inventory)
    presence = team_presence(snapshot.team_members)
    logger.info(
        f"Inventory: {stats['total']} items ({stats['available']} available, "
        f"{stats['used']} used, {stats['broken']} broken); "
        f"{len(snapshot.events)} events; {len(snapshot.activities)} activities; "
        f"{presence['online']}/{presence['total']} members online"
    )
    for event in snapshot.events:
        if event.gather_availability:
            votes = tally(event)
            logger.info(
                f"{event.title} ({event.date}): {votes['available']} going, "
                f"{votes['pending']} maybe, {votes['not-available']} out"
            )
    for activity in snapshot.activities[:RECENT_ACTIVITY_COUNT]:
        logger.info(f"Recent: {describe_activity(activity)}")
    if session.current_member:
        logger.info(f"Signed in as {session.current_member.name}")
    return 1 if len(failed) == len(outcome) else 0


if __name__ == "__main__":
    try:
        logger.info(f"Starting {get_config_value('app.app_name', 'TeamHub')}")
        sys.exit(asyncio.run(run()))
    except Exception as e:
        logger.critical(f"Failed to start: {e}", exc_info=True)
        sys.exit(1)
