# slashAI - Discord Bot and MCP Server
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Lightweight usage tracking for the reminder bot.

Usage:
    from analytics import track, track_async

    # Fire-and-forget (uses a background task)
    track("reminder_scheduled", "reminder", user="octocat", repository="org/repo")

    # Await completion
    await track_async("command_used", "command", user="octocat", properties={"subcommand": "list"})

Events go to the analytics_events table of the bot database. Tracking never
raises; a failed insert is logged at debug level and dropped.
"""

import asyncio
import json
import logging
import os
from typing import Any, Optional

import asyncpg

logger = logging.getLogger("reminderbot.analytics")

ANALYTICS_SCHEMA = """
CREATE TABLE IF NOT EXISTS analytics_events (
    id BIGSERIAL PRIMARY KEY,
    event_name TEXT NOT NULL,
    event_category TEXT NOT NULL,
    username TEXT,
    repository TEXT,
    properties JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""

_pool: Optional[asyncpg.Pool] = None
_enabled: bool = os.getenv("ANALYTICS_ENABLED", "true").lower() == "true"


def configure(pool: Optional[asyncpg.Pool], enabled: bool = True) -> None:
    """Share the bot's connection pool with the tracker."""
    global _pool, _enabled
    _pool = pool
    _enabled = enabled and pool is not None


def is_enabled() -> bool:
    return _enabled


async def track_async(
    event_name: str,
    event_category: str,
    user: Optional[str] = None,
    repository: Optional[str] = None,
    properties: Optional[dict[str, Any]] = None,
) -> bool:
    """
    Track an event asynchronously.

    Args:
        event_name: Specific event identifier (e.g., "reminder_delivered")
        event_category: One of: command, reminder, error, system
        user: GitHub login (optional)
        repository: "owner/name" (optional)
        properties: Additional event data as key-value pairs

    Returns:
        True if event was recorded, False otherwise
    """
    if not _enabled or _pool is None:
        return False

    try:
        await _pool.execute(
            """
            INSERT INTO analytics_events
                (event_name, event_category, username, repository, properties)
            VALUES ($1, $2, $3, $4, $5)
            """,
            event_name,
            event_category,
            user,
            repository,
            json.dumps(properties or {}),
        )
        return True
    except Exception as e:
        logger.debug(f"Analytics tracking failed: {e}")
        return False


def track(
    event_name: str,
    event_category: str,
    user: Optional[str] = None,
    repository: Optional[str] = None,
    properties: Optional[dict[str, Any]] = None,
) -> None:
    """
    Track an event (fire-and-forget).

    Safe to call from sync or async contexts.
    """
    if not _enabled or _pool is None:
        return

    try:
        loop = asyncio.get_running_loop()
        loop.create_task(
            track_async(event_name, event_category, user, repository, properties)
        )
    except RuntimeError:
        # No running loop - skip tracking
        pass


async def ensure_schema() -> None:
    """Create the analytics table if tracking is on."""
    if _enabled and _pool is not None:
        await _pool.execute(ANALYTICS_SCHEMA)
