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
Reminder Store Module

Handles database operations for reminders and reminder groups. Owns
persistence only; scheduling lives in scheduler.py.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import asyncpg
import pytz
from dateutil.parser import isoparse

from .parser import ParsedReminder

logger = logging.getLogger("reminderbot.reminders.manager")

SCHEMA = """
CREATE TABLE IF NOT EXISTS reminders (
    id SERIAL PRIMARY KEY,
    owner TEXT NOT NULL,
    repository TEXT NOT NULL,
    issue_number INTEGER NOT NULL,
    who TEXT NOT NULL,
    what TEXT NOT NULL,
    remind_at TIMESTAMPTZ NOT NULL,
    comment_created_at TIMESTAMPTZ,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE INDEX IF NOT EXISTS reminders_owner_idx ON reminders (owner);

CREATE TABLE IF NOT EXISTS reminder_groups (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    group_value TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""


class ReminderStoreError(Exception):
    """Base class for reminder store failures the caller can recover from."""

    pass


class GroupAlreadyExistsError(ReminderStoreError):
    """Raised when a reminder group with the same name already exists."""

    def __init__(self, name: str):
        super().__init__(f"Reminder group {name} already exists")
        self.name = name


@dataclass
class CommentContext:
    """Where a reminder was requested and by whom."""

    requester: str
    repository: str  # "owner/name"
    issue_number: int
    created_at: Optional[datetime] = None

    @classmethod
    def from_payload(cls, payload: dict) -> "CommentContext":
        """Build a context from an issue_comment webhook payload."""
        comment = payload["comment"]
        created_at = comment.get("created_at")
        return cls(
            requester=comment["user"]["login"],
            repository=payload["repository"]["full_name"],
            issue_number=payload["issue"]["number"],
            created_at=isoparse(created_at) if created_at else None,
        )


@dataclass
class StoredReminder:
    """A reminder row together with the context it was created in."""

    id: int
    owner: str
    reminder: ParsedReminder
    context: CommentContext


@dataclass
class ReminderGroup:
    """An alias expanding a #name into @user mentions."""

    name: str
    value: str


def _row_to_reminder(row) -> StoredReminder:
    remind_at = row["remind_at"]
    if remind_at.tzinfo is None:
        remind_at = pytz.UTC.localize(remind_at)
    return StoredReminder(
        id=row["id"],
        owner=row["owner"],
        reminder=ParsedReminder(who=row["who"], what=row["what"], when=remind_at),
        context=CommentContext(
            requester=row["owner"],
            repository=row["repository"],
            issue_number=row["issue_number"],
            created_at=row["comment_created_at"],
        ),
    )


class ReminderStore:
    """
    Manages database operations for reminders.

    Provides methods to create, list, look up and delete reminders, and to
    create and look up reminder groups.
    """

    def __init__(self, db_pool: asyncpg.Pool):
        """
        Initialize the reminder store.

        Args:
            db_pool: asyncpg connection pool
        """
        self.db = db_pool

    async def ensure_schema(self) -> None:
        """Create the reminder tables if they do not exist yet."""
        await self.db.execute(SCHEMA)

    async def add_new_reminder(
        self, reminder: ParsedReminder, context: CommentContext
    ) -> int:
        """
        Persist a new reminder.

        Args:
            reminder: Parsed reminder (who, what, when)
            context: Comment the reminder was requested in

        Returns:
            The ID of the created reminder
        """
        row = await self.db.fetchrow(
            """
            INSERT INTO reminders (
                owner, repository, issue_number, who, what,
                remind_at, comment_created_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING id
            """,
            context.requester,
            context.repository,
            context.issue_number,
            reminder.who,
            reminder.what,
            reminder.when,
            context.created_at,
        )

        reminder_id = row["id"]
        logger.info(
            f"Created reminder {reminder_id} for {context.requester}: "
            f"who={reminder.who}, when={reminder.when}"
        )
        return reminder_id

    async def get_reminders_for_user(self, username: str) -> list[StoredReminder]:
        """
        List reminders created by a user.

        Args:
            username: Login of the requesting user

        Returns:
            Stored reminders ordered by ID
        """
        rows = await self.db.fetch(
            """
            SELECT id, owner, repository, issue_number, who, what,
                   remind_at, comment_created_at
            FROM reminders
            WHERE owner = $1
            ORDER BY id ASC
            """,
            username,
        )
        return [_row_to_reminder(row) for row in rows]

    async def get_all_reminders(self) -> list[StoredReminder]:
        """List every outstanding reminder, soonest first."""
        rows = await self.db.fetch(
            """
            SELECT id, owner, repository, issue_number, who, what,
                   remind_at, comment_created_at
            FROM reminders
            ORDER BY remind_at ASC
            """
        )
        return [_row_to_reminder(row) for row in rows]

    async def get_reminder_by_id(self, reminder_id: int) -> Optional[StoredReminder]:
        """
        Get a reminder by ID.

        Args:
            reminder_id: Reminder ID

        Returns:
            StoredReminder or None if not found
        """
        row = await self.db.fetchrow(
            """
            SELECT id, owner, repository, issue_number, who, what,
                   remind_at, comment_created_at
            FROM reminders
            WHERE id = $1
            """,
            reminder_id,
        )

        return _row_to_reminder(row) if row else None

    async def delete_reminder(self, reminder_id: int) -> None:
        """Delete a reminder row. Deleting a missing ID is a no-op."""
        result = await self.db.execute(
            "DELETE FROM reminders WHERE id = $1",
            reminder_id,
        )
        if result == "DELETE 1":
            logger.info(f"Deleted reminder {reminder_id}")
        else:
            logger.debug(f"Reminder {reminder_id} was already gone")

    # =========================================================================
    # Reminder groups
    # =========================================================================

    async def create_reminder_group(self, name: str, value: str) -> None:
        """
        Create a reminder group.

        Raises:
            GroupAlreadyExistsError: If a group with this name exists
        """
        try:
            await self.db.execute(
                """
                INSERT INTO reminder_groups (name, group_value)
                VALUES ($1, $2)
                """,
                name,
                value,
            )
        except asyncpg.UniqueViolationError as e:
            raise GroupAlreadyExistsError(name) from e

        logger.info(f"Created reminder group {name} -> {value}")

    async def get_reminder_group_by_name(self, name: str) -> Optional[ReminderGroup]:
        """Look up a reminder group, or None if it does not exist."""
        row = await self.db.fetchrow(
            "SELECT name, group_value FROM reminder_groups WHERE name = $1",
            name,
        )
        return ReminderGroup(name=row["name"], value=row["group_value"]) if row else None

    async def list_reminder_groups(self) -> list[ReminderGroup]:
        """List all reminder groups by name."""
        rows = await self.db.fetch(
            "SELECT name, group_value FROM reminder_groups ORDER BY name ASC"
        )
        return [ReminderGroup(name=row["name"], value=row["group_value"]) for row in rows]
