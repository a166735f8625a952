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
Reminder CLI

Command-line tool for inspecting the reminder tables.

Usage:
    # Show every outstanding reminder, soonest first
    python scripts/reminder_cli.py pending

    # Show reminders created by one user
    python scripts/reminder_cli.py pending --user octocat

    # Show group aliases
    python scripts/reminder_cli.py groups

    # Delete a reminder row (a running bot's timer still wakes up but posts nothing)
    python scripts/reminder_cli.py delete 42
"""

import argparse
import asyncio
import logging
import os
import sys
from datetime import datetime

import asyncpg
import pytz
from dotenv import load_dotenv

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from commands.reminder_commands import humanize_delta  # noqa: E402
from reminders import ReminderStore  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def truncate(text: str, max_len: int = 50) -> str:
    """Truncate text with ellipsis."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


async def show_pending(store: ReminderStore, user: str = None) -> None:
    """Show outstanding reminders."""
    if user:
        reminders = await store.get_reminders_for_user(user)
    else:
        reminders = await store.get_all_reminders()

    if not reminders:
        print("No pending reminders.")
        return

    now = datetime.now(pytz.UTC)
    print(f"Found {len(reminders)} pending reminder(s):")
    print("-" * 100)
    print(f"{'ID':<6} {'Owner':<18} {'Who':<18} {'When':<18} {'Where':<20} {'What':<30}")
    print("-" * 100)

    for item in reminders:
        where = f"{item.context.repository}#{item.context.issue_number}"
        print(
            f"{item.id:<6} "
            f"{truncate(item.owner, 18):<18} "
            f"{truncate(item.reminder.who, 18):<18} "
            f"{humanize_delta(item.reminder.when, now):<18} "
            f"{truncate(where, 20):<20} "
            f"{truncate(item.reminder.what, 30)}"
        )


async def show_groups(store: ReminderStore) -> None:
    """Show reminder groups."""
    groups = await store.list_reminder_groups()

    if not groups:
        print("No reminder groups defined.")
        return

    print(f"Found {len(groups)} group(s):")
    for group in groups:
        print(f"  {group.name:<24} {group.value}")


async def delete_reminder(store: ReminderStore, reminder_id: int) -> None:
    """Delete a reminder row."""
    stored = await store.get_reminder_by_id(reminder_id)
    if stored is None:
        print(f"Reminder {reminder_id} not found")
        return

    await store.delete_reminder(reminder_id)
    print(f"Deleted reminder {reminder_id}:")
    print(f"  Owner: {stored.owner}")
    print(f"  What: {truncate(stored.reminder.what, 70)}")


async def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Reminder management CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    pending_parser = subparsers.add_parser("pending", help="Show pending reminders")
    pending_parser.add_argument("--user", help="Only show reminders created by this login")

    subparsers.add_parser("groups", help="Show reminder groups")

    delete_parser = subparsers.add_parser("delete", help="Delete a reminder row")
    delete_parser.add_argument("reminder_id", type=int, help="Reminder ID to delete")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("Error: DATABASE_URL environment variable not set")
        sys.exit(1)

    pool = await asyncpg.create_pool(database_url, min_size=1, max_size=2)
    store = ReminderStore(pool)

    try:
        if args.command == "pending":
            await show_pending(store, args.user)
        elif args.command == "groups":
            await show_groups(store)
        elif args.command == "delete":
            await delete_reminder(store, args.reminder_id)
    finally:
        await pool.close()


if __name__ == "__main__":
    asyncio.run(main())
