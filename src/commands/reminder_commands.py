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
Reminder Comment Commands

Handlers for the /remind vocabulary posted in issue comments. Every
expected failure is answered through the reply channel; only unexpected
faults propagate to the caller.
"""

import logging
import re
from datetime import datetime
from typing import Callable, Optional

from analytics import track
from reminders import (
    CancelOutcome,
    CommentContext,
    DateExtractor,
    GroupAlreadyExistsError,
    GroupResolver,
    InvalidGroupNameError,
    ReminderAction,
    ReminderCommand,
    ReminderScheduler,
    ReminderStore,
    ReplyChannel,
    parse_reminder,
)
from reminders.scheduler import utc_now

logger = logging.getLogger("reminderbot.commands.reminder")

HELP_TEXT = """
## /remind help
- **help**: get this exact reply (e.g. `/remind help `)
- **list**: list all your active reminders (e.g. `/remind list`)
- **delete**: delete a reminder by ID (e.g. `/remind delete 12`)
- **define**: define an alias for a group of users (e.g. `/remind define #engineering as @engineer1 @engineer2`)
- **<username or group>**: set up a reminder for a user or group (e.g. `/remind #engineering to do sprint planning on Tuesday at 4am`)
"""

# Reminder IDs are Postgres INTEGER (SERIAL) values
MAX_REMINDER_ID = 2**31 - 1

DEFINE_USAGE = "Unable to handle request. Usage: `/remind define #team1 as @octocat @someoneelse`"

# (seconds upper bound, singular, unit seconds, unit name)
_DELTA_STEPS = [
    (45, "a few seconds", None, None),
    (90, "a minute", None, None),
    (45 * 60, None, 60, "minutes"),
    (90 * 60, "an hour", None, None),
    (22 * 3600, None, 3600, "hours"),
    (36 * 3600, "a day", None, None),
    (26 * 86400, None, 86400, "days"),
    (45 * 86400, "a month", None, None),
    (320 * 86400, None, 30 * 86400, "months"),
    (548 * 86400, "a year", None, None),
]


def humanize_delta(when: datetime, now: datetime) -> str:
    """Render 'when' relative to 'now', e.g. 'in 3 hours' or '2 days ago'."""
    seconds = (when - now).total_seconds()
    future = seconds >= 0
    seconds = abs(seconds)

    phrase = None
    for bound, singular, unit, name in _DELTA_STEPS:
        if seconds < bound:
            phrase = singular or f"{round(seconds / unit)} {name}"
            break
    if phrase is None:
        phrase = f"{round(seconds / (365 * 86400))} years"

    return f"in {phrase}" if future else f"{phrase} ago"


class ReminderCommands:
    """
    Comment commands for reminder management.

    Commands:
    - remind <@user|#group|me> [to] ... - Schedule a reminder
    - /remind list - List your reminders
    - /remind delete <id> - Delete one of your reminders
    - /remind define <#group> as <@user ...> - Define a group alias
    - /remind help - Usage
    """

    def __init__(
        self,
        store: ReminderStore,
        scheduler: ReminderScheduler,
        groups: GroupResolver,
        extractor: Optional[DateExtractor] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.scheduler = scheduler
        self.groups = groups
        self.extractor = extractor
        self.clock = clock

    async def handle(
        self, command: ReminderCommand, context: CommentContext, reply: ReplyChannel
    ) -> None:
        """Dispatch a classified command to its handler."""
        track(
            "command_used",
            "command",
            user=context.requester,
            repository=context.repository,
            properties={"subcommand": command.action.value},
        )

        handlers = {
            ReminderAction.SCHEDULE: self.schedule_reminder,
            ReminderAction.LIST: self.list_reminders,
            ReminderAction.DELETE: self.delete_reminder,
            ReminderAction.DEFINE: self.define_group,
            ReminderAction.HELP: self.remind_help,
        }
        await handlers[command.action](command, context, reply)

    # =========================================================================
    # remind <who> ...
    # =========================================================================

    async def schedule_reminder(
        self, command: ReminderCommand, context: CommentContext, reply: ReplyChannel
    ) -> None:
        """Parse and schedule a new reminder."""
        reference = context.created_at or self.clock()
        parsed = parse_reminder(command.text, reference, self.extractor)

        if parsed is None or parsed.when <= reference:
            reply.reply(f"@{context.requester} I didn't get that date.")
            return

        reminder_id = await self.scheduler.schedule(parsed, context)

        target = "you" if parsed.who == "me" else f"`{parsed.who}`"
        reply.reply(
            f"I will remind {target} of the following: \"{parsed.what}\" "
            f"{humanize_delta(parsed.when, self.clock())}"
        )

        track(
            "reminder_scheduled",
            "reminder",
            user=context.requester,
            repository=context.repository,
            properties={"reminder_id": reminder_id, "is_group": parsed.who.startswith("#")},
        )

    # =========================================================================
    # /remind list
    # =========================================================================

    async def list_reminders(
        self, command: ReminderCommand, context: CommentContext, reply: ReplyChannel
    ) -> None:
        """List the requester's reminders."""
        reminders = await self.store.get_reminders_for_user(context.requester)

        if not reminders:
            reply.reply("You have no reminders set.")
            return

        now = self.clock()
        lines = ["## Your reminders"]
        for item in reminders:
            lines.append(f"- Reminder **{item.id}**:")
            lines.append(f"    - **What:** {item.reminder.what}")
            lines.append(f"    - **Who:** {item.reminder.who}")
            lines.append(f"    - **When:** {humanize_delta(item.reminder.when, now)}")

        reply.reply("\n".join(lines))

    # =========================================================================
    # /remind delete <id>
    # =========================================================================

    async def delete_reminder(
        self, command: ReminderCommand, context: CommentContext, reply: ReplyChannel
    ) -> None:
        """Delete a reminder the requester owns."""
        raw_id = command.args[0] if command.args else ""
        if not re.fullmatch(r"\d+", raw_id, re.ASCII):
            reply.reply("Error trying to delete reminder. The ID is probably invalid.")
            return

        reminder_id = int(raw_id)
        stored = None
        if reminder_id <= MAX_REMINDER_ID:
            stored = await self.store.get_reminder_by_id(reminder_id)

        if stored is None:
            reply.reply(f"Reminder with ID {reminder_id} doesn't exist.")
            return

        if stored.owner.strip() != context.requester.strip():
            logger.info(
                f"{context.requester} tried to delete reminder {reminder_id} owned by {stored.owner}"
            )
            reply.reply("You can't delete a reminder you didn't create!")
            return

        outcome = await self.scheduler.cancel(reminder_id)
        if outcome is CancelOutcome.FIRING:
            reply.reply(f"Reminder with ID {reminder_id} is being delivered right now.")
            return

        await self.store.delete_reminder(reminder_id)
        reply.reply(f"Reminder with ID {reminder_id} deleted succesfully.")

        track(
            "reminder_deleted",
            "reminder",
            user=context.requester,
            repository=context.repository,
            properties={"reminder_id": reminder_id, "had_timer": outcome is CancelOutcome.CANCELLED},
        )

    # =========================================================================
    # /remind define <#group> as <@user ...>
    # =========================================================================

    async def define_group(
        self, command: ReminderCommand, context: CommentContext, reply: ReplyChannel
    ) -> None:
        """Define a group alias."""
        parts = " ".join(command.args).split(" as ", 1)
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            reply.reply(DEFINE_USAGE)
            return

        name, value = parts[0].strip(), parts[1].strip()

        try:
            await self.groups.define(name, value)
        except InvalidGroupNameError:
            reply.reply("Group names should start with a #.")
            return
        except GroupAlreadyExistsError:
            reply.reply("Failure creating group. It probably already exists.")
            return

        reply.reply(f"Group `{name}` created succesfully as an alias for `{value}`")

        track(
            "reminder_group_created",
            "reminder",
            user=context.requester,
            repository=context.repository,
            properties={"group": name},
        )

    # =========================================================================
    # /remind help
    # =========================================================================

    async def remind_help(
        self, command: ReminderCommand, context: CommentContext, reply: ReplyChannel
    ) -> None:
        """Post usage."""
        reply.reply(HELP_TEXT)
