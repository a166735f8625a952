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
Delivery Dispatcher

Posts the reminder comment when a reminder fires and removes the row
afterwards, whether or not the post went through.
"""

import logging
from typing import Callable, Protocol

from analytics import track

from .groups import GROUP_PREFIX, GroupResolver
from .manager import CommentContext, ReminderStore
from .parser import ParsedReminder

logger = logging.getLogger("reminderbot.reminders.dispatcher")


class ReplyChannel(Protocol):
    """Outbound comment channel for one interaction."""

    def reply(self, text: str) -> None:
        ...

    async def send(self, final: bool = False) -> None:
        ...


ReplyFactory = Callable[[CommentContext], ReplyChannel]


def format_reminder_message(reminder: ParsedReminder, recipient: str, requester: str) -> str:
    """Build the text posted when a reminder fires."""
    asked_by = "You" if reminder.who == "me" else f"@{requester}"
    return (
        f"Hey {recipient}! {asked_by} asked me to remind you of the following: "
        f"\"{reminder.what}\""
    )


class DeliveryDispatcher:
    """Delivers fired reminders through the reply channel."""

    def __init__(
        self,
        store: ReminderStore,
        groups: GroupResolver,
        reply_factory: ReplyFactory,
    ):
        self.store = store
        self.groups = groups
        self.reply_factory = reply_factory

    async def resolve_recipient(self, reminder: ParsedReminder, context: CommentContext) -> str:
        """Turn the stored recipient token into mention text."""
        if reminder.who == "me":
            return f"@{context.requester}"
        if reminder.who.startswith(GROUP_PREFIX):
            return await self.groups.resolve(reminder.who)
        return f"@{reminder.who}"

    async def deliver(
        self,
        reminder: ParsedReminder,
        reminder_id: int,
        context: CommentContext,
    ) -> None:
        """
        Post a fired reminder and delete its row.

        Reply-channel failures are logged, not retried; the row is removed
        either way so a restart does not deliver it again. A row deleted
        behind the scheduler's back (e.g. from the operator CLI) is not
        delivered.
        """
        try:
            if await self.store.get_reminder_by_id(reminder_id) is None:
                logger.info(f"Reminder {reminder_id} no longer stored, skipping delivery")
                return

            recipient = await self.resolve_recipient(reminder, context)
            reply = self.reply_factory(context)
            reply.reply(format_reminder_message(reminder, recipient, context.requester))
            await reply.send(final=True)
            logger.info(f"Delivered reminder {reminder_id} to {recipient} on {context.repository}#{context.issue_number}")

            track(
                "reminder_delivered",
                "reminder",
                user=context.requester,
                repository=context.repository,
                properties={"reminder_id": reminder_id, "is_group": reminder.who.startswith(GROUP_PREFIX)},
            )
        except Exception as e:
            logger.error(f"Failed to deliver reminder {reminder_id}: {e}", exc_info=True)
        finally:
            await self.store.delete_reminder(reminder_id)
