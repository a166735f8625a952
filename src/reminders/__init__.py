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
Reminders Package

One-shot reminders requested in issue comments: command classification,
free-text parsing, persistence, scheduling and delivery.
"""

from .classifier import ReminderAction, ReminderCommand, classify_comment
from .parser import (
    DateExtractor,
    DateMatch,
    DateparserExtractor,
    ParsedReminder,
    parse_reminder,
    validate_timezone,
)
from .manager import (
    CommentContext,
    GroupAlreadyExistsError,
    ReminderGroup,
    ReminderStore,
    ReminderStoreError,
    StoredReminder,
)
from .groups import GroupResolver, InvalidGroupNameError
from .dispatcher import DeliveryDispatcher, ReplyChannel, format_reminder_message
from .scheduler import CancelOutcome, ReminderScheduler

__all__ = [
    "ReminderAction",
    "ReminderCommand",
    "classify_comment",
    "DateExtractor",
    "DateMatch",
    "DateparserExtractor",
    "ParsedReminder",
    "parse_reminder",
    "validate_timezone",
    "CommentContext",
    "GroupAlreadyExistsError",
    "ReminderGroup",
    "ReminderStore",
    "ReminderStoreError",
    "StoredReminder",
    "GroupResolver",
    "InvalidGroupNameError",
    "DeliveryDispatcher",
    "ReplyChannel",
    "format_reminder_message",
    "CancelOutcome",
    "ReminderScheduler",
]
