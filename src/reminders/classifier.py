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
Command Classifier

Decides whether a comment such as "@bot /remind list" is addressed to the
reminder subsystem and which subcommand it asks for.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

DEFAULT_COMMAND_WORD = "/remind"


class ReminderAction(Enum):
    SCHEDULE = "schedule"
    LIST = "list"
    DELETE = "delete"
    DEFINE = "define"
    HELP = "help"


SUBCOMMANDS = {
    "list": ReminderAction.LIST,
    "delete": ReminderAction.DELETE,
    "define": ReminderAction.DEFINE,
    "help": ReminderAction.HELP,
}


@dataclass
class ReminderCommand:
    """A classified reminder command."""

    action: ReminderAction
    args: list[str] = field(default_factory=list)  # tokens after the subcommand
    text: str = ""  # "remind ..." form consumed by the parser


def classify_comment(
    body: Optional[str], command_word: str = DEFAULT_COMMAND_WORD
) -> Optional[ReminderCommand]:
    """
    Classify a raw comment body.

    The first token is the bot mention, the second must be the command word
    and the third picks the subcommand. Anything that is not a known
    subcommand is treated as a request to schedule a reminder.

    Returns:
        ReminderCommand, or None if the comment is not a reminder command
    """
    if not body:
        return None

    tokens = body.split()
    if len(tokens) < 3:
        return None

    if tokens[1].lower() != command_word.lower():
        return None

    subcommand = tokens[2].lower()
    action = SUBCOMMANDS.get(subcommand, ReminderAction.SCHEDULE)

    # Drop the mention and command word; the parser always sees "remind ..."
    remainder = body.strip().split(None, 2)[2]

    return ReminderCommand(action=action, args=tokens[3:], text=f"remind {remainder}")
