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

"""Group aliases: "#team" expands to "@alice @bob"."""

import logging

from .manager import ReminderStore

logger = logging.getLogger("reminderbot.reminders.groups")

GROUP_PREFIX = "#"


class InvalidGroupNameError(ValueError):
    """Raised when a group name does not start with '#'."""

    pass


class GroupResolver:
    """Defines and expands reminder groups."""

    def __init__(self, store: ReminderStore):
        self.store = store

    async def define(self, name: str, value: str) -> None:
        """
        Create a group alias.

        Raises:
            InvalidGroupNameError: If the name does not start with '#'
            GroupAlreadyExistsError: If the name is taken
        """
        if not name.startswith(GROUP_PREFIX):
            raise InvalidGroupNameError(name)
        await self.store.create_reminder_group(name, value)

    async def resolve(self, token: str) -> str:
        """
        Expand a #group token into its mentions.

        Unknown groups and non-group tokens come back unchanged.
        """
        if not token.startswith(GROUP_PREFIX):
            return token

        group = await self.store.get_reminder_group_by_name(token)
        if group is None or not group.value:
            logger.info(f"Unknown reminder group {token}, using it verbatim")
            return token
        return group.value
