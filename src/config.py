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
Reminder Bot Configuration

Values come from environment variables (a .env file is loaded by the entry
point) with the defaults below.
"""

import os
from dataclasses import dataclass
from typing import Optional

from reminders.classifier import DEFAULT_COMMAND_WORD


@dataclass
class BotConfig:
    """Configuration for the reminder bot."""

    database_url: Optional[str] = None

    # GitHub
    github_token: Optional[str] = None
    github_api_url: str = "https://api.github.com"
    bot_username: Optional[str] = None
    command_word: str = DEFAULT_COMMAND_WORD

    # Reminders
    timezone: str = "UTC"
    recovery_enabled: bool = True

    analytics_enabled: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "BotConfig":
        """Create config from environment variables with defaults."""
        return cls(
            database_url=os.getenv("DATABASE_URL"),
            github_token=os.getenv("GITHUB_TOKEN"),
            github_api_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
            bot_username=os.getenv("BOT_USERNAME"),
            command_word=os.getenv("REMINDER_COMMAND", DEFAULT_COMMAND_WORD),
            timezone=os.getenv("REMINDER_TIMEZONE", "UTC"),
            recovery_enabled=os.getenv("REMINDER_RECOVERY_ENABLED", "true").lower()
            == "true",
            analytics_enabled=os.getenv("ANALYTICS_ENABLED", "true").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
