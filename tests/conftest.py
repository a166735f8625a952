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

"""Shared fakes for reminder tests."""

import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import pytest
import pytz

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reminders import (  # noqa: E402
    CommentContext,
    DateMatch,
    GroupAlreadyExistsError,
    ParsedReminder,
    ReminderGroup,
    StoredReminder,
)

REFERENCE = datetime(2024, 1, 1, 0, 0, tzinfo=pytz.UTC)


class InMemoryReminderStore:
    """Dict-backed stand-in for ReminderStore."""

    def __init__(self):
        self.reminders: dict[int, StoredReminder] = {}
        self.groups: dict[str, ReminderGroup] = {}
        self.deleted: list[int] = []
        self._next_id = 1

    async def add_new_reminder(self, reminder: ParsedReminder, context: CommentContext) -> int:
        reminder_id = self._next_id
        self._next_id += 1
        self.reminders[reminder_id] = StoredReminder(
            id=reminder_id, owner=context.requester, reminder=reminder, context=context
        )
        return reminder_id

    async def get_reminders_for_user(self, username: str) -> list[StoredReminder]:
        return [r for _, r in sorted(self.reminders.items()) if r.owner == username]

    async def get_all_reminders(self) -> list[StoredReminder]:
        return sorted(self.reminders.values(), key=lambda r: r.reminder.when)

    async def get_reminder_by_id(self, reminder_id: int) -> Optional[StoredReminder]:
        return self.reminders.get(reminder_id)

    async def delete_reminder(self, reminder_id: int) -> None:
        self.deleted.append(reminder_id)
        self.reminders.pop(reminder_id, None)

    async def create_reminder_group(self, name: str, value: str) -> None:
        if name in self.groups:
            raise GroupAlreadyExistsError(name)
        self.groups[name] = ReminderGroup(name=name, value=value)

    async def get_reminder_group_by_name(self, name: str) -> Optional[ReminderGroup]:
        return self.groups.get(name)

    async def list_reminder_groups(self) -> list[ReminderGroup]:
        return sorted(self.groups.values(), key=lambda g: g.name)


class RecordingReply:
    """Reply channel that keeps what would have been posted."""

    def __init__(self, context: Optional[CommentContext] = None, fail: bool = False):
        self.context = context
        self.fail = fail
        self.fragments: list[str] = []
        self.sent: list[tuple[str, bool]] = []

    def reply(self, text: str) -> None:
        self.fragments.append(text)

    async def send(self, final: bool = False) -> None:
        if self.fail:
            raise RuntimeError("GitHub is down")
        if self.fragments:
            self.sent.append(("\n\n".join(self.fragments), final))
            self.fragments = []

    @property
    def text(self) -> str:
        return "\n\n".join([body for body, _ in self.sent] + self.fragments)


class ReplyRecorder:
    """reply_factory that remembers every channel it handed out."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.channels: list[RecordingReply] = []

    def __call__(self, context: CommentContext) -> RecordingReply:
        channel = RecordingReply(context, fail=self.fail)
        self.channels.append(channel)
        return channel


class PhraseExtractor:
    """DateExtractor that knows a fixed set of phrases."""

    def __init__(self, phrases: dict[str, timedelta]):
        self.phrases = phrases

    def extract(self, text: str, reference: datetime) -> Optional[DateMatch]:
        # earliest match first, longest phrase at the same position
        found = [(text.find(p), -len(p), p) for p in self.phrases if p in text]
        if not found:
            return None
        _, _, phrase = min(found)
        return DateMatch(text=phrase, when=reference + self.phrases[phrase])


class FakeClock:
    def __init__(self, now: datetime = REFERENCE):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def store():
    return InMemoryReminderStore()


@pytest.fixture
def context():
    return CommentContext(
        requester="octocat",
        repository="acme/widgets",
        issue_number=7,
        created_at=REFERENCE,
    )


@pytest.fixture
def extractor():
    return PhraseExtractor(
        {
            "tomorrow at 9am": timedelta(hours=33),
            "tomorrow": timedelta(days=1),
            "on Monday": timedelta(days=7),
            "Monday": timedelta(days=7),
            "in 2 hours": timedelta(hours=2),
            "yesterday": timedelta(days=-1),
        }
    )
