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
Reminder Scheduler Module

Arms one asyncio task per outstanding reminder, fires it at its due time and
lets the owner cancel it before then.

Each reminder moves Scheduled -> Fired or Scheduled -> Cancelled exactly
once. The transition is taken by whoever first claims the job handle under
the scheduler lock: the timer task when it wakes up, or cancel().
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

import pytz

from .dispatcher import DeliveryDispatcher
from .manager import CommentContext, ReminderStore
from .parser import ParsedReminder

logger = logging.getLogger("reminderbot.reminders.scheduler")

# Longest single sleep; the clock is re-read after each slice
MAX_SLEEP_SECONDS = 3600.0


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


class CancelOutcome(Enum):
    CANCELLED = "cancelled"
    NOT_ARMED = "not_armed"  # no timer in this process; the row may still exist
    FIRING = "firing"  # delivery already started and will remove the row


@dataclass
class ScheduledJob:
    """Live handle for one armed reminder."""

    reminder_id: int
    reminder: ParsedReminder
    context: CommentContext
    task: Optional[asyncio.Task] = field(default=None, repr=False)
    claimed: bool = False


class ReminderScheduler:
    """
    Owns the reminder ID -> job handle map.

    Construct one per process and pass it to whoever needs to schedule or
    cancel; nothing else touches the handle map.
    """

    def __init__(
        self,
        store: ReminderStore,
        dispatcher: DeliveryDispatcher,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the reminder scheduler.

        Args:
            store: Reminder store used to persist new reminders
            dispatcher: Called once per reminder when it fires
            clock: Returns the current timezone-aware time
        """
        self.store = store
        self.dispatcher = dispatcher
        self.clock = clock
        self._jobs: dict[int, ScheduledJob] = {}
        self._firing: set[int] = set()
        self._lock = asyncio.Lock()

    def pending_ids(self) -> list[int]:
        """IDs with a live job handle."""
        return sorted(self._jobs)

    def has_job(self, reminder_id: int) -> bool:
        return reminder_id in self._jobs

    async def schedule(self, reminder: ParsedReminder, context: CommentContext) -> int:
        """
        Persist a reminder and arm its timer.

        Returns:
            The reminder ID assigned by the store
        """
        reminder_id = await self.store.add_new_reminder(reminder, context)
        await self.arm(reminder_id, reminder, context)
        return reminder_id

    async def arm(
        self, reminder_id: int, reminder: ParsedReminder, context: CommentContext
    ) -> None:
        """Arm a timer for an already persisted reminder."""
        async with self._lock:
            previous = self._jobs.pop(reminder_id, None)
            if previous is not None and not previous.claimed:
                previous.claimed = True
                previous.task.cancel()
                logger.warning(f"Reminder {reminder_id} was already armed, replacing its timer")

            job = ScheduledJob(reminder_id=reminder_id, reminder=reminder, context=context)
            job.task = asyncio.create_task(
                self._run(job), name=f"reminder-{reminder_id}"
            )
            self._jobs[reminder_id] = job

        logger.info(f"Armed reminder {reminder_id} for {reminder.when}")

    def is_firing(self, reminder_id: int) -> bool:
        return reminder_id in self._firing

    async def cancel(self, reminder_id: int) -> CancelOutcome:
        """
        Cancel a reminder's timer.

        The persisted row is left alone; callers delete it themselves unless
        the outcome is FIRING, in which case delivery removes it.

        Returns:
            CANCELLED if a live timer was stopped, FIRING if delivery has
            already begun, NOT_ARMED if this process holds no timer for the
            ID (already done, or never armed since the last restart)
        """
        async with self._lock:
            if reminder_id in self._firing:
                logger.info(f"Reminder {reminder_id} is already being delivered, cancel ignored")
                return CancelOutcome.FIRING

            job = self._jobs.get(reminder_id)
            if job is None or job.claimed:
                logger.warning(f"No live timer for reminder {reminder_id}, nothing to cancel")
                return CancelOutcome.NOT_ARMED
            job.claimed = True
            del self._jobs[reminder_id]

        job.task.cancel()
        logger.info(f"Cancelled timer for reminder {reminder_id}")
        return CancelOutcome.CANCELLED

    async def recover(self) -> int:
        """
        Re-arm every stored reminder after a restart.

        Reminders whose time passed while the process was down fire right
        away.

        Returns:
            Number of reminders armed
        """
        stored = await self.store.get_all_reminders()
        now = self.clock()
        overdue = 0

        for item in stored:
            if item.reminder.when <= now:
                overdue += 1
            await self.arm(item.id, item.reminder, item.context)

        logger.info(f"Recovered {len(stored)} reminder(s) from the store ({overdue} overdue)")
        return len(stored)

    async def shutdown(self) -> None:
        """Cancel every live timer. Stored rows are kept for recovery."""
        async with self._lock:
            jobs = list(self._jobs.values())
            self._jobs.clear()
            for job in jobs:
                job.claimed = True
                job.task.cancel()

        if jobs:
            await asyncio.gather(*(job.task for job in jobs), return_exceptions=True)
        logger.info(f"Reminder scheduler stopped ({len(jobs)} timer(s) dropped)")

    async def _wait_until(self, when: datetime) -> None:
        while True:
            remaining = (when - self.clock()).total_seconds()
            if remaining <= 0:
                return
            await asyncio.sleep(min(remaining, MAX_SLEEP_SECONDS))

    async def _claim(self, job: ScheduledJob) -> bool:
        async with self._lock:
            if job.claimed or self._jobs.get(job.reminder_id) is not job:
                return False
            job.claimed = True
            del self._jobs[job.reminder_id]
            self._firing.add(job.reminder_id)
            return True

    async def _run(self, job: ScheduledJob) -> None:
        try:
            await self._wait_until(job.reminder.when)
        except asyncio.CancelledError:
            return

        if not await self._claim(job):
            logger.debug(f"Reminder {job.reminder_id} was cancelled before it fired")
            return

        logger.info(f"Firing reminder {job.reminder_id}")
        try:
            await self.dispatcher.deliver(job.reminder, job.reminder_id, job.context)
        except Exception as e:
            logger.error(f"Error delivering reminder {job.reminder_id}: {e}", exc_info=True)
        finally:
            self._firing.discard(job.reminder_id)
