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
Reminder Text Parser

Turns "remind @someone to do a thing tomorrow at 9am" into a recipient,
a payload and a fire time. Date resolution is delegated to a DateExtractor
so the heuristic date library can be swapped out in tests.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

import dateparser
import pytz
from dateparser.search import search_dates

logger = logging.getLogger("reminderbot.reminders.parser")

REMINDER_PATTERN = re.compile(r"^remind @?(\S+)(?: to )?(.*)$", re.DOTALL | re.IGNORECASE)
LEADING_CONNECTOR = re.compile(r"^(to|that) ")
TRAILING_ON = re.compile(r" on$")


@dataclass
class ParsedReminder:
    """Result of parsing a reminder request."""

    who: str  # "me", a user handle without "@", or a "#group"
    what: str
    when: datetime  # timezone-aware


@dataclass
class DateMatch:
    """A date expression found inside free text."""

    text: str  # the exact substring that was recognised
    when: datetime


class DateExtractor(Protocol):
    """Finds the first date expression in a piece of text."""

    def extract(self, text: str, reference: datetime) -> Optional[DateMatch]:
        ...


def validate_timezone(tz_name: str) -> bool:
    """
    Validate that a timezone name is valid.

    Args:
        tz_name: IANA timezone name (e.g., "America/Los_Angeles")

    Returns:
        True if valid, False otherwise
    """
    try:
        pytz.timezone(tz_name)
        return True
    except pytz.UnknownTimeZoneError:
        return False


class DateparserExtractor:
    """DateExtractor backed by dateparser's free-text search."""

    def __init__(self, timezone: str = "UTC"):
        if not validate_timezone(timezone):
            logger.warning(f"Invalid timezone '{timezone}', falling back to UTC")
            timezone = "UTC"
        self.timezone = timezone
        self._tz = pytz.timezone(timezone)

    def _settings(self, reference: datetime) -> dict:
        if reference.tzinfo is None:
            reference = pytz.UTC.localize(reference)
        # dateparser wants a naive base expressed in the target timezone
        base = reference.astimezone(self._tz).replace(tzinfo=None)
        return {
            "RELATIVE_BASE": base,
            "TIMEZONE": self.timezone,
            "RETURN_AS_TIMEZONE_AWARE": True,
            "PREFER_DATES_FROM": "future",
        }

    def extract(self, text: str, reference: datetime) -> Optional[DateMatch]:
        # ngram search reports the longest contiguous span, e.g. "tomorrow at 9am"
        settings = self._settings(reference)
        found = search_dates(text, languages=["en"], settings=settings, strategy="ngram")
        if not found:
            return None

        matched_text, when = found[0]
        when = self._localize(when)
        return DateMatch(text=self._narrow(matched_text, when, settings), when=when)

    def _localize(self, when: datetime) -> datetime:
        if when.tzinfo is None:
            when = self._tz.localize(when)
        return when

    def _narrow(self, span: str, when: datetime, settings: dict) -> str:
        """
        Drop leading letterless tokens ("42 in 2 hours") that ngram search
        pulled into the span without changing the resolved time.
        """
        while True:
            parts = span.split(None, 1)
            if len(parts) < 2 or any(c.isalpha() for c in parts[0]):
                return span

            rest = parts[1]
            parsed = dateparser.parse(rest, languages=["en"], settings=settings)
            if parsed is None or self._localize(parsed) != when:
                return span
            span = rest


_default_extractor: Optional[DateExtractor] = None


def get_default_extractor() -> DateExtractor:
    """Lazily build the UTC dateparser extractor."""
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = DateparserExtractor()
    return _default_extractor


def clean_payload(what: str) -> str:
    """Strip connector words around the reminder payload."""
    what = what.strip()
    what = LEADING_CONNECTOR.sub("", what)
    what = TRAILING_ON.sub("", what)
    return what.strip()


def parse_reminder(
    text: str,
    reference: datetime,
    extractor: Optional[DateExtractor] = None,
) -> Optional[ParsedReminder]:
    """
    Parse a reminder request.

    Only the first date expression in the text is used. "remind me on Friday
    to call Bob on Monday" therefore fires on Friday.

    Args:
        text: Text starting with "remind", e.g. "remind @ana to ship it tomorrow"
        reference: Timestamp of the triggering message
        extractor: Date extractor to use (defaults to dateparser)

    Returns:
        ParsedReminder, or None if the text is not a reminder or has no date
    """
    match = REMINDER_PATTERN.match(text.strip())
    if not match:
        return None

    who, what = match.group(1), match.group(2)

    extractor = extractor or get_default_extractor()
    date_match = extractor.extract(what, reference)
    if date_match is None or not date_match.text.strip():
        logger.debug(f"No date expression found in '{what}'")
        return None

    what = clean_payload(what.replace(date_match.text, "", 1))

    return ParsedReminder(who=who, what=what, when=date_match.when)
