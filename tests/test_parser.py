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

"""Tests for reminder text parsing."""

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest
import pytz

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from conftest import REFERENCE, PhraseExtractor
from reminders import parser as parser_module
from reminders.parser import (
    DateMatch,
    DateparserExtractor,
    clean_payload,
    parse_reminder,
    validate_timezone,
)


class TestParseReminder:
    def test_me_with_time_of_day(self, extractor):
        parsed = parse_reminder(
            "remind me to ship the release tomorrow at 9am", REFERENCE, extractor
        )
        assert parsed.who == "me"
        assert parsed.what == "ship the release"
        assert parsed.when == REFERENCE + timedelta(hours=33)

    def test_strips_at_sign_and_that(self, extractor):
        parsed = parse_reminder(
            "remind @ana that the build is green on Monday", REFERENCE, extractor
        )
        assert parsed.who == "ana"
        assert parsed.what == "the build is green"

    def test_group_recipient(self, extractor):
        parsed = parse_reminder(
            "remind #engineering to do sprint planning in 2 hours", REFERENCE, extractor
        )
        assert parsed.who == "#engineering"
        assert parsed.what == "do sprint planning"
        assert parsed.when == REFERENCE + timedelta(hours=2)

    def test_first_date_wins(self, extractor):
        parsed = parse_reminder(
            "remind me on Monday to call Bob tomorrow", REFERENCE, extractor
        )
        assert parsed.when == REFERENCE + timedelta(days=7)
        assert parsed.what == "call Bob tomorrow"

    def test_keyword_case_insensitive(self, extractor):
        parsed = parse_reminder("Remind me to stretch tomorrow", REFERENCE, extractor)
        assert parsed.who == "me"
        assert parsed.what == "stretch"

    def test_no_date(self, extractor):
        assert parse_reminder("remind me to breathe", REFERENCE, extractor) is None

    def test_not_a_reminder(self, extractor):
        assert parse_reminder("ping me tomorrow", REFERENCE, extractor) is None
        assert parse_reminder("remind", REFERENCE, extractor) is None

    def test_blank_date_text_rejected(self):
        class BlankExtractor:
            def extract(self, text, reference):
                return DateMatch(text="  ", when=reference + timedelta(days=1))

        assert parse_reminder("remind me to x", REFERENCE, BlankExtractor()) is None

    def test_extractor_sees_reference(self):
        seen = []

        class RecordingExtractor(PhraseExtractor):
            def extract(self, text, reference):
                seen.append(reference)
                return super().extract(text, reference)

        parse_reminder("remind me to x tomorrow", REFERENCE, RecordingExtractor({"tomorrow": timedelta(days=1)}))
        assert seen == [REFERENCE]


class TestCleanPayload:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("  to call Bob on", "call Bob"),
            ("that the deploy finished", "the deploy finished"),
            ("review the PR", "review the PR"),
            ("tomato soup", "tomato soup"),
        ],
    )
    def test_connectors(self, raw, expected):
        assert clean_payload(raw) == expected


class TestTimezones:
    def test_validate_timezone(self):
        assert validate_timezone("UTC") is True
        assert validate_timezone("America/Los_Angeles") is True
        assert validate_timezone("Mars/Olympus_Mons") is False

    def test_invalid_timezone_falls_back_to_utc(self):
        assert DateparserExtractor("Mars/Olympus_Mons").timezone == "UTC"


class TestDateparserExtractor:
    """Runs the real dateparser search."""

    def test_tomorrow_at_9am(self):
        parsed = parse_reminder(
            "remind me to ship the release tomorrow at 9am",
            REFERENCE,
            DateparserExtractor("UTC"),
        )
        assert parsed is not None
        assert parsed.what == "ship the release"
        assert parsed.when == datetime(2024, 1, 2, 9, 0, tzinfo=pytz.UTC)

    def test_returns_aware_datetime(self):
        match = DateparserExtractor("UTC").extract("tomorrow", REFERENCE)
        assert match is not None
        assert match.when.tzinfo is not None
        assert match.when.date() == datetime(2024, 1, 2).date()

    def test_nothing_found(self):
        assert DateparserExtractor("UTC").extract("nothing here", REFERENCE) is None

    def test_number_before_date_stays_in_payload(self):
        parsed = parse_reminder(
            "remind @ana to review PR 42 in 2 hours",
            REFERENCE,
            DateparserExtractor("UTC"),
        )
        assert parsed is not None
        assert parsed.what == "review PR 42"
        assert parsed.when == REFERENCE + timedelta(hours=2)


class TestSpanNarrowing:
    """Narrowing logic with dateparser stubbed out."""

    @pytest.fixture
    def resolve_all_to_two_hours(self, monkeypatch):
        when = REFERENCE + timedelta(hours=2)
        monkeypatch.setattr(parser_module.dateparser, "parse", lambda text, **kwargs: when)
        return when

    def test_leading_number_dropped(self, monkeypatch, resolve_all_to_two_hours):
        monkeypatch.setattr(
            parser_module, "search_dates",
            lambda text, **kwargs: [("42 in 2 hours", resolve_all_to_two_hours)],
        )
        match = DateparserExtractor("UTC").extract("review PR 42 in 2 hours", REFERENCE)
        assert match.text == "in 2 hours"

    def test_leading_word_kept(self, monkeypatch, resolve_all_to_two_hours):
        monkeypatch.setattr(
            parser_module, "search_dates",
            lambda text, **kwargs: [("in 2 hours", resolve_all_to_two_hours)],
        )
        match = DateparserExtractor("UTC").extract("review PR in 2 hours", REFERENCE)
        assert match.text == "in 2 hours"

    def test_number_kept_when_time_changes(self, monkeypatch):
        monkeypatch.setattr(
            parser_module, "search_dates",
            lambda text, **kwargs: [("5 pm", REFERENCE + timedelta(hours=17))],
        )
        monkeypatch.setattr(parser_module.dateparser, "parse", lambda text, **kwargs: None)
        match = DateparserExtractor("UTC").extract("call at 5 pm", REFERENCE)
        assert match.text == "5 pm"
