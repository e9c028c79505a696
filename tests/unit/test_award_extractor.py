"""
Unit tests for the award extractor and its sub-parsers.
"""

import math
from datetime import datetime, timezone

import pytest

from award_scraper.models import ReasonCode
from award_scraper.parsers import (
    AwardExtractor,
    parse_amount,
    parse_contract_ids,
    parse_vendors
)
from award_scraper.parsers.award_extractor import match_heading

LINK = "https://www.defense.gov/News/Contracts/Contract/Article/4321/"
PUB = "Fri, 17 Oct 2025 17:00:00 -0400"

AWARD = (
    "XYZ Corp of Anytown, VA, has been awarded a $12.5 million contract for "
    "engineering support services. Work will be performed in Anytown, Virginia. "
    "Army Contracting Command is the contracting activity (W912DY-24-C-0001)."
)

ANNOUNCEMENT = "\n\n".join([
    "CONTRACTS FOR OCT. 17, 2025",
    "NAVY",
    "Acme Shipbuilding Inc., Bath, Maine, is being awarded a $1,250,000 "
    "modification to previously awarded contract N00024-23-C-2110.",
    "Today's Department of Defense contracts valued at $7.5 million or more are listed below.",
    "AIR FORCE:",
    "Boeing Co., Oklahoma City, Oklahoma, has been awarded a $2.1 billion contract "
    "(FA8107-25-D-0001) and order FA8107-25-F-0002 for sustainment.",
    "Editor's note: This contract was announced on Oct. 16, 2025.",
    "DLA",
    "Pacific Fuel Partners LLC, Honolulu, Hawaii, has been awarded a fixed-price contract for fuel.",
])


@pytest.fixture
def extractor():
    return AwardExtractor()


class TestParseAmount:
    """Tests for parse_amount."""

    def test_million(self):
        result = parse_amount("$2.4 million")
        assert result.amount == 2_400_000
        assert result.unit == "USD"
        assert result.text == "$2.4 million"

    def test_billion_case_insensitive(self):
        result = parse_amount("a $1.25 Billion ceiling")
        assert result.amount == 1_250_000_000
        assert result.text == "$1.25 Billion"

    def test_thousands_separators(self):
        result = parse_amount("awarded $1,250,000 for repairs")
        assert result.amount == 1_250_000
        assert result.text == "$1,250,000"

    def test_first_figure_wins(self):
        assert parse_amount("$5 million, cumulative $9 million").amount == 5_000_000

    def test_oversized_figure_has_no_amount(self):
        result = parse_amount("$" + "9" * 400 + " million")
        assert result.amount is None
        assert result.text is None

    def test_no_amount(self):
        result = parse_amount("no dollar figure here")
        assert result.amount is None
        assert result.unit is None
        assert result.text is None


class TestParseVendors:
    """Tests for parse_vendors."""

    def test_vendor_before_of(self):
        assert parse_vendors(AWARD) == ["XYZ Corp"]

    def test_vendor_before_comma(self):
        assert parse_vendors("Acme Shipbuilding Inc., Bath, Maine, is being awarded") == ["Acme Shipbuilding Inc."]

    def test_vendor_before_has_been(self):
        assert parse_vendors("Lockheed Martin has been awarded a contract") == ["Lockheed Martin"]

    def test_no_delimiter(self):
        assert parse_vendors("Nothing to see") == []


class TestParseContractIds:
    """Tests for parse_contract_ids."""

    def test_single_id(self):
        assert parse_contract_ids(AWARD) == ["W912DY-24-C-0001"]

    def test_all_ids_in_order(self):
        text = "contract (FA8107-25-D-0001) and order FA8107-25-F-0002"
        assert parse_contract_ids(text) == ["FA8107-25-D-0001", "FA8107-25-F-0002"]

    def test_lowercase_not_matched(self):
        assert parse_contract_ids("see w912dy-24-c-0001") == []

    def test_none(self):
        assert parse_contract_ids("no contract number") == []


class TestMatchHeading:
    """Tests for match_heading."""

    @pytest.mark.parametrize("text,expected", [
        ("ARMY", "ARMY"),
        ("Navy:", "NAVY"),
        ("AIR  FORCE", "AIR  FORCE"),
        ("U.S. SPECIAL OPERATIONS COMMAND", "U.S. SPECIAL OPERATIONS COMMAND"),
        ("DLA", "DEFENSE LOGISTICS AGENCY"),
        ("DLA:", "DEFENSE LOGISTICS AGENCY"),
    ])
    def test_headings(self, text, expected):
        assert match_heading(text) == expected

    def test_not_a_heading(self):
        assert match_heading("XYZ Corp of Anytown, VA") is None

    def test_word_boundary(self):
        assert match_heading("ARMYWORKS INC., has been awarded") is None


class TestAwardExtractor:
    """Tests for AwardExtractor.extract."""

    def test_end_to_end_award(self, extractor):
        events = extractor.extract("ARMY\n\n" + AWARD, LINK, PUB)

        assert len(events) == 1
        event = events[0]
        assert event.agencies == ["Department of Defense", "ARMY"]
        assert event.vendors == ["XYZ Corp"]
        assert event.amount == 12_500_000
        assert event.amount_unit == "USD"
        assert event.amount_text == "$12.5 million"
        assert event.contract_id == "W912DY-24-C-0001"
        assert event.meta.contract_ids == ["W912DY-24-C-0001"]
        assert event.meta.original_link == LINK
        assert event.source == "dod_contracts"
        assert event.source_url == LINK
        assert event.published_at == "2025-10-17T21:00:00.000Z"
        assert event.title == "ARMY contract award"
        assert event.reason_codes == [ReasonCode.CONTRACT_AWARD, ReasonCode.DOD_PROCUREMENT]

    def test_announcement(self, extractor):
        events = extractor.extract(ANNOUNCEMENT, LINK, PUB)

        assert [e.agencies[1] for e in events] == ["NAVY", "AIR FORCE", "DEFENSE LOGISTICS AGENCY"]
        assert events[0].vendors == ["Acme Shipbuilding Inc."]
        assert events[0].amount == 1_250_000
        assert events[1].amount == 2_100_000_000
        assert events[1].contract_id == "FA8107-25-D-0001"
        assert events[1].meta.contract_ids == ["FA8107-25-D-0001", "FA8107-25-F-0002"]

    def test_heading_never_emits(self, extractor):
        events = extractor.extract("NAVY\n\nARMY", LINK, PUB)
        assert events == []

    def test_default_agency_before_any_heading(self, extractor):
        events = extractor.extract(AWARD, LINK, PUB)
        assert events[0].agencies == ["Department of Defense", "DEPARTMENT OF DEFENSE"]

    def test_long_heading_like_paragraph_is_heading(self, extractor):
        """A paragraph starting with a service name is treated as a heading."""
        text = "ARMY CORPS OF ENGINEERS AWARDS FOR THE WEEK:\n\n" + AWARD
        events = extractor.extract(text, LINK, PUB)
        assert len(events) == 1
        assert events[0].agencies[1] == "ARMY CORPS OF ENGINEERS AWARDS FOR THE WEEK"

    def test_short_paragraphs_dropped(self, extractor):
        assert extractor.extract("Share this page.\n\nPrint", LINK, PUB) == []

    def test_boilerplate_skipped(self, extractor):
        text = (
            "Editor’s note: This contract announcement has been corrected below.\n\n"
            "Today’s Department of Defense contracts valued at $7.5 million are listed."
        )
        assert extractor.extract(text, LINK, PUB) == []

    def test_paragraph_without_matches_still_emitted(self, extractor):
        text = "The contracting activity will publish further details about this requirement soon."
        events = extractor.extract(text, LINK, PUB)

        assert len(events) == 1
        assert events[0].amount is None
        assert events[0].vendors == []
        assert events[0].contract_id is None

    def test_unmatched_paragraphs_dropped_when_disabled(self):
        text = "The contracting activity will publish further details about this requirement soon."
        assert AwardExtractor(emit_unmatched=False).extract(text, LINK, PUB) == []

    def test_summary_bounded(self, extractor):
        events = extractor.extract("Long Vendor Name, " + "x" * 600, LINK, PUB)
        assert len(events[0].summary) == 280
        assert len(events[0].body_text) > 280

    def test_windows_line_endings(self, extractor):
        events = extractor.extract("ARMY\r\n\r\n" + AWARD, LINK, PUB)
        assert events[0].agencies[1] == "ARMY"

    def test_unparsable_date_uses_now(self, extractor):
        now = datetime(2025, 10, 18, 12, 0, tzinfo=timezone.utc)
        events = extractor.extract(AWARD, LINK, "sometime", now=now)
        assert events[0].published_at == "2025-10-18T12:00:00.000Z"

    def test_deterministic(self, extractor):
        first = extractor.extract(ANNOUNCEMENT, LINK, PUB)
        second = extractor.extract(ANNOUNCEMENT, LINK, PUB)
        assert [e.model_dump_json() for e in first] == [e.model_dump_json() for e in second]

    def test_amounts_are_finite_and_non_negative(self, extractor):
        for event in extractor.extract(ANNOUNCEMENT, LINK, PUB):
            assert event.amount is None or (event.amount >= 0 and math.isfinite(event.amount))

    def test_oversized_figure_keeps_article_events(self, extractor):
        huge = "Mega Holdings Inc., Reston, Virginia, was awarded $" + "9" * 400 + " in ceiling value."
        events = extractor.extract(AWARD + "\n\n" + huge, LINK, PUB)

        assert len(events) == 2
        assert events[0].amount == 12_500_000
        assert events[0].contract_id == "W912DY-24-C-0001"
        assert events[1].amount is None
        assert events[1].vendors == ["Mega Holdings Inc."]

    def test_empty_text(self, extractor):
        assert extractor.extract("", LINK, PUB) == []
