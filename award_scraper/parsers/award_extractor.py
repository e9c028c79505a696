"""
Heuristic extraction of contract awards from DoD announcement text.

Announcement pages list awards one paragraph each, grouped under service
headings (ARMY, NAVY, ...). Each paragraph becomes one event; amount, vendor
and contract number are pulled out independently and may each be missing.
"""

import math
import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

import structlog

from award_scraper.models import AmountResult, AwardEvent, EventMeta
from award_scraper.utils import to_iso

logger = structlog.get_logger()

TOP_LEVEL_AGENCY = "Department of Defense"
DEFAULT_HEADING = "DEPARTMENT OF DEFENSE"

SERVICE_HEADINGS = [
    "ARMY",
    "NAVY",
    "AIR FORCE",
    "MARINE CORPS",
    "SPACE FORCE",
    "DEFENSE LOGISTICS AGENCY",
    "MISSILE DEFENSE AGENCY",
    "U.S. SPECIAL OPERATIONS COMMAND",
    "COAST GUARD",
    "DEFENSE HEALTH AGENCY",
    "DEFENSE INFORMATION SYSTEMS AGENCY",
    "WASHINGTON HEADQUARTERS SERVICES",
    "DEPARTMENT OF THE ARMY",
    "DEPARTMENT OF THE NAVY",
    "DEPARTMENT OF THE AIR FORCE",
    "DEPARTMENT OF DEFENSE",
]

HEADING_ALIASES = {
    "DLA": "DEFENSE LOGISTICS AGENCY",
}

MIN_PARAGRAPH_LENGTH = 40
SUMMARY_LENGTH = 280

_HEADING_RE = re.compile(
    r'^(?:'
    + '|'.join(
        r'\s+'.join(re.escape(word) for word in name.split())
        for name in SERVICE_HEADINGS + list(HEADING_ALIASES)
    )
    + r')\b'
)

_BOILERPLATE_RE = re.compile(r"^editor[’']s note|^today[’']s department", re.IGNORECASE)

_PARAGRAPH_SPLIT_RE = re.compile(r'\n{2,}')

_AMOUNT_RE = re.compile(r'\$\d[\d,]*(?:\.\d+)?(?:\s*(million|billion))?', re.IGNORECASE)

_UNIT_SCALE = {
    "million": Decimal(1_000_000),
    "billion": Decimal(1_000_000_000),
}

_VENDOR_RE = re.compile(
    r"^([\w\s&.,'/-]+?)(?:,|\s+of\s+|\s+for\s+|\s+\$|\s+has been|\s+is being)",
    re.IGNORECASE
)

_CONTRACT_ID_RE = re.compile(r'\b[A-Z]{1,3}\w{1,10}-\d{2}-[A-Z]?\w{0,4}-?\w+\b', re.ASCII)


def parse_amount(text: str) -> AmountResult:
    """
    Find the first dollar figure and scale million/billion to dollars.

    Examples:
        "$2.4 million" -> 2400000.0 USD
        "$1,250,000"   -> 1250000.0 USD
    """
    match = _AMOUNT_RE.search(text)
    if not match:
        return AmountResult()

    number = match.group(0)[1:]
    if match.group(1):
        number = number[:-len(match.group(1))]
    value = Decimal(number.replace(',', '').strip())

    if match.group(1):
        value *= _UNIT_SCALE[match.group(1).lower()]

    amount = float(value)
    if not math.isfinite(amount):
        logger.debug("amount_out_of_range", text=match.group(0)[:40])
        return AmountResult()

    return AmountResult(amount=amount, unit="USD", text=match.group(0))


def parse_vendors(text: str) -> List[str]:
    """Return the leading vendor name (at most one), or an empty list."""
    match = _VENDOR_RE.match(text)
    vendor = match.group(1).strip() if match else ""
    return [vendor] if vendor else []


def parse_contract_ids(text: str) -> List[str]:
    """Return every contract-number-shaped token, in order of appearance."""
    return _CONTRACT_ID_RE.findall(text)


def match_heading(paragraph: str) -> Optional[str]:
    """
    Return the agency name if the paragraph is a service heading.

    Args:
        paragraph: Stripped paragraph text

    Returns:
        Upper-cased heading without a trailing colon, or None
    """
    upper = paragraph.upper()
    if not _HEADING_RE.match(upper):
        return None

    heading = upper[:-1] if upper.endswith(':') else upper
    return HEADING_ALIASES.get(heading, heading)


class AwardExtractor:
    """Turns announcement text into award events."""

    def __init__(self, emit_unmatched: bool = True, min_length: int = MIN_PARAGRAPH_LENGTH):
        """
        Initialize extractor.

        Args:
            emit_unmatched: Emit an event even when no amount, vendor or
                contract number was found in the paragraph
            min_length: Paragraphs shorter than this are page furniture
        """
        self.emit_unmatched = emit_unmatched
        self.min_length = min_length

    def extract(
        self,
        text: str,
        link: str,
        published_raw: str = "",
        now: Optional[datetime] = None
    ) -> List[AwardEvent]:
        """
        Extract award events from readable article text.

        Args:
            text: Rendered page text
            link: Source article URL
            published_raw: Feed publish date, used for ``published_at``
            now: Fallback timestamp when the publish date is unparsable

        Returns:
            One event per award paragraph, in text order
        """
        published_at = to_iso(published_raw, default=now or datetime.now(timezone.utc))
        paragraphs = _PARAGRAPH_SPLIT_RE.split((text or "").replace('\r', ''))

        current = DEFAULT_HEADING
        events = []

        for paragraph in paragraphs:
            line = paragraph.strip()
            if not line:
                continue

            heading = match_heading(line)
            if heading:
                current = heading
                continue

            if len(line) < self.min_length or _BOILERPLATE_RE.match(line):
                continue

            amount = parse_amount(line)
            vendors = parse_vendors(line)
            contract_ids = parse_contract_ids(line)

            if not self.emit_unmatched and amount.amount is None and not vendors and not contract_ids:
                continue

            events.append(AwardEvent(
                source_url=link,
                published_at=published_at,
                title=f"{current} contract award",
                summary=line[:SUMMARY_LENGTH],
                body_text=line,
                agencies=[TOP_LEVEL_AGENCY, current],
                vendors=vendors,
                amount=amount.amount,
                amount_unit=amount.unit,
                amount_text=amount.text,
                contract_id=contract_ids[0] if contract_ids else None,
                meta=EventMeta(original_link=link, contract_ids=contract_ids)
            ))

        logger.debug("awards_extracted", url=link, paragraphs=len(paragraphs), events=len(events))
        return events
