"""
Text parsers for extracting award events from contract announcements.
"""

from award_scraper.parsers.award_extractor import (
    AwardExtractor,
    parse_amount,
    parse_contract_ids,
    parse_vendors
)

__all__ = ["AwardExtractor", "parse_amount", "parse_contract_ids", "parse_vendors"]
