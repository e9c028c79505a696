"""
Supabase (PostgREST) persistence for award events.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import requests
import structlog

from award_scraper.config import (
    SUPABASE_URL,
    SUPABASE_KEY,
    SUPABASE_TABLE,
    SINK_TIMEOUT_S
)
from award_scraper.errors import NetworkError, SinkError
from award_scraper.models import AwardEvent, SaveResult

logger = structlog.get_logger()

CONFLICT_COLUMNS = "source_url,contract_id"


def dedupe_events(events: Sequence[AwardEvent]) -> List[AwardEvent]:
    """
    Collapse events sharing a dedup key, keeping the last one.

    PostgREST rejects a batch that touches the same conflict key twice.
    Events without a contract id never conflict (NULLs are distinct in a
    unique key) and are passed through unchanged.
    """
    by_key: Dict[Tuple[str, Optional[str]], int] = {}
    kept: List[Optional[AwardEvent]] = []
    for event in events:
        if event.contract_id is not None:
            previous = by_key.get(event.dedup_key)
            if previous is not None:
                kept[previous] = None
            by_key[event.dedup_key] = len(kept)
        kept.append(event)
    return [event for event in kept if event is not None]


class SupabaseSink:
    """Upserts events keyed on (source_url, contract_id)."""

    def __init__(
        self,
        url: str = SUPABASE_URL,
        key: str = SUPABASE_KEY,
        table: str = SUPABASE_TABLE,
        timeout: int = SINK_TIMEOUT_S
    ):
        self.url = (url or "").rstrip("/")
        self.key = key
        self.table = table
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.url and self.key)

    def save(self, events: Sequence[AwardEvent]) -> SaveResult:
        """
        Upsert a batch of events.

        Args:
            events: Events to persist

        Returns:
            SaveResult; everything is skipped when the sink is unconfigured

        Raises:
            NetworkError: On transport failure or timeout
            SinkError: If Supabase answers with a non-success status
        """
        if not self.configured or not events:
            return SaveResult(saved=0, skipped=len(events))

        rows = [event.model_dump(mode="json") for event in dedupe_events(events)]
        endpoint = f"{self.url}/rest/v1/{self.table}"

        try:
            r = requests.post(
                endpoint,
                params={"on_conflict": CONFLICT_COLUMNS},
                headers={
                    "apikey": self.key,
                    "Authorization": f"Bearer {self.key}",
                    "Content-Type": "application/json",
                    "Prefer": "resolution=merge-duplicates",
                },
                json=rows,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise NetworkError(f"Supabase request failed: {e}", url=endpoint) from e

        if not r.ok:
            raise SinkError(f"Supabase {r.status_code}: {r.text}", status=r.status_code)

        logger.info("events_saved", table=self.table, rows=len(rows), submitted=len(events))
        return SaveResult(saved=len(rows), skipped=len(events) - len(rows))
