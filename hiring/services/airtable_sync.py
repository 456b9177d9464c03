"""
Best-effort mirror of candidate pipeline state into an Airtable table.

The SQL database is the source of truth. Airtable only ever receives
writes from here, and a failed sync is logged, never raised to the caller.
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Set
from urllib.parse import quote

import requests

from hiring.core.config import settings, AirtableSettings

logger = logging.getLogger(__name__)


class FieldNameCache:
    """Known field names of one Airtable table, valid for `ttl_seconds`."""

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._fields: Optional[Set[str]] = None
        self._expires_at = 0.0

    def get(self) -> Optional[Set[str]]:
        with self._lock:
            if self._fields is None or self._clock() >= self._expires_at:
                return None
            return set(self._fields)

    def set(self, fields: Set[str]):
        with self._lock:
            self._fields = set(fields)
            self._expires_at = self._clock() + self.ttl_seconds

    def invalidate(self):
        with self._lock:
            self._fields = None
            self._expires_at = 0.0


def escape_formula_value(value: Any) -> str:
    return str(value).replace("\\", "\\\\").replace("'", "\\'")


class AirtableClient:
    def __init__(self, config: AirtableSettings, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    @property
    def _table_url(self) -> str:
        return f"{self.config.api_url}/{self.config.base_id}/{quote(self.config.table_name, safe='')}"

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        response = self.session.request(method, url, headers=self._headers, timeout=15, **kwargs)
        response.raise_for_status()
        return response.json()

    def list_records(self, formula: Optional[str] = None, max_records: Optional[int] = None) -> List[Dict[str, Any]]:
        """All records matching `formula`, following Airtable's offset pagination."""
        records: List[Dict[str, Any]] = []
        offset = None
        while True:
            params: Dict[str, Any] = {}
            if formula:
                params["filterByFormula"] = formula
            if max_records:
                params["maxRecords"] = max_records
            if offset:
                params["offset"] = offset
            data = self._request("GET", self._table_url, params=params)
            records.extend(data.get("records", []))
            offset = data.get("offset")
            if not offset:
                return records

    def create_record(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", self._table_url, json={"fields": fields, "typecast": True})

    def update_record(self, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", f"{self._table_url}/{record_id}", json={"fields": fields, "typecast": True})

    def table_field_names(self) -> Set[str]:
        data = self._request("GET", f"{self.config.api_url}/meta/bases/{self.config.base_id}/tables")
        for table in data.get("tables", []):
            if table.get("name") == self.config.table_name or table.get("id") == self.config.table_name:
                return {field["name"] for field in table.get("fields", [])}
        return set()


_field_cache = FieldNameCache(settings.airtable.field_cache_ttl_seconds)


class AirtableSyncService:
    def __init__(self, client: Optional[AirtableClient] = None, cache: Optional[FieldNameCache] = None):
        self.client = client or AirtableClient(settings.airtable)
        self.cache = cache or _field_cache

    def known_fields(self) -> Set[str]:
        fields = self.cache.get()
        if fields is None:
            fields = self.client.table_field_names()
            self.cache.set(fields)
        return fields

    @staticmethod
    def build_fields(scoring) -> Dict[str, Any]:
        profile = scoring.profile
        job = scoring.job
        return {
            "Profile ID": str(scoring.profile_id),
            "Job ID": str(scoring.job_id),
            "Name": profile.name if profile else None,
            "Email": profile.email if profile else None,
            "Job Title": job.title if job else None,
            "Overall Score": scoring.overall_score,
            "Match Label": scoring.match_label,
            "Status": scoring.status_label,
            "Disqualified": bool(scoring.disqualified),
            "Interview Date": scoring.interview_date,
            "Interview Time": scoring.interview_time,
            "Interview Link": scoring.interview_link,
        }

    def sync_job_scoring(self, scoring) -> Optional[str]:
        """Upsert the candidate row keyed by Profile ID + Job ID. Returns the record id."""
        known = self.known_fields()
        candidate = self.build_fields(scoring)
        # An empty set means the schema could not be read; send everything
        fields = {
            name: value for name, value in candidate.items()
            if value is not None and (not known or name in known)
        }
        if known and set(candidate) - known:
            logger.debug(f"Airtable table lacks fields {sorted(set(candidate) - known)}")

        formula = "AND({Profile ID}='%s',{Job ID}='%s')" % (
            escape_formula_value(scoring.profile_id), escape_formula_value(scoring.job_id)
        )
        existing = self.client.list_records(formula=formula, max_records=1)
        if existing:
            record = self.client.update_record(existing[0]["id"], fields)
        else:
            record = self.client.create_record(fields)
        return record.get("id")


def sync_scoring_in_background(scoring_id: int):
    """BackgroundTasks entry point. Opens its own session."""
    if not settings.airtable.enabled:
        return
    from hiring.database import SessionLocal
    from hiring.models.job_scoring import JobScoring

    db = SessionLocal()
    try:
        scoring = db.query(JobScoring).filter(JobScoring.id == scoring_id).first()
        if scoring is None:
            return
        record_id = AirtableSyncService().sync_job_scoring(scoring)
        logger.info(f"Synced job scoring {scoring_id} to Airtable record {record_id}")
    except requests.exceptions.HTTPError as e:
        if e.response is not None and e.response.status_code == 422:
            # Unknown field names usually mean the table schema changed
            _field_cache.invalidate()
        logger.error(f"Airtable sync failed for job scoring {scoring_id}: {e}")
    except Exception as e:
        logger.error(f"Airtable sync failed for job scoring {scoring_id}: {e}", exc_info=True)
    finally:
        db.close()
