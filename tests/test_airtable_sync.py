from types import SimpleNamespace

import pytest

from hiring.core.config import AirtableSettings
from hiring.services.airtable_sync import (
    AirtableClient, AirtableSyncService, FieldNameCache, escape_formula_value, sync_scoring_in_background
)


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


class FakeSession:
    """Records requests and answers from a queue of canned payloads."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.requests = []

    def request(self, method, url, headers=None, timeout=None, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        return FakeResponse(self.replies.pop(0))


CONFIG = AirtableSettings(api_key="key", base_id="app123", table_name="Job Candidates")


def _scoring(**overrides):
    values = dict(
        profile_id=7,
        job_id=3,
        profile=SimpleNamespace(name="Jane Doe", email="jane@acme.com"),
        job=SimpleNamespace(title="Backend Engineer"),
        overall_score=82,
        match_label="Strong Match",
        status_label="invited",
        disqualified=False,
        interview_date=None,
        interview_time=None,
        interview_link=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_field_cache_expires():
    clock = FakeClock()
    cache = FieldNameCache(ttl_seconds=60, clock=clock)
    assert cache.get() is None

    cache.set({"Name"})
    clock.now += 59
    assert cache.get() == {"Name"}
    clock.now += 1
    assert cache.get() is None


def test_field_cache_invalidate():
    cache = FieldNameCache(ttl_seconds=60, clock=FakeClock())
    cache.set({"Name"})
    cache.invalidate()
    assert cache.get() is None


def test_escape_formula_value():
    assert escape_formula_value("O'Brien") == "O\\'Brien"


def test_list_records_follows_offset():
    session = FakeSession([
        {"records": [{"id": "rec1"}], "offset": "page2"},
        {"records": [{"id": "rec2"}]},
    ])
    client = AirtableClient(CONFIG, session=session)
    records = client.list_records(formula="{Name}='x'")
    assert [r["id"] for r in records] == ["rec1", "rec2"]
    assert session.requests[0]["url"] == "https://api.airtable.com/v0/app123/Job%20Candidates"
    assert session.requests[1]["params"]["offset"] == "page2"


def test_sync_creates_record_with_known_fields_only():
    session = FakeSession([
        {"tables": [{"name": "Job Candidates", "fields": [
            {"name": "Profile ID"}, {"name": "Job ID"}, {"name": "Name"}, {"name": "Overall Score"}, {"name": "Status"}
        ]}]},
        {"records": []},
        {"id": "recNEW"},
    ])
    service = AirtableSyncService(AirtableClient(CONFIG, session=session), FieldNameCache(300, FakeClock()))

    assert service.sync_job_scoring(_scoring()) == "recNEW"
    create = session.requests[2]
    assert create["method"] == "POST"
    assert create["json"]["fields"] == {
        "Profile ID": "7", "Job ID": "3", "Name": "Jane Doe", "Overall Score": 82, "Status": "invited"
    }


def test_sync_updates_existing_record_and_reuses_cached_fields():
    cache = FieldNameCache(300, FakeClock())
    cache.set({"Profile ID", "Job ID", "Status", "Interview Date"})
    session = FakeSession([
        {"records": [{"id": "recOLD"}]},
        {"id": "recOLD"},
    ])
    service = AirtableSyncService(AirtableClient(CONFIG, session=session), cache)

    record_id = service.sync_job_scoring(_scoring(status_label="accepted", interview_date="2026-11-02"))
    assert record_id == "recOLD"
    assert session.requests[0]["params"]["filterByFormula"] == "AND({Profile ID}='7',{Job ID}='3')"
    update = session.requests[1]
    assert update["method"] == "PATCH"
    assert update["url"].endswith("/recOLD")
    assert update["json"]["fields"] == {
        "Profile ID": "7", "Job ID": "3", "Status": "accepted", "Interview Date": "2026-11-02"
    }


def test_background_sync_is_noop_when_disabled():
    # Tests run without Airtable credentials
    assert sync_scoring_in_background(1) is None
