"""Tests for the read-only CRM snapshot store."""

import json

import pytest

from app.services import entity_store
from app.services.entity_store import (
    EntityStoreError,
    get_account_by_id,
    get_org_by_id,
    get_snapshot,
    get_snapshot_fingerprint,
    get_store_status,
    list_orgs,
    load_snapshot,
    reset_store,
)


def _write_snapshot(path, orgs):
    path.write_text(json.dumps({"orgs": orgs}))
    return path


def test_bundled_sample_loads(fresh_store, sample_data_file):
    snapshot = get_snapshot()
    assert [o.id for o in snapshot.orgs] == ["org-001", "org-002", "org-005", "org-006"]

    status = get_store_status()
    assert status.loaded is True
    assert status.org_count == 4
    assert status.account_count == 8
    assert status.source == str(sample_data_file)
    assert status.error is None


def test_snapshot_loaded_once(fresh_store):
    assert get_snapshot() is get_snapshot()


def test_lookups(fresh_store):
    assert get_org_by_id("org-002").name == "Gladstone Aluminium"
    assert get_org_by_id("missing") is None
    account = get_account_by_id("acc-mres-003")
    assert account.org_id == "org-006"
    assert account.linked_account_ids == ["acc-mres-002", "acc-mres-004"]
    assert get_account_by_id("missing") is None


def test_list_orgs(fresh_store):
    summaries = {o.id: o.account_count for o in list_orgs()}
    assert summaries == {"org-001": 2, "org-002": 1, "org-005": 0, "org-006": 5}


def test_data_file_from_env(tmp_path, monkeypatch, fresh_store):
    path = _write_snapshot(tmp_path / "crm.json", [
        {"id": "o1", "name": "Org One", "accounts": [{"id": "a1", "org_id": "o1", "name": "A1"}]},
    ])
    monkeypatch.setenv("CRM_CHART_DATA_FILE", str(path))
    reset_store()

    assert [o.id for o in list_orgs()] == ["o1"]
    assert get_account_by_id("a1").name == "A1"


def test_fingerprint_tracks_content(tmp_path, monkeypatch, fresh_store):
    path = _write_snapshot(tmp_path / "crm.json", [{"id": "o1", "name": "One"}])
    monkeypatch.setenv("CRM_CHART_DATA_FILE", str(path))
    reset_store()
    first = get_snapshot_fingerprint()

    _write_snapshot(path, [{"id": "o1", "name": "One renamed"}])
    assert get_snapshot_fingerprint() == first  # still cached

    reset_store()
    assert get_snapshot_fingerprint() != first


def test_missing_file(tmp_path, monkeypatch, fresh_store):
    monkeypatch.setenv("CRM_CHART_DATA_FILE", str(tmp_path / "nope.json"))
    reset_store()

    with pytest.raises(EntityStoreError, match="Cannot read"):
        get_snapshot()

    status = get_store_status()
    assert status.loaded is False
    assert "nope.json" in status.error


def test_invalid_file(tmp_path, fresh_store):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"orgs": [{"id": "o1"}]}))  # name missing
    with pytest.raises(EntityStoreError, match="Invalid CRM snapshot"):
        load_snapshot(path)


def test_reset_clears_state(fresh_store):
    get_snapshot()
    reset_store()
    assert entity_store._snapshot is None
    assert entity_store._accounts_by_id == {}
