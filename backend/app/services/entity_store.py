"""Singleton read-only CRM snapshot: loads orgs/accounts/contacts from JSON once.

The snapshot file is taken from CRM_CHART_DATA_FILE, falling back to the
bundled sample data. Nothing here writes back to the file.
"""

from __future__ import annotations

import hashlib
import logging
import os
import threading
from pathlib import Path

from pydantic import ValidationError

from app.models.crm_models import Account, CrmSnapshot, Org, OrgSummary, StoreStatus

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).resolve().parent.parent / "data" / "sample_crm.json"

# Module-level singleton
_snapshot: CrmSnapshot | None = None
_fingerprint: str | None = None
_source: Path | None = None
_error: str | None = None
_accounts_by_id: dict[str, Account] = {}
_lock = threading.Lock()


class EntityStoreError(Exception):
    """Raised when the CRM snapshot cannot be loaded."""


def _data_file_from_env() -> Path:
    env_path = os.environ.get("CRM_CHART_DATA_FILE")
    if env_path:
        return Path(env_path)
    return DEFAULT_DATA_FILE


def load_snapshot(path: Path) -> tuple[CrmSnapshot, str]:
    """Parse a snapshot file. Returns the snapshot and a content fingerprint."""
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise EntityStoreError(f"Cannot read CRM snapshot {path}: {e}") from e
    try:
        snapshot = CrmSnapshot.model_validate_json(raw)
    except ValidationError as e:
        raise EntityStoreError(f"Invalid CRM snapshot {path}: {e.error_count()} validation error(s)") from e
    fingerprint = hashlib.sha256(raw).hexdigest()[:16]
    return snapshot, fingerprint


def get_snapshot() -> CrmSnapshot:
    """Get or lazily load the CRM snapshot (thread-safe)."""
    global _snapshot, _fingerprint, _source, _error, _accounts_by_id
    if _snapshot is not None:
        return _snapshot
    with _lock:
        if _snapshot is not None:
            return _snapshot
        path = _data_file_from_env()
        try:
            snapshot, fingerprint = load_snapshot(path)
        except EntityStoreError as e:
            _error = str(e)
            logger.error("Failed to load CRM snapshot: %s", e)
            raise
        index: dict[str, Account] = {}
        for org in snapshot.orgs:
            for account in org.accounts:
                index.setdefault(account.id, account)
        _accounts_by_id = index
        _fingerprint = fingerprint
        _source = path
        _error = None
        _snapshot = snapshot
        logger.info(
            "CRM snapshot loaded from %s: %d orgs, %d accounts",
            path, len(snapshot.orgs), len(index),
        )
        return _snapshot


def get_snapshot_fingerprint() -> str:
    get_snapshot()
    return _fingerprint or ""


def reset_store() -> None:
    """Drop the loaded snapshot so the next access reloads it."""
    global _snapshot, _fingerprint, _source, _error, _accounts_by_id
    with _lock:
        _snapshot = None
        _fingerprint = None
        _source = None
        _error = None
        _accounts_by_id = {}


def get_store_status() -> StoreStatus:
    try:
        snapshot = get_snapshot()
    except EntityStoreError:
        return StoreStatus(loaded=False, error=_error)
    return StoreStatus(
        loaded=True,
        org_count=len(snapshot.orgs),
        account_count=len(_accounts_by_id),
        source=str(_source) if _source else None,
    )


def list_orgs() -> list[OrgSummary]:
    return [
        OrgSummary(id=o.id, name=o.name, account_count=len(o.accounts))
        for o in get_snapshot().orgs
    ]


def get_org_by_id(org_id: str) -> Org | None:
    return next((o for o in get_snapshot().orgs if o.id == org_id), None)


def get_account_by_id(account_id: str) -> Account | None:
    get_snapshot()
    return _accounts_by_id.get(account_id)
