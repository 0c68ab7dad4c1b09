import os
from pathlib import Path

import pytest

SAMPLE_DATA_FILE = Path(__file__).resolve().parent.parent / "app" / "data" / "sample_crm.json"

# Disable local auth for tests (all tests run without X-Local-Token header)
os.environ["CRM_CHART_NO_AUTH"] = "true"
# Disable rate limiting for tests
os.environ["CRM_CHART_NO_RATE_LIMIT"] = "true"


@pytest.fixture
def sample_data_file() -> Path:
    return SAMPLE_DATA_FILE


@pytest.fixture
def fresh_store(monkeypatch):
    """Store and chart cache reset around the test, loading the bundled sample data."""
    from app.services.chart_service import clear_chart_cache
    from app.services.entity_store import reset_store

    monkeypatch.delenv("CRM_CHART_DATA_FILE", raising=False)
    reset_store()
    clear_chart_cache()
    yield
    reset_store()
    clear_chart_cache()
