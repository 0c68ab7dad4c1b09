"""Org charts for the loaded CRM snapshot, memoized per snapshot fingerprint."""

from __future__ import annotations

import logging
from functools import lru_cache

from app.models.chart_models import OrgChart, OrgChartResponse
from app.models.crm_models import Org
from app.services.chart_builder import build_org_chart
from app.services.chart_layout import layout_config_from_env
from app.services.entity_store import get_account_by_id, get_org_by_id, get_snapshot_fingerprint

logger = logging.getLogger(__name__)

EMPTY_FOCUS_MESSAGE = "No related accounts to display for this account."
EMPTY_ORGS_MESSAGE = "No organisations to display. Add an org to see the chart."
EMPTY_ACCOUNTS_MESSAGE = "No accounts to display for this organisation."


def empty_message(chart: OrgChart, org_count: int, focus_account_id: str | None) -> str | None:
    """Explanatory text for the renderer when there is nothing below the org row."""
    if chart.account_count > 0:
        return None
    if focus_account_id:
        return EMPTY_FOCUS_MESSAGE
    if org_count == 0:
        return EMPTY_ORGS_MESSAGE
    return EMPTY_ACCOUNTS_MESSAGE


def build_chart_response(
    orgs: list[Org],
    focus_account_id: str | None = None,
) -> OrgChartResponse:
    """Build a chart for caller-supplied orgs (no store involved)."""
    chart = build_org_chart(orgs, focus_account_id, layout=layout_config_from_env())
    return OrgChartResponse(
        focus_account_id=focus_account_id or None,
        nodes=chart.nodes,
        edges=chart.edges,
        empty_message=empty_message(chart, len(orgs), focus_account_id),
    )


@lru_cache(maxsize=256)
def _cached_org_chart(fingerprint: str, org_id: str, focus_account_id: str | None) -> OrgChartResponse:
    org = get_org_by_id(org_id)
    if org is None:
        raise KeyError(org_id)
    logger.debug("Building org chart for %s (focus=%r, snapshot=%s)", org_id, focus_account_id, fingerprint)
    chart = build_org_chart(
        [org],
        focus_account_id,
        layout=layout_config_from_env(),
        lookup_account=get_account_by_id,
    )
    return OrgChartResponse(
        focus_account_id=focus_account_id,
        nodes=chart.nodes,
        edges=chart.edges,
        empty_message=empty_message(chart, 1, focus_account_id),
    )


def get_org_chart(org_id: str, focus_account_id: str | None = None) -> OrgChartResponse | None:
    """Chart for one stored org, optionally focused on an account. None if the org is unknown."""
    if get_org_by_id(org_id) is None:
        return None
    result = _cached_org_chart(get_snapshot_fingerprint(), org_id, focus_account_id or None)
    return result.model_copy(deep=True)


def get_account_chart(account_id: str) -> OrgChartResponse | None:
    """Chart of the account's org, focused on the account. None if the account is unknown."""
    account = get_account_by_id(account_id)
    if account is None:
        return None
    return get_org_chart(account.org_id, account.id)


def clear_chart_cache() -> None:
    _cached_org_chart.cache_clear()
