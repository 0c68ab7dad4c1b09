from fastapi import APIRouter, HTTPException, Request

from app.rate_limit import limiter

from app.models.chart_models import BuildChartRequest, OrgChartResponse
from app.models.crm_models import OrgSummary, StoreStatus
from app.services.chart_service import build_chart_response, get_account_chart, get_org_chart
from app.services.entity_store import EntityStoreError, get_store_status, list_orgs

router = APIRouter(prefix="/api/chart", tags=["chart"])


def _store_unavailable(e: EntityStoreError) -> HTTPException:
    return HTTPException(status_code=503, detail=f"CRM data unavailable: {e}")


@router.get("/status", response_model=StoreStatus)
async def store_status() -> StoreStatus:
    """Check whether the CRM snapshot is loaded."""
    return get_store_status()


@router.get("/orgs", response_model=list[OrgSummary])
async def get_orgs() -> list[OrgSummary]:
    """List orgs available for charting."""
    try:
        return list_orgs()
    except EntityStoreError as e:
        raise _store_unavailable(e) from e


@router.get("/orgs/{org_id}", response_model=OrgChartResponse)
@limiter.limit("60/minute")
async def get_org_chart_endpoint(request: Request, org_id: str) -> OrgChartResponse:
    """Full org chart: the org, all of its accounts and their contacts."""
    try:
        result = get_org_chart(org_id)
    except EntityStoreError as e:
        raise _store_unavailable(e) from e
    if result is None:
        raise HTTPException(status_code=404, detail="Org not found")
    return result


@router.get("/accounts/{account_id}", response_model=OrgChartResponse)
@limiter.limit("60/minute")
async def get_account_chart_endpoint(request: Request, account_id: str) -> OrgChartResponse:
    """Focus chart: the account and its directly linked accounts within its org."""
    try:
        result = get_account_chart(account_id)
    except EntityStoreError as e:
        raise _store_unavailable(e) from e
    if result is None:
        raise HTTPException(status_code=404, detail="Account not found")
    return result


@router.post("/build", response_model=OrgChartResponse)
@limiter.limit("30/minute")
async def build_chart(request: Request, body: BuildChartRequest) -> OrgChartResponse:
    """Build a chart from a caller-supplied snapshot."""
    return build_chart_response(body.orgs, body.focus_account_id)
