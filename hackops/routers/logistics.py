"""Logistics router — organizer inventory and secret-code redemption."""

from fastapi import APIRouter, Depends, status

from hackops.dependencies import get_logistics_ledger, get_principal_resolver
from hackops.schemas.logistics import (
    AddLogisticsResponse,
    FetchLogisticsResponse,
    LogisticsCreate,
    LogisticsFetch,
    LogisticsItemOut,
    RedeemRequest,
    RedeemResponse,
    SummaryOut,
)
from hackops.services.logistics_ledger import LogisticsLedger, summarize
from hackops.services.principal import PrincipalResolver

router = APIRouter(prefix="/logistics", tags=["logistics"])


@router.post("/add", response_model=AddLogisticsResponse, status_code=status.HTTP_201_CREATED)
async def add_logistics(
    payload: LogisticsCreate,
    resolver: PrincipalResolver = Depends(get_principal_resolver),
    ledger: LogisticsLedger = Depends(get_logistics_ledger),
):
    """Organizer adds an item; the response carries its secret code."""
    principal = await resolver.resolve(payload.email, payload.auth_token)
    item = await ledger.add_item(
        payload.hackathon_id, payload.logistics_name, payload.total_quantity, principal.email
    )
    return AddLogisticsResponse(
        message="Logistics added successfully.",
        logistics_id=item.logistics_id,
        secret_code=item.secret_code,
    )


@router.post("/fetch", response_model=FetchLogisticsResponse)
async def fetch_logistics(
    payload: LogisticsFetch,
    resolver: PrincipalResolver = Depends(get_principal_resolver),
    ledger: LogisticsLedger = Depends(get_logistics_ledger),
):
    """All items of the hackathon with counters and recipients."""
    principal = await resolver.resolve(payload.email, payload.auth_token)
    items = await ledger.list_items(payload.hackathon_id, principal.email)
    return FetchLogisticsResponse(
        message="Logistics fetched successfully." if items else "No logistics found for this hackathon.",
        logistics=[LogisticsItemOut.from_view(i) for i in items],
        summary=SummaryOut.from_summary(summarize(items)),
    )


@router.post("/redeem", response_model=RedeemResponse)
async def redeem_logistics(
    payload: RedeemRequest,
    ledger: LogisticsLedger = Depends(get_logistics_ledger),
):
    """Grant one unit to a participant. The secret code is the credential."""
    result = await ledger.redeem(payload.secret_code, payload.email)
    return RedeemResponse.from_result(result)
