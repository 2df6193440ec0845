"""
Volunteer router — bind a duty code once, then hand out items by email.

Endpoints:
    POST   /volunteer/duty    → bind the session to a secret code
    GET    /volunteer/duty    → is a code bound?
    DELETE /volunteer/duty    → drop the binding
    POST   /volunteer/assign  → redeem the bound item for a participant
"""

from fastapi import APIRouter, Depends

from hackops.dependencies import get_duty_binder
from hackops.schemas.logistics import AssignRequest, DutyBindRequest, DutyStatusResponse, RedeemResponse
from hackops.services.duty_binder import DutyBinder

router = APIRouter(prefix="/volunteer", tags=["volunteer"])


@router.post("/duty", response_model=DutyStatusResponse)
async def bind_duty(payload: DutyBindRequest, binder: DutyBinder = Depends(get_duty_binder)):
    binder.bind(payload.secret_code)
    return DutyStatusResponse(message="Duty code bound.", bound=True)


@router.get("/duty", response_model=DutyStatusResponse)
async def duty_status(binder: DutyBinder = Depends(get_duty_binder)):
    if binder.is_bound:
        return DutyStatusResponse(message="Duty code bound.", bound=True)
    return DutyStatusResponse(message="No duty code bound.", bound=False)


@router.delete("/duty", response_model=DutyStatusResponse)
async def unbind_duty(binder: DutyBinder = Depends(get_duty_binder)):
    binder.unbind()
    return DutyStatusResponse(message="Duty code released.", bound=False)


@router.post("/assign", response_model=RedeemResponse)
async def assign_logistics(payload: AssignRequest, binder: DutyBinder = Depends(get_duty_binder)):
    """Redeem the bound item for ``email``; ledger errors pass through unchanged."""
    result = await binder.assign_to_participant(payload.email)
    return RedeemResponse.from_result(result)
