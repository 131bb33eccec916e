from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse

from app.schemas.billing.billing_event_schemas import BillingEventOutSchema, ServiceEventOutSchema
from app.services.billing.billing_event_service import list_billing_events
from app.services.billing.service_event_service import list_service_events

router = APIRouter(
    prefix="/billing-events",
    tags=["Billing"],
)

service_event_router = APIRouter(
    prefix="/service-events",
    tags=["Billing"],
)


# =========================
# INVOICE FEED
# =========================
@router.get("/", response_model=APIResponse[List[BillingEventOutSchema]])
async def list_billing_events_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    client_id: int | None = Query(None),
    reference_type: str | None = Query(None),
    reference_id: str | None = Query(None),
    service_code: str | None = Query(None),
    billing_month: str | None = Query(None, description="YYYY-MM"),
):
    events = await list_billing_events(
        db,
        client_id=client_id,
        reference_type=reference_type,
        reference_id=reference_id,
        service_code=service_code,
        billing_month=billing_month,
    )
    return success_response([BillingEventOutSchema.model_validate(e) for e in events])


@service_event_router.get("/", response_model=APIResponse[List[ServiceEventOutSchema]])
async def list_service_events_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    outbound_order_id: int | None = Query(None),
    client_id: int | None = Query(None),
):
    events = await list_service_events(db, outbound_order_id=outbound_order_id, client_id=client_id)
    return success_response([ServiceEventOutSchema.model_validate(e) for e in events])
