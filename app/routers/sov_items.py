from fastapi import APIRouter
from app.models.shared import ApiResponse, ok
from app.models.sov import LineItemCreate, LineItemUpdate, BillingUpdate, LineItemResponse
from app.services import line_items

router = APIRouter(prefix="/api/sov", tags=["sov-items"])


def _dump(item: dict | None):
    if item is None:
        return None
    return LineItemResponse.model_validate(item).model_dump(mode="json")


@router.get("/{sov_id}/items", response_model=ApiResponse)
async def list_items(sov_id: str):
    return ok([_dump(item) for item in line_items.list_items(sov_id)])


@router.post("/{sov_id}/items", response_model=ApiResponse)
async def add_item(sov_id: str, body: LineItemCreate):
    item = line_items.create_item(
        sov_id,
        body.description,
        line_number=body.line_number,
        cost_code_id=body.cost_code_id,
        scheduled_value=body.scheduled_value,
        approved_changes=body.approved_changes,
        retainage_percent=body.retainage_percent,
        notes=body.notes,
    )
    return ok(_dump(item))


@router.put("/{sov_id}/items", response_model=ApiResponse)
async def update_item(sov_id: str, body: LineItemUpdate):
    patch = body.model_dump(exclude_unset=True, exclude={"item_id"})
    item = line_items.update_item(body.item_id, patch, sov_id=sov_id)
    return ok(_dump(item))


@router.put("/{sov_id}/items/billing", response_model=ApiResponse)
async def record_billing(sov_id: str, body: BillingUpdate):
    """Billing inputs from the pay application process."""
    item = line_items.record_billing(
        body.item_id,
        previous_billed=body.previous_billed,
        current_billed=body.current_billed,
        sov_id=sov_id,
    )
    return ok(_dump(item))


@router.post("/{sov_id}/close-period", response_model=ApiResponse)
async def close_billing_period(sov_id: str):
    items = line_items.close_billing_period(sov_id)
    return ok([_dump(item) for item in items], message="Billing period closed")


@router.delete("/{sov_id}/items", response_model=ApiResponse)
async def delete_item(sov_id: str, item_id: str | None = None):
    line_items.delete_item(item_id, sov_id=sov_id)
    return ok(message="Line item deleted")
