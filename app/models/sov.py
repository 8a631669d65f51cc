from pydantic import BaseModel
from datetime import datetime
from decimal import Decimal

from app.models.shared import TimestampMixin

SOV_STATUSES = ("draft", "pending", "approved", "revised")


class SOVCreate(BaseModel):
    user_id: str | None = None
    job_id: str | None = None
    estimate_id: str | None = None
    name: str | None = None
    notes: str | None = None
    generate_from_estimate: bool = False


class SOVUpdate(BaseModel):
    id: str | None = None
    name: str | None = None
    status: str | None = None  # draft, pending, approved, revised
    notes: str | None = None
    approved_by: str | None = None


class LineItemCreate(BaseModel):
    line_number: str | None = None
    cost_code_id: str | None = None
    description: str | None = None
    scheduled_value: Decimal = Decimal("0")
    approved_changes: Decimal = Decimal("0")
    retainage_percent: Decimal | None = None
    notes: str | None = None


class LineItemUpdate(BaseModel):
    item_id: str | None = None
    line_number: str | None = None
    cost_code_id: str | None = None
    description: str | None = None
    scheduled_value: Decimal | None = None
    approved_changes: Decimal | None = None
    retainage_percent: Decimal | None = None
    sort_order: int | None = None
    notes: str | None = None


class BillingUpdate(BaseModel):
    item_id: str | None = None
    previous_billed: Decimal | None = None
    current_billed: Decimal | None = None


class LineItemResponse(BaseModel):
    id: str
    sov_id: str
    line_number: str | None = None
    cost_code_id: str | None = None
    cost_code: str | None = None
    cost_code_name: str | None = None
    description: str
    scheduled_value: float = 0
    approved_changes: float = 0
    revised_value: float = 0
    previous_billed: float = 0
    current_billed: float = 0
    total_billed: float = 0
    percent_complete: float = 0
    balance_to_finish: float = 0
    retainage_percent: float = 10
    retainage_held: float = 0
    sort_order: int = 0
    estimate_line_item_id: str | None = None
    notes: str | None = None
    created_at: datetime | None = None


class ScheduleSummary(BaseModel):
    scheduled_value: float = 0
    approved_changes: float = 0
    revised_value: float = 0
    total_billed: float = 0
    percent_complete: float = 0
    balance_to_finish: float = 0
    retainage_held: float = 0


class SOVResponse(TimestampMixin):
    id: str
    user_id: str
    job_id: str
    job_name: str | None = None
    estimate_id: str | None = None
    estimate_po: str | None = None
    name: str
    status: str = "draft"
    version: int = 1
    total_contract_amount: float = 0
    approved_at: datetime | None = None
    approved_by: str | None = None
    notes: str | None = None
    line_count: int | None = None


class SOVDetailResponse(SOVResponse):
    line_items: list[LineItemResponse] = []
    summary: ScheduleSummary = ScheduleSummary()
