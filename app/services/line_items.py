"""Schedule of values line items.

Every mutation re-derives the line's financial fields (see
``app.services.derivation``) and then resyncs the parent SOV's
``total_contract_amount``.
"""
from loguru import logger

from app.config import get_settings
from app.database import get_supabase, execute
from app.errors import NotFoundError, ValidationError
from app.services.derivation import (
    INPUT_FIELDS,
    DERIVED_FIELDS,
    derive_line_values,
    money,
    to_decimal,
)
from app.services.recalculation import LINE_TABLE, recalculate_line_item, recalculate_total

# Fields a client may patch directly. Billing inputs go through record_billing.
UPDATABLE_FIELDS = (
    "line_number",
    "cost_code_id",
    "description",
    "scheduled_value",
    "approved_changes",
    "retainage_percent",
    "sort_order",
    "notes",
)
NUMERIC_FIELDS = INPUT_FIELDS + DERIVED_FIELDS


def shape_item(row: dict) -> dict:
    """Flatten the embedded cost code and coerce numeric columns to numbers."""
    item = dict(row)
    cost_code = item.pop("cost_codes", None) or {}
    if "cost_codes" in row:
        item["cost_code"] = cost_code.get("code")
        item["cost_code_name"] = cost_code.get("name")

    for key in NUMERIC_FIELDS:
        item[key] = float(to_decimal(item.get(key)))
    if row.get("retainage_percent") is None:
        item["retainage_percent"] = get_settings().default_retainage_percent
    item["sort_order"] = int(item.get("sort_order") or 0)
    return item


def _money_value(data: dict, key: str) -> None:
    if key in data and data[key] is not None:
        data[key] = float(to_decimal(data[key]))


def list_items(sov_id: str) -> list[dict]:
    db = get_supabase()
    result = execute(
        db.table(LINE_TABLE)
        .select("*, cost_codes(code, name)")
        .eq("sov_id", sov_id)
        .order("sort_order")
    )
    return [shape_item(row) for row in result.data or []]


def get_item(item_id: str) -> dict:
    db = get_supabase()
    result = execute(
        db.table(LINE_TABLE)
        .select("*, cost_codes(code, name)")
        .eq("id", item_id)
        .limit(1)
    )
    if not result.data:
        raise NotFoundError("Line item not found")
    return shape_item(result.data[0])


def next_sort_order(sov_id: str) -> int:
    """One past the highest sort_order in the SOV, or 1 when it has no lines."""
    db = get_supabase()
    result = execute(
        db.table(LINE_TABLE)
        .select("sort_order")
        .eq("sov_id", sov_id)
        .order("sort_order", desc=True)
        .limit(1)
    )
    if not result.data:
        return 1
    return int(result.data[0].get("sort_order") or 0) + 1


def create_item(
    sov_id: str,
    description: str | None,
    line_number: str | None = None,
    cost_code_id: str | None = None,
    scheduled_value=0,
    approved_changes=0,
    retainage_percent=None,
    notes: str | None = None,
) -> dict:
    """Append a line to the SOV. A new line has no billing history, so its
    balance to finish equals its revised value."""
    if not description or not description.strip():
        raise ValidationError("description is required")

    sort_order = next_sort_order(sov_id)
    if retainage_percent is None:
        retainage_percent = get_settings().default_retainage_percent

    db = get_supabase()
    result = execute(
        db.table(LINE_TABLE).insert({
            "sov_id": sov_id,
            "line_number": line_number or str(sort_order),
            "cost_code_id": cost_code_id,
            "description": description,
            "retainage_percent": float(to_decimal(retainage_percent)),
            "sort_order": sort_order,
            "notes": notes,
            "scheduled_value": float(money(to_decimal(scheduled_value))),
            "approved_changes": float(money(to_decimal(approved_changes))),
            **derive_line_values(scheduled_value, approved_changes, 0, 0, retainage_percent).as_row(),
        })
    )
    item = result.data[0]
    recalculate_total(sov_id)

    logger.info(f"Line item {item['id']} added to SOV {sov_id} at position {sort_order}")
    return shape_item(item)


def _parent_sov_id(item_id: str, sov_id: str | None = None) -> str:
    db = get_supabase()
    result = execute(db.table(LINE_TABLE).select("sov_id").eq("id", item_id).limit(1))
    if not result.data or (sov_id and result.data[0]["sov_id"] != sov_id):
        raise NotFoundError("Line item not found")
    return result.data[0]["sov_id"]


def _apply_and_recalculate(item_id: str, data: dict, sov_id: str | None = None) -> dict | None:
    parent_id = _parent_sov_id(item_id, sov_id)

    db = get_supabase()
    execute(db.table(LINE_TABLE).update(data).eq("id", item_id))

    # Derived fields are always recomputed, whichever inputs were patched
    row = recalculate_line_item(item_id)
    recalculate_total(parent_id)
    if row is None:
        return None
    return get_item(item_id)


def update_item(item_id: str | None, patch: dict, sov_id: str | None = None) -> dict | None:
    """Apply the allow-listed fields of ``patch`` and re-derive the line."""
    if not item_id:
        raise ValidationError("item_id is required")

    data = {key: value for key, value in patch.items() if key in UPDATABLE_FIELDS}
    if not data:
        raise ValidationError("No fields to update")

    for key in ("scheduled_value", "approved_changes", "retainage_percent"):
        if key in data and data[key] is None:
            raise ValidationError(f"{key} cannot be null")
        _money_value(data, key)
    if "description" in data and not (data["description"] or "").strip():
        raise ValidationError("description cannot be blank")

    item = _apply_and_recalculate(item_id, data, sov_id)
    logger.info(f"Line item {item_id} updated: {', '.join(data)}")
    return item


def record_billing(
    item_id: str | None,
    previous_billed=None,
    current_billed=None,
    sov_id: str | None = None,
) -> dict | None:
    """Store billing inputs from a pay application and re-derive the line."""
    if not item_id:
        raise ValidationError("item_id is required")

    data = {}
    if previous_billed is not None:
        data["previous_billed"] = float(to_decimal(previous_billed))
    if current_billed is not None:
        data["current_billed"] = float(to_decimal(current_billed))
    if not data:
        raise ValidationError("previous_billed or current_billed is required")

    item = _apply_and_recalculate(item_id, data, sov_id)
    if item is not None:
        logger.info(
            f"Billing recorded on line item {item_id}: "
            f"total billed {item['total_billed']} ({item['percent_complete']}%)"
        )
    return item


def close_billing_period(sov_id: str) -> list[dict]:
    """Roll each line's current billing into previous billing for the next period."""
    db = get_supabase()
    rows = execute(
        db.table(LINE_TABLE)
        .select("id, previous_billed, current_billed")
        .eq("sov_id", sov_id)
    )
    for row in rows.data or []:
        billed = to_decimal(row.get("previous_billed")) + to_decimal(row.get("current_billed"))
        execute(
            db.table(LINE_TABLE)
            .update({"previous_billed": float(billed), "current_billed": 0})
            .eq("id", row["id"])
        )
        recalculate_line_item(row["id"])
    recalculate_total(sov_id)

    logger.info(f"Billing period closed for SOV {sov_id} ({len(rows.data or [])} lines)")
    return list_items(sov_id)


def delete_item(item_id: str | None, sov_id: str | None = None) -> None:
    """Delete one line. A line that is already gone is a no-op; a line that
    belongs to another SOV than ``sov_id`` is not found."""
    if not item_id:
        raise ValidationError("item_id is required")

    db = get_supabase()
    # Parent id is needed for the total after the row is gone
    parent = execute(db.table(LINE_TABLE).select("sov_id").eq("id", item_id).limit(1))
    if not parent.data:
        logger.debug(f"Line item {item_id} already deleted")
        return
    parent_id = parent.data[0]["sov_id"]
    if sov_id and parent_id != sov_id:
        raise NotFoundError("Line item not found")

    execute(db.table(LINE_TABLE).delete().eq("id", item_id))
    recalculate_total(parent_id)
    logger.info(f"Line item {item_id} deleted")
