"""Write-side of the derivation engine: re-read rows, derive, write back."""
from datetime import datetime, timezone
from loguru import logger

from app.database import get_supabase, execute
from app.services.derivation import contract_total, derive_from_row

SOV_TABLE = "schedule_of_values"
LINE_TABLE = "sov_line_items"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def recalculate_line_item(item_id: str) -> dict | None:
    """Recompute and persist all derived fields of one line item.

    Returns the updated row, or None when the line no longer exists (it was
    deleted between the caller's write and this read); the caller still runs
    the aggregate recompute.
    """
    db = get_supabase()
    current = execute(db.table(LINE_TABLE).select("*").eq("id", item_id).limit(1))
    if not current.data:
        logger.debug(f"Line item {item_id} vanished before recompute, skipping")
        return None

    row = current.data[0]
    derived = derive_from_row(row).as_row()
    execute(db.table(LINE_TABLE).update(derived).eq("id", item_id))
    row.update(derived)
    return row


def recalculate_total(sov_id: str) -> float:
    """Rewrite total_contract_amount as SUM(scheduled_value) over the SOV's lines."""
    db = get_supabase()
    lines = execute(db.table(LINE_TABLE).select("scheduled_value").eq("sov_id", sov_id))
    total = float(contract_total(lines.data or []))
    execute(
        db.table(SOV_TABLE)
        .update({"total_contract_amount": total, "updated_at": now_iso()})
        .eq("id", sov_id)
    )
    logger.debug(f"SOV {sov_id} total recalculated: {total}")
    return total
