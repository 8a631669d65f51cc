"""Schedule of values aggregate operations.

The aggregate's ``total_contract_amount`` is denormalized: it is rewritten
from the sum of its line items' scheduled values after every line item
mutation and every aggregate update. Statements run one after another with
no enclosing transaction, so ``get_sov`` also repairs a total that has
drifted from its line items.
"""
from loguru import logger

from app.config import get_settings
from app.database import get_supabase, execute
from app.errors import NotFoundError, ValidationError
from app.models.sov import SOV_STATUSES
from app.services.derivation import contract_total, schedule_summary, to_decimal
from app.services.estimate_source import load_estimate, build_line_items
from app.services.line_items import list_items
from app.services.recalculation import (
    SOV_TABLE,
    LINE_TABLE,
    now_iso,
    recalculate_total,
)


def shape_sov(row: dict) -> dict:
    """Flatten embedded job/estimate/count resources and coerce numeric columns."""
    sov = dict(row)
    job = sov.pop("jobs", None) or {}
    estimate = sov.pop("estimates", None) or {}
    counts = sov.pop("sov_line_items", None)

    sov["job_name"] = job.get("name")
    if "estimates" in row:
        sov["estimate_po"] = estimate.get("po_number")
    if counts is not None:
        sov["line_count"] = int(counts[0]["count"]) if counts else 0
    sov["total_contract_amount"] = float(to_decimal(sov.get("total_contract_amount")))
    sov["version"] = int(sov.get("version") or 1)
    return sov


def _fetch_row(sov_id: str) -> dict:
    db = get_supabase()
    result = execute(db.table(SOV_TABLE).select("*").eq("id", sov_id).limit(1))
    if not result.data:
        raise NotFoundError("SOV not found")
    return shape_sov(result.data[0])


def create_sov(
    user_id: str | None,
    job_id: str | None,
    name: str | None = None,
    estimate_id: str | None = None,
    notes: str | None = None,
    generate_from_estimate: bool = False,
) -> dict:
    """Create an empty SOV, or generate one from an estimate when asked to."""
    if not user_id or not job_id:
        raise ValidationError("user_id and job_id are required")

    if generate_from_estimate and estimate_id:
        return generate_from_estimate_lines(user_id, job_id, estimate_id, name, notes)

    db = get_supabase()
    result = execute(
        db.table(SOV_TABLE).insert({
            "user_id": user_id,
            "job_id": job_id,
            "estimate_id": estimate_id,
            "name": name or get_settings().default_sov_name,
            "notes": notes,
            "status": "draft",
            "version": 1,
            "total_contract_amount": 0,
        })
    )
    sov = shape_sov(result.data[0])
    logger.info(f"SOV {sov['id']} created for job {job_id}")
    return sov


def generate_from_estimate_lines(
    user_id: str,
    job_id: str,
    estimate_id: str,
    name: str | None = None,
    notes: str | None = None,
) -> dict:
    """Seed a draft SOV from an estimate's included lines, accepted alternates,
    overhead/profit and contingency."""
    source = load_estimate(estimate_id)

    db = get_supabase()
    result = execute(
        db.table(SOV_TABLE).insert({
            "user_id": user_id,
            "job_id": job_id,
            "estimate_id": estimate_id,
            "name": name or get_settings().default_sov_name,
            "notes": notes,
            "status": "draft",
            "version": 1,
            "total_contract_amount": float(source.opening_total()),
        })
    )
    sov = result.data[0]

    rows = build_line_items(sov["id"], source)
    if rows:
        execute(db.table(LINE_TABLE).insert(rows))
    # The opening total disagrees with the lines for non-positive O&P or
    # contingency and for alternates that are neither add nor deduct
    total = recalculate_total(sov["id"])

    logger.info(
        f"SOV {sov['id']} generated from estimate {estimate_id}: "
        f"{len(rows)} line items, total {total}"
    )
    return _fetch_row(sov["id"])


def get_sov(sov_id: str | None) -> dict:
    """One SOV with job name, estimate PO number, ordered line items and roll-up."""
    if not sov_id:
        raise ValidationError("SOV ID is required")

    db = get_supabase()
    result = execute(
        db.table(SOV_TABLE)
        .select("*, jobs(name), estimates(po_number)")
        .eq("id", sov_id)
        .limit(1)
    )
    if not result.data:
        raise NotFoundError("SOV not found")

    sov = shape_sov(result.data[0])
    items = list_items(sov_id)

    expected = float(contract_total(items))
    if to_decimal(sov["total_contract_amount"]) != to_decimal(expected):
        logger.warning(
            f"SOV {sov_id} total drifted ({sov['total_contract_amount']} != {expected}), repairing"
        )
        sov["total_contract_amount"] = recalculate_total(sov_id)

    sov["line_items"] = items
    sov["summary"] = schedule_summary(items)
    return sov


def list_sovs(user_id: str | None, job_id: str | None = None) -> list[dict]:
    if not user_id:
        raise ValidationError("User ID is required")

    db = get_supabase()
    query = (
        db.table(SOV_TABLE)
        .select("*, jobs(name), sov_line_items(count)")
        .eq("user_id", user_id)
    )
    if job_id:
        query = query.eq("job_id", job_id)
    result = execute(query.order("created_at", desc=True))
    return [shape_sov(row) for row in result.data or []]


def update_sov(
    sov_id: str | None,
    name: str | None = None,
    status: str | None = None,
    notes: str | None = None,
    approved_by: str | None = None,
) -> dict:
    """Apply metadata/status changes, then resync the contract total.

    Any recognized status is accepted; transition order is left to the caller.
    Moving to ``approved`` stamps ``approved_at`` (and ``approved_by`` if given).
    """
    if not sov_id:
        raise ValidationError("SOV ID is required")

    data: dict = {}
    if name is not None:
        data["name"] = name
    if status is not None:
        if status not in SOV_STATUSES:
            raise ValidationError(
                f"Invalid status '{status}'. Expected one of: {', '.join(SOV_STATUSES)}"
            )
        data["status"] = status
        if status == "approved":
            data["approved_at"] = now_iso()
            if approved_by:
                data["approved_by"] = approved_by
    if notes is not None:
        data["notes"] = notes

    if not data:
        raise ValidationError("No fields to update")

    data["updated_at"] = now_iso()

    db = get_supabase()
    execute(db.table(SOV_TABLE).update(data).eq("id", sov_id))
    recalculate_total(sov_id)

    logger.info(f"SOV {sov_id} updated: {', '.join(k for k in data if k != 'updated_at')}")
    return _fetch_row(sov_id)


def delete_sov(sov_id: str | None) -> None:
    """Delete the SOV's line items, then the SOV itself."""
    if not sov_id:
        raise ValidationError("SOV ID is required")

    db = get_supabase()
    execute(db.table(LINE_TABLE).delete().eq("sov_id", sov_id))
    execute(db.table(SOV_TABLE).delete().eq("id", sov_id))
    logger.info(f"SOV {sov_id} deleted")
