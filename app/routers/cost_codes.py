from fastapi import APIRouter
from app.database import get_supabase, execute
from app.data.csi_masterformat import COST_CODE_TABLE
from app.models.shared import ApiResponse, ok

router = APIRouter(prefix="/api/cost-codes", tags=["cost-codes"])


@router.get("", response_model=ApiResponse)
async def list_cost_codes(
    user_id: str | None = None,
    division: str | None = None,
    include_custom: bool = True,
):
    """Default CSI codes, plus the user's custom codes unless include_custom=false."""
    db = get_supabase()
    query = db.table(COST_CODE_TABLE).select("*")
    if include_custom and user_id:
        query = query.or_(f"is_default.eq.true,user_id.eq.{user_id}")
    else:
        query = query.eq("is_default", True)
    if division:
        query = query.eq("division", division)

    result = execute(query.order("code"))
    codes = [
        {**row, "level": int(row.get("level") or 1), "is_default": bool(row.get("is_default"))}
        for row in result.data or []
    ]
    return ok(codes)
