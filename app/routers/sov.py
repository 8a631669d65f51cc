"""Schedule of values aggregate endpoints.

GET    /api/sov?user_id=&job_id=   list
GET    /api/sov?id=                one SOV with its line items
POST   /api/sov                    create blank, or generate from an estimate
PUT    /api/sov                    update name/status/notes (body carries id)
DELETE /api/sov?id=                delete with its line items
"""
from fastapi import APIRouter
from app.models.shared import ApiResponse, ok
from app.models.sov import SOVCreate, SOVUpdate, SOVResponse, SOVDetailResponse
from app.services import sov_service

router = APIRouter(prefix="/api/sov", tags=["sov"])


@router.get("", response_model=ApiResponse)
async def get_sovs(
    id: str | None = None,
    user_id: str | None = None,
    job_id: str | None = None,
):
    if id:
        sov = sov_service.get_sov(id)
        return ok(SOVDetailResponse.model_validate(sov).model_dump(mode="json"))

    sovs = sov_service.list_sovs(user_id, job_id)
    return ok([SOVResponse.model_validate(s).model_dump(mode="json") for s in sovs])


@router.post("", response_model=ApiResponse)
async def create_sov(body: SOVCreate):
    sov = sov_service.create_sov(
        body.user_id,
        body.job_id,
        name=body.name,
        estimate_id=body.estimate_id,
        notes=body.notes,
        generate_from_estimate=body.generate_from_estimate,
    )
    return ok(SOVResponse.model_validate(sov).model_dump(mode="json"))


@router.put("", response_model=ApiResponse)
async def update_sov(body: SOVUpdate):
    sov = sov_service.update_sov(
        body.id,
        name=body.name,
        status=body.status,
        notes=body.notes,
        approved_by=body.approved_by,
    )
    return ok(SOVResponse.model_validate(sov).model_dump(mode="json"))


@router.delete("", response_model=ApiResponse)
async def delete_sov(id: str | None = None):
    sov_service.delete_sov(id)
    return ok(message="SOV deleted")
