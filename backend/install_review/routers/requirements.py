from fastapi import APIRouter, Depends

from install_review.dependencies import current_user_id, get_access, get_catalog
from install_review.models.role import ADMIN
from install_review.schemas.requirement import RequirementResponse, RequirementUpdate
from install_review.services.access_control import AccessControl
from install_review.services.attachment_service import normalize_kind
from install_review.services.requirement_catalog import RequirementCatalog

router = APIRouter(prefix="/requirements", tags=["requirements"])


@router.get("", response_model=list[RequirementResponse])
async def list_requirements(catalog: RequirementCatalog = Depends(get_catalog)):
    return [
        RequirementResponse(kind=e.kind, is_required=e.is_required, description=e.description)
        for e in catalog.entries()
    ]


@router.put("/{kind}", response_model=RequirementResponse)
async def upsert_requirement(
    kind: str,
    body: RequirementUpdate,
    user_id: int = Depends(current_user_id),
    access: AccessControl = Depends(get_access),
    catalog: RequirementCatalog = Depends(get_catalog),
):
    access.ensure_role(user_id, ADMIN)
    entry = catalog.upsert(normalize_kind(kind), is_required=body.is_required, description=body.description)
    return RequirementResponse(kind=entry.kind, is_required=entry.is_required, description=entry.description)


@router.delete("/{kind}")
async def delete_requirement(
    kind: str,
    user_id: int = Depends(current_user_id),
    access: AccessControl = Depends(get_access),
    catalog: RequirementCatalog = Depends(get_catalog),
):
    access.ensure_role(user_id, ADMIN)
    catalog.remove(normalize_kind(kind))
    return {"message": "Requirement deleted"}
