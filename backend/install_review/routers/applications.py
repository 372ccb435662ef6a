from fastapi import APIRouter, Depends, Query

from install_review.dependencies import current_user_id, get_lifecycle
from install_review.models.application import Application
from install_review.models.resolution import ResolutionDocument
from install_review.schemas.application import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationUpdate,
    ApproveRequest,
    RejectRequest,
)
from install_review.schemas.resolution import DecisionResponse, ResolutionDocumentResponse
from install_review.services.application_service import ApplicationLifecycle, DecisionResult

router = APIRouter(prefix="/applications", tags=["applications"])


def _application_to_response(application: Application) -> ApplicationResponse:
    return ApplicationResponse(
        id=application.id,
        client_code=application.client_code,
        first_names=application.first_names,
        last_names=application.last_names,
        document_type=application.document_type,
        document_number=application.document_number,
        address=application.address,
        neighborhood=application.neighborhood,
        email=application.email,
        contact_number=application.contact_number,
        stratum=application.stratum,
        locality_code=application.locality_code,
        status=application.status,
        technician_id=application.technician_id,
        supervisor_id=application.supervisor_id,
        submitted_at=application.submitted_at,
        reviewed_at=application.reviewed_at,
        approved_at=application.approved_at,
        rejection_reason=application.rejection_reason,
        created_at=application.created_at,
        updated_at=application.updated_at,
    )


def _document_to_response(document: ResolutionDocument) -> ResolutionDocumentResponse:
    return ResolutionDocumentResponse(
        id=document.id,
        application_id=document.application_id,
        version=document.version,
        decision=document.decision,
        file_name=document.file_name,
        generated_by=document.generated_by,
        created_at=document.created_at,
    )


def _decision_to_response(result: DecisionResult) -> DecisionResponse:
    return DecisionResponse(
        application=_application_to_response(result.application),
        document=_document_to_response(result.document),
    )


@router.post("", response_model=ApplicationResponse, status_code=201)
async def create_application(
    body: ApplicationCreate,
    user_id: int = Depends(current_user_id),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
):
    return _application_to_response(lifecycle.create(body, user_id))


@router.get("", response_model=ApplicationListResponse)
async def list_applications(
    status: str | None = None,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    user_id: int = Depends(current_user_id),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
):
    items, total = lifecycle.list_for(user_id, status=status, page=page, size=size)
    return ApplicationListResponse(
        items=[_application_to_response(a) for a in items],
        total=total,
        page=page,
        size=size,
    )


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: int,
    user_id: int = Depends(current_user_id),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
):
    return _application_to_response(lifecycle.get(application_id))


@router.put("/{application_id}", response_model=ApplicationResponse)
async def update_application(
    application_id: int,
    body: ApplicationUpdate,
    user_id: int = Depends(current_user_id),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
):
    return _application_to_response(lifecycle.update(application_id, body, user_id))


@router.post("/{application_id}/submit", response_model=ApplicationResponse)
async def submit_application(
    application_id: int,
    user_id: int = Depends(current_user_id),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
):
    return _application_to_response(lifecycle.submit(application_id, user_id))


@router.post("/{application_id}/approve", response_model=DecisionResponse)
async def approve_application(
    application_id: int,
    body: ApproveRequest | None = None,
    user_id: int = Depends(current_user_id),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
):
    comment = body.comment if body else None
    return _decision_to_response(lifecycle.approve(application_id, user_id, comment=comment))


@router.post("/{application_id}/reject", response_model=DecisionResponse)
async def reject_application(
    application_id: int,
    body: RejectRequest,
    user_id: int = Depends(current_user_id),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
):
    return _decision_to_response(lifecycle.reject(application_id, user_id, body.reason))
