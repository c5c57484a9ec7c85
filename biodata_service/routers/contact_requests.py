from fastapi import APIRouter, Depends, Query

from ..integrations.identity import VerifiedIdentity
from ..models.contact_request import (
    ContactRequestApprovedResponse,
    ContactRequestCreate,
    ContactRequestCreatedResponse,
    ContactRequestDocument,
    ContactRequestView,
    DeleteResponse,
)
from ..models.pagination import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, Page
from ..models.user import UserDocument
from ..services.access_control import AccessControlGate, get_access_control_gate
from ..services.contact_request_workflow import ContactRequestWorkflow, get_contact_request_workflow
from .deps import require_identity, require_role

router = APIRouter(prefix="/contact-requests", tags=["contact-requests"])


@router.get("", response_model=Page[ContactRequestDocument])
async def list_all_requests(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    _admin: UserDocument = Depends(require_role("contact-requests:list-all")),
    workflow: ContactRequestWorkflow = Depends(get_contact_request_workflow),
):
    return await workflow.list_all(page=page, limit=limit)


@router.get("/{email}", response_model=Page[ContactRequestView])
async def list_requests_for_user(
    email: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    identity: VerifiedIdentity = Depends(require_identity),
    gate: AccessControlGate = Depends(get_access_control_gate),
    workflow: ContactRequestWorkflow = Depends(get_contact_request_workflow),
):
    # Other users' requests need the cross-user listing role.
    if email.strip().lower() != identity.email:
        await gate.require_role(identity, "contact-requests:list-all")
    return await workflow.list_for_user(email, page=page, limit=limit)


@router.post("", status_code=201, response_model=ContactRequestCreatedResponse)
async def create_request(
    payload: ContactRequestCreate,
    identity: VerifiedIdentity = Depends(require_identity),
    workflow: ContactRequestWorkflow = Depends(get_contact_request_workflow),
):
    created = await workflow.create_request(payload, requester_email=identity.email)
    return ContactRequestCreatedResponse(insertedId=created.id, biodataId=created.biodata_id, status=created.status)


@router.patch("/approve/{request_id}", response_model=ContactRequestApprovedResponse)
async def approve_request(
    request_id: str,
    _admin: UserDocument = Depends(require_role("contact-requests:approve")),
    workflow: ContactRequestWorkflow = Depends(get_contact_request_workflow),
):
    await workflow.approve_request(request_id)
    return ContactRequestApprovedResponse()


@router.delete("/{request_id}", response_model=DeleteResponse)
async def delete_request(
    request_id: str,
    _identity: VerifiedIdentity = Depends(require_identity),
    workflow: ContactRequestWorkflow = Depends(get_contact_request_workflow),
):
    deleted = await workflow.delete_request(request_id)
    return DeleteResponse(deletedCount=deleted)


__all__ = ["router"]
