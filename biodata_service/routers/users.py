from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..models.pagination import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, Page
from ..models.profile import PremiumApprovalResponse
from ..models.user import (
    RoleChangeResponse,
    RoleResponse,
    UserCreateRequest,
    UserCreatedResponse,
    UserDocument,
    UserListItem,
)
from ..services.premium_workflow import PremiumWorkflow, get_premium_workflow
from ..services.user_service import UserService, get_user_service
from ..utils.http import OrjsonResponse
from .deps import require_role

router = APIRouter(tags=["users"])


@router.post("/users", status_code=201, response_model=UserCreatedResponse)
async def register_user(
    payload: UserCreateRequest,
    service: UserService = Depends(get_user_service),
):
    created = await service.register(payload)
    return UserCreatedResponse(message="User created successfully", insertedId=created.id)


@router.get("/users", response_model=Page[UserListItem])
async def list_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    search: Optional[str] = Query(default=None),
    _admin: UserDocument = Depends(require_role("users:list")),
    service: UserService = Depends(get_user_service),
):
    return await service.list_users(page=page, limit=limit, search=search)


@router.get("/users/role/{email}", response_model=RoleResponse)
async def user_role(email: str, service: UserService = Depends(get_user_service)):
    role = await service.get_role(email)
    if role is None:
        return OrjsonResponse(status_code=404, content={"role": None})
    return RoleResponse(role=role)


@router.get("/users/{email}", response_model=UserDocument)
async def get_user(email: str, service: UserService = Depends(get_user_service)):
    return await service.get_by_email(email)


@router.patch("/users/{user_id}/make-admin", response_model=RoleChangeResponse)
async def make_admin(
    user_id: str,
    _admin: UserDocument = Depends(require_role("users:make-admin")),
    service: UserService = Depends(get_user_service),
):
    updated = await service.make_admin(user_id)
    return RoleChangeResponse(message="User has been made admin successfully", userId=updated.id, role=updated.role)


@router.patch("/users/{user_id}/make-premium", response_model=PremiumApprovalResponse)
async def make_premium(
    user_id: str,
    _admin: UserDocument = Depends(require_role("users:make-premium")),
    workflow: PremiumWorkflow = Depends(get_premium_workflow),
):
    return await workflow.approve_premium(user_id)


__all__ = ["router"]
