from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from edutrack.core.constants import UserRole
from edutrack.schemas.user import (
    User as UserSchema, UserCreate, UserListItem, UserListResponse, UserMeResponse,
    UserMeUpdate, UserResponse, UserSearchResponse, UserStatusUpdate,
)
from edutrack.services.user import user_service
from edutrack.utils import deps

router = APIRouter()

@router.get("", response_model=UserListResponse)
def list_users(
    role: Optional[UserRole] = None,
    search: Optional[str] = None,
    db: Session = Depends(deps.get_db),
    identity_id: str = Depends(deps.require_identity_id),
):
    """Active users of the caller's school, sorted by last then first name."""
    users = user_service.list_school_users(db, identity_id=identity_id, role=role, search=search)
    return UserListResponse(users=[UserListItem.model_validate(u) for u in users])

@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    db: Session = Depends(deps.get_db),
    identity_id: str = Depends(deps.require_identity_id),
    identity_provider=Depends(deps.get_identity_provider),
):
    """Register the caller, or let a principal provision an account in their school."""
    user = await user_service.create_user(
        db, identity_id=identity_id, user_in=user_in, identity_provider=identity_provider
    )
    return UserResponse(user=UserSchema.model_validate(user))

@router.get("/me", response_model=UserMeResponse)
def read_me(
    db: Session = Depends(deps.get_db),
    identity_id: str = Depends(deps.require_identity_id),
):
    return UserMeResponse(user=user_service.get_me(db, identity_id=identity_id))

@router.patch("/me", response_model=UserMeResponse)
def update_me(
    update_in: UserMeUpdate,
    db: Session = Depends(deps.get_db),
    identity_id: str = Depends(deps.require_identity_id),
):
    return UserMeResponse(user=user_service.update_me(db, identity_id=identity_id, update_in=update_in))

@router.get("/search", response_model=UserSearchResponse)
def search_users(
    school: Optional[str] = None,
    role: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(deps.get_db),
    identity_id: str = Depends(deps.require_identity_id),
):
    """Look up at most ten active students, parents or teachers of a school by name or email."""
    users = user_service.search_users(
        db, identity_id=identity_id, school_id=school, role=role, search=search
    )
    return UserSearchResponse(users=users)

@router.patch("/{user_id}/status", response_model=UserResponse)
def update_user_status(
    user_id: str,
    status_in: UserStatusUpdate,
    db: Session = Depends(deps.get_db),
    identity_id: str = Depends(deps.require_identity_id),
):
    user = user_service.set_user_status(
        db, identity_id=identity_id, user_id=user_id, is_active=status_in.is_active
    )
    return UserResponse(user=UserSchema.model_validate(user))
