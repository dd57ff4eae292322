from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from edutrack.schemas.school import (
    School as SchoolSchema, SchoolListResponse, SchoolResponse, SchoolSetup,
    SchoolSetupResponse, SchoolUpdate,
)
from edutrack.schemas.user import User as UserSchema
from edutrack.services.school import school_service
from edutrack.utils import deps

router = APIRouter()

@router.get("", response_model=SchoolListResponse)
def list_schools(
    search: Optional[str] = None,
    db: Session = Depends(deps.get_db),
    identity_id: str = Depends(deps.require_identity_id),
):
    """Schools a new user can register with."""
    return SchoolListResponse(schools=school_service.list_schools(db, search=search))

@router.post("", response_model=SchoolSetupResponse, status_code=status.HTTP_201_CREATED)
async def create_school(
    school_in: SchoolSetup,
    db: Session = Depends(deps.get_db),
    identity_id: str = Depends(deps.require_identity_id),
    identity_provider=Depends(deps.get_identity_provider),
):
    """Create a school and make the caller its principal."""
    school, principal = await school_service.setup_school(
        db, identity_id=identity_id, school_in=school_in, identity_provider=identity_provider
    )
    return SchoolSetupResponse(
        school=SchoolSchema.model_validate(school), user=UserSchema.model_validate(principal)
    )

@router.get("/{school_id}", response_model=SchoolResponse)
def read_school(
    school_id: str,
    db: Session = Depends(deps.get_db),
):
    """Get a school by ID."""
    return SchoolResponse(school=school_service.get_school(db, school_id=school_id))

@router.patch("/{school_id}", response_model=SchoolResponse)
def update_school(
    school_id: str,
    school_in: SchoolUpdate,
    db: Session = Depends(deps.get_db),
    identity_id: str = Depends(deps.require_identity_id),
):
    school = school_service.update_school(
        db, identity_id=identity_id, school_id=school_id, school_in=school_in
    )
    return SchoolResponse(school=school)
