from datetime import datetime
from typing import Any, List, Optional
from pydantic import ConfigDict, EmailStr, HttpUrl, field_validator, model_validator
from pydantic.alias_generators import to_camel

from edutrack.schemas.response import CamelModel
from edutrack.schemas.user import User

class SchoolContact(CamelModel):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    website: Optional[HttpUrl] = None
    logo: Optional[str] = None  # Base64 encoded image

    @field_validator("email", "website", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

class SchoolSetup(SchoolContact):
    """Payload a principal submits to create their school."""
    name: str
    country: str = "US"

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("School name is required")
        return v.strip()

class SchoolUpdate(SchoolContact):
    country: Optional[str] = None

    @model_validator(mode='before')
    @classmethod
    def at_least_one_value(cls, data: Any):
        if isinstance(data, dict) and not data:
            raise ValueError("At least one field must be provided for update")
        return data


class School(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    logo: Optional[str] = None
    clerk_organization_id: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class SchoolDetail(School):
    user_count: int

class SchoolListItem(CamelModel):
    id: str
    name: str
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    user_count: int

class SchoolResponse(CamelModel):
    school: SchoolDetail

class SchoolListResponse(CamelModel):
    schools: List[SchoolListItem]

class SchoolSetupResponse(CamelModel):
    school: School
    user: User
