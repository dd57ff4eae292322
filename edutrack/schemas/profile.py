from datetime import date
from typing import Optional
from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from edutrack.schemas.response import CamelModel

class ProfileIn(CamelModel):
    """Role-specific optional attributes. Blank strings are stored as null."""
    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

class StudentProfileIn(ProfileIn):
    date_of_birth: Optional[date] = None
    student_id_number: Optional[str] = None
    emergency_contact: Optional[str] = None
    medical_info: Optional[str] = None
    address: Optional[str] = None

class TeacherProfileIn(ProfileIn):
    employee_id: Optional[str] = None
    hire_date: Optional[date] = None
    qualifications: Optional[str] = None

class ParentProfileIn(ProfileIn):
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None

class PrincipalProfileIn(ProfileIn):
    employee_id: Optional[str] = None
    hire_date: Optional[date] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    qualifications: Optional[str] = None
    years_of_experience: Optional[int] = Field(None, gt=0)
    previous_school: Optional[str] = None
    education_background: Optional[str] = None
    # Numeric(12, 2) column
    salary: Optional[float] = Field(None, gt=0, lt=10**10)
    administrative_area: Optional[str] = None


class ProfileOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class StudentProfileOut(ProfileOut):
    student_id: str
    grade: Optional[str] = None
    date_of_birth: Optional[date] = None
    student_id_number: Optional[str] = None
    emergency_contact: Optional[str] = None
    medical_info: Optional[str] = None
    address: Optional[str] = None

class TeacherProfileOut(ProfileOut):
    teacher_id: str
    department: Optional[str] = None
    employee_id: Optional[str] = None
    hire_date: Optional[date] = None
    qualifications: Optional[str] = None

class ParentProfileOut(ProfileOut):
    parent_id: str
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None

class PrincipalProfileOut(ProfileOut):
    principal_id: str
    employee_id: Optional[str] = None
    hire_date: Optional[date] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    qualifications: Optional[str] = None
    years_of_experience: Optional[int] = None
    previous_school: Optional[str] = None
    education_background: Optional[str] = None
    salary: Optional[float] = None
    administrative_area: Optional[str] = None
