from typing import Any, Dict, Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session
from edutrack.crud.base import CRUDBase, ModelType
from edutrack.models.profile import ParentProfile, PrincipalProfile, StudentProfile, TeacherProfile

class CRUDProfile(CRUDBase[ModelType, BaseModel, BaseModel]):
    """Role profile tables are keyed by the owning user's id."""

    def __init__(self, model, *, owner_key: str):
        super().__init__(model)
        self.owner_key = owner_key

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        return db.query(self.model).filter(getattr(self.model, self.owner_key) == id).first()

    def create_for_user(
        self, db: Session, *, user_id: str, obj_in: Dict[str, Any], commit: bool = True
    ) -> ModelType:
        return self.create(db, obj_in={**obj_in, self.owner_key: user_id}, commit=commit)

student_profile = CRUDProfile(StudentProfile, owner_key="student_id")
teacher_profile = CRUDProfile(TeacherProfile, owner_key="teacher_id")
parent_profile = CRUDProfile(ParentProfile, owner_key="parent_id")
principal_profile = CRUDProfile(PrincipalProfile, owner_key="principal_id")
