from typing import Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session
from edutrack.crud.base import CRUDBase
from edutrack.models.relationship import ParentChildRelationship

class CRUDParentChildRelationship(CRUDBase[ParentChildRelationship, BaseModel, BaseModel]):

    def get_pair(self, db: Session, *, parent_id: str, child_id: str) -> Optional[ParentChildRelationship]:
        return (
            db.query(ParentChildRelationship)
            .filter(
                ParentChildRelationship.parent_id == parent_id,
                ParentChildRelationship.child_id == child_id,
            )
            .first()
        )

parent_child_relationship = CRUDParentChildRelationship(ParentChildRelationship)
