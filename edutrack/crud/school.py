from typing import List, Optional, Tuple
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from edutrack.crud.base import CRUDBase, LIKE_ESCAPE, contains_pattern
from edutrack.models.school import School
from edutrack.models.user import User
from edutrack.schemas.school import SchoolSetup, SchoolUpdate

class CRUDSchool(CRUDBase[School, SchoolSetup, SchoolUpdate]):

    def get_by_name(self, db: Session, *, name: str) -> Optional[School]:
        return db.query(School).filter(School.name == name).first()

    def get_by_organization_id(self, db: Session, *, organization_id: str) -> Optional[School]:
        return db.query(School).filter(School.clerk_organization_id == organization_id).first()

    def list_registrable(self, db: Session, *, search: Optional[str] = None) -> List[Tuple[School, int]]:
        """Active schools linked to an organization, each with its user count."""
        user_count_sq = (
            db.query(User.school_id, func.count(User.id).label("user_count"))
            .group_by(User.school_id)
            .subquery()
        )
        query = (
            db.query(School, func.coalesce(user_count_sq.c.user_count, 0))
            .outerjoin(user_count_sq, School.id == user_count_sq.c.school_id)
            .filter(School.is_active == True, School.clerk_organization_id.isnot(None))
        )
        if search:
            pattern = contains_pattern(search)
            query = query.filter(
                or_(
                    School.name.ilike(pattern, escape=LIKE_ESCAPE),
                    School.city.ilike(pattern, escape=LIKE_ESCAPE),
                    School.state.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        return query.order_by(School.name).all()

school = CRUDSchool(School)
