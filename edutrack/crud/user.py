from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload
from edutrack.core.constants import UserRole
from edutrack.crud.base import CRUDBase, LIKE_ESCAPE, contains_pattern
from edutrack.models.user import User
from edutrack.schemas.user import UserCreate, UserMeUpdate

class CRUDUser(CRUDBase[User, UserCreate, UserMeUpdate]):

    def get_by_clerk_id(self, db: Session, *, clerk_id: str) -> Optional[User]:
        return db.query(User).filter(User.clerk_id == clerk_id).first()

    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    def get_with_relations(self, db: Session, *, clerk_id: str) -> Optional[User]:
        return (
            db.query(User)
            .options(
                joinedload(User.school),
                joinedload(User.student_profile),
                joinedload(User.teacher_profile),
                joinedload(User.parent_profile),
                joinedload(User.principal_profile),
            )
            .filter(User.clerk_id == clerk_id)
            .first()
        )

    def get_active_in_school(self, db: Session, *, user_id: str, school_id: str) -> Optional[User]:
        return (
            db.query(User)
            .filter(User.id == user_id, User.school_id == school_id, User.is_active == True)
            .first()
        )

    def list_for_school(
        self,
        db: Session,
        *,
        school_id: str,
        role: Optional[UserRole] = None,
        search: Optional[str] = None,
    ) -> List[User]:
        """Active users of one school with their school and profile relations loaded."""
        query = (
            db.query(User)
            .options(
                joinedload(User.school),
                joinedload(User.student_profile),
                joinedload(User.teacher_profile),
                joinedload(User.parent_profile),
                joinedload(User.principal_profile),
            )
            .filter(User.school_id == school_id, User.is_active == True)
        )
        if role:
            query = query.filter(User.role == role)
        if search:
            pattern = contains_pattern(search)
            query = query.filter(
                or_(
                    User.first_name.ilike(pattern, escape=LIKE_ESCAPE),
                    User.last_name.ilike(pattern, escape=LIKE_ESCAPE),
                    User.email.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        return query.all()

    def search(
        self, db: Session, *, school_id: str, role: UserRole, term: str, limit: int = 10
    ) -> List[User]:
        pattern = contains_pattern(term)
        return (
            db.query(User)
            .filter(
                User.school_id == school_id,
                User.role == role,
                User.is_active == True,
                or_(
                    User.first_name.ilike(pattern, escape=LIKE_ESCAPE),
                    User.last_name.ilike(pattern, escape=LIKE_ESCAPE),
                    User.email.ilike(pattern, escape=LIKE_ESCAPE),
                ),
            )
            .order_by(User.first_name, User.last_name)
            .limit(limit)
            .all()
        )

    def count_for_school(self, db: Session, *, school_id: str) -> int:
        return db.query(User).filter(User.school_id == school_id).count()

    def set_active(self, db: Session, *, user: User, is_active: bool) -> User:
        user.is_active = is_active
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

user = CRUDUser(User)
