from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from edutrack.core.database import Base

class StudentProfile(Base):
    __tablename__ = "student_profiles"

    student_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    grade = Column(String, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    student_id_number = Column(String, nullable=True)
    emergency_contact = Column(String, nullable=True)
    medical_info = Column(Text, nullable=True)
    address = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="student_profile")


class TeacherProfile(Base):
    __tablename__ = "teacher_profiles"

    teacher_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    department = Column(String, nullable=True)
    employee_id = Column(String, nullable=True)
    hire_date = Column(Date, nullable=True)
    qualifications = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="teacher_profile")


class ParentProfile(Base):
    __tablename__ = "parent_profiles"

    parent_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    emergency_contact = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="parent_profile")


class PrincipalProfile(Base):
    __tablename__ = "principal_profiles"

    principal_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    employee_id = Column(String, nullable=True)
    hire_date = Column(Date, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    emergency_contact = Column(String, nullable=True)
    qualifications = Column(Text, nullable=True)
    years_of_experience = Column(Integer, nullable=True)
    previous_school = Column(String, nullable=True)
    education_background = Column(Text, nullable=True)
    salary = Column(Numeric(12, 2, asdecimal=False), nullable=True)
    administrative_area = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="principal_profile")
