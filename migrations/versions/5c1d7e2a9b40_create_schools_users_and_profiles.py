"""create schools, users and role profiles

Revision ID: 5c1d7e2a9b40
Revises:
Create Date: 2026-10-19 10:12:44.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5c1d7e2a9b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum('STUDENT', 'TEACHER', 'PARENT', 'PRINCIPAL', 'CLERK', 'ADMIN', name='user_role')
relationship_type = sa.Enum('PARENT', 'GUARDIAN', 'GRANDPARENT', 'SIBLING', name='relationship_type')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'schools',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('state', sa.String(), nullable=True),
        sa.Column('zip_code', sa.String(), nullable=True),
        sa.Column('country', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('website', sa.String(), nullable=True),
        sa.Column('logo', sa.Text(), nullable=True),
        sa.Column('clerk_organization_id', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_schools_name'), 'schools', ['name'], unique=False)
    op.create_index(op.f('ix_schools_clerk_organization_id'), 'schools', ['clerk_organization_id'], unique=True)

    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('clerk_id', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=False),
        sa.Column('last_name', sa.String(), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('school_id', sa.String(length=36), nullable=False),
        sa.Column('avatar', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['school_id'], ['schools.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_clerk_id'), 'users', ['clerk_id'], unique=True)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_role'), 'users', ['role'], unique=False)
    op.create_index(op.f('ix_users_school_id'), 'users', ['school_id'], unique=False)

    op.create_table(
        'student_profiles',
        sa.Column('student_id', sa.String(length=36), nullable=False),
        sa.Column('grade', sa.String(), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('student_id_number', sa.String(), nullable=True),
        sa.Column('emergency_contact', sa.String(), nullable=True),
        sa.Column('medical_info', sa.Text(), nullable=True),
        sa.Column('address', sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['student_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('student_id')
    )
    op.create_table(
        'teacher_profiles',
        sa.Column('teacher_id', sa.String(length=36), nullable=False),
        sa.Column('department', sa.String(), nullable=True),
        sa.Column('employee_id', sa.String(), nullable=True),
        sa.Column('hire_date', sa.Date(), nullable=True),
        sa.Column('qualifications', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['teacher_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('teacher_id')
    )
    op.create_table(
        'parent_profiles',
        sa.Column('parent_id', sa.String(length=36), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('emergency_contact', sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['parent_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('parent_id')
    )
    op.create_table(
        'principal_profiles',
        sa.Column('principal_id', sa.String(length=36), nullable=False),
        sa.Column('employee_id', sa.String(), nullable=True),
        sa.Column('hire_date', sa.Date(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('emergency_contact', sa.String(), nullable=True),
        sa.Column('qualifications', sa.Text(), nullable=True),
        sa.Column('years_of_experience', sa.Integer(), nullable=True),
        sa.Column('previous_school', sa.String(), nullable=True),
        sa.Column('education_background', sa.Text(), nullable=True),
        sa.Column('salary', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('administrative_area', sa.String(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['principal_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('principal_id')
    )

    op.create_table(
        'parent_child_relationships',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('parent_id', sa.String(length=36), nullable=False),
        sa.Column('child_id', sa.String(length=36), nullable=False),
        sa.Column('relationship', relationship_type, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['parent_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['child_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('parent_id', 'child_id', name='uq_parent_child')
    )
    op.create_index(op.f('ix_parent_child_relationships_parent_id'), 'parent_child_relationships', ['parent_id'], unique=False)
    op.create_index(op.f('ix_parent_child_relationships_child_id'), 'parent_child_relationships', ['child_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_parent_child_relationships_child_id'), table_name='parent_child_relationships')
    op.drop_index(op.f('ix_parent_child_relationships_parent_id'), table_name='parent_child_relationships')
    op.drop_table('parent_child_relationships')
    op.drop_table('principal_profiles')
    op.drop_table('parent_profiles')
    op.drop_table('teacher_profiles')
    op.drop_table('student_profiles')
    op.drop_index(op.f('ix_users_school_id'), table_name='users')
    op.drop_index(op.f('ix_users_role'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_clerk_id'), table_name='users')
    op.drop_table('users')
    op.drop_index(op.f('ix_schools_clerk_organization_id'), table_name='schools')
    op.drop_index(op.f('ix_schools_name'), table_name='schools')
    op.drop_table('schools')
    relationship_type.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
