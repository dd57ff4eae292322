from enum import Enum


class UserRole(str, Enum):
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    PARENT = "PARENT"
    PRINCIPAL = "PRINCIPAL"
    CLERK = "CLERK"
    ADMIN = "ADMIN"

# Roles that can be provisioned through POST /api/users
PROVISIONABLE_ROLES = (UserRole.STUDENT, UserRole.TEACHER, UserRole.PARENT, UserRole.PRINCIPAL)

# Roles allowed to list the users of their school
DIRECTORY_ROLES = (UserRole.TEACHER, UserRole.PRINCIPAL)

# Roles that can be looked up through /api/users/search
SEARCHABLE_ROLES = (UserRole.STUDENT, UserRole.PARENT, UserRole.TEACHER)

class RelationshipType(str, Enum):
    PARENT = "PARENT"
    GUARDIAN = "GUARDIAN"
    GRANDPARENT = "GRANDPARENT"
    SIBLING = "SIBLING"

class OrgRole(str, Enum):
    ADMIN = "org:admin"
    MEMBER = "org:member"

ORG_ROLE_BY_USER_ROLE = {
    UserRole.PRINCIPAL: OrgRole.ADMIN,
    UserRole.TEACHER: OrgRole.MEMBER,
    UserRole.STUDENT: OrgRole.MEMBER,
    UserRole.PARENT: OrgRole.MEMBER,
    UserRole.CLERK: OrgRole.MEMBER,
    UserRole.ADMIN: OrgRole.ADMIN,
}

class PermissionAction(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"
    APPROVE = "approve"
    GRADE = "grade"
    SUBMIT = "submit"
    VIEW_ALL = "view_all"
    VIEW_OWN = "view_own"
    VIEW_CLASS = "view_class"

class Resource(str, Enum):
    USERS = "users"
    STUDENTS = "students"
    TEACHERS = "teachers"
    PARENTS = "parents"
    PRINCIPALS = "principals"

    CLASSES = "classes"
    SUBJECTS = "subjects"
    ENROLLMENTS = "enrollments"
    ASSIGNMENTS = "assignments"
    ASSIGNMENT_SUBMISSIONS = "assignment_submissions"
    GRADES = "grades"
    GRADE_ITEMS = "grade_items"
    GRADE_CATEGORIES = "grade_categories"

    ATTENDANCE = "attendance"
    ATTENDANCE_SESSIONS = "attendance_sessions"

    CLASS_MEETINGS = "class_meetings"
    PERIODS = "periods"
    ROOMS = "rooms"
    TERMS = "terms"

    MESSAGES = "messages"
    CONVERSATIONS = "conversations"
    ANNOUNCEMENTS = "announcements"
    NOTIFICATIONS = "notifications"

    RESOURCES = "resources"
    LESSON_PLANS = "lesson_plans"
    EVENTS = "events"

    FEE_RECORDS = "fee_records"
    INVOICES = "invoices"
    PAYMENTS = "payments"
    STUDENT_ACCOUNTS = "student_accounts"

    SCHOOL = "school"
    REPORTS = "reports"
    AUDIT_LOGS = "audit_logs"


A = PermissionAction
R = Resource

STUDENT_PERMISSIONS = {
    R.USERS: [A.READ, A.UPDATE],
    R.STUDENTS: [A.VIEW_OWN],
    R.CLASSES: [A.VIEW_OWN],
    R.SUBJECTS: [A.VIEW_OWN],
    R.ENROLLMENTS: [A.VIEW_OWN],
    R.ASSIGNMENTS: [A.VIEW_OWN, A.READ],
    R.ASSIGNMENT_SUBMISSIONS: [A.CREATE, A.READ, A.UPDATE, A.VIEW_OWN],
    R.GRADES: [A.VIEW_OWN, A.READ],
    R.GRADE_ITEMS: [A.VIEW_OWN],
    R.ATTENDANCE: [A.VIEW_OWN],
    R.CLASS_MEETINGS: [A.VIEW_OWN],
    R.PERIODS: [A.READ],
    R.ROOMS: [A.READ],
    R.TERMS: [A.READ],
    R.MESSAGES: [A.CREATE, A.READ, A.VIEW_OWN],
    R.CONVERSATIONS: [A.CREATE, A.READ, A.VIEW_OWN],
    R.ANNOUNCEMENTS: [A.READ],
    R.NOTIFICATIONS: [A.READ, A.UPDATE, A.VIEW_OWN],
    R.RESOURCES: [A.READ, A.VIEW_CLASS],
    R.LESSON_PLANS: [A.READ, A.VIEW_CLASS],
    R.EVENTS: [A.READ],
    R.FEE_RECORDS: [A.VIEW_OWN],
    R.INVOICES: [A.VIEW_OWN],
    R.STUDENT_ACCOUNTS: [A.VIEW_OWN],
}

TEACHER_PERMISSIONS = {
    R.USERS: [A.READ, A.UPDATE],
    R.TEACHERS: [A.VIEW_OWN],
    R.STUDENTS: [A.VIEW_CLASS, A.READ],
    R.CLASSES: [A.VIEW_CLASS, A.READ],
    R.SUBJECTS: [A.VIEW_CLASS, A.READ],
    R.ENROLLMENTS: [A.VIEW_CLASS, A.READ],
    R.ASSIGNMENTS: [A.MANAGE, A.VIEW_CLASS],
    R.ASSIGNMENT_SUBMISSIONS: [A.READ, A.UPDATE, A.GRADE, A.VIEW_CLASS],
    R.GRADES: [A.MANAGE, A.VIEW_CLASS],
    R.GRADE_ITEMS: [A.MANAGE, A.VIEW_CLASS],
    R.GRADE_CATEGORIES: [A.MANAGE, A.VIEW_CLASS],
    R.ATTENDANCE: [A.MANAGE, A.VIEW_CLASS],
    R.ATTENDANCE_SESSIONS: [A.MANAGE, A.VIEW_CLASS],
    R.CLASS_MEETINGS: [A.VIEW_CLASS, A.READ],
    R.PERIODS: [A.READ],
    R.ROOMS: [A.READ],
    R.TERMS: [A.READ],
    R.MESSAGES: [A.MANAGE],
    R.CONVERSATIONS: [A.MANAGE],
    R.ANNOUNCEMENTS: [A.CREATE, A.READ, A.VIEW_CLASS],
    R.NOTIFICATIONS: [A.MANAGE],
    R.RESOURCES: [A.MANAGE],
    R.LESSON_PLANS: [A.MANAGE],
    R.EVENTS: [A.CREATE, A.READ, A.UPDATE],
    R.REPORTS: [A.VIEW_CLASS, A.CREATE],
}

PARENT_PERMISSIONS = {
    R.USERS: [A.READ, A.UPDATE],
    R.PARENTS: [A.VIEW_OWN],
    R.STUDENTS: [A.VIEW_OWN],
    R.CLASSES: [A.VIEW_OWN],
    R.SUBJECTS: [A.VIEW_OWN],
    R.ENROLLMENTS: [A.VIEW_OWN],
    R.ASSIGNMENTS: [A.VIEW_OWN, A.READ],
    R.ASSIGNMENT_SUBMISSIONS: [A.VIEW_OWN, A.READ],
    R.GRADES: [A.VIEW_OWN, A.READ],
    R.GRADE_ITEMS: [A.VIEW_OWN],
    R.ATTENDANCE: [A.VIEW_OWN, A.READ],
    R.CLASS_MEETINGS: [A.VIEW_OWN],
    R.PERIODS: [A.READ],
    R.TERMS: [A.READ],
    R.MESSAGES: [A.CREATE, A.READ, A.VIEW_OWN],
    R.CONVERSATIONS: [A.CREATE, A.READ, A.VIEW_OWN],
    R.ANNOUNCEMENTS: [A.READ],
    R.NOTIFICATIONS: [A.READ, A.UPDATE, A.VIEW_OWN],
    R.EVENTS: [A.READ],
    R.FEE_RECORDS: [A.VIEW_OWN],
    R.INVOICES: [A.VIEW_OWN],
    R.PAYMENTS: [A.CREATE, A.VIEW_OWN],
    R.STUDENT_ACCOUNTS: [A.VIEW_OWN],
}

PRINCIPAL_PERMISSIONS = {
    R.USERS: [A.MANAGE],
    R.STUDENTS: [A.MANAGE],
    R.TEACHERS: [A.MANAGE],
    R.PARENTS: [A.MANAGE],
    R.PRINCIPALS: [A.VIEW_OWN],
    R.CLASSES: [A.MANAGE],
    R.SUBJECTS: [A.MANAGE],
    R.ENROLLMENTS: [A.MANAGE],
    R.ASSIGNMENTS: [A.VIEW_ALL, A.READ],
    R.ASSIGNMENT_SUBMISSIONS: [A.VIEW_ALL, A.READ],
    R.GRADES: [A.VIEW_ALL, A.READ],
    R.GRADE_ITEMS: [A.VIEW_ALL],
    R.GRADE_CATEGORIES: [A.VIEW_ALL],
    R.ATTENDANCE: [A.VIEW_ALL, A.READ],
    R.ATTENDANCE_SESSIONS: [A.VIEW_ALL, A.READ],
    R.CLASS_MEETINGS: [A.MANAGE],
    R.PERIODS: [A.MANAGE],
    R.ROOMS: [A.MANAGE],
    R.TERMS: [A.MANAGE],
    R.MESSAGES: [A.MANAGE],
    R.CONVERSATIONS: [A.MANAGE],
    R.ANNOUNCEMENTS: [A.MANAGE],
    R.NOTIFICATIONS: [A.MANAGE],
    R.RESOURCES: [A.MANAGE],
    R.LESSON_PLANS: [A.VIEW_ALL, A.READ],
    R.EVENTS: [A.MANAGE],
    R.FEE_RECORDS: [A.VIEW_ALL, A.READ],
    R.INVOICES: [A.VIEW_ALL, A.READ],
    R.PAYMENTS: [A.VIEW_ALL, A.READ],
    R.STUDENT_ACCOUNTS: [A.VIEW_ALL, A.READ],
    R.SCHOOL: [A.MANAGE],
    R.REPORTS: [A.MANAGE],
    R.AUDIT_LOGS: [A.READ, A.VIEW_ALL],
}

CLERK_PERMISSIONS = {
    R.USERS: [A.READ, A.UPDATE],
    R.STUDENTS: [A.MANAGE],
    R.ENROLLMENTS: [A.MANAGE],
    R.CLASSES: [A.READ, A.VIEW_ALL],
    R.SUBJECTS: [A.READ, A.VIEW_ALL],
    R.GRADES: [A.READ, A.VIEW_ALL],
    R.ATTENDANCE: [A.CREATE, A.READ, A.UPDATE, A.VIEW_ALL],
    R.ATTENDANCE_SESSIONS: [A.READ, A.VIEW_ALL],
    R.MESSAGES: [A.CREATE, A.READ],
    R.ANNOUNCEMENTS: [A.CREATE, A.READ],
    R.NOTIFICATIONS: [A.CREATE, A.READ],
    R.FEE_RECORDS: [A.MANAGE],
    R.INVOICES: [A.MANAGE],
    R.PAYMENTS: [A.MANAGE],
    R.STUDENT_ACCOUNTS: [A.MANAGE],
    R.REPORTS: [A.CREATE, A.READ],
}

ADMIN_PERMISSIONS = {resource: [A.MANAGE] for resource in Resource}

ROLE_PERMISSIONS = {
    UserRole.STUDENT: STUDENT_PERMISSIONS,
    UserRole.TEACHER: TEACHER_PERMISSIONS,
    UserRole.PARENT: PARENT_PERMISSIONS,
    UserRole.PRINCIPAL: PRINCIPAL_PERMISSIONS,
    UserRole.CLERK: CLERK_PERMISSIONS,
    UserRole.ADMIN: ADMIN_PERMISSIONS,
}

DASHBOARD_ROUTE = "/dashboard"
