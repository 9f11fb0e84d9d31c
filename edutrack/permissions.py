"""
Role-based access control

Roles are a closed enumeration; every check goes through has_capability.
"""
from enum import Enum
from typing import Dict, FrozenSet


class Role(str, Enum):
    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    STUDENT = "student"


class Capability(str, Enum):
    CREATE_QUIZ = "create_quiz"
    READ_QUIZ = "read_quiz"
    UPDATE_QUIZ = "update_quiz"
    DELETE_QUIZ = "delete_quiz"
    VIEW_ALL_QUIZZES = "view_all_quizzes"  # inactive quizzes and answer keys
    VIEW_ANALYTICS = "view_analytics"
    TAKE_QUIZ = "take_quiz"
    TRACK_PROGRESS = "track_progress"


ROLE_CAPABILITIES: Dict[Role, FrozenSet[Capability]] = {
    Role.ADMIN: frozenset(Capability),
    Role.INSTRUCTOR: frozenset({
        Capability.CREATE_QUIZ,
        Capability.READ_QUIZ,
        Capability.UPDATE_QUIZ,
        Capability.DELETE_QUIZ,
        Capability.VIEW_ALL_QUIZZES,
        Capability.VIEW_ANALYTICS,
        Capability.TAKE_QUIZ,
        Capability.TRACK_PROGRESS,
    }),
    Role.STUDENT: frozenset({
        Capability.CREATE_QUIZ,
        Capability.READ_QUIZ,
        Capability.UPDATE_QUIZ,
        Capability.DELETE_QUIZ,
        Capability.TAKE_QUIZ,
        Capability.TRACK_PROGRESS,
    }),
}

# Upper bound on Quiz.max_attempts by the creator's role
MAX_ATTEMPTS_BY_ROLE: Dict[Role, int] = {
    Role.ADMIN: 20,
    Role.INSTRUCTOR: 15,
    Role.STUDENT: 5,
}


def has_capability(role: Role, capability: Capability) -> bool:
    """Check whether a role grants a capability"""
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


def max_attempts_cap(role: Role) -> int:
    return MAX_ATTEMPTS_BY_ROLE.get(role, MAX_ATTEMPTS_BY_ROLE[Role.STUDENT])


def can_modify_owned(role: Role, capability: Capability, user_id: str, owner_id: str) -> bool:
    """
    Owner-scoped check for update/delete

    Admins may modify anything; other roles need the capability and must
    own the resource.
    """
    if role == Role.ADMIN:
        return True
    return has_capability(role, capability) and user_id == owner_id
