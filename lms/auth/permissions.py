# auth/permissions.py
from enum import Enum
from typing import Dict, FrozenSet


class Role(str, Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"


class Capability(str, Enum):
    BROWSE_CATALOG = "browse_catalog"
    MANAGE_COURSES = "manage_courses"
    MANAGE_MEDIA = "manage_media"
    PURCHASE_COURSES = "purchase_courses"
    TRACK_PROGRESS = "track_progress"


ROLE_CAPABILITIES: Dict[str, FrozenSet[Capability]] = {
    Role.STUDENT.value: frozenset({
        Capability.BROWSE_CATALOG,
        Capability.PURCHASE_COURSES,
        Capability.TRACK_PROGRESS,
    }),
    Role.INSTRUCTOR.value: frozenset({
        Capability.BROWSE_CATALOG,
        Capability.MANAGE_COURSES,
        Capability.MANAGE_MEDIA,
    }),
}


def capabilities_for(role: str) -> FrozenSet[Capability]:
    return ROLE_CAPABILITIES.get(role, frozenset())


def has_capability(role: str, capability: Capability) -> bool:
    return capability in capabilities_for(role)
