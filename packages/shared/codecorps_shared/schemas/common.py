from enum import Enum
from typing import Optional

from pydantic import BaseModel


class MembershipRole(str, Enum):
    PENDING = "pending"
    CONTRIBUTOR = "contributor"
    ADMIN = "admin"
    OWNER = "owner"


class UserState(str, Enum):
    SIGNED_UP = "signed_up"
    EDITED_PROFILE = "edited_profile"
    SELECTED_CATEGORIES = "selected_categories"
    SELECTED_ROLES = "selected_roles"
    SELECTED_SKILLS = "selected_skills"


# Onboarding state machine: current state -> {transition name: target state}
USER_TRANSITIONS: dict[str, dict[str, str]] = {
    UserState.SIGNED_UP.value: {
        "edit_profile": UserState.EDITED_PROFILE.value,
    },
    UserState.EDITED_PROFILE.value: {
        "select_categories": UserState.SELECTED_CATEGORIES.value,
        "skip_categories": UserState.SELECTED_CATEGORIES.value,
    },
    UserState.SELECTED_CATEGORIES.value: {
        "select_roles": UserState.SELECTED_ROLES.value,
        "skip_roles": UserState.SELECTED_ROLES.value,
    },
    UserState.SELECTED_ROLES.value: {
        "select_skills": UserState.SELECTED_SKILLS.value,
        "skip_skills": UserState.SELECTED_SKILLS.value,
    },
    UserState.SELECTED_SKILLS.value: {},
}


class FieldErrorItem(BaseModel):
    field: str
    message: str
    meta: dict = {}


class ErrorBody(BaseModel):
    code: str
    message: str
    status: int
    fields: Optional[list[FieldErrorItem]] = None


class APIError(BaseModel):
    error: ErrorBody
