"""
Role normalization and dashboard resolution.

The backend reports a user's role either as ``role: str`` or as
``roles: list[str]``. Everything downstream sees one canonical ``Role``.
Anything the dashboard does not know about resolves to ``Role.UNRECOGNIZED``,
which is served the lecturer dashboard: the least-privileged view. Unknown
roles are never an error.
"""
from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    DEPARTMENT_HEAD = "department_head"
    LECTURER = "lecturer"
    UNRECOGNIZED = "unrecognized"


class DashboardVariant(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    DEPARTMENT_HEAD = "department_head"
    LECTURER = "lecturer"


DEFAULT_ROLE = "lecturer"

# Every Role member must appear here.
DASHBOARDS: Dict[Role, DashboardVariant] = {
    Role.ADMIN: DashboardVariant.ADMIN,
    Role.MANAGER: DashboardVariant.MANAGER,
    Role.DEPARTMENT_HEAD: DashboardVariant.DEPARTMENT_HEAD,
    Role.LECTURER: DashboardVariant.LECTURER,
    # fail open to the least-privileged view
    Role.UNRECOGNIZED: DashboardVariant.LECTURER,
}

ROLE_BADGES: Dict[Role, str] = {
    Role.ADMIN: "Admin",
    Role.MANAGER: "Manager",
    Role.DEPARTMENT_HEAD: "Trưởng khoa",
    Role.LECTURER: "Giảng viên",
    Role.UNRECOGNIZED: "Giảng viên",
}


def effective_role(role: Optional[str] = None, roles: Optional[Sequence[str]] = None) -> str:
    """First entry of ``roles`` when present, else ``role``, else lecturer."""
    if roles:
        return roles[0]
    return role or DEFAULT_ROLE


def normalize_role(raw: Any) -> Role:
    if isinstance(raw, Role):
        return raw
    try:
        return Role(str(raw))
    except ValueError:
        return Role.UNRECOGNIZED


def role_from_payload(payload: Mapping[str, Any]) -> Role:
    return normalize_role(effective_role(payload.get("role"), payload.get("roles")))


def resolve_dashboard(user: Any) -> DashboardVariant:
    """Pick the dashboard for a user.

    ``user`` is a normalized ``models.User`` or a raw ``/auth/me`` payload.
    """
    if isinstance(user, Mapping):
        role = role_from_payload(user)
    else:
        role = normalize_role(getattr(user, "role", None) or DEFAULT_ROLE)
    return DASHBOARDS[role]


def grants_admin(payload: Mapping[str, Any]) -> bool:
    """Admin pages open to anyone holding the admin role, wherever it sits in ``roles``."""
    roles = payload.get("roles") or []
    return Role.ADMIN.value in roles or role_from_payload(payload) is Role.ADMIN


def role_badge(role: Role) -> str:
    return ROLE_BADGES[role]


def department_endpoint(role: Role) -> str:
    """URL prefix for the department-scoped API."""
    return "manager" if role is Role.MANAGER else "department-head"
