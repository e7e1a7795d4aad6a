from enum import Enum
from typing import Optional


class Role(str, Enum):
    CLIENT = "client"
    FREELANCER = "freelancer"


def parse_role(raw_role: object) -> Optional[Role]:
    if isinstance(raw_role, Role):
        return raw_role
    value = str(raw_role or "").strip().lower()
    if not value:
        return None
    try:
        return Role(value)
    except ValueError:
        return None


def has_role(identity, role: Role) -> bool:
    if identity is None:
        return False
    return parse_role(getattr(identity, "role", None)) == role
