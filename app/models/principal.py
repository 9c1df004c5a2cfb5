from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class Role(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


@dataclass(frozen=True)
class Principal:
    """The authenticated actor behind a request."""

    id: str
    role: Role = Role.MEMBER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_claims(cls, payload: Mapping[str, Any]) -> "Principal":
        # Anything other than an explicit admin claim is a member
        role = Role.ADMIN if payload.get("role") == Role.ADMIN.value else Role.MEMBER
        return cls(id=str(payload["sub"]), role=role)
