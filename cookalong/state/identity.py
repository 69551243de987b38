"""Who favorites belong to.

Identity is passed explicitly to the favorites store; token issuance and
sign-in flows happen elsewhere, only the tri-state matters here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class IdentityKind(str, Enum):
    ANONYMOUS = "anonymous"
    GUEST = "guest"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Identity:
    kind: IdentityKind
    user_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind is IdentityKind.AUTHENTICATED and not self.user_id:
            raise ValueError("Authenticated identity requires a user_id")
        if self.kind is not IdentityKind.AUTHENTICATED and self.user_id:
            raise ValueError(f"{self.kind.value} identity cannot carry a user_id")

    @classmethod
    def anonymous(cls) -> "Identity":
        return cls(IdentityKind.ANONYMOUS)

    @classmethod
    def guest(cls) -> "Identity":
        return cls(IdentityKind.GUEST)

    @classmethod
    def authenticated(cls, user_id: str) -> "Identity":
        return cls(IdentityKind.AUTHENTICATED, user_id)

    @property
    def is_authenticated(self) -> bool:
        return self.kind is IdentityKind.AUTHENTICATED

    @property
    def is_guest(self) -> bool:
        return self.kind is IdentityKind.GUEST
