"""
Session identity value object
"""

from dataclasses import dataclass
from typing import Optional

GUEST_KEY = "guest"


@dataclass(frozen=True)
class SessionIdentity:
    """Either the guest session or an authenticated user"""

    user_id: Optional[str] = None

    def __post_init__(self):
        if self.user_id is not None:
            if not isinstance(self.user_id, str) or not self.user_id.strip():
                raise ValueError("Authenticated identity needs a non-empty user id")
            object.__setattr__(self, "user_id", self.user_id.strip())

    @classmethod
    def guest(cls) -> "SessionIdentity":
        return cls(None)

    @classmethod
    def authenticated(cls, user_id: str) -> "SessionIdentity":
        return cls(user_id)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def storage_key(self) -> str:
        """Namespace used for per-identity local storage"""
        return self.user_id if self.user_id is not None else GUEST_KEY

    def __str__(self) -> str:
        return f"authenticated({self.user_id})" if self.is_authenticated else GUEST_KEY
