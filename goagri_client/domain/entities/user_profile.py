"""
User profile entity
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class UserProfile:
    """Cached account record returned by login/registration"""

    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        """Resolve the user key as _id, then id, then email"""
        user_id = data.get("_id") or data.get("id") or data.get("email")
        if not user_id:
            raise ValueError("User record has no _id, id or email")
        return cls(
            user_id=str(user_id),
            name=data.get("name"),
            email=data.get("email"),
            raw=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.raw)
        data.setdefault("_id", self.user_id)
        if self.name is not None:
            data["name"] = self.name
        if self.email is not None:
            data["email"] = self.email
        return data

    @property
    def display_name(self) -> str:
        return self.name or self.email or "there"
