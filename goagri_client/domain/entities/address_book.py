"""
Address book entity

Saved delivery addresses for one identity namespace, plus an optional
default pointer into that set.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from goagri_client.domain.value_objects.session_identity import GUEST_KEY


@dataclass
class AddressBook:
    """Deduplicated saved addresses and the default choice"""

    owner: str = GUEST_KEY
    addresses: List[str] = field(default_factory=list)
    default: Optional[str] = None

    def contains(self, address: str) -> bool:
        return address in self.addresses

    def add(self, address: str) -> bool:
        """Add address; returns False when it is already saved"""
        if self.contains(address):
            return False
        self.addresses.append(address)
        return True

    def remove(self, address: str) -> bool:
        if not self.contains(address):
            return False
        self.addresses = [saved for saved in self.addresses if saved != address]
        if self.default == address:
            self.default = None
        return True

    def set_default(self, address: Optional[str]) -> None:
        self.default = address or None

    @property
    def first(self) -> str:
        return self.addresses[0] if self.addresses else ""
