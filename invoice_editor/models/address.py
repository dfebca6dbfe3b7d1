"""Address data model for the sender and recipient of an invoice."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict


@dataclass(frozen=True)
class Address:
    """Contact block for one party on an invoice.

    Attributes:
        name: Person or company name
        email: Email address the invoice is sent to / from
        address: Postal address, may span several lines
    """

    name: str = ""
    email: str = ""
    address: str = ""

    def with_changes(self, **changes: Any) -> Address:
        """Return a new Address with the given fields replaced."""
        unknown = set(changes) - {"name", "email", "address"}
        if unknown:
            raise ValueError(f"Unknown address field(s): {', '.join(sorted(unknown))}")
        return replace(self, **{k: "" if v is None else str(v) for k, v in changes.items()})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Address:
        """Create Address from dictionary (missing keys become empty strings)."""
        data = data or {}
        return cls(
            name=str(data.get("name") or ""),
            email=str(data.get("email") or ""),
            address=str(data.get("address") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "email": self.email, "address": self.address}
