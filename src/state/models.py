# client-side records, persisted to durable storage as JSON

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, TypeAdapter, field_validator


class Identity(BaseModel):
    """The signed-in user, as held by the client."""

    id: int
    name: str
    email: str
    is_admin: bool = False

    @classmethod
    def from_login(cls, raw: Dict[str, Any]) -> "Identity":
        """Map a login response ({id, name, email, is_admin: 0|1}) to an Identity."""
        return cls(
            id=raw["id"],
            name=raw.get("name") or "",
            email=raw.get("email") or "",
            is_admin=raw.get("is_admin") is True or raw.get("is_admin") == 1,
        )

    @property
    def initials(self) -> str:
        return "".join(part[0] for part in self.name.split() if part)[:2].upper()


class CartItem(BaseModel):
    id: int
    name: str
    price: str
    img: Optional[str] = None
    qty: int = 1

    @field_validator("qty")
    @classmethod
    def _clamp_qty(cls, v: int) -> int:
        return max(1, v)


CART_ADAPTER = TypeAdapter(List[CartItem])
