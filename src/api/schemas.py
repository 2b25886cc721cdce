from typing import Any, Optional

from pydantic import BaseModel


class LoginIn(BaseModel):
    email: str = ""
    password: str = ""


class RegisterIn(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    is_admin: int = 0


class ProductIn(BaseModel):
    name: Optional[str] = None
    price: Optional[str] = None
    img: Optional[str] = None
    tag: Optional[str] = None


class ProductOut(BaseModel):
    id: int
    name: str
    price: str
    img: str = ""
    tag: str = ""


class OrderIn(BaseModel):
    """Items are stored as sent; only their being a list is checked."""

    email: Any = None
    items: Any = None
    total: Any = 0


class OrderCreated(BaseModel):
    id: int
    created_at: str


class OrderOut(BaseModel):
    id: int
    email: str
    items: list
    total: float
    created_at: str
