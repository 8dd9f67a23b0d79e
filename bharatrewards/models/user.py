"""User records."""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class UserPublic(BaseModel):
    """User as shown to clients (no password)."""

    id: str
    email: str
    name: str
    role: UserRole = UserRole.USER
    points: int = Field(default=0, ge=0)
    wallet_balance: float = 0.0
    solved_count: int = Field(default=0, ge=0)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class User(UserPublic):
    """Stored user record. `password` is plaintext and optional."""

    password: Optional[str] = None

    def to_public(self) -> UserPublic:
        return UserPublic(**self.model_dump(exclude={"password"}))
