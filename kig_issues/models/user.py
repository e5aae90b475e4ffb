from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

# ──────────────────────────────────────────────────────────────────────────────
# Enums
# ──────────────────────────────────────────────────────────────────────────────

class UserRole(str, Enum):
    ADMIN = "admin"
    WORK_GROUP_LEADER = "workGroupLeader"
    RESIDENT = "resident"
    GUEST = "guest"


# Total order used for permission checks
ROLE_RANK = {
    UserRole.GUEST: 0,
    UserRole.RESIDENT: 1,
    UserRole.WORK_GROUP_LEADER: 2,
    UserRole.ADMIN: 3,
}


# ──────────────────────────────────────────────────────────────────────────────
# Auth payloads
# ──────────────────────────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=120)
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class VerifyRequest(BaseModel):
    token: str
