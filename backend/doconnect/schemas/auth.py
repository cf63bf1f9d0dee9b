"""Auth Schemas — registration, login and the token-bearing auth response.

Invariants:
    - Names are stripped; email is lower-cased before it reaches the service
    - Password complexity is enforced by core/password_policy.py, not here,
      so every failed rule is reported at once
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class RegisterRequest(BaseModel):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    user_name: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=1, max_length=100)

    @field_validator("first_name", "last_name", "user_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        v = v.strip().lower()
        if len(v) > 256:
            raise ValueError("must be at most 256 characters")
        return v


class LoginRequest(BaseModel):
    user_name: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=1)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str
    user_name: str
    roles: list[str]


class AuthResponse(BaseModel):
    token: str
    expiration: datetime
    user: UserResponse
