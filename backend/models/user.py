from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    name: Optional[str] = None
    password_hash: str = Field(repr=False)
    created_at: datetime

    @staticmethod
    def normalized_email(email: str) -> str:
        return email.strip().lower()

    def public(self) -> dict:
        return {"id": self.user_id, "email": self.email, "name": self.name}


class RegisterRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=8, max_length=72)  # bcrypt ignores bytes past 72
    name: Optional[str] = Field(default=None, max_length=200)

    @field_validator("email")
    @classmethod
    def _email_shape(cls, v: str) -> str:
        v = User.normalized_email(v)
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("email must look like name@example.com")
        return v

    @field_validator("password")
    @classmethod
    def _password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes")
        return v


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str
    password: str
