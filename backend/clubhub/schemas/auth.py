from pydantic import BaseModel, Field, field_validator

from clubhub.schemas.common import normalize_email
from clubhub.schemas.users import UserOut


class RegisterIn(BaseModel):
    email: str = Field(..., max_length=254, examples=["student@university.tn"])
    password: str = Field(..., min_length=8, max_length=128)
    full_name: str = Field(..., min_length=2, max_length=100)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("full_name is too short")
        return v


class LoginIn(BaseModel):
    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class TokenOut(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthOut(TokenOut):
    user: UserOut
    # populated only when ENV=dev so local flows can finish without a mailbox
    dev_token: str | None = None


class RefreshIn(BaseModel):
    refresh_token: str


class LogoutIn(BaseModel):
    refresh_token: str | None = None


class VerifyEmailIn(BaseModel):
    token: str = Field(..., min_length=16, max_length=256)


class ForgotPasswordIn(BaseModel):
    email: str = Field(..., max_length=254)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class ForgotPasswordOut(BaseModel):
    ok: bool = True
    dev_token: str | None = None


class ResetPasswordIn(BaseModel):
    token: str = Field(..., min_length=16, max_length=256)
    new_password: str = Field(..., min_length=8, max_length=128)
