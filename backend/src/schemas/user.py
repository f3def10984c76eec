"""Pydantic schemas for registration and login."""
from pydantic import BaseModel, Field, field_validator


def normalize_email(email: str) -> str:
    """Emails are compared and stored trimmed and lowercased."""
    return email.strip().lower()


def _require_text(value: str, field: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{field} is required.")
    return value


class UserRegister(BaseModel):
    """Schema for creating an account. All three fields are required."""

    name: str = Field(max_length=255)
    email: str = Field(max_length=255)
    password: str = Field(max_length=1024)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        """Reject blank names and trim surrounding whitespace."""
        return _require_text(v, "Name").strip()

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        """Reject blank or obviously malformed emails; normalize the rest."""
        email = normalize_email(_require_text(v, "Email"))
        if "@" not in email:
            raise ValueError("Email must contain '@'.")
        return email

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        """Reject blank passwords. The value is never trimmed."""
        return _require_text(v, "Password")


class UserLogin(BaseModel):
    """Schema for logging in."""

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize(cls, v: str) -> str:
        """Normalize so lookups match the stored form."""
        return normalize_email(v)
