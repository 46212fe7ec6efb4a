"""Pydantic models shared by the user API."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ============================================
# Request Models
# ============================================

class Address(BaseModel):
    """Postal address attached to a registration."""
    street: str | None = None
    city: str = Field(..., min_length=1)
    postal_code: str | None = Field(None, alias="postalCode")
    country: str = Field(..., min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class RegistrationInput(BaseModel):
    """
    Registration payload accepted by POST /createUser.

    Unknown keys are kept so they can be forwarded to the user service.
    The password policy is enforced by the validation gate, not here.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    email: EmailStr = Field(..., description="Address the account is registered under")
    password: str = Field(..., description="Plain-text password, checked against the policy")
    first_name: str = Field(..., alias="firstName", min_length=1)
    last_name: str = Field(..., alias="lastName", min_length=1)
    phone_number: str | None = Field(None, alias="phoneNumber")
    address: Address | None = None


class ValidationFailure(BaseModel):
    """One field-level defect found by the validation gate."""
    field: str = Field(..., description="Dotted path to the offending field")
    message: str


# ============================================
# Response Models
# ============================================

class UserSummary(BaseModel):
    """Non-sensitive view of a freshly registered user."""
    id: str
    status: str


class ErrorResponse(BaseModel):
    """Error envelope."""
    status: Literal["error"] = "error"
    message: str = Field(..., description="High-level error message")
    details: Any = Field(None, description="Structured context, such as field failures")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    version: str = Field(default="1.0.0")
