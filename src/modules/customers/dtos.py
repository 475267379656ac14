"""Customer DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``AddressDTO``: a postal address.
- ``RegisterCustomerDTO``: input for customer registration.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from modules.customers.value_objects import normalize_phone


class AddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    street: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: str = ""
    postal_code: str = Field(min_length=1, max_length=20)
    country: str = Field(min_length=2, max_length=2)
    is_primary: bool = False

    @field_validator("country")
    @classmethod
    def country_upper(cls, v: str) -> str:
        return v.upper()


class RegisterCustomerDTO(BaseModel):
    """Immutable DTO for customer registration requests.

    Validates:
    - ``email`` is a well-formed address (Pydantic ``EmailStr``).
    - ``phone`` (optional) is a plausible international number.
    - names are non-empty.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = None
    preferred_language: str = "en"
    preferred_currency: str = "USD"
    addresses: List[AddressDTO] = []

    @field_validator("phone")
    @classmethod
    def phone_must_be_valid(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return normalize_phone(v) or None

    @field_validator("email")
    @classmethod
    def email_lowercase(cls, v: str) -> str:
        return v.lower()
