"""
API request and response models for VaultKeep REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in vault/models.py, which
own the internal domain representation. Route handlers map between the two.

Response models are built with model_validate(domain_obj) (from_attributes).
Fields that must never leave the server -- Vault.encryption_key,
User.password_hash, User.two_factor_secret -- are simply not declared here,
so Pydantic drops them.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.tokens import MAX_PASSWORD_BYTES, password_too_long
from vault.models import PermissionLevel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class GrantLevelEnum(str, Enum):
    """Levels a sharing request may grant. "none" is computed, never granted."""

    read = "read"
    write = "write"
    admin = "admin"


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if password_too_long(v):
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
        return v


class LoginRequest(BaseModel):
    email: str = Field(max_length=255)
    password: str = Field(max_length=128)
    two_factor_token: Optional[str] = Field(default=None, max_length=32)


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str
    expires_in: int
    user_id: int
    email: str


class UserResponse(BaseModel):
    """Public view of a user. Never carries the password hash or 2FA secret."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: str
    two_factor_enabled: bool
    created_at: str


class TwoFactorEnableRequest(BaseModel):
    secret: str = Field(min_length=8, max_length=255)


class TwoFactorEnableResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    backup_codes: list[str]


# ---------------------------------------------------------------------------
# Vaults, categories, sharing
# ---------------------------------------------------------------------------


class VaultCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=2000)


class VaultResponse(BaseModel):
    """A vault without its key material."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    description: Optional[str]
    owner_id: int
    created_at: str
    updated_at: str


class CategoryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)


class CategoryResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    vault_id: int
    created_at: str


class ShareRequest(BaseModel):
    shared_with_user_id: int
    permission_level: GrantLevelEnum


class SharingResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    vault_id: int
    shared_with_user_id: int
    shared_by_user_id: int
    permission_level: PermissionLevel
    created_at: str


# ---------------------------------------------------------------------------
# Vault items
# ---------------------------------------------------------------------------


class PasswordEntryCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    password: str = Field(max_length=4096)
    username: Optional[str] = Field(default=None, max_length=255)
    url: Optional[str] = Field(default=None, max_length=2048)
    notes: Optional[str] = Field(default=None, max_length=10000)
    category_id: Optional[int] = None


class PasswordEntryResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    title: str
    username: Optional[str]
    encrypted_password: str
    url: Optional[str]
    notes: Optional[str]
    vault_id: int
    category_id: Optional[int]
    created_by: int
    created_at: str
    updated_at: str


class SecureNoteCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(max_length=100000)
    category_id: Optional[int] = None


class SecureNoteResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    title: str
    encrypted_content: str
    vault_id: int
    category_id: Optional[int]
    created_by: int
    created_at: str
    updated_at: str


class CreditCardCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    cardholder_name: str = Field(min_length=1, max_length=255)
    card_number: str = Field(pattern=r"^[0-9 -]{8,32}$")
    cvv: str = Field(pattern=r"^[0-9]{3,4}$")
    expiry_month: int = Field(ge=1, le=12)
    expiry_year: int = Field(ge=2000, le=2200)
    category_id: Optional[int] = None


class CreditCardResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    title: str
    cardholder_name: str
    encrypted_card_number: str
    encrypted_cvv: str
    expiry_month: int
    expiry_year: int
    vault_id: int
    category_id: Optional[int]
    created_by: int
    created_at: str
    updated_at: str


class VaultItemsResponse(BaseModel):
    """Three buckets, always present, possibly empty."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    password_entries: list[PasswordEntryResponse]
    secure_notes: list[SecureNoteResponse]
    credit_cards: list[CreditCardResponse]


# ---------------------------------------------------------------------------
# Search and generator
# ---------------------------------------------------------------------------


class GeneratePasswordRequest(BaseModel):
    length: int = Field(default=16, ge=4, le=128)
    include_uppercase: bool = True
    include_lowercase: bool = True
    include_numbers: bool = True
    include_symbols: bool = True
    exclude_ambiguous: bool = False


class GeneratedPasswordResponse(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    password: str
    strength: str
