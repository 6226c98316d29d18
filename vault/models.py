"""
vault/models.py -- Domain dataclasses for VaultKeep.

Pattern: Data class (pure data container, zero logic beyond level ordering).
Stores map rows into these; services and routes do the work.

Timestamps are ISO 8601 UTC strings set by the store on insert. id is None
before a record is written to the database.

Secret-bearing fields (encrypted_*) always hold an envelope produced by
core/crypto.encrypt(), never plaintext.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class PermissionLevel(str, Enum):
    """Effective access a user holds on a vault.

    Ordered: none < read < write < admin. Only read/write/admin are ever
    stored on a VaultSharing row; none and the owner's implicit admin are
    computed by vault/access.py.
    """

    NONE = "none"
    READ = "read"
    WRITE = "write"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]

    def satisfies(self, minimum: "PermissionLevel") -> bool:
        return self.rank >= minimum.rank


_LEVEL_RANK = {
    PermissionLevel.NONE: 0,
    PermissionLevel.READ: 1,
    PermissionLevel.WRITE: 2,
    PermissionLevel.ADMIN: 3,
}

GRANTABLE_LEVELS = (PermissionLevel.READ, PermissionLevel.WRITE, PermissionLevel.ADMIN)


class ItemType(str, Enum):
    PASSWORD = "password"
    NOTE = "note"
    CREDIT_CARD = "credit_card"


@dataclass
class User:
    """A VaultKeep account.

    password_hash is a bcrypt string: algorithm, cost and salt are encoded in
    the hash itself. two_factor_secret must be set iff two_factor_enabled; a
    mismatch is treated as an authentication failure, never repaired.
    """

    email: str
    password_hash: str
    first_name: str
    last_name: str
    id: int | None = None
    two_factor_enabled: bool = False
    two_factor_secret: str | None = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Vault:
    """Encryption and access boundary.

    encryption_key is the vault's key material (see core/crypto.py). It is set
    once at creation and must never be serialized to API consumers.
    """

    name: str
    owner_id: int
    encryption_key: str = field(repr=False, default="")
    id: int | None = None
    description: str | None = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class Category:
    name: str
    vault_id: int
    id: int | None = None
    created_at: str = ""


@dataclass
class VaultSharing:
    """A grant letting a non-owner access a vault.

    At most one row per (vault_id, shared_with_user_id), enforced by a UNIQUE
    constraint in the store.
    """

    vault_id: int
    shared_with_user_id: int
    shared_by_user_id: int
    permission_level: PermissionLevel
    id: int | None = None
    created_at: str = ""


@dataclass
class PasswordEntry:
    title: str
    encrypted_password: str
    vault_id: int
    created_by: int
    id: int | None = None
    username: str | None = None
    url: str | None = None
    notes: str | None = None
    category_id: int | None = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class SecureNote:
    title: str
    encrypted_content: str
    vault_id: int
    created_by: int
    id: int | None = None
    category_id: int | None = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class CreditCard:
    title: str
    cardholder_name: str
    encrypted_card_number: str
    encrypted_cvv: str
    expiry_month: int
    expiry_year: int
    vault_id: int
    created_by: int
    id: int | None = None
    category_id: int | None = None
    created_at: str = ""
    updated_at: str = ""


@dataclass
class VaultItems:
    """Three-bucket result of listing or searching vault items.

    Buckets are always present; an unpopulated bucket is an empty list.
    """

    password_entries: list[PasswordEntry] = field(default_factory=list)
    secure_notes: list[SecureNote] = field(default_factory=list)
    credit_cards: list[CreditCard] = field(default_factory=list)
