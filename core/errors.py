"""
core/errors.py -- VaultKeep domain exception hierarchy.

Every precondition failure raised by the services derives from VaultKeepError.
Each family carries a stable `kind` (the error taxonomy) and every concrete
class a stable `code` and default message, so the REST layer can map errors to
status codes without string matching.

  NotFoundError            -> 404   vault / user / category absent
  InsufficientPermissions  -> 403   resolved level below the requirement
  ConflictError            -> 409   duplicate grant, duplicate unique field
  InvalidRequestError      -> 400   business-rule violations

Infrastructure failures (sqlalchemy.exc.OperationalError and friends) are NOT
part of this hierarchy. They propagate unchanged.

Layer rule: stdlib only. Imported by every other package.
"""

from __future__ import annotations


class VaultKeepError(Exception):
    """Base exception for all VaultKeep domain errors."""

    kind: str = "error"
    code: str = "error"
    message: str = "VaultKeep error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


# Not found
class NotFoundError(VaultKeepError):
    kind = "not_found"
    code = "not_found"
    message = "Not found"


class VaultNotFound(NotFoundError):
    code = "vault_not_found"
    message = "Vault not found"


class UserNotFound(NotFoundError):
    code = "user_not_found"
    message = "User not found"


class OwnerNotFound(NotFoundError):
    code = "owner_not_found"
    message = "Vault owner not found"


class TargetUserNotFound(NotFoundError):
    code = "target_user_not_found"
    message = "User to share with not found"


class ActingUserNotFound(NotFoundError):
    code = "acting_user_not_found"
    message = "Sharing user not found"


class CategoryNotFound(NotFoundError):
    """Raised both for a missing category and for one that lives in another vault."""

    code = "category_not_found"
    message = "Category not found or does not belong to the specified vault"


# Permissions
class InsufficientPermissions(VaultKeepError):
    kind = "insufficient_permissions"
    code = "insufficient_permissions"
    message = "Insufficient permissions for this vault"


# Conflict
class ConflictError(VaultKeepError):
    kind = "conflict"
    code = "conflict"
    message = "Conflict"


class AlreadyShared(ConflictError):
    code = "already_shared"
    message = "Vault is already shared with this user"


class EmailAlreadyRegistered(ConflictError):
    code = "email_taken"
    message = "Email address is already registered (unique constraint)"


# Invalid request
class InvalidRequestError(VaultKeepError):
    kind = "invalid_request"
    code = "invalid_request"
    message = "Invalid request"


class CannotShareWithSelf(InvalidRequestError):
    code = "cannot_share_with_self"
    message = "Cannot share vault with yourself"


class CannotShareWithOwner(InvalidRequestError):
    code = "cannot_share_with_owner"
    message = "Cannot share vault with the owner"


class NoCharacterTypesSelected(InvalidRequestError):
    code = "no_character_types"
    message = "No character types selected for password generation"


class EnvelopeError(InvalidRequestError):
    """Malformed envelope, wrong key material, or tampered ciphertext."""

    code = "invalid_envelope"
    message = "Envelope could not be decrypted"


class PasswordTooLong(InvalidRequestError):
    code = "password_too_long"
    message = "Password must be at most 72 bytes when UTF-8 encoded"


class UnknownPermissionLevel(InvalidRequestError):
    code = "invalid_permission_level"
    message = "permission_level must be one of: read, write, admin"


class UnknownItemType(InvalidRequestError):
    code = "invalid_item_type"
    message = "type must be one of: password, note, credit_card"
