"""
auth/accounts.py -- User registration and two-factor enrolment.

create_user() writes the user and their default vault in one store
transaction, so a registered user always owns at least one vault.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from auth.tokens import hash_password
from auth.two_factor import generate_backup_codes
from core import crypto
from core.errors import EmailAlreadyRegistered, UserNotFound
from vault.models import User, Vault
from vault.store import VaultStore

logger = logging.getLogger("vaultkeep.auth")

DEFAULT_VAULT_DESCRIPTION = "Default vault"


def default_vault_name(first_name: str) -> str:
    return f"{first_name}'s Vault"


def create_user(store: VaultStore, email: str, password: str, first_name: str, last_name: str) -> User:
    """Register a user with a bcrypt password hash and a default vault.

    Raises EmailAlreadyRegistered if the email is taken. The check is the
    store's UNIQUE constraint, so two concurrent registrations for the same
    email cannot both succeed. Raises PasswordTooLong (before anything is
    written) if the password is over 72 UTF-8 bytes.
    """
    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
    )
    default_vault = Vault(
        name=default_vault_name(first_name),
        description=DEFAULT_VAULT_DESCRIPTION,
        owner_id=0,  # replaced by the new user ID inside the transaction
        encryption_key=crypto.generate_key_material(),
    )
    try:
        user_id = store.create_user(user, default_vault=default_vault)
    except IntegrityError:
        raise EmailAlreadyRegistered() from None
    logger.info("User registered: user=%s", user_id)
    return store.get_user(user_id)


def get_user_by_email(store: VaultStore, email: str) -> Optional[User]:
    return store.get_user_by_email(email)


def enable_two_factor(store: VaultStore, user_id: int, secret: str) -> list[str]:
    """Enable two-factor for a user with the given secret and return fresh backup codes.

    Re-enabling replaces the previous secret. Backup codes are returned once and
    not persisted.
    """
    if not store.set_two_factor(user_id, enabled=True, secret=secret):
        raise UserNotFound(f"User with ID {user_id} not found")
    logger.info("Two-factor enabled: user=%s", user_id)
    return generate_backup_codes()
