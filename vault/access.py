"""
vault/access.py -- Vault permission resolution.

The single place that decides what a user may do in a vault. Every service
write path calls require_permission(); nothing else compares owner IDs or
reads sharing rows for authorization.

Resolution:
  1. acting user is the vault owner  -> ADMIN (implicit, never a sharing row)
  2. a sharing row (vault, user)     -> that row's level
  3. otherwise                       -> NONE

Callers must load the vault first. "Vault not found" is the caller's error to
raise, distinct from "insufficient permissions".
"""

from __future__ import annotations

import logging

from core.errors import InsufficientPermissions
from vault.models import PermissionLevel, Vault
from vault.store import VaultStore

logger = logging.getLogger("vaultkeep.vault")

# Minimum level per operation class.
READ_REQUIRED = PermissionLevel.READ
WRITE_REQUIRED = PermissionLevel.WRITE
SHARE_REQUIRED = PermissionLevel.ADMIN


def resolve_permission(store: VaultStore, vault: Vault, acting_user_id: int) -> PermissionLevel:
    """Return the effective permission level of acting_user_id on vault."""
    if acting_user_id == vault.owner_id:
        return PermissionLevel.ADMIN
    grant = store.get_sharing(vault.id, acting_user_id)
    if grant is None:
        return PermissionLevel.NONE
    return grant.permission_level


def require_permission(
    store: VaultStore,
    vault: Vault,
    acting_user_id: int,
    minimum: PermissionLevel,
) -> PermissionLevel:
    """Resolve the acting user's level and raise unless it meets minimum.

    Returns the resolved level so callers can log or branch on it.
    """
    level = resolve_permission(store, vault, acting_user_id)
    if not level.satisfies(minimum):
        logger.warning(
            "Permission denied: user=%s vault=%s has=%s needs=%s",
            acting_user_id,
            vault.id,
            level.value,
            minimum.value,
        )
        raise InsufficientPermissions()
    return level


def accessible_vault_ids(store: VaultStore, user_id: int) -> set[int]:
    """Return the IDs of every vault user_id can read (owned or shared at any level)."""
    return {v.id for v in store.list_vaults_for_user(user_id)}
