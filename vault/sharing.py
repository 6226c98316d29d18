"""
vault/sharing.py -- Granting other users access to a vault.

share_vault() checks, in this order (existence, then authority, then business
rules), so a given bad request always reports the same error:

  1. vault exists                          -> VaultNotFound
  2. target user exists                    -> TargetUserNotFound
  3. acting user exists                    -> ActingUserNotFound
  4. acting user resolves to admin         -> InsufficientPermissions
  5. target != acting user                 -> CannotShareWithSelf
  6. target != vault owner                 -> CannotShareWithOwner
  7. no grant yet for (vault, target)      -> AlreadyShared

Step 7 is checked twice: once with a read for a clean error in the common
case, and again by the store's UNIQUE(vault_id, shared_with_user_id)
constraint. Two racing requests for the same pair both pass the read, one
insert wins and the loser's IntegrityError becomes AlreadyShared.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from core.errors import (
    ActingUserNotFound,
    AlreadyShared,
    CannotShareWithOwner,
    CannotShareWithSelf,
    TargetUserNotFound,
    UnknownPermissionLevel,
    VaultNotFound,
)
from vault.access import SHARE_REQUIRED, require_permission
from vault.models import GRANTABLE_LEVELS, PermissionLevel, VaultSharing
from vault.store import VaultStore

logger = logging.getLogger("vaultkeep.sharing")


class SharingService:
    """Vault sharing operations over an injected VaultStore."""

    def __init__(self, store: VaultStore) -> None:
        self.store = store

    def share_vault(
        self,
        vault_id: int,
        target_user_id: int,
        acting_user_id: int,
        level: PermissionLevel | str,
    ) -> VaultSharing:
        """Grant target_user_id access to vault_id at level, on behalf of acting_user_id."""
        try:
            level = PermissionLevel(level)
        except ValueError:
            raise UnknownPermissionLevel() from None
        if level not in GRANTABLE_LEVELS:
            raise UnknownPermissionLevel()

        vault = self.store.get_vault(vault_id)
        if vault is None:
            raise VaultNotFound()
        if self.store.get_user(target_user_id) is None:
            raise TargetUserNotFound()
        if self.store.get_user(acting_user_id) is None:
            raise ActingUserNotFound()
        require_permission(self.store, vault, acting_user_id, SHARE_REQUIRED)
        if target_user_id == acting_user_id:
            raise CannotShareWithSelf()
        if target_user_id == vault.owner_id:
            raise CannotShareWithOwner()
        if self.store.get_sharing(vault.id, target_user_id) is not None:
            raise AlreadyShared()

        try:
            sharing_id = self.store.create_sharing(
                VaultSharing(
                    vault_id=vault.id,
                    shared_with_user_id=target_user_id,
                    shared_by_user_id=acting_user_id,
                    permission_level=level,
                )
            )
        except IntegrityError:
            # Lost the race against a concurrent grant for the same pair.
            logger.warning("Concurrent duplicate grant rejected: vault=%s target=%s", vault.id, target_user_id)
            raise AlreadyShared() from None

        logger.info(
            "Vault shared: vault=%s target=%s by=%s level=%s",
            vault.id,
            target_user_id,
            acting_user_id,
            level.value,
        )
        return self.store.get_sharing_by_id(sharing_id)

    def list_vault_sharing(self, vault_id: int) -> list[VaultSharing]:
        """Return every grant on a vault. Empty for unknown vaults."""
        return self.store.list_sharing(vault_id)
