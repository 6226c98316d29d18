"""
vault/service.py -- Vault, category and vault item operations.

VaultService orchestrates every write into a vault. The store is injected at
construction so tests can pass an in-memory store.

Item creation (password entry, secure note, credit card) runs the same
precondition chain, in this order, each with its own error:

  1. vault exists                                   -> VaultNotFound
  2. acting user exists                             -> UserNotFound
  3. acting user resolves to write or admin         -> InsufficientPermissions
  4. category (if given) exists AND is in the vault -> CategoryNotFound

The user check precedes the permission check: a user that does not exist
cannot hold a grant, and the caller deserves the more precise error.

Secret fields are encrypted with the vault's key material (core/crypto.py)
before the single insert. The returned item carries ciphertext only;
plaintext never leaves this module.
"""

from __future__ import annotations

import logging
from typing import Optional

from core import crypto
from core.errors import CategoryNotFound, InvalidRequestError, OwnerNotFound, UserNotFound, VaultNotFound
from vault.access import WRITE_REQUIRED, require_permission
from vault.models import (
    Category,
    CreditCard,
    ItemType,
    PasswordEntry,
    SecureNote,
    Vault,
    VaultItems,
)
from vault.store import VaultStore

logger = logging.getLogger("vaultkeep.vault")


class VaultService:
    """Vault, category and item operations over an injected VaultStore.

    Usage:
        service = VaultService(store)
        vault = service.create_vault("Work", owner_id=alice.id)
        entry = service.create_password_entry(
            vault.id, alice.id, title="GitHub", password="hunter2", username="alice"
        )
    """

    def __init__(self, store: VaultStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Vaults
    # ------------------------------------------------------------------

    def create_vault(self, name: str, owner_id: int, description: Optional[str] = None) -> Vault:
        """Create a vault owned by owner_id with freshly generated key material.

        The returned Vault includes encryption_key; it is the caller's job not
        to expose it (the REST layer strips it).
        """
        if self.store.get_user(owner_id) is None:
            raise OwnerNotFound(f"User with id {owner_id} does not exist")
        vault_id = self.store.create_vault(
            Vault(
                name=name,
                description=description,
                owner_id=owner_id,
                encryption_key=crypto.generate_key_material(),
            )
        )
        logger.info("Vault created: vault=%s owner=%s", vault_id, owner_id)
        return self.store.get_vault(vault_id)

    def get_vault(self, vault_id: int) -> Vault:
        vault = self.store.get_vault(vault_id)
        if vault is None:
            raise VaultNotFound()
        return vault

    def list_user_vaults(self, user_id: int) -> list[Vault]:
        """Return vaults owned by or shared with user_id, de-duplicated, ordered by ID."""
        return self.store.list_vaults_for_user(user_id)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def create_category(self, name: str, vault_id: int, acting_user_id: Optional[int] = None) -> Category:
        """Create a category in a vault.

        acting_user_id is optional for internal callers (seeding, CLI). When
        given, the user must exist and hold write access.
        """
        vault = self.get_vault(vault_id)
        if acting_user_id is not None:
            self._require_writer(vault, acting_user_id)
        category_id = self.store.create_category(Category(name=name, vault_id=vault.id))
        logger.info("Category created: category=%s vault=%s", category_id, vault.id)
        return self.store.get_category(category_id)

    def list_categories(self, vault_id: int) -> list[Category]:
        return self.store.list_categories(vault_id)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def create_password_entry(
        self,
        vault_id: int,
        acting_user_id: int,
        title: str,
        password: str,
        username: Optional[str] = None,
        url: Optional[str] = None,
        notes: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> PasswordEntry:
        """Store a login credential. Only password is encrypted; the rest stays searchable."""
        vault = self._check_item_preconditions(vault_id, acting_user_id, category_id)
        entry_id = self.store.create_password_entry(
            PasswordEntry(
                title=title,
                username=username or None,
                encrypted_password=crypto.encrypt(password, vault.encryption_key),
                url=url or None,
                notes=notes or None,
                vault_id=vault.id,
                category_id=category_id,
                created_by=acting_user_id,
            )
        )
        logger.info("Password entry created: item=%s vault=%s by=%s", entry_id, vault.id, acting_user_id)
        return self.store.get_item(ItemType.PASSWORD, entry_id)

    def create_secure_note(
        self,
        vault_id: int,
        acting_user_id: int,
        title: str,
        content: str,
        category_id: Optional[int] = None,
    ) -> SecureNote:
        vault = self._check_item_preconditions(vault_id, acting_user_id, category_id)
        note_id = self.store.create_secure_note(
            SecureNote(
                title=title,
                encrypted_content=crypto.encrypt(content, vault.encryption_key),
                vault_id=vault.id,
                category_id=category_id,
                created_by=acting_user_id,
            )
        )
        logger.info("Secure note created: item=%s vault=%s by=%s", note_id, vault.id, acting_user_id)
        return self.store.get_item(ItemType.NOTE, note_id)

    def create_credit_card(
        self,
        vault_id: int,
        acting_user_id: int,
        title: str,
        cardholder_name: str,
        card_number: str,
        cvv: str,
        expiry_month: int,
        expiry_year: int,
        category_id: Optional[int] = None,
    ) -> CreditCard:
        """Store a payment card. Card number and CVV are encrypted separately, each with its own nonce."""
        if not 1 <= expiry_month <= 12:
            raise InvalidRequestError("expiry_month must be between 1 and 12")
        vault = self._check_item_preconditions(vault_id, acting_user_id, category_id)
        card_id = self.store.create_credit_card(
            CreditCard(
                title=title,
                cardholder_name=cardholder_name,
                encrypted_card_number=crypto.encrypt(card_number, vault.encryption_key),
                encrypted_cvv=crypto.encrypt(cvv, vault.encryption_key),
                expiry_month=expiry_month,
                expiry_year=expiry_year,
                vault_id=vault.id,
                category_id=category_id,
                created_by=acting_user_id,
            )
        )
        logger.info("Credit card created: item=%s vault=%s by=%s", card_id, vault.id, acting_user_id)
        return self.store.get_item(ItemType.CREDIT_CARD, card_id)

    def get_vault_items(self, vault_id: int, category_id: Optional[int] = None) -> VaultItems:
        """Return every item in a vault, optionally narrowed to one category.

        No error for a missing vault or category: the buckets are simply empty.
        Uncategorized items never match a category filter.
        """
        return VaultItems(
            password_entries=self.store.find_items(ItemType.PASSWORD, vault_id=vault_id, category_id=category_id),
            secure_notes=self.store.find_items(ItemType.NOTE, vault_id=vault_id, category_id=category_id),
            credit_cards=self.store.find_items(ItemType.CREDIT_CARD, vault_id=vault_id, category_id=category_id),
        )

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    def _require_writer(self, vault: Vault, acting_user_id: int) -> None:
        if self.store.get_user(acting_user_id) is None:
            raise UserNotFound()
        require_permission(self.store, vault, acting_user_id, WRITE_REQUIRED)

    def _check_item_preconditions(self, vault_id: int, acting_user_id: int, category_id: Optional[int]) -> Vault:
        vault = self.get_vault(vault_id)
        self._require_writer(vault, acting_user_id)
        if category_id is not None:
            category = self.store.get_category(category_id)
            # Missing and foreign categories are reported identically.
            if category is None or category.vault_id != vault.id:
                raise CategoryNotFound()
        return vault
