"""Unit tests for vault/store.py -- integrity rules enforced by the store itself.

Covers:
- create_user() with a default vault is all-or-nothing
- UNIQUE(users.email) and UNIQUE(vault_sharing.vault_id, shared_with_user_id)
- Foreign keys are enforced on SQLite (PRAGMA foreign_keys=ON)
- list_vaults_for_user() returns owned and shared vaults once each
- find_items() with no filters and get_item() for an unknown ID
"""

import pytest
from sqlalchemy.exc import IntegrityError

from core import crypto
from vault.models import Category, ItemType, PermissionLevel, User, Vault, VaultSharing


def _vault(owner_id: int, name: str = "V") -> Vault:
    return Vault(name=name, owner_id=owner_id, encryption_key=crypto.generate_key_material())


def test_ping(store):
    assert store.ping() is True


def test_create_user_rolls_back_when_default_vault_fails(store):
    """A default vault that violates NOT NULL takes the user row down with it."""
    user = User(email="eve@example.com", password_hash="h", first_name="Eve", last_name="E")
    broken = Vault(name="Eve's Vault", owner_id=0, encryption_key=None)
    with pytest.raises(IntegrityError):
        store.create_user(user, default_vault=broken)
    assert store.get_user_by_email("eve@example.com") is None


def test_duplicate_email_rejected(store, users):
    with pytest.raises(IntegrityError):
        store.create_user(User(email="alice@example.com", password_hash="h", first_name="A", last_name="B"))


def test_duplicate_sharing_rejected_by_constraint(store, users):
    vault_id = store.create_vault(_vault(users.alice.id))
    grant = VaultSharing(
        vault_id=vault_id,
        shared_with_user_id=users.bob.id,
        shared_by_user_id=users.alice.id,
        permission_level=PermissionLevel.READ,
    )
    store.create_sharing(grant)
    with pytest.raises(IntegrityError):
        store.create_sharing(grant)
    assert len(store.list_sharing(vault_id)) == 1


def test_foreign_keys_enforced(store):
    with pytest.raises(IntegrityError):
        store.create_category(Category(name="Orphan", vault_id=424242))


def test_list_vaults_for_user_owned_and_shared(store, users):
    own = store.create_vault(_vault(users.bob.id, "Bob's"))
    shared = store.create_vault(_vault(users.alice.id, "Alice's"))
    store.create_vault(_vault(users.alice.id, "Alice private"))
    store.create_sharing(
        VaultSharing(
            vault_id=shared,
            shared_with_user_id=users.bob.id,
            shared_by_user_id=users.alice.id,
            permission_level=PermissionLevel.WRITE,
        )
    )
    assert [v.id for v in store.list_vaults_for_user(users.bob.id)] == [own, shared]


def test_sharing_row_maps_level_to_enum(store, users):
    vault_id = store.create_vault(_vault(users.alice.id))
    sharing_id = store.create_sharing(
        VaultSharing(
            vault_id=vault_id,
            shared_with_user_id=users.carol.id,
            shared_by_user_id=users.alice.id,
            permission_level=PermissionLevel.ADMIN,
        )
    )
    grant = store.get_sharing_by_id(sharing_id)
    assert grant.permission_level is PermissionLevel.ADMIN
    assert store.get_sharing(vault_id, users.carol.id).id == sharing_id
    assert store.get_sharing(vault_id, users.bob.id) is None


def test_find_items_empty_store(store):
    assert store.find_items(ItemType.PASSWORD) == []
    assert store.get_item(ItemType.CREDIT_CARD, 1) is None
