"""
tests/test_vault_service.py -- Unit tests for VaultService.

Covers:
  - createVault: key material generated, owner must exist
  - createCategory: vault must exist, optional acting-user write check
  - Item creation for all three types: ciphertext stored, creator recorded
  - Precondition order: vault -> user -> permission -> category
  - Category from another vault is reported exactly like a missing one
  - getVaultItems: three buckets, category filter, empty for unknown vault
  - Sharing scenarios: read cannot write, write can, creator is recorded
"""

from __future__ import annotations

import pytest

from core import crypto
from core.errors import (
    CategoryNotFound,
    InsufficientPermissions,
    InvalidRequestError,
    OwnerNotFound,
    UserNotFound,
    VaultNotFound,
)
from vault.service import VaultService
from vault.sharing import SharingService

MISSING_ID = 9999


@pytest.fixture()
def service(store) -> VaultService:
    return VaultService(store)


@pytest.fixture()
def vault(service, users):
    return service.create_vault("Personal", owner_id=users.alice.id, description="Alice's things")


class TestCreateVault:
    def test_vault_gets_fresh_key_material(self, service, users) -> None:
        first = service.create_vault("One", owner_id=users.alice.id)
        second = service.create_vault("Two", owner_id=users.alice.id)
        assert len(first.encryption_key) == 64
        assert first.encryption_key != second.encryption_key
        assert first.owner_id == users.alice.id
        assert first.created_at

    def test_key_material_not_in_repr(self, vault) -> None:
        assert vault.encryption_key not in repr(vault)

    def test_missing_owner_rejected(self, service) -> None:
        with pytest.raises(OwnerNotFound, match=f"User with id {MISSING_ID} does not exist"):
            service.create_vault("Ghost", owner_id=MISSING_ID)

    def test_list_user_vaults_includes_shared_once(self, store, service, users, vault) -> None:
        SharingService(store).share_vault(vault.id, users.bob.id, users.alice.id, "read")
        bob_own = service.create_vault("Bob's", owner_id=users.bob.id)
        listed = service.list_user_vaults(users.bob.id)
        assert [v.id for v in listed] == sorted([vault.id, bob_own.id])

    def test_get_vault_missing(self, service) -> None:
        with pytest.raises(VaultNotFound):
            service.get_vault(MISSING_ID)


class TestCreateCategory:
    def test_create_and_list(self, service, vault) -> None:
        category = service.create_category("Work", vault.id)
        assert category.vault_id == vault.id
        assert [c.name for c in service.list_categories(vault.id)] == ["Work"]

    def test_missing_vault(self, service) -> None:
        with pytest.raises(VaultNotFound):
            service.create_category("Work", MISSING_ID)

    def test_acting_user_needs_write(self, store, service, users, vault) -> None:
        SharingService(store).share_vault(vault.id, users.bob.id, users.alice.id, "read")
        with pytest.raises(InsufficientPermissions):
            service.create_category("Bob's", vault.id, acting_user_id=users.bob.id)

    def test_unknown_acting_user(self, service, vault) -> None:
        with pytest.raises(UserNotFound):
            service.create_category("Work", vault.id, acting_user_id=MISSING_ID)


class TestCreateItems:
    def test_owner_creates_password_entry_with_category(self, service, users, vault) -> None:
        category = service.create_category("Work", vault.id)
        entry = service.create_password_entry(
            vault.id,
            users.alice.id,
            title="GitHub",
            password="hunter2",
            username="alice",
            url="https://github.com",
            category_id=category.id,
        )
        assert entry.id is not None
        assert entry.encrypted_password != "hunter2"
        assert crypto.decrypt(entry.encrypted_password, vault.encryption_key) == "hunter2"
        assert entry.category_id == category.id
        assert entry.created_by == users.alice.id

    def test_secure_note_content_is_encrypted(self, service, users, vault) -> None:
        note = service.create_secure_note(vault.id, users.alice.id, title="Recovery", content="word list")
        assert "word list" not in note.encrypted_content
        assert crypto.decrypt(note.encrypted_content, vault.encryption_key) == "word list"

    def test_credit_card_number_and_cvv_encrypted_separately(self, service, users, vault) -> None:
        card = service.create_credit_card(
            vault.id,
            users.alice.id,
            title="Visa",
            cardholder_name="Alice Tester",
            card_number="4111 1111 1111 1111",
            cvv="123",
            expiry_month=12,
            expiry_year=2030,
        )
        assert crypto.decrypt(card.encrypted_card_number, vault.encryption_key) == "4111 1111 1111 1111"
        assert crypto.decrypt(card.encrypted_cvv, vault.encryption_key) == "123"
        assert card.encrypted_card_number.split(":")[0] != card.encrypted_cvv.split(":")[0]

    def test_credit_card_bad_month(self, service, users, vault) -> None:
        with pytest.raises(InvalidRequestError):
            service.create_credit_card(
                vault.id,
                users.alice.id,
                title="Visa",
                cardholder_name="Alice",
                card_number="4111111111111111",
                cvv="123",
                expiry_month=13,
                expiry_year=2030,
            )

    def test_empty_password_still_encrypted(self, service, users, vault) -> None:
        entry = service.create_password_entry(vault.id, users.alice.id, title="Blank", password="")
        assert entry.encrypted_password
        assert crypto.decrypt(entry.encrypted_password, vault.encryption_key) == ""


class TestItemPreconditionOrder:
    """Each precondition wins over the ones after it."""

    def test_missing_vault_beats_missing_user(self, service) -> None:
        with pytest.raises(VaultNotFound):
            service.create_secure_note(MISSING_ID, MISSING_ID, title="x", content="y")

    def test_missing_user_beats_permission(self, service, vault) -> None:
        with pytest.raises(UserNotFound):
            service.create_secure_note(vault.id, MISSING_ID, title="x", content="y")

    def test_permission_beats_bad_category(self, service, users, vault) -> None:
        with pytest.raises(InsufficientPermissions):
            service.create_secure_note(vault.id, users.bob.id, title="x", content="y", category_id=MISSING_ID)

    def test_missing_category(self, service, users, vault) -> None:
        with pytest.raises(CategoryNotFound):
            service.create_secure_note(vault.id, users.alice.id, title="x", content="y", category_id=MISSING_ID)

    def test_category_from_other_vault_looks_missing(self, service, users, vault) -> None:
        other = service.create_vault("Other", owner_id=users.alice.id)
        foreign = service.create_category("Elsewhere", other.id)
        with pytest.raises(CategoryNotFound) as excinfo:
            service.create_password_entry(vault.id, users.alice.id, title="x", password="y", category_id=foreign.id)
        assert excinfo.value.message == CategoryNotFound.message

    def test_failed_create_writes_nothing(self, service, users, vault) -> None:
        with pytest.raises(InsufficientPermissions):
            service.create_password_entry(vault.id, users.bob.id, title="x", password="y")
        items = service.get_vault_items(vault.id)
        assert items.password_entries == []


class TestSharedVaultScenarios:
    def test_reader_cannot_create_note(self, store, service, users, vault) -> None:
        SharingService(store).share_vault(vault.id, users.bob.id, users.alice.id, "read")
        with pytest.raises(InsufficientPermissions):
            service.create_secure_note(vault.id, users.bob.id, title="Nope", content="x")

    def test_writer_creates_note_as_creator(self, store, service, users, vault) -> None:
        SharingService(store).share_vault(vault.id, users.bob.id, users.alice.id, "write")
        note = service.create_secure_note(vault.id, users.bob.id, title="Bob's note", content="x")
        assert note.created_by == users.bob.id
        assert note.vault_id == vault.id

    def test_stranger_cannot_create_item(self, service, users, vault) -> None:
        with pytest.raises(InsufficientPermissions):
            service.create_password_entry(vault.id, users.carol.id, title="x", password="y")


class TestGetVaultItems:
    def test_buckets_and_category_filter(self, service, users, vault) -> None:
        work = service.create_category("Work", vault.id)
        service.create_password_entry(vault.id, users.alice.id, title="Jira", password="a", category_id=work.id)
        service.create_password_entry(vault.id, users.alice.id, title="Netflix", password="b")
        service.create_secure_note(vault.id, users.alice.id, title="Standup", content="c", category_id=work.id)

        everything = service.get_vault_items(vault.id)
        assert [e.title for e in everything.password_entries] == ["Jira", "Netflix"]
        assert len(everything.secure_notes) == 1
        assert everything.credit_cards == []

        work_only = service.get_vault_items(vault.id, category_id=work.id)
        assert [e.title for e in work_only.password_entries] == ["Jira"]
        assert [n.title for n in work_only.secure_notes] == ["Standup"]

    def test_unknown_vault_returns_empty_buckets(self, service) -> None:
        items = service.get_vault_items(MISSING_ID)
        assert items.password_entries == []
        assert items.secure_notes == []
        assert items.credit_cards == []
