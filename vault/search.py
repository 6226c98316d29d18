"""
vault/search.py -- Substring search across the three item types.

Only plaintext metadata is searchable. Secret fields are ciphertext and are
never matched:

  password entries -- title, username, url, notes
  secure notes     -- title (content is encrypted)
  credit cards     -- title, cardholder_name

A blank query (empty or whitespace only) applies no text filter, so it returns
every item that passes the other filters. vault_id and category_id are exact
matches ANDed with the text match; a NULL category never matches a category
filter. item_type limits which bucket is populated; the others come back as
empty lists. An unrecognised item_type raises UnknownItemType.

This layer does not check vault access. Callers that serve end users pass
accessible_vault_ids (the api/ layer passes the authenticated user's vaults).
"""

from __future__ import annotations

from typing import Iterable, Optional

from core.errors import UnknownItemType
from vault.models import ItemType, VaultItems
from vault.store import VaultStore

SEARCHABLE_FIELDS: dict[ItemType, tuple[str, ...]] = {
    ItemType.PASSWORD: ("title", "username", "url", "notes"),
    ItemType.NOTE: ("title",),
    ItemType.CREDIT_CARD: ("title", "cardholder_name"),
}


def search_items(
    store: VaultStore,
    query: str,
    vault_id: Optional[int] = None,
    category_id: Optional[int] = None,
    item_type: Optional[ItemType | str] = None,
    accessible_vault_ids: Optional[Iterable[int]] = None,
) -> VaultItems:
    """Search items by case-insensitive substring over plaintext fields."""
    wanted = None
    if item_type is not None:
        try:
            wanted = ItemType(item_type)
        except ValueError:
            raise UnknownItemType() from None
    text_query = query if query.strip() else None
    vault_ids = set(accessible_vault_ids) if accessible_vault_ids is not None else None

    def _bucket(kind: ItemType) -> list:
        if wanted is not None and wanted != kind:
            return []
        return store.find_items(
            kind,
            text_query=text_query,
            text_fields=SEARCHABLE_FIELDS[kind],
            vault_id=vault_id,
            category_id=category_id,
            vault_ids=vault_ids,
        )

    return VaultItems(
        password_entries=_bucket(ItemType.PASSWORD),
        secure_notes=_bucket(ItemType.NOTE),
        credit_cards=_bucket(ItemType.CREDIT_CARD),
    )
