"""
api/routes/v1/search.py -- Item search and password generation.

Routes:
  GET  /search              -- substring search over the caller's vaults
  POST /generate-password   -- random password + strength label

Search is scoped to the vaults the caller can read: the accessible-vault set
is computed here and handed to vault/search.py, which applies it as a filter.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.models import GeneratedPasswordResponse, GeneratePasswordRequest, VaultItemsResponse
from auth.dependencies import get_current_user
from core.generator import generate_password
from vault.access import accessible_vault_ids
from vault.models import ItemType, User
from vault.search import search_items
from vault.store import VaultStore

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/search", response_model=VaultItemsResponse)
def search(
    request: Request,
    query: str = Query(default="", max_length=255),
    vault_id: Optional[int] = None,
    category_id: Optional[int] = None,
    type: Optional[ItemType] = None,
    current_user: User = Depends(get_current_user),
) -> VaultItemsResponse:
    """Search titles and other plaintext fields. An empty query lists everything readable."""
    store: VaultStore = request.app.state.store
    results = search_items(
        store,
        query,
        vault_id=vault_id,
        category_id=category_id,
        item_type=type,
        accessible_vault_ids=accessible_vault_ids(store, current_user.id),
    )
    return VaultItemsResponse.model_validate(results)


@router.post("/generate-password", response_model=GeneratedPasswordResponse)
def generate(body: GeneratePasswordRequest) -> GeneratedPasswordResponse:
    generated = generate_password(
        length=body.length,
        include_uppercase=body.include_uppercase,
        include_lowercase=body.include_lowercase,
        include_numbers=body.include_numbers,
        include_symbols=body.include_symbols,
        exclude_ambiguous=body.exclude_ambiguous,
    )
    return GeneratedPasswordResponse.model_validate(generated)
