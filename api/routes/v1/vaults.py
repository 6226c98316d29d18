"""
api/routes/v1/vaults.py -- Vault, category, item and sharing routes.

Routes:
  POST /vaults                           -- create vault owned by the caller
  GET  /vaults                           -- vaults owned by or shared with the caller
  GET  /vaults/{vault_id}/categories     -- list categories        (read)
  POST /vaults/{vault_id}/categories     -- create category        (write)
  GET  /vaults/{vault_id}/items          -- list items, ?category_id= (read)
  POST /vaults/{vault_id}/passwords      -- create password entry  (write)
  POST /vaults/{vault_id}/notes          -- create secure note     (write)
  POST /vaults/{vault_id}/cards          -- create credit card     (write)
  GET  /vaults/{vault_id}/sharing        -- list grants            (read)
  POST /vaults/{vault_id}/sharing        -- grant access           (admin)

The acting user is always the authenticated caller; request bodies never name
a creator or sharer. Write routes delegate every check to the services. Read
routes resolve the caller's level here via vault/access.py.

Domain errors (core/errors.py) propagate to the handler in api/main.py, which
maps them to 404 / 403 / 409 / 400.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from api.models import (
    CategoryCreate,
    CategoryResponse,
    CreditCardCreate,
    CreditCardResponse,
    PasswordEntryCreate,
    PasswordEntryResponse,
    SecureNoteCreate,
    SecureNoteResponse,
    ShareRequest,
    SharingResponse,
    VaultCreate,
    VaultItemsResponse,
    VaultResponse,
)
from auth.dependencies import get_current_user
from vault.access import READ_REQUIRED, require_permission
from vault.models import PermissionLevel, User, Vault
from vault.service import VaultService
from vault.sharing import SharingService
from vault.store import VaultStore

router = APIRouter(dependencies=[Depends(get_current_user)])


def _readable_vault(store: VaultStore, vault_id: int, user: User) -> Vault:
    """Load a vault and require at least read access for user."""
    vault = VaultService(store).get_vault(vault_id)
    require_permission(store, vault, user.id, READ_REQUIRED)
    return vault


# ---------------------------------------------------------------------------
# Vaults
# ---------------------------------------------------------------------------


@router.post("/vaults", response_model=VaultResponse, status_code=201)
def create_vault(
    request: Request,
    body: VaultCreate,
    current_user: User = Depends(get_current_user),
) -> VaultResponse:
    store: VaultStore = request.app.state.store
    vault = VaultService(store).create_vault(body.name, owner_id=current_user.id, description=body.description)
    return VaultResponse.model_validate(vault)


@router.get("/vaults", response_model=list[VaultResponse])
def list_vaults(request: Request, current_user: User = Depends(get_current_user)) -> list[VaultResponse]:
    store: VaultStore = request.app.state.store
    return [VaultResponse.model_validate(v) for v in VaultService(store).list_user_vaults(current_user.id)]


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


@router.get("/vaults/{vault_id}/categories", response_model=list[CategoryResponse])
def list_categories(
    request: Request,
    vault_id: int,
    current_user: User = Depends(get_current_user),
) -> list[CategoryResponse]:
    store: VaultStore = request.app.state.store
    vault = _readable_vault(store, vault_id, current_user)
    return [CategoryResponse.model_validate(c) for c in VaultService(store).list_categories(vault.id)]


@router.post("/vaults/{vault_id}/categories", response_model=CategoryResponse, status_code=201)
def create_category(
    request: Request,
    vault_id: int,
    body: CategoryCreate,
    current_user: User = Depends(get_current_user),
) -> CategoryResponse:
    store: VaultStore = request.app.state.store
    category = VaultService(store).create_category(body.name, vault_id, acting_user_id=current_user.id)
    return CategoryResponse.model_validate(category)


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


@router.get("/vaults/{vault_id}/items", response_model=VaultItemsResponse)
def get_vault_items(
    request: Request,
    vault_id: int,
    category_id: Optional[int] = None,
    current_user: User = Depends(get_current_user),
) -> VaultItemsResponse:
    """Return every item in the vault with secrets still encrypted."""
    store: VaultStore = request.app.state.store
    vault = _readable_vault(store, vault_id, current_user)
    items = VaultService(store).get_vault_items(vault.id, category_id=category_id)
    return VaultItemsResponse.model_validate(items)


@router.post("/vaults/{vault_id}/passwords", response_model=PasswordEntryResponse, status_code=201)
def create_password_entry(
    request: Request,
    vault_id: int,
    body: PasswordEntryCreate,
    current_user: User = Depends(get_current_user),
) -> PasswordEntryResponse:
    store: VaultStore = request.app.state.store
    entry = VaultService(store).create_password_entry(
        vault_id,
        current_user.id,
        title=body.title,
        password=body.password,
        username=body.username,
        url=body.url,
        notes=body.notes,
        category_id=body.category_id,
    )
    return PasswordEntryResponse.model_validate(entry)


@router.post("/vaults/{vault_id}/notes", response_model=SecureNoteResponse, status_code=201)
def create_secure_note(
    request: Request,
    vault_id: int,
    body: SecureNoteCreate,
    current_user: User = Depends(get_current_user),
) -> SecureNoteResponse:
    store: VaultStore = request.app.state.store
    note = VaultService(store).create_secure_note(
        vault_id,
        current_user.id,
        title=body.title,
        content=body.content,
        category_id=body.category_id,
    )
    return SecureNoteResponse.model_validate(note)


@router.post("/vaults/{vault_id}/cards", response_model=CreditCardResponse, status_code=201)
def create_credit_card(
    request: Request,
    vault_id: int,
    body: CreditCardCreate,
    current_user: User = Depends(get_current_user),
) -> CreditCardResponse:
    store: VaultStore = request.app.state.store
    card = VaultService(store).create_credit_card(
        vault_id,
        current_user.id,
        title=body.title,
        cardholder_name=body.cardholder_name,
        card_number=body.card_number,
        cvv=body.cvv,
        expiry_month=body.expiry_month,
        expiry_year=body.expiry_year,
        category_id=body.category_id,
    )
    return CreditCardResponse.model_validate(card)


# ---------------------------------------------------------------------------
# Sharing
# ---------------------------------------------------------------------------


@router.get("/vaults/{vault_id}/sharing", response_model=list[SharingResponse])
def list_sharing(
    request: Request,
    vault_id: int,
    current_user: User = Depends(get_current_user),
) -> list[SharingResponse]:
    store: VaultStore = request.app.state.store
    vault = _readable_vault(store, vault_id, current_user)
    return [SharingResponse.model_validate(s) for s in SharingService(store).list_vault_sharing(vault.id)]


@router.post("/vaults/{vault_id}/sharing", response_model=SharingResponse, status_code=201)
def share_vault(
    request: Request,
    vault_id: int,
    body: ShareRequest,
    current_user: User = Depends(get_current_user),
) -> SharingResponse:
    store: VaultStore = request.app.state.store
    grant = SharingService(store).share_vault(
        vault_id,
        target_user_id=body.shared_with_user_id,
        acting_user_id=current_user.id,
        level=PermissionLevel(body.permission_level.value),
    )
    return SharingResponse.model_validate(grant)
