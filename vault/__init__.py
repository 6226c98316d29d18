"""vault/ -- Vaults, categories, items, sharing and search for VaultKeep.

Layer rule: vault/ imports from core/ and third-party libraries only.
It does NOT import from api/ or auth/. api/ and auth/ import from vault/,
not the other way around.
"""
