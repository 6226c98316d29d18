"""auth/ -- Accounts, login and two-factor for VaultKeep.

Layer rule: auth/ imports from core/, vault/ and third-party libraries.
It does NOT import from api/. api/ imports from auth/, not the other way around.
"""
