"""
vault/store.py -- SQLAlchemy-backed credential store for VaultKeep.

Uses SQLAlchemy Core (not ORM) so the dataclasses in vault/models.py remain the
authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite. Tests use "sqlite:///:memory:".

Pattern: Repository + Data Mapper. VaultStore is the repository (one clean
interface per entity). The _row_to_* functions are the mappers. Services never
touch SQL directly; the store never applies access rules.

Security: all queries use bound parameters. No f-strings in SQL. Text search
escapes LIKE wildcards (autoescape=True) so a query of "%" matches a literal
percent sign, not everything.

Integrity:
  - Foreign keys on every reference column. SQLite only enforces them with
    PRAGMA foreign_keys=ON, which is set per connection below.
  - UNIQUE(users.email).
  - UNIQUE(vault_sharing.vault_id, shared_with_user_id): the store-level guard
    that makes concurrent duplicate grants fail with IntegrityError instead
    of inserting two rows.

Every write method opens one connection and commits once. create_user() with a
default vault is the only two-row write and runs in a single transaction.

Usage:
    store = VaultStore()                                 # DATABASE_URL setting
    store = VaultStore("sqlite:///:memory:")             # tests
    user_id = store.create_user(user, default_vault=vault)
    vault = store.get_vault(vault_id)
    store.close()
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    and_,
    create_engine,
    event,
    func,
    or_,
    select,
    text,
)
from sqlalchemy.engine import Engine

from vault.models import (
    Category,
    CreditCard,
    ItemType,
    PasswordEntry,
    PermissionLevel,
    SecureNote,
    User,
    Vault,
    VaultSharing,
)

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", Text, nullable=False),
    Column("first_name", String(255), nullable=False),
    Column("last_name", String(255), nullable=False),
    Column("two_factor_enabled", Boolean, nullable=False, server_default="0"),
    Column("two_factor_secret", Text),  # NULL unless two_factor_enabled
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_vaults = Table(
    "vaults",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("description", Text),
    Column("owner_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("encryption_key", String(64), nullable=False),  # hex key material, never updated
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_categories = Table(
    "categories",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("vault_id", Integer, ForeignKey("vaults.id"), nullable=False),
    Column("created_at", String(32), nullable=False),
)

_vault_sharing = Table(
    "vault_sharing",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("vault_id", Integer, ForeignKey("vaults.id"), nullable=False),
    Column("shared_with_user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("shared_by_user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("permission_level", String(10), nullable=False),  # "read" | "write" | "admin"
    Column("created_at", String(32), nullable=False),
    UniqueConstraint("vault_id", "shared_with_user_id", name="uq_vault_shared_with"),
)

_password_entries = Table(
    "password_entries",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("username", String(255)),
    Column("encrypted_password", Text, nullable=False),
    Column("url", Text),
    Column("notes", Text),
    Column("vault_id", Integer, ForeignKey("vaults.id"), nullable=False),
    Column("category_id", Integer, ForeignKey("categories.id")),
    Column("created_by", Integer, ForeignKey("users.id"), nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_secure_notes = Table(
    "secure_notes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("encrypted_content", Text, nullable=False),
    Column("vault_id", Integer, ForeignKey("vaults.id"), nullable=False),
    Column("category_id", Integer, ForeignKey("categories.id")),
    Column("created_by", Integer, ForeignKey("users.id"), nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_credit_cards = Table(
    "credit_cards",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("cardholder_name", String(255), nullable=False),
    Column("encrypted_card_number", Text, nullable=False),
    Column("encrypted_cvv", Text, nullable=False),
    Column("expiry_month", Integer, nullable=False),
    Column("expiry_year", Integer, nullable=False),
    Column("vault_id", Integer, ForeignKey("vaults.id"), nullable=False),
    Column("category_id", Integer, ForeignKey("categories.id")),
    Column("created_by", Integer, ForeignKey("users.id"), nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# SQLite pragmas
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable foreign keys and WAL journal mode on every new SQLite connection.

    PRAGMAs are per-connection in SQLite and are not inherited from the pool.
    WAL lets readers proceed while a write is in progress.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class VaultStore:
    """Repository for every VaultKeep entity.

    One store instance owns one engine. Create it once per process (the API
    lifespan does this) and pass it explicitly to the services.
    """

    def __init__(self, db_url: Optional[str] = None) -> None:
        if db_url is None:
            from core.config import get_settings

            db_url = get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_sqlite_pragmas)
        metadata.create_all(self.engine)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, user: User, default_vault: Optional[Vault] = None) -> int:
        """Insert a user (and optionally their default vault) and return the user ID.

        When default_vault is given its owner_id is overwritten with the new
        user's ID and both rows are written in one transaction: either both
        exist afterwards or neither does.

        Raises sqlalchemy.exc.IntegrityError if the email is already taken.
        """
        now = _now_iso()
        with self.engine.begin() as conn:
            result = conn.execute(
                _users.insert().values(
                    email=user.email,
                    password_hash=user.password_hash,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    two_factor_enabled=user.two_factor_enabled,
                    two_factor_secret=user.two_factor_secret,
                    created_at=now,
                    updated_at=now,
                )
            )
            user_id = result.inserted_primary_key[0]
            if default_vault is not None:
                conn.execute(
                    _vaults.insert().values(
                        name=default_vault.name,
                        description=default_vault.description,
                        owner_id=user_id,
                        encryption_key=default_vault.encryption_key,
                        created_at=now,
                        updated_at=now,
                    )
                )
        return user_id

    def get_user(self, user_id: int) -> Optional[User]:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def set_two_factor(self, user_id: int, enabled: bool, secret: Optional[str]) -> bool:
        """Update the two-factor flag and secret. Returns False if the user does not exist."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update()
                .where(_users.c.id == user_id)
                .values(two_factor_enabled=enabled, two_factor_secret=secret, updated_at=_now_iso())
            )
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Vaults
    # ------------------------------------------------------------------

    def create_vault(self, vault: Vault) -> int:
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _vaults.insert().values(
                    name=vault.name,
                    description=vault.description,
                    owner_id=vault.owner_id,
                    encryption_key=vault.encryption_key,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_vault(self, vault_id: int) -> Optional[Vault]:
        with self.engine.connect() as conn:
            row = conn.execute(_vaults.select().where(_vaults.c.id == vault_id)).fetchone()
        return _row_to_vault(row) if row is not None else None

    def list_vaults_for_user(self, user_id: int) -> list[Vault]:
        """Return vaults the user owns plus vaults shared with them, ordered by ID.

        Each vault appears once even if bad data ever paired an owner with a
        grant on their own vault.
        """
        shared_ids = select(_vault_sharing.c.vault_id).where(_vault_sharing.c.shared_with_user_id == user_id)
        query = (
            _vaults.select()
            .where(or_(_vaults.c.owner_id == user_id, _vaults.c.id.in_(shared_ids)))
            .order_by(_vaults.c.id)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_vault(r) for r in rows]

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def create_category(self, category: Category) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(
                _categories.insert().values(
                    name=category.name,
                    vault_id=category.vault_id,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_category(self, category_id: int) -> Optional[Category]:
        with self.engine.connect() as conn:
            row = conn.execute(_categories.select().where(_categories.c.id == category_id)).fetchone()
        return _row_to_category(row) if row is not None else None

    def list_categories(self, vault_id: int) -> list[Category]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                _categories.select().where(_categories.c.vault_id == vault_id).order_by(_categories.c.id)
            ).fetchall()
        return [_row_to_category(r) for r in rows]

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    def get_sharing(self, vault_id: int, user_id: int) -> Optional[VaultSharing]:
        """Return the grant for (vault, user), or None. At most one can exist."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _vault_sharing.select().where(
                    (_vault_sharing.c.vault_id == vault_id) & (_vault_sharing.c.shared_with_user_id == user_id)
                )
            ).fetchone()
        return _row_to_sharing(row) if row is not None else None

    def create_sharing(self, sharing: VaultSharing) -> int:
        """Insert a grant and return its ID.

        Raises sqlalchemy.exc.IntegrityError if (vault_id, shared_with_user_id)
        already has a grant. Callers treat that as "already shared".
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _vault_sharing.insert().values(
                    vault_id=sharing.vault_id,
                    shared_with_user_id=sharing.shared_with_user_id,
                    shared_by_user_id=sharing.shared_by_user_id,
                    permission_level=PermissionLevel(sharing.permission_level).value,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_sharing_by_id(self, sharing_id: int) -> Optional[VaultSharing]:
        with self.engine.connect() as conn:
            row = conn.execute(_vault_sharing.select().where(_vault_sharing.c.id == sharing_id)).fetchone()
        return _row_to_sharing(row) if row is not None else None

    def list_sharing(self, vault_id: int) -> list[VaultSharing]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                _vault_sharing.select().where(_vault_sharing.c.vault_id == vault_id).order_by(_vault_sharing.c.id)
            ).fetchall()
        return [_row_to_sharing(r) for r in rows]

    # ------------------------------------------------------------------
    # Vault items
    # ------------------------------------------------------------------

    def create_password_entry(self, entry: PasswordEntry) -> int:
        now = _now_iso()
        return self._insert_item(
            _password_entries,
            title=entry.title,
            username=entry.username,
            encrypted_password=entry.encrypted_password,
            url=entry.url,
            notes=entry.notes,
            vault_id=entry.vault_id,
            category_id=entry.category_id,
            created_by=entry.created_by,
            created_at=now,
            updated_at=now,
        )

    def create_secure_note(self, note: SecureNote) -> int:
        now = _now_iso()
        return self._insert_item(
            _secure_notes,
            title=note.title,
            encrypted_content=note.encrypted_content,
            vault_id=note.vault_id,
            category_id=note.category_id,
            created_by=note.created_by,
            created_at=now,
            updated_at=now,
        )

    def create_credit_card(self, card: CreditCard) -> int:
        now = _now_iso()
        return self._insert_item(
            _credit_cards,
            title=card.title,
            cardholder_name=card.cardholder_name,
            encrypted_card_number=card.encrypted_card_number,
            encrypted_cvv=card.encrypted_cvv,
            expiry_month=card.expiry_month,
            expiry_year=card.expiry_year,
            vault_id=card.vault_id,
            category_id=card.category_id,
            created_by=card.created_by,
            created_at=now,
            updated_at=now,
        )

    def get_item(self, item_type: ItemType, item_id: int):
        """Return the PasswordEntry / SecureNote / CreditCard with this ID, or None."""
        table, mapper = _ITEM_TABLES[ItemType(item_type)]
        with self.engine.connect() as conn:
            row = conn.execute(table.select().where(table.c.id == item_id)).fetchone()
        return mapper(row) if row is not None else None

    def find_items(
        self,
        item_type: ItemType,
        text_query: Optional[str] = None,
        text_fields: Iterable[str] = (),
        vault_id: Optional[int] = None,
        category_id: Optional[int] = None,
        vault_ids: Optional[Iterable[int]] = None,
    ) -> list:
        """Return items of one type matching every supplied filter, ordered by ID.

        text_query  -- case-insensitive substring matched against any of
                       text_fields (OR). None skips the text filter.
        vault_id    -- exact match.
        category_id -- exact match; NULL categories never match.
        vault_ids   -- restrict to this set of vaults. An empty set matches nothing.
        """
        table, mapper = _ITEM_TABLES[ItemType(item_type)]
        conditions = []
        if text_query is not None:
            needle = text_query.lower()
            conditions.append(
                or_(*(func.lower(table.c[name]).contains(needle, autoescape=True) for name in text_fields))
            )
        if vault_id is not None:
            conditions.append(table.c.vault_id == vault_id)
        if category_id is not None:
            conditions.append(table.c.category_id == category_id)
        if vault_ids is not None:
            conditions.append(table.c.vault_id.in_(sorted(vault_ids)))

        query = table.select()
        if conditions:
            query = query.where(and_(*conditions))
        with self.engine.connect() as conn:
            rows = conn.execute(query.order_by(table.c.id)).fetchall()
        return [mapper(r) for r in rows]

    def _insert_item(self, table: Table, **values) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(table.insert().values(**values))
            conn.commit()
            return result.inserted_primary_key[0]

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        first_name=row.first_name,
        last_name=row.last_name,
        two_factor_enabled=bool(row.two_factor_enabled),
        two_factor_secret=row.two_factor_secret,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_vault(row) -> Vault:
    return Vault(
        id=row.id,
        name=row.name,
        description=row.description,
        owner_id=row.owner_id,
        encryption_key=row.encryption_key,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_category(row) -> Category:
    return Category(id=row.id, name=row.name, vault_id=row.vault_id, created_at=row.created_at)


def _row_to_sharing(row) -> VaultSharing:
    return VaultSharing(
        id=row.id,
        vault_id=row.vault_id,
        shared_with_user_id=row.shared_with_user_id,
        shared_by_user_id=row.shared_by_user_id,
        permission_level=PermissionLevel(row.permission_level),
        created_at=row.created_at,
    )


def _row_to_password_entry(row) -> PasswordEntry:
    return PasswordEntry(
        id=row.id,
        title=row.title,
        username=row.username,
        encrypted_password=row.encrypted_password,
        url=row.url,
        notes=row.notes,
        vault_id=row.vault_id,
        category_id=row.category_id,
        created_by=row.created_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_secure_note(row) -> SecureNote:
    return SecureNote(
        id=row.id,
        title=row.title,
        encrypted_content=row.encrypted_content,
        vault_id=row.vault_id,
        category_id=row.category_id,
        created_by=row.created_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_credit_card(row) -> CreditCard:
    return CreditCard(
        id=row.id,
        title=row.title,
        cardholder_name=row.cardholder_name,
        encrypted_card_number=row.encrypted_card_number,
        encrypted_cvv=row.encrypted_cvv,
        expiry_month=row.expiry_month,
        expiry_year=row.expiry_year,
        vault_id=row.vault_id,
        category_id=row.category_id,
        created_by=row.created_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


_ITEM_TABLES = {
    ItemType.PASSWORD: (_password_entries, _row_to_password_entry),
    ItemType.NOTE: (_secure_notes, _row_to_secure_note),
    ItemType.CREDIT_CARD: (_credit_cards, _row_to_credit_card),
}
