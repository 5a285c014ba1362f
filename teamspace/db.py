# teamspace/db.py
# Database layer: SQLAlchemy engine over PostgreSQL (production) or SQLite (dev/tests)

from contextlib import contextmanager
from pathlib import Path as FsPath
from typing import Any, Dict, Generator, List, Optional, Union
from urllib.parse import urlparse

from sqlalchemy import create_engine, pool, text
from sqlalchemy.engine import Connection, Engine

from teamspace.config import DATABASE_PATH, DATABASE_URL, IS_DEV

# Global engine, created lazily so tests can point it elsewhere first
_engine: Union[Engine, None] = None


def default_url() -> str:
    """Resolve the configured database URL (Postgres if set, else the SQLite file)."""
    if DATABASE_URL:
        # SQLAlchemy 1.4+ requires 'postgresql://' not 'postgres://'
        if DATABASE_URL.startswith("postgres://"):
            return DATABASE_URL.replace("postgres://", "postgresql://", 1)
        return DATABASE_URL

    db_path = FsPath(DATABASE_PATH)
    if not db_path.is_absolute():
        db_path = FsPath(__file__).resolve().parent / db_path
    return f"sqlite:///{db_path}"


def init_engine(url: Optional[str] = None) -> Engine:
    """Create (or replace) the global engine."""
    global _engine

    url = url or default_url()
    parsed = urlparse(url)

    if parsed.scheme.startswith("sqlite"):
        _engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=False,
        )
        print("[DB] Using SQLite (local dev mode)")
    else:
        if not parsed.netloc:
            raise ValueError(f"Invalid DATABASE_URL: {url[:20]}...")

        _engine = create_engine(
            url,
            poolclass=pool.QueuePool,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,  # Verify connections before use
            echo=False,
        )
        print(f"[DB] Using PostgreSQL ({parsed.hostname})")

    return _engine


def get_engine() -> Engine:
    if _engine is None:
        init_engine()
    return _engine


@contextmanager
def get_db_connection() -> Generator[Connection, None, None]:
    """Read-only style connection; callers that write must commit themselves."""
    with get_engine().connect() as conn:
        yield conn


@contextmanager
def transaction() -> Generator[Connection, None, None]:
    """
    Connection inside a single transaction.
    Commits when the block exits cleanly, rolls back on any exception.
    """
    with get_engine().begin() as conn:
        yield conn


# ---------------------------------------------------------
# Query helpers (rows come back as plain dicts)
# ---------------------------------------------------------
def execute(conn: Connection, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
    return conn.execute(text(query), params or {})


def fetch_one(conn: Connection, query: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    row = conn.execute(text(query), params or {}).mappings().first()
    return dict(row) if row is not None else None


def fetch_all(conn: Connection, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    return [dict(row) for row in conn.execute(text(query), params or {}).mappings().all()]


def fetch_value(conn: Connection, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
    return conn.execute(text(query), params or {}).scalar()


def in_clause(column: str, prefix: str, values: List[Any], params: Dict[str, Any]) -> str:
    """Build `column IN (:p0, :p1, ...)` and register the bound values in params."""
    names = []
    for i, value in enumerate(values):
        name = f"{prefix}{i}"
        params[name] = value
        names.append(f":{name}")
    return f"{column} IN ({', '.join(names)})"


# ---------------------------------------------------------
# Schema (idempotent)
# ---------------------------------------------------------
SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS roles (
        id TEXT PRIMARY KEY,
        name TEXT UNIQUE NOT NULL,
        permissions TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        name TEXT,
        email TEXT UNIQUE NOT NULL,
        password_hash TEXT,
        profile_picture TEXT,
        is_active INTEGER NOT NULL DEFAULT 1,
        last_login TEXT,
        current_workspace_id TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS accounts (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users (id),
        provider TEXT NOT NULL,
        provider_id TEXT NOT NULL,
        refresh_token TEXT,
        token_expiry TEXT,
        created_at TEXT NOT NULL,
        UNIQUE (provider, provider_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS workspaces (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        owner_id TEXT NOT NULL REFERENCES users (id),
        invite_code TEXT UNIQUE NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS members (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users (id),
        workspace_id TEXT NOT NULL REFERENCES workspaces (id),
        role_id TEXT NOT NULL REFERENCES roles (id),
        joined_at TEXT NOT NULL,
        UNIQUE (user_id, workspace_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS projects (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        emoji TEXT NOT NULL,
        workspace_id TEXT NOT NULL REFERENCES workspaces (id),
        created_by TEXT NOT NULL REFERENCES users (id),
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        task_code TEXT UNIQUE NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        project_id TEXT NOT NULL REFERENCES projects (id),
        workspace_id TEXT NOT NULL REFERENCES workspaces (id),
        status TEXT NOT NULL,
        priority TEXT NOT NULL,
        assigned_to TEXT REFERENCES users (id),
        created_by TEXT NOT NULL REFERENCES users (id),
        due_date TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_members_workspace_id ON members(workspace_id)",
    "CREATE INDEX IF NOT EXISTS idx_projects_workspace_created ON projects(workspace_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_workspace_created ON tasks(workspace_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_project_id ON tasks(project_id)",
]


def init_db() -> None:
    """Create all tables and indexes if missing. Safe to run multiple times."""
    with transaction() as conn:
        for ddl in SCHEMA:
            conn.execute(text(ddl))
    if IS_DEV:
        print(f"[DB] Schema ensured ({len(SCHEMA)} statements)")
