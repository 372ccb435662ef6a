import sqlite3
from contextlib import contextmanager
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from install_review.config import settings


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session):
    """Commit everything done inside the block, or nothing at all."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


SCHEMA_SQL = """\
-- ============================================================
-- ROLES
-- ============================================================
CREATE TABLE IF NOT EXISTS roles (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    code TEXT NOT NULL UNIQUE,
    name TEXT
);

CREATE TABLE IF NOT EXISTS user_roles (
    user_id INTEGER NOT NULL,
    role_id INTEGER NOT NULL REFERENCES roles(id) ON DELETE CASCADE,
    PRIMARY KEY (user_id, role_id)
);

CREATE INDEX IF NOT EXISTS idx_user_roles_role ON user_roles(role_id);

-- ============================================================
-- APPLICATIONS
-- ============================================================
CREATE TABLE IF NOT EXISTS applications (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    client_code      TEXT NOT NULL,
    first_names      TEXT NOT NULL,
    last_names       TEXT NOT NULL,
    document_type    TEXT NOT NULL
                     CHECK(document_type IN ('CC','CE','PAS','NIT','OTHER')),
    document_number  TEXT NOT NULL,
    address          TEXT,
    neighborhood     TEXT NOT NULL,
    email            TEXT,
    contact_number   TEXT,
    stratum          INTEGER,
    locality_code    TEXT,
    status           TEXT NOT NULL DEFAULT 'DRAFT'
                     CHECK(status IN ('DRAFT','SUBMITTED','APPROVED','REJECTED')),
    technician_id    INTEGER NOT NULL,
    supervisor_id    INTEGER,
    submitted_at     TEXT,
    reviewed_at      TEXT,
    approved_at      TEXT,
    rejection_reason TEXT,
    created_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_applications_status ON applications(status);
CREATE INDEX IF NOT EXISTS idx_applications_technician ON applications(technician_id);

-- ============================================================
-- ATTACHMENTS
-- ============================================================
CREATE TABLE IF NOT EXISTS application_files (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    application_id INTEGER NOT NULL REFERENCES applications(id),
    kind           TEXT NOT NULL,
    file_name      TEXT NOT NULL,
    mime_type      TEXT,
    byte_size      INTEGER NOT NULL,
    storage_path   TEXT NOT NULL,
    uploaded_by    INTEGER,
    uploaded_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_files_application ON application_files(application_id);

-- ============================================================
-- HISTORY (append-only)
-- ============================================================
CREATE TABLE IF NOT EXISTS application_history (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    application_id INTEGER NOT NULL REFERENCES applications(id),
    from_status    TEXT,
    to_status      TEXT NOT NULL,
    actor_id       INTEGER NOT NULL,
    comment        TEXT,
    created_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_history_application ON application_history(application_id);

-- ============================================================
-- RESOLUTION DOCUMENTS
-- ============================================================
CREATE TABLE IF NOT EXISTS application_pdfs (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    application_id INTEGER NOT NULL REFERENCES applications(id),
    version        INTEGER NOT NULL,
    decision       TEXT NOT NULL CHECK(decision IN ('APPROVED','REJECTED')),
    file_name      TEXT NOT NULL,
    storage_path   TEXT NOT NULL,
    generated_by   INTEGER,
    created_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    UNIQUE (application_id, version)
);

-- ============================================================
-- REQUIREMENT CATALOG
-- ============================================================
CREATE TABLE IF NOT EXISTS application_requirements (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    kind        TEXT NOT NULL UNIQUE,
    is_required INTEGER NOT NULL DEFAULT 1,
    description TEXT
);
"""

IMMUTABILITY_TRIGGERS_SQL = """\
CREATE TRIGGER IF NOT EXISTS application_history_no_update
BEFORE UPDATE ON application_history BEGIN
    SELECT RAISE(ABORT, 'application_history is append-only');
END;

CREATE TRIGGER IF NOT EXISTS application_history_no_delete
BEFORE DELETE ON application_history BEGIN
    SELECT RAISE(ABORT, 'application_history is append-only');
END;

CREATE TRIGGER IF NOT EXISTS application_pdfs_no_update
BEFORE UPDATE ON application_pdfs BEGIN
    SELECT RAISE(ABORT, 'resolution documents are immutable');
END;

CREATE TRIGGER IF NOT EXISTS application_pdfs_no_delete
BEFORE DELETE ON application_pdfs BEGIN
    SELECT RAISE(ABORT, 'resolution documents are immutable');
END;
"""

SEED_SQL = """\
INSERT OR IGNORE INTO roles (code, name) VALUES
    ('ADMIN', 'Administrator'),
    ('SUPERVISOR', 'Supervisor'),
    ('TECNICO', 'Field technician');

INSERT OR IGNORE INTO application_requirements (kind, is_required, description) VALUES
    ('FACADE_PHOTO', 1, 'Photo of the building facade'),
    ('NOMENCLATURE_PHOTO', 1, 'Photo of the street number plate'),
    ('SPEED_TEST_PHOTO', 1, 'Screenshot of the speed test'),
    ('WORK_ORDER', 1, 'Signed work order');
"""


MIGRATIONS = [
    # v0.2: attachment checksums
    "ALTER TABLE application_files ADD COLUMN sha256 TEXT",
]


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    conn.executescript(IMMUTABILITY_TRIGGERS_SQL)
    conn.executescript(SEED_SQL)
    # Run migrations idempotently (ALTER TABLE fails silently if column exists)
    for migration in MIGRATIONS:
        try:
            conn.execute(migration)
            conn.commit()
        except sqlite3.OperationalError:
            pass  # column already exists
    conn.close()
