import sqlite3

from install_review.database import MIGRATIONS, SCHEMA_SQL, init_db


def _columns(db_path, table):
    conn = sqlite3.connect(str(db_path))
    try:
        return {row[1] for row in conn.execute(f"PRAGMA table_info({table})")}
    finally:
        conn.close()


class TestInitDb:
    def test_fresh_database_gets_migrated_columns(self, tmp_path):
        db_path = tmp_path / "fresh" / "db.sqlite"
        init_db(db_path)
        assert "sha256" in _columns(db_path, "application_files")

    def test_upgrades_database_without_checksums(self, tmp_path):
        db_path = tmp_path / "db.sqlite"
        conn = sqlite3.connect(str(db_path))
        conn.execute("""
            CREATE TABLE application_files (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                application_id INTEGER NOT NULL,
                kind TEXT NOT NULL,
                file_name TEXT NOT NULL,
                mime_type TEXT,
                byte_size INTEGER NOT NULL,
                storage_path TEXT NOT NULL,
                uploaded_by INTEGER,
                uploaded_at TEXT NOT NULL
            )
        """)
        conn.execute(
            "INSERT INTO application_files (application_id, kind, file_name, byte_size, storage_path, uploaded_at)"
            " VALUES (1, 'WORK_ORDER', 'order.pdf', 10, 'files/1/order.pdf', '2025-01-01T00:00:00Z')"
        )
        conn.commit()
        conn.close()

        init_db(db_path)

        assert "sha256" in _columns(db_path, "application_files")
        conn = sqlite3.connect(str(db_path))
        try:
            assert conn.execute("SELECT file_name, sha256 FROM application_files").fetchall() == [("order.pdf", None)]
        finally:
            conn.close()

    def test_init_is_idempotent(self, tmp_path):
        db_path = tmp_path / "db.sqlite"
        init_db(db_path)
        init_db(db_path)
        conn = sqlite3.connect(str(db_path))
        try:
            assert conn.execute("SELECT COUNT(*) FROM roles").fetchone()[0] == 3
            assert conn.execute("SELECT COUNT(*) FROM application_requirements").fetchone()[0] == 4
        finally:
            conn.close()

    def test_every_migration_targets_a_column_missing_from_the_base_schema(self):
        for migration in MIGRATIONS:
            column = migration.split("ADD COLUMN")[1].split()[0]
            assert f"    {column} " not in SCHEMA_SQL
