import sqlite3
from pathlib import Path

import config

DB_PATH = config.DB_PATH


def get_connection():
    db_file = Path(DB_PATH)
    db_file.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_file))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def create_tables(conn):
    cursor = conn.cursor()

    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS Patient (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_ref TEXT NOT NULL UNIQUE,
            full_name TEXT NOT NULL,
            age INTEGER,
            gender TEXT,
            weight REAL,
            height REAL,
            created_at TEXT NOT NULL
        )
        """
    )

    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS Doctor (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_ref TEXT NOT NULL UNIQUE,
            full_name TEXT NOT NULL,
            specialization TEXT,
            created_at TEXT NOT NULL
        )
        """
    )

    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS HealthSubmission (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            patient_id INTEGER NOT NULL,
            answers TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending',
            submitted_at TEXT NOT NULL,
            FOREIGN KEY (patient_id) REFERENCES Patient (id)
        )
        """
    )

    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS RiskPrediction (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            submission_id INTEGER NOT NULL,
            risk_score INTEGER NOT NULL,
            risk_category TEXT NOT NULL,
            generated_at TEXT NOT NULL,
            FOREIGN KEY (submission_id) REFERENCES HealthSubmission (id)
        )
        """
    )

    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS Recommendation (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            submission_id INTEGER NOT NULL,
            doctor_id INTEGER,
            content TEXT NOT NULL,
            type TEXT NOT NULL,
            created_at TEXT NOT NULL,
            FOREIGN KEY (submission_id) REFERENCES HealthSubmission (id),
            FOREIGN KEY (doctor_id) REFERENCES Doctor (id)
        )
        """
    )

    conn.commit()


def _add_column_if_missing(conn, table_name, column_name, column_ddl):
    cursor = conn.cursor()
    cursor.execute(f"PRAGMA table_info({table_name})")
    rows = [dict(row) for row in cursor.fetchall()]
    existing_columns = {row["name"] for row in rows}

    if column_name not in existing_columns:
        cursor.execute(f"ALTER TABLE {table_name} ADD COLUMN {column_name} {column_ddl}")


def migrate_schema(conn):
    # Safe, additive migrations only.
    _add_column_if_missing(conn, "HealthSubmission", "reviewed_at", "TEXT")
    _add_column_if_missing(conn, "HealthSubmission", "reviewed_by", "INTEGER")
    _add_column_if_missing(conn, "RiskPrediction", "factors", "TEXT")

    conn.commit()


def seed_doctors(conn):
    cursor = conn.cursor()
    cursor.execute("SELECT COUNT(*) AS count FROM Doctor")
    existing = cursor.fetchone()["count"]

    if existing > 0:
        return

    doctors = [
        ("seed-doctor-1", "Dr. Amina Uwase", "endocrinology", "2024-01-01T00:00:00"),
        ("seed-doctor-2", "Dr. Jean Habimana", "general practice", "2024-01-01T00:00:00"),
        ("seed-doctor-3", "Dr. Claire Mukamana", "internal medicine", "2024-01-01T00:00:00"),
    ]

    cursor.executemany(
        """
        INSERT INTO Doctor (user_ref, full_name, specialization, created_at)
        VALUES (?, ?, ?, ?)
        """,
        doctors,
    )
    conn.commit()


def init_db():
    conn = get_connection()
    try:
        create_tables(conn)
        migrate_schema(conn)
        seed_doctors(conn)
    finally:
        conn.close()
