import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime

from database import get_connection
from errors import PersistenceError

logger = logging.getLogger(__name__)


def _row_to_dict(row):
    if row is None:
        return None
    return dict(row)


def _rows_to_dicts(rows):
    return [dict(row) for row in rows]


def _now():
    return datetime.now().isoformat(timespec="seconds")


@contextmanager
def _cursor():
    """Yield a cursor inside one transaction; store failures become PersistenceError."""
    try:
        conn = get_connection()
    except sqlite3.Error as exc:
        logger.error("Could not open assessment store: %s", exc)
        raise PersistenceError(str(exc)) from exc

    try:
        cursor = conn.cursor()
        yield cursor
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        logger.error("Assessment store operation failed: %s", exc)
        raise PersistenceError(str(exc)) from exc
    finally:
        conn.close()


def _submission_from_row(row):
    submission = _row_to_dict(row)
    if submission is not None:
        submission["answers"] = json.loads(submission["answers"] or "{}")
    return submission


# Patient and doctor model operations

def create_patient(user_ref, full_name, age=None, gender=None, weight=None, height=None):
    with _cursor() as cursor:
        cursor.execute(
            """
            INSERT INTO Patient (user_ref, full_name, age, gender, weight, height, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (user_ref, full_name, age, gender, weight, height, _now()),
        )
        return cursor.lastrowid


def get_patient(patient_id):
    with _cursor() as cursor:
        cursor.execute("SELECT * FROM Patient WHERE id = ?", (patient_id,))
        return _row_to_dict(cursor.fetchone())


def get_patient_by_user_ref(user_ref):
    with _cursor() as cursor:
        cursor.execute("SELECT * FROM Patient WHERE user_ref = ?", (user_ref,))
        return _row_to_dict(cursor.fetchone())


def create_doctor(user_ref, full_name, specialization=None):
    with _cursor() as cursor:
        cursor.execute(
            """
            INSERT INTO Doctor (user_ref, full_name, specialization, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (user_ref, full_name, specialization, _now()),
        )
        return cursor.lastrowid


def get_doctor(doctor_id):
    with _cursor() as cursor:
        cursor.execute("SELECT * FROM Doctor WHERE id = ?", (doctor_id,))
        return _row_to_dict(cursor.fetchone())


def list_doctors(limit=6):
    with _cursor() as cursor:
        cursor.execute("SELECT * FROM Doctor ORDER BY full_name ASC LIMIT ?", (limit,))
        return _rows_to_dicts(cursor.fetchall())


# Assessment submission model operations

def create_submission_records(patient_id, answers, status, risk_score, risk_category,
                              recommendations, factors=None):
    """
    Insert a submission, its risk prediction and its recommendations together.

    Either all three kinds of row are written or none are.
    """
    timestamp = _now()
    with _cursor() as cursor:
        cursor.execute(
            """
            INSERT INTO HealthSubmission (patient_id, answers, status, submitted_at)
            VALUES (?, ?, ?, ?)
            """,
            (patient_id, json.dumps(answers), status, timestamp),
        )
        submission_id = cursor.lastrowid

        cursor.execute(
            """
            INSERT INTO RiskPrediction (submission_id, risk_score, risk_category, factors, generated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (submission_id, risk_score, risk_category, json.dumps(factors or []), timestamp),
        )

        cursor.executemany(
            """
            INSERT INTO Recommendation (submission_id, doctor_id, content, type, created_at)
            VALUES (?, NULL, ?, ?, ?)
            """,
            [
                (submission_id, rec["content"], rec["type"], timestamp)
                for rec in recommendations
            ],
        )
    return submission_id


def get_submission(submission_id):
    with _cursor() as cursor:
        cursor.execute(
            """
            SELECT hs.*, p.full_name AS patient_name
            FROM HealthSubmission hs
            JOIN Patient p ON p.id = hs.patient_id
            WHERE hs.id = ?
            """,
            (submission_id,),
        )
        return _submission_from_row(cursor.fetchone())


def get_prediction_for_submission(submission_id):
    with _cursor() as cursor:
        cursor.execute(
            """
            SELECT risk_score, risk_category, factors, generated_at
            FROM RiskPrediction
            WHERE submission_id = ?
            ORDER BY id DESC
            LIMIT 1
            """,
            (submission_id,),
        )
        prediction = _row_to_dict(cursor.fetchone())
    if prediction is not None:
        prediction["factors"] = json.loads(prediction["factors"] or "[]")
    return prediction


def get_recommendations_for_submission(submission_id):
    with _cursor() as cursor:
        cursor.execute(
            """
            SELECT content, type, doctor_id, created_at
            FROM Recommendation
            WHERE submission_id = ?
            ORDER BY id ASC
            """,
            (submission_id,),
        )
        return _rows_to_dicts(cursor.fetchall())


def list_submissions_for_patient(patient_id):
    with _cursor() as cursor:
        cursor.execute(
            """
            SELECT *
            FROM HealthSubmission
            WHERE patient_id = ?
            ORDER BY submitted_at DESC, id DESC
            """,
            (patient_id,),
        )
        return [_submission_from_row(row) for row in cursor.fetchall()]


def list_submissions_with_patients():
    with _cursor() as cursor:
        cursor.execute(
            """
            SELECT
                hs.id,
                hs.status,
                hs.submitted_at,
                p.id AS patient_id,
                p.full_name AS patient_name,
                rp.risk_score,
                rp.risk_category
            FROM HealthSubmission hs
            JOIN Patient p ON p.id = hs.patient_id
            LEFT JOIN RiskPrediction rp ON rp.submission_id = hs.id
            ORDER BY hs.submitted_at DESC, hs.id DESC
            """
        )
        return _rows_to_dicts(cursor.fetchall())


def mark_submission_reviewed(submission_id, doctor_id):
    with _cursor() as cursor:
        cursor.execute(
            """
            UPDATE HealthSubmission
            SET status = 'reviewed', reviewed_at = ?, reviewed_by = ?
            WHERE id = ?
            """,
            (_now(), doctor_id, submission_id),
        )
        return cursor.rowcount > 0


def add_recommendation(submission_id, content, rec_type, doctor_id=None):
    with _cursor() as cursor:
        cursor.execute(
            """
            INSERT INTO Recommendation (submission_id, doctor_id, content, type, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (submission_id, doctor_id, content, rec_type, _now()),
        )
        return cursor.lastrowid
