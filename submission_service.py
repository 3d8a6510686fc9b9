import logging

from errors import AssessmentStateError, NotFoundError
from models import (
    add_recommendation,
    create_submission_records,
    get_doctor,
    get_patient,
    get_prediction_for_submission,
    get_recommendations_for_submission,
    get_submission,
    list_submissions_for_patient,
    list_submissions_with_patients,
    mark_submission_reviewed,
)
from recommendation_engine import CLINICAL, LIFESTYLE, motivational_message
from risk_scoring_engine import CRITICAL, health_score

logger = logging.getLogger(__name__)

REVIEW_FILTERS = ("all", "pending", "reviewed", "critical")


def submit_assessment(patient_id, session):
    """
    Persist a completed session as submission + risk prediction + recommendations.

    PersistenceError propagates unchanged; the session keeps its answers and
    results so the caller can offer a retry.
    """
    if not session.is_completed:
        raise AssessmentStateError("Assessment is not completed yet")

    patient = get_patient(patient_id)
    if not patient:
        raise NotFoundError(f"Patient {patient_id} not found")

    payload = session.submission_payload(patient["id"])
    submission_id = create_submission_records(
        patient_id=patient["id"],
        answers=payload["submission"]["answers"],
        status=payload["submission"]["status"],
        risk_score=payload["risk_prediction"]["risk_score"],
        risk_category=payload["risk_prediction"]["risk_category"],
        recommendations=payload["recommendations"],
        factors=session.risk.get("factors"),
    )
    logger.info("Stored submission %s for patient %s", submission_id, patient["id"])
    return submission_id


def get_submission_details(submission_id):
    submission = get_submission(submission_id)
    if not submission:
        raise NotFoundError(f"Submission {submission_id} not found")
    submission["risk_prediction"] = get_prediction_for_submission(submission_id)
    submission["recommendations"] = get_recommendations_for_submission(submission_id)
    return submission


def get_patient_dashboard(patient_id):
    patient = get_patient(patient_id)
    if not patient:
        raise NotFoundError(f"Patient {patient_id} not found")

    submissions = []
    for submission in list_submissions_for_patient(patient_id):
        submission["risk_prediction"] = get_prediction_for_submission(submission["id"])
        submission["recommendations"] = get_recommendations_for_submission(submission["id"])
        submissions.append(submission)

    latest_prediction = submissions[0]["risk_prediction"] if submissions else None
    latest_category = latest_prediction["risk_category"] if latest_prediction else None

    return {
        "patient": patient,
        "submissions": submissions,
        "latest_prediction": latest_prediction,
        "health_score": health_score(latest_prediction["risk_score"]) if latest_prediction else 0,
        "total_recommendations": sum(len(s["recommendations"]) for s in submissions),
        "message": motivational_message(latest_category),
    }


def list_submissions_for_review(status_filter="all", search=""):
    """Doctor worklist, newest first, filtered by status or critical risk and patient name."""
    status_filter = (status_filter or "all").strip().lower()
    if status_filter not in REVIEW_FILTERS:
        raise ValueError(f"Unknown filter '{status_filter}'")

    rows = list_submissions_with_patients()

    query = (search or "").strip().lower()
    if query:
        rows = [r for r in rows if query in (r["patient_name"] or "").lower()]

    if status_filter in ("pending", "reviewed"):
        rows = [r for r in rows if r["status"] == status_filter]
    elif status_filter == "critical":
        rows = [r for r in rows if r["risk_category"] == CRITICAL]

    return rows


def get_review_summary():
    rows = list_submissions_with_patients()
    return {
        "total": len(rows),
        "pending": sum(1 for r in rows if r["status"] == "pending"),
        "reviewed": sum(1 for r in rows if r["status"] == "reviewed"),
        "critical": sum(1 for r in rows if r["risk_category"] == CRITICAL),
    }


def review_submission(submission_id, doctor_id, note=None, note_type=CLINICAL):
    if not get_doctor(doctor_id):
        raise NotFoundError(f"Doctor {doctor_id} not found")
    if note_type not in (CLINICAL, LIFESTYLE):
        raise ValueError(f"Unknown recommendation type '{note_type}'")
    if not mark_submission_reviewed(submission_id, doctor_id):
        raise NotFoundError(f"Submission {submission_id} not found")

    if note and note.strip():
        add_recommendation(submission_id, note.strip(), note_type, doctor_id=doctor_id)

    logger.info("Submission %s reviewed by doctor %s", submission_id, doctor_id)
    return get_submission_details(submission_id)
