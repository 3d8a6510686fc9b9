import logging

from flask import Flask, jsonify, request, session
from flask_cors import CORS
from werkzeug.exceptions import BadRequest, HTTPException

import config
from assessment_session import AssessmentSession, complete_from_answers
from database import init_db
from errors import AssessmentStateError, NotFoundError, PersistenceError
from insight_api import generate_assessment_insight
from models import create_doctor, create_patient, get_patient_by_user_ref, list_doctors
from question_catalog import ADAPTIVE_QUESTIONNAIRE, questionnaire_to_dict
from risk_scoring_engine import BASIC_FORM_RISK_POLICY
from submission_service import (
    get_patient_dashboard,
    get_review_summary,
    get_submission_details,
    list_submissions_for_review,
    review_submission,
    submit_assessment,
)

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s | %(name)-22s | %(levelname)-7s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

ASSESSMENT_KEY = "assessment"
INSIGHT_KEY = "assessment_insight"

app = Flask(__name__)
CORS(app)
app.secret_key = config.SECRET_KEY


@app.before_request
def setup_database():
    init_db()


@app.errorhandler(PersistenceError)
def handle_persistence_error(exc):
    return jsonify(
        {
            "error": {
                "code": "persistence_failed",
                "message": "We could not save your data right now. Please try again.",
            }
        }
    ), 503


@app.errorhandler(NotFoundError)
def handle_not_found(exc):
    return jsonify({"error": {"code": "not_found", "message": str(exc)}}), 404


@app.errorhandler(AssessmentStateError)
def handle_state_error(exc):
    return jsonify({"error": {"code": "invalid_state", "message": str(exc)}}), 409


@app.errorhandler(HTTPException)
def handle_http_error(exc):
    return jsonify({"error": {"code": exc.name.lower().replace(" ", "_"), "message": exc.description}}), exc.code


def _json_body():
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object.")
    return body


def _require_int(body, key):
    value = body.get(key)
    if isinstance(value, bool):
        raise BadRequest(f"'{key}' must be an integer.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"'{key}' must be an integer.")


def _validation_response(error, question_id):
    return jsonify(
        {
            "error": {"code": error.code, "message": error.message},
            "question_id": question_id,
        }
    ), 422


def _load_assessment():
    data = session.get(ASSESSMENT_KEY)
    if not data:
        raise AssessmentStateError("No assessment in progress. Start a new one first.")
    return AssessmentSession.from_dict(data, ADAPTIVE_QUESTIONNAIRE)


def _save_assessment(assessment):
    session[ASSESSMENT_KEY] = assessment.to_dict()


def _assessment_view(assessment):
    view = {
        "status": assessment.status,
        "progress": assessment.progress(),
        "question": assessment.current_question(),
        "answers": assessment.answers,
        "can_go_back": bool(assessment.history) and not assessment.is_completed,
    }
    if assessment.is_completed:
        if INSIGHT_KEY not in session:
            session[INSIGHT_KEY] = generate_assessment_insight(
                assessment.risk, assessment.recommendations
            )
        view["result"] = assessment.risk
        view["recommendations"] = assessment.recommendations
        view["insight"] = session[INSIGHT_KEY]
    return view


@app.route("/health")
def health_check():
    return jsonify({"status": "ok"})


@app.route("/questionnaire")
def questionnaire():
    return jsonify(questionnaire_to_dict(ADAPTIVE_QUESTIONNAIRE))


@app.route("/assessment/start", methods=["POST"])
def start_assessment():
    assessment = AssessmentSession.start(ADAPTIVE_QUESTIONNAIRE)
    session.pop(INSIGHT_KEY, None)
    _save_assessment(assessment)
    return jsonify(_assessment_view(assessment)), 201


@app.route("/assessment/current")
def current_assessment():
    return jsonify(_assessment_view(_load_assessment()))


@app.route("/assessment/answer", methods=["POST"])
def answer_question():
    assessment = _load_assessment()
    body = _json_body()
    question = assessment.current_question()

    error = assessment.answer(body.get("value"))
    if error:
        return _validation_response(error, question["id"] if question else None)

    _save_assessment(assessment)
    return jsonify(_assessment_view(assessment))


@app.route("/assessment/back", methods=["POST"])
def go_back():
    assessment = _load_assessment()
    assessment.go_back()
    _save_assessment(assessment)
    return jsonify(_assessment_view(assessment))


@app.route("/assessment/submit", methods=["POST"])
def submit_current_assessment():
    assessment = _load_assessment()
    patient_id = _require_int(_json_body(), "patient_id")

    # On failure the session cookie still holds the finished assessment.
    submission_id = submit_assessment(patient_id, assessment)

    session.pop(ASSESSMENT_KEY, None)
    session.pop(INSIGHT_KEY, None)
    return jsonify({"submission_id": submission_id, "details": get_submission_details(submission_id)}), 201


@app.route("/assessment/quick", methods=["POST"])
def quick_assessment():
    body = _json_body()
    patient_id = _require_int(body, "patient_id")
    answers = body.get("answers")
    if not isinstance(answers, dict):
        raise BadRequest("'answers' must be an object keyed by question id.")

    assessment, question_id, error = complete_from_answers(
        answers, ADAPTIVE_QUESTIONNAIRE, policy=BASIC_FORM_RISK_POLICY
    )
    if error:
        return _validation_response(error, question_id)

    submission_id = submit_assessment(patient_id, assessment)
    return jsonify(
        {
            "submission_id": submission_id,
            "result": assessment.risk,
            "recommendations": assessment.recommendations,
            "insight": generate_assessment_insight(assessment.risk, assessment.recommendations),
        }
    ), 201


@app.route("/patients", methods=["POST"])
def register_patient():
    body = _json_body()
    user_ref = str(body.get("user_ref") or "").strip()
    full_name = str(body.get("full_name") or "").strip()
    if not user_ref or not full_name:
        raise BadRequest("'user_ref' and 'full_name' are required.")

    existing = get_patient_by_user_ref(user_ref)
    if existing:
        return jsonify({"patient_id": existing["id"], "created": False}), 200

    patient_id = create_patient(
        user_ref=user_ref,
        full_name=full_name,
        age=body.get("age"),
        gender=body.get("gender"),
        weight=body.get("weight"),
        height=body.get("height"),
    )
    return jsonify({"patient_id": patient_id, "created": True}), 201


@app.route("/patients/<int:patient_id>/dashboard")
def patient_dashboard(patient_id):
    return jsonify(get_patient_dashboard(patient_id))


@app.route("/doctors", methods=["GET", "POST"])
def doctors():
    if request.method == "POST":
        body = _json_body()
        user_ref = str(body.get("user_ref") or "").strip()
        full_name = str(body.get("full_name") or "").strip()
        if not user_ref or not full_name:
            raise BadRequest("'user_ref' and 'full_name' are required.")
        doctor_id = create_doctor(user_ref, full_name, body.get("specialization"))
        return jsonify({"doctor_id": doctor_id}), 201

    limit = request.args.get("limit", default=6, type=int)
    return jsonify({"doctors": list_doctors(limit=limit)})


@app.route("/doctor/submissions")
def doctor_submissions():
    status_filter = request.args.get("status", "all")
    search = request.args.get("search", "")
    try:
        rows = list_submissions_for_review(status_filter=status_filter, search=search)
    except ValueError as exc:
        raise BadRequest(str(exc))
    return jsonify({"submissions": rows})


@app.route("/doctor/summary")
def doctor_summary():
    return jsonify(get_review_summary())


@app.route("/submissions/<int:submission_id>")
def submission_details(submission_id):
    return jsonify(get_submission_details(submission_id))


@app.route("/submissions/<int:submission_id>/review", methods=["POST"])
def review(submission_id):
    body = _json_body()
    doctor_id = _require_int(body, "doctor_id")
    note = body.get("note")
    if note is not None and not isinstance(note, str):
        raise BadRequest("'note' must be a string.")
    try:
        details = review_submission(
            submission_id,
            doctor_id,
            note=note,
            note_type=body.get("note_type", "clinical"),
        )
    except ValueError as exc:
        raise BadRequest(str(exc))
    return jsonify(details)


if __name__ == "__main__":
    init_db()
    app.run(host="0.0.0.0", port=config.PORT)
