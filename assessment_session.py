import logging

from answer_validator import normalize_answer, validate_answer
from errors import AssessmentStateError
from navigation_engine import (
    calculate_progress,
    next_question,
    previous_question,
    selected_option_for,
)
from question_catalog import ADAPTIVE_QUESTIONNAIRE, get_question
from recommendation_engine import generate_recommendations
from risk_scoring_engine import calculate_risk

logger = logging.getLogger(__name__)

IN_PROGRESS = "in_progress"
COMPLETED = "completed"

SUBMISSION_PENDING = "pending"


class AssessmentSession:
    """
    One patient's walk through a questionnaire.

    The session owns its answer store. Scoring and recommendations run once,
    when navigation reports there is no next question.
    """

    def __init__(self, questionnaire, current_question_id, answers=None, history=None,
                 status=IN_PROGRESS, risk=None, recommendations=None, policy=None):
        self.questionnaire = questionnaire
        self.policy = policy
        self.current_question_id = current_question_id
        self.answers = dict(answers or {})
        self.history = list(history or [])
        self.status = status
        self.risk = risk
        self.recommendations = recommendations

    @classmethod
    def start(cls, questionnaire=None, policy=None):
        questionnaire = questionnaire or ADAPTIVE_QUESTIONNAIRE
        return cls(questionnaire, questionnaire["start_question_id"], policy=policy)

    @property
    def is_completed(self):
        return self.status == COMPLETED

    def current_question(self):
        if self.is_completed:
            return None
        return get_question(self.questionnaire, self.current_question_id)

    def progress(self):
        if self.is_completed:
            return 100
        return calculate_progress(self.current_question_id, self.answers, self.questionnaire)

    def answer(self, value):
        """
        Offer an answer to the current question.

        Returns the ValidationError when the answer is rejected (the store
        is left untouched), otherwise None after advancing or completing.
        """
        question = self.current_question()
        if question is None:
            raise AssessmentStateError("Assessment is already completed")

        error = validate_answer(question, value)
        if error:
            return error

        stored = normalize_answer(question, value)
        self.answers[question["id"]] = stored

        selected = selected_option_for(question, stored)
        following = next_question(question["id"], selected, self.answers, self.questionnaire)
        if following is None:
            self._complete()
        else:
            self.history.append(question["id"])
            self.current_question_id = following["id"]
        return None

    def go_back(self):
        if self.is_completed:
            raise AssessmentStateError("Cannot go back after the assessment is completed")
        previous = previous_question(self.history, self.questionnaire)
        if previous is None:
            return None
        self.history.pop()
        self.current_question_id = previous["id"]
        return previous

    def _complete(self):
        # Answers left behind on a branch the patient backed out of are dropped.
        visited = set(self.history)
        visited.add(self.current_question_id)
        self.answers = {qid: value for qid, value in self.answers.items() if qid in visited}

        self.risk = calculate_risk(self.answers, self.policy)
        self.recommendations = generate_recommendations(self.answers, self.risk["category"])
        self.status = COMPLETED
        self.current_question_id = None
        logger.info(
            "Assessment completed: score=%s category=%s recommendations=%d",
            self.risk["score"],
            self.risk["category"],
            len(self.recommendations),
        )

    def submission_payload(self, patient_id):
        if not self.is_completed:
            raise AssessmentStateError("Assessment is not completed yet")
        return {
            "submission": {
                "patient_id": patient_id,
                "answers": dict(self.answers),
                "status": SUBMISSION_PENDING,
            },
            "risk_prediction": {
                "risk_score": self.risk["score"],
                "risk_category": self.risk["category"],
            },
            "recommendations": [dict(rec) for rec in self.recommendations],
        }

    def to_dict(self):
        return {
            "current_question_id": self.current_question_id,
            "answers": dict(self.answers),
            "history": list(self.history),
            "status": self.status,
            "risk": self.risk,
            "recommendations": self.recommendations,
        }

    @classmethod
    def from_dict(cls, data, questionnaire=None):
        questionnaire = questionnaire or ADAPTIVE_QUESTIONNAIRE
        status = data.get("status", IN_PROGRESS)
        current_id = data.get("current_question_id")
        if status != COMPLETED and get_question(questionnaire, current_id) is None:
            raise AssessmentStateError(f"Unknown question '{current_id}' in saved session")
        return cls(
            questionnaire,
            current_id,
            answers=data.get("answers"),
            history=data.get("history"),
            status=status,
            risk=data.get("risk"),
            recommendations=data.get("recommendations"),
        )


def complete_from_answers(answers, questionnaire=None, policy=None):
    """
    Replay a one-page form through the adaptive walk.

    Returns (session, None, None) when every visited question accepts its
    answer, or (session, question_id, error) for the first rejected one.
    Answers for questions off the walked path are ignored.
    """
    session = AssessmentSession.start(questionnaire, policy=policy)
    answers = answers or {}
    while not session.is_completed:
        question = session.current_question()
        error = session.answer(answers.get(question["id"]))
        if error:
            return session, question["id"], error
    return session, None, None
