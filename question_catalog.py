import copy
from types import MappingProxyType

from errors import CatalogIntegrityError

SINGLE_CHOICE = "single-choice"
MULTIPLE_CHOICE = "multiple-choice"
NUMBER = "number"
SLIDER = "slider"

QUESTION_TYPES = {SINGLE_CHOICE, MULTIPLE_CHOICE, NUMBER, SLIDER}
CHOICE_TYPES = {SINGLE_CHOICE, MULTIPLE_CHOICE}


def _option(value, text):
    return {"id": value, "text": text, "value": value}


DIABETES_QUESTIONS = [
    {
        "id": "age",
        "text": "How old are you?",
        "description": "Risk of type 2 diabetes rises with age.",
        "type": NUMBER,
        "min": 1,
        "max": 120,
        "unit": "years",
        "next_question_id": "gender",
    },
    {
        "id": "gender",
        "text": "What is your gender?",
        "type": SINGLE_CHOICE,
        "options": [
            _option("male", "Male"),
            _option("female", "Female"),
            _option("other", "Other"),
        ],
        "next_question_id": "weight",
    },
    {
        "id": "weight",
        "text": "What is your weight?",
        "type": NUMBER,
        "min": 20,
        "max": 300,
        "unit": "kg",
        "next_question_id": "height",
    },
    {
        "id": "height",
        "text": "What is your height?",
        "description": "Used together with your weight to estimate BMI.",
        "type": NUMBER,
        "min": 100,
        "max": 250,
        "unit": "cm",
        "next_question_id": "family-history",
    },
    {
        "id": "family-history",
        "text": "Does anyone in your family have diabetes?",
        "type": SINGLE_CHOICE,
        "options": [
            _option("yes", "Yes"),
            _option("no", "No"),
            _option("unknown", "I don't know"),
        ],
        "branches": {"yes": "family-relation"},
        "next_question_id": "activity-level",
    },
    {
        "id": "family-relation",
        "text": "Who in your family has diabetes?",
        "type": SINGLE_CHOICE,
        "options": [
            _option("parent", "Parent"),
            _option("sibling", "Brother or sister"),
            _option("other", "Other relative"),
        ],
        "next_question_id": "activity-level",
    },
    {
        "id": "activity-level",
        "text": "How physically active are you?",
        "type": SINGLE_CHOICE,
        "options": [
            _option("sedentary", "Sedentary"),
            _option("light", "Light"),
            _option("moderate", "Moderate"),
            _option("active", "Very active"),
        ],
        "next_question_id": "diet-habits",
    },
    {
        "id": "diet-habits",
        "text": "How would you describe your eating habits?",
        "type": SINGLE_CHOICE,
        "options": [
            _option("excellent", "Excellent"),
            _option("good", "Good"),
            _option("fair", "Fair"),
            _option("poor", "Poor"),
        ],
        "next_question_id": "symptoms",
    },
    {
        "id": "symptoms",
        "text": "Do you have any of these symptoms?",
        "description": "Select all that apply.",
        "type": MULTIPLE_CHOICE,
        "options": [
            _option("frequent-urination", "Frequent urination"),
            _option("excessive-thirst", "Excessive thirst"),
            _option("weight-loss", "Unexplained weight loss"),
            _option("fatigue", "Fatigue"),
            _option("blurred-vision", "Blurred vision"),
            _option("slow-healing", "Slow healing wounds"),
            _option("frequent-infections", "Frequent infections"),
            _option("none", "None of the above"),
        ],
        "next_question_id": "smoking",
    },
    {
        "id": "smoking",
        "text": "Do you smoke?",
        "type": SINGLE_CHOICE,
        "options": [
            _option("never", "Never"),
            _option("former", "I used to"),
            _option("current", "Yes, currently"),
        ],
        "branches": {"current": "smoking-amount"},
        "next_question_id": "stress-level",
    },
    {
        "id": "smoking-amount",
        "text": "How many cigarettes do you smoke per day?",
        "type": SINGLE_CHOICE,
        "options": [
            _option("1-5", "1 to 5"),
            _option("6-15", "6 to 15"),
            _option("16+", "More than 15"),
        ],
        "next_question_id": "stress-level",
    },
    {
        "id": "stress-level",
        "text": "How stressed do you feel on a typical day?",
        "description": "1 means very relaxed, 10 means extremely stressed.",
        "type": SLIDER,
        "min": 1,
        "max": 10,
        "next_question_id": "sleep-quality",
    },
    {
        "id": "sleep-quality",
        "text": "How well do you usually sleep?",
        "type": SINGLE_CHOICE,
        "options": [
            _option("good", "Good"),
            _option("fair", "Fair"),
            _option("poor", "Poor"),
        ],
    },
]


def _check_question(question, known_ids):
    qid = question.get("id")
    qtype = question.get("type")
    if qtype not in QUESTION_TYPES:
        raise CatalogIntegrityError(f"Question '{qid}' has unknown type '{qtype}'")

    option_values = [opt["value"] for opt in question.get("options") or []]
    if qtype in CHOICE_TYPES and not option_values:
        raise CatalogIntegrityError(f"Choice question '{qid}' has no options")

    next_id = question.get("next_question_id")
    if next_id is not None and next_id not in known_ids:
        raise CatalogIntegrityError(
            f"Question '{qid}' points to unknown next question '{next_id}'"
        )

    for option_value, target in (question.get("branches") or {}).items():
        if option_value not in option_values:
            raise CatalogIntegrityError(
                f"Question '{qid}' branches on '{option_value}', which is not one of its options"
            )
        if target not in known_ids:
            raise CatalogIntegrityError(
                f"Question '{qid}' branches to unknown question '{target}'"
            )


def load_questionnaire(questions, start_question_id):
    """
    Build a questionnaire from plain question dicts.

    Every successor and branch target must name a question in the catalog;
    violations raise CatalogIntegrityError here rather than mid-session.
    The lookup tables are read-only views over a private deep copy.
    """
    questions = copy.deepcopy(list(questions))
    by_id = {}
    for question in questions:
        qid = question.get("id")
        if not qid:
            raise CatalogIntegrityError("Every question needs an id")
        if qid in by_id:
            raise CatalogIntegrityError(f"Duplicate question id '{qid}'")
        by_id[qid] = question

    if start_question_id not in by_id:
        raise CatalogIntegrityError(f"Start question '{start_question_id}' is not in the catalog")

    for question in questions:
        _check_question(question, by_id)

    return {
        "questions": tuple(questions),
        "start_question_id": start_question_id,
        "questions_by_id": MappingProxyType(by_id),
        "order": MappingProxyType({q["id"]: idx for idx, q in enumerate(questions)}),
    }


def get_question(questionnaire, question_id):
    if question_id is None:
        return None
    return questionnaire["questions_by_id"].get(question_id)


def question_index(questionnaire, question_id):
    return questionnaire["order"].get(question_id, -1)


def is_terminal_question(question):
    return not question.get("next_question_id") and not question.get("branches")


def questionnaire_to_dict(questionnaire):
    return {
        "start_question_id": questionnaire["start_question_id"],
        "questions": [copy.deepcopy(q) for q in questionnaire["questions"]],
    }


ADAPTIVE_QUESTIONNAIRE = load_questionnaire(DIABETES_QUESTIONS, start_question_id="age")
