"""
Weighted-sum diabetes risk score.

score =
  age band points
+ BMI band points
+ family history points
+ activity / diet / smoking / sleep points (per answer value)
+ symptom points x selected symptoms ("none" selected counts as zero)
+ stress band points
capped at MAX_RISK_SCORE.

Every threshold and point value below is policy, not physiology: product can
retune them through build_risk_policy() without touching the algorithm.
"""

import math

AGE_HIGH_RISK_MIN = 45
AGE_HIGH_RISK_POINTS = 20
AGE_ELEVATED_RISK_MIN = 35
AGE_ELEVATED_RISK_POINTS = 10

BMI_OBESE_MIN = 30.0
BMI_OBESE_POINTS = 25
BMI_OVERWEIGHT_MIN = 25.0
BMI_OVERWEIGHT_POINTS = 15

FAMILY_HISTORY_POINTS = 15

ACTIVITY_LEVEL_POINTS = {"sedentary": 15, "light": 10}
DIET_HABITS_POINTS = {"poor": 15, "fair": 10}
SMOKING_POINTS = {"current": 10, "former": 5}
SLEEP_QUALITY_POINTS = {"poor": 10, "fair": 5}

SYMPTOM_POINTS = 5
NO_SYMPTOMS_VALUE = "none"

STRESS_HIGH_MIN = 8
STRESS_HIGH_POINTS = 10
STRESS_ELEVATED_MIN = 6
STRESS_ELEVATED_POINTS = 5

MAX_RISK_SCORE = 100
MODERATE_RISK_THRESHOLD = 30
CRITICAL_RISK_THRESHOLD = 70

LOW = "low"
MODERATE = "moderate"
CRITICAL = "critical"
RISK_CATEGORIES = (LOW, MODERATE, CRITICAL)

DEFAULT_RISK_POLICY = {
    "age_high_risk_min": AGE_HIGH_RISK_MIN,
    "age_high_risk_points": AGE_HIGH_RISK_POINTS,
    "age_elevated_risk_min": AGE_ELEVATED_RISK_MIN,
    "age_elevated_risk_points": AGE_ELEVATED_RISK_POINTS,
    "bmi_obese_min": BMI_OBESE_MIN,
    "bmi_obese_points": BMI_OBESE_POINTS,
    "bmi_overweight_min": BMI_OVERWEIGHT_MIN,
    "bmi_overweight_points": BMI_OVERWEIGHT_POINTS,
    "family_history_points": FAMILY_HISTORY_POINTS,
    "activity_level_points": ACTIVITY_LEVEL_POINTS,
    "diet_habits_points": DIET_HABITS_POINTS,
    "smoking_points": SMOKING_POINTS,
    "sleep_quality_points": SLEEP_QUALITY_POINTS,
    "symptom_points": SYMPTOM_POINTS,
    "stress_high_min": STRESS_HIGH_MIN,
    "stress_high_points": STRESS_HIGH_POINTS,
    "stress_elevated_min": STRESS_ELEVATED_MIN,
    "stress_elevated_points": STRESS_ELEVATED_POINTS,
    "max_risk_score": MAX_RISK_SCORE,
    "moderate_risk_threshold": MODERATE_RISK_THRESHOLD,
    "critical_risk_threshold": CRITICAL_RISK_THRESHOLD,
}


def build_risk_policy(**overrides):
    unknown = set(overrides) - set(DEFAULT_RISK_POLICY)
    if unknown:
        raise ValueError(f"Unknown risk policy keys: {', '.join(sorted(unknown))}")
    policy = {
        key: dict(value) if isinstance(value, dict) else value
        for key, value in DEFAULT_RISK_POLICY.items()
    }
    policy.update(overrides)
    return policy


# Diet schedule for the one-page form (POST /assessment/quick).
BASIC_FORM_RISK_POLICY = build_risk_policy(diet_habits_points={"poor": 10, "fair": 5})


def _to_float(value, default=0.0):
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def _to_int(value, default=0):
    return int(_to_float(value, default))


def calculate_bmi(weight_kg, height_cm):
    weight = _to_float(weight_kg)
    height_m = _to_float(height_cm) / 100.0
    if weight <= 0 or height_m <= 0:
        return None
    return weight / (height_m * height_m)


def risk_category(score, policy=None):
    policy = policy or DEFAULT_RISK_POLICY
    if score < policy["moderate_risk_threshold"]:
        return LOW
    if score < policy["critical_risk_threshold"]:
        return MODERATE
    return CRITICAL


def health_score(risk_score):
    return max(0, 100 - int(risk_score))


def _age_points(answers, policy):
    age = _to_int(answers.get("age"))
    if age >= policy["age_high_risk_min"]:
        return policy["age_high_risk_points"]
    if age >= policy["age_elevated_risk_min"]:
        return policy["age_elevated_risk_points"]
    return 0


def _bmi_points(answers, policy):
    bmi = calculate_bmi(answers.get("weight"), answers.get("height"))
    if bmi is None:
        return 0
    if bmi >= policy["bmi_obese_min"]:
        return policy["bmi_obese_points"]
    if bmi >= policy["bmi_overweight_min"]:
        return policy["bmi_overweight_points"]
    return 0


def _symptom_points(answers, policy):
    symptoms = answers.get("symptoms") or []
    if not isinstance(symptoms, (list, tuple)) or NO_SYMPTOMS_VALUE in symptoms:
        return 0
    return len(symptoms) * policy["symptom_points"]


def _stress_points(answers, policy):
    stress = _to_int(answers.get("stress-level"), default=1)
    if stress >= policy["stress_high_min"]:
        return policy["stress_high_points"]
    if stress >= policy["stress_elevated_min"]:
        return policy["stress_elevated_points"]
    return 0


def _lookup_points(table_key, answer_key):
    def points(answers, policy):
        value = answers.get(answer_key)
        if not isinstance(value, str):
            return 0
        return policy[table_key].get(value, 0)

    return points


def _family_history_points(answers, policy):
    return policy["family_history_points"] if answers.get("family-history") == "yes" else 0


_FACTORS = [
    ("age", _age_points),
    ("bmi", _bmi_points),
    ("family_history", _family_history_points),
    ("activity_level", _lookup_points("activity_level_points", "activity-level")),
    ("diet_habits", _lookup_points("diet_habits_points", "diet-habits")),
    ("symptoms", _symptom_points),
    ("smoking", _lookup_points("smoking_points", "smoking")),
    ("stress_level", _stress_points),
    ("sleep_quality", _lookup_points("sleep_quality_points", "sleep-quality")),
]


def calculate_risk(answers, policy=None):
    """
    Score a completed answer store.

    Missing or unparsable answers contribute zero, so this never fails.
    Returns score, category and the non-zero factor contributions in
    evaluation order.
    """
    policy = policy or DEFAULT_RISK_POLICY
    answers = answers or {}

    factors = []
    total = 0
    for name, rule in _FACTORS:
        points = rule(answers, policy)
        if points:
            factors.append({"factor": name, "points": points})
            total += points

    score = min(total, policy["max_risk_score"])
    return {
        "score": score,
        "category": risk_category(score, policy),
        "factors": factors,
    }
