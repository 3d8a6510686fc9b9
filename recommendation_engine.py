from risk_scoring_engine import CRITICAL, LOW, MODERATE, _to_int

LIFESTYLE = "lifestyle"
CLINICAL = "clinical"

STRESS_RECOMMENDATION_MIN = 7

CRITICAL_RISK_ADVICE = (
    "Schedule an appointment with a healthcare provider within 2 weeks "
    "for comprehensive diabetes screening."
)
MODERATE_RISK_ADVICE = (
    "Consider annual diabetes screening and maintain regular check-ups "
    "with your healthcare provider."
)
SEDENTARY_ADVICE = (
    "Start with 10-minute walks after meals. Gradually increase to 30 minutes "
    "of daily activity."
)
POOR_DIET_ADVICE = (
    "Focus on whole foods: vegetables, lean proteins, and whole grains. "
    "Limit processed foods and sugary drinks."
)
STRESS_ADVICE = (
    "Practice stress management techniques like deep breathing, meditation, "
    "or yoga for 10 minutes daily."
)


def _recommendation(content, rec_type):
    return {"content": content, "type": rec_type}


def generate_recommendations(answers, category):
    """
    Build the ordered recommendation list for a completed assessment.

    Every matching rule contributes one item. The clinical item for the
    risk category comes first, lifestyle items follow.
    """
    answers = answers or {}
    recommendations = []

    if category == CRITICAL:
        recommendations.append(_recommendation(CRITICAL_RISK_ADVICE, CLINICAL))
    elif category == MODERATE:
        recommendations.append(_recommendation(MODERATE_RISK_ADVICE, CLINICAL))

    if answers.get("activity-level") == "sedentary":
        recommendations.append(_recommendation(SEDENTARY_ADVICE, LIFESTYLE))

    if answers.get("diet-habits") == "poor":
        recommendations.append(_recommendation(POOR_DIET_ADVICE, LIFESTYLE))

    if _to_int(answers.get("stress-level"), default=1) >= STRESS_RECOMMENDATION_MIN:
        recommendations.append(_recommendation(STRESS_ADVICE, LIFESTYLE))

    return recommendations


def motivational_message(category):
    if category is None:
        return "Ready to start your health journey?"
    messages = {
        LOW: "Great job! Keep up the healthy habits!",
        MODERATE: "You're on the right track! Small changes make big differences.",
        CRITICAL: "Let's work together to improve your health.",
    }
    return messages.get(category, "Every step counts towards better health!")
