_FACTOR_LABELS = {
    "age": "Age",
    "bmi": "Body mass index",
    "family_history": "Family history of diabetes",
    "activity_level": "Low physical activity",
    "diet_habits": "Dietary habits",
    "symptoms": "Reported symptoms",
    "smoking": "Smoking",
    "stress_level": "Stress level",
    "sleep_quality": "Sleep quality",
}

_CATEGORY_ACTIONS = {
    "low": "Keep up your current habits and repeat the assessment every year.",
    "moderate": "Plan a routine screening with your healthcare provider.",
    "critical": "Contact a healthcare provider soon for a full diabetes screening.",
}


def explain_risk_result(risk_result, recommendations=None):
    """Create a plain-text summary of what drove a risk score."""
    lines = ["Assessment Summary:"]
    lines.append(f"- Risk score: {risk_result['score']}/100 ({risk_result['category']})")

    factors = sorted(risk_result.get("factors") or [], key=lambda f: f["points"], reverse=True)
    if factors:
        lines.append("- Main contributing factors:")
        for factor in factors:
            label = _FACTOR_LABELS.get(factor["factor"], factor["factor"])
            lines.append(f"  - {label} (+{factor['points']})")
    else:
        lines.append("- No risk factors were found in your answers")

    lines.append(f"- Suggested action: {_CATEGORY_ACTIONS.get(risk_result['category'], '')}".rstrip())

    if recommendations:
        lines.append(f"- {len(recommendations)} personalised recommendation(s) available")

    return "\n".join(lines)
