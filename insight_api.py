import logging
import os

from google import genai

import config
from explanation_engine import _FACTOR_LABELS, explain_risk_result

logger = logging.getLogger(__name__)


def _get_client():
    api_key = os.environ.get("GEMINI_API_KEY")
    if not api_key:
        return None
    return genai.Client(api_key=api_key)


def _format_factors(factors):
    if not factors:
        return "None"
    return "\n".join(
        f"- {_FACTOR_LABELS.get(f['factor'], f['factor'])}: +{f['points']}" for f in factors
    )


def _format_recommendations(recommendations):
    if not recommendations:
        return "None"
    return "\n".join(f"- [{r['type']}] {r['content']}" for r in recommendations)


def generate_assessment_insight(risk_result, recommendations):
    """
    Short patient-facing narrative for a completed assessment.

    Falls back to the rule-based explanation when Gemini is not configured
    or the call fails.
    """
    fallback = explain_risk_result(risk_result, recommendations)

    prompt = f"""
You are a friendly diabetes-prevention health coach.

Risk score (0-100): {risk_result['score']}
Risk category: {risk_result['category']}

Contributing factors:
{_format_factors(risk_result.get('factors'))}

Recommendations already given:
{_format_recommendations(recommendations)}

Write an encouraging summary for the patient.

STRICT RULES:
- At most 4 sentences.
- Do not diagnose; this is a screening estimate.
- Do not add new medical advice beyond the recommendations above.
"""

    client = _get_client()
    if not client:
        return fallback

    try:
        response = client.models.generate_content(
            model=config.GEMINI_MODEL,
            contents=prompt,
            config={"temperature": 0.4},
        )
        text = (response.text or "").strip()
        if not text:
            return fallback
        return text
    except Exception:
        logger.warning("Gemini insight generation failed; using rule-based summary", exc_info=True)
        return fallback
