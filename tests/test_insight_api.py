from unittest.mock import MagicMock, patch

import insight_api
from explanation_engine import explain_risk_result
from insight_api import generate_assessment_insight

RISK = {
    "score": 45,
    "category": "moderate",
    "factors": [{"factor": "age", "points": 20}, {"factor": "bmi", "points": 25}],
}
RECS = [{"content": "Consider annual diabetes screening.", "type": "clinical"}]


class TestExplainRiskResult:
    def test_lists_factors_largest_first(self):
        text = explain_risk_result(RISK, RECS)
        assert text.startswith("Assessment Summary:")
        assert "45/100 (moderate)" in text
        assert text.index("Body mass index") < text.index("Age")
        assert "1 personalised recommendation(s)" in text

    def test_no_factors(self):
        text = explain_risk_result({"score": 0, "category": "low", "factors": []})
        assert "No risk factors" in text
        assert "recommendation" not in text


class TestGenerateAssessmentInsight:
    def test_without_key_uses_rule_based_summary(self):
        with patch.object(insight_api.genai, "Client") as client_cls:
            text = generate_assessment_insight(RISK, RECS)
        client_cls.assert_not_called()
        assert text == explain_risk_result(RISK, RECS)

    def test_uses_gemini_text_when_configured(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        with patch.object(insight_api.genai, "Client") as client_cls:
            client_cls.return_value.models.generate_content.return_value = MagicMock(
                text="  You are at moderate risk. Small changes help.  "
            )
            text = generate_assessment_insight(RISK, RECS)

        assert text == "You are at moderate risk. Small changes help."
        client_cls.assert_called_once_with(api_key="test-key")
        prompt = client_cls.return_value.models.generate_content.call_args.kwargs["contents"]
        assert "Risk category: moderate" in prompt
        assert "- Body mass index: +25" in prompt

    def test_empty_reply_falls_back(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        with patch.object(insight_api.genai, "Client") as client_cls:
            client_cls.return_value.models.generate_content.return_value = MagicMock(text=None)
            text = generate_assessment_insight(RISK, RECS)
        assert text.startswith("Assessment Summary:")

    def test_api_error_falls_back(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "test-key")
        with patch.object(insight_api.genai, "Client") as client_cls:
            client_cls.return_value.models.generate_content.side_effect = RuntimeError("quota")
            text = generate_assessment_insight(RISK, RECS)
        assert text == explain_risk_result(RISK, RECS)
