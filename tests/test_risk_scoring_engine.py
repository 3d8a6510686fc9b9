import pytest

from risk_scoring_engine import (
    BASIC_FORM_RISK_POLICY,
    CRITICAL,
    DEFAULT_RISK_POLICY,
    LOW,
    MODERATE,
    build_risk_policy,
    calculate_bmi,
    calculate_risk,
    health_score,
    risk_category,
)


class TestConcreteScenarios:
    def test_high_risk_profile_scores_ninety(self, high_risk_answers):
        result = calculate_risk(high_risk_answers)
        assert result["score"] == 90
        assert result["category"] == CRITICAL
        assert {f["factor"]: f["points"] for f in result["factors"]} == {
            "age": 20,
            "bmi": 25,
            "family_history": 15,
            "activity_level": 15,
            "diet_habits": 15,
        }

    def test_empty_symptom_list_adds_nothing(self, high_risk_answers):
        high_risk_answers["symptoms"] = []
        assert calculate_risk(high_risk_answers)["score"] == 90

    def test_low_risk_profile_scores_zero(self, low_risk_answers):
        result = calculate_risk(low_risk_answers)
        assert result == {"score": 0, "category": LOW, "factors": []}


class TestFactors:
    @pytest.mark.parametrize("age,points", [("34", 0), ("35", 10), ("44", 10), ("45", 20), ("80", 20)])
    def test_age_bands(self, age, points):
        assert calculate_risk({"age": age})["score"] == points

    @pytest.mark.parametrize(
        "weight,height,points",
        [("70", "200", 0), ("100", "200", 15), ("119", "200", 15), ("120", "200", 25)],
    )
    def test_bmi_bands(self, weight, height, points):
        assert calculate_risk({"weight": weight, "height": height})["score"] == points

    def test_bmi_needs_both_measurements(self):
        assert calculate_risk({"weight": "150"})["score"] == 0

    def test_each_symptom_adds_five(self):
        assert calculate_risk({"symptoms": ["fatigue", "blurred-vision", "excessive-thirst"]})["score"] == 15

    def test_none_selected_cancels_symptoms(self):
        assert calculate_risk({"symptoms": ["fatigue", "none"]})["score"] == 0

    @pytest.mark.parametrize("stress,points", [(1, 0), (5, 0), (6, 5), (7, 5), (8, 10), (10, 10)])
    def test_stress_bands(self, stress, points):
        assert calculate_risk({"stress-level": stress})["score"] == points

    @pytest.mark.parametrize(
        "key,value,points",
        [
            ("family-history", "yes", 15),
            ("family-history", "unknown", 0),
            ("activity-level", "sedentary", 15),
            ("activity-level", "light", 10),
            ("activity-level", "moderate", 0),
            ("diet-habits", "poor", 15),
            ("diet-habits", "fair", 10),
            ("diet-habits", "good", 0),
            ("smoking", "current", 10),
            ("smoking", "former", 5),
            ("smoking", "never", 0),
            ("sleep-quality", "poor", 10),
            ("sleep-quality", "fair", 5),
            ("sleep-quality", "good", 0),
        ],
    )
    def test_lookup_factors(self, key, value, points):
        assert calculate_risk({key: value})["score"] == points

    def test_score_is_capped_at_hundred(self):
        answers = {
            "age": "60",
            "weight": "140",
            "height": "160",
            "family-history": "yes",
            "activity-level": "sedentary",
            "diet-habits": "poor",
            "symptoms": ["frequent-urination", "excessive-thirst", "weight-loss", "fatigue"],
            "smoking": "current",
            "stress-level": 9,
            "sleep-quality": "poor",
        }
        result = calculate_risk(answers)
        assert result["score"] == 100
        assert sum(f["points"] for f in result["factors"]) > 100


class TestTotality:
    def test_missing_answers_score_zero(self):
        assert calculate_risk({})["score"] == 0
        assert calculate_risk(None)["score"] == 0

    def test_malformed_answers_never_raise(self):
        answers = {
            "age": "old",
            "weight": "heavy",
            "height": "nan",
            "symptoms": "fatigue",
            "smoking": ["current"],
            "stress-level": "very",
        }
        assert calculate_risk(answers)["score"] == 0

    def test_scoring_is_deterministic(self, high_risk_answers):
        assert calculate_risk(high_risk_answers) == calculate_risk(high_risk_answers)

    @pytest.mark.parametrize(
        "key,values",
        [
            ("age", ["30", "40", "50"]),
            ("weight", ["60", "75", "95"]),
            ("stress-level", [2, 6, 9]),
        ],
    )
    def test_score_never_drops_as_one_factor_rises(self, low_risk_answers, key, values):
        scores = []
        for value in values:
            answers = dict(low_risk_answers, **{key: value})
            scores.append(calculate_risk(answers)["score"])
        assert scores == sorted(scores)


class TestCategoryAndPolicy:
    @pytest.mark.parametrize("score,category", [(0, LOW), (29, LOW), (30, MODERATE), (69, MODERATE), (70, CRITICAL), (100, CRITICAL)])
    def test_category_thresholds(self, score, category):
        assert risk_category(score) == category

    def test_overridden_diet_schedule(self, high_risk_answers):
        policy = build_risk_policy(diet_habits_points={"poor": 10, "fair": 5})
        assert calculate_risk(high_risk_answers, policy)["score"] == 85

    def test_basic_form_policy_uses_lenient_diet_points(self):
        assert calculate_risk({"diet-habits": "fair"}, BASIC_FORM_RISK_POLICY)["score"] == 5

    def test_overriding_thresholds_changes_category(self):
        policy = build_risk_policy(critical_risk_threshold=95)
        assert calculate_risk({"age": "50", "weight": "90", "height": "170", "family-history": "yes",
                               "activity-level": "sedentary", "diet-habits": "poor"}, policy)["category"] == MODERATE

    def test_unknown_policy_key_is_rejected(self):
        with pytest.raises(ValueError, match="Unknown risk policy keys"):
            build_risk_policy(age_points=5)

    def test_overrides_do_not_leak_into_default(self):
        policy = build_risk_policy()
        policy["diet_habits_points"]["poor"] = 1
        assert DEFAULT_RISK_POLICY["diet_habits_points"]["poor"] == 15


class TestHelpers:
    def test_bmi(self):
        assert calculate_bmi("90", "170") == pytest.approx(31.14, abs=0.01)
        assert calculate_bmi("0", "170") is None
        assert calculate_bmi("90", None) is None

    def test_health_score_mirrors_risk(self):
        assert health_score(90) == 10
        assert health_score(0) == 100
