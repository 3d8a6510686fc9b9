import pytest

from answer_validator import normalize_answer, validate_answer
from errors import INVALID_OPTION, NOT_A_NUMBER, OUT_OF_RANGE, REQUIRED
from question_catalog import ADAPTIVE_QUESTIONNAIRE, get_question


def q(question_id):
    return get_question(ADAPTIVE_QUESTIONNAIRE, question_id)


class TestSingleChoice:
    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_is_required(self, value):
        assert validate_answer(q("family-history"), value).code == REQUIRED

    @pytest.mark.parametrize("value", ["yes", "no", "unknown"])
    def test_listed_options_are_accepted(self, value):
        assert validate_answer(q("family-history"), value) is None

    def test_unlisted_value_is_rejected(self):
        assert validate_answer(q("family-history"), "maybe").code == INVALID_OPTION

    @pytest.mark.parametrize("value", [["male"], {"value": "male"}, 1])
    def test_non_text_value_is_rejected(self, value):
        assert validate_answer(q("gender"), value).code == INVALID_OPTION


class TestMultipleChoice:
    def test_no_selection_is_required(self):
        assert validate_answer(q("symptoms"), []).code == REQUIRED
        assert validate_answer(q("symptoms"), None).code == REQUIRED

    def test_selection_is_accepted(self):
        assert validate_answer(q("symptoms"), ["fatigue", "blurred-vision"]) is None

    def test_plain_string_is_wrong_shape(self):
        assert validate_answer(q("symptoms"), "fatigue").code == INVALID_OPTION

    def test_unknown_item_is_rejected(self):
        assert validate_answer(q("symptoms"), ["fatigue", "headache"]).code == INVALID_OPTION

    @pytest.mark.parametrize("value", [[["fatigue"]], [{"id": "fatigue"}], ["fatigue", 3]])
    def test_non_text_items_are_rejected(self, value):
        assert validate_answer(q("symptoms"), value).code == INVALID_OPTION


class TestNumber:
    def test_blank_is_required(self):
        assert validate_answer(q("age"), "").code == REQUIRED

    def test_text_is_not_a_number(self):
        err = validate_answer(q("age"), "forty")
        assert err.code == NOT_A_NUMBER

    def test_outside_bounds_is_out_of_range(self):
        err = validate_answer(q("age"), "150")
        assert err.code == OUT_OF_RANGE
        assert "1 and 120 years" in err.message

    @pytest.mark.parametrize("value", ["45", 45, " 45 ", "45.5", "1", "120"])
    def test_values_in_range_are_accepted(self, value):
        assert validate_answer(q("age"), value) is None

    def test_range_only_checked_when_both_bounds_exist(self):
        open_ended = {"id": "x", "text": "x", "type": "number", "min": 0}
        assert validate_answer(open_ended, "-5") is None


class TestSlider:
    def test_unanswered_slider_is_valid(self):
        assert validate_answer(q("stress-level"), None) is None

    @pytest.mark.parametrize("value", [0, 11, "12"])
    def test_outside_scale_is_out_of_range(self, value):
        assert validate_answer(q("stress-level"), value).code == OUT_OF_RANGE

    @pytest.mark.parametrize("value", [5.5, "high", True])
    def test_non_integer_is_rejected(self, value):
        assert validate_answer(q("stress-level"), value).code == NOT_A_NUMBER

    @pytest.mark.parametrize("value", [1, 7, "10", 8.0])
    def test_whole_numbers_on_scale_are_accepted(self, value):
        assert validate_answer(q("stress-level"), value) is None


class TestNormalizeAnswer:
    def test_slider_defaults_to_minimum(self):
        assert normalize_answer(q("stress-level"), None) == 1

    def test_slider_text_becomes_int(self):
        assert normalize_answer(q("stress-level"), "7") == 7

    def test_number_is_kept_as_trimmed_text(self):
        assert normalize_answer(q("age"), " 45 ") == "45"
        assert normalize_answer(q("age"), 45) == "45"

    def test_multi_select_drops_duplicates_keeping_order(self):
        assert normalize_answer(q("symptoms"), ["fatigue", "none", "fatigue"]) == ["fatigue", "none"]
