from errors import (
    INVALID_OPTION,
    NOT_A_NUMBER,
    OUT_OF_RANGE,
    REQUIRED,
    ValidationError,
)
from question_catalog import MULTIPLE_CHOICE, NUMBER, SINGLE_CHOICE, SLIDER


def _is_blank(value):
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _parse_number(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return None


def _range_message(question):
    unit = f" {question['unit']}" if question.get("unit") else ""
    low, high = question.get("min"), question.get("max")
    if low is None:
        return f"Please enter a value of at most {high}{unit}."
    if high is None:
        return f"Please enter a value of at least {low}{unit}."
    return f"Please enter a value between {low} and {high}{unit}."


def _option_values(question):
    return {opt["value"] for opt in question.get("options") or []}


def _validate_single_choice(question, value):
    if _is_blank(value):
        return ValidationError(REQUIRED, "Please select an option.")
    if not isinstance(value, str) or value not in _option_values(question):
        return ValidationError(INVALID_OPTION, "Please select one of the listed options.")
    return None


def _validate_multiple_choice(question, value):
    if _is_blank(value):
        return ValidationError(REQUIRED, "Please select at least one option.")
    if not isinstance(value, (list, tuple)):
        return ValidationError(INVALID_OPTION, "Please select from the listed options.")
    allowed = _option_values(question)
    if any(not isinstance(item, str) or item not in allowed for item in value):
        return ValidationError(INVALID_OPTION, "Please select from the listed options.")
    return None


def _validate_number(question, value):
    if _is_blank(value):
        return ValidationError(REQUIRED, "This question requires an answer.")
    number = _parse_number(value)
    if number is None:
        return ValidationError(NOT_A_NUMBER, "Please enter a valid number.")
    low, high = question.get("min"), question.get("max")
    if low is not None and high is not None and not (low <= number <= high):
        return ValidationError(OUT_OF_RANGE, _range_message(question))
    return None


def _validate_slider(question, value):
    # An untouched slider sits on its minimum, so it is never missing.
    if value is None:
        return None
    number = _parse_number(value)
    if number is None or not number.is_integer():
        return ValidationError(NOT_A_NUMBER, "Please pick a whole number on the scale.")
    low, high = question.get("min"), question.get("max")
    if (low is not None and number < low) or (high is not None and number > high):
        return ValidationError(OUT_OF_RANGE, _range_message(question))
    return None


_VALIDATORS = {
    SINGLE_CHOICE: _validate_single_choice,
    MULTIPLE_CHOICE: _validate_multiple_choice,
    NUMBER: _validate_number,
    SLIDER: _validate_slider,
}


def validate_answer(question, value):
    """Return the first ValidationError for value, or None when it is acceptable."""
    return _VALIDATORS[question["type"]](question, value)


def normalize_answer(question, value):
    """Coerce an accepted answer into the shape stored for its question type."""
    qtype = question["type"]
    if qtype == SINGLE_CHOICE:
        return str(value)
    if qtype == MULTIPLE_CHOICE:
        selected = []
        for item in value:
            if item not in selected:
                selected.append(str(item))
        return selected
    if qtype == NUMBER:
        return str(value).strip()
    if value is None:
        return int(question.get("min") or 0)
    return int(_parse_number(value))
