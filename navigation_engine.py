from question_catalog import get_question, is_terminal_question, question_index


def _clamp_0_100(value):
    return max(0, min(100, int(round(value))))


def selected_option_for(question, value):
    """Return the option whose value matches a choice answer, if any."""
    if isinstance(value, (list, tuple)):
        return None
    for option in question.get("options") or []:
        if option["value"] == value:
            return option
    return None


def next_question(current_id, selected_option, answers, questionnaire):
    """
    Resolve the question that follows current_id.

    A per-option branch wins over the static successor. None means the
    questionnaire is finished, including when the resolved id is unknown.
    """
    current = get_question(questionnaire, current_id)
    if not current:
        return None

    next_id = None
    branches = current.get("branches") or {}
    if branches and selected_option:
        next_id = branches.get(selected_option.get("value"))

    if next_id is None:
        next_id = current.get("next_question_id")

    return get_question(questionnaire, next_id)


def previous_question(history, questionnaire):
    if not history:
        return None
    return get_question(questionnaire, history[-1])


def calculate_progress(current_id, answers, questionnaire):
    """
    Estimate completion as the declared position of current_id, 0-100.

    Branches can skip questions, so this only promises forward movement:
    0 at the first declared question and 100 on any terminal question.
    """
    question = get_question(questionnaire, current_id)
    if not question:
        return 0
    if is_terminal_question(question):
        return 100

    total = len(questionnaire["questions"])
    if total <= 1:
        return 100
    return _clamp_0_100(question_index(questionnaire, current_id) / (total - 1) * 100)
