from flashquiz.models import AnswerRecord, Flashcard, percent


def test_percent_rounds_half_up():
    assert percent(2, 3) == 67
    assert percent(1, 3) == 33
    assert percent(1, 8) == 13
    assert percent(1, 2) == 50


def test_percent_bounds():
    assert percent(0, 5) == 0
    assert percent(5, 5) == 100
    assert percent(0, 0) == 0


def test_answer_record_status():
    assert AnswerRecord(1, 0, True).status == "correct"
    assert AnswerRecord(1, 2, False).status == "incorrect"


def test_flashcard_from_row_decodes_options():
    row = {
        "id": 7, "subcategory_id": 2, "question": "Q?",
        "options": '["a", "b", "c", "d"]', "correct_answer_index": 3,
        "explanation": "because", "sort_order": 4,
    }
    card = Flashcard.from_row(row)
    assert card.options == ("a", "b", "c", "d")
    assert card.correct_answer_index == 3
    assert card.order == 4
