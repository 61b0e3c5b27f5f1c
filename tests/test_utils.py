# test_utils.py
import pytest

from quizgen.utils import percentage, score_message


@pytest.mark.parametrize("score,total,expected", [
    (3, 5, 60),
    (1, 3, 33),
    (2, 3, 67),
    (5, 5, 100),
    (0, 5, 0),
    (1, 8, 13),  # 12.5 rounds up
    (0, 0, 0),
])
def test_percentage(score, total, expected):
    assert percentage(score, total) == expected


@pytest.mark.parametrize("pct,prefix", [
    (100, "Excellent"),
    (90, "Excellent"),
    (89, "Great job"),
    (80, "Great job"),
    (79, "Good work"),
    (70, "Good work"),
    (69, "Not bad"),
    (60, "Not bad"),
    (59, "Keep studying"),
    (0, "Keep studying"),
])
def test_score_message_tiers(pct, prefix):
    assert score_message(pct).startswith(prefix)
