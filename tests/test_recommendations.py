import pytest
from recommendations import level_for_average, recommend_for_average


@pytest.mark.parametrize("average, level", [
    (0.0, "none"),
    (1.0, "low"),
    (2.0, "low"),
    (2.25, "neutral"),
    (3.49, "neutral"),
    (3.5, "positive"),
    (4.49, "positive"),
    (4.5, "very_positive"),
    (5.0, "very_positive"),
])
def test_level_boundaries(average, level):
    assert level_for_average(average) == level


def test_every_level_has_suggestions():
    for average in (0.0, 1.0, 3.0, 4.0, 5.0):
        rec = recommend_for_average(average)
        assert rec.heading
        assert rec.suggestions
        assert rec.to_dict()["level"] == rec.level
