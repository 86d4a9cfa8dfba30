"""
Mood scale: the fixed mapping between the five mood labels and scores 1..5.

1: Kacau, 2: Buruk, 3: Netral, 4: Bagus, 5: Sangat bagus
"""

MOOD_LABELS = {
    1: "Kacau",
    2: "Buruk",
    3: "Netral",
    4: "Bagus",
    5: "Sangat bagus",
}

MIN_SCORE = 1
MAX_SCORE = 5
NEUTRAL_SCORE = 3

# Lower-cased spellings accepted on input
_ALIASES = {
    "kacau": 1,
    "buruk": 2,
    "netral": 3,
    "bagus": 4,
    "sangat bagus": 5,
    "sangat_bagus": 5,
    "sangat-bagus": 5,
    "sangatbagus": 5,
}


def score_for_mood(mood):
    """Return the score for a mood label; unknown or empty labels count as neutral."""
    if mood is None:
        return NEUTRAL_SCORE
    return _ALIASES.get(mood.strip().lower(), NEUTRAL_SCORE)


def mood_for_score(score):
    return MOOD_LABELS.get(score, MOOD_LABELS[NEUTRAL_SCORE])


def is_known_mood(mood):
    return mood is not None and mood.strip().lower() in _ALIASES


def canonical_label(mood):
    """Map any accepted spelling to its canonical label, leaving unknown labels untouched."""
    if is_known_mood(mood):
        return MOOD_LABELS[_ALIASES[mood.strip().lower()]]
    return mood.strip() if mood else mood


def is_valid_score(score):
    return isinstance(score, int) and MIN_SCORE <= score <= MAX_SCORE
