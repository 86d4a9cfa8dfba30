from dataclasses import dataclass, field
from typing import List

LOW_MOOD_MAX = 2.0
NEUTRAL_MOOD_MAX = 3.5
POSITIVE_MOOD_MAX = 4.5


@dataclass(frozen=True)
class Recommendation:
    level: str
    heading: str
    suggestions: List[str] = field(default_factory=list)

    def to_dict(self):
        return {"level": self.level, "heading": self.heading, "suggestions": list(self.suggestions)}


_RECOMMENDATIONS = {
    "none": Recommendation(
        level="none",
        heading="No mood data for the last 7 days yet",
        suggestions=["Log a few moods first to get suggestions that fit how you feel."],
    ),
    "low": Recommendation(
        level="low",
        heading="Suggestions for a low mood",
        suggestions=[
            "Take 5-10 minutes for box breathing (4-4-4-4)",
            "Try a short journal entry: write what you feel without judging it",
            "Reach out to someone you trust or ask for a small bit of support",
            "Do something light: a slow walk or some stretching",
        ],
    ),
    "neutral": Recommendation(
        level="neutral",
        heading="Suggestions for a neutral mood",
        suggestions=[
            "Plan three small things for tomorrow",
            "Drink some water and have a healthy snack",
            "Listen to calming music or a favourite playlist",
            "Write down one thing that went reasonably well today",
        ],
    ),
    "positive": Recommendation(
        level="positive",
        heading="Suggestions for a positive mood",
        suggestions=[
            "Keep the good habits going: 20 minutes of physical activity",
            "Pick one small goal you can finish today",
            "Share something positive with a friend or family member",
            "Spend 10 minutes on a hobby you enjoy",
        ],
    ),
    "very_positive": Recommendation(
        level="very_positive",
        heading="Suggestions for a very positive mood",
        suggestions=[
            "Celebrate what you achieved with a small reward",
            "Try a light new challenge to keep growing",
            "Send someone an encouraging message",
            "Plan something to look forward to this weekend",
        ],
    ),
}


def level_for_average(average):
    if average <= 0.0:
        return "none"
    if average <= LOW_MOOD_MAX:
        return "low"
    if average < NEUTRAL_MOOD_MAX:
        return "neutral"
    if average < POSITIVE_MOOD_MAX:
        return "positive"
    return "very_positive"


def recommend_for_average(average):
    """Pick the recommendation block for a 7-day average score."""
    return _RECOMMENDATIONS[level_for_average(average)]
