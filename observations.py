from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from mood_scale import canonical_label, is_valid_score, score_for_mood
from timestamps import format_timestamp


@dataclass(frozen=True)
class MoodObservation:
    """One recorded mood: label, score on the 1..5 scale, when, and for whom."""
    mood_label: str
    score: int
    at: datetime
    owner: Optional[str] = None

    @property
    def day(self):
        return self.at.date()

    @classmethod
    def from_label(cls, mood_label, at, owner=None):
        """Build an observation from user input; the score always follows the label."""
        label = canonical_label(mood_label)
        return cls(mood_label=label, score=score_for_mood(label), at=at, owner=owner)

    @classmethod
    def from_fields(cls, mood_label, raw_score, at, owner=None):
        """Build an observation from external fields.

        An explicit score wins when it parses to an integer on the scale;
        otherwise the score is derived from the label.
        """
        score = None
        if raw_score is not None and str(raw_score).strip():
            try:
                score = int(str(raw_score).strip())
            except ValueError:
                score = None
        if not is_valid_score(score):
            score = score_for_mood(mood_label)
        return cls(mood_label=mood_label, score=score, at=at, owner=owner or None)

    def to_line(self):
        """Serialise to the local file format: ``timestamp,moodLabel,score``."""
        return f"{format_timestamp(self.at)},{self.mood_label},{self.score}"

    def to_dict(self):
        return {
            "date": format_timestamp(self.at),
            "mood": self.mood_label,
            "score": self.score,
        }
