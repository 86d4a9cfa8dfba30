"""
Daily reduction and weekly aggregation.

Observations are grouped by calendar day inside a reporting window. Each day
collapses to one average score and one majority mood; the week is then
summarised from those daily values, so a day with ten entries weighs the
same as a day with one.
"""
import enum
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List

from anchors import WINDOW_DAYS
from mood_scale import mood_for_score

POSITIVE_THRESHOLD = 4.0
NEGATIVE_THRESHOLD = 2.0
REQUIRED_DAYS = 7


class IncompleteWeekPolicy(enum.Enum):
    """How a call site treats a week with fewer than seven days of data."""
    SUPPRESS = "suppress"  # hide dominant mood and ratios until the week is full
    REPORT = "report"      # show partial statistics as they are


@dataclass(frozen=True)
class ReportingWindow:
    start: date
    end: date

    @classmethod
    def from_anchor(cls, anchor, today):
        anchor = min(anchor, today)
        return cls(start=anchor, end=min(anchor + timedelta(days=WINDOW_DAYS - 1), today))

    def contains(self, day):
        return self.start <= day <= self.end

    def days(self):
        day = self.start
        while day <= self.end:
            yield day
            day += timedelta(days=1)

    def day_index(self, day):
        return (day - self.start).days + 1


@dataclass
class DailyBucket:
    day: date
    observations: list = field(default_factory=list)


@dataclass(frozen=True)
class DayReduction:
    day: date
    day_index: int
    average_score: float
    majority_mood: str


@dataclass(frozen=True)
class WeeklyStats:
    days_with_data: int = 0
    positive_days: int = 0
    negative_days: int = 0
    dominant_mood: str = ""
    average_score: float = 0.0

    @property
    def is_complete(self):
        return self.days_with_data >= REQUIRED_DAYS

    @property
    def positive_ratio(self):
        total = self.positive_days + self.negative_days
        if total == 0:
            return 0.0
        return self.positive_days / total

    @property
    def average_mood_label(self):
        if self.days_with_data == 0:
            return ""
        # round half up, 3.5 -> Bagus
        return mood_for_score(int(self.average_score + 0.5))

    def to_dict(self, policy=IncompleteWeekPolicy.REPORT):
        """Render for display; SUPPRESS blanks the mood and ratio fields on incomplete weeks."""
        hide = policy is IncompleteWeekPolicy.SUPPRESS and not self.is_complete
        return {
            "days_with_data": self.days_with_data,
            "required_days": REQUIRED_DAYS,
            "is_complete": self.is_complete,
            "positive_days": self.positive_days,
            "negative_days": self.negative_days,
            "average_score": round(self.average_score, 2),
            "dominant_mood": "" if hide else self.dominant_mood,
            "average_mood": "" if hide else self.average_mood_label,
            "positive_ratio": 0.0 if hide else round(self.positive_ratio, 2),
        }


@dataclass(frozen=True)
class HistoryRow:
    day: date
    day_index: int
    time: str
    mood_label: str
    score: int

    def to_dict(self):
        return {
            "date": self.day.isoformat(),
            "day_index": self.day_index,
            "time": self.time,
            "mood": self.mood_label,
            "score": self.score,
        }


@dataclass(frozen=True)
class GraphSlot:
    day_offset: int
    average: float
    count: int

    def to_dict(self):
        return {"day_offset": self.day_offset, "average": self.average, "count": self.count}


def majority(labels):
    """Most frequent label; ties go to the label seen first."""
    # Counter keeps insertion order and most_common sorts stably.
    counts = Counter(labels)
    if not counts:
        return ""
    return counts.most_common(1)[0][0]


def bucket_by_day(observations, window):
    """Group observations inside the window by calendar day, keeping insertion order."""
    buckets = {}
    for obs in observations:
        day = obs.at.date()
        if not window.contains(day):
            continue
        if day not in buckets:
            buckets[day] = DailyBucket(day=day)
        buckets[day].observations.append(obs)
    return buckets


def reduce_day(bucket, window):
    scores = [o.score for o in bucket.observations]
    return DayReduction(
        day=bucket.day,
        day_index=window.day_index(bucket.day),
        average_score=sum(scores) / len(scores),
        majority_mood=majority(o.mood_label for o in bucket.observations),
    )


def reduce_days(observations, window) -> List[DayReduction]:
    """One reduction per day with data, in calendar order. Empty days are omitted."""
    buckets = bucket_by_day(observations, window)
    return [reduce_day(buckets[day], window) for day in window.days() if day in buckets]


def aggregate_week(reductions) -> WeeklyStats:
    reductions = list(reductions)
    if not reductions:
        return WeeklyStats()

    averages = [r.average_score for r in reductions]
    return WeeklyStats(
        days_with_data=len(reductions),
        positive_days=sum(1 for avg in averages if avg >= POSITIVE_THRESHOLD),
        negative_days=sum(1 for avg in averages if avg <= NEGATIVE_THRESHOLD),
        dominant_mood=majority(r.majority_mood for r in reductions),
        average_score=sum(averages) / len(averages),
    )


def rolling_graph(observations, window):
    """Seven slots from the window start, zero-filled where a day has no data."""
    buckets = bucket_by_day(observations, window)
    slots = []
    for offset in range(WINDOW_DAYS):
        bucket = buckets.get(window.start + timedelta(days=offset))
        if bucket is None:
            slots.append(GraphSlot(day_offset=offset, average=0.0, count=0))
            continue
        scores = [o.score for o in bucket.observations]
        slots.append(GraphSlot(
            day_offset=offset,
            average=sum(scores) / len(scores),
            count=len(scores),
        ))
    return slots


def history_rows(observations, window):
    """Entries in the window by date, each day ordered by time of day."""
    buckets = bucket_by_day(observations, window)
    rows = []
    for day in window.days():
        if day not in buckets:
            continue
        for obs in sorted(buckets[day].observations, key=lambda o: o.at):
            rows.append(HistoryRow(
                day=day,
                day_index=window.day_index(day),
                time=obs.at.replace(microsecond=0).time().isoformat(),
                mood_label=obs.mood_label,
                score=obs.score,
            ))
    return rows
