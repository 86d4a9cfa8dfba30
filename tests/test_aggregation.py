"""
Tests for the daily reducer, weekly aggregator and the two window views.
"""

from datetime import date

from aggregation import (
    IncompleteWeekPolicy,
    ReportingWindow,
    WeeklyStats,
    aggregate_week,
    history_rows,
    majority,
    reduce_days,
    rolling_graph,
)

WINDOW = ReportingWindow(start=date(2024, 6, 1), end=date(2024, 6, 7))


class TestReportingWindow:

    def test_from_anchor_stops_at_today(self):
        window = ReportingWindow.from_anchor(date(2024, 6, 1), today=date(2024, 6, 3))
        assert (window.start, window.end) == (date(2024, 6, 1), date(2024, 6, 3))

    def test_from_anchor_full_week(self):
        window = ReportingWindow.from_anchor(date(2024, 6, 1), today=date(2024, 6, 20))
        assert window.end == date(2024, 6, 7)

    def test_anchor_after_today_is_clamped(self):
        window = ReportingWindow.from_anchor(date(2024, 6, 9), today=date(2024, 6, 3))
        assert window.start == window.end == date(2024, 6, 3)


class TestDailyReducer:

    def test_scenario(self, obs):
        observations = [
            obs("Netral", "2024-06-01T09:00"),
            obs("Bagus", "2024-06-01T18:00"),
            obs("Kacau", "2024-06-02T10:00"),
        ]
        day1, day2 = reduce_days(observations, WINDOW)
        assert (day1.day_index, day1.average_score, day1.majority_mood) == (1, 3.5, "Netral")
        assert (day2.day_index, day2.average_score, day2.majority_mood) == (2, 1.0, "Kacau")

        stats = aggregate_week([day1, day2])
        assert stats.days_with_data == 2
        assert stats.average_score == 2.25
        assert stats.negative_days == 1
        assert stats.positive_days == 0
        assert stats.is_complete is False

    def test_tie_goes_to_first_seen(self, obs):
        observations = [
            obs("Buruk", "2024-06-03T08:00"),
            obs("Bagus", "2024-06-03T09:00"),
            obs("Bagus", "2024-06-03T10:00"),
            obs("Buruk", "2024-06-03T11:00"),
        ]
        (day,) = reduce_days(observations, WINDOW)
        assert day.majority_mood == "Buruk"

    def test_empty_days_are_omitted(self, obs):
        observations = [obs("Bagus", "2024-06-01T09:00"), obs("Bagus", "2024-06-05T09:00")]
        assert [r.day_index for r in reduce_days(observations, WINDOW)] == [1, 5]

    def test_outside_window_is_ignored(self, obs):
        observations = [obs("Bagus", "2024-05-31T23:59"), obs("Bagus", "2024-06-08T00:00")]
        assert reduce_days(observations, WINDOW) == []


class TestWeeklyAggregator:

    def test_mean_of_daily_means(self, obs):
        observations = [
            obs("Kacau", "2024-06-01T09:00"),
            obs("Sangat bagus", "2024-06-01T10:00"),
            obs("Bagus", "2024-06-02T09:00"),
        ]
        stats = aggregate_week(reduce_days(observations, WINDOW))
        assert stats.days_with_data == 2
        assert stats.average_score == 3.5

    def test_positive_days_and_dominant_mood(self, obs):
        observations = [obs("Bagus", f"2024-06-0{d}T09:00") for d in range(1, 8)]
        observations.append(obs("Kacau", "2024-06-07T10:00"))
        stats = aggregate_week(reduce_days(observations, WINDOW))
        assert stats.days_with_data == 7
        assert stats.is_complete
        assert stats.positive_days == 6
        assert stats.negative_days == 0
        assert stats.dominant_mood == "Bagus"

    def test_dominant_mood_tie_goes_to_first_day(self, obs):
        observations = [
            obs("Kacau", "2024-06-01T09:00"),
            obs("Bagus", "2024-06-02T09:00"),
            obs("Bagus", "2024-06-03T09:00"),
            obs("Kacau", "2024-06-04T09:00"),
        ]
        assert aggregate_week(reduce_days(observations, WINDOW)).dominant_mood == "Kacau"

    def test_no_data(self):
        stats = aggregate_week([])
        assert stats == WeeklyStats()
        assert stats.dominant_mood == ""
        assert stats.average_score == 0.0


class TestIncompleteWeekPolicy:

    def test_suppress_hides_mood_and_ratio(self):
        stats = WeeklyStats(days_with_data=3, positive_days=2, negative_days=1,
                            dominant_mood="Bagus", average_score=3.6)
        shown = stats.to_dict(IncompleteWeekPolicy.SUPPRESS)
        assert shown["dominant_mood"] == ""
        assert shown["positive_ratio"] == 0.0
        assert shown["days_with_data"] == 3
        assert shown["average_score"] == 3.6

    def test_report_shows_partial(self):
        stats = WeeklyStats(days_with_data=3, positive_days=2, negative_days=1,
                            dominant_mood="Bagus", average_score=3.6)
        shown = stats.to_dict(IncompleteWeekPolicy.REPORT)
        assert shown["dominant_mood"] == "Bagus"
        assert shown["positive_ratio"] == 0.67
        assert shown["average_mood"] == "Bagus"

    def test_complete_week_is_never_suppressed(self):
        stats = WeeklyStats(days_with_data=7, positive_days=7, dominant_mood="Bagus", average_score=4.0)
        assert stats.to_dict(IncompleteWeekPolicy.SUPPRESS)["dominant_mood"] == "Bagus"


class TestViews:

    def test_rolling_graph_zero_fills(self, obs):
        observations = [
            obs("Netral", "2024-06-01T09:00"),
            obs("Bagus", "2024-06-01T18:00"),
            obs("Kacau", "2024-06-03T10:00"),
        ]
        slots = rolling_graph(observations, WINDOW)
        assert len(slots) == 7
        assert [(s.day_offset, s.average, s.count) for s in slots[:4]] == [
            (0, 3.5, 2), (1, 0.0, 0), (2, 1.0, 1), (3, 0.0, 0),
        ]

    def test_rolling_graph_short_window_still_has_seven_slots(self, obs):
        window = ReportingWindow.from_anchor(date(2024, 6, 1), today=date(2024, 6, 2))
        slots = rolling_graph([obs("Bagus", "2024-06-02T09:00")], window)
        assert [s.count for s in slots] == [0, 1, 0, 0, 0, 0, 0]

    def test_history_sorted_within_day(self, obs):
        observations = [
            obs("Bagus", "2024-06-02T18:00"),
            obs("Kacau", "2024-06-02T07:15:30"),
            obs("Netral", "2024-06-01T12:00"),
        ]
        rows = history_rows(observations, WINDOW)
        assert [(r.day, r.day_index, r.time, r.mood_label, r.score) for r in rows] == [
            (date(2024, 6, 1), 1, "12:00:00", "Netral", 3),
            (date(2024, 6, 2), 2, "07:15:30", "Kacau", 1),
            (date(2024, 6, 2), 2, "18:00:00", "Bagus", 4),
        ]


def test_majority_of_nothing():
    assert majority([]) == ""
