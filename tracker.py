"""
Tracker service: the operations the web layer and CLI call.

Each query fetches a fresh snapshot from the store, resolves the anchor with
the configured policy and reduces the snapshot. Nothing is cached between
calls; the current user and their account signals are passed in every time.
"""
import json
import logging
import os
from datetime import datetime

from aggregation import (
    ReportingWindow,
    aggregate_week,
    history_rows,
    reduce_days,
    rolling_graph,
)
from anchors import AnchorSignals, LoginAnchorPolicy
from errors import InvalidMoodLabel, StoreUnavailable
from observations import MoodObservation
from recommendations import recommend_for_average
from stores import ensure_not_future
from tabular import parse_table

logger = logging.getLogger(__name__)

# Labels are stored as one field of a comma-separated line.
FORBIDDEN_LABEL_CHARS = (",", "\r", "\n")


class MoodTracker:
    def __init__(self, store, anchor_policy=None, clock=datetime.now):
        self.store = store
        self.anchor_policy = anchor_policy or LoginAnchorPolicy()
        self.clock = clock

    # ---------------------------------------------------------------
    # Writes
    # ---------------------------------------------------------------
    def record_observation(self, mood_label, at, owner=None):
        """Validate and append one observation.

        Raises FutureDatedObservation for timestamps after now and
        StoreUnavailable when the store could not persist it.
        """
        if any(ch in mood_label for ch in FORBIDDEN_LABEL_CHARS):
            raise InvalidMoodLabel(mood_label)
        if at.tzinfo is not None:
            at = at.astimezone().replace(tzinfo=None)
        observation = MoodObservation.from_label(mood_label, at, owner)

        ensure_not_future(observation, self.clock())
        if not self.store.append(observation, now=self.clock()):
            raise StoreUnavailable("save")
        logger.info("Recorded %s (%s) at %s", observation.mood_label,
                    observation.score, observation.at)
        return observation

    # ---------------------------------------------------------------
    # Reads
    # ---------------------------------------------------------------
    def load_observations(self, owner=None):
        return parse_table(self.store.fetch_all(owner))

    def observations_between(self, start, end, owner=None):
        return parse_table(self.store.fetch_window(start, end, owner))

    def _snapshot(self, owner, account):
        today = self.clock().date()
        observations = self.load_observations(owner)
        signals = AnchorSignals.build(today, account=account, observations=observations)
        anchor = self.anchor_policy.resolve(signals)
        return ReportingWindow.from_anchor(anchor, today), observations

    def resolve_window(self, owner=None, account=None):
        window, _ = self._snapshot(owner, account)
        return window

    def compute_weekly_stats(self, owner=None, account=None):
        window, observations = self._snapshot(owner, account)
        return aggregate_week(reduce_days(observations, window))

    def list_history(self, owner=None, account=None):
        window, observations = self._snapshot(owner, account)
        return history_rows(observations, window)

    def rolling_graph(self, owner=None, account=None):
        window, observations = self._snapshot(owner, account)
        return rolling_graph(observations, window)

    def recommend(self, owner=None, account=None):
        # Uses the average even when the week is incomplete.
        stats = self.compute_weekly_stats(owner, account)
        return recommend_for_average(stats.average_score if stats.days_with_data else 0.0)

    def export_payload(self, owner=None):
        return [obs.to_dict() for obs in self.load_observations(owner)]

    def last_entry_payload(self, owner=None):
        """The most recent observation in store order, or None when there is none."""
        observations = self.load_observations(owner)
        return observations[-1].to_dict() if observations else None

    def write_payload(self, path, owner=None):
        """Write the export payload to ``path`` as JSON; returns the entry count.

        Raises StoreUnavailable when the file cannot be written.
        """
        payload = self.export_payload(owner)
        try:
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(path, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, ensure_ascii=False)
        except OSError as exc:
            logger.exception("Failed to write payload to %s", path)
            raise StoreUnavailable("export", str(exc))
        logger.info("Wrote %d entries to %s", len(payload), path)
        return len(payload)
