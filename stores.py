"""
Observation stores.

Every backend answers fetches in the same tabular shape, a header line
followed by data lines, so that one parser reads all of them:

    LocalFileStore    flat UTF-8 file, one ``timestamp,moodLabel,score`` per line
    RemoteTableStore  Supabase/PostgREST ``moods`` table, read back as text/csv
    DatabaseStore     the app's SQLAlchemy ``mood_entries`` table

Writes are append-only. Future-dated observations are refused before any
I/O happens. A failed write returns False; a failed read raises
StoreUnavailable. Nothing is retried.
"""
import csv
import io
import logging
import os
import re
from contextlib import contextmanager
from datetime import datetime, time, timedelta

import httpx
from sqlalchemy.exc import SQLAlchemyError

from errors import FutureDatedObservation, StoreUnavailable
from extensions import db
from models import MoodEntry
from tabular import split_line
from timestamps import format_timestamp, to_date

logger = logging.getLogger(__name__)


def ensure_not_future(observation, now=None):
    now = now or datetime.now()
    if observation.at > now:
        raise FutureDatedObservation(observation.at, now)


class ObservationStore:
    def append(self, observation, now=None):
        raise NotImplementedError

    def fetch_all(self, owner=None):
        raise NotImplementedError

    def fetch_window(self, start, end, owner=None):
        raise NotImplementedError


# ============================
# LOCAL FILE
# ============================
class LocalFileStore(ObservationStore):
    HEADER = "timestamp,mood,score"

    def __init__(self, path):
        self.path = path

    def append(self, observation, now=None):
        ensure_not_future(observation, now)
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as fh:
                fh.write(observation.to_line() + "\n")
        except OSError:
            logger.exception("Failed to save mood entry to %s", self.path)
            return False
        return True

    def _read_lines(self):
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, encoding="utf-8") as fh:
                return [line.rstrip("\r\n") for line in fh if line.strip()]
        except (OSError, UnicodeDecodeError) as exc:
            logger.exception("Failed to load mood entries from %s", self.path)
            raise StoreUnavailable("load", str(exc))

    @staticmethod
    def _widen(line):
        # Old files hold "date,moodLabel"; give those lines an empty score field.
        return line + "," if len(split_line(line)) == 2 else line

    def fetch_all(self, owner=None):
        # The file has no owner column; one file belongs to one user.
        return [self.HEADER] + [self._widen(line) for line in self._read_lines()]

    def fetch_window(self, start, end, owner=None):
        rows = []
        for line in self._read_lines():
            day = to_date(line.split(",", 1)[0].strip().strip('"'))
            if day is not None and start <= day <= end:
                rows.append(self._widen(line))
        return [self.HEADER] + rows


# ============================
# REMOTE TABLE (Supabase REST)
# ============================
class RemoteTableStore(ObservationStore):
    SELECT = "mood,score,timestamp,user_id"

    def __init__(self, base_url, api_key, table="moods", client=None, timeout=10.0):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.client = client
        self.timeout = timeout

    @contextmanager
    def _session(self):
        """Yield the injected client, or a fresh one that is closed after the call."""
        if self.client is not None:
            yield self.client
            return
        with httpx.Client(timeout=self.timeout) as client:
            yield client

    @property
    def endpoint(self):
        return f"{self.base_url}/rest/v1/{self.table}"

    def _headers(self, **extra):
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }
        headers.update(extra)
        return headers

    @staticmethod
    def _utc_iso(at):
        # Wall-clock values are sent labelled as UTC and come back unchanged.
        return format_timestamp(at) + "+00:00"

    def append(self, observation, now=None):
        ensure_not_future(observation, now)
        payload = {
            "mood": observation.mood_label,
            "score": observation.score,
            "timestamp": self._utc_iso(observation.at),
        }
        if observation.owner is not None:
            payload["user_id"] = observation.owner

        try:
            with self._session() as client:
                resp = client.post(
                    self.endpoint,
                    json=payload,
                    headers=self._headers(Prefer="return=representation"),
                )
        except httpx.HTTPError:
            logger.exception("insert into %s failed", self.endpoint)
            return False

        if not resp.is_success:
            logger.warning("insert into %s failed: status=%s body=%s",
                           self.endpoint, resp.status_code, resp.text)
            return False
        return True

    def _fetch(self, params):
        try:
            with self._session() as client:
                resp = client.get(self.endpoint, params=params,
                                  headers=self._headers(Accept="text/csv"))
        except httpx.HTTPError as exc:
            logger.exception("fetch from %s failed", self.endpoint)
            raise StoreUnavailable("load", str(exc))

        if not resp.is_success:
            logger.warning("fetch from %s failed: status=%s body=%s",
                           self.endpoint, resp.status_code, resp.text)
            raise StoreUnavailable("load", f"HTTP {resp.status_code}")

        body = resp.text.strip()
        return re.split(r"\r?\n", body) if body else []

    def _params(self, owner):
        params = [("select", self.SELECT)]
        if owner is not None:
            params.append(("user_id", f"eq.{owner}"))
        return params

    def fetch_all(self, owner=None):
        params = self._params(owner)
        params.append(("order", "timestamp.asc"))
        return self._fetch(params)

    def fetch_window(self, start, end, owner=None):
        params = self._params(owner)
        params.extend([
            ("timestamp", "gte." + self._utc_iso(datetime.combine(start, time.min))),
            ("timestamp", "lte." + self._utc_iso(datetime.combine(end, time(23, 59, 59)))),
            ("order", "timestamp.asc"),
        ])
        return self._fetch(params)


# ============================
# DATABASE (Flask-SQLAlchemy)
# ============================
class DatabaseStore(ObservationStore):
    """Reads and writes MoodEntry rows; needs an active Flask app context."""
    COLUMNS = ["mood", "score", "timestamp", "user_id"]

    def append(self, observation, now=None):
        ensure_not_future(observation, now)
        entry = MoodEntry(
            user_id=observation.owner,
            mood_label=observation.mood_label,
            score=observation.score,
            timestamp=observation.at,
        )
        try:
            db.session.add(entry)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to save mood entry")
            return False
        return True

    def _render(self, query, owner):
        if owner is not None:
            query = query.filter(MoodEntry.user_id == owner)
        try:
            entries = query.order_by(MoodEntry.timestamp.asc(), MoodEntry.id.asc()).all()
        except SQLAlchemyError as exc:
            db.session.rollback()
            logger.exception("Failed to load mood entries")
            raise StoreUnavailable("load", str(exc))

        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(self.COLUMNS)
        for entry in entries:
            writer.writerow([
                entry.mood_label,
                entry.score,
                format_timestamp(entry.timestamp),
                entry.user_id or "",
            ])
        return output.getvalue().splitlines()

    def fetch_all(self, owner=None):
        return self._render(MoodEntry.query, owner)

    def fetch_window(self, start, end, owner=None):
        query = MoodEntry.query.filter(
            MoodEntry.timestamp >= datetime.combine(start, time.min),
            MoodEntry.timestamp < datetime.combine(end + timedelta(days=1), time.min),
        )
        return self._render(query, owner)


def build_store(config):
    """Pick a store from ``MOOD_STORE`` in a Flask-style config mapping."""
    kind = (config.get("MOOD_STORE") or "database").strip().lower()
    if kind == "file":
        return LocalFileStore(config["MOOD_FILE_PATH"])
    if kind == "remote":
        url = config.get("SUPABASE_URL")
        key = config.get("SUPABASE_KEY")
        if not url or not key:
            raise ValueError("MOOD_STORE=remote needs SUPABASE_URL and SUPABASE_KEY")
        return RemoteTableStore(url, key)
    if kind == "database":
        return DatabaseStore()
    raise ValueError(f"Unknown MOOD_STORE {kind!r}")
