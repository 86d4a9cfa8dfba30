"""
Error taxonomy for the mood engine.

Every error carries a machine-readable ``code`` so the web layer can answer
with a stable JSON envelope instead of parsing messages.
"""


class MoodifyError(Exception):
    """Base class for all engine errors."""
    code = "MOODIFY_ERROR"
    http_status = 500

    def __init__(self, message, details=None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self):
        payload = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class UnparsableTimestamp(MoodifyError):
    """A single row carried a timestamp none of the parsers understood."""
    code = "UNPARSABLE_TIMESTAMP"
    http_status = 422

    def __init__(self, token):
        super().__init__(
            message=f"Unrecognised timestamp: {token!r}",
            details={"token": token},
        )


class UnrecognizedSchema(MoodifyError):
    """The header of a tabular batch has no mood/score/timestamp columns."""
    code = "UNRECOGNIZED_SCHEMA"
    http_status = 422

    def __init__(self, header, missing):
        super().__init__(
            message=f"Header is missing column(s): {', '.join(missing)}",
            details={"header": header, "missing": list(missing)},
        )


class FutureDatedObservation(MoodifyError):
    code = "FUTURE_DATED_OBSERVATION"
    http_status = 422

    def __init__(self, at, now):
        super().__init__(
            message="Entries in the future are not allowed.",
            details={"at": at.isoformat(), "now": now.isoformat()},
        )


class StoreUnavailable(MoodifyError):
    code = "STORE_UNAVAILABLE"
    http_status = 503

    def __init__(self, action, reason=None):
        message = (
            f"Could not {action} mood entries. "
            "Check your connection or file permissions and try again."
        )
        super().__init__(message=message, details={"reason": reason} if reason else {})


class InvalidMoodLabel(MoodifyError):
    """A free-text label that cannot be stored as one comma-separated field."""
    code = "INVALID_MOOD_LABEL"
    http_status = 422

    def __init__(self, label):
        super().__init__(
            message="Mood labels cannot contain commas or line breaks.",
            details={"label": label},
        )
