"""
Anchor policies.

The anchor is the date treated as day 1 of a reporting window. Different
screens have historically anchored differently, so each rule is a named
policy and callers pick one explicitly:

    creation  account creation -> earliest stored entry -> today
    login     last login inside the past week -> earliest entry in that week -> today-6
    earliest  earliest entry in the past week -> today-6

Every policy clamps its answer to ``today``. Policies hold no state; all
inputs arrive in an AnchorSignals value.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

WINDOW_DAYS = 7


@dataclass(frozen=True)
class AccountSignals:
    """What the account layer knows about a user."""
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None


@dataclass(frozen=True)
class AnchorSignals:
    today: date
    account_created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    earliest_observation: Optional[date] = None
    observations: Sequence = field(default_factory=tuple)

    @classmethod
    def build(cls, today, account=None, observations=(), earliest_observation=None):
        account = account or AccountSignals()
        return cls(
            today=today,
            account_created_at=account.created_at,
            last_login_at=account.last_login_at,
            earliest_observation=earliest_observation,
            observations=tuple(observations),
        )

    @property
    def rolling_start(self):
        return self.today - timedelta(days=WINDOW_DAYS - 1)

    def earliest_stored(self):
        """Earliest date with data: the explicit signal, else the fetched observations."""
        if self.earliest_observation is not None:
            return _as_date(self.earliest_observation)
        days = [o.at.date() for o in self.observations]
        return min(days) if days else None

    def earliest_in_rolling_week(self):
        days = [
            o.at.date() for o in self.observations
            if self.rolling_start <= o.at.date() <= self.today
        ]
        return min(days) if days else None


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


def clamp(anchor, today):
    return today if anchor > today else anchor


class AnchorPolicy:
    """Base class: subclasses implement ``choose`` and get clamping for free."""
    name = None

    def resolve(self, signals):
        return clamp(self.choose(signals), signals.today)

    def choose(self, signals):
        raise NotImplementedError


class CreationAnchorPolicy(AnchorPolicy):
    name = "creation"

    def choose(self, signals):
        if signals.account_created_at is not None:
            return _as_date(signals.account_created_at)
        earliest = signals.earliest_stored()
        if earliest is not None:
            return earliest
        # A brand-new account with no entries starts today as day 1.
        return signals.today


class LoginAnchorPolicy(AnchorPolicy):
    name = "login"

    def choose(self, signals):
        if signals.last_login_at is not None:
            login_day = _as_date(signals.last_login_at)
            if signals.rolling_start <= login_day <= signals.today:
                return login_day
        earliest = signals.earliest_in_rolling_week()
        if earliest is not None:
            return earliest
        return signals.rolling_start


class EarliestDataAnchorPolicy(AnchorPolicy):
    name = "earliest"

    def choose(self, signals):
        earliest = signals.earliest_in_rolling_week()
        return earliest if earliest is not None else signals.rolling_start


ANCHOR_POLICIES = {
    policy.name: policy
    for policy in (CreationAnchorPolicy(), LoginAnchorPolicy(), EarliestDataAnchorPolicy())
}


def get_anchor_policy(name):
    try:
        return ANCHOR_POLICIES[name.strip().lower()]
    except (KeyError, AttributeError):
        raise ValueError(
            f"Unknown anchor policy {name!r}; expected one of {', '.join(sorted(ANCHOR_POLICIES))}"
        )
