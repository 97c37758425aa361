"""
Period resolution

Turns the dashboard's period token (week / month / year) into a concrete
[start, end] window ending now.  Unknown or missing tokens fall back to the
last 30 days.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from backoffice.utils.logger import log

DEFAULT_TOKEN = "default"
DEFAULT_WINDOW_DAYS = 30

PERIOD_OFFSETS = {
    "week": relativedelta(days=7),
    "month": relativedelta(months=1),
    "year": relativedelta(years=1),
}


@dataclass(frozen=True)
class Period:
    """Resolved analytics window."""
    token: str
    start: datetime
    end: datetime

    def previous(self) -> "Period":
        """Window of the same length immediately before this one."""
        length = self.end - self.start
        return Period(token=self.token, start=self.start - length, end=self.start)

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
        }


def resolve_period(token: Optional[str] = None, now: Optional[datetime] = None) -> Period:
    """
    Resolve a period token to a concrete window.

    Args:
        token: "week", "month" or "year". Anything else, including None,
            resolves to the last 30 days.
        now: End of the window. Defaults to the current UTC time.

    Returns:
        Period with ``start <= end == now``
    """
    end = now or datetime.utcnow()

    offset = PERIOD_OFFSETS.get(token) if token else None
    if offset is None:
        if token:
            log.warning(f"Unknown period token {token!r}, using last {DEFAULT_WINDOW_DAYS} days")
        return Period(token=DEFAULT_TOKEN, start=end - timedelta(days=DEFAULT_WINDOW_DAYS), end=end)

    return Period(token=token, start=end - offset, end=end)
