"""
Service clock: the single source of "now" and of the current service day.

The service day is the store's local calendar date, except that the day
turns over at the configured reset time instead of midnight. A store that
resets at 04:00 keeps numbering tickets on Monday's sequence until 04:00
Tuesday morning.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from shared.config.settings import settings


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ServiceClock:
    """
    Caller-level clock handed to the engine services.

    Tests pass ``now_fn`` to pin time; production uses the wall clock.
    """

    def __init__(
        self,
        timezone_name: str | None = None,
        reset_time: time | None = None,
        now_fn: Callable[[], datetime] | None = None,
    ):
        self._tz = ZoneInfo(timezone_name or settings.store_timezone)
        self._reset_time = reset_time if reset_time is not None else settings.reset_time()
        self._now_fn = now_fn or _utc_now

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        """Current instant as an aware UTC datetime."""
        current = self._now_fn()
        if current.tzinfo is None:
            return current.replace(tzinfo=timezone.utc)
        return current.astimezone(timezone.utc)

    def service_day(self, at: datetime | None = None) -> date:
        """Service day that contains ``at`` (default: now)."""
        instant = at if at is not None else self.now()
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)

        local_at = instant.astimezone(self._tz)
        service_date = local_at.date()
        if local_at.time() < self._reset_time:
            service_date = service_date - timedelta(days=1)
        return service_date

    def day_bounds(self, service_day: date) -> tuple[datetime, datetime]:
        """
        UTC [start, end) of a service day.
        Both ends are built from local wall time, so DST days are 23 or 25 hours.
        """
        starts_at = datetime.combine(service_day, self._reset_time, tzinfo=self._tz)
        ends_at = datetime.combine(service_day + timedelta(days=1), self._reset_time, tzinfo=self._tz)
        return starts_at.astimezone(timezone.utc), ends_at.astimezone(timezone.utc)


def get_service_clock() -> ServiceClock:
    """FastAPI dependency returning a wall-clock ServiceClock."""
    return ServiceClock()
