"""Age computation and display formatting.

:class:`AgeCalculator` keeps a cached copy of the birthday so that a fast
display refresh loop never touches storage; the cache follows the store
through its change notifications until the calculator is closed.
"""

import calendar
import datetime
import logging
import weakref

from age_counter.store import DEFAULT_BIRTHDAY, BirthdayStore

logger: logging.Logger = logging.getLogger(__name__)

DAYS_PER_YEAR: float = 365.2425
SECONDS_PER_YEAR: float = DAYS_PER_YEAR * 24 * 60 * 60

UNSET_AGE: str = "00.000000"
UNSET_BREAKDOWN: str = "0y 0m 0d 0h 0m 0s"
UNSET_BIRTHDAY: str = "Birthday not set"

# Fixed English names; calendar.month_name follows the process locale.
_MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def _add_months(moment: datetime.datetime, months: int) -> datetime.datetime:
    years, month_index = divmod(moment.month - 1 + months, 12)
    year = moment.year + years
    month = month_index + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def calendar_difference(
    start: datetime.datetime, end: datetime.datetime
) -> tuple[int, int, int, int, int, int]:
    """Split ``end - start`` into calendar years, months, days, hours, minutes, seconds.

    Whole months are counted first, adding months to ``start`` with the day
    clamped to the target month's length; the remainder is split into
    fixed-length units and fractional seconds are dropped.  When ``end``
    precedes ``start`` every component is negative.

    Both arguments must be naive or both aware.
    """
    if end < start:
        years, months, days, hours, minutes, seconds = calendar_difference(end, start)
        return -years, -months, -days, -hours, -minutes, -seconds

    total_months = (end.year - start.year) * 12 + (end.month - start.month)
    anchor = _add_months(start, total_months)
    if anchor > end:
        total_months -= 1
        anchor = _add_months(start, total_months)

    years, months = divmod(total_months, 12)
    remainder = end - anchor
    hours, rest = divmod(remainder.seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return years, months, remainder.days, hours, minutes, seconds


def _local_now() -> datetime.datetime:
    return datetime.datetime.now()


class AgeCalculator:
    """Render the time elapsed since the stored birthday.

    Args:
        store: Store to read the birthday from and follow for changes.

    Use as a context manager, or call :meth:`close`, to release the store
    subscription when the calculator is discarded.
    """

    def __init__(self, store: BirthdayStore) -> None:
        self._store = store
        self._birthday: datetime.datetime = DEFAULT_BIRTHDAY
        self._is_set: bool = False
        self._refresh()

        # The store must not keep a discarded calculator alive.
        refresh = weakref.WeakMethod(self._refresh)

        def listener() -> None:
            method = refresh()
            if method is not None:
                method()

        subscription = store.subscribe(listener)
        self._subscription = subscription
        self._finalizer = weakref.finalize(self, subscription.dispose)

    def _refresh(self) -> None:
        birthday = self._store.get()
        self._is_set = birthday is not None
        self._birthday = birthday if birthday is not None else DEFAULT_BIRTHDAY
        logger.debug("Birthday cache refreshed (set=%s)", self._is_set)

    @property
    def birthday(self) -> datetime.datetime:
        return self._birthday

    @property
    def closed(self) -> bool:
        return self._subscription.disposed

    def close(self) -> None:
        self._finalizer()

    def __enter__(self) -> "AgeCalculator":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def has_been_set(self) -> bool:
        return self._is_set

    def compute_age_in_years(self, now: datetime.datetime | None = None) -> float:
        """Years elapsed since the birthday, using the mean Gregorian year.

        Both ``now`` and the birthday's local midnight are converted to
        absolute instants first, so daylight-saving shifts between them count
        as real elapsed time.  A naive ``now`` is read as local time.  The
        result is negative if ``now`` precedes the birthday.
        """
        now = now if now is not None else _local_now()
        elapsed = now.astimezone() - self._birthday.astimezone()
        return elapsed.total_seconds() / SECONDS_PER_YEAR

    def format_age(self, now: datetime.datetime | None = None) -> str:
        if not self._is_set:
            return UNSET_AGE
        return f"{self.compute_age_in_years(now):.6f}"

    def format_breakdown(self, now: datetime.datetime | None = None) -> str:
        if not self._is_set:
            return UNSET_BREAKDOWN
        now = now if now is not None else _local_now()
        if now.tzinfo is not None:
            now = now.astimezone().replace(tzinfo=None)
        years, months, days, hours, minutes, seconds = calendar_difference(self._birthday, now)
        return f"{years}y {months}m {days}d {hours}h {minutes}m {seconds}s"

    def format_birthday(self) -> str:
        if not self._is_set:
            return UNSET_BIRTHDAY
        b = self._birthday
        return f"Born: {_MONTH_NAMES[b.month - 1]} {b.day}, {b.year} at 00:00"
