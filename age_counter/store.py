"""Birthday persistence with change notification.

A :class:`BirthdayStore` is constructed explicitly around a storage backend
and handed to whoever needs it.  Consumers call :meth:`BirthdayStore.subscribe`
to be told when the birthday changes and re-query the store for the new value;
the notification itself carries no payload.
"""

import datetime
import itertools
import logging
from typing import Callable

from age_counter.storage import KeyValueStorage, StorageError

logger: logging.Logger = logging.getLogger(__name__)

BIRTHDAY_KEY: str = "userBirthday"
HAS_LAUNCHED_BEFORE_KEY: str = "hasLaunchedBefore"

DEFAULT_BIRTHDAY: datetime.datetime = datetime.datetime(2000, 1, 1)

BirthdayListener = Callable[[], None]


class SubscriptionHandle:
    """Registration returned by :meth:`BirthdayStore.subscribe`.

    Call :meth:`dispose` (or leave a ``with`` block) to stop receiving
    notifications.  Disposing more than once is a no-op.
    """

    def __init__(self, store: "BirthdayStore", token: int) -> None:
        self._store = store
        self._token = token
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._store._unsubscribe(self._token)
        self._disposed = True

    def __enter__(self) -> "SubscriptionHandle":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


class BirthdayStore:
    """Single source of truth for the user's birthday.

    Args:
        storage: Backend holding the ``userBirthday`` and
            ``hasLaunchedBefore`` keys.
    """

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage
        self._listeners: dict[int, BirthdayListener] = {}
        self._tokens = itertools.count()

    def get(self) -> datetime.datetime | None:
        """Return the stored birthday at local midnight, or ``None`` if unset.

        Storage failures and unreadable values are logged and reported as
        unset so that the age display keeps working.
        """
        try:
            raw = self._storage.get(BIRTHDAY_KEY)
        except StorageError:
            logger.warning("Birthday storage unavailable; using default", exc_info=True)
            return None
        if raw is None:
            return None

        try:
            day = datetime.date.fromisoformat(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring unreadable stored birthday of type %s", type(raw).__name__)
            return None
        return datetime.datetime.combine(day, datetime.time.min)

    def set(self, date: datetime.date) -> None:
        """Store the calendar day of ``date`` and notify subscribers.

        An aware datetime is converted to local time before its day is taken;
        any time-of-day is discarded.

        Raises:
            TypeError: If ``date`` is not a ``datetime.date``.
            StorageError: If the value could not be written.
        """
        if isinstance(date, datetime.datetime):
            if date.tzinfo is not None:
                date = date.astimezone()
            day = date.date()
        elif isinstance(date, datetime.date):
            day = date
        else:
            raise TypeError("date must be a datetime.date or datetime.datetime.")

        self._storage.set(BIRTHDAY_KEY, day.isoformat())
        logger.info("Birthday updated")

        # Snapshot so listeners may unsubscribe while being notified.
        for listener in list(self._listeners.values()):
            listener()

    def get_or_default(self) -> datetime.datetime:
        birthday = self.get()
        return birthday if birthday is not None else DEFAULT_BIRTHDAY

    def has_been_set(self) -> bool:
        return self.get() is not None

    def is_first_launch(self) -> bool:
        """Return ``True`` on the very first call against this storage.

        The latch is recorded durably, so later calls return ``False`` even
        from a new store over the same storage.
        """
        if self._storage.get(HAS_LAUNCHED_BEFORE_KEY):
            return False
        self._storage.set(HAS_LAUNCHED_BEFORE_KEY, True)
        logger.info("First launch recorded")
        return True

    def subscribe(self, listener: BirthdayListener) -> SubscriptionHandle:
        """Call ``listener()`` after every :meth:`set`.

        Listeners are called in the order they subscribed.
        """
        token = next(self._tokens)
        self._listeners[token] = listener
        return SubscriptionHandle(self, token)

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def _unsubscribe(self, token: int) -> None:
        self._listeners.pop(token, None)
