"""age_counter — live age display driven by a persisted birthday.

Public API
----------
BirthdayStore
    Holds the birthday in a key/value storage backend and notifies
    subscribers whenever it changes.
AgeCalculator
    Caches the birthday and renders the decimal age, the calendar breakdown
    and the birthday line.
JsonFileStorage, MemoryStorage
    Storage backends accepted by ``BirthdayStore``.

Example
-------
>>> import datetime
>>> from age_counter import AgeCalculator, BirthdayStore, MemoryStorage
>>> store = BirthdayStore(MemoryStorage())
>>> store.set(datetime.date(2000, 1, 1))
>>> with AgeCalculator(store) as calculator:
...     print(calculator.format_birthday())
Born: January 1, 2000 at 00:00
"""

from age_counter.calculator import AgeCalculator
from age_counter.storage import JsonFileStorage, KeyValueStorage, MemoryStorage, StorageError
from age_counter.store import BirthdayStore, SubscriptionHandle

__all__: list[str] = [
    "AgeCalculator",
    "BirthdayStore",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "StorageError",
    "SubscriptionHandle",
]
