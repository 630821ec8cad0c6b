"""Entry point for the age counter terminal display.

Run with:
    python main.py

The script configures logging, opens the birthday store, asks for a birthdate
on first launch (or whenever none is stored), and then refreshes the decimal
age and the calendar breakdown on a fixed interval until interrupted.

    python main.py --set-birthday 1990-05-15   # save and exit
    python main.py --ticks 1                   # print a single reading
"""

import argparse
import datetime
import json
import logging
import sys
import time

from age_counter import AgeCalculator, BirthdayStore, JsonFileStorage
from age_counter.config import settings

logger: logging.Logger = logging.getLogger(__name__)

_RESERVED_RECORD_KEYS: frozenset[str] = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Merge any extra fields passed via logger.info(..., extra={...})
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _configure_logging(log_format: str) -> None:
    """Configure logging output.

    ``json`` gives one structured object per line; anything else falls back
    to human-readable plaintext.
    """
    if log_format == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
        logging.basicConfig(level=logging.INFO, handlers=[handler], force=True)
    else:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )


def _parse_birthdate(raw: str, today: datetime.date) -> datetime.date:
    """Validate a YYYY-MM-DD birthdate that is not after ``today``.

    Raises:
        ValueError: If ``raw`` is not an ISO calendar date or lies in the future.
    """
    try:
        birthdate = datetime.date.fromisoformat(raw)
    except ValueError as exc:
        raise ValueError(
            f"'{raw}' is not a valid date. Please use the format YYYY-MM-DD (e.g. 1990-05-15)."
        ) from exc
    if birthdate > today:
        raise ValueError(f"'{raw}' is in the future. A birthday cannot be after {today.isoformat()}.")
    return birthdate


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"'{raw}' is not a whole number.") from exc
    if value <= 0:
        raise argparse.ArgumentTypeError(f"'{raw}' must be greater than zero.")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Show your age as a live decimal value.")
    parser.add_argument(
        "--set-birthday",
        metavar="YYYY-MM-DD",
        help="Save this birthday and exit.",
    )
    parser.add_argument(
        "--ticks",
        type=_positive_int,
        default=None,
        help="Stop after this many refreshes (default: run until interrupted).",
    )
    parser.add_argument(
        "--interval-ms",
        type=_positive_int,
        default=None,
        help="Refresh period in milliseconds (default: AGE_COUNTER_REFRESH_MS).",
    )
    return parser


def _prompt_birthday(store: BirthdayStore) -> None:
    """Ask for a birthdate and save it.

    Exits with code 1 on invalid input, or when the prompt is cancelled with
    Ctrl-C or a closed stdin.
    """
    try:
        raw = input("Please enter your birthdate (YYYY-MM-DD, e.g. 1990-05-15): ").strip()
    except (EOFError, KeyboardInterrupt):
        print()
        print("Error: no birthdate entered.")
        sys.exit(1)
    try:
        birthdate = _parse_birthdate(raw, datetime.date.today())
    except ValueError as exc:
        print(f"Error: {exc}")
        sys.exit(1)
    store.set(birthdate)


def _display(calculator: AgeCalculator, ticks: int | None, interval_s: float) -> None:
    shown = 0
    while ticks is None or shown < ticks:
        now = datetime.datetime.now()
        print(f"{calculator.format_age(now)}  ({calculator.format_breakdown(now)})", flush=True)
        shown += 1
        if ticks is None or shown < ticks:
            time.sleep(interval_s)


def run(argv: list[str] | None = None) -> None:
    """Configure logging, open the store, and run the display loop.

    Exits with code 1 when a supplied birthdate is invalid so that callers
    (shell scripts, launch agents, etc.) can detect failure cleanly.  Bad
    ``--ticks`` / ``--interval-ms`` values are rejected by argparse before
    anything is read or written.
    """
    args = _build_parser().parse_args(argv)
    _configure_logging(settings.log_format)

    store = BirthdayStore(JsonFileStorage(settings.store_path))

    if args.set_birthday is not None:
        try:
            birthdate = _parse_birthdate(args.set_birthday.strip(), datetime.date.today())
        except ValueError as exc:
            print(f"Error: {exc}")
            sys.exit(1)
        store.set(birthdate)
        print(f"Birthday saved: {birthdate.isoformat()}")
        return

    interval_ms = args.interval_ms if args.interval_ms is not None else settings.refresh_interval_ms

    with AgeCalculator(store) as calculator:
        # Listeners run in subscription order, so the calculator has refreshed by now.
        with store.subscribe(lambda: print(calculator.format_birthday())):
            first_launch = store.is_first_launch()
            if first_launch or not store.has_been_set():
                print("Welcome to the Age Counter!")
                _prompt_birthday(store)
            else:
                print(calculator.format_birthday())

            logger.info(
                "display_started",
                extra={"first_launch": first_launch, "interval_ms": interval_ms, "ticks": args.ticks},
            )
            try:
                _display(calculator, args.ticks, interval_ms / 1000)
            except KeyboardInterrupt:
                print()


if __name__ == "__main__":
    run()
