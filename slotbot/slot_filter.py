from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Mapping

from slotbot.domain import FREE_MARK, FilterConfig, FreeSlot, PayloadError, RawDayResponse

logger = logging.getLogger(__name__)


def parse_instant(raw: Any, tz: dt.tzinfo) -> dt.datetime:
    """Parse an API instant into local wall-clock time.

    Offset-aware instants are converted to ``tz``; naive ones are taken as
    already local.
    """
    if not isinstance(raw, str) or not raw:
        raise PayloadError(f"Invalid instant: {raw!r}")
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        value = dt.datetime.fromisoformat(text)
    except ValueError as e:
        raise PayloadError(f"Invalid instant: {raw!r}") from e
    if value.tzinfo is not None:
        value = value.astimezone(tz)
    return value


def display_time(value: dt.datetime) -> str:
    # 12h, zero-padded hour: "07:30 PM"
    return value.strftime("%I:%M %p")


def _day_columns(date: dt.date, payload: RawDayResponse) -> list[Mapping[str, Any]]:
    one = payload.get("one")
    columns = one.get("columns") if isinstance(one, dict) else None
    if not isinstance(columns, list):
        logger.warning("No timetable columns for %s, skipping day", date.isoformat())
        return []
    return columns


def extract_free_slots(
    responses: Mapping[dt.date, RawDayResponse],
    config: FilterConfig,
    tz: dt.tzinfo,
) -> list[FreeSlot]:
    """Pull the FREE pieces that pass both name lists out of raw day payloads.

    Dates are walked in ascending order; columns and pieces keep payload order.
    Raises PayloadError when a column or piece is missing required fields.
    """
    slots: list[FreeSlot] = []

    for date in sorted(responses):
        for column in _day_columns(date, responses[date]):
            try:
                facility_name = column["facility"]["name"]
                pieces = column["pieces"]
            except (KeyError, TypeError) as e:
                raise PayloadError(f"Malformed column on {date.isoformat()}: missing {e}") from e

            if not isinstance(facility_name, str):
                raise PayloadError(f"Malformed column on {date.isoformat()}: facility name {facility_name!r}")

            if not config.bypass and not config.facilities.admits(facility_name):
                continue

            for piece in pieces:
                try:
                    mark = piece["mark"]
                    ini = piece["ini"]
                    end = piece["end"]
                except (KeyError, TypeError) as e:
                    raise PayloadError(f"Malformed piece on {date.isoformat()}: missing {e}") from e

                if mark != FREE_MARK:
                    continue

                start_at = parse_instant(ini, tz)
                if not config.bypass and not config.start_times.admits(start_at.strftime("%H:%M")):
                    continue

                slots.append(
                    FreeSlot(
                        date=start_at.date(),
                        start=display_time(start_at),
                        end=display_time(parse_instant(end, tz)),
                        facility=facility_name,
                    )
                )

    logger.info("Free slots after filtering: %d (bypass=%s)", len(slots), config.bypass)
    return slots
