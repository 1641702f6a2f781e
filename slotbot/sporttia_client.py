from __future__ import annotations

import asyncio
import datetime as dt
import logging
from typing import Iterable

import httpx

from slotbot.domain import FetchOutcome, FetchReport, RawDayResponse

logger = logging.getLogger(__name__)


def build_timetable_params(facility_id: int, day: dt.date) -> dict[str, str]:
    return {
        "idSC": str(facility_id),
        "date": day.isoformat(),
        "weekly": "false",
    }


async def fetch_day(client: httpx.AsyncClient, *, base_url: str, facility_id: int, day: dt.date) -> RawDayResponse:
    """Fetch one day of the timetable. Raises on any transport/status/body problem."""
    params = build_timetable_params(facility_id, day)
    logger.info("Fetching timetable for %s: %s", day.isoformat(), base_url)

    r = await client.get(base_url, params=params)
    r.raise_for_status()
    data = r.json()
    if not isinstance(data, dict):
        raise ValueError(f"Unexpected timetable body type: {type(data).__name__}")
    return data


async def fetch_window(
    client: httpx.AsyncClient,
    window: Iterable[dt.date],
    *,
    facility_id: int,
    base_url: str,
) -> FetchReport:
    """Fetch every date concurrently and wait for all of them to settle.

    A failing date is recorded in ``outcomes`` and left out of ``responses``;
    it never cancels or fails the others.
    """
    report = FetchReport()

    async def _one(day: dt.date) -> None:
        try:
            data = await fetch_day(client, base_url=base_url, facility_id=facility_id, day=day)
        except Exception as e:
            # Best-effort: one bad day shouldn't cost us the rest of the week.
            logger.error("Error fetching data for %s (%s: %s)", day.isoformat(), type(e).__name__, e)
            report.outcomes.append(FetchOutcome(date=day, ok=False, error=f"{type(e).__name__}: {e}"))
            return
        report.responses[day] = data
        report.outcomes.append(FetchOutcome(date=day, ok=True))

    await asyncio.gather(*[_one(day) for day in window])

    report.outcomes.sort(key=lambda o: o.date)
    logger.info(
        "Timetable fetch: requested=%d ok=%d failed=%d",
        len(report.outcomes),
        len(report.responses),
        len(report.failed_dates),
    )
    return report
