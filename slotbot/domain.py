from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

FREE_MARK = "FREE"

RawDayResponse = dict[str, Any]
# date -> start label -> facility names
SlotMatrix = dict[dt.date, dict[str, set[str]]]


class ListMode(str, Enum):
    """How a configured name list is applied.

    ALLOW: only listed names pass. DENY: listed names are rejected.
    """

    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class NameFilter:
    names: tuple[str, ...]
    mode: ListMode = ListMode.ALLOW

    def admits(self, name: str) -> bool:
        listed = name in self.names
        return listed if self.mode is ListMode.ALLOW else not listed


@dataclass(frozen=True)
class FilterConfig:
    facilities: NameFilter
    start_times: NameFilter
    # Dry-run: show everything that is FREE regardless of both lists.
    bypass: bool = False


@dataclass(frozen=True, order=True)
class FreeSlot:
    """A FREE piece that survived filtering.

    start/end are 12-hour display strings ("07:30 PM"); date is the local
    calendar date of the start instant.
    """

    date: dt.date
    start: str
    end: str
    facility: str


@dataclass(frozen=True)
class FetchOutcome:
    date: dt.date
    ok: bool
    error: str | None = None


@dataclass
class FetchReport:
    responses: dict[dt.date, RawDayResponse] = field(default_factory=dict)
    outcomes: list[FetchOutcome] = field(default_factory=list)

    @property
    def failed_dates(self) -> list[dt.date]:
        return sorted(o.date for o in self.outcomes if not o.ok)


@dataclass(frozen=True)
class EmailMessage:
    sender: str
    recipient: str
    subject: str
    html_body: str


class PayloadError(ValueError):
    """Timetable payload doesn't have the shape we expect."""


class DeliveryError(RuntimeError):
    """Email could not be handed over to the mail server."""
