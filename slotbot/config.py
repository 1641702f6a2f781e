from __future__ import annotations

import os
import re
from dataclasses import dataclass, field

import pytz
from dotenv import load_dotenv

from slotbot.domain import FilterConfig, ListMode, NameFilter

DEFAULT_BASE_URL = "https://api.sporttia.com/v7/timetable"

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _parse_csv(raw: str) -> tuple[str, ...]:
    # Comma-separated list; blanks and duplicates are dropped, order kept.
    #   FACILITIES=Pista 1, Pista 2,Pista Cristal
    parts = [p.strip() for p in raw.split(",")]

    seen: set[str] = set()
    result: list[str] = []
    for p in parts:
        if not p or p in seen:
            continue
        seen.add(p)
        result.append(p)
    return tuple(result)


def _parse_start_times(raw: str) -> tuple[str, ...]:
    values = _parse_csv(raw)
    for v in values:
        if not _TIME_RE.match(v):
            raise RuntimeError(f"Invalid START_TIMES value: {v!r}. Expected HH:MM (24h).")
    return values


def _parse_mode(name: str, default: str = "allow") -> ListMode:
    raw = os.getenv(name, default).strip().lower()
    try:
        return ListMode(raw)
    except ValueError as e:
        raise RuntimeError(f"Invalid {name} value: {raw!r}. Expected 'allow' or 'deny'.") from e


def _parse_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"Invalid {name} value: {raw!r}. Expected an integer.") from e


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    facility_id: int
    facilities: NameFilter
    start_times: NameFilter

    email_user: str = ""
    email_password: str = field(default="", repr=False)
    email_from: str = ""
    email_to: str = ""

    base_url: str = DEFAULT_BASE_URL
    horizon_days: int = 8
    skip_weekends: bool = False
    timezone: str = "Europe/Madrid"
    request_timeout_seconds: float = 20.0

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587

    # Optional ranking table merged into the report
    ranking_url: str | None = None
    ranking_table_id: str = "ranking"

    # Where --dry-run writes the rendered email
    preview_path: str = "tmp.html"

    def filter_config(self, *, bypass: bool = False) -> FilterConfig:
        return FilterConfig(facilities=self.facilities, start_times=self.start_times, bypass=bypass)


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def load_settings(dotenv_path: str | None = None, *, dry_run: bool = False) -> Settings:
    # Prefer .env in repo root; dotenv_path allows overriding in tests.
    load_dotenv(dotenv_path=dotenv_path, override=False)

    # Dry-run never talks to the mail server, so credentials are optional there.
    if dry_run:
        email_user = os.getenv("EMAIL_USER", "")
        email_password = os.getenv("EMAIL_PASSWORD", "")
    else:
        email_user = _require("EMAIL_USER")
        email_password = _require("EMAIL_PASSWORD")

    horizon_days = _parse_int("HORIZON_DAYS", "8")
    if horizon_days < 1:
        raise RuntimeError("HORIZON_DAYS must be >= 1")

    raw_timeout = os.getenv("REQUEST_TIMEOUT_SECONDS", "20")
    try:
        request_timeout_seconds = float(raw_timeout)
    except ValueError as e:
        raise RuntimeError(f"Invalid REQUEST_TIMEOUT_SECONDS value: {raw_timeout!r}") from e
    if request_timeout_seconds <= 0:
        raise RuntimeError("REQUEST_TIMEOUT_SECONDS must be > 0")

    timezone = os.getenv("TIMEZONE", "Europe/Madrid")
    try:
        pytz.timezone(timezone)
    except pytz.UnknownTimeZoneError as e:
        raise RuntimeError(f"Invalid TIMEZONE value: {timezone!r}") from e

    facilities = NameFilter(
        names=_parse_csv(os.getenv("FACILITIES", "Pista 1,Pista 2,Pista Cristal")),
        mode=_parse_mode("FACILITIES_MODE"),
    )
    start_times = NameFilter(
        names=_parse_start_times(os.getenv("START_TIMES", "19:30,21:00")),
        mode=_parse_mode("START_TIMES_MODE"),
    )

    return Settings(
        facility_id=_parse_int("FACILITY_ID", "3418"),
        facilities=facilities,
        start_times=start_times,
        email_user=email_user,
        email_password=email_password,
        email_from=os.getenv("EMAIL_FROM") or email_user,
        email_to=os.getenv("EMAIL_TO") or email_user,
        base_url=os.getenv("SPORTTIA_BASE_URL", DEFAULT_BASE_URL),
        horizon_days=horizon_days,
        skip_weekends=_parse_bool(os.getenv("SKIP_WEEKENDS", "0")),
        timezone=timezone,
        request_timeout_seconds=request_timeout_seconds,
        smtp_host=os.getenv("SMTP_HOST", "smtp.gmail.com"),
        smtp_port=_parse_int("SMTP_PORT", "587"),
        ranking_url=os.getenv("RANKING_URL") or None,
        ranking_table_id=os.getenv("RANKING_TABLE_ID", "ranking"),
        preview_path=os.getenv("PREVIEW_PATH", "tmp.html"),
    )
