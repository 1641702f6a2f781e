from __future__ import annotations

import asyncio
import datetime as dt
import logging
from dataclasses import dataclass, field

import httpx
import pytz

from slotbot.aggregator import aggregate
from slotbot.config import Settings
from slotbot.date_window import query_window
from slotbot.dispatcher import dispatch
from slotbot.domain import EmailMessage, FetchReport, PayloadError
from slotbot.email_sender import EmailSender, SmtpEmailSender
from slotbot.ranking import fetch_ranking
from slotbot.renderer import build_email_body, build_subject, render_error, render_report, table_columns
from slotbot.slot_filter import extract_free_slots
from slotbot.sporttia_client import fetch_window

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    window: list[dt.date]
    report: FetchReport
    slot_count: int
    message: EmailMessage
    message_id: str | None = None
    errors: list[str] = field(default_factory=list)


def build_sender(settings: Settings) -> SmtpEmailSender:
    return SmtpEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.email_user,
        password=settings.email_password,
    )


async def _collect(
    settings: Settings,
    window: list[dt.date],
    transport: httpx.AsyncBaseTransport | None,
) -> tuple[FetchReport, str | None]:
    async with httpx.AsyncClient(timeout=settings.request_timeout_seconds, transport=transport) as client:
        slots_task = fetch_window(
            client,
            window,
            facility_id=settings.facility_id,
            base_url=settings.base_url,
        )
        if not settings.ranking_url:
            return await slots_task, None

        return tuple(
            await asyncio.gather(
                slots_task,
                fetch_ranking(client, settings.ranking_url, settings.ranking_table_id),
            )
        )


def _build_content(settings: Settings, report: FetchReport, ranking_html: str | None, *, bypass: bool) -> tuple[str, int]:
    try:
        slots = extract_free_slots(
            report.responses,
            settings.filter_config(bypass=bypass),
            pytz.timezone(settings.timezone),
        )
        matrix, total = aggregate(slots)
        columns = table_columns(settings.facilities, matrix)
        html = render_report(matrix, columns, ranking_html=ranking_html, failed_dates=report.failed_dates)
        return html, total
    except (PayloadError, KeyError, TypeError, ValueError) as e:
        logger.error("Error parsing API response (%s: %s)", type(e).__name__, e)
        html = render_error(e)
        if ranking_html is not None:
            html += f"<h3>Ranking</h3>{ranking_html}"
        return html, 0


def run_check_once(
    settings: Settings,
    *,
    dry_run: bool = False,
    sender: EmailSender | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    today: dt.date | None = None,
) -> RunResult:
    """Fetch, filter, render and deliver one availability report.

    Dry-run bypasses both name lists and writes the email to
    ``settings.preview_path`` instead of sending it. Fetch, parse and delivery
    failures are logged and reflected in the report; exactly one dispatch is
    attempted per run.
    """
    window = query_window(settings.horizon_days, skip_weekends=settings.skip_weekends, today=today)
    logger.info(
        "Checking %d day(s) for facility %s (dry_run=%s)",
        len(window),
        settings.facility_id,
        dry_run,
    )

    report, ranking_html = asyncio.run(_collect(settings, window, transport))

    content, slot_count = _build_content(settings, report, ranking_html, bypass=dry_run)

    message = EmailMessage(
        sender=settings.email_from,
        recipient=settings.email_to,
        subject=build_subject(slot_count),
        html_body=build_email_body(
            content,
            fetched_at=dt.datetime.now(dt.timezone.utc),
            base_url=settings.base_url,
            facility_id=settings.facility_id,
        ),
    )
    logger.info("Slots: total=%d failed_days=%d", slot_count, len(report.failed_dates))

    message_id = dispatch(
        message,
        sender=sender or build_sender(settings),
        preview=dry_run,
        preview_path=settings.preview_path,
    )

    return RunResult(
        window=window,
        report=report,
        slot_count=slot_count,
        message=message,
        message_id=message_id,
        errors=[o.error for o in report.outcomes if o.error],
    )
