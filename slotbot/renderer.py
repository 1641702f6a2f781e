"""HTML for the availability email."""

from __future__ import annotations

import datetime as dt
from html import escape
from typing import Iterable, Sequence

from slotbot.domain import ListMode, NameFilter, SlotMatrix

NO_SLOTS_NOTICE = "<p><strong>No slots found matching your criteria.</strong></p>"
TABLE_OPEN = '<table border="1" cellpadding="5" style="border-collapse: collapse; width: 100%;">'


def long_date(value: dt.date) -> str:
    # "Monday, October 19, 2026"; avoids platform-specific %-d
    return f"{value:%A, %B} {value.day}, {value.year}"


def time_sort_key(label: str) -> int:
    """Minutes since midnight for a "07:30 PM" label; unknown labels sort first."""
    try:
        parsed = dt.datetime.strptime(label.strip(), "%I:%M %p")
    except ValueError:
        return -1
    return parsed.hour * 60 + parsed.minute


def table_columns(facilities: NameFilter, matrix: SlotMatrix) -> list[str]:
    """Facility columns in display order.

    Allow mode: the configured names in configured order. Facilities present in
    the data but not configured (dry-run, or deny mode) follow, sorted by name.
    """
    columns: list[str] = list(facilities.names) if facilities.mode is ListMode.ALLOW else []
    present = {name for by_time in matrix.values() for names in by_time.values() for name in names}
    columns.extend(sorted(present - set(columns)))
    return columns


def _day_table(by_time: dict, columns: Sequence[str]) -> str:
    parts = [TABLE_OPEN, "<tr>"]
    parts.extend(f"<th>{escape(c)}</th>" for c in columns)
    parts.append("</tr>")

    for label in sorted(by_time, key=lambda t: (time_sort_key(t), t)):
        occupied = by_time[label]
        parts.append("<tr>")
        for c in columns:
            parts.append(f"<td>{escape(label)}</td>" if c in occupied else "<td></td>")
        parts.append("</tr>")

    parts.append("</table><br>")
    return "".join(parts)


def render_report(
    matrix: SlotMatrix,
    columns: Sequence[str],
    *,
    ranking_html: str | None = None,
    failed_dates: Iterable[dt.date] = (),
) -> str:
    """Render the slot matrix, one section per date, oldest first.

    An empty matrix renders NO_SLOTS_NOTICE and no table. The ranking
    fragment, when given, is always appended as its own section.
    """
    html = ""

    if not any(matrix.values()):
        html += NO_SLOTS_NOTICE
    else:
        for day in sorted(matrix):
            if not matrix[day]:
                continue
            html += f"<h3>{escape(long_date(day))}</h3>"
            html += _day_table(matrix[day], columns)

    failed = sorted(failed_dates)
    if failed:
        listed = ", ".join(d.isoformat() for d in failed)
        html += f"<p><em>Could not fetch availability for: {listed}</em></p>"

    if ranking_html is not None:
        html += f"<h3>Ranking</h3>{ranking_html}"

    return html


def render_error(error: Exception) -> str:
    return f"<p>Error parsing API response: {escape(str(error))}</p>"


def build_subject(slot_count: int) -> str:
    return f"{slot_count} free slots available"


def build_email_body(content: str, *, fetched_at: dt.datetime, base_url: str, facility_id: int) -> str:
    return (
        "<h2>Court Availability Report</h2>"
        f"<p><strong>Fetch Time:</strong> {fetched_at.isoformat()}</p>"
        f"<p><strong>API Source:</strong> {escape(base_url)} (Facility ID: {facility_id})</p>"
        "<h3>Data:</h3>"
        f'<div style="background-color: #f4f4f4; padding: 15px; border-radius: 5px; overflow: auto;">{content}</div>'
    )
