from __future__ import annotations

import logging
from html import escape

import httpx
from bs4 import BeautifulSoup, Tag

from slotbot.renderer import TABLE_OPEN

logger = logging.getLogger(__name__)

RANKING_FALLBACK = "<p>Ranking table not available.</p>"
MAX_COLUMNS = 4


def _own_rows(table: Tag) -> list[Tag]:
    # Rows of this table only, not of tables nested in its cells.
    rows: list[Tag] = []
    for child in table.find_all(["tr", "thead", "tbody", "tfoot"], recursive=False):
        if child.name == "tr":
            rows.append(child)
        else:
            rows.extend(child.find_all("tr", recursive=False))
    return rows


def extract_ranking_table(html: str, table_id: str) -> str:
    """Reduce the ranking table to its first four columns.

    Rows under <thead>, or made only of <th> cells, stay header rows. A page
    without the table yields RANKING_FALLBACK.
    """
    soup = BeautifulSoup(html, "html.parser")
    table = soup.find("table", id=table_id)
    if table is None:
        logger.warning("Ranking table id=%s not found", table_id)
        return RANKING_FALLBACK

    rows: list[str] = []
    for tr in _own_rows(table):
        cells = tr.find_all(["th", "td"], recursive=False)[:MAX_COLUMNS]
        if not cells:
            continue
        is_header = tr.find_parent("thead") is not None or all(c.name == "th" for c in cells)
        tag = "th" if is_header else "td"
        rows.append("<tr>" + "".join(f"<{tag}>{escape(c.get_text(strip=True))}</{tag}>" for c in cells) + "</tr>")

    if not rows:
        logger.warning("Ranking table id=%s has no rows", table_id)
        return RANKING_FALLBACK

    return TABLE_OPEN + "".join(rows) + "</table>"


async def fetch_ranking(client: httpx.AsyncClient, url: str, table_id: str) -> str:
    """Fetch and extract the ranking table; any failure yields RANKING_FALLBACK."""
    try:
        logger.info("Fetching ranking table: %s", url)
        r = await client.get(url)
        r.raise_for_status()
        return extract_ranking_table(r.text, table_id)
    except Exception as e:
        logger.error("Error fetching ranking table (%s: %s)", type(e).__name__, e)
        return RANKING_FALLBACK
