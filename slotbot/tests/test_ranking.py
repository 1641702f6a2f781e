from __future__ import annotations

import asyncio

import httpx

from slotbot.ranking import RANKING_FALLBACK, extract_ranking_table, fetch_ranking

_PAGE = """
<html><body>
<table id="other"><tr><td>ignore me</td></tr></table>
<table id="ranking">
  <thead><tr><td>Pos</td><td>Player</td><td>Pts</td><td>Played</td><td>Won</td><td>Lost</td></tr></thead>
  <tbody>
    <tr><td>1</td><td> Ana </td><td>30</td><td>10</td><td>9</td><td>1</td></tr>
    <tr><th>2</th><th>Luis</th><th>27</th><th>10</th><th>8</th></tr>
  </tbody>
</table>
</body></html>
"""


def test_table_is_cut_to_four_columns_with_headers_kept() -> None:
    html = extract_ranking_table(_PAGE, "ranking")

    assert "<tr><th>Pos</th><th>Player</th><th>Pts</th><th>Played</th></tr>" in html
    assert "<tr><td>1</td><td>Ana</td><td>30</td><td>10</td></tr>" in html
    assert "<tr><th>2</th><th>Luis</th><th>27</th><th>10</th></tr>" in html
    assert "Won" not in html
    assert "ignore me" not in html


def test_missing_table_yields_fallback() -> None:
    assert extract_ranking_table("<html><body><p>maintenance</p></body></html>", "ranking") == RANKING_FALLBACK


def test_fetch_ranking_falls_back_on_http_error() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(503, text="down"))

    async def _run() -> str:
        async with httpx.AsyncClient(transport=transport) as client:
            return await fetch_ranking(client, "https://ranking.example/league", "ranking")

    assert asyncio.run(_run()) == RANKING_FALLBACK


def test_fetch_ranking_extracts_table() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text=_PAGE))

    async def _run() -> str:
        async with httpx.AsyncClient(transport=transport) as client:
            return await fetch_ranking(client, "https://ranking.example/league", "ranking")

    assert "<td>Ana</td>" in asyncio.run(_run())


def test_rows_of_nested_tables_are_ignored() -> None:
    page = (
        '<table id="ranking">'
        "<thead><tr><th>Pos</th><th>Player</th></tr></thead>"
        "<tbody><tr><td>1</td><td>Ana<table><tr><td>inner</td></tr></table></td></tr></tbody>"
        "<tr><td>2</td><td>Luis</td></tr>"
        "</table>"
    )
    html = extract_ranking_table(page, "ranking")

    assert html.count("<tr>") == 3
    assert "<tr><td>inner</td></tr>" not in html
    assert html.index("Pos") < html.index("<td>1</td>") < html.index("Luis")
