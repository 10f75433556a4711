import httpx
import pytest

from pytiers.ingest import (
    MatchupFetchError,
    MatchupParseError,
    fetch_matchup_page,
    load_ratingupdate_tables,
    parse_matchup_tables,
)


def _table_html(rows: list[tuple[str, list[str]]]) -> str:
    header = "".join(f"<th>{name}</th>" for name, _ in rows)
    body = "".join(
        f"<tr><th>{name}</th>" + "".join(f"<td><span>{cell}</span></td>" for cell in cells) + "</tr>"
        for name, cells in rows
    )
    return f'<div class="table-container"><table><tbody><tr><th></th>{header}</tr>{body}</tbody></table></div>'


_OVERALL = _table_html([("Sol", ["-", "55.2", "48.0%"]), ("Ky", ["44.8", "-", "51.5"]), ("May", ["52.0", "48.5", "-"])])
_UNLABELLED = _table_html([("Sol", ["-", "60.0"]), ("Ky", ["40.0", "-"])])
_HIGH_RATED = _table_html([("Sol", ["50.0", "47.5"]), ("Ky", ["52.5", "50.0"])])

SAMPLE_PAGE = (
    "<html><body>"
    "<h3>Overall</h3>\n"
    + _OVERALL
    + "\n"
    + _UNLABELLED
    + "\n<h3>High rated</h3>\n<p>Players above 1800</p>\n"
    + _HIGH_RATED
    + "</body></html>"
)


def test_parse_matchup_tables_reads_every_container():
    tables = parse_matchup_tables(SAMPLE_PAGE)

    assert len(tables) == 3
    overall = tables[0]
    assert overall.entities() == ("Ky", "May", "Sol")
    assert overall.matchups["Sol"]["Ky"] == pytest.approx(0.552)
    assert overall.matchups["Sol"]["May"] == pytest.approx(0.48)
    assert overall.matchups["May"]["Ky"] == pytest.approx(0.485)
    assert "Sol" not in overall.matchups["Sol"]


def test_labels_come_from_the_heading_before_each_table():
    tables = parse_matchup_tables(SAMPLE_PAGE)

    assert [table.name for table in tables] == ["Overall", None, "High rated"]


def test_diagonal_numbers_are_ignored():
    tables = parse_matchup_tables(SAMPLE_PAGE)

    assert tables[2].matchups == {
        "Sol": {"Ky": pytest.approx(0.475)},
        "Ky": {"Sol": pytest.approx(0.525)},
    }


def test_parse_rejects_non_numeric_cells():
    page = _table_html([("Sol", ["-", "n/a"]), ("Ky", ["50.0", "-"])])

    with pytest.raises(MatchupParseError):
        parse_matchup_tables(page)


def _raw_table_html(header: list[str], rows: list[str]) -> str:
    head = "".join(f"<th>{name}</th>" for name in header)
    return (
        '<div class="table-container"><table><tbody>'
        f"<tr><th></th>{head}</tr>" + "".join(rows) + "</tbody></table></div>"
    )


def test_parse_rejects_cell_without_win_rate():
    page = _raw_table_html(
        ["A", "B", "C"],
        [
            "<tr><th>A</th><td><span>-</span></td><td></td><td><span>60.0</span></td></tr>",
            "<tr><th>B</th><td><span>50.0</span></td><td><span>-</span></td><td><span>50.0</span></td></tr>",
            "<tr><th>C</th><td><span>40.0</span></td><td><span>50.0</span></td><td><span>-</span></td></tr>",
        ],
    )

    with pytest.raises(MatchupParseError):
        parse_matchup_tables(page)


def test_empty_diagonal_cell_keeps_columns_aligned():
    page = _raw_table_html(
        ["A", "B", "C"],
        [
            "<tr><th>A</th><td></td><td><span>55.0</span></td><td><span>60.0</span></td></tr>",
            "<tr><th>B</th><td><span>45.0</span></td><td></td><td><span>52.0</span></td></tr>",
            "<tr><th>C</th><td><span>40.0</span></td><td><span>48.0</span></td><td></td></tr>",
        ],
    )

    (table,) = parse_matchup_tables(page)

    assert table.matchups["A"] == {"B": pytest.approx(0.55), "C": pytest.approx(0.6)}
    assert table.matchups["B"] == {"A": pytest.approx(0.45), "C": pytest.approx(0.52)}
    assert table.matchups["C"] == {"A": pytest.approx(0.4), "B": pytest.approx(0.48)}


def test_parse_rejects_duplicate_entities():
    page = _table_html([("Sol", ["-", "50.0"]), ("Sol", ["50.0", "-"])])

    with pytest.raises(MatchupParseError):
        parse_matchup_tables(page)


def test_parse_page_without_tables():
    assert parse_matchup_tables("<html><body><h3>Nothing here</h3></body></html>") == []


def test_load_ratingupdate_tables_uses_client():
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text=SAMPLE_PAGE)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        tables = load_ratingupdate_tables("http://ratingupdate.test/matchups", client=client)

    assert seen == ["http://ratingupdate.test/matchups"]
    assert [table.name for table in tables] == ["Overall", None, "High rated"]


def test_fetch_raises_on_http_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="maintenance")

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(MatchupFetchError):
            fetch_matchup_page("http://ratingupdate.test/matchups", client=client)


def test_fetch_raises_on_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(MatchupFetchError):
            fetch_matchup_page("http://ratingupdate.test/matchups", client=client)
