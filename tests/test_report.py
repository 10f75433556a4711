import pytest

from pytiers.models import SolveResult, SolveStatus
from pytiers.report import ReportError, export_tierlist_csv, format_tierlist, rank_entities


def _results() -> list[SolveResult]:
    return [
        SolveResult(
            name="Overall",
            iterations=12,
            grand_multiplier=1.5,
            scores={"Alpha": 0.25, "Be": -0.5},
        ),
        SolveResult(
            name=None,
            iterations=5000,
            grand_multiplier=0.75,
            scores={"Be": 0.125, "Gamma": 0.3},
            status=SolveStatus.EXHAUSTED,
        ),
    ]


def test_rank_entities_follows_selected_table():
    results = _results()

    assert rank_entities(results, 0) == ["Alpha", "Be", "Gamma"]
    assert rank_entities(results, 1) == ["Gamma", "Be", "Alpha"]


@pytest.mark.parametrize("sort_by", [-1, 2])
def test_rank_entities_out_of_range(sort_by):
    with pytest.raises(ReportError):
        rank_entities(_results(), sort_by)


def test_rank_entities_empty_batch():
    with pytest.raises(ReportError):
        rank_entities([], 0)


def test_format_tierlist_layout():
    lines = format_tierlist(_results(), 0).splitlines()

    assert "       Overall       " in lines
    assert "Iters:      12   5000" in lines
    assert "Grand mults: 1.5000 0.7500" in lines
    rankings = lines[lines.index("Rankings:") + 1:]
    assert rankings == [
        "Alpha   0.2500      -",
        "Be     -0.5000 0.1250",
        "Gamma        - 0.3000",
    ]


def test_format_tierlist_lists_collapsed_tables():
    results = _results() + [
        SolveResult(
            name="Broken",
            iterations=1,
            grand_multiplier=1.0,
            scores={"Alpha": 0.0},
            status=SolveStatus.COLLAPSED,
        )
    ]

    report = format_tierlist(results, 0)

    assert "Collapsed: Broken" in report


def test_export_tierlist_csv():
    rows = export_tierlist_csv(_results(), 0).splitlines()

    assert rows == [
        "entity,Overall,table_1",
        "Alpha,0.25,",
        "Be,-0.5,0.125",
        "Gamma,,0.3",
    ]
