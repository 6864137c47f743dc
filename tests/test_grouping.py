"""Tests for grouping, ranking and distributions."""
from maintdash.grouping import (
    group_and_rank,
    group_fields,
    key_or_default,
    origin_distribution,
    priority_distribution,
    technician_hours,
)
from maintdash.models import StoppageEvent, StoppageOrigin, TaskTemplate


def _sector(r):
    return r["sector"]


def test_key_or_default():
    assert key_or_default("Press") == "Press"
    assert key_or_default("  Press ") == "Press"
    assert key_or_default("") == "Other"
    assert key_or_default("   ") == "Other"
    assert key_or_default(None, "Unassigned") == "Unassigned"


def test_top_n_keeps_largest_groups():
    """Test that 8 sectors with distinct counts cut to top 5 keep the 5 largest, descending."""
    counts = [10, 9, 8, 7, 6, 5, 4, 3]
    records = []
    for i, n in enumerate(counts):
        records += [{"sector": f"S{i}"}] * n
    ranked = group_and_rank(records, _sector, top_n=5)
    assert [r["name"] for r in ranked] == ["S0", "S1", "S2", "S3", "S4"]
    assert [r["value"] for r in ranked] == [10, 9, 8, 7, 6]


def test_grouping_conserves_total():
    records = [{"sector": s} for s in ["A", "B", "", None, "A", "C", "B", "A"]]
    ranked = group_and_rank(records, _sector)
    assert sum(r["value"] for r in ranked) == len(records)
    assert {"name": "Other", "value": 2} in ranked


def test_measure_sums():
    records = [{"sector": "A", "m": 10}, {"sector": "B", "m": 25}, {"sector": "A", "m": "5"}]
    ranked = group_and_rank(records, _sector, measure=lambda r: r["m"])
    assert ranked == [{"name": "B", "value": 25}, {"name": "A", "value": 15}]


def test_ties_keep_first_seen_order():
    records = [{"sector": s} for s in ["B", "A", "A", "B", "C"]]
    assert [r["name"] for r in group_and_rank(records, _sector)] == ["B", "A", "C"]


def test_custom_fallback_label():
    ranked = group_and_rank([{"sector": None}], _sector, fallback="Outros")
    assert ranked == [{"name": "Outros", "value": 1}]


def test_group_fields_ranks_by_total():
    rows = [("A", 1, 0), ("B", 1, 0), ("B", 0, 1), ("A", 0, 0), (None, 0, 1)]
    out = group_fields(rows, lambda r: r[0], {"open": lambda r: r[1], "closed": lambda r: r[2]}, top_n=2)
    assert out == [
        {"name": "B", "open": 1, "closed": 1, "total": 2},
        {"name": "A", "open": 1, "closed": 0, "total": 1},
    ]


def test_origin_distribution_counts_each_flag():
    stoppages = [
        StoppageEvent(id="1", origin=StoppageOrigin(electrical=True, mechanical=True)),
        StoppageEvent(id="2", origin=StoppageOrigin(mechanical=True)),
        StoppageEvent(id="3"),
    ]
    assert origin_distribution(stoppages) == [
        {"name": "Electrical", "value": 1},
        {"name": "Mechanical", "value": 2},
    ]


def test_priority_distribution():
    templates = [
        TaskTemplate(id="1", priority="low"),
        TaskTemplate(id="2", priority="critical"),
        TaskTemplate(id="3", priority="urgent!"),
        TaskTemplate(id="4"),
        TaskTemplate(id="5", priority="high", active=False),
    ]
    assert priority_distribution(templates) == [
        {"name": "critical", "value": 1},
        {"name": "low", "value": 3},
    ]


def test_technician_hours_skips_unidentified():
    records = [
        {"tech": "Ana", "m": 60},
        {"tech": "Ana", "m": 30},
        {"tech": "Bruno", "m": 200},
        {"tech": None, "m": 500},
        {"tech": "Carla", "m": None},
    ]
    rows = technician_hours(records, lambda r: r["tech"], lambda r: r["m"])
    assert rows == [
        {"name": "Bruno", "hours": 3.3, "count": 1, "avg_minutes": 200},
        {"name": "Ana", "hours": 1.5, "count": 2, "avg_minutes": 45},
        {"name": "Carla", "hours": 0.0, "count": 1, "avg_minutes": 0},
    ]
