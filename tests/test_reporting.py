"""
Tests for reporters and candidate formatting.
"""

import json

import pytest

from Splitter.reporting import (
    CallbackReporter,
    CandidateCollector,
    CandidateFormatter,
    PrintingReporter,
)
from Splitter.search import Candidate, RegionSearch


@pytest.fixture
def candidates():
    return [
        Candidate(seed=0, cells=(0,), pip_sum=2),
        Candidate(seed=1, cells=(1, 2, 3), pip_sum=2),
        Candidate(seed=1, cells=(1,), pip_sum=1),
    ]


# ============================================================================
# Reporters
# ============================================================================

def test_collector_without_limit_never_stops(candidates):
    collector = CandidateCollector()
    for c in candidates:
        collector.report(c)
    assert collector.count == 3
    assert collector.candidates == candidates
    assert not collector.should_stop()


def test_collector_ignores_candidates_past_limit(candidates):
    collector = CandidateCollector(max_candidates=2)
    for c in candidates:
        collector.report(c)
    assert collector.count == 2
    assert collector.candidates == candidates[:2]
    assert collector.should_stop()


def test_negative_limit_is_rejected():
    with pytest.raises(ValueError):
        CandidateCollector(max_candidates=-1)


def test_collector_groups_by_total(candidates):
    collector = CandidateCollector()
    for c in candidates:
        collector.report(c)
    grouped = collector.by_total()
    assert sorted(grouped) == [1, 2]
    assert len(grouped[2]) == 2


def test_callback_reporter(candidates):
    seen = []
    reporter = CallbackReporter(seen.append, max_candidates=1)
    for c in candidates:
        reporter.report(c)
    assert seen == candidates[:1]


def test_printing_reporter(small_grid, candidates, capsys):
    reporter = PrintingReporter(small_grid)
    reporter.report(candidates[1])
    out = capsys.readouterr().out
    assert "Candidate #1:" in out
    assert "-I\nII" in out


# ============================================================================
# Text formatting
# ============================================================================

def test_format_bitmap(small_grid):
    assert CandidateFormatter.format_bitmap(small_grid, [((0,), 'I')]) == "I-\n--"


def test_format_bitmap_first_mark_wins(small_grid):
    marks = [((0, 1), 'A'), ((1, 2), 'B')]
    assert CandidateFormatter.format_bitmap(small_grid, marks) == "AA\nB-"


def test_format_candidate(small_grid, candidates):
    text = CandidateFormatter.format_candidate(small_grid, candidates[0])
    assert text.startswith("I-\n--")
    assert "(seed 0, 1 cells, pip sum 2)" in text


def test_format_summary(small_grid, candidates):
    text = CandidateFormatter.format_summary(small_grid, candidates)
    assert "SPLIT CANDIDATE REGIONS" in text
    assert "Found 3 candidate regions" in text
    assert "2 pips -> 2 regions" in text


# ============================================================================
# JSON output
# ============================================================================

def test_results_json_is_serialisable(small_grid):
    search = RegionSearch(small_grid)
    found = search.run()
    data = CandidateFormatter.format_results_json(small_grid, found, search.stats)

    assert set(data) == {'puzzle_info', 'search_stats', 'candidates'}
    assert data['puzzle_info']['layout'] == "21|1 "
    assert data['candidates'][0] == {'seed': 0, 'cells': [0], 'pip_sum': 2}
    assert set(data['search_stats']['per_seed']) == {"0", "1", "2", "3"}
    json.dumps(data)

    # Caller's stats are left untouched
    assert 0 in search.stats['per_seed']


def test_save_results(small_grid, candidates, tmp_path, capsys):
    path = tmp_path / "out.json"
    CandidateFormatter.save_results(small_grid, candidates, str(path))
    data = json.loads(path.read_text())
    assert len(data['candidates']) == 3
    assert "Results saved" in capsys.readouterr().out
