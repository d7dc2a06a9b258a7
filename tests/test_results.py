"""Tests for rankings, division standings and score statistics."""

from archers_edge.models import Archer, Identity
from archers_edge.models.scorecard import Scorecard, Totals
from archers_edge.services.results import (
    aggregate_results,
    archer_performance,
    build_result_entry,
    filter_scores_for_archer,
    find_my_profile,
    split_archer_name,
    summarize_scores,
)


def stored(total: int, archer_id: str, division: str = "BV", status: str = "verified", **fields) -> Scorecard:
    """Scorecard record with stored totals and no ends."""
    return Scorecard(
        archer_id=archer_id,
        archer_name=fields.pop("archer_name", f"Archer {archer_id}"),
        division=division,
        status=status,
        totals=Totals(total_score=total, total_arrows=36 if total else 0),
        **fields,
    )


class TestAggregateResults:
    """Tests for aggregate_results."""

    def test_rankings_descending(self):
        """310, 250, 280 rank as 310, 280, 250."""
        scorecards = [stored(310, "a"), stored(250, "b"), stored(280, "c")]
        results = aggregate_results(scorecards, [])

        assert [e.total_score for e in results.rankings] == [310, 280, 250]
        assert [e.archer_id for e in results.rankings] == ["a", "c", "b"]

    def test_divisions_grouped_and_sorted(self):
        """Each division lists its entries best first."""
        scorecards = [
            stored(200, "a", "BV"),
            stored(290, "b", "GV"),
            stored(300, "c", "BV"),
        ]
        results = aggregate_results(scorecards, [])

        assert set(results.divisions) == {"BV", "GV"}
        assert [e.archer_id for e in results.divisions["BV"]] == ["c", "a"]
        assert [e.archer_id for e in results.divisions["GV"]] == ["b"]

    def test_ties_keep_input_order(self):
        """Equal scores stay in submission order."""
        scorecards = [stored(280, "first"), stored(280, "second")]
        results = aggregate_results(scorecards, [])

        assert [e.archer_id for e in results.rankings] == ["first", "second"]
        assert [e.archer_id for e in results.divisions["BV"]] == ["first", "second"]

    def test_missing_division_is_unknown(self):
        """Scorecards without a division land in Unknown."""
        scorecard = stored(100, "a")
        scorecard.division = None
        results = aggregate_results([scorecard], [])
        assert list(results.divisions) == ["Unknown"]

    def test_empty(self):
        """No scorecards, no results."""
        results = aggregate_results([], [])
        assert results.rankings == []
        assert results.divisions == {}

    def test_recompute_is_identical(self):
        """Aggregating twice gives the same result."""
        scorecards = [stored(310, "a"), stored(250, "b", "GV")]
        assert aggregate_results(scorecards, []) == aggregate_results(scorecards, [])

    def test_computed_totals_when_not_stored(self, make_scorecard):
        """Records without stored totals are totalled from their ends."""
        results = aggregate_results([make_scorecard(150, "a"), make_scorecard(200, "b")], [])
        assert [e.total_score for e in results.rankings] == [200, 150]


class TestResultEntry:
    """Tests for result entry enrichment."""

    def test_profile_names_win(self):
        """A matching profile supplies names and school."""
        profile = Archer(id="a", first_name="Ann", last_name="Lee", school="WDV")
        entry = build_result_entry(stored(300, "a", school="BHS"), {"a": profile})

        assert (entry.first_name, entry.last_name, entry.school) == ("Ann", "Lee", "WDV")

    def test_name_split_without_profile(self):
        """Without a profile the archer name is split."""
        entry = build_result_entry(stored(300, "x", archer_name="Mary Jo Smith", school="BHS"), {})

        assert entry.first_name == "Mary"
        assert entry.last_name == "Jo Smith"
        assert entry.school == "BHS"

    def test_split_name_edge_cases(self):
        """Empty names split to empty parts."""
        assert split_archer_name("") == ("", "")
        assert split_archer_name("Cher") == ("Cher", "")

    def test_progress_fields(self):
        """completedEnds is score // 30 and average is over 36 arrows."""
        entry = build_result_entry(stored(290, "a"), {})

        assert entry.completed_ends == 9
        assert entry.average == "8.1"
        assert entry.status == "verified"

    def test_display_status(self):
        """Unverified cards are in_progress with points, else not_started."""
        assert build_result_entry(stored(50, "a", status="in_progress"), {}).status == "in_progress"
        assert build_result_entry(stored(0, "a", status="in_progress"), {}).status == "not_started"

    def test_entry_serializes_camel_case(self):
        """Entries use the display field names."""
        data = build_result_entry(stored(300, "a"), {}).model_dump(by_alias=True)
        assert {"totalScore", "completedEnds", "firstName"} <= set(data)


class TestSummarizeScores:
    """Tests for competition statistics."""

    def test_summary(self):
        """Totals, extremes and a two-decimal average."""
        stats = summarize_scores([stored(310, "a"), stored(280, "b"), stored(251, "c")], "c1")

        assert stats.competition_id == "c1"
        assert stats.total_archers == 3
        assert stats.total_score == 841
        assert stats.average_score == 280.33
        assert stats.max_score == 310
        assert stats.min_score == 251
        assert stats.has_scores is True

    def test_empty_is_all_zero(self):
        """No scores gives zeros and hasScores False."""
        stats = summarize_scores([], "c1")
        assert stats.model_dump(by_alias=True) == {
            "competitionId": "c1",
            "totalArchers": 0,
            "totalScore": 0,
            "averageScore": 0,
            "maxScore": 0,
            "minScore": 0,
            "hasScores": False,
        }


class TestScoreHistory:
    """Tests for per-archer history helpers."""

    def test_filter_scores_for_archer(self):
        """Only the archer's own rounds are kept."""
        scorecards = [stored(300, "a"), stored(200, "b"), stored(250, "a")]
        assert [sc.totals.total_score for sc in filter_scores_for_archer(scorecards, "a")] == [300, 250]

    def test_find_my_profile_priority(self):
        """Identity beats isMe, which beats email."""
        profiles = [
            Archer(id="p1", email="one@example.com"),
            Archer(id="p2", is_me=True),
            Archer(id="p3", email="Three@Example.com"),
        ]

        assert find_my_profile(profiles, identity=Identity(profile_id="p3")).id == "p3"
        assert find_my_profile(profiles).id == "p2"
        assert find_my_profile(profiles[::2], email="three@example.com").id == "p3"
        assert find_my_profile(profiles[::2]).id == "p1"
        assert find_my_profile([]) is None

    def test_archer_performance(self):
        """Per-arrow average, best round and consistency."""
        performance = archer_performance([stored(288, "a"), stored(300, "a")])

        assert performance.total_rounds == 2
        assert performance.best_score == 300
        assert performance.total_arrows == 72
        assert performance.average_score == "8.2"
        assert performance.consistency == "6.0"

    def test_archer_performance_empty(self):
        """No rounds gives the zero shape."""
        performance = archer_performance([])
        assert performance.total_rounds == 0
        assert performance.average_score == "0.0"
