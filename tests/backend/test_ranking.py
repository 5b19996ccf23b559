"""
Tests for candidate ranking and deduplication.
"""

from healing_records.core.models import Healing, HealingResult, Locator, Selector
from healing_records.services.ranking import best_results, group_by_selector, rank_healings


def make_selector(uid="sel1", class_name="LoginTest", method_name="testLogin", locator="#login"):
    return Selector(uid=uid, class_name=class_name, method_name=method_name, locator=Locator(locator))


def make_healing(uid, selector, *candidates):
    results = [
        HealingResult(id=index, healing_id=uid, locator=Locator(value), score=score)
        for index, (value, score) in enumerate(candidates, start=1)
    ]
    return Healing(uid=uid, selector=selector, page_content="<html/>", results=results)


class TestBestResults:
    """Tests for best-per-locator selection."""

    def test_highest_scored_duplicate_survives(self):
        """Stable sort by descending score before dedupe lets the higher duplicate win."""
        healing = make_healing("h1", make_selector(), ("#a", 0.9), ("#a", 0.95), ("#b", 0.5))

        retained = best_results([healing])

        assert [(r.locator.value, r.score) for r in retained] == [("#a", 0.95), ("#b", 0.5)]

    def test_equal_scores_keep_encounter_order(self):
        """Ties are broken by encounter order and the first one wins."""
        healing = make_healing("h1", make_selector(), ("#a", 0.7), ("#b", 0.7), ("#a", 0.7))

        retained = best_results([healing])

        assert [r.locator.value for r in retained] == ["#a", "#b"]
        assert retained[0].id == 1

    def test_pool_spans_all_healings_of_a_selector(self):
        selector = make_selector()
        first = make_healing("h1", selector, ("#a", 0.4), ("#b", 0.6))
        second = make_healing("h2", selector, ("#a", 0.8), ("#c", 0.1))

        retained = best_results([first, second])

        assert [(r.locator.value, r.score) for r in retained] == [("#a", 0.8), ("#b", 0.6), ("#c", 0.1)]

    def test_superseded_results_are_ignored(self):
        healing = make_healing("h1", make_selector(), ("#a", 0.9), ("#b", 0.5))
        healing.results[0].superseded = True

        assert [r.locator.value for r in best_results([healing])] == ["#b"]

    def test_input_is_not_mutated(self):
        healing = make_healing("h1", make_selector(), ("#b", 0.1), ("#a", 0.9))

        best_results([healing])

        assert [r.locator.value for r in healing.results] == ["#b", "#a"]


class TestRankHealings:
    """Tests for the per-selector read view."""

    def test_one_view_per_selector(self):
        login = make_selector("sel1", "LoginTest", "testLogin", "#login")
        search = make_selector("sel2", "SearchTest", "testSearch", "#search")
        healings = [
            make_healing("h1", login, ("#a", 0.9)),
            make_healing("h2", search, ("#s", 0.3)),
            make_healing("h3", login, ("#a", 0.2), ("#b", 0.5)),
        ]

        views = rank_healings(healings)

        assert [view.class_name for view in views] == ["LoginTest", "SearchTest"]
        login_view = views[0]
        assert login_view.method_name == "testLogin"
        assert login_view.locator == "#login"
        assert [(r.locator, r.score) for r in login_view.results] == [("#a", 0.9), ("#b", 0.5)]

    def test_results_ordered_by_descending_score(self):
        selector = make_selector()
        views = rank_healings([make_healing("h1", selector, ("#c", 0.1), ("#a", 0.9), ("#b", 0.5))])

        scores = [r.score for r in views[0].results]
        assert scores == sorted(scores, reverse=True)

    def test_empty_input(self):
        assert rank_healings([]) == []

    def test_group_by_selector_keeps_first_seen_order(self):
        first = make_selector("sel1")
        second = make_selector("sel2", class_name="Other")
        healings = [make_healing("h1", second), make_healing("h2", first), make_healing("h3", second)]

        groups = group_by_selector(healings)

        assert list(groups) == [second, first]
        assert [h.uid for h in groups[second]] == ["h1", "h3"]
