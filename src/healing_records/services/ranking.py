"""
Ranking of healing candidates for the read-side selector view.

Every function here is pure: it reads the given healings and returns new
view objects without touching storage.
"""

from typing import Dict, Iterable, List

from ..core.models import Healing, HealingResult, HealingView, RankedResult, Selector


def group_by_selector(healings: Iterable[Healing]) -> Dict[Selector, List[Healing]]:
    """Group healings by selector, keeping first-seen order of groups and members."""
    groups: Dict[Selector, List[Healing]] = {}
    for healing in healings:
        groups.setdefault(healing.selector, []).append(healing)
    return groups


def best_results(healings: Iterable[Healing]) -> List[HealingResult]:
    """Return the best-scored result per distinct locator value.

    Results of all healings are pooled and stably sorted by descending score,
    so equal scores keep their encounter order. The first result seen for a
    locator value wins and later duplicates are dropped.
    """
    pool = [result for healing in healings for result in healing.active_results]
    ranked = sorted(pool, key=lambda result: result.score, reverse=True)

    seen = set()
    retained = []
    for result in ranked:
        if result.locator.value in seen:
            continue
        seen.add(result.locator.value)
        retained.append(result)
    return retained


def rank_healings(healings: Iterable[Healing]) -> List[HealingView]:
    """Build one ranked view per selector.

    Args:
        healings: Healing records, possibly spanning several selectors

    Returns:
        List[HealingView]: One view per selector, ordered by class name,
        method name and locator
    """
    views = []
    for selector, group in group_by_selector(healings).items():
        views.append(HealingView(
            class_name=selector.class_name,
            method_name=selector.method_name,
            locator=selector.locator.value,
            results=tuple(
                RankedResult(locator=result.locator.value, score=result.score)
                for result in best_results(group)
            )
        ))
    return sorted(views, key=lambda view: (view.class_name, view.method_name, view.locator))
