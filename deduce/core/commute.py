"""
Commutation pruning.

Two rule applications that touch disjoint parts of a spec can run in
either order and reach the same goal. Exploring both orders only repeats
work, so each derivation is kept in one canonical order: rules earlier
in the rule list go first, and applications of the same rule are ordered
by the text of their footprint.

A candidate whose newest application could have been made before an
independent earlier one is out of order and gets dropped. Applications of
rules flagged commutes=False are barriers: nothing moves across them.
"""

from typing import Callable, Optional

from .config import SynConfig, print_log
from .goal import Goal, RuleApplication


def _rank(app: RuleApplication, order: dict):
    return (order[app.rule], sorted(map(repr, app.footprint)))


def out_of_order(history: tuple, rules: list) -> Optional[RuleApplication]:
    """
    Return the earlier application the newest one commutes with and
    should have preceded, or None if the history is in canonical order.
    """
    if len(history) < 2:
        return None

    order = {r.name: i for i, r in enumerate(rules)}
    commuting = {r.name for r in rules if r.commutes}

    new = history[-1]
    if new.rule not in commuting:
        return None

    # The newest application may only move left across applications it
    # is independent of, so the walk ends at the first shared footprint.
    for earlier in reversed(history[:-1]):
        if earlier.rule not in commuting or new.footprint & earlier.footprint:
            return None
        if _rank(new, order) < _rank(earlier, order):
            return earlier
    return None


def goal_out_of_order(goal: Goal, rules: list, config: SynConfig) -> bool:
    app = out_of_order(goal.history, rules)
    if app is None:
        return False
    print_log(config,
              f"Alternative {goal.last_application.pp()} commutes with earlier {app.pp()}",
              goal.depth, is_fail=True)
    return True


def commutation_filter(parent: Goal, rules: list, config: SynConfig) -> Callable:
    """Build the keep(sub) predicate used while expanding parent."""
    def keep(sub) -> bool:
        return not any(goal_out_of_order(g, rules, config) for g in sub.subgoals)
    return keep
