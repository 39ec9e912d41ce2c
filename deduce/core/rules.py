"""
The rule contract.

A rule is a plain function from a goal to a list of Subderivations,
wrapped with a name and two flags. An empty list means "not applicable"
and is never an error. Rules must be pure and must terminate.

    @rule("Emp", invertible=True)
    def emp(goal):
        if goal.spec.is_trivial:
            return [Subderivation((), lambda sols: "skip")]
        return []

The search loop knows nothing about what the rules mean: it only calls
them, reads the flags, and stores what they return.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from .config import SynConfig, print_log


@dataclass(frozen=True)
class Subderivation:
    """
    One way to resolve a goal: prove every subgoal, then feed their
    solutions (one per subgoal, in order) to kont.

    No subgoals means the goal is solved right now by kont([]).
    """
    subgoals: tuple
    kont: Callable
    rule: str = ""

    def pp(self):
        if not self.subgoals:
            return f"{self.rule or 'solved'}: done"
        goals = ", ".join(g.name for g in self.subgoals)
        return f"{self.rule}: [{goals}]"


@dataclass(frozen=True, eq=False)
class Rule:
    name: str
    expand: Callable
    invertible: bool = False
    commutes: bool = True

    def __call__(self, goal) -> list:
        return list(self.expand(goal))

    def __repr__(self):
        return f"Rule({self.name})"

    def __str__(self):
        return self.name


def rule(name: Optional[str] = None, invertible: bool = False, commutes: bool = True):
    """Decorator turning goal -> list[Subderivation] into a Rule."""
    def wrap(fn):
        return Rule(name or fn.__name__, fn, invertible, commutes)
    return wrap


def apply_rules(
    rules: list,
    goal,
    config: SynConfig,
    stats=None,
    keep: Optional[Callable] = None,
) -> list:
    """
    Try every rule on goal, in order, and collect the alternatives.

    Args:
        rules:  rules in priority order
        goal:   the goal to expand
        config: invert decides whether an invertible rule ends the scan
        stats:  bump_rule_apps() per rule that produced something
        keep:   keep(sub) -> bool, applied to each rule's results before
                deciding whether the rule applied. Default: keep everything.

    Returns the concatenation of all accepted Subderivations.
    """
    children = []
    for r in rules:
        candidates = r(goal)
        if keep is not None:
            candidates = [sub for sub in candidates if keep(sub)]

        if not candidates:
            print_log(config, f"{r.name}: FAIL", goal.depth, is_fail=True)
            continue

        alts = ", ".join(sub.pp() for sub in candidates)
        print_log(config, f"{r.name}: SUCCESS, {len(candidates)} alternative(s): {alts}",
                  goal.depth)
        if stats is not None:
            stats.bump_rule_apps()
        children.extend(candidates)

        if config.invert and r.invertible:
            break
    return children
