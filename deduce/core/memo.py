"""
The AND/OR memo table.

Goals are OR-nodes: any one of their implications is enough. Each
implication is an AND-edge: all of its subgoals must be solved. Goals are
keyed by structural identity, so a subgoal reached along two derivations
is one entry whose status every parent sees.

Status per goal:
    Solved:      some implication has every subgoal solved. Permanent.
    Unsolvable:  the goal was expanded and every implication has an
                 unsolvable subgoal (vacuously, if nothing applied).
                 Permanent.
    Useless:     no live edge leads from the goal up to the target. An
                 edge is live when none of its subgoals is unsolvable and
                 its origin is not solved yet. Can flip back when a new
                 live edge shows up.

Entries are never removed. Status changes are pushed upward with an
explicit worklist until nothing else flips.
"""

from collections import deque
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import SynthesisError, syn_assert
from .goal import Goal


@dataclass
class GoalInfo:
    is_solved: bool = False
    is_unsolvable: bool = False
    is_useless: bool = False

    @property
    def is_open(self):
        return not (self.is_solved or self.is_unsolvable)


@dataclass(eq=False)
class GoalsImplication:
    """An accepted Subderivation, attached to the goal it expands."""
    subgoals: tuple
    kont: Callable
    goal: Goal
    rule: str = ""

    def pp(self):
        goals = ", ".join(g.name for g in self.subgoals) or "-"
        return f"{self.goal.name} <== {self.rule} [{goals}]"


class GoalTable:
    """Status of every goal seen so far, plus the edges between them."""

    def __init__(self, target: Goal):
        self.target = target
        self.infos = {}
        self.implications = {}  # goal -> edges expanding it
        self.parents = {}       # goal -> edges it is a subgoal of
        self.solved_by = {}     # goal -> edge that first closed it
        self.expanded = set()
        self.live_edges = 0     # edges recorded with no unsolvable subgoal
        self.add(target)
        # The root starts fully open, even if trivially unsolvable; the
        # scheduler settles that when it first looks at it.
        self.infos[target].is_unsolvable = False

    def __contains__(self, goal):
        return goal in self.infos

    def __getitem__(self, goal) -> GoalInfo:
        return self.infos[goal]

    def __len__(self):
        return len(self.infos)

    def __iter__(self):
        return iter(self.infos)

    def add(self, goal: Goal) -> bool:
        """Register goal. Returns False if a structurally equal goal is known."""
        if goal in self.infos:
            return False
        self.infos[goal] = GoalInfo(is_unsolvable=goal.unsolvable)
        self.implications[goal] = []
        self.parents[goal] = []
        return True

    def is_solved(self, goal) -> bool:
        return self.infos[goal].is_solved

    def is_unsolvable(self, goal) -> bool:
        return self.infos[goal].is_unsolvable

    def is_useless(self, goal) -> bool:
        return self.infos[goal].is_useless

    def solution_edge(self, goal) -> Optional[GoalsImplication]:
        return self.solved_by.get(goal)

    # ── Recording ────────────────────────────────────────────────────────

    def record(self, goal: Goal, subderivations) -> list:
        """
        Store the alternatives found for goal and settle every status they
        affect. Returns the subgoals that were not in the table before, in
        the order they were first seen.
        """
        syn_assert(goal in self.infos, f"recording edges for unknown goal {goal.name}")
        new_goals = []
        for sub in subderivations:
            subgoals = tuple(sub.subgoals)
            for subgoal in subgoals:
                if self.add(subgoal):
                    new_goals.append(subgoal)
            edge = GoalsImplication(subgoals, sub.kont, goal, sub.rule)
            self.implications[goal].append(edge)
            for subgoal in set(subgoals):
                self.parents[subgoal].append(edge)

            if not self._has_unsolvable(edge):
                self.live_edges += 1
                for subgoal in subgoals:
                    self.infos[subgoal].is_useless = False

        self.expanded.add(goal)
        self._propagate([goal] + new_goals)
        return new_goals

    def mark_unsolvable(self, goal: Goal):
        """Settle a goal that can never be closed, then tell its parents."""
        info = self.infos[goal]
        if info.is_unsolvable:
            return
        self._set_unsolvable(goal)
        self._propagate(edge.goal for edge in self.parents[goal])

    # ── Propagation ──────────────────────────────────────────────────────

    def _has_unsolvable(self, edge) -> bool:
        return any(self.infos[g].is_unsolvable for g in edge.subgoals)

    def _check_solved(self, goal) -> bool:
        if self.infos[goal].is_solved:
            return False
        for edge in self.implications[goal]:
            if all(self.infos[g].is_solved for g in edge.subgoals):
                self._set_solved(goal, edge)
                return True
        return False

    def _check_unsolvable(self, goal) -> bool:
        info = self.infos[goal]
        if info.is_unsolvable or info.is_solved or goal not in self.expanded:
            return False
        if all(self._has_unsolvable(edge) for edge in self.implications[goal]):
            self._set_unsolvable(goal)
            return True
        return False

    def _propagate(self, seeds):
        work = deque(seeds)
        while work:
            goal = work.popleft()
            if self._check_solved(goal) or self._check_unsolvable(goal):
                for edge in self.parents[goal]:
                    work.append(edge.goal)

    def _set_solved(self, goal, edge):
        info = self.infos[goal]
        if info.is_unsolvable:
            raise SynthesisError(f"goal {goal.name} is both solved and unsolvable")
        info.is_solved = True
        info.is_useless = False
        self.solved_by[goal] = edge

    def _set_unsolvable(self, goal):
        info = self.infos[goal]
        if info.is_solved:
            raise SynthesisError(f"goal {goal.name} is both solved and unsolvable")
        info.is_unsolvable = True

    # ── Usefulness ───────────────────────────────────────────────────────

    def _live(self, edge) -> bool:
        return not self.infos[edge.goal].is_solved and not self._has_unsolvable(edge)

    def refresh_useless(self, goal: Goal) -> bool:
        """
        Recompute and store whether goal is useless: True unless some chain
        of live edges connects it to the target.
        """
        seen = {goal}
        work = deque([goal])
        useful = False
        while work:
            g = work.popleft()
            if g == self.target:
                useful = True
                break
            for edge in self.parents[g]:
                if edge.goal not in seen and self._live(edge):
                    seen.add(edge.goal)
                    work.append(edge.goal)
        self.infos[goal].is_useless = not useful
        return not useful

    # ── Reporting ────────────────────────────────────────────────────────

    def counts(self) -> dict:
        solved = sum(1 for i in self.infos.values() if i.is_solved)
        unsolvable = sum(1 for i in self.infos.values() if i.is_unsolvable)
        return {
            "goals": len(self.infos),
            "solved": solved,
            "unsolvable": unsolvable,
            "open": len(self.infos) - solved - unsolvable,
            "implications": sum(len(v) for v in self.implications.values()),
        }
