"""
Tests for the search loop.

Goals here are toy nodes of an explicit AND/OR graph, so every test can
say exactly which goals exist, which rule applies where, and what the
boundary should look like after each step.
"""

import json
import time
from dataclasses import dataclass

from deduce.core.config import SynConfig
from deduce.core.engine import search_step, synthesize
from deduce.core.env import Environment
from deduce.core.goal import Goal
from deduce.core.proof import extract_solution, found_solution
from deduce.core.rules import Subderivation, rule
from deduce.core.state import (
    SearchState, OPEN, SOLVED, FAILED, EXHAUSTED, TIMEOUT, STEP_LIMIT,
)
from deduce.core.stats import SynStats


# ── Helpers ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Node:
    label: str
    cost: int = 0
    is_unsolvable: bool = False

    @property
    def name(self):
        return self.label


def graph_rule(name, graph, costs=None, invertible=False):
    """
    A rule over an explicit graph: label -> list of alternatives, each a
    list of child labels. Solutions are nested tuples (label, *children).
    """
    costs = costs or {}

    def expand(goal):
        label = goal.spec.label
        alternatives = []
        for children in graph.get(label, []):
            subgoals = tuple(goal.spawn(Node(c, costs.get(c, 0))) for c in children)
            alternatives.append(
                Subderivation(subgoals, lambda sols, label=label: (label, *sols), name))
        return alternatives

    return rule(name, invertible=invertible)(expand)


def make_goal(rules, label="G0", cost=0, **config) -> Goal:
    env = Environment(rules=rules, config=SynConfig(**config))
    return Goal.root(Node(label, cost), env)


def boundary_names(state):
    return [g.name for g in state.boundary]


@rule("Seq")
def seq_rule(goal):
    if goal.spec.label != "G0":
        return []
    subgoals = (goal.spawn(Node("G1")), goal.spawn(Node("G2")))
    return [Subderivation(subgoals, lambda sols: ("sequence", *sols), "Seq")]


@rule("Empty")
def empty_rule(goal):
    if goal.spec.label not in ("G1", "G2"):
        return []
    return [Subderivation((), lambda sols: "empty", "Empty")]


# ── Unit tests ───────────────────────────────────────────────────────────────

class TestSequenceScenario:
    def test_boundary_evolution(self):
        state = SearchState.initial(make_goal([seq_rule, empty_rule]))
        assert boundary_names(state) == ["G0"]
        seen = []
        for _ in range(3):
            state = search_step(state)
            seen.append(boundary_names(state))
        assert seen == [["G1", "G2"], ["G2"], []]
        assert not state.halted
        state = search_step(state)
        assert state.halted and state.outcome == SOLVED

    def test_extraction(self):
        state = synthesize(make_goal([seq_rule, empty_rule]))
        assert found_solution(state)
        assert extract_solution(state.table, state.target) == ("sequence", "empty", "empty")

    def test_history_and_stats(self):
        state = synthesize(make_goal([seq_rule, empty_rule]))
        assert [h["action"] for h in state.history] == ["expanded"] * 3
        assert state.history[0]["produced"] == ["G1", "G2"]
        assert state.stats.steps == 3
        assert state.stats.goals == len(state.table) == 3
        assert state.stats.rule_apps == 3
        assert state.stats.max_boundary == 2

    def test_halted_state_is_left_alone(self):
        state = synthesize(make_goal([seq_rule, empty_rule]))
        step = state.step
        assert search_step(state).step == step


class TestBoundaryOrder:
    graph = {"G0": [["A"], ["B"]], "A": [["C"]]}
    costs = {"A": 5, "B": 1, "C": 0}

    def test_best_first_sorts_by_cost(self):
        r = graph_rule("R", self.graph, self.costs)
        state = search_step(SearchState.initial(make_goal([r])))
        assert boundary_names(state) == ["B", "A"]

    def test_best_first_ties_break_on_depth(self):
        r = graph_rule("R", {"G0": [["A", "B"]], "B": [["C"]]}, {"A": 1, "B": 0, "C": 1})
        state = SearchState.initial(make_goal([r]))
        state = search_step(search_step(state))
        assert boundary_names(state) == ["A", "C"]

    def test_depth_first_puts_new_goals_in_front(self):
        r = graph_rule("R", self.graph, self.costs)
        state = SearchState.initial(make_goal([r], depth_first=True))
        state = search_step(state)
        assert boundary_names(state) == ["A", "B"]
        state = search_step(state)
        assert boundary_names(state) == ["C", "B"]


class TestOutcomes:
    def test_failed_when_every_alternative_fails(self):
        r = graph_rule("R", {"G0": [["A"], ["B"]]})
        state = synthesize(make_goal([r]))
        assert state.outcome == FAILED
        assert state.table.is_unsolvable(state.target)
        assert state.stats.backtracks == 2

    def test_exhausted_on_cycle(self):
        r = graph_rule("R", {"G0": [["A"]], "A": [["G0"]]})
        state = synthesize(make_goal([r]))
        assert state.outcome == EXHAUSTED
        assert state.table[state.target].is_open

    def test_trivially_unsolvable_root_fails_without_rules(self):
        calls = []

        @rule("Spy")
        def spy(goal):
            calls.append(goal)
            return []

        env = Environment(rules=[spy])
        goal = Goal.root(Node("G0", is_unsolvable=True), env)
        state = synthesize(goal)
        assert state.outcome == FAILED
        assert calls == []
        assert state.history[0]["action"] == "unsolvable"

    def test_timeout_is_an_outcome(self):
        goal = make_goal([seq_rule, empty_rule], timeout=0.5)
        goal.env.config.start(now=time.monotonic() - 10)
        state = synthesize(goal)
        assert state.outcome == TIMEOUT
        assert state.step == 0
        assert state.halt_reason == "The derivation took too long: more than 0.5 seconds."

    def test_unstarted_clock_never_times_out(self):
        state = synthesize(make_goal([seq_rule, empty_rule], timeout=0))
        assert state.outcome == SOLVED

    def test_step_limit(self):
        @rule("Grow")
        def grow(goal):
            child = goal.spawn(Node(goal.spec.label + "'"))
            return [Subderivation((child,), lambda sols: sols[0], "Grow")]

        state = synthesize(make_goal([grow]), max_steps=5)
        assert state.outcome == STEP_LIMIT
        assert state.step == 5

    def test_step_limit_from_config(self):
        @rule("Grow")
        def grow(goal):
            return [Subderivation((goal.spawn(Node(goal.spec.label + "+")),),
                                  lambda sols: sols[0], "Grow")]

        state = synthesize(make_goal([grow], max_steps=3))
        assert state.outcome == STEP_LIMIT
        assert state.step == 3

    def test_state_is_open_before_running(self):
        state = SearchState.initial(make_goal([seq_rule]))
        assert state.outcome == OPEN and not state.solved


class TestInvertibleRules:
    def rules(self):
        first = graph_rule("First", {"G0": [["A"]], "A": [[]]}, invertible=True)
        second = graph_rule("Second", {"G0": [["B"]], "B": [[]]})
        return [first, second]

    def test_invertible_rule_ends_the_scan(self):
        state = search_step(SearchState.initial(make_goal(self.rules())))
        assert [e.rule for e in state.table.implications[state.target]] == ["First"]

    def test_invert_off_tries_every_rule(self):
        state = search_step(SearchState.initial(make_goal(self.rules(), invert=False)))
        assert [e.rule for e in state.table.implications[state.target]] == ["First", "Second"]


class TestSharing:
    def test_shared_subgoal_expanded_once(self):
        r = graph_rule("R", {"G0": [["A", "B"]], "A": [["C"]], "B": [["C"]], "C": [[]]})
        state = synthesize(make_goal([r]))
        assert state.outcome == SOLVED
        expanded = [h["goal"] for h in state.history if h["action"] == "expanded"]
        assert expanded.count("C") == 1
        assert extract_solution(state.table, state.target) == \
            ("G0", ("A", ("C",)), ("B", ("C",)))


class TestUselessGoals:
    costs = {"B": 0, "A": 1, "D": 2}

    def test_sibling_of_failed_goal_is_deferred(self):
        r = graph_rule("R", {"G0": [["A", "B"], ["D"]], "A": [[]], "D": [[]]}, self.costs)
        state = synthesize(make_goal([r]))
        assert state.outcome == SOLVED
        assert [h["action"] for h in state.history] == \
            ["expanded", "expanded", "deferred", "expanded"]
        assert [g.name for g in state.deferred] == ["A"]
        assert extract_solution(state.table, state.target) == ("G0", ("D",))

    def test_deferred_goal_revived_by_new_parent(self):
        r = graph_rule("R", {"G0": [["A", "B"], ["D"]], "A": [[]], "D": [["A"]]}, self.costs)
        state = synthesize(make_goal([r]))
        assert state.outcome == SOLVED
        assert state.history[3]["goal"] == "D"
        assert state.history[3]["produced"] == ["A"]
        assert state.deferred == []
        assert extract_solution(state.table, state.target) == ("G0", ("D", ("A",)))

    def test_deferred_goals_rechecked_only_after_live_edges(self):
        costs = {"B": 0, "A": 1, "D": 2, "E": 3}
        r = graph_rule("R", {"G0": [["A", "B"], ["D"], ["E"]], "E": [[]]}, costs)
        state = SearchState.initial(make_goal([r]))
        for _ in range(3):
            state = search_step(state)
        assert [g.name for g in state.deferred] == ["A"]

        checked = []
        refresh = state.table.refresh_useless
        state.table.refresh_useless = lambda g: checked.append(g.name) or refresh(g)

        state = search_step(state)
        assert state.history[-1]["goal"] == "D"
        assert checked == ["D"]

        checked.clear()
        state = search_step(state)
        assert state.history[-1]["goal"] == "E"
        assert checked == ["E", "A"]


class TestCheckpoint:
    def test_save_path_writes_json(self, tmp_path):
        path = tmp_path / "state.json"
        synthesize(make_goal([seq_rule, empty_rule]), save_path=str(path))
        data = json.loads(path.read_text())
        assert data["outcome"] == SOLVED
        assert data["goals"]["G0"] == "solved"
        assert data["config"]["commute"] is True

    def test_stats_object_is_reused(self):
        stats = SynStats()
        state = synthesize(make_goal([seq_rule, empty_rule]), stats=stats)
        assert state.stats is stats
        assert stats.steps == 3


class TestTracing:
    def test_trace_printed_when_enabled(self, capsys):
        synthesize(make_goal([seq_rule, empty_rule], print_derivations=True))
        out = capsys.readouterr().out
        assert "Goal to expand: G0" in out
        assert "Seq: SUCCESS" in out
        assert "Empty: FAIL" not in out

    def test_failed_rules_need_print_failed(self, capsys):
        synthesize(make_goal([seq_rule, empty_rule],
                             print_derivations=True, print_failed=True))
        assert "Empty: FAIL" in capsys.readouterr().out

    def test_silent_by_default(self, capsys):
        synthesize(make_goal([seq_rule, empty_rule]))
        assert capsys.readouterr().out == ""
