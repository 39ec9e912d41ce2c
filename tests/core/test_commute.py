"""
Tests for commutation pruning.

Core invariants:
    - Independent applications are explored in exactly one order
    - Applications that share a footprint are never reordered
    - Non-commuting rules are barriers
"""

from hypothesis import given, assume
from hypothesis import strategies as st

from deduce.core.config import SynConfig
from deduce.core.commute import out_of_order, commutation_filter
from deduce.core.goal import Goal, RuleApplication
from deduce.core.rules import Rule, Subderivation


# ── Helpers ──────────────────────────────────────────────────────────────────

def noop(goal):
    return []


RULES = [Rule("A", noop), Rule("B", noop), Rule("C", noop, commutes=False)]


def app(rule, *footprint):
    return RuleApplication(rule, frozenset(footprint))


def goal_with(*history):
    g = Goal.root("root")
    for i, a in enumerate(history):
        g = g.spawn(f"g{i}", a)
    return g


# ── Unit tests ───────────────────────────────────────────────────────────────

class TestOutOfOrder:
    def test_short_history_is_canonical(self):
        assert out_of_order((), RULES) is None
        assert out_of_order((app("B", "x"),), RULES) is None

    def test_later_rule_first_is_out_of_order(self):
        earlier = app("B", "x")
        assert out_of_order((earlier, app("A", "y")), RULES) is earlier

    def test_earlier_rule_first_is_canonical(self):
        assert out_of_order((app("A", "x"), app("B", "y")), RULES) is None

    def test_dependent_applications_keep_their_order(self):
        assert out_of_order((app("B", "x"), app("A", "x")), RULES) is None

    def test_same_rule_ordered_by_footprint(self):
        first = app("A", "b")
        assert out_of_order((first, app("A", "a")), RULES) is first
        assert out_of_order((app("A", "a"), app("A", "b")), RULES) is None

    def test_non_commuting_rule_is_a_barrier(self):
        assert out_of_order((app("C", "x"), app("A", "y")), RULES) is None
        assert out_of_order((app("B", "x"), app("C", "y")), RULES) is None

    def test_walk_stops_at_first_dependency(self):
        history = (app("B", "y"), app("B", "x"), app("A", "x"))
        assert out_of_order(history, RULES) is None

    def test_walk_passes_independent_applications(self):
        target = app("B", "y")
        history = (target, app("A", "a"), app("A", "x"))
        assert out_of_order(history, RULES) is target


class TestCommutationFilter:
    def test_rejects_alternative_with_out_of_order_child(self):
        parent = goal_with(app("B", "x"))
        good = parent.spawn("good", app("B", "y"))
        bad = parent.spawn("bad", app("A", "y"))
        keep = commutation_filter(parent, RULES, SynConfig())
        assert keep(Subderivation((good,), None, "B"))
        assert not keep(Subderivation((bad,), None, "A"))
        assert not keep(Subderivation((good, bad), None, "A"))

    def test_leaf_alternatives_are_kept(self):
        keep = commutation_filter(goal_with(app("B", "x")), RULES, SynConfig())
        assert keep(Subderivation((), None, "Emp"))

    def test_pruning_is_traced(self, capsys):
        parent = goal_with(app("B", "x"))
        bad = parent.spawn("bad", app("A", "y"))
        config = SynConfig(print_derivations=True, print_failed=True)
        commutation_filter(parent, RULES, config)(Subderivation((bad,), None, "A"))
        assert "commutes with earlier B(x)" in capsys.readouterr().out


# ── Property-based tests ─────────────────────────────────────────────────────

footprints = st.frozensets(st.sampled_from("abcdefgh"), min_size=1, max_size=3)
commuting = st.sampled_from(["A", "B"])


class TestCommuteProperties:

    @given(commuting, footprints, commuting, footprints)
    def test_independent_pair_explored_once(self, r1, f1, r2, f2):
        assume(not f1 & f2)
        a1, a2 = RuleApplication(r1, f1), RuleApplication(r2, f2)
        pruned = [out_of_order((a1, a2), RULES) is not None,
                  out_of_order((a2, a1), RULES) is not None]
        assert pruned.count(True) == 1

    @given(commuting, footprints, commuting, footprints)
    def test_dependent_pair_never_pruned(self, r1, f1, r2, f2):
        assume(f1 & f2)
        a1, a2 = RuleApplication(r1, f1), RuleApplication(r2, f2)
        assert out_of_order((a1, a2), RULES) is None
        assert out_of_order((a2, a1), RULES) is None
