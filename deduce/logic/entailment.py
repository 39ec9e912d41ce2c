"""
Pure entailment backend using Z3.

Rules ask two questions about pure (heap-free) formulas:
    entails(pre, post)  -- does pre imply every literal of post?
    is_unsat(pure)      -- is pre contradictory?

Pure formulas are sets of literals (sign, pred, a, b) with pred one of
"eq", "lt", "le". Terms are encoded as Z3 integers; "null" is 0.

Answers are cached per formula pair. init() clears the cache, which the
driver does before each synthesis run.
"""

import z3

from .unification import is_variable, is_function


class PureEntailment:

    def __init__(self, timeout_ms: int = 1000):
        self.timeout_ms = timeout_ms
        self._cache = {}
        self.queries = 0

    def init(self):
        self._cache.clear()
        self.queries = 0

    # ── Encoding ─────────────────────────────────────────────────────────

    def encode_term(self, term):
        if is_variable(term):
            return z3.Int(term)
        if is_function(term):
            args = [self.encode_term(a) for a in term[1:]]
            if term[0] == "plus":
                return args[0] + args[1]
            if term[0] == "minus":
                return args[0] - args[1]
            raise ValueError(f"unsupported function symbol: {term[0]!r}")
        if term == "null":
            return z3.IntVal(0)
        if isinstance(term, int):
            return z3.IntVal(term)
        raise ValueError(f"unsupported term: {term!r}")

    def encode_literal(self, literal):
        sign, pred, a, b = literal
        lhs, rhs = self.encode_term(a), self.encode_term(b)
        if pred == "eq":
            atom = lhs == rhs
        elif pred == "lt":
            atom = lhs < rhs
        elif pred == "le":
            atom = lhs <= rhs
        else:
            raise ValueError(f"unsupported predicate: {pred!r}")
        return atom if sign else z3.Not(atom)

    # ── Queries ──────────────────────────────────────────────────────────

    def _check(self, constraints) -> bool:
        """True iff constraints are unsatisfiable."""
        solver = z3.Solver()
        solver.set("timeout", self.timeout_ms)
        for c in constraints:
            solver.add(c)
        self.queries += 1
        return solver.check() == z3.unsat

    def is_unsat(self, pure) -> bool:
        key = ("unsat", frozenset(pure))
        if key not in self._cache:
            self._cache[key] = self._check([self.encode_literal(l) for l in pure])
        return self._cache[key]

    def entails(self, pre, post) -> bool:
        """
        pre |= post, i.e. pre && !post is unsat. A timeout counts as
        "does not entail".
        """
        post = frozenset(post)
        if not post or post <= frozenset(pre):
            return True
        key = ("entails", frozenset(pre), post)
        if key not in self._cache:
            goal = z3.And(*[self.encode_literal(l) for l in post])
            constraints = [self.encode_literal(l) for l in pre] + [z3.Not(goal)]
            self._cache[key] = self._check(constraints)
        return self._cache[key]
