"""
Domain: points-to heaps.

A small heap logic, just enough to drive the search engine end to end.

Terms follow logic/unification.py. Assertions have two parts:
    pure:  frozenset of literals (sign, pred, a, b), pred in eq / lt / le
           (True, "eq", "X", "Y")    ->  X = Y
           (False, "eq", "X", "Y")   ->  X != Y
    heap:  frozenset of heaplets ("pts", loc, offset, value)
           ("pts", "X", 0, "A")      ->  X :-> A
           ("pts", "X", 1, "B")      ->  (X + 1) :-> B

A goal spec is {pre} program-vars {post}. Variables of pre that are not
program variables are ghosts; variables that only occur in post are
existentials. Rules either remove matching heap from both sides, turn
pre into post one cell at a time, or instantiate existentials. A goal
that is exactly the spec of an auxiliary procedure in env.functions is
closed by calling it.

Rule footprints use the heaplets and literals a rule reads or writes,
plus ("var", V) tokens for variables whose role changes (a ghost
becoming a program variable, an existential getting bound).
"""

from dataclasses import dataclass
from itertools import permutations

from ..core.goal import RuleApplication
from ..core.rules import Subderivation, rule
from ..language import (
    FunSpec, Skip, Error, Load, Store, Free, Call, prepend, identity, constant,
)
from ..logic.unification import (
    is_variable, term_vars, tuple_vars,
    apply_sub_to_tuple, apply_sub_to_set, unify_terms, pp_term,
)


def pts(loc, value, offset: int = 0) -> tuple:
    return ("pts", loc, offset, value)


def eq(a, b) -> tuple:
    return (True, "eq", a, b)


def neq(a, b) -> tuple:
    return (False, "eq", a, b)


_PURE_OPS = {("eq", True): "=", ("eq", False): "!=",
             ("lt", True): "<", ("lt", False): ">=",
             ("le", True): "<=", ("le", False): ">"}


def pp_literal(lit) -> str:
    sign, pred, a, b = lit
    return f"{pp_term(a)} {_PURE_OPS[(pred, sign)]} {pp_term(b)}"


def pp_heaplet(h) -> str:
    _, loc, offset, value = h
    where = pp_term(loc) if offset == 0 else f"({pp_term(loc)} + {offset})"
    return f"{where} :-> {pp_term(value)}"


def _vars(items):
    return tuple_vars(items)


def _var_tokens(variables):
    return frozenset(("var", v) for v in variables)


@dataclass(frozen=True)
class Assertion:
    pure: frozenset = frozenset()
    heap: frozenset = frozenset()

    @classmethod
    def of(cls, *heaplets, pure=()):
        return cls(frozenset(pure), frozenset(heaplets))

    @property
    def vars(self) -> frozenset:
        return _vars(self.pure) | _vars(self.heap)

    def subst(self, sub: dict) -> "Assertion":
        return Assertion(apply_sub_to_set(sub, self.pure, skip=2),
                         apply_sub_to_set(sub, self.heap, skip=1))

    def at(self, loc, offset=None) -> list:
        return sorted((h for h in self.heap
                       if h[1] == loc and (offset is None or h[2] == offset)), key=repr)

    @property
    def name(self):
        pure = " && ".join(sorted(pp_literal(l) for l in self.pure))
        heap = " ** ".join(sorted(pp_heaplet(h) for h in self.heap)) or "emp"
        return f"{{{pure + ' ; ' if pure else ''}{heap}}}"


@dataclass(frozen=True)
class HeapSpec:
    pre: Assertion
    post: Assertion
    program_vars: frozenset = frozenset()

    @property
    def ghosts(self) -> frozenset:
        return self.pre.vars - self.program_vars

    @property
    def existentials(self) -> frozenset:
        return self.post.vars - self.pre.vars - self.program_vars

    @property
    def cost(self) -> int:
        return len(self.pre.heap) + len(self.post.heap) + len(self.existentials)

    @property
    def is_unsolvable(self) -> bool:
        """
        Nothing can close the goal: post requires X != X, or post needs a
        cell at a fixed location where pre has none (no rule allocates).
        Only decided when pre has no pure part, since Inconsistency closes
        any goal whose pre is contradictory.
        """
        if self.pre.pure:
            return False
        if any(not sign and a == b for sign, pred, a, b in self.post.pure if pred == "eq"):
            return True
        existentials = self.existentials
        for h in self.post.heap:
            if term_vars(h[1]) & existentials:
                continue
            if not self.pre.at(h[1], h[2]):
                return True
        return False

    @property
    def name(self):
        prog = ", ".join(sorted(self.program_vars))
        return f"{self.pre.name} [{prog}] {self.post.name}"

    def with_pre(self, pre: Assertion) -> "HeapSpec":
        return HeapSpec(pre, self.post, self.program_vars)

    def with_post(self, post: Assertion) -> "HeapSpec":
        return HeapSpec(self.pre, post, self.program_vars)


def make_heap_spec(fun_spec: FunSpec) -> HeapSpec:
    return HeapSpec(fun_spec.pre, fun_spec.post, frozenset(fun_spec.formal_names))


def _child(goal, name, spec, consumed=frozenset(), produced=frozenset()):
    return goal.spawn(spec, RuleApplication(name, frozenset(consumed), frozenset(produced)))


# ── Rules ────────────────────────────────────────────────────────────────────

@rule("Emp")
def emp_rule(goal):
    """Both heaps empty and the pure part follows: skip."""
    spec = goal.spec
    if spec.pre.heap or spec.post.heap or spec.existentials:
        return []
    if not goal.env.solver.entails(spec.pre.pure, spec.post.pure):
        return []
    return [Subderivation((), constant(Skip()), "Emp")]


@rule("Inconsistency", invertible=True)
def inconsistency_rule(goal):
    """The precondition is contradictory, so the code is unreachable."""
    if not goal.env.solver.is_unsat(goal.spec.pre.pure):
        return []
    return [Subderivation((), constant(Error()), "Inconsistency")]


def _primed(fun_spec: FunSpec):
    """Rename the variables of an auxiliary spec apart from the goal's."""
    names = fun_spec.pre.vars | fun_spec.post.vars | set(fun_spec.formal_names)
    sub = {v: v + "'" for v in names}
    formals = tuple(sub[f] for f in fun_spec.formal_names)
    return formals, fun_spec.pre.subst(sub), fun_spec.post.subst(sub)


def _match_heap(pattern, heap, bindable, sub):
    """Match each pattern heaplet with the single heaplet at the same cell."""
    if len(pattern) != len(heap):
        return None
    for p in sorted(pattern, key=repr):
        _, loc, offset, value = apply_sub_to_tuple(sub, p)
        cells = [h for h in heap if h[1] == loc and h[2] == offset]
        if len(cells) != 1:
            return None
        sub = unify_terms(value, cells[0][3], bindable, sub)
        if sub is None:
            return None
    return sub


@rule("Call")
def call_rule(goal):
    """The goal is exactly an auxiliary spec with program variables as arguments."""
    spec = goal.spec
    env = goal.env
    alternatives = []
    for name, fun_spec in sorted(env.functions.items()):
        formals, pre, post = _primed(fun_spec)
        ghosts = (pre.vars | post.vars) - set(formals)
        for args in permutations(sorted(spec.program_vars), len(formals)):
            sub = _match_heap(pre.heap, spec.pre.heap, ghosts, dict(zip(formals, args)))
            if sub is None or pre.vars - set(sub):
                continue
            if post.subst(sub) != spec.post:
                continue
            if not env.solver.entails(spec.pre.pure, pre.subst(sub).pure):
                continue
            alternatives.append(Subderivation((), constant(Call(name, args)), "Call"))
    return alternatives


@rule("PureSubst", invertible=True)
def pure_subst_rule(goal):
    """Post says Z = t for an existential Z: substitute t for Z."""
    spec = goal.spec
    existentials = spec.existentials
    for lit in sorted(spec.post.pure, key=repr):
        sign, pred, a, b = lit
        if not sign or pred != "eq":
            continue
        for var, term in ((a, b), (b, a)):
            if is_variable(var) and var in existentials and var not in term_vars(term):
                post = Assertion(spec.post.pure - {lit}, spec.post.heap).subst({var: term})
                child = _child(goal, "PureSubst", spec.with_post(post),
                               consumed={lit, ("var", var)}, produced={("var", var)})
                return [Subderivation((child,), identity, "PureSubst")]
    return []


@rule("Frame", invertible=True)
def frame_rule(goal):
    """
    Drop heaplets that pre and post share. A heaplet holding a ghost that
    post still mentions elsewhere stays: dropping it would lose the ghost.
    """
    spec = goal.spec
    existentials = spec.existentials
    common = []
    for h in spec.pre.heap & spec.post.heap:
        if term_vars(h[1]) & existentials or term_vars(h[3]) & existentials:
            continue
        rest = (spec.post.heap - {h}) | spec.post.pure
        if (_vars([h]) - spec.program_vars) & _vars(rest):
            continue
        common.append(h)
    if not common:
        return []
    common = frozenset(common)
    child = _child(goal, "Frame",
                   HeapSpec(Assertion(spec.pre.pure, spec.pre.heap - common),
                            Assertion(spec.post.pure, spec.post.heap - common),
                            spec.program_vars),
                   consumed=common)
    return [Subderivation((child,), identity, "Frame")]


@rule("Read", invertible=True)
def read_rule(goal):
    """let V = *(x + o) for a cell whose ghost value V is needed by post."""
    spec = goal.spec
    needed = spec.post.vars
    for h in sorted(spec.pre.heap, key=repr):
        _, loc, offset, value = h
        if not term_vars(loc) <= spec.program_vars:
            continue
        if is_variable(value) and value not in spec.program_vars and value in needed:
            child = _child(goal, "Read",
                           HeapSpec(spec.pre, spec.post, spec.program_vars | {value}),
                           consumed={h}, produced={("var", value)})
            return [Subderivation((child,), prepend(Load(value, loc, offset)), "Read")]
    return []


@rule("HeapUnify")
def heap_unify_rule(goal):
    """Instantiate existentials in a post cell against the pre cell at the same place."""
    spec = goal.spec
    existentials = spec.existentials
    alternatives = []
    for h in sorted(spec.post.heap, key=repr):
        _, loc, offset, value = h
        bound = term_vars(value) & existentials
        if not bound or term_vars(loc) & existentials:
            continue
        for source in spec.pre.at(loc, offset):
            sub = unify_terms(value, source[3], existentials)
            if sub is None:
                continue
            post = spec.post.subst(sub)
            produced = apply_sub_to_set(sub, {h})
            child = _child(goal, "HeapUnify", spec.with_post(post),
                           consumed={h, source} | _var_tokens(sub),
                           produced=produced | _var_tokens(sub))
            alternatives.append(Subderivation((child,), identity, "HeapUnify"))
    return alternatives


@rule("Write")
def write_rule(goal):
    """*(x + o) = e, when post wants e in a cell pre holds something else in."""
    spec = goal.spec
    alternatives = []
    for target in sorted(spec.post.heap, key=repr):
        _, loc, offset, value = target
        if not term_vars(loc) <= spec.program_vars or not term_vars(value) <= spec.program_vars:
            continue
        for h in spec.pre.at(loc, offset):
            if h[3] == value:
                continue
            written = pts(loc, value, offset)
            child = _child(goal, "Write",
                           spec.with_pre(Assertion(spec.pre.pure,
                                                   (spec.pre.heap - {h}) | {written})),
                           consumed={h} | _var_tokens(term_vars(value)),
                           produced={written})
            alternatives.append(
                Subderivation((child,), prepend(Store(loc, offset, value)), "Write"))
    return alternatives


@rule("Free")
def free_rule(goal):
    """free(x) when post keeps nothing at x."""
    spec = goal.spec
    alternatives = []
    locs = sorted({h[1] for h in spec.pre.heap}, key=repr)
    for loc in locs:
        if not (is_variable(loc) and loc in spec.program_vars):
            continue
        if spec.post.at(loc):
            continue
        block = frozenset(spec.pre.at(loc))
        child = _child(goal, "Free",
                       spec.with_pre(Assertion(spec.pre.pure, spec.pre.heap - block)),
                       consumed=block)
        alternatives.append(Subderivation((child,), prepend(Free(loc)), "Free"))
    return alternatives


HEAP_RULES = [
    emp_rule,
    inconsistency_rule,
    call_rule,
    pure_subst_rule,
    frame_rule,
    read_rule,
    heap_unify_rule,
    write_rule,
    free_rule,
]


# ── Examples ─────────────────────────────────────────────────────────────────

_LOC = "loc"
_XY = (("X", _LOC), ("Y", _LOC))

HEAP_EXAMPLES = {
    "swap": FunSpec(
        "swap", "void", _XY,
        Assertion.of(pts("X", "A"), pts("Y", "B")),
        Assertion.of(pts("X", "B"), pts("Y", "A")),
    ),
    "copy": FunSpec(
        "copy", "void", _XY,
        Assertion.of(pts("X", "A"), pts("Y", "B")),
        Assertion.of(pts("X", "A"), pts("Y", "A")),
    ),
    "write_const": FunSpec(
        "write_const", "void", (("X", _LOC),),
        Assertion.of(pts("X", "A")),
        Assertion.of(pts("X", 0)),
    ),
    "free_pair": FunSpec(
        "free_pair", "void", (("X", _LOC),),
        Assertion.of(pts("X", "A"), pts("X", "B", 1)),
        Assertion.of(),
    ),
    "pick": FunSpec(
        "pick", "void", (("X", _LOC),),
        Assertion.of(pts("X", "A")),
        Assertion.of(pts("X", "Z")),
    ),
    "pure_exists": FunSpec(
        "pure_exists", "void", (("X", _LOC),),
        Assertion.of(pts("X", "A")),
        Assertion.of(pts("X", "Z"), pure=[eq("Z", "A")]),
    ),
    "inconsistent": FunSpec(
        "inconsistent", "void", (("X", _LOC),),
        Assertion.of(pts("X", "A"), pure=[neq("X", "X")]),
        Assertion.of(pts("X", 1)),
    ),
    "unreachable": FunSpec(
        "unreachable", "void", _XY,
        Assertion.of(pts("X", "A")),
        Assertion.of(pts("Y", "A")),
    ),
}
